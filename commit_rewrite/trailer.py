"""
Commit message trailer codec.

A trailer block is the last paragraph of a message when every line in it is a
`Key: Value` line (lines starting with whitespace continue the previous
value). The subject paragraph is never a trailer block. The rewrite-group id
lives in the `X-Commit-Rewrite-ID` trailer; when a message carries several,
the first one wins.
"""

from collections import namedtuple

from .config import TRAILER_KEY, TRAILER_LINE_RE
from .validation import validate_rewrite_id

Trailer = namedtuple("Trailer", ["key", "value", "text"])


def _is_reserved(key):
    return key.lower() == TRAILER_KEY.lower()


def _parse_block(lines):
    trailers = []
    for line in lines:
        if line[:1] in (" ", "\t"):
            if not trailers:
                return None
            prev = trailers[-1]
            trailers[-1] = Trailer(
                prev.key, f"{prev.value} {line.strip()}", f"{prev.text}\n{line}"
            )
            continue
        m = TRAILER_LINE_RE.match(line)
        if not m:
            return None
        trailers.append(Trailer(m.group("key"), m.group("value"), line.rstrip()))
    return trailers


def split_trailers(message):
    """
    Split a message into its body and trailing trailer block.

    Returns:
        Tuple of (body, list_of_trailers); the list is empty when the message
        has no trailer block, in which case body is the whole message.
    """
    lines = (message or "").rstrip().splitlines()
    start = len(lines)
    while start > 0 and lines[start - 1].strip():
        start -= 1
    if start == 0 or start == len(lines):
        return "\n".join(lines), []

    trailers = _parse_block(lines[start:])
    if trailers is None:
        return "\n".join(lines), []
    return "\n".join(lines[:start]).rstrip(), trailers


def parse_trailers(message):
    """Return the (key, value) pairs of the message's trailer block."""
    _, trailers = split_trailers(message)
    return [(t.key, t.value) for t in trailers]


def decode(message):
    """Return the rewrite-group id recorded in `message`, or None."""
    for key, value in parse_trailers(message):
        if _is_reserved(key):
            return value
    return None


def encode(rewrite_id, message):
    """
    Return `message` with its rewrite-group trailer set to `rewrite_id`.

    Joins an existing trailer block, replacing any previous rewrite-group
    trailer, or starts a new block after a blank line.
    """
    validate_rewrite_id(rewrite_id)
    body, trailers = split_trailers(message)
    lines = [t.text for t in trailers if not _is_reserved(t.key)]
    lines.append(f"{TRAILER_KEY}: {rewrite_id}")
    block = "\n".join(lines)
    if not body:
        return block
    return f"{body}\n\n{block}"
