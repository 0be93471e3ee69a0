"""Validation of caller input and changeset entries."""

import posixpath

from .config import MAX_BLOB_SIZE
from .errors import ContentTooLarge, InvalidInput, InvalidPath
from .objects import BLOB_MODES, is_deletion


def validate_rewrite_id(rewrite_id):
    """
    Validate a rewrite-group identifier.

    The id is embedded verbatim in a single trailer line, so it must be
    non-empty, carry no line breaks and no surrounding whitespace.

    Raises InvalidInput if validation fails.
    """
    if not isinstance(rewrite_id, str) or not rewrite_id.strip():
        raise InvalidInput("Rewrite id must not be empty")
    if "\n" in rewrite_id or "\r" in rewrite_id:
        raise InvalidInput("Rewrite id must not contain line breaks")
    if rewrite_id != rewrite_id.strip():
        raise InvalidInput("Rewrite id must not start or end with whitespace")
    return rewrite_id


def validate_message(message):
    """Raises InvalidInput if the commit message is empty."""
    if not isinstance(message, str) or not message.strip():
        raise InvalidInput("Commit message is required")
    return message


def validate_author(name, email):
    """Return an author dict, or None when neither field is given."""
    if not name and not email:
        return None
    if not name or not email:
        raise InvalidInput("Author name and email must be given together")
    return {"name": name, "email": email}


def validate_path(path):
    """
    Validate a repository-relative path of a changeset entry.

    Rejects absolute paths, traversal, empty segments and `.git` segments.
    Raises InvalidPath if validation fails.
    """
    if not isinstance(path, str) or not path:
        raise InvalidPath("Path must not be empty")
    if "\0" in path or "\\" in path:
        raise InvalidPath(f"Path contains an illegal character: {path!r}")
    if path.startswith("/"):
        raise InvalidPath(f"Path must be relative: {path}")
    for segment in path.split("/"):
        if not segment:
            raise InvalidPath(f"Path has an empty segment: {path}")
        if segment in (".", ".."):
            raise InvalidPath(f"Path must not traverse directories: {path}")
        if segment.lower() == ".git":
            raise InvalidPath(f"Path must not enter .git: {path}")
    return path


def validate_pattern(pattern):
    """
    Validate a file pattern given on the command line.

    Raises InvalidInput if the pattern is empty, absolute, traverses upward
    or has an unterminated character class. Returns the normalized pattern.
    """
    if not isinstance(pattern, str) or not pattern.strip():
        raise InvalidInput("File pattern must not be empty")
    if pattern.startswith("/"):
        raise InvalidInput(f"File pattern must be relative: {pattern}")
    if ".." in pattern.split("/"):
        raise InvalidInput(f"File pattern must not traverse directories: {pattern}")
    if pattern.count("[") != pattern.count("]"):
        raise InvalidInput(f"Malformed file pattern: {pattern}")
    # "./sub/x" -> "sub/x", "sub/" -> "sub"; "." stays the repository root
    return posixpath.normpath(pattern)


def validate_changeset(changes):
    """
    Check every entry of a changeset before any object is created.

    Raises InvalidPath for bad or conflicting paths and ContentTooLarge for
    oversized content.
    """
    writes = set()
    seen = set()
    for change in changes:
        validate_path(change.path)
        if change.path in seen:
            raise InvalidPath(f"Path appears more than once in changeset: {change.path}")
        seen.add(change.path)
        if is_deletion(change):
            continue
        if change.mode not in BLOB_MODES:
            raise InvalidPath(f"Unsupported file mode {change.mode} for {change.path}")
        if len(change.content) > MAX_BLOB_SIZE:
            raise ContentTooLarge(
                f"{change.path} is {len(change.content)} bytes; limit is {MAX_BLOB_SIZE}"
            )
        writes.add(change.path)

    # a written file cannot also be a directory of another written entry;
    # deletions beneath it are implied by the write
    for path in writes:
        parts = path.split("/")
        for i in range(1, len(parts)):
            prefix = "/".join(parts[:i])
            if prefix in writes:
                raise InvalidPath(f"Conflicting entries: {prefix} is both a file and a directory")
    return changes
