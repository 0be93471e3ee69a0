"""Error kinds raised while deciding, building and publishing a commit."""


class RewriteError(Exception):
    """Base class; `kind` names the failure and `exit_code` is the process status."""

    kind = "error"
    exit_code = 1


class InvalidInput(RewriteError, ValueError):
    kind = "invalid-input"
    exit_code = 2


class RemoteNotFound(RewriteError):
    kind = "not-found"
    exit_code = 3


class Forbidden(RewriteError):
    kind = "forbidden"
    exit_code = 4


class Conflict(RewriteError):
    """The branch moved between reading its tip and updating it."""

    kind = "conflict"
    exit_code = 5

    def __init__(self, message, branch=None, expected=None, actual=None):
        super().__init__(message)
        self.branch = branch
        self.expected = expected
        self.actual = actual


class ContentTooLarge(RewriteError, ValueError):
    kind = "content-too-large"
    exit_code = 6


class InvalidPath(RewriteError, ValueError):
    kind = "invalid-path"
    exit_code = 7


class Transient(RewriteError):
    """Network or server error from the transport; not retried here."""

    kind = "transient"
    exit_code = 8
