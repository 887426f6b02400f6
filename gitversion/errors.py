"""
Error taxonomy for gitversion.

Most of these are expected conditions during a build (no repository,
no commits yet, no version tag) and are recovered by the service layer,
which falls back to the "unknown" name and a version code of 0.
Only GitCommandError and OS-level errors are meant to reach the caller.
"""

from typing import Optional


class RepositoryError(Exception):
    """Base class for repository related failures."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class RepositoryNotFound(RepositoryError):
    """No git metadata discoverable from the start directory upward."""

    def __init__(self, path: Optional[str] = None):
        super().__init__(f"No git repository found at or above {path}", path)


class UnbornHistory(RepositoryError):
    """Repository exists but HEAD does not point at a commit yet."""

    def __init__(self, path: Optional[str] = None):
        super().__init__(f"Repository at {path} has no commits", path)


class NoMatchingTag(RepositoryError):
    """No reachable commit carries a tag matching the configured prefix."""

    def __init__(self, prefix: str = "", path: Optional[str] = None):
        super().__init__(
            f"No tag matching '{prefix}[0-9]*' reachable from HEAD", path
        )
        self.prefix = prefix


class MalformedTagNumeric(RepositoryError):
    """A versioned tag whose dotted components are not all integers."""

    def __init__(self, version: str):
        super().__init__(f"Tag version '{version}' is not of the form N(.N)*")
        self.version = version


class GitCommandError(RepositoryError):
    """
    git failed for a reason other than the recoverable cases above.

    Raised for permission problems, corrupt repositories and timeouts.
    """

    def __init__(
        self,
        command: str,
        returncode: int,
        stderr: str = "",
        path: Optional[str] = None
    ):
        detail = stderr.strip() or f"exit status {returncode}"
        super().__init__(f"git command failed: {command}: {detail}", path)
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
