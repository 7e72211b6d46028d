"""Error classes for the sidecar fixer."""

from typing import TYPE_CHECKING

from .common import SidecarFixerError, FileProcessingError, PermissionDeniedError

if TYPE_CHECKING:
    from .orchestrator import RunResult


class FixerError(SidecarFixerError):
    """Base error for sidecar fixer operations."""
    pass


class InvalidRootError(FixerError):
    """Root directory is unusable, or the metadata directory lies inside it."""
    pass


class FilesystemError(FileProcessingError):
    """A copy, move or write failed at the filesystem level."""
    pass


class FilesystemPermissionError(FilesystemError, PermissionDeniedError):
    """A filesystem action was denied."""
    pass


class RunAbortedError(FixerError):
    """A fatal filesystem error stopped the run.

    ``result`` holds everything recorded before the failure. In commit mode
    each action is applied and recorded in lockstep, so the partial result is
    an accurate report of what was changed on disk.
    """

    def __init__(self, message: str, result: "RunResult", **context) -> None:
        super().__init__(message, **context)
        self.result = result


def wrap_os_error(error: OSError, operation: str, **context) -> FilesystemError:
    """Convert an ``OSError`` into the matching ``FilesystemError`` subclass."""
    message = f"{operation} failed: {error}"
    if isinstance(error, PermissionError):
        return FilesystemPermissionError(message, operation=operation, **context)
    return FilesystemError(message, operation=operation, errno=error.errno, **context)
