"""Base error definitions for gphotos_sidecar_fixer."""

from typing import Any, Dict


class SidecarFixerError(Exception):
    """Base exception for all gphotos_sidecar_fixer errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context


class FileProcessingError(SidecarFixerError):
    """Base exception for file processing errors."""
    pass


class PermissionDeniedError(FileProcessingError):
    """File access denied due to permissions."""
    pass
