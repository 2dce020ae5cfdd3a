"""Exception hierarchy for blob-tools."""

from typing import Any, Optional


class BlobToolsError(Exception):
    """Base exception for all blob-tools errors."""

    pass


class ValidationError(BlobToolsError):
    """Raised when validation fails."""

    pass


class ConfigError(ValidationError):
    """Raised when a scope or policy is invalid. Always fatal."""

    pass


class CommandExecutionError(BlobToolsError):
    """Raised when a storage service call fails."""

    pass


class EnumerationError(BlobToolsError):
    """Raised when listing a container fails. Aborts the run.

    Attributes:
        report: Outcomes of the objects handled before the listing broke,
            when the failure happened during a run
    """

    def __init__(self, message: str, report: Optional[Any] = None):
        super().__init__(message)
        self.report = report


class ObjectProcessingError(BlobToolsError):
    """Base for failures confined to a single object.

    Attributes:
        path: Path of the object being processed
        stage: Pipeline stage that failed (probe, read, write_body, ...)
    """

    stage = "process"

    def __init__(self, message: str, path: str, stage: Optional[str] = None):
        super().__init__(message)
        self.path = path
        if stage is not None:
            self.stage = stage


class ProbeError(ObjectProcessingError):
    """Raised when the sibling existence check fails."""

    stage = "probe"


class ReadError(ObjectProcessingError):
    """Raised when an object or its headers cannot be read."""

    stage = "read"


class WriteError(ObjectProcessingError):
    """Raised when the store rejects a body or property write."""

    stage = "write_body"
