"""Exceptions raised while exporting a home."""


class ExportException(Exception):
    """Base exception for export errors."""

    def __init__(self, message: str, error_type: str = "unknown", recoverable: bool = False):
        super().__init__(message)
        self.error_type = error_type
        self.recoverable = recoverable


class ExportError(ExportException):
    """Fatal error: the export is aborted and no bundle is produced."""

    def __init__(self, message: str, error_type: str = "fatal"):
        super().__init__(message, error_type=error_type, recoverable=False)


class ResourceNotFoundError(ExportException):
    """A model archive or texture image could not be fetched."""

    def __init__(self, message: str):
        super().__init__(message, error_type="resource_not_found", recoverable=True)


class ModelArchiveError(ExportException):
    """A model archive is unreadable or holds no mesh file."""

    def __init__(self, message: str):
        super().__init__(message, error_type="model_archive", recoverable=True)


class ObjParseError(ExportException):
    """Mesh text could not be parsed."""

    def __init__(self, message: str, line_number: int = 0):
        if line_number:
            message = f"line {line_number}: {message}"
        super().__init__(message, error_type="obj_parse", recoverable=True)
        self.line_number = line_number
