"""
Custom exceptions for the line snap engine.
"""

from typing import Optional


class SnapEngineError(Exception):
    """Base exception for snap engine errors."""

    def __init__(self, message: str, error_code: Optional[str] = None):
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class PageResolutionError(SnapEngineError):
    """Exception raised when a screen point cannot be resolved to a page."""

    def __init__(self, message: str, point: Optional[tuple] = None):
        self.point = point
        full_message = f"no page for point: {message}"
        if point is not None:
            full_message += f" at ({point[0]:.1f}, {point[1]:.1f})"
        super().__init__(full_message, "PAGE_ERROR")


class PDFProcessingError(SnapEngineError):
    """Exception raised when a page region cannot be rendered."""

    def __init__(self, message: str, pdf_path: Optional[str] = None):
        self.pdf_path = pdf_path
        full_message = f"render failed: {message}"
        if pdf_path:
            full_message += f" [{pdf_path}]"
        super().__init__(full_message, "PDF_ERROR")


class ImageProcessingError(SnapEngineError):
    """Exception raised when the contour primitive fails."""

    def __init__(self, message: str, operation: Optional[str] = None):
        self.operation = operation
        full_message = f"contour tracing failed: {message}"
        if operation:
            full_message += f" during {operation}"
        super().__init__(full_message, "IMAGE_ERROR")


class ConfigurationError(SnapEngineError):
    """Exception raised for configuration errors."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        self.config_key = config_key
        full_message = f"bad setting: {message}"
        if config_key:
            full_message += f" [{config_key}]"
        super().__init__(full_message, "CONFIG_ERROR")


class ValidationError(SnapEngineError):
    """Exception raised for invalid geometry or arguments."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        full_message = f"invalid geometry: {message}"
        if field:
            full_message += f" [{field}]"
        super().__init__(full_message, "VALIDATION_ERROR")
