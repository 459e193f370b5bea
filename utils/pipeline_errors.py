from typing import Dict, Optional


class PipelineError(Exception):
    """Base class for every failure raised by the vehicle-variant pipeline."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# Image normalization

class InvalidFileType(PipelineError):
    pass


class FileTooLarge(PipelineError):
    status_code = 413


class CanvasUnavailable(PipelineError):
    status_code = 500


class CompressedImageTooLarge(PipelineError):
    status_code = 413

    def __init__(self, size_chars: int):
        self.size_chars = size_chars
        self.size_kb = round(size_chars / 1024)
        super().__init__(
            f"Compressed image is still too large ({self.size_kb} KB). "
            "Please choose a smaller image."
        )


# Validation and assembly

class ValidationFailed(PipelineError):
    status_code = 422

    def __init__(self, field_errors: Dict[str, str], message: str = "Validation failed"):
        super().__init__(message)
        self.field_errors = dict(field_errors)


class NoColorSelected(ValidationFailed):
    def __init__(self, field_errors: Dict[str, str]):
        super().__init__(field_errors, message="Please select at least one color")


class ImagePayloadTooLarge(PipelineError):
    status_code = 413

    def __init__(self, color_id: int, length: int, limit: int):
        self.color_id = color_id
        self.length = length
        super().__init__(
            f"Image for color {color_id} is {length} characters long; "
            f"the backend accepts at most {limit}."
        )


# Backend

class BackendRejected(PipelineError):
    status_code = 502

    def __init__(self, raw_message: str, field_errors: Optional[Dict[str, str]] = None,
                 upstream_status: Optional[int] = None):
        super().__init__(raw_message)
        self.raw_message = raw_message
        self.field_errors = dict(field_errors or {})
        self.upstream_status = upstream_status
