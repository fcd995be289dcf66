"""
Upload validation utilities

Checks applied to an uploaded package before it is handed to the analyzer.
"""

from pathlib import Path
from typing import Optional

ALLOWED_EXTENSIONS = [".zip", ".scorm", ".pif"]
MULTIPART_OVERHEAD = 64 * 1024


class UploadValidationError(Exception):
    """Raised when an upload is rejected before analysis."""


class OversizeUploadError(UploadValidationError):
    """Raised when an upload exceeds the configured size limit."""

    def __init__(self, size: int, max_size: int):
        self.size = size
        self.max_size = max_size
        super().__init__(
            f"File too large. Maximum size is {max_size // (1024 * 1024)}MB."
        )


def validate_upload_filename(filename: Optional[str]) -> str:
    """Return the filename if its extension is an accepted package type"""
    if not filename:
        raise UploadValidationError("No file uploaded")
    if Path(filename).suffix.lower() not in ALLOWED_EXTENSIONS:
        raise UploadValidationError("Only ZIP and SCORM files are allowed")
    return filename


def check_declared_size(content_length: Optional[str], max_size: int) -> None:
    """
    Pre-flight check against the request's Content-Length header.

    Multipart framing makes the header slightly larger than the file itself,
    so requests are allowed ``MULTIPART_OVERHEAD`` bytes of slack.
    """
    if content_length and content_length.isdigit():
        declared_size = int(content_length)
        if declared_size > max_size + MULTIPART_OVERHEAD:
            raise OversizeUploadError(declared_size, max_size)


def validate_upload(filename: Optional[str], content: bytes, max_size: int) -> None:
    """
    Validate an uploaded package.

    Args:
        filename: Original filename from the multipart form
        content: Uploaded bytes
        max_size: Maximum accepted size in bytes

    Raises:
        UploadValidationError: For a missing filename, a disallowed extension
            or an empty body
        OversizeUploadError: If the content exceeds ``max_size``
    """
    validate_upload_filename(filename)
    if len(content) == 0:
        raise UploadValidationError("Empty files are not allowed")
    if len(content) > max_size:
        raise OversizeUploadError(len(content), max_size)
