"""Image editing services package."""

from finance_tracker.services.image.gemini_editor import (
    GeminiImageEditor,
    ImageEditConfigurationError,
    ImageEditError,
    InvalidEditRequestError,
    strip_data_url_prefix,
    to_data_url,
)

__all__ = [
    "GeminiImageEditor",
    "ImageEditConfigurationError",
    "ImageEditError",
    "InvalidEditRequestError",
    "strip_data_url_prefix",
    "to_data_url",
]
