"""
Image Editing Service using Gemini

Sends an image plus a text instruction to a Gemini image model and returns
the edited image.

This service handles:
1. Credential check (before anything touches the network)
2. Stripping data-URL prefixes and decoding the base64 payload
3. One generate_content call with the inline image and the instruction
4. Picking the first inline image out of the response

CRITICAL: A response without an image is NOT an error. It comes back as
NoImageReturned so the user can be told to try another instruction.
Transport and API errors propagate unchanged. There is no retry, no
timeout and no backoff - one request, one answer.
"""

import base64
import binascii
from typing import Any, Optional

import google.generativeai as genai
import structlog

from finance_tracker.config import GeminiSettings, get_settings
from finance_tracker.models.image import (
    DEFAULT_OUTPUT_MIME_TYPE,
    EditedImage,
    ImageEditResult,
    NoImageReturned,
)


logger = structlog.get_logger(__name__)

DEFAULT_INPUT_MIME_TYPE = "image/jpeg"


class ImageEditError(Exception):
    """Base exception for image editing errors."""
    pass


class ImageEditConfigurationError(ImageEditError):
    """The Gemini API key is not configured."""
    pass


class InvalidEditRequestError(ImageEditError):
    """The image payload or the instruction cannot be sent."""
    pass


def strip_data_url_prefix(image_data: str) -> str:
    """
    Remove a "data:<mime>;base64," prefix if present.

    Everything up to the first comma is dropped. Input without a comma
    is returned unchanged.
    """
    _, separator, payload = image_data.partition(",")
    if separator and payload:
        return payload
    return image_data


def to_data_url(image_bytes: bytes, mime_type: str) -> str:
    """Wrap raw image bytes as a base64 data URL."""
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


class GeminiImageEditor:
    """
    Stateless gateway to a Gemini image model.

    Flow:
    1. Check the API key is configured
    2. Decode the base64 image
    3. Send image + instruction in one request
    4. Return the first inline image, or NoImageReturned
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Optional[Any] = None,
    ):
        """
        Args:
            settings: Gemini settings. Defaults to the environment.
            model: Object exposing generate_content_async. Defaults to a
                   genai.GenerativeModel built on first use.
        """
        self._settings = settings if settings is not None else get_settings().gemini
        self._model = model

    @property
    def model_name(self) -> str:
        return self._settings.image_model_name

    def _get_model(self) -> Any:
        """Return the generative model, configuring the SDK on first use."""
        if not self._settings.api_key:
            raise ImageEditConfigurationError(
                "Gemini API key not found. Set GEMINI_API_KEY in your environment or .env file."
            )
        if self._model is None:
            genai.configure(api_key=self._settings.api_key)
            self._model = genai.GenerativeModel(model_name=self._settings.image_model_name)
        return self._model

    async def edit_image(
        self,
        image_data: str,
        instruction: str,
        mime_type: str = DEFAULT_INPUT_MIME_TYPE,
    ) -> ImageEditResult:
        """
        Edit an image according to a text instruction.

        Args:
            image_data: Base64 image, optionally as a data URL
            instruction: What to change in the image
            mime_type: Mime type of the input image

        Returns:
            EditedImage if the model returned an image, NoImageReturned otherwise

        Raises:
            ImageEditConfigurationError: No API key configured
            InvalidEditRequestError: Empty instruction or undecodable image
            Exception: Whatever the Gemini SDK raises, unchanged
        """
        model = self._get_model()

        instruction = instruction.strip()
        if not instruction:
            raise InvalidEditRequestError("Instruction must not be empty")

        # Line-wrapped base64 (MIME style) is accepted.
        payload = "".join(strip_data_url_prefix(image_data.strip()).split())
        try:
            image_bytes = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidEditRequestError(f"Image data is not valid base64: {e}") from e
        if not image_bytes:
            raise InvalidEditRequestError("Image data is empty")

        contents = [
            {"mime_type": mime_type, "data": image_bytes},
            instruction,
        ]

        try:
            response = await model.generate_content_async(contents)
        except Exception as e:
            logger.error(
                "image_edit_request_failed",
                model=self.model_name,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise

        return self._extract_image(response)

    def _extract_image(self, response: Any) -> ImageEditResult:
        """Return the first inline image in the first candidate."""
        candidates = getattr(response, "candidates", None) or []
        if not candidates:
            return NoImageReturned()

        content = getattr(candidates[0], "content", None)
        parts = getattr(content, "parts", None) or []

        texts: list[str] = []
        for part in parts:
            blob = getattr(part, "inline_data", None)
            data = getattr(blob, "data", None) if blob is not None else None
            if data:
                if isinstance(data, str):
                    encoded = data
                else:
                    encoded = base64.b64encode(data).decode("ascii")
                return EditedImage(
                    mime_type=getattr(blob, "mime_type", None) or DEFAULT_OUTPUT_MIME_TYPE,
                    base64_data=encoded,
                )
            text = getattr(part, "text", None)
            if text:
                texts.append(text)

        return NoImageReturned(text="\n".join(texts))
