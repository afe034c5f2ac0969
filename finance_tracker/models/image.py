"""
Image Editing Models

The result of an image edit is a small sum type:

- EditedImage: the model returned an inline image
- NoImageReturned: the request succeeded but no image came back

Request failures are NOT represented here - they travel as exceptions.
Keeping "no image" out of the error channel lets the UI tell the user to
try a different instruction instead of reporting a failure.
"""

import base64
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_OUTPUT_MIME_TYPE = "image/png"


class EditedImage(BaseModel):
    """An image returned by the generative model."""
    model_config = ConfigDict(frozen=True)

    status: Literal["found"] = "found"
    mime_type: str = Field(
        default=DEFAULT_OUTPUT_MIME_TYPE,
        description="Mime type reported by the model"
    )
    base64_data: str = Field(
        ...,
        min_length=1,
        description="Base64-encoded image bytes"
    )

    @property
    def data_url(self) -> str:
        """The image re-wrapped as a data URL."""
        return f"data:{self.mime_type};base64,{self.base64_data}"

    @property
    def image_bytes(self) -> bytes:
        return base64.b64decode(self.base64_data)


class NoImageReturned(BaseModel):
    """The model answered without producing an image."""
    model_config = ConfigDict(frozen=True)

    status: Literal["not_found"] = "not_found"
    text: str = Field(
        default="",
        description="Any text the model returned instead of an image"
    )


ImageEditResult = Union[EditedImage, NoImageReturned]
