# ABOUTME: Reads uploaded background images into data URIs.
# ABOUTME: Rejects files whose content type is not an image.

import base64
from typing import Protocol

from bike_weather.errors import InvalidImageError


def to_data_uri(data: bytes, content_type: str | None) -> str:
    """Encode raw image bytes as a base64 ``data:`` URI."""
    if not content_type or not content_type.startswith("image/"):
        raise InvalidImageError()
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


class ImageFile(Protocol):
    """An uploaded file, e.g. ``starlette.datastructures.UploadFile``."""

    content_type: str | None

    async def read(self) -> bytes: ...


async def read_as_data_uri(upload: ImageFile) -> str:
    if not upload.content_type or not upload.content_type.startswith("image/"):
        raise InvalidImageError()
    return to_data_uri(await upload.read(), upload.content_type)
