"""
Input image handling for the image-to-image endpoints.

An input image is either a public URL, which the service fetches itself, or
binary data (bytes, a data URL, or a local file) that is uploaded as a
multipart file part.
"""

import base64
import io
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

from PIL import Image, UnidentifiedImageError

from imagepig.logging_config import get_logger
from imagepig.utils.exceptions import ImageProcessingError, ValidationError

logger = get_logger(__name__)

ImageSource = str | Path | bytes

_DEFAULT_MIME = "application/octet-stream"


@dataclass(frozen=True)
class PreparedImage:
    """One input image, ready to be placed in a request body."""

    name: str  # parameter prefix, e.g. 'image' or 'source_image'
    url: str | None = None
    data: bytes | None = None
    mime_type: str = _DEFAULT_MIME
    filename: str = ""

    @property
    def is_binary(self) -> bool:
        return self.data is not None

    @property
    def field(self) -> str:
        """Request field name: '<name>_url' or '<name>_data'."""
        return f"{self.name}_data" if self.is_binary else f"{self.name}_url"


def _is_http_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _parse_data_url(data_url: str, name: str) -> bytes:
    """Decode a data URL (data:image/xxx;base64,yyy) into raw bytes."""
    idx = data_url.find(";base64,")
    if idx == -1:
        raise ValidationError("Data URL missing ;base64, part", field=name)
    try:
        return base64.b64decode(data_url[idx + 8 :], validate=True)
    except ValueError as e:
        raise ValidationError(f"Invalid base64 in data URL: {e}", field=name) from e


def _inspect_image(data: bytes, image_path: str = "") -> str:
    """Check that data decodes as an image and return its MIME type."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            fmt = image.format
            image.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise ImageProcessingError(
            f"Input is not a readable image: {str(e)}", image_path=image_path
        ) from e
    return Image.MIME.get(fmt or "", _DEFAULT_MIME)


def _read_file(path: Path, name: str) -> bytes:
    if not path.is_file():
        raise ValidationError(
            f"Image must be an http(s) URL, a data URL, bytes or an existing file: {path}",
            field=name,
        )
    try:
        return path.read_bytes()
    except OSError as e:
        raise ImageProcessingError(
            f"Failed to read image file: {str(e)}", image_path=str(path)
        ) from e


def prepare_image(name: str, image: ImageSource) -> PreparedImage:
    """
    Normalize an input image for the request body.

    Args:
        name: Parameter prefix expected by the endpoint (e.g. 'image')
        image: http(s) URL, data URL, raw bytes, or path to a local file

    Returns:
        PreparedImage carrying either the URL or the verified bytes

    Raises:
        ValidationError: If the value is empty or not a usable reference
        ImageProcessingError: If binary data is not a readable image
    """
    if isinstance(image, str):
        value = image.strip()
        if not value:
            raise ValidationError("Image reference cannot be empty", field=name)
        if _is_http_url(value):
            logger.debug("Input image %s passed by URL", name)
            return PreparedImage(name=name, url=value)
        if value.startswith("data:"):
            data = _parse_data_url(value, name)
            return PreparedImage(
                name=name, data=data, mime_type=_inspect_image(data), filename=name
            )
        image = Path(value)

    if isinstance(image, Path):
        data = _read_file(image, name)
        mime_type = _inspect_image(data, image_path=str(image))
        logger.debug("Input image %s read from %s (%d bytes)", name, image, len(data))
        return PreparedImage(name=name, data=data, mime_type=mime_type, filename=image.name)

    if not image:
        raise ValidationError("Image data is empty", field=name)
    return PreparedImage(name=name, data=image, mime_type=_inspect_image(image), filename=name)
