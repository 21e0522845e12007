"""
Generation results.

A GenerationResult wraps one successful response. The service either returns
the image body directly or a JSON document with base64 ``image_data`` or an
``image_url``. The bytes are materialized on the first data() call and cached
for the life of the result.
"""

import base64
import io
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

import requests
from PIL import Image

from imagepig.core.config import DEFAULT_DOWNLOAD_ATTEMPTS, DEFAULT_DOWNLOAD_INTERVAL
from imagepig.logging_config import get_logger
from imagepig.utils.exceptions import (
    ImageIOError,
    ImageProcessingError,
    MissingDataError,
)

logger = get_logger(__name__)

# Some image hosts reject requests without a browser-like agent
_DOWNLOAD_USER_AGENT = "Mozilla/5.0"


def _format_from_mime(mime_type: str) -> str:
    """Infer image format from a MIME type (e.g. 'image/jpeg' -> 'jpeg'); '' if unknown."""
    if not mime_type or not mime_type.strip().lower().startswith("image/"):
        return ""
    return mime_type.split("/", 1)[1].lower().split(";")[0].strip()


def _parse_timestamp(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


@dataclass(frozen=True, eq=False)
class GenerationResult:
    """Result of one generation call.

    Use ``data()`` for the raw bytes or ``save(path)`` to write them to disk.
    Metadata reported by the service (seed, timings, MIME type) is exposed as
    properties and is None when the service did not send it.
    """

    model_used: str  # Endpoint that produced the image ('default', 'xl', ...)
    generation_time: float  # Seconds spent on the request
    content_type: str = ""  # Content-Type of the response
    body: bytes | None = field(default=None, repr=False)  # binary responses only
    document: dict[str, Any] = field(default_factory=dict, repr=False)  # JSON responses only
    timeout: float | None = None  # applied to deferred image downloads
    download_attempts: int = DEFAULT_DOWNLOAD_ATTEMPTS
    download_interval: float = DEFAULT_DOWNLOAD_INTERVAL
    _cache: dict[str, bytes] = field(default_factory=dict, repr=False, compare=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def url(self) -> str | None:
        """Image URL reported by the service, if any."""
        value = self.document.get("image_url")
        return value if isinstance(value, str) and value else None

    @property
    def seed(self) -> int | None:
        """Seed used by the model, if reported."""
        value = self.document.get("seed")
        if isinstance(value, bool) or not isinstance(value, int):
            return None
        return value

    @property
    def mime_type(self) -> str | None:
        """MIME type of the image (response header for binary bodies, else the document)."""
        if _format_from_mime(self.content_type):
            return self.content_type.split(";")[0].strip().lower()
        value = self.document.get("mime_type")
        return value if isinstance(value, str) and value else None

    @property
    def format(self) -> str:
        """Image format, e.g. 'jpeg' or 'png'; empty when the service did not say."""
        return _format_from_mime(self.mime_type or "")

    @property
    def duration(self) -> timedelta | None:
        """Server-side generation time (completed_at - started_at), if reported."""
        started = _parse_timestamp(self.document.get("started_at"))
        completed = _parse_timestamp(self.document.get("completed_at"))
        if started is None or completed is None:
            return None
        return completed - started

    def data(self) -> bytes:
        """
        Return the image bytes, reading them on first access.

        Returns:
            Image bytes (identical on every call)

        Raises:
            MissingDataError: If the bytes could not be obtained
        """
        with self._lock:
            cached = self._cache.get("data")
            if cached is None:
                cached = self._materialize()
                self._cache["data"] = cached
            return cached

    @property
    def image(self) -> Image.Image:
        """The image decoded with Pillow."""
        try:
            return Image.open(io.BytesIO(self.data())).copy()
        except (OSError, SyntaxError) as e:
            raise ImageProcessingError(f"Failed to decode result image: {str(e)}") from e

    def save(self, path: str | Path) -> Path:
        """
        Write the image bytes to path.

        Args:
            path: Destination file; parent directory must exist

        Returns:
            The path written

        Raises:
            MissingDataError: If the bytes could not be obtained
            ImageIOError: If the file cannot be written
        """
        data = self.data()
        target = Path(path)
        try:
            with target.open("wb") as f:
                f.write(data)
        except OSError as e:
            raise ImageIOError(f"Failed to save image: {str(e)}", path=str(target)) from e
        logger.info("Saved image path=%s size=%d", target, len(data))
        return target

    def _materialize(self) -> bytes:
        if self.body is not None:
            if not self.body:
                raise MissingDataError("Response body is empty")
            return self.body

        image_data = self.document.get("image_data")
        if isinstance(image_data, str) and image_data:
            try:
                return base64.b64decode(image_data, validate=True)
            except ValueError as e:
                raise MissingDataError(f"Invalid base64 image data in response: {e}") from e

        if self.url:
            return self._download(self.url)

        raise MissingDataError("Response contains neither image data nor an image URL")

    def _download(self, url: str) -> bytes:
        """Fetch the image from url; a 404 means it is not published yet, so wait and retry."""
        last_error: Exception | None = None
        for attempt in range(1, self.download_attempts + 1):
            logger.debug("Downloading image url=%s attempt=%d", url, attempt)
            try:
                response = requests.get(
                    url, headers={"User-Agent": _DOWNLOAD_USER_AGENT}, timeout=self.timeout
                )
            except requests.exceptions.RequestException as e:
                logger.debug("Image download failed attempt=%d error=%s", attempt, e)
                last_error = e
                continue

            if 200 <= response.status_code < 300:
                return response.content
            if response.status_code != 404:
                logger.warning(
                    "Image download failed url=%s status=%s", url, response.status_code
                )
                break
            if attempt < self.download_attempts:
                time.sleep(self.download_interval)

        raise MissingDataError(f"Unable to fetch image from {url}") from last_error
