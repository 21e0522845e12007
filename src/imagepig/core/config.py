"""
Configuration for the imagepig client.

Holds the service URL, timeouts and download behaviour. The API key is not
part of the config; it is passed to the client directly.
"""

from dataclasses import dataclass, replace

from imagepig.logging_config import get_logger
from imagepig.utils.exceptions import ConfigurationError

logger = get_logger(__name__)

# Default configuration constants
DEFAULT_API_URL = "https://api.imagepig.com"
DEFAULT_TIMEOUT = 180  # 3 minutes; generation can be slow
DEFAULT_DOWNLOAD_ATTEMPTS = 10
DEFAULT_DOWNLOAD_INTERVAL = 1.0  # seconds between attempts while an image URL returns 404


@dataclass(frozen=True)
class ClientConfig:
    """Immutable settings shared by every request of one client."""

    api_url: str = DEFAULT_API_URL

    # Timeout Configuration (seconds)
    timeout: float = DEFAULT_TIMEOUT

    # Deferred download of results that only carry an image URL
    download_attempts: int = DEFAULT_DOWNLOAD_ATTEMPTS
    download_interval: float = DEFAULT_DOWNLOAD_INTERVAL

    # Debug: log request payloads and response bodies with image data truncated
    debug_api: bool = False

    def __post_init__(self) -> None:
        # frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "api_url", (self.api_url or "").strip().rstrip("/"))

    def validate(self) -> None:
        """
        Validate the configuration.

        Raises:
            ConfigurationError: If any setting is out of range
        """
        logger.debug("Validating config")

        if not self.api_url:
            raise ConfigurationError("api_url cannot be empty.")
        if not self.api_url.startswith(("http://", "https://")):
            raise ConfigurationError(
                f"api_url must start with http:// or https://, got {self.api_url!r}."
            )
        if self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout}.")
        if self.download_attempts < 1:
            raise ConfigurationError(
                f"download_attempts must be at least 1, got {self.download_attempts}."
            )
        if self.download_interval < 0:
            raise ConfigurationError(
                f"download_interval must not be negative, got {self.download_interval}."
            )

    def with_overrides(
        self, api_url: str | None = None, timeout: float | None = None
    ) -> "ClientConfig":
        """Return a copy with api_url and/or timeout replaced (None keeps the current value)."""
        changes: dict[str, object] = {}
        if api_url is not None:
            changes["api_url"] = api_url
        if timeout is not None:
            changes["timeout"] = timeout
        if not changes:
            return self
        return replace(self, **changes)  # type: ignore[arg-type]
