"""
Logging for imagepig.

Modules log through child loggers of ``imagepig`` obtained with get_logger().
Nothing is printed until the application configures logging itself or calls
set_verbosity(), which installs one stderr handler.

Verbosity levels:
- 0 (default): INFO — one line per generation with model and elapsed time
- 1: INFO + prompt text
- 2: DEBUG + prompt text — URLs, status codes, content types
- quiet=True: WARNING — failures only

API keys given to a client are registered with redact_secret() and replaced
by a placeholder in every record emitted through an imagepig logger.
"""

import logging
import threading

LOG_FORMAT = "%(levelname)s [%(name)s] %(message)s"
ROOT_LOGGER_NAME = "imagepig"
REDACTED = "***"

_log_prompts: bool = False


class SecretRedactingFilter(logging.Filter):
    """Rewrite records so that registered secrets never reach a handler."""

    def __init__(self) -> None:
        super().__init__()
        self._secrets: frozenset[str] = frozenset()
        self._lock = threading.Lock()

    def add(self, secret: str) -> None:
        if not secret:
            return
        with self._lock:
            self._secrets = self._secrets | {secret}

    def filter(self, record: logging.LogRecord) -> bool:
        secrets = self._secrets
        if not secrets:
            return True
        message = record.getMessage()
        redacted = message
        # longest first so a key containing another key is fully hidden
        for secret in sorted(secrets, key=len, reverse=True):
            redacted = redacted.replace(secret, REDACTED)
        if redacted != message:
            record.msg = redacted
            record.args = ()
        return True


_redactor = SecretRedactingFilter()


def redact_secret(secret: str) -> None:
    """Register a value (e.g. an API key) to be masked in imagepig log output."""
    _redactor.add(secret)


def set_verbosity(level: int = 0, quiet: bool = False) -> None:
    """
    Install the stderr handler (once) and set the imagepig log level.

    Args:
        level: 0 = INFO, 1 = INFO + prompts, 2 = DEBUG + prompts
        quiet: If True, log WARNING and above only; level is ignored
    """
    global _log_prompts
    root = get_logger(ROOT_LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)

    if quiet:
        root.setLevel(logging.WARNING)
    else:
        root.setLevel(logging.DEBUG if level >= 2 else logging.INFO)
    _log_prompts = not quiet and level >= 1


def log_prompts() -> bool:
    """Return True if prompt text should be logged at INFO (verbosity 1 or 2)."""
    return _log_prompts


def get_logger(name: str) -> logging.Logger:
    """Return a logger under imagepig (e.g. imagepig.core.client) with redaction attached."""
    if not (name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + ".")):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    logger = logging.getLogger(name)
    # addFilter ignores a filter that is already attached
    logger.addFilter(_redactor)
    return logger


__all__ = [
    "get_logger",
    "log_prompts",
    "redact_secret",
    "set_verbosity",
]
