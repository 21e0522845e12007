"""
imagepig - ImagePig API client

A Python client for the ImagePig text-to-image service. One method per model
endpoint; each sends a single request and returns a GenerationResult.

Library usage:
- Construct ImagePig(api_key) once; the client is immutable and thread-safe.
- Call a model method (default, xl, flux, faceswap, upscale, cutout, replace,
  outpaint) or generate(model, prompt, ...) for any endpoint.
- Read the image with result.data() or write it with result.save(path).
- Failures are raised as subclasses of ImagePigError.
- Logging: control verbosity with set_verbosity(0|1|2, quiet=False); API keys are masked.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("imagepig")
except PackageNotFoundError:
    # Package is not installed (e.g., running from source in development)
    __version__ = "0.0.0.dev"

from imagepig.core.client import ImagePig
from imagepig.core.config import DEFAULT_API_URL, DEFAULT_TIMEOUT, ClientConfig
from imagepig.core.image_input import prepare_image
from imagepig.core.options import Model, Proportion, UpscalingFactor
from imagepig.core.result import GenerationResult
from imagepig.logging_config import redact_secret, set_verbosity
from imagepig.utils.exceptions import (
    APIError,
    CancellationError,
    ConfigurationError,
    ImageIOError,
    ImagePigError,
    ImageProcessingError,
    MissingDataError,
    NetworkError,
    RequestTimeoutError,
    ValidationError,
)

__all__ = [
    "APIError",
    "CancellationError",
    "ClientConfig",
    "ConfigurationError",
    "DEFAULT_API_URL",
    "DEFAULT_TIMEOUT",
    "GenerationResult",
    "ImageIOError",
    "ImagePig",
    "ImagePigError",
    "ImageProcessingError",
    "MissingDataError",
    "Model",
    "NetworkError",
    "prepare_image",
    "Proportion",
    "redact_secret",
    "RequestTimeoutError",
    "set_verbosity",
    "UpscalingFactor",
    "ValidationError",
]
