"""Model endpoints and enumerated generation options."""

from enum import Enum, IntEnum


class Model(str, Enum):
    """Remote model variants; the value is the endpoint path under the API URL."""

    DEFAULT = ""
    XL = "xl"
    FLUX = "flux"
    FACESWAP = "faceswap"
    UPSCALE = "upscale"
    CUTOUT = "cutout"
    REPLACE = "replace"
    OUTPAINT = "outpaint"

    @property
    def label(self) -> str:
        """Human-readable name for logs ('default' for the root endpoint)."""
        return self.value or "default"


class Proportion(str, Enum):
    """Output proportions accepted by the FLUX endpoint."""

    LANDSCAPE = "landscape"
    PORTRAIT = "portrait"
    SQUARE = "square"
    WIDE = "wide"


class UpscalingFactor(IntEnum):
    """Upscaling factors accepted by the upscale endpoint."""

    TWO = 2
    FOUR = 4
    EIGHT = 8
