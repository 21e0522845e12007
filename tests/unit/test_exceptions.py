"""Unit tests for imagepig exceptions."""

import pytest

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


@pytest.mark.unit
class TestImagePigError:
    def test_base_is_exception(self):
        assert issubclass(ImagePigError, Exception)

    def test_subclasses_are_imagepig_error(self):
        for cls in (
            ValidationError,
            APIError,
            NetworkError,
            RequestTimeoutError,
            CancellationError,
            ConfigurationError,
            MissingDataError,
            ImageIOError,
            ImageProcessingError,
        ):
            assert issubclass(cls, ImagePigError)

    def test_transport_and_service_errors_are_distinct(self):
        assert not issubclass(NetworkError, APIError)
        assert not issubclass(APIError, NetworkError)


@pytest.mark.unit
class TestValidationError:
    def test_message_and_field(self):
        e = ValidationError("bad value", field="prompt")
        assert str(e) == "bad value"
        assert e.field == "prompt"

    def test_field_optional(self):
        e = ValidationError("invalid")
        assert e.field == ""


@pytest.mark.unit
class TestAPIError:
    def test_message_status_response(self):
        e = APIError(
            "failed", status_code=402, response='{"error":"x"}', service_message="x"
        )
        assert e.status_code == 402
        assert e.response == '{"error":"x"}'
        assert e.service_message == "x"

    def test_defaults(self):
        e = APIError("failed")
        assert e.status_code == 0
        assert e.response == ""
        assert e.service_message == ""


@pytest.mark.unit
class TestNetworkError:
    def test_original_error(self):
        inner = ConnectionError("refused")
        e = NetworkError("network failed", original_error=inner)
        assert e.original_error is inner


@pytest.mark.unit
class TestImageIOError:
    def test_path(self):
        e = ImageIOError("cannot write", path="/nope/out.jpeg")
        assert e.path == "/nope/out.jpeg"


@pytest.mark.unit
class TestImageProcessingError:
    def test_image_path(self):
        e = ImageProcessingError("decode failed", image_path="/tmp/x.png")
        assert e.image_path == "/tmp/x.png"
