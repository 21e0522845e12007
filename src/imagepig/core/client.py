"""
ImagePig API client.

Each public method sends exactly one POST to a model endpoint and returns a
GenerationResult. Text-only requests are sent as JSON; requests carrying a
binary input image are sent as multipart/form-data. Failures are raised as
the typed exceptions in imagepig.utils.exceptions and are never retried.
"""

import json
import threading
import time
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any, TypeVar

import requests

from imagepig.core.config import ClientConfig
from imagepig.core.image_input import ImageSource, PreparedImage, prepare_image
from imagepig.core.options import Model, Proportion, UpscalingFactor
from imagepig.core.result import GenerationResult
from imagepig.logging_config import get_logger, log_prompts, redact_secret
from imagepig.utils.exceptions import (
    APIError,
    CancellationError,
    ConfigurationError,
    NetworkError,
    RequestTimeoutError,
    ValidationError,
)

logger = get_logger(__name__)

_PROMPT_LOG_MAX = 50_000
_DEBUG_TRUNCATE_THRESHOLD = 200
_CANCEL_POLL_INTERVAL = 0.25
_SERVICE_MESSAGE_KEYS = ("error", "message", "detail")

E = TypeVar("E", bound=Enum)


def _truncate_for_log(obj: Any) -> Any:
    """Recursively replace long strings (base64 and the like) with placeholders."""
    if isinstance(obj, dict):
        return {k: _truncate_for_log(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_truncate_for_log(v) for v in obj]
    if isinstance(obj, str) and len(obj) >= _DEBUG_TRUNCATE_THRESHOLD:
        return f"<string, {len(obj)} chars>"
    return obj


def _require_text(value: str, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        label = field.replace("_", " ").capitalize()
        raise ValidationError(f"{label} cannot be empty", field=field)
    return value


def _coerce_option(enum_cls: type[E], value: Any, field: str) -> E:
    try:
        return enum_cls(value)
    except ValueError as e:
        allowed = ", ".join(str(member.value) for member in enum_cls)
        raise ValidationError(
            f"Invalid {field}: {value!r}. Must be one of: {allowed}.", field=field
        ) from e


def _service_message(response: requests.Response) -> str:
    """Error text from the service: error/message/detail of a JSON body, else the raw body."""
    try:
        body = response.json()
    except ValueError:
        return response.text.strip()
    if isinstance(body, dict):
        for key in _SERVICE_MESSAGE_KEYS:
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return response.text.strip()


def _form_value(value: Any) -> str:
    """Encode a payload value as a multipart form field; non-strings are sent as JSON."""
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, str):
        return value
    return json.dumps(value)


class ImagePig:
    """Client for the ImagePig image generation API.

    The client holds the API key and an immutable ClientConfig and keeps no
    other state, so one instance can be shared between threads.
    """

    def __init__(
        self,
        api_key: str,
        api_url: str | None = None,
        timeout: float | None = None,
        config: ClientConfig | None = None,
    ) -> None:
        """
        Create a client. No request is sent.

        Args:
            api_key: ImagePig API key
            api_url: Optional base URL (defaults to the production service)
            timeout: Optional request timeout in seconds (defaults to config value)
            config: Optional ClientConfig; api_url and timeout override its values

        Raises:
            ConfigurationError: If the API key is empty or the config is invalid
        """
        if not isinstance(api_key, str) or not api_key.strip():
            raise ConfigurationError("API key cannot be empty")
        cfg = (config or ClientConfig()).with_overrides(api_url=api_url, timeout=timeout)
        cfg.validate()
        self._api_key = api_key
        redact_secret(api_key)
        self._config = cfg

    def __repr__(self) -> str:
        return f"ImagePig(api_url={self._config.api_url!r})"

    @property
    def api_key(self) -> str:
        return self._api_key

    @property
    def config(self) -> ClientConfig:
        return self._config

    # Model endpoints

    def generate(
        self,
        model: Model | str,
        prompt: str,
        params: Mapping[str, Any] | None = None,
        *,
        negative_prompt: str | None = None,
        images: Mapping[str, ImageSource] | None = None,
        cancel_check: Callable[[], bool] | None = None,
    ) -> GenerationResult:
        """
        Generate an image from a prompt with any model endpoint.

        Args:
            model: Model variant, or an endpoint path the service understands
            prompt: Text describing the desired image
            params: Extra request fields, passed through untouched
            negative_prompt: Optional text describing what to avoid; omitted when None
            images: Input images keyed by parameter prefix (e.g. {'image': url})
            cancel_check: Optional callable returning True to cancel; polled during the request

        Returns:
            GenerationResult for the response

        Raises:
            ValidationError: If the prompt is empty or an input image reference is invalid
            ImageProcessingError: If binary input is not a readable image
            APIError: If the service rejects the request
            NetworkError: If the service cannot be reached
            RequestTimeoutError: If the request times out
            CancellationError: If cancel_check returned True
        """
        payload = dict(params or {})
        payload["positive_prompt"] = _require_text(prompt, "prompt")
        if negative_prompt is not None:
            payload["negative_prompt"] = negative_prompt
        return self._call_api(model, payload, images, cancel_check)

    def default(
        self,
        prompt: str,
        negative_prompt: str | None = None,
        params: Mapping[str, Any] | None = None,
        *,
        cancel_check: Callable[[], bool] | None = None,
    ) -> GenerationResult:
        """Generate with the default model."""
        payload = dict(params or {})
        payload["negative_prompt"] = negative_prompt or ""
        return self.generate(Model.DEFAULT, prompt, payload, cancel_check=cancel_check)

    def xl(
        self,
        prompt: str,
        negative_prompt: str | None = None,
        params: Mapping[str, Any] | None = None,
        *,
        cancel_check: Callable[[], bool] | None = None,
    ) -> GenerationResult:
        """Generate with the XL model."""
        payload = dict(params or {})
        payload["negative_prompt"] = negative_prompt or ""
        return self.generate(Model.XL, prompt, payload, cancel_check=cancel_check)

    def flux(
        self,
        prompt: str,
        proportion: Proportion | str | None = None,
        params: Mapping[str, Any] | None = None,
        *,
        cancel_check: Callable[[], bool] | None = None,
    ) -> GenerationResult:
        """Generate with the FLUX model; proportion defaults to landscape."""
        payload = dict(params or {})
        payload["proportion"] = _coerce_option(
            Proportion,
            Proportion.LANDSCAPE if proportion is None else proportion,
            "proportion",
        ).value
        return self.generate(Model.FLUX, prompt, payload, cancel_check=cancel_check)

    def faceswap(
        self,
        source_image: ImageSource,
        target_image: ImageSource,
        params: Mapping[str, Any] | None = None,
        *,
        cancel_check: Callable[[], bool] | None = None,
    ) -> GenerationResult:
        """Put the face from source_image onto target_image."""
        return self._call_api(
            Model.FACESWAP,
            dict(params or {}),
            {"source_image": source_image, "target_image": target_image},
            cancel_check,
        )

    def upscale(
        self,
        image: ImageSource,
        factor: UpscalingFactor | int | None = None,
        params: Mapping[str, Any] | None = None,
        *,
        cancel_check: Callable[[], bool] | None = None,
    ) -> GenerationResult:
        """Upscale an image; factor defaults to 2."""
        payload = dict(params or {})
        payload["upscaling_factor"] = int(
            _coerce_option(
                UpscalingFactor,
                UpscalingFactor.TWO if factor is None else factor,
                "upscaling_factor",
            )
        )
        return self._call_api(Model.UPSCALE, payload, {"image": image}, cancel_check)

    def cutout(
        self,
        image: ImageSource,
        params: Mapping[str, Any] | None = None,
        *,
        cancel_check: Callable[[], bool] | None = None,
    ) -> GenerationResult:
        """Remove the background of an image."""
        return self._call_api(Model.CUTOUT, dict(params or {}), {"image": image}, cancel_check)

    def replace(
        self,
        image: ImageSource,
        select_prompt: str,
        prompt: str,
        negative_prompt: str | None = None,
        params: Mapping[str, Any] | None = None,
        *,
        cancel_check: Callable[[], bool] | None = None,
    ) -> GenerationResult:
        """Replace the object matching select_prompt with one described by prompt."""
        payload = dict(params or {})
        payload["select_prompt"] = _require_text(select_prompt, "select_prompt")
        payload["negative_prompt"] = negative_prompt or ""
        return self.generate(
            Model.REPLACE, prompt, payload, images={"image": image}, cancel_check=cancel_check
        )

    def outpaint(
        self,
        image: ImageSource,
        prompt: str,
        negative_prompt: str | None = None,
        top: int | None = 0,
        right: int | None = 0,
        bottom: int | None = 0,
        left: int | None = 0,
        params: Mapping[str, Any] | None = None,
        *,
        cancel_check: Callable[[], bool] | None = None,
    ) -> GenerationResult:
        """Extend an image by the given number of pixels on each edge (None means 0)."""
        payload = dict(params or {})
        payload["negative_prompt"] = negative_prompt or ""
        for edge, size in (("top", top), ("right", right), ("bottom", bottom), ("left", left)):
            size = 0 if size is None else size
            if size < 0:
                raise ValidationError(f"{edge} must not be negative, got {size}", field=edge)
            payload[edge] = size
        return self.generate(
            Model.OUTPAINT, prompt, payload, images={"image": image}, cancel_check=cancel_check
        )

    # Request handling

    def _endpoint(self, model: Model | str) -> tuple[str, str]:
        """Return (url, label) for a model variant or raw endpoint path."""
        if isinstance(model, Model):
            path, label = model.value, model.label
        else:
            path = str(model).strip().strip("/")
            label = path or "default"
        return f"{self._config.api_url}/{path}", label

    def _build_request(
        self, payload: dict[str, Any], images: list[PreparedImage]
    ) -> dict[str, Any]:
        """Return keyword arguments for requests.post: a JSON body, or form fields plus files."""
        if not any(img.is_binary for img in images):
            body = dict(payload)
            for img in images:
                body[img.field] = img.url
            return {"json": body}

        form = {key: _form_value(value) for key, value in payload.items()}
        files = {}
        for img in images:
            if img.is_binary:
                files[img.field] = (img.filename, img.data, img.mime_type)
            else:
                form[img.field] = img.url or ""
        return {"data": form, "files": files}

    def _call_api(
        self,
        model: Model | str,
        payload: dict[str, Any],
        images: Mapping[str, ImageSource] | None,
        cancel_check: Callable[[], bool] | None,
    ) -> GenerationResult:
        prepared = [prepare_image(name, source) for name, source in (images or {}).items()]
        url, label = self._endpoint(model)
        request_kwargs = self._build_request(payload, prepared)
        headers = {"Api-Key": self._api_key}
        timeout = self._config.timeout

        logger.debug(
            "Generating image model=%s inputs=%d multipart=%s",
            label,
            len(prepared),
            "files" in request_kwargs,
        )
        prompt = payload.get("positive_prompt")
        if prompt and log_prompts():
            truncated = (
                prompt if len(prompt) <= _PROMPT_LOG_MAX else prompt[:_PROMPT_LOG_MAX] + "..."
            )
            logger.info("Prompt (used): %s", truncated)

        def send() -> GenerationResult:
            try:
                return self._do_request(url, headers, request_kwargs, timeout, label)
            except requests.exceptions.Timeout as e:
                raise RequestTimeoutError(
                    f"Request timed out after {timeout} seconds. "
                    "The generation may be taking longer than expected."
                ) from e
            except requests.exceptions.ConnectionError as e:
                raise NetworkError(
                    "Failed to connect to the ImagePig API. Please check your internet connection.",
                    original_error=e,
                ) from e
            except requests.exceptions.RequestException as e:
                raise NetworkError(
                    f"Network error during API request: {str(e)}", original_error=e
                ) from e

        result = send() if cancel_check is None else self._run_cancellable(send, cancel_check)
        logger.info("Generated in %.1fs model=%s", result.generation_time, result.model_used)
        return result

    def _run_cancellable(
        self, send: Callable[[], GenerationResult], cancel_check: Callable[[], bool]
    ) -> GenerationResult:
        """Run send in a worker thread while polling cancel_check from the calling thread."""
        result_holder: list[GenerationResult | None] = [None]
        exc_holder: list[BaseException | None] = [None]

        def worker() -> None:
            try:
                result_holder[0] = send()
            except BaseException as e:
                exc_holder[0] = e

        thread = threading.Thread(target=worker, daemon=True)
        thread.start()
        while True:
            thread.join(timeout=_CANCEL_POLL_INTERVAL)
            if not thread.is_alive():
                break
            try:
                if cancel_check():
                    # The worker is abandoned; its response is never returned
                    raise CancellationError("Image generation was cancelled.")
            except CancellationError:
                raise
            except Exception:
                logger.debug("cancel_check raised; ignoring", exc_info=True)

        if exc_holder[0] is not None:
            raise exc_holder[0]
        assert result_holder[0] is not None
        return result_holder[0]

    def _do_request(
        self,
        url: str,
        headers: dict[str, str],
        request_kwargs: dict[str, Any],
        timeout: float,
        label: str,
    ) -> GenerationResult:
        """Perform the HTTP POST and parse the response. Maps status codes to exceptions."""
        debug = self._config.debug_api
        logger.debug("API request url=%s model=%s timeout=%s", url, label, timeout)
        if debug:
            if "json" in request_kwargs:
                shown = _truncate_for_log(request_kwargs["json"])
            else:
                shown = {
                    "form": _truncate_for_log(request_kwargs["data"]),
                    "files": {
                        name: f"<{mime}, {len(data)} bytes>"
                        for name, (_, data, mime) in request_kwargs["files"].items()
                    },
                }
            logger.info(
                "API request payload (image data truncated): %s",
                json.dumps(shown, indent=2, default=str),
            )

        start_time = time.time()
        response = requests.post(url, headers=headers, timeout=timeout, **request_kwargs)
        generation_time = time.time() - start_time
        content_type = response.headers.get("content-type", "")
        logger.debug(
            "API response status=%s content_type=%s time=%.2fs",
            response.status_code,
            content_type,
            generation_time,
        )

        status = response.status_code
        if not 200 <= status < 300:
            message = _service_message(response)
            if status == 401:
                summary = "Authentication failed. Please check your ImagePig API key."
            elif status == 404:
                summary = f"Model not found or endpoint unavailable: {label}"
            elif status == 429:
                summary = "Rate limit exceeded. Please wait before making more requests."
            elif status >= 500:
                summary = f"ImagePig service error: {status}"
            else:
                summary = f"API request failed with status {status}"
            raise APIError(
                f"{summary} ({message})" if message else summary,
                status_code=status,
                response=response.text,
                service_message=message,
            )

        return self._parse_response(response, content_type, label, generation_time)

    def _parse_response(
        self,
        response: requests.Response,
        content_type: str,
        label: str,
        generation_time: float,
    ) -> GenerationResult:
        """Wrap a 2xx response in a GenerationResult. Raises APIError for unusable bodies."""
        common: dict[str, Any] = {
            "model_used": label,
            "generation_time": generation_time,
            "content_type": content_type,
            "timeout": self._config.timeout,
            "download_attempts": self._config.download_attempts,
            "download_interval": self._config.download_interval,
        }
        if content_type.strip().lower().startswith("image/"):
            return GenerationResult(body=response.content, **common)

        try:
            document = response.json()
        except ValueError as e:
            raise APIError(
                f"Failed to parse API response as JSON: {str(e)}",
                status_code=response.status_code,
                response=response.text,
            ) from e
        if not isinstance(document, dict):
            raise APIError(
                "Unexpected API response: expected a JSON object",
                status_code=response.status_code,
                response=response.text,
            )
        if self._config.debug_api:
            logger.info(
                "API response (image data truncated): %s",
                json.dumps(_truncate_for_log(document), indent=2, default=str),
            )
        if not document.get("image_data") and not document.get("image_url"):
            raise APIError(
                "No image in API response.",
                status_code=response.status_code,
                response=response.text,
            )
        return GenerationResult(document=document, **common)
