import functools
import inspect
import traceback
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar, cast

from pydantic import ValidationError as PydanticValidationError

from caption_gemini.logging import log_error

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from caption_gemini.models import CaptionConfig, CaptionRequest, CaptionResult

AnyDict = dict[str, Any]

F = TypeVar(
    "F",
    bound=Callable[..., "CaptionResult | Awaitable[CaptionResult]"],
)


class CaptionGeminiException(Exception):
    """Base class for all exceptions raised by caption-gemini.

    Carries structured context (provider, model, request ID, raw provider
    response, item index) so a failing item can be traced back to the
    request and batch position that produced it.

    Attributes:
        message: Human-readable error description.
        provider: Provider identifier (e.g. ``"google"``).
        model: Model name at the time of the error.
        request_id: Request ID assigned to the captioning call.
        raw_response: Unmodified provider response payload, if available.
        item_index: Position of the input item being processed, once known.
    """

    message: str
    provider: str | None
    model: str | None
    request_id: str | None
    raw_response: AnyDict | None
    item_index: int | None

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        model: str | None = None,
        request_id: str | None = None,
        raw_response: AnyDict | None = None,
        item_index: int | None = None,
    ):
        self.message = message
        self.provider = provider
        self.model = model
        self.request_id = request_id
        self.raw_response = raw_response
        self.item_index = item_index
        super().__init__(message)


class ValidationError(CaptionGeminiException):
    """Raised when the provider rejects the request parameters.

    Typically a 400 or 422 from Gemini: an invalid API key, an unreachable
    media URL or an unsupported MIME type.
    """

    pass


class ContentModerationError(CaptionGeminiException):
    """Raised when the provider refuses the request (HTTP 403)."""

    pass


class HTTPError(CaptionGeminiException):
    """Raised on an unexpected HTTP error response from the provider API.

    Attributes:
        status_code: HTTP status code returned by the provider, if available.
    """

    status_code: int | None

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        model: str | None = None,
        request_id: str | None = None,
        raw_response: AnyDict | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message, provider, model, request_id, raw_response)
        self.status_code = status_code


class GenerationFailedError(CaptionGeminiException):
    """Raised when the provider call fails for a reason not covered elsewhere."""

    pass


class SchemaValidationError(CaptionGeminiException):
    """Raised when a structured response does not match the subtitle schema."""

    pass


class HTTPConnectionError(CaptionGeminiException):
    """Raised on a network-level failure before the provider responds."""

    pass


class TimeoutError(CaptionGeminiException):
    """Raised when the underlying HTTP client gives up waiting.

    Attributes:
        timeout_seconds: The timeout value that was exceeded, if known.
    """

    timeout_seconds: float | None

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        model: str | None = None,
        request_id: str | None = None,
        raw_response: AnyDict | None = None,
        timeout_seconds: float | None = None,
    ):
        super().__init__(message, provider, model, request_id, raw_response)
        self.timeout_seconds = timeout_seconds


class NodeOperationError(CaptionGeminiException):
    """Raised by a node when processing of an item fails.

    Wraps a foreign exception with the node name and the index of the item
    that failed. The wrapped exception is available as ``__cause__``.

    Attributes:
        node_name: Name of the node that raised the error.
        description: Optional longer explanation for the host UI.
    """

    node_name: str
    description: str | None

    def __init__(
        self,
        node_name: str,
        error: Exception | str,
        item_index: int | None = None,
        description: str | None = None,
    ):
        message = error if isinstance(error, str) else str(error) or type(error).__name__
        super().__init__(message, item_index=item_index)
        self.node_name = node_name
        self.description = description


def handle_caption_errors(func: F) -> F:
    """Decorator that wraps unhandled exceptions in ``CaptionGeminiException``.

    Apply to provider ``generate_caption`` and ``generate_caption_async``
    methods. Works with both sync and async functions.

    Behaviour:
    - ``CaptionGeminiException`` subclasses propagate unchanged.
    - ``PydanticValidationError`` propagates unchanged.
    - Any other exception is wrapped in ``CaptionGeminiException`` with the
      traceback captured in ``raw_response`` and logged at ERROR level.
    """

    def _wrap(config: "CaptionConfig", ex: Exception) -> CaptionGeminiException:
        log_error(
            f"Unknown error while generating caption: {ex}",
            context={"provider": config.provider, "model": config.model},
            logger_name="caption_gemini.exceptions",
            exc_info=True,
        )
        return CaptionGeminiException(
            f"Unknown error while generating caption: {ex}",
            provider=config.provider,
            model=config.model,
            raw_response={
                "error": str(ex),
                "error_type": type(ex).__name__,
                "traceback": traceback.format_exc(),
            },
        )

    if inspect.iscoroutinefunction(func):

        @functools.wraps(func)
        async def async_wrapper(
            self: Any,
            config: "CaptionConfig",
            request: "CaptionRequest",
        ) -> "CaptionResult":
            try:
                return await func(self, config, request)
            except (PydanticValidationError, CaptionGeminiException):
                raise
            except Exception as ex:
                raise _wrap(config, ex) from ex

        return cast(F, async_wrapper)

    @functools.wraps(func)
    def sync_wrapper(
        self: Any,
        config: "CaptionConfig",
        request: "CaptionRequest",
    ) -> "CaptionResult":
        try:
            return func(self, config, request)
        except (PydanticValidationError, CaptionGeminiException):
            raise
        except Exception as ex:
            raise _wrap(config, ex) from ex

    return cast(F, sync_wrapper)
