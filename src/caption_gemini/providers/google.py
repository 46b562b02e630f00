"""Google Gemini caption handler using google-genai.

Sends one ``generate_content`` call per request with the media attached.
Media already stored with Google (``gs://`` or Files API URIs) is referenced
by URI; any other URL is downloaded and sent inline. Structured requests
constrain the response to ``SubtitleTrack``; free-text requests return the
model's text as-is.
"""

import traceback
import uuid
from typing import Any, cast

import httpx
from google.genai.client import Client
from google.genai.errors import APIError
from google.genai.types import (
    Content,
    GenerateContentConfig,
    GenerateContentResponse,
    Part,
)
from pydantic import ValidationError as PydanticValidationError

from caption_gemini.exceptions import (
    CaptionGeminiException,
    ContentModerationError,
    GenerationFailedError,
    HTTPConnectionError,
    HTTPError,
    SchemaValidationError,
    TimeoutError,
    ValidationError,
    handle_caption_errors,
)
from caption_gemini.logging import ProviderLogger, log_error
from caption_gemini.models import (
    AnyDict,
    CaptionConfig,
    CaptionRequest,
    CaptionResult,
    SubtitleTrack,
    TextCaption,
)

_LOGGER_NAME = "caption_gemini.providers.google"

# URIs Gemini can read directly; everything else is downloaded first.
_PROVIDER_URI_PREFIXES = ("gs://", "https://generativelanguage.googleapis.com/")

_DOWNLOAD_TIMEOUT = 120.0


def is_provider_uri(url: str) -> bool:
    """Whether ``url`` points at media Gemini can fetch on its own."""
    return url.startswith(_PROVIDER_URI_PREFIXES)


class GoogleCaptionHandler:
    """Caption handler for the Gemini Developer API.

    Stateless: a new ``Client`` is created for every call, bound to the API
    key in the call's config.

    Args:
        transport: Optional httpx transport used for media downloads. Both
            sync and async clients accept ``httpx.MockTransport``.
    """

    def __init__(
        self, transport: httpx.BaseTransport | httpx.AsyncBaseTransport | None = None
    ):
        self._transport = transport

    def _create_client(self, config: CaptionConfig, request_id: str) -> Client:
        """Create a google-genai client bound to the config's API key.

        google-genai reads ``GOOGLE_API_KEY``/``GEMINI_API_KEY`` when no key
        is given, so an empty key is rejected here instead.
        """
        if not config.api_key:
            raise ValidationError(
                "Gemini API key is empty",
                provider=config.provider,
                model=config.model,
                request_id=request_id,
            )
        return Client(api_key=config.api_key)

    def _media_part_from_bytes(
        self, request: CaptionRequest, response: httpx.Response, logger: ProviderLogger
    ) -> Part:
        response.raise_for_status()
        logger.debug(
            "Media downloaded",
            {"url": request.media.url, "size": len(response.content)},
        )
        return Part.from_bytes(
            data=response.content, mime_type=request.media.content_type
        )

    def _load_media_part(self, request: CaptionRequest, logger: ProviderLogger) -> Part:
        """Reference provider-hosted media by URI, download anything else."""
        if is_provider_uri(request.media.url):
            return Part.from_uri(
                file_uri=request.media.url, mime_type=request.media.content_type
            )

        with httpx.Client(
            transport=self._transport,
            timeout=_DOWNLOAD_TIMEOUT,
            follow_redirects=True,
        ) as http_client:
            response = http_client.get(request.media.url)
        return self._media_part_from_bytes(request, response, logger)

    async def _load_media_part_async(
        self, request: CaptionRequest, logger: ProviderLogger
    ) -> Part:
        """Async variant of ``_load_media_part``."""
        if is_provider_uri(request.media.url):
            return Part.from_uri(
                file_uri=request.media.url, mime_type=request.media.content_type
            )

        async with httpx.AsyncClient(
            transport=self._transport,
            timeout=_DOWNLOAD_TIMEOUT,
            follow_redirects=True,
        ) as http_client:
            response = await http_client.get(request.media.url)
        return self._media_part_from_bytes(request, response, logger)

    def _build_content_kwargs(
        self, config: CaptionConfig, request: CaptionRequest, media: Part
    ) -> AnyDict:
        """Build kwargs for ``client.models.generate_content``."""
        contents = [
            Content(
                role="user",
                parts=[Part.from_text(text=request.prompt), media],
            )
        ]

        generation_config = None
        if request.structured:
            generation_config = GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=SubtitleTrack,
            )

        return {
            "model": config.model,
            "contents": contents,
            "config": generation_config,
        }

    def _convert_response(
        self,
        config: CaptionConfig,
        request: CaptionRequest,
        request_id: str,
        response: GenerateContentResponse,
    ) -> CaptionResult:
        """Convert a ``generate_content`` response into a caption result."""
        if not request.structured:
            if not response.text:
                raise GenerationFailedError(
                    "Gemini returned no text",
                    provider=config.provider,
                    model=config.model,
                    request_id=request_id,
                    raw_response={
                        "prompt_feedback": str(response.prompt_feedback),
                    },
                )
            return TextCaption(text=response.text)

        parsed: Any = response.parsed
        try:
            if parsed is not None:
                return SubtitleTrack.model_validate(parsed)
            return SubtitleTrack.model_validate_json(response.text or "")
        except PydanticValidationError as ex:
            raise SchemaValidationError(
                f"Response does not match the subtitle schema: {ex}",
                provider=config.provider,
                model=config.model,
                request_id=request_id,
                raw_response={"text": response.text, "errors": ex.errors()},
            ) from ex

    def _handle_error(
        self,
        config: CaptionConfig,
        request_id: str,
        ex: Exception,
    ) -> CaptionGeminiException:
        """Map errors raised by google-genai or httpx onto our exceptions."""
        if isinstance(ex, CaptionGeminiException):
            return ex

        # Media download answered with 4xx/5xx
        if isinstance(ex, httpx.HTTPStatusError):
            return HTTPError(
                f"Media download failed: {ex}",
                provider=config.provider,
                model=config.model,
                request_id=request_id,
                raw_response={
                    "url": str(ex.request.url),
                    "status_code": ex.response.status_code,
                },
                status_code=ex.response.status_code,
            )

        if isinstance(ex, (httpx.InvalidURL, httpx.UnsupportedProtocol)):
            return ValidationError(
                f"Invalid media URL: {ex}",
                provider=config.provider,
                model=config.model,
                request_id=request_id,
                raw_response={"error": str(ex)},
            )

        if isinstance(ex, httpx.TimeoutException):
            return TimeoutError(
                f"Request timed out: {ex}",
                provider=config.provider,
                model=config.model,
                request_id=request_id,
                raw_response={"error": str(ex)},
            )

        if isinstance(ex, (httpx.ConnectError, httpx.NetworkError)):
            return HTTPConnectionError(
                f"Connection error: {ex}",
                provider=config.provider,
                model=config.model,
                request_id=request_id,
                raw_response={"error": str(ex)},
            )

        # ClientError (4xx) and ServerError (5xx)
        if isinstance(ex, APIError):
            error_code = ex.code
            error_message: str = ex.message or str(ex)
            raw_response: AnyDict = {
                "status_code": error_code,
                "message": error_message,
                "error_details": cast(AnyDict, ex.details or {}),
                "error_type": ex.status,
            }

            if error_code in (400, 422):
                return ValidationError(
                    error_message,
                    provider=config.provider,
                    model=config.model,
                    request_id=request_id,
                    raw_response=raw_response,
                )

            if error_code == 403:
                return ContentModerationError(
                    error_message,
                    provider=config.provider,
                    model=config.model,
                    request_id=request_id,
                    raw_response=raw_response,
                )

            return HTTPError(
                error_message,
                provider=config.provider,
                model=config.model,
                request_id=request_id,
                raw_response=raw_response,
                status_code=error_code,
            )

        log_error(
            f"Gemini unknown error: {ex}",
            context={
                "provider": config.provider,
                "model": config.model,
                "request_id": request_id,
                "error_type": type(ex).__name__,
            },
            logger_name=_LOGGER_NAME,
            exc_info=True,
        )
        return GenerationFailedError(
            f"Error while generating caption: {ex}",
            provider=config.provider,
            model=config.model,
            request_id=request_id,
            raw_response={
                "error": str(ex),
                "error_type": type(ex).__name__,
                "traceback": traceback.format_exc(),
            },
        )

    @handle_caption_errors
    async def generate_caption_async(
        self,
        config: CaptionConfig,
        request: CaptionRequest,
    ) -> CaptionResult:
        """Generate a caption asynchronously.

        Args:
            config: Provider configuration (model, API key)
            request: Prompt, media reference and output mode

        Returns:
            ``SubtitleTrack`` in structured mode, ``TextCaption`` otherwise
        """
        request_id = f"google-caption-{uuid.uuid4()}"
        logger = ProviderLogger(config.provider, config.model, _LOGGER_NAME)
        logger = logger.with_request_id(request_id)

        logger.debug(
            "Starting caption API call",
            {"media": request.media, "structured": request.structured},
        )

        try:
            client = self._create_client(config, request_id).aio
            media = await self._load_media_part_async(request, logger)
            kwargs = self._build_content_kwargs(config, request, media)
            response: GenerateContentResponse = await client.models.generate_content(
                **kwargs
            )
            result = self._convert_response(config, request, request_id, response)
        except CaptionGeminiException:
            raise
        except Exception as ex:
            raise self._handle_error(config, request_id, ex) from ex

        logger.info("Caption generated", {"result": result}, redact=True)
        return result

    @handle_caption_errors
    def generate_caption(
        self,
        config: CaptionConfig,
        request: CaptionRequest,
    ) -> CaptionResult:
        """Generate a caption synchronously.

        Args:
            config: Provider configuration (model, API key)
            request: Prompt, media reference and output mode

        Returns:
            ``SubtitleTrack`` in structured mode, ``TextCaption`` otherwise
        """
        request_id = f"google-caption-{uuid.uuid4()}"
        logger = ProviderLogger(config.provider, config.model, _LOGGER_NAME)
        logger = logger.with_request_id(request_id)

        logger.debug(
            "Starting caption API call",
            {"media": request.media, "structured": request.structured},
        )

        try:
            client = self._create_client(config, request_id)
            media = self._load_media_part(request, logger)
            kwargs = self._build_content_kwargs(config, request, media)
            response: GenerateContentResponse = client.models.generate_content(
                **kwargs
            )
            result = self._convert_response(config, request, request_id, response)
        except CaptionGeminiException:
            raise
        except Exception as ex:
            raise self._handle_error(config, request_id, ex) from ex

        logger.info("Caption generated", {"result": result}, redact=True)
        return result
