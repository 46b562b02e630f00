"""Logging utilities for caption-gemini."""

import logging
from typing import Any

# Sensitive fields that should be sanitized in logs
_SENSITIVE_FIELDS = {
    "api_key",
    "apikey",
    "password",
    "token",
    "secret",
    "authorization",
    "auth",
    "credentials",
}

_DEFAULT_LOGGER = "caption_gemini"


def _redact_value(value: Any) -> Any:
    """Redact a value by replacing sensitive data with safe representations.

    Handles:
    - Bytes: Shows length instead of content
    - Dicts: Recursively processes each value
    - Lists/Tuples: Recursively processes each item
    - Pydantic models: Converts to dict first
    - Long strings: Truncates with ellipsis
    """
    if value is None or isinstance(value, (int, float, bool)):
        return value

    if isinstance(value, bytes):
        return f"<bytes: length={len(value)}>"

    if hasattr(value, "model_dump"):
        value = value.model_dump()

    if isinstance(value, dict):
        return _redact_context(value)

    if isinstance(value, (list, tuple)):
        redacted = [_redact_value(item) for item in value]
        return redacted if isinstance(value, list) else tuple(redacted)

    if isinstance(value, str) and len(value) > 100:
        return f"{value[:50]}...{value[-50:]}"

    return value


def _redact_context(context: dict[str, Any] | None) -> dict[str, Any]:
    """Redact sensitive fields in a context dictionary.

    Field names are matched case-insensitively against known secret names,
    so ``geminiApiKey`` and ``api_key`` are both hidden. Nested dicts are
    processed the same way.
    """
    if not context:
        return {}

    redacted: dict[str, Any] = {}
    for key, value in context.items():
        key_lower = str(key).lower()
        if any(sensitive in key_lower for sensitive in _SENSITIVE_FIELDS):
            redacted[key] = "***REDACTED***"
        else:
            redacted[key] = _redact_value(value)

    return redacted


def _get_logger(logger_name: str) -> logging.Logger:
    """Get or create a logger with the given name."""
    return logging.getLogger(logger_name)


def _format(message: str, context: dict[str, Any] | None, redact: bool) -> str:
    if not context:
        return message
    if redact:
        context = _redact_context(context)
    return f"{message} | Context: {context}"


def log_debug(
    message: str,
    context: dict[str, Any] | None = None,
    logger_name: str = _DEFAULT_LOGGER,
    redact: bool = False,
) -> None:
    """
    Log a debug message with optional context.

    Args:
        message: The log message
        context: Optional dictionary of context data
        logger_name: Name of the logger to use
        redact: If True, redact sensitive fields in context
    """
    _get_logger(logger_name).debug(_format(message, context, redact))


def log_info(
    message: str,
    context: dict[str, Any] | None = None,
    logger_name: str = _DEFAULT_LOGGER,
    redact: bool = False,
) -> None:
    """Log an info message with optional context."""
    _get_logger(logger_name).info(_format(message, context, redact))


def log_warning(
    message: str,
    context: dict[str, Any] | None = None,
    logger_name: str = _DEFAULT_LOGGER,
    redact: bool = False,
) -> None:
    """Log a warning message with optional context."""
    _get_logger(logger_name).warning(_format(message, context, redact))


def log_error(
    message: str,
    context: dict[str, Any] | None = None,
    logger_name: str = _DEFAULT_LOGGER,
    redact: bool = False,
    exc_info: bool = False,
) -> None:
    """
    Log an error message with optional context and exception info.

    Args:
        message: The log message
        context: Optional dictionary of context data
        logger_name: Name of the logger to use
        redact: If True, redact sensitive fields in context
        exc_info: If True, include exception traceback information
    """
    _get_logger(logger_name).error(
        _format(message, context, redact), exc_info=exc_info
    )


class ProviderLogger:
    """Logger bound to a provider, model and optional request ID.

    Every call merges the bound fields into the context passed to the
    module-level ``log_*`` helpers.

    Example:
        ```python
        logger = ProviderLogger("google", "gemini-1.5-flash-latest", __name__)
        logger = logger.with_request_id("google-caption-123")
        logger.info("Caption generated", {"subtitles": 12})
        ```
    """

    def __init__(
        self,
        provider: str,
        model: str,
        logger_name: str,
        request_id: str | None = None,
    ):
        self.provider = provider
        self.model = model
        self.logger_name = logger_name
        self.request_id = request_id

    def _build_context(self, extra: dict[str, Any] | None = None) -> dict[str, Any]:
        context: dict[str, Any] = {"provider": self.provider, "model": self.model}
        if self.request_id is not None:
            context["request_id"] = self.request_id
        if extra:
            context.update(extra)
        return context

    def with_request_id(self, request_id: str) -> "ProviderLogger":
        """Return a copy of this logger bound to ``request_id``."""
        return ProviderLogger(
            self.provider, self.model, self.logger_name, request_id=request_id
        )

    def debug(
        self, message: str, extra: dict[str, Any] | None = None, redact: bool = False
    ) -> None:
        log_debug(
            message,
            context=self._build_context(extra),
            logger_name=self.logger_name,
            redact=redact,
        )

    def info(
        self, message: str, extra: dict[str, Any] | None = None, redact: bool = False
    ) -> None:
        log_info(
            message,
            context=self._build_context(extra),
            logger_name=self.logger_name,
            redact=redact,
        )

    def warning(
        self, message: str, extra: dict[str, Any] | None = None, redact: bool = False
    ) -> None:
        log_warning(
            message,
            context=self._build_context(extra),
            logger_name=self.logger_name,
            redact=redact,
        )

    def error(
        self,
        message: str,
        extra: dict[str, Any] | None = None,
        redact: bool = False,
        exc_info: bool = False,
    ) -> None:
        log_error(
            message,
            context=self._build_context(extra),
            logger_name=self.logger_name,
            redact=redact,
            exc_info=exc_info,
        )
