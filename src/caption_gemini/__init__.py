"""Caption Gemini - workflow nodes that caption media with Google Gemini."""

import importlib.metadata

try:
    __version__ = importlib.metadata.version("caption-gemini-nodes")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.1.0"

from .credentials import ExampleCredentialsApi
from .exceptions import (
    CaptionGeminiException,
    ContentModerationError,
    GenerationFailedError,
    HTTPConnectionError,
    HTTPError,
    NodeOperationError,
    SchemaValidationError,
    TimeoutError,
    ValidationError,
)
from .host import ExecuteContext, NodeExecutionContext
from .models import (
    CaptionConfig,
    CaptionNodeParameters,
    CaptionRequest,
    CaptionResult,
    CustomPromptMode,
    DefaultPromptMode,
    NodeItem,
    PairedItem,
    Subtitle,
    SubtitleTrack,
    TextCaption,
)
from .nodes import CaptionGemini
from .providers import GoogleCaptionHandler
from .registry import (
    get_credential_type,
    get_node_type,
    list_credential_types,
    list_node_types,
    register_credential,
    register_node,
)

__all__ = [
    # Node and credential types
    "CaptionGemini",
    "ExampleCredentialsApi",
    # Registry
    "register_node",
    "register_credential",
    "get_node_type",
    "get_credential_type",
    "list_node_types",
    "list_credential_types",
    # Host
    "ExecuteContext",
    "NodeExecutionContext",
    # Provider
    "GoogleCaptionHandler",
    # Models
    "CaptionConfig",
    "CaptionNodeParameters",
    "CaptionRequest",
    "CaptionResult",
    "CustomPromptMode",
    "DefaultPromptMode",
    "NodeItem",
    "PairedItem",
    "Subtitle",
    "SubtitleTrack",
    "TextCaption",
    # Exceptions
    "CaptionGeminiException",
    "ValidationError",
    "ContentModerationError",
    "HTTPError",
    "HTTPConnectionError",
    "TimeoutError",
    "GenerationFailedError",
    "SchemaValidationError",
    "NodeOperationError",
]
