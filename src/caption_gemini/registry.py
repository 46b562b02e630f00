"""Node and credential type registry."""

from typing import Any

from caption_gemini.credentials import ExampleCredentialsApi
from caption_gemini.exceptions import ValidationError
from caption_gemini.logging import log_debug, log_error, log_info
from caption_gemini.nodes import CaptionGemini

_LOGGER_NAME = "caption_gemini.registry"

# Registered classes by type name
_NODE_TYPES: dict[str, type[Any]] = {}
_CREDENTIAL_TYPES: dict[str, type[Any]] = {}


def register_node(node_type: type[Any]) -> None:
    """Register a node type under the name in its description.

    Args:
        node_type: Node class with a ``description`` attribute

    Examples:
        >>> from caption_gemini.models import NodeTypeDescription
        >>> class EchoNode:
        ...     description = NodeTypeDescription(display_name="Echo", name="echo")
        ...     async def execute(self, context):
        ...         return [context.get_input_data()]
        >>> register_node(EchoNode)
    """
    name = node_type.description.name
    if name in _NODE_TYPES:
        log_info(
            f"Overwriting existing node type: {name}",
            context={"node": name},
            logger_name=_LOGGER_NAME,
        )
    _NODE_TYPES[name] = node_type
    log_debug("Registered node type", context={"node": name}, logger_name=_LOGGER_NAME)


def register_credential(credential_type: type[Any]) -> None:
    """Register a credential type under the name in its description."""
    name = credential_type.description.name
    if name in _CREDENTIAL_TYPES:
        log_info(
            f"Overwriting existing credential type: {name}",
            context={"credential": name},
            logger_name=_LOGGER_NAME,
        )
    _CREDENTIAL_TYPES[name] = credential_type
    log_debug(
        "Registered credential type",
        context={"credential": name},
        logger_name=_LOGGER_NAME,
    )


def get_node_type(name: str) -> type[Any]:
    """Look up a registered node type.

    Raises:
        ValidationError: If no node type is registered under ``name``
    """
    if name not in _NODE_TYPES:
        log_error("Unknown node type", context={"node": name}, logger_name=_LOGGER_NAME)
        raise ValidationError(f"Unknown node type: {name}")
    return _NODE_TYPES[name]


def get_credential_type(name: str) -> type[Any]:
    """Look up a registered credential type.

    Raises:
        ValidationError: If no credential type is registered under ``name``
    """
    if name not in _CREDENTIAL_TYPES:
        log_error(
            "Unknown credential type",
            context={"credential": name},
            logger_name=_LOGGER_NAME,
        )
        raise ValidationError(f"Unknown credential type: {name}")
    return _CREDENTIAL_TYPES[name]


def list_node_types() -> list[str]:
    return sorted(_NODE_TYPES)


def list_credential_types() -> list[str]:
    return sorted(_CREDENTIAL_TYPES)


register_node(CaptionGemini)
register_credential(ExampleCredentialsApi)
