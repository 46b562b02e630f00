"""Tests for node and credential type registration."""

import pytest

from caption_gemini.credentials import ExampleCredentialsApi
from caption_gemini.exceptions import ValidationError
from caption_gemini.models import CredentialTypeDescription, NodeTypeDescription
from caption_gemini.nodes import CaptionGemini
from caption_gemini.registry import (
    _CREDENTIAL_TYPES,
    _NODE_TYPES,
    get_credential_type,
    get_node_type,
    list_credential_types,
    list_node_types,
    register_credential,
    register_node,
)


def test_builtin_types_registered():
    assert get_node_type("CaptionGemini") is CaptionGemini
    assert get_credential_type("exampleCredentialsApi") is ExampleCredentialsApi
    assert "CaptionGemini" in list_node_types()
    assert "exampleCredentialsApi" in list_credential_types()


def test_unknown_node_type_raises():
    with pytest.raises(ValidationError, match="Unknown node type: Missing"):
        get_node_type("Missing")


def test_unknown_credential_type_raises():
    with pytest.raises(ValidationError):
        get_credential_type("missingApi")


def test_register_custom_node():
    class EchoNode:
        description = NodeTypeDescription(display_name="Echo", name="echoTest")

        async def execute(self, context):
            return [context.get_input_data()]

    register_node(EchoNode)
    try:
        assert get_node_type("echoTest") is EchoNode
    finally:
        _NODE_TYPES.pop("echoTest", None)


def test_example_credentials_description_on_registered_class():
    """The registry stores classes, so the description is readable without an instance."""
    description = get_credential_type("exampleCredentialsApi").description

    assert description.to_dict() == {
        "name": "exampleCredentialsApi",
        "displayName": "Example Credentials API",
        "properties": [],
    }


def test_register_custom_credential_uses_description_name():
    class TokenApi:
        description = CredentialTypeDescription(name="tokenTestApi", display_name="Token")

    register_credential(TokenApi)
    try:
        assert get_credential_type("tokenTestApi") is TokenApi
    finally:
        _CREDENTIAL_TYPES.pop("tokenTestApi", None)
