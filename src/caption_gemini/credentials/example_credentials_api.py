"""Example credential type with no properties of its own."""

from caption_gemini.models import CredentialTypeDescription


class ExampleCredentialsApi:
    """Credential type stored and tested by the host.

    Declares no properties; the host's credential store holds whatever the
    user saves. Not used directly by any node in this package, but generic
    HTTP nodes can reference it by name.
    """

    name = "exampleCredentialsApi"
    display_name = "Example Credentials API"
    description = CredentialTypeDescription(
        name=name,
        display_name=display_name,
        properties=[],
    )
