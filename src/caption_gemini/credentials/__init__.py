"""Credential types shipped with caption-gemini."""

from caption_gemini.credentials.example_credentials_api import ExampleCredentialsApi

__all__ = ["ExampleCredentialsApi"]
