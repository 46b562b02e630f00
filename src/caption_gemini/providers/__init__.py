"""Caption provider handlers."""

from caption_gemini.providers.google import GoogleCaptionHandler

__all__ = ["GoogleCaptionHandler"]
