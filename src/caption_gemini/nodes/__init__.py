"""Node types shipped with caption-gemini."""

from caption_gemini.nodes.caption_gemini import CaptionGemini

__all__ = ["CaptionGemini"]
