from caption_gemini.nodes.caption_gemini.node import (
    CAPTION_GEMINI_DESCRIPTION,
    CaptionGemini,
    resolve_parameters,
)

__all__ = ["CAPTION_GEMINI_DESCRIPTION", "CaptionGemini", "resolve_parameters"]
