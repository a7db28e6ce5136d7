# Schemas package - Pydantic models for request/response validation
from meme_agent.schemas.meme import (
    MemeGenerateRequest,
    MemeGenerateResponse,
    CaptionImageRequest,
    ImgflipCaptionResponse,
    MemeToolResult,
    ErrorResponse,
)

__all__ = [
    "MemeGenerateRequest",
    "MemeGenerateResponse",
    "CaptionImageRequest",
    "ImgflipCaptionResponse",
    "MemeToolResult",
    "ErrorResponse",
]
