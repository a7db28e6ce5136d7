"""
Meme generation schemas.

This module contains all Pydantic models for request/response validation
across the caption tool server and the agent supervisor.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# SUPERVISOR REQUEST/RESPONSE SCHEMAS
# =============================================================================

class MemeGenerateRequest(BaseModel):
    """
    Request schema for the supervisor's generate-meme endpoint.

    The caller describes how they feel; the supervisor turns that into an
    emotion summary and a meme.
    """

    feeling: str = Field(
        ...,
        description="Free-text description of the user's feelings",
        examples=["I'm so stressed about my exam tomorrow"],
    )

    @field_validator("feeling", mode="before")
    @classmethod
    def validate_feeling(cls, v):
        """Reject non-string and blank values instead of coercing them."""
        if not isinstance(v, str):
            raise ValueError("Please provide a 'feeling' field with a string value")
        v = v.strip()
        if not v:
            raise ValueError("Please provide a 'feeling' field with a string value")
        return v


class MemeGenerateResponse(BaseModel):
    """Supervisor result: the emotion summary and the meme it picked."""

    summary: str = Field(..., description="One-line emotion summary")
    meme_url: Optional[str] = Field(
        None,
        description="Sanitized URL of the generated meme, or null if none was found",
    )
    full_response: str = Field(..., description="The supervisor's raw final answer")


# =============================================================================
# IMGFLIP API SCHEMAS
# =============================================================================

class CaptionImageRequest(BaseModel):
    """
    Arguments of the generate_meme tool, forwarded to Imgflip's caption_image.

    text1..text4 are only sent when non-empty.
    """

    username: str = Field(..., description="Imgflip username")
    password: str = Field(..., description="Imgflip password")
    template_id: str = Field(
        ...,
        description="The ID of the meme template to use (e.g., '181913649' for Drake)",
    )
    text0: str = Field(..., description="Text for the first text box (usually top text)")
    text1: Optional[str] = Field(None, description="Text for the second text box (usually bottom text)")
    text2: Optional[str] = Field(None, description="Text for the third text box (if template supports it)")
    text3: Optional[str] = Field(None, description="Text for the fourth text box (if template supports it)")
    text4: Optional[str] = Field(None, description="Text for the fifth text box (if template supports it)")

    def to_form_data(self) -> dict[str, str]:
        """Build the form-encoded body Imgflip expects."""
        form = {
            "template_id": self.template_id,
            "username": self.username,
            "password": self.password,
            "text0": self.text0,
        }
        for key in ("text1", "text2", "text3", "text4"):
            value = getattr(self, key)
            if value:
                form[key] = value
        return form


class ImgflipCaptionData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: Optional[str] = None
    page_url: Optional[str] = None


class ImgflipCaptionResponse(BaseModel):
    """
    Response body of https://api.imgflip.com/caption_image.

    {"success": true, "data": {"url": "...", "page_url": "..."}}
    or
    {"success": false, "error_message": "..."}
    """

    model_config = ConfigDict(extra="ignore")

    success: bool = False
    data: Optional[ImgflipCaptionData] = None
    error_message: Optional[str] = None

    @property
    def raw_url(self) -> str:
        """The unsanitized data.url field, or "" when absent."""
        return (self.data.url if self.data else None) or ""


class MemeToolResult(BaseModel):
    """Structured output of the generate_meme tool."""

    meme_url: str = Field(..., description="The URL of the generated meme")


# =============================================================================
# ERROR RESPONSE SCHEMA
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str = Field(..., description="Error type/code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[dict] = Field(None, description="Additional error details")
