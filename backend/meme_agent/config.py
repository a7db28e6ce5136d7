"""
Configuration module for the Meme Agent services.

This module handles all environment variable loading and configuration settings
for both the Imgflip caption tool server and the agent supervisor.
All external dependencies (API URLs, credentials, model names) are configured here.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All sensitive values and external endpoints should be configured
    via environment variables or a .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ==========================================================================
    # APPLICATION SETTINGS
    # ==========================================================================

    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"

    # Each service picks its own default port when PORT is unset
    # (3000 for the tool server, 3001 for the supervisor).
    PORT: Optional[int] = None

    # Comma-separated list, e.g. "https://your-frontend.com,https://www.your-frontend.com"
    CORS_ORIGINS: str = "*"

    # ==========================================================================
    # IMGFLIP SETTINGS
    # ==========================================================================

    IMGFLIP_CAPTION_IMAGE_URL: str = "https://api.imgflip.com/caption_image"
    IMGFLIP_TIMEOUT: int = 30

    # Credentials the supervisor injects into every generate_meme tool call.
    # The tool server itself never reads these: callers pass them through.
    IMGFLIP_USERNAME: Optional[str] = None
    IMGFLIP_PASSWORD: Optional[str] = None

    # ==========================================================================
    # MCP TOOL SERVER SETTINGS
    # ==========================================================================

    MCP_SERVER_URL: str = "https://imgflip-meme-mcp.vercel.app/mcp"
    MCP_TIMEOUT: int = 60

    # ==========================================================================
    # OPENAI SETTINGS
    # ==========================================================================

    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_TIMEOUT: int = 120

    SUPERVISOR_TEMPERATURE: float = 0.7
    EMOTION_TEMPERATURE: float = 0.7
    MEME_TEMPERATURE: float = 0.9

    # Upper bound on model round-trips per agent run
    AGENT_MAX_TURNS: int = 8

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS string into a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    def missing_agent_settings(self) -> list[str]:
        """Names of settings the supervisor cannot run without."""
        required = {
            "OPENAI_API_KEY": self.OPENAI_API_KEY,
            "IMGFLIP_USERNAME": self.IMGFLIP_USERNAME,
            "IMGFLIP_PASSWORD": self.IMGFLIP_PASSWORD,
        }
        return [name for name, value in required.items() if not value]


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once
    and reused across the application.

    Returns:
        Settings: The application settings instance
    """
    return Settings()
