"""
Meme tool client.

Calls the generate_meme tool on the Imgflip MCP server over streamable HTTP.
Imgflip credentials are injected here, server-side, so the language model
never sees them, and they are redacted from every log line.
"""

import json
import logging
import re
from datetime import timedelta
from typing import Any, Optional

from mcp import ClientSession
from mcp.client.streamable_http import streamablehttp_client
from mcp.types import CallToolResult

from meme_agent.config import Settings, get_settings
from meme_agent.services.agents import ToolAbortError
from meme_agent.services.url_sanitizer import sanitize_url

# Configure logging
logger = logging.getLogger(__name__)

URL_IN_TEXT_PATTERN = re.compile(r"https?://[^\s)]+")
REDACTED = "[REDACTED]"


class MemeToolError(ToolAbortError):
    """
    Raised when the meme tool cannot be reached or reports a failure.

    Aborts the agent run, so the caller sees the failure instead of a reply
    without a meme.
    """
    pass


class MemeToolClient:
    """
    Client for the generate_meme MCP tool.

    Each call opens a short-lived MCP session: the server runs stateless, so
    there is nothing to keep alive between calls.
    """

    TOOL_NAME = "generate_meme"
    TEXT_FIELDS = ("text0", "text1", "text2", "text3", "text4")

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def _with_credentials(self, arguments: dict[str, Any]) -> dict[str, Any]:
        if not self.settings.IMGFLIP_USERNAME or not self.settings.IMGFLIP_PASSWORD:
            raise MemeToolError(
                "IMGFLIP_USERNAME and IMGFLIP_PASSWORD environment variables are required"
            )
        return {
            **arguments,
            "username": self.settings.IMGFLIP_USERNAME,
            "password": self.settings.IMGFLIP_PASSWORD,
        }

    @staticmethod
    def redact(arguments: dict[str, Any]) -> dict[str, Any]:
        """Copy of the tool arguments that is safe to log."""
        return {
            key: (REDACTED if key in ("username", "password") else value)
            for key, value in arguments.items()
        }

    @staticmethod
    def _text_content(result: CallToolResult) -> list[str]:
        return [
            item.text
            for item in result.content or []
            if getattr(item, "type", None) == "text" and getattr(item, "text", None)
        ]

    @classmethod
    def extract_meme_url(cls, result: CallToolResult) -> str:
        """
        Pull the meme URL out of a tool result.

        Lookup order: structured meme_url, then the first URL in any text
        content. If neither is present the whole result is returned as JSON
        so the agent can still see what the tool said.
        """
        structured = result.structuredContent or {}
        if structured.get("meme_url"):
            logger.info(f"Found meme_url in structuredContent: {structured['meme_url']}")
            return sanitize_url(structured["meme_url"])

        for text in cls._text_content(result):
            match = URL_IN_TEXT_PATTERN.search(text)
            if match:
                logger.info(f"Extracted URL from content: {match.group(0)}")
                return sanitize_url(match.group(0))

        return json.dumps(result.model_dump(mode="json", exclude_none=True))

    async def call_tool(self, arguments: dict[str, Any]) -> CallToolResult:
        """
        Open an MCP session and call generate_meme once.

        Raises:
            MemeToolError: If the MCP server cannot be reached
        """
        timeout = timedelta(seconds=self.settings.MCP_TIMEOUT)
        try:
            async with streamablehttp_client(
                self.settings.MCP_SERVER_URL, timeout=timeout
            ) as (read_stream, write_stream, _):
                async with ClientSession(
                    read_stream, write_stream, read_timeout_seconds=timeout
                ) as session:
                    await session.initialize()
                    return await session.call_tool(self.TOOL_NAME, arguments)
        except Exception as e:
            # Transport failures surface as httpx errors or anyio exception groups
            logger.error(f"Failed to call {self.TOOL_NAME} on {self.settings.MCP_SERVER_URL}: {e}")
            raise MemeToolError(
                f"Failed to call meme tool at {self.settings.MCP_SERVER_URL}: {e}"
            ) from e

    async def generate_meme(self, template_id: str, text0: str, **texts: Optional[str]) -> str:
        """
        Generate a meme and return its URL.

        Args:
            template_id: Imgflip template ID
            text0: Top text
            **texts: Optional text1..text4

        Returns:
            The sanitized meme URL (or the raw result as JSON if no URL was found)

        Raises:
            MemeToolError: On missing credentials, transport failure or tool error
        """
        arguments: dict[str, Any] = {"template_id": str(template_id), "text0": text0}
        for key in self.TEXT_FIELDS[1:]:
            if texts.get(key):
                arguments[key] = texts[key]

        tool_arguments = self._with_credentials(arguments)
        logger.info(f"Calling MCP tool with: {self.redact(tool_arguments)}")

        result = await self.call_tool(tool_arguments)
        logger.debug(f"MCP tool result: {result.model_dump(mode='json', exclude_none=True)}")

        if result.isError:
            message = " ".join(self._text_content(result)) or "Meme tool reported an error"
            logger.error(f"MCP tool returned error: {message}")
            raise MemeToolError(message)

        return self.extract_meme_url(result)
