"""Shared fixtures: explicit settings so tests never depend on the real environment."""

from types import SimpleNamespace

import pytest

from meme_agent.config import Settings


def make_settings(**overrides) -> Settings:
    values = {
        "OPENAI_API_KEY": "sk-test",
        "IMGFLIP_USERNAME": "imgflip-user",
        "IMGFLIP_PASSWORD": "imgflip-pass",
        "MCP_SERVER_URL": "http://tool-server.test/mcp",
        "IMGFLIP_CAPTION_IMAGE_URL": "https://imgflip.test/caption_image",
        "CORS_ORIGINS": "*",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture()
def settings() -> Settings:
    return make_settings()


def chat_response(content=None, tool_calls=None):
    """Shape of an openai ChatCompletion, reduced to what the agents read."""
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def tool_call(call_id: str, name: str, arguments: str):
    return SimpleNamespace(
        id=call_id,
        type="function",
        function=SimpleNamespace(name=name, arguments=arguments),
    )
