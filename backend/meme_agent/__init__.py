"""Meme Agent: an Imgflip MCP tool server and an LLM supervisor that calls it."""

__version__ = "1.0.0"
