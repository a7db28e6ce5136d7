# Services package - External API integrations and agents
from meme_agent.services.imgflip import ImgflipService
from meme_agent.services.meme_tool import MemeToolClient
from meme_agent.services.supervisor import MemeAgentService
from meme_agent.services.url_sanitizer import sanitize_url

__all__ = [
    "ImgflipService",
    "MemeToolClient",
    "MemeAgentService",
    "sanitize_url",
]
