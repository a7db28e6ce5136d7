"""
Meme Agent Supervisor Service.

Wires the three agents together:
1. Emotion agent - turns the user's feeling into a 1-line summary
2. Meme agent - picks an Imgflip template and calls the generate_meme tool
3. Supervisor - calls the other two as tools and reports both results

Everything is built once, in order, when the service is constructed.
"""

import logging
import re
from typing import Optional, Tuple

from fastapi import Request
from openai import AsyncOpenAI

from meme_agent.config import Settings, get_settings
from meme_agent.prompts import EMOTION_AGENT_PROMPT, MEME_AGENT_PROMPT, SUPERVISOR_PROMPT
from meme_agent.schemas.meme import MemeGenerateResponse
from meme_agent.services.agents import AgentConfigurationError, AgentTool, ChatAgent
from meme_agent.services.meme_tool import MemeToolClient
from meme_agent.services.url_sanitizer import sanitize_url

# Configure logging
logger = logging.getLogger(__name__)

URL_IN_REPLY_PATTERN = re.compile(r"https?://[^\s)]+")
SUMMARY_PATTERN = re.compile(r"Emotion Summary:\s*(.+?)(?:\n|Meme URL:|$)", re.IGNORECASE)
MEME_URL_LABEL_PATTERN = re.compile(r"^Meme URL:", re.IGNORECASE)

DEFAULT_SUMMARY = "Emotion analyzed"
NO_EMOTION_REPLY = "Unable to analyze emotion"
NO_MEME_REPLY = "Unable to generate meme"

_TEXT_BOX = {"type": "string"}

GENERATE_MEME_PARAMETERS = {
    "type": "object",
    "properties": {
        "template_id": {
            "type": "string",
            "description": "The ID of the meme template to use (e.g., '181913649' for Drake)",
        },
        "text0": {**_TEXT_BOX, "description": "Text for the first text box (usually top text)"},
        "text1": {**_TEXT_BOX, "description": "Text for the second text box (usually bottom text)"},
        "text2": {**_TEXT_BOX, "description": "Text for the third text box (if template supports it)"},
        "text3": {**_TEXT_BOX, "description": "Text for the fourth text box (if template supports it)"},
        "text4": {**_TEXT_BOX, "description": "Text for the fifth text box (if template supports it)"},
    },
    "required": ["template_id", "text0"],
}


def parse_supervisor_reply(reply: str) -> Tuple[str, Optional[str]]:
    """
    Split the supervisor's final answer into (summary, meme_url).

    The supervisor is asked for "Emotion Summary: ...\\nMeme URL: ...", but
    models drift, so each field falls back to a looser heuristic.
    """
    meme_url = None
    url_match = URL_IN_REPLY_PATTERN.search(reply)
    if url_match:
        meme_url = sanitize_url(url_match.group(0)) or None

    summary_match = SUMMARY_PATTERN.search(reply)
    if summary_match:
        summary = summary_match.group(1).strip()
    else:
        lines = [
            line.strip()
            for line in reply.split("\n")
            if line.strip()
            and not URL_IN_REPLY_PATTERN.search(line)
            and not MEME_URL_LABEL_PATTERN.match(line.strip())
        ]
        summary = lines[0] if lines else ""

    return summary or DEFAULT_SUMMARY, meme_url


class MemeAgentService:
    """
    Service that owns the OpenAI client, the meme tool client and the agents.

    The OpenAI client is created on first use so the service can be built
    (and the app can start) before OPENAI_API_KEY is configured.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[AsyncOpenAI] = None,
        meme_tool: Optional[MemeToolClient] = None,
    ):
        self.settings = settings or get_settings()
        self._client = client
        self.meme_tool = meme_tool or MemeToolClient(self.settings)

        self.emotion_agent = self._build_emotion_agent()
        self.meme_agent = self._build_meme_agent()
        self.supervisor = self._build_supervisor()

    def _get_client(self) -> AsyncOpenAI:
        """Lazy-initialize the OpenAI client."""
        if self._client is not None:
            return self._client
        if not self.settings.OPENAI_API_KEY:
            raise AgentConfigurationError("OPENAI_API_KEY is not configured.")
        self._client = AsyncOpenAI(
            api_key=self.settings.OPENAI_API_KEY,
            timeout=self.settings.OPENAI_TIMEOUT,
        )
        return self._client

    def _agent(self, name: str, prompt: str, temperature: float, tools=None) -> ChatAgent:
        return ChatAgent(
            name=name,
            get_client=self._get_client,
            model=self.settings.OPENAI_MODEL,
            system_prompt=prompt,
            temperature=temperature,
            tools=tools,
            max_turns=self.settings.AGENT_MAX_TURNS,
        )

    def _build_emotion_agent(self) -> ChatAgent:
        return self._agent("emotion_agent", EMOTION_AGENT_PROMPT, self.settings.EMOTION_TEMPERATURE)

    def _build_meme_agent(self) -> ChatAgent:
        generate_meme = AgentTool(
            name="generate_meme",
            description="Generate a meme from Imgflip using a specific template ID and custom text",
            handler=self.meme_tool.generate_meme,
            parameters=GENERATE_MEME_PARAMETERS,
        )
        return self._agent(
            "meme_agent", MEME_AGENT_PROMPT, self.settings.MEME_TEMPERATURE, tools=[generate_meme]
        )

    def _build_supervisor(self) -> ChatAgent:
        analyze_emotion = AgentTool(
            name="analyze_emotion",
            description=(
                "Analyze user input to determine the underlying emotion "
                "and generate a 1-line summary."
            ),
            handler=self.analyze_emotion,
            parameters={
                "type": "object",
                "properties": {
                    "userInput": {
                        "type": "string",
                        "description": "The user's input describing their feelings or emotions",
                    }
                },
                "required": ["userInput"],
            },
        )
        generate_meme_from_summary = AgentTool(
            name="generate_meme_from_summary",
            description=(
                "Generate a meme based on an emotion summary. Takes a 1-line "
                "emotion summary and creates an appropriate meme."
            ),
            handler=self.generate_meme_from_summary,
            parameters={
                "type": "object",
                "properties": {
                    "summary": {
                        "type": "string",
                        "description": "The 1-line emotion summary to base the meme on",
                    }
                },
                "required": ["summary"],
            },
        )
        return self._agent(
            "supervisor",
            SUPERVISOR_PROMPT,
            self.settings.SUPERVISOR_TEMPERATURE,
            tools=[analyze_emotion, generate_meme_from_summary],
        )

    async def analyze_emotion(self, userInput: str) -> str:
        reply = await self.emotion_agent.run(userInput)
        return reply or NO_EMOTION_REPLY

    async def generate_meme_from_summary(self, summary: str) -> str:
        reply = await self.meme_agent.run(
            f"Generate a meme for this emotion summary: {summary}"
        )
        return reply or NO_MEME_REPLY

    async def generate(self, feeling: str) -> MemeGenerateResponse:
        """
        Run the full pipeline for one feeling.

        Raises:
            AgentError: On configuration problems or runaway agents
            openai.OpenAIError: On OpenAI API failures
        """
        logger.info(f"Running supervisor for feeling ({len(feeling)} chars)")
        reply = await self.supervisor.run(feeling)
        summary, meme_url = parse_supervisor_reply(reply)

        logger.info(f"Supervisor finished: summary={summary[:50]!r}, has_url={bool(meme_url)}")
        return MemeGenerateResponse(summary=summary, meme_url=meme_url, full_response=reply)


# Dependency for the routes; the instance is built in the app lifespan
def get_meme_agent_service(request: Request) -> MemeAgentService:
    """Get the MemeAgentService created at startup."""
    return request.app.state.meme_agent_service
