"""
Tool-calling chat agents on the OpenAI Chat Completions API.

A ChatAgent sends its system prompt plus the user input, executes whatever
tool calls the model asks for, feeds the results back, and repeats until the
model answers in plain text.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional

import openai
from openai import AsyncOpenAI

# Configure logging
logger = logging.getLogger(__name__)


class AgentError(Exception):
    """Base exception for agent failures."""
    pass


class AgentConfigurationError(AgentError):
    """Raised when an agent cannot be built from the current settings."""
    pass


class AgentTurnLimitError(AgentError):
    """Raised when the model keeps calling tools past the turn limit."""
    pass


class ToolAbortError(Exception):
    """Raised by a tool handler when the whole run must stop, not just the call."""
    pass


@dataclass
class AgentTool:
    """A function the model may call, described by a JSON schema."""

    name: str
    description: str
    handler: Callable[..., Awaitable[str]]
    parameters: dict[str, Any] = field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )

    def to_openai(self) -> dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


class ChatAgent:
    """
    Minimal agent loop.

    Tool failures (bad arguments, unknown tools, exceptions raised by a
    handler) are reported back to the model as text so it can recover.
    OpenAI API errors and ToolAbortError are not: they abort the run.
    """

    def __init__(
        self,
        name: str,
        get_client: Callable[[], AsyncOpenAI],
        model: str,
        system_prompt: str,
        temperature: float,
        tools: Optional[list[AgentTool]] = None,
        max_turns: int = 8,
    ):
        self.name = name
        self.get_client = get_client
        self.model = model
        self.system_prompt = system_prompt
        self.temperature = temperature
        self.tools = {tool.name: tool for tool in tools or []}
        self.max_turns = max_turns

    def _request_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {
            "model": self.model,
            "temperature": self.temperature,
        }
        if self.tools:
            params["tools"] = [tool.to_openai() for tool in self.tools.values()]
        return params

    async def _call_tool(self, tool_call: Any) -> str:
        name = tool_call.function.name
        tool = self.tools.get(name)
        if tool is None:
            logger.warning(f"[{self.name}] model requested unknown tool {name!r}")
            return f"Error: unknown tool {name!r}"

        try:
            arguments = json.loads(tool_call.function.arguments or "{}")
        except json.JSONDecodeError as e:
            logger.warning(f"[{self.name}] invalid arguments for {name}: {e}")
            return f"Error: invalid JSON arguments for {name}: {e}"

        if not isinstance(arguments, dict):
            return f"Error: arguments for {name} must be a JSON object"

        logger.info(f"[{self.name}] calling tool {name}")
        try:
            result = await tool.handler(**arguments)
        except (openai.OpenAIError, ToolAbortError):
            raise
        except Exception as e:
            logger.error(f"[{self.name}] tool {name} failed: {e}", exc_info=True)
            return f"Error: {name} failed: {e}"

        return result if isinstance(result, str) else json.dumps(result)

    async def run(self, user_input: str) -> str:
        """
        Run the agent to completion.

        Args:
            user_input: The user message

        Returns:
            The model's final text answer ("" if it gave none)

        Raises:
            AgentTurnLimitError: If max_turns is reached without a final answer
            openai.OpenAIError: On API failures
            ToolAbortError: If a tool handler aborts the run
        """
        client = self.get_client()
        params = self._request_params()
        messages: list[dict[str, Any]] = [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": user_input},
        ]

        for turn in range(self.max_turns):
            response = await client.chat.completions.create(messages=messages, **params)
            message = response.choices[0].message

            if not message.tool_calls:
                logger.info(f"[{self.name}] finished after {turn + 1} turn(s)")
                return (message.content or "").strip()

            messages.append(
                {
                    "role": "assistant",
                    "content": message.content,
                    "tool_calls": [
                        {
                            "id": tc.id,
                            "type": "function",
                            "function": {
                                "name": tc.function.name,
                                "arguments": tc.function.arguments,
                            },
                        }
                        for tc in message.tool_calls
                    ],
                }
            )
            for tc in message.tool_calls:
                result = await self._call_tool(tc)
                messages.append({"role": "tool", "tool_call_id": tc.id, "content": result})

        raise AgentTurnLimitError(
            f"Agent {self.name} did not finish within {self.max_turns} turns"
        )
