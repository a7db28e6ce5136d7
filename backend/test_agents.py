from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from conftest import chat_response, tool_call
from meme_agent.services.agents import AgentTool, AgentTurnLimitError, ChatAgent, ToolAbortError


def make_agent(responses, tools=None, max_turns=4):
    client = MagicMock()
    client.chat.completions.create = AsyncMock(side_effect=responses)
    agent = ChatAgent(
        name="test_agent",
        get_client=lambda: client,
        model="gpt-4o-mini",
        system_prompt="You are a test.",
        temperature=0.5,
        tools=tools,
        max_turns=max_turns,
    )
    return agent, client


def echo_tool(handler=None):
    return AgentTool(
        name="echo",
        description="Echo the input back",
        handler=handler or AsyncMock(side_effect=lambda text: f"echo: {text}"),
        parameters={
            "type": "object",
            "properties": {"text": {"type": "string"}},
            "required": ["text"],
        },
    )


async def test_plain_answer_without_tools():
    agent, client = make_agent([chat_response("  Feeling great  ")])

    assert await agent.run("hello") == "Feeling great"

    kwargs = client.chat.completions.create.await_args.kwargs
    assert kwargs["model"] == "gpt-4o-mini"
    assert kwargs["temperature"] == 0.5
    assert "tools" not in kwargs
    assert kwargs["messages"][:2] == [
        {"role": "system", "content": "You are a test."},
        {"role": "user", "content": "hello"},
    ]


async def test_empty_answer_becomes_empty_string():
    agent, _ = make_agent([chat_response(None)])

    assert await agent.run("hello") == ""


async def test_tool_call_result_is_fed_back():
    tool = echo_tool()
    agent, client = make_agent(
        [
            chat_response(tool_calls=[tool_call("call_1", "echo", '{"text": "ping"}')]),
            chat_response("done"),
        ],
        tools=[tool],
    )

    assert await agent.run("use the tool") == "done"

    tool.handler.assert_awaited_once_with(text="ping")
    kwargs = client.chat.completions.create.await_args.kwargs
    assert kwargs["tools"] == [tool.to_openai()]
    messages = kwargs["messages"]
    assert messages[2]["role"] == "assistant"
    assert messages[2]["tool_calls"][0]["function"]["name"] == "echo"
    assert messages[3] == {"role": "tool", "tool_call_id": "call_1", "content": "echo: ping"}


async def test_unknown_tool_is_reported_to_the_model():
    agent, client = make_agent(
        [
            chat_response(tool_calls=[tool_call("call_1", "missing", "{}")]),
            chat_response("recovered"),
        ],
        tools=[echo_tool()],
    )

    assert await agent.run("hi") == "recovered"
    tool_message = client.chat.completions.create.await_args.kwargs["messages"][-1]
    assert tool_message["role"] == "tool"
    assert "unknown tool" in tool_message["content"]


async def test_invalid_json_arguments_are_reported_to_the_model():
    tool = echo_tool()
    agent, client = make_agent(
        [
            chat_response(tool_calls=[tool_call("call_1", "echo", "{not json")]),
            chat_response("recovered"),
        ],
        tools=[tool],
    )

    assert await agent.run("hi") == "recovered"
    tool.handler.assert_not_awaited()
    assert "invalid JSON" in client.chat.completions.create.await_args.kwargs["messages"][-1]["content"]


async def test_failing_tool_is_reported_to_the_model():
    tool = echo_tool(handler=AsyncMock(side_effect=RuntimeError("boom")))
    agent, client = make_agent(
        [
            chat_response(tool_calls=[tool_call("call_1", "echo", '{"text": "x"}')]),
            chat_response("sorry"),
        ],
        tools=[tool],
    )

    assert await agent.run("hi") == "sorry"
    assert "boom" in client.chat.completions.create.await_args.kwargs["messages"][-1]["content"]


async def test_openai_errors_inside_tools_abort_the_run():
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    tool = echo_tool(handler=AsyncMock(side_effect=openai.APIConnectionError(request=request)))
    agent, _ = make_agent(
        [chat_response(tool_calls=[tool_call("call_1", "echo", '{"text": "x"}')])],
        tools=[tool],
    )

    with pytest.raises(openai.APIConnectionError):
        await agent.run("hi")


async def test_turn_limit():
    looping = [chat_response(tool_calls=[tool_call(f"call_{i}", "echo", '{"text": "again"}')]) for i in range(3)]
    agent, _ = make_agent(looping, tools=[echo_tool()], max_turns=3)

    with pytest.raises(AgentTurnLimitError, match="3 turns"):
        await agent.run("loop forever")


async def test_aborting_tool_stops_the_run():
    tool = echo_tool(handler=AsyncMock(side_effect=ToolAbortError("credentials rejected")))
    agent, client = make_agent(
        [chat_response(tool_calls=[tool_call("call_1", "echo", '{"text": "x"}')])],
        tools=[tool],
    )

    with pytest.raises(ToolAbortError, match="credentials rejected"):
        await agent.run("hi")

    assert client.chat.completions.create.await_count == 1
