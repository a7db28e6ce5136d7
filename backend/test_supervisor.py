from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import chat_response, make_settings, tool_call
from meme_agent.services.agents import AgentConfigurationError
from meme_agent.services.meme_tool import MemeToolClient
from meme_agent.services.supervisor import (
    DEFAULT_SUMMARY,
    NO_EMOTION_REPLY,
    NO_MEME_REPLY,
    MemeAgentService,
    parse_supervisor_reply,
)

MEME_URL = "https://i.imgflip.com/abc.jpg"


# ---------------------------------------------------------------------------
# Reply parsing
# ---------------------------------------------------------------------------

def test_parse_structured_reply():
    reply = f"Emotion Summary: Feeling anxious about the exam\nMeme URL: {MEME_URL}"

    assert parse_supervisor_reply(reply) == ("Feeling anxious about the exam", MEME_URL)


def test_parse_markdown_wrapped_url():
    reply = f"Emotion Summary: Elated\nMeme URL: [{MEME_URL}]({MEME_URL})"

    assert parse_supervisor_reply(reply) == ("Elated", MEME_URL)


def test_parse_summary_on_same_line_as_url_label():
    summary, url = parse_supervisor_reply(f"Emotion Summary: Tired Meme URL: {MEME_URL}")

    assert summary == "Tired"
    assert url == MEME_URL


def test_parse_falls_back_to_first_line_without_url():
    reply = f"Here is what I found:\n\nMeme URL: {MEME_URL}\nEnjoy!"

    assert parse_supervisor_reply(reply) == ("Here is what I found:", MEME_URL)


def test_parse_reply_without_url():
    assert parse_supervisor_reply("Emotion Summary: Calm") == ("Calm", None)


def test_parse_reply_with_only_a_url():
    assert parse_supervisor_reply(MEME_URL) == (DEFAULT_SUMMARY, MEME_URL)


def test_parse_empty_reply():
    assert parse_supervisor_reply("") == (DEFAULT_SUMMARY, None)


# ---------------------------------------------------------------------------
# Service wiring
# ---------------------------------------------------------------------------

def make_service(settings, responses):
    client = MagicMock()
    client.chat.completions.create = AsyncMock(side_effect=responses)
    meme_tool = MemeToolClient(settings)
    meme_tool.generate_meme = AsyncMock(return_value=MEME_URL)
    return MemeAgentService(settings, client=client, meme_tool=meme_tool), client, meme_tool


def test_agents_are_built_with_their_settings():
    settings = make_settings(OPENAI_MODEL="gpt-test", MEME_TEMPERATURE=0.3, AGENT_MAX_TURNS=5)
    service, _, _ = make_service(settings, [])

    assert service.emotion_agent.tools == {}
    assert list(service.meme_agent.tools) == ["generate_meme"]
    assert list(service.supervisor.tools) == ["analyze_emotion", "generate_meme_from_summary"]
    assert service.meme_agent.temperature == 0.3
    assert service.supervisor.model == "gpt-test"
    assert service.supervisor.max_turns == 5


async def test_full_pipeline(settings):
    responses = [
        # supervisor -> analyze_emotion
        chat_response(tool_calls=[tool_call("s1", "analyze_emotion", '{"userInput": "Exam tomorrow"}')]),
        # emotion agent
        chat_response("Feeling anxious about the exam"),
        # supervisor -> generate_meme_from_summary
        chat_response(
            tool_calls=[tool_call("s2", "generate_meme_from_summary", '{"summary": "Feeling anxious about the exam"}')]
        ),
        # meme agent -> generate_meme tool
        chat_response(
            tool_calls=[tool_call("m1", "generate_meme", '{"template_id": "97984", "text0": "Exam tomorrow", "text1": "This is fine"}')]
        ),
        # meme agent final answer
        chat_response(f"Here is your meme: {MEME_URL}"),
        # supervisor final answer
        chat_response(f"Emotion Summary: Feeling anxious about the exam\nMeme URL: {MEME_URL}"),
    ]
    service, client, meme_tool = make_service(settings, responses)

    result = await service.generate("Exam tomorrow")

    assert result.summary == "Feeling anxious about the exam"
    assert result.meme_url == MEME_URL
    assert result.full_response.startswith("Emotion Summary:")
    meme_tool.generate_meme.assert_awaited_once_with(
        template_id="97984", text0="Exam tomorrow", text1="This is fine"
    )
    assert client.chat.completions.create.await_count == 6


async def test_meme_agent_receives_summary_prompt(settings):
    service, client, _ = make_service(settings, [chat_response("done")])

    await service.generate_meme_from_summary("Feeling elated")

    messages = client.chat.completions.create.await_args.kwargs["messages"]
    assert messages[1]["content"] == "Generate a meme for this emotion summary: Feeling elated"


async def test_empty_sub_agent_answers_use_fallback_text(settings):
    service, _, _ = make_service(settings, [chat_response(""), chat_response(None)])

    assert await service.analyze_emotion("hi") == NO_EMOTION_REPLY
    assert await service.generate_meme_from_summary("hi") == NO_MEME_REPLY


async def test_missing_api_key_is_reported_on_first_use():
    service = MemeAgentService(make_settings(OPENAI_API_KEY=None))

    with pytest.raises(AgentConfigurationError, match="OPENAI_API_KEY"):
        await service.generate("hello")
