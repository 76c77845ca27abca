import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.messages import AIMessage

from todo_planner.llm import ModelSettings, TextGenerator, get_chat_model, message_text


def _settings(provider, **kwargs):
    return ModelSettings(provider=provider, model="test-model", temperature=0.0, **kwargs)


def test_complete_returns_model_text():
    generator = TextGenerator(FakeListChatModel(responses=["hello"]))
    assert generator.complete("system", "user") == "hello"


def test_chat_sends_single_user_message():
    generator = TextGenerator(FakeListChatModel(responses=["hi there"]))
    assert generator.chat("hi") == "hi there"


def test_streaming_yields_text_chunks():
    generator = TextGenerator(FakeListChatModel(responses=["hello"]))
    chunks = list(generator.complete_streaming("hi"))
    assert len(chunks) > 1
    assert "".join(chunks) == "hello"


def test_fake_provider_replays_configured_responses():
    llm = get_chat_model(_settings("fake", fake_responses=("first", "second")))
    generator = TextGenerator(llm)
    assert [generator.chat("a"), generator.chat("b")] == ["first", "second"]


def test_fake_provider_has_a_default_response():
    assert TextGenerator(get_chat_model(_settings("fake"))).chat("a") == "fake-response"


def test_unknown_provider_raises():
    with pytest.raises(ValueError, match="Unknown LLM provider"):
        get_chat_model(_settings("carrier-pigeon"))


def test_openai_compatible_needs_base_url():
    with pytest.raises(ValueError, match="LLM_BASE_URL"):
        get_chat_model(_settings("openai_compatible", api_key="sk-test"))


def test_message_text_joins_text_blocks():
    message = AIMessage(content=[{"type": "text", "text": "a"}, "b", {"type": "image_url", "image_url": "x"}])
    assert message_text(message) == "ab"
    assert message_text(AIMessage(content="plain")) == "plain"
