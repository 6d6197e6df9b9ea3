"""
Tests for tools/gemini_client.py and gemini_wrapper.py — no network.
The chat model is replaced through GeminiClient(model_factory=...), and the
genai client inside GeminiChatModel is replaced with a recording stub.
"""
from types import SimpleNamespace

import pytest
from langchain_core.language_models.fake_chat_models import FakeMessagesListChatModel
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from errors import BackendError, CredentialError
from gemini_wrapper import GeminiChatModel, grounding_citations
from tools.gemini_client import PLACEHOLDER_KEY, GeminiClient, GeminiConfig


class RecordingModel:
    """Minimal stand-in for a LangChain chat model."""

    def __init__(self, key, reply=None, error=None):
        self.key = key
        self.reply = reply or AIMessage(content="ok")
        self.error = error
        self.calls = []

    def invoke(self, messages, **kwargs):
        self.calls.append((messages, kwargs))
        if self.error:
            raise self.error
        return self.reply


def _factory(built, **model_kwargs):
    def build(key):
        model = RecordingModel(key, **model_kwargs)
        built.append(model)
        return model
    return build


# ── Credential cell ───────────────────────────────────────────────────────────

@pytest.mark.parametrize("value", [None, "", "   ", PLACEHOLDER_KEY])
def test_unusable_keys_clear_the_credential(value):
    built = []
    client = GeminiClient(model_factory=_factory(built))
    assert client.set_credential("real-key")

    assert client.set_credential(value) is False
    assert not client.has_credential


def test_key_is_stripped_before_use():
    built = []
    client = GeminiClient(model_factory=_factory(built))
    assert client.set_credential("  real-key \n")
    assert built[0].key == "real-key"


def test_config_key_is_applied_on_construction():
    built = []
    client = GeminiClient(GeminiConfig(api_key="from-config"), model_factory=_factory(built))
    assert client.has_credential
    assert built[0].key == "from-config"


def test_factory_failure_clears_previous_key():
    calls = []

    def flaky(key):
        calls.append(key)
        if key == "bad":
            raise ValueError("rejected")
        return RecordingModel(key)

    client = GeminiClient(model_factory=flaky)
    assert client.set_credential("good")
    assert client.set_credential("bad") is False
    assert not client.has_credential
    assert calls == ["good", "bad"]


def test_missing_credential_fails_before_any_call():
    built = []
    client = GeminiClient(model_factory=_factory(built))
    with pytest.raises(CredentialError):
        client.complete("hello")
    assert built == []


def test_new_key_applies_to_later_calls():
    built = []
    client = GeminiClient(model_factory=_factory(built))
    client.set_credential("first")
    client.complete("one")
    client.set_credential("second")
    client.complete("two")

    assert [m.key for m in built] == ["first", "second"]
    assert len(built[0].calls) == 1
    assert len(built[1].calls) == 1


# ── Completion ────────────────────────────────────────────────────────────────

def test_complete_sends_prompt_and_retrieval_flag():
    built = []
    client = GeminiClient(model_factory=_factory(built))
    client.set_credential("k")

    client.complete("What moved markets today?", enable_retrieval=False)

    messages, kwargs = built[0].calls[0]
    assert messages == [HumanMessage(content="What moved markets today?")]
    assert kwargs == {"enable_retrieval": False}


def test_backend_failure_is_wrapped_with_detail():
    built = []
    client = GeminiClient(model_factory=_factory(built, error=RuntimeError("429 quota exceeded")))
    client.set_credential("k")

    with pytest.raises(BackendError) as exc:
        client.complete("hi")
    assert "429 quota exceeded" in str(exc.value)
    assert isinstance(exc.value.__cause__, RuntimeError)


def test_citations_come_from_response_metadata():
    reply = AIMessage(
        content="answer",
        response_metadata={"citations": [
            {"uri": "https://a.test", "title": "A"},
            {"uri": "https://b.test", "title": "B"},
        ]},
    )
    client = GeminiClient(
        model_factory=lambda key: FakeMessagesListChatModel(responses=[reply]),
    )
    client.set_credential("k")

    completion = client.complete("q")

    assert completion.text == "answer"
    assert [(c.title, c.uri) for c in completion.citations] == [
        ("A", "https://a.test"), ("B", "https://b.test"),
    ]


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "env-key")
    monkeypatch.setenv("GEMINI_MODEL", "gemini-2.5-pro")
    monkeypatch.setenv("GEMINI_TEMPERATURE", "0.2")

    config = GeminiConfig.from_env()

    assert config.api_key.get_secret_value() == "env-key"
    assert config.model == "gemini-2.5-pro"
    assert config.temperature == 0.2


def test_config_from_empty_env(monkeypatch):
    for name in ("GEMINI_API_KEY", "GEMINI_MODEL", "GEMINI_TEMPERATURE"):
        monkeypatch.delenv(name, raising=False)
    config = GeminiConfig.from_env()
    assert config.api_key is None
    assert config.temperature is None


# ── Grounding metadata ────────────────────────────────────────────────────────

def _chunk(uri, title):
    return SimpleNamespace(web=SimpleNamespace(uri=uri, title=title))


def _response(text="hi", chunks=None):
    meta = SimpleNamespace(grounding_chunks=chunks) if chunks is not None else None
    return SimpleNamespace(text=text, candidates=[SimpleNamespace(grounding_metadata=meta)])


def test_grounding_citations_keep_order_and_duplicates():
    response = _response(chunks=[
        _chunk("https://a.test", "A"),
        _chunk("https://b.test", "B"),
        _chunk("https://a.test", "A"),
    ])
    assert [c["title"] for c in grounding_citations(response)] == ["A", "B", "A"]


def test_grounding_citations_skip_incomplete_chunks():
    response = _response(chunks=[
        _chunk("https://a.test", None),
        _chunk(None, "No uri"),
        SimpleNamespace(web=None),
        _chunk("https://b.test", "B"),
    ])
    assert grounding_citations(response) == [{"uri": "https://b.test", "title": "B"}]


def test_grounding_citations_without_metadata():
    assert grounding_citations(_response()) == []
    assert grounding_citations(SimpleNamespace(candidates=None)) == []


# ── GeminiChatModel ───────────────────────────────────────────────────────────

class StubGenai:
    def __init__(self, response):
        self.response = response
        self.requests = []
        self.models = self

    def generate_content(self, **kwargs):
        self.requests.append(kwargs)
        return self.response


def _chat_model(response):
    llm = GeminiChatModel(api_key="k", model="gemini-2.5-flash")
    stub = StubGenai(response)
    llm._client = stub
    return llm, stub


def test_chat_model_enables_search_tool_on_request():
    llm, stub = _chat_model(_response("grounded", [_chunk("https://a.test", "A")]))

    message = llm.invoke(
        [SystemMessage(content="Be brief."), HumanMessage(content="News?")],
        enable_retrieval=True,
    )

    request = stub.requests[0]
    assert request["model"] == "gemini-2.5-flash"
    assert request["contents"] == [{"role": "user", "parts": [{"text": "News?"}]}]
    assert request["config"].tools and request["config"].tools[0].google_search is not None
    assert message.content == "grounded"
    assert message.response_metadata["citations"] == [{"uri": "https://a.test", "title": "A"}]


def test_chat_model_without_retrieval_has_no_tools():
    llm, stub = _chat_model(_response(text=None))

    message = llm.invoke([HumanMessage(content="hi")])

    assert stub.requests[0]["config"].tools is None
    assert message.content == ""
    assert message.response_metadata["citations"] == []
