"""
GeminiChatModel — LangChain BaseChatModel wrapper around the google-genai SDK.

Wraps genai.Client.models.generate_content() so agents (via tools/gemini_client.py)
can call it like any other LangChain chat model (llm.invoke(messages)).

Google Search grounding is switched on per call with invoke(..., enable_retrieval=True).
The web sources the model cited come back in
AIMessage.response_metadata["citations"] as [{"uri", "title"}, ...].
"""
from __future__ import annotations

from typing import Any, List, Optional

from google import genai
from google.genai import types
from langchain_core.callbacks import CallbackManagerForLLMRun
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_core.outputs import ChatGeneration, ChatResult
from pydantic import PrivateAttr, SecretStr


def grounding_citations(response: Any) -> list[dict]:
    """
    Pull {uri, title} pairs from the first candidate's grounding metadata.
    Order preserved, no dedup; chunks without a web uri+title are skipped.
    """
    candidates = response.candidates or []
    if not candidates:
        return []
    meta = candidates[0].grounding_metadata
    if meta is None or not meta.grounding_chunks:
        return []

    citations = []
    for chunk in meta.grounding_chunks:
        web = chunk.web
        if web is not None and web.uri and web.title:
            citations.append({"uri": web.uri, "title": web.title})
    return citations


class GeminiChatModel(BaseChatModel):
    """LangChain-compatible chat model backed by the Gemini API."""

    api_key: SecretStr
    model: str = "gemini-2.5-flash"
    temperature: Optional[float] = None

    _client: Any = PrivateAttr(default=None)

    # ── Loading ───────────────────────────────────────────────────────────────

    def _load(self) -> None:
        """Create the genai client (lazy, called once). No network here."""
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key.get_secret_value())

    # ── Prompt formatting ─────────────────────────────────────────────────────

    def _format_contents(self, messages: List[BaseMessage]) -> tuple[Optional[str], list[dict]]:
        """Convert LangChain messages → (system_instruction, genai contents)."""
        system: Optional[str] = None
        contents = []
        for msg in messages:
            if isinstance(msg, SystemMessage):
                system = msg.content
            elif isinstance(msg, HumanMessage):
                contents.append({"role": "user",  "parts": [{"text": msg.content}]})
            elif isinstance(msg, AIMessage):
                contents.append({"role": "model", "parts": [{"text": msg.content}]})
        return system, contents

    # ── LangChain required interface ──────────────────────────────────────────

    def _generate(
        self,
        messages: List[BaseMessage],
        stop: Optional[List[str]] = None,
        run_manager: Optional[CallbackManagerForLLMRun] = None,
        enable_retrieval: bool = False,
        **kwargs: Any,
    ) -> ChatResult:
        self._load()
        system, contents = self._format_contents(messages)
        config = types.GenerateContentConfig(
            system_instruction=system,
            temperature=self.temperature,
            stop_sequences=stop,
            tools=[types.Tool(google_search=types.GoogleSearch())] if enable_retrieval else None,
        )
        response = self._client.models.generate_content(
            model=self.model,
            contents=contents,
            config=config,
        )
        message = AIMessage(
            content=response.text or "",
            response_metadata={
                "model_name": self.model,
                "citations":  grounding_citations(response),
            },
        )
        return ChatResult(generations=[ChatGeneration(message=message)])

    @property
    def _llm_type(self) -> str:
        return "gemini-chat"
