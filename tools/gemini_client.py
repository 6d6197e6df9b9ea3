"""
Gemini completion client — the one outbound call every agent makes.

  client = GeminiClient(GeminiConfig.from_env())
  client.set_credential("...")          # → bool, swaps the key for all later calls
  completion = client.complete(prompt)  # → Completion(text, citations)

The client is a caller-owned handle passed into each agent. The current
credential lives in a single lock-guarded cell: complete() reads it once per
call, so a key update affects every later call while in-flight calls finish
under the key they started with. Nothing is retried here.
"""
from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from langchain_core.messages import HumanMessage
from pydantic import BaseModel, SecretStr

from errors import BackendError, CredentialError
from gemini_wrapper import GeminiChatModel
from state.models import CitationSource

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"

# Stand-in value some setups keep in .env; never a real key
PLACEHOLDER_KEY = "YOUR_API_KEY_PLACEHOLDER_IGNORE"


# ── Config ────────────────────────────────────────────────────────────────────

class GeminiConfig(BaseModel):
    api_key: Optional[SecretStr] = None
    model: str = DEFAULT_MODEL
    temperature: Optional[float] = None

    @classmethod
    def from_env(cls) -> "GeminiConfig":
        """GEMINI_API_KEY, GEMINI_MODEL, GEMINI_TEMPERATURE (call load_dotenv() first)."""
        temperature = os.getenv("GEMINI_TEMPERATURE")
        return cls(
            api_key=os.getenv("GEMINI_API_KEY") or None,
            model=os.getenv("GEMINI_MODEL") or DEFAULT_MODEL,
            temperature=float(temperature) if temperature else None,
        )


@dataclass
class Completion:
    text: str
    citations: list[CitationSource] = field(default_factory=list)


# ── Client ────────────────────────────────────────────────────────────────────

class GeminiClient:
    def __init__(
        self,
        config: Optional[GeminiConfig] = None,
        model_factory: Optional[Callable[[str], Any]] = None,
    ):
        """
        Args:
            config:        model settings; config.api_key (if any) is applied immediately
            model_factory: api_key → chat model. Defaults to GeminiChatModel;
                           tests pass a fake LangChain chat model here.
        """
        self.config = config or GeminiConfig()
        self._model_factory = model_factory or self._build_model
        self._lock = threading.Lock()
        self._llm: Any = None

        if self.config.api_key is not None:
            self.set_credential(self.config.api_key.get_secret_value())

    def _build_model(self, api_key: str) -> GeminiChatModel:
        return GeminiChatModel(
            api_key=api_key,
            model=self.config.model,
            temperature=self.config.temperature,
        )

    # ── Credential cell ───────────────────────────────────────────────────────

    def set_credential(self, value: Optional[str]) -> bool:
        """
        Replace the API key. Returns True when the client is usable afterwards.
        Blank / None / placeholder keys clear the credential.
        """
        key = (value or "").strip()
        if not key or key == PLACEHOLDER_KEY:
            with self._lock:
                self._llm = None
            logger.info("Gemini client cleared — API key missing or invalid.")
            return False

        try:
            llm = self._model_factory(key)
        except Exception as e:
            logger.error(f"Failed to initialize Gemini client with the provided key: {e}")
            with self._lock:
                self._llm = None
            return False

        with self._lock:
            self._llm = llm
        logger.info("Gemini client initialized.")
        return True

    @property
    def has_credential(self) -> bool:
        with self._lock:
            return self._llm is not None

    def _current_model(self) -> Any:
        with self._lock:
            llm = self._llm
        if llm is None:
            raise CredentialError()
        return llm

    # ── Completion ────────────────────────────────────────────────────────────

    def complete(self, prompt: str, enable_retrieval: bool = True) -> Completion:
        """
        One completion request.

        Raises:
            CredentialError  no usable key (nothing is sent)
            BackendError     transport / auth / quota failure, backend detail preserved
        """
        llm = self._current_model()
        try:
            message = llm.invoke([HumanMessage(content=prompt)], enable_retrieval=enable_retrieval)
        except Exception as e:
            logger.error(f"Gemini completion failed: {e}")
            raise BackendError(f"Gemini API error: {e}") from e

        text = message.content if isinstance(message.content, str) else ""
        citations = [
            CitationSource(title=c["title"], uri=c["uri"])
            for c in message.response_metadata.get("citations", [])
        ]
        return Completion(text=text, citations=citations)
