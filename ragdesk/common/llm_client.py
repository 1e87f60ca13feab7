"""
Provider-agnostic LLM client for ragdesk.

Supports a local Ollama model (the default), Anthropic, OpenAI, and Google
Gemini with a shared text-generation interface. ``call(prompt)`` is the
single-shot chat contract the query orchestrator depends on.
"""

from __future__ import annotations

import logging
from typing import Optional

from .config import LLMConfig

logger = logging.getLogger("ragdesk.common.llm_client")


class LLMClient:
    """Unified text generation client across LLM providers."""

    def __init__(
        self,
        provider: str = "ollama",
        model: str = "",
        anthropic_api_key: Optional[str] = None,
        openai_api_key: Optional[str] = None,
        google_api_key: Optional[str] = None,
        ollama_base_url: str = "http://localhost:11434",
        max_tokens: int = 1024,
        timeout: float = 60.0,
    ) -> None:
        self.provider = (provider or "ollama").lower()
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._client = None

        if self.provider == "ollama":
            # Ollama serves an OpenAI-compatible API under /v1
            try:
                from openai import OpenAI

                self._client = OpenAI(
                    base_url=ollama_base_url.rstrip("/") + "/v1",
                    api_key="ollama",
                )
            except ImportError:
                logger.warning("openai package not installed")
            except Exception as e:
                logger.warning("Failed to initialize Ollama client: %s", e)
            return

        if self.provider == "anthropic":
            if not anthropic_api_key:
                logger.info("%s API key not provided, LLM client unavailable", self.provider)
                return
            try:
                import anthropic

                self._client = anthropic.Anthropic(api_key=anthropic_api_key)
            except ImportError:
                logger.warning("anthropic package not installed")
            except Exception as e:
                logger.warning("Failed to initialize Anthropic client: %s", e)
            return

        if self.provider == "openai":
            if not openai_api_key:
                logger.info("%s API key not provided, LLM client unavailable", self.provider)
                return
            try:
                from openai import OpenAI

                self._client = OpenAI(api_key=openai_api_key)
            except ImportError:
                logger.warning("openai package not installed")
            except Exception as e:
                logger.warning("Failed to initialize OpenAI client: %s", e)
            return

        if self.provider == "google":
            if not google_api_key:
                logger.info("%s API key not provided, LLM client unavailable", self.provider)
                return
            try:
                import google.generativeai as genai

                genai.configure(api_key=google_api_key)
                self._client = genai  # Store the module, not a model instance
                self._google_models = {}  # Cache models by system prompt hash
            except ImportError:
                logger.warning("google-generativeai package not installed")
            except Exception as e:
                logger.warning("Failed to initialize Gemini client: %s", e)
            return

        logger.warning("Unsupported LLM provider: %s", self.provider)

    @property
    def is_available(self) -> bool:
        return self._client is not None

    def generate(
        self,
        prompt: str,
        *,
        system: Optional[str] = None,
        max_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> str:
        if not self.is_available:
            raise RuntimeError("LLM client is not available")

        max_tokens = max_tokens or self.max_tokens
        timeout = timeout or self.timeout

        if self.provider == "anthropic":
            kwargs = {}
            if system:
                kwargs["system"] = system
            response = self._client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": prompt}],
                timeout=timeout,
                **kwargs,
            )
            return response.content[0].text.strip()

        if self.provider in ("openai", "ollama"):
            messages = []
            if system:
                messages.append({"role": "system", "content": system})
            messages.append({"role": "user", "content": prompt})
            response = self._client.chat.completions.create(
                model=self.model,
                max_tokens=max_tokens,
                messages=messages,
                timeout=timeout,
            )
            return (response.choices[0].message.content or "").strip()

        if self.provider == "google":
            import hashlib

            cache_key = hashlib.md5((system or "").encode()).hexdigest()
            if cache_key not in self._google_models:
                kwargs = {"model_name": self.model}
                if system:
                    kwargs["system_instruction"] = system
                self._google_models[cache_key] = self._client.GenerativeModel(**kwargs)
            model = self._google_models[cache_key]
            response = model.generate_content(
                prompt,
                generation_config={"max_output_tokens": max_tokens},
                request_options={"timeout": timeout},
            )
            return response.text.strip()

        raise RuntimeError(f"Unsupported LLM provider: {self.provider}")

    def call(self, prompt: str) -> str:
        """Single-shot completion with the client's default limits."""
        return self.generate(prompt)


def create_llm_client(config: LLMConfig) -> LLMClient:
    """Build an LLMClient for the configured provider."""
    provider = (config.provider or "ollama").lower()
    model = {
        "ollama": config.ollama_model,
        "anthropic": config.anthropic_model,
        "openai": config.openai_model,
        "google": config.google_model,
    }.get(provider, "")

    return LLMClient(
        provider=provider,
        model=model,
        anthropic_api_key=config.anthropic_api_key or None,
        openai_api_key=config.openai_api_key or None,
        google_api_key=config.google_api_key or None,
        ollama_base_url=config.ollama_base_url,
        max_tokens=config.max_tokens,
        timeout=config.timeout,
    )
