"""Routing of prompts to the hosted language-model providers."""

import base64
from dataclasses import dataclass
from typing import Any, Optional

import anthropic
import google.generativeai as genai
from openai import OpenAI

from ..config import Settings, get_settings
from ..errors import (
    AllProvidersFailed,
    ProviderError,
    ProviderNotConfigured,
    UnsupportedProvider,
)
from ..logging import get_logger

logger = get_logger(__name__)

PROVIDERS = ("anthropic", "openai", "google", "perplexity")


@dataclass
class Completion:
    """Text returned by a provider."""
    text: str
    provider: str
    model: str


class ProviderRouter:
    """Single entry point for Claude, GPT, Gemini and Perplexity calls.

    Clients are created lazily so that a missing key only fails the provider
    that needs it.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._clients: dict[str, Any] = {}

    # Clients

    def _require_key(self, provider: str) -> str:
        key = {
            "anthropic": self.settings.anthropic_api_key,
            "openai": self.settings.openai_api_key,
            "google": self.settings.google_api_key,
            "perplexity": self.settings.perplexity_api_key,
        }[provider]
        if not key:
            raise ProviderNotConfigured(provider)
        return key

    def _anthropic(self) -> anthropic.Anthropic:
        if "anthropic" not in self._clients:
            self._clients["anthropic"] = anthropic.Anthropic(api_key=self._require_key("anthropic"))
        return self._clients["anthropic"]

    def _openai(self) -> OpenAI:
        if "openai" not in self._clients:
            self._clients["openai"] = OpenAI(api_key=self._require_key("openai"))
        return self._clients["openai"]

    def _perplexity(self) -> OpenAI:
        if "perplexity" not in self._clients:
            self._clients["perplexity"] = OpenAI(
                api_key=self._require_key("perplexity"),
                base_url=self.settings.perplexity_base_url,
            )
        return self._clients["perplexity"]

    def _gemini(self, model_name: Optional[str] = None) -> genai.GenerativeModel:
        genai.configure(api_key=self._require_key("google"))
        return genai.GenerativeModel(model_name or self.settings.gemini_model)

    # Text completions

    def complete(
        self,
        provider: str,
        prompt: str,
        system: Optional[str] = None,
        max_tokens: int = 2000,
        temperature: Optional[float] = None,
        model: Optional[str] = None,
    ) -> Completion:
        """
        Send a single-turn prompt to a provider.

        Args:
            provider: One of anthropic, openai, google, perplexity.
            prompt: User message.
            system: Optional system prompt.
            max_tokens: Output token limit.
            temperature: Sampling temperature (provider default when None).
            model: Override the configured model for this call.

        Returns:
            Completion with the response text.

        Raises:
            UnsupportedProvider: Unknown provider name.
            ProviderNotConfigured: The provider has no API key.
            ProviderError: The call failed or returned no text.
        """
        if provider not in PROVIDERS:
            raise UnsupportedProvider(provider)

        handler = getattr(self, f"_complete_{provider}")
        try:
            completion = handler(prompt, system, max_tokens, temperature, model)
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(provider, str(e)) from e

        if not completion.text or not completion.text.strip():
            raise ProviderError(provider, "empty response")
        return completion

    def complete_with_fallback(
        self,
        providers: list[str],
        prompt: str,
        system: Optional[str] = None,
        max_tokens: int = 2000,
        temperature: Optional[float] = None,
    ) -> Completion:
        """
        Try providers in order and return the first successful completion.

        Raises:
            AllProvidersFailed: Every provider failed; holds each error.
        """
        errors: dict[str, Exception] = {}
        for provider in providers:
            try:
                return self.complete(provider, prompt, system, max_tokens, temperature)
            except ProviderError as e:
                logger.warning(f"{provider} failed, trying next provider: {e}")
                errors[provider] = e
        raise AllProvidersFailed(errors)

    def _complete_anthropic(self, prompt, system, max_tokens, temperature, model) -> Completion:
        model = model or self.settings.anthropic_model
        kwargs: dict[str, Any] = {
            "model": model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            kwargs["system"] = system
        if temperature is not None:
            kwargs["temperature"] = temperature

        response = self._anthropic().messages.create(**kwargs)
        text = "".join(block.text for block in response.content if block.type == "text")
        return Completion(text=text, provider="anthropic", model=model)

    @staticmethod
    def _chat_messages(prompt: str, system: Optional[str]) -> list[dict[str, str]]:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return messages

    def _complete_openai(self, prompt, system, max_tokens, temperature, model) -> Completion:
        client = self._openai()
        messages = self._chat_messages(prompt, system)

        if model:
            response = client.chat.completions.create(
                model=model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=0.7 if temperature is None else temperature,
            )
            return Completion(response.choices[0].message.content or "", "openai", model)

        primary = self.settings.openai_model
        try:
            # Reasoning models take max_completion_tokens and no temperature
            response = client.chat.completions.create(
                model=primary,
                messages=messages,
                max_completion_tokens=max_tokens,
            )
            return Completion(response.choices[0].message.content or "", "openai", primary)
        except Exception as e:
            fallback = self.settings.openai_fallback_model
            logger.info(f"{primary} failed, falling back to {fallback}: {e}")

        response = client.chat.completions.create(
            model=fallback,
            messages=messages,
            max_tokens=max_tokens,
            temperature=0.7 if temperature is None else temperature,
        )
        return Completion(response.choices[0].message.content or "", "openai", fallback)

    def _complete_google(self, prompt, system, max_tokens, temperature, model) -> Completion:
        model = model or self.settings.gemini_model
        text = f"{system}\n\nQuestion: {prompt}" if system else prompt
        response = self._gemini(model).generate_content(
            text,
            generation_config=genai.GenerationConfig(
                max_output_tokens=max_tokens,
                temperature=0.7 if temperature is None else temperature,
            ),
        )
        return Completion(text=response.text, provider="google", model=model)

    def _complete_perplexity(self, prompt, system, max_tokens, temperature, model) -> Completion:
        model = model or self.settings.perplexity_model
        response = self._perplexity().chat.completions.create(
            model=model,
            messages=self._chat_messages(prompt, system),
            max_tokens=max_tokens,
            temperature=0.2 if temperature is None else temperature,
            top_p=0.9,
        )
        return Completion(response.choices[0].message.content or "", "perplexity", model)

    # Web search

    def search_web(
        self,
        query: str,
        system: str,
        recency_filter: str = "month",
        domain: Optional[str] = None,
        include_images: bool = False,
        related_questions: bool = False,
        max_tokens: int = 2000,
    ) -> dict[str, Any]:
        """
        Ask Perplexity's online model and keep its search metadata.

        Returns:
            Dict with content, citations, related_questions, images and usage.
        """
        extra_body: dict[str, Any] = {
            "return_images": include_images,
            "return_related_questions": related_questions,
            "search_recency_filter": recency_filter,
        }
        if domain:
            extra_body["search_domain_filter"] = [domain]

        try:
            response = self._perplexity().chat.completions.create(
                model=self.settings.perplexity_model,
                messages=self._chat_messages(query, system),
                max_tokens=max_tokens,
                temperature=0.2,
                top_p=0.9,
                frequency_penalty=1,
                presence_penalty=0,
                extra_body=extra_body,
            )
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError("perplexity", str(e)) from e

        raw = response.model_dump()
        return {
            "content": response.choices[0].message.content or "",
            "citations": raw.get("citations") or [],
            "related_questions": raw.get("related_questions") or [],
            "images": raw.get("images") or [],
            "usage": raw.get("usage"),
        }

    # Vision

    def complete_with_file(
        self,
        provider: str,
        prompt: str,
        data: bytes,
        mime_type: str,
        max_tokens: int = 4000,
    ) -> Completion:
        """
        Send a prompt together with an image or PDF.

        Raises:
            UnsupportedProvider: Provider without file input support.
            ProviderError: The call failed or returned no text.
        """
        if provider not in ("anthropic", "openai", "google"):
            raise UnsupportedProvider(provider)

        encoded = base64.b64encode(data).decode("utf-8")
        try:
            if provider == "google":
                model = self.settings.gemini_model
                response = self._gemini(model).generate_content(
                    [prompt, {"mime_type": mime_type, "data": data}],
                    generation_config=genai.GenerationConfig(
                        max_output_tokens=8192,
                        temperature=0,
                    ),
                )
                completion = Completion(response.text, provider, model)
            elif provider == "openai":
                model = self.settings.openai_fallback_model
                response = self._openai().chat.completions.create(
                    model=model,
                    max_tokens=max_tokens,
                    messages=[
                        {
                            "role": "user",
                            "content": [
                                {"type": "text", "text": prompt},
                                {
                                    "type": "image_url",
                                    "image_url": {"url": f"data:{mime_type};base64,{encoded}"},
                                },
                            ],
                        }
                    ],
                )
                completion = Completion(response.choices[0].message.content or "", provider, model)
            else:
                model = self.settings.anthropic_model
                block_type = "document" if mime_type == "application/pdf" else "image"
                response = self._anthropic().messages.create(
                    model=model,
                    max_tokens=max_tokens,
                    messages=[
                        {
                            "role": "user",
                            "content": [
                                {
                                    "type": block_type,
                                    "source": {
                                        "type": "base64",
                                        "media_type": mime_type,
                                        "data": encoded,
                                    },
                                },
                                {"type": "text", "text": prompt},
                            ],
                        }
                    ],
                )
                text = "".join(b.text for b in response.content if b.type == "text")
                completion = Completion(text, provider, model)
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(provider, str(e)) from e

        if not completion.text.strip():
            raise ProviderError(provider, "empty response")
        return completion


def alternative_provider(provider: str) -> str:
    """Provider used to cross-check another provider's answer."""
    return {"anthropic": "openai"}.get(provider, "anthropic")
