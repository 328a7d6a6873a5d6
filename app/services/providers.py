"""LLM provider adapters and the unified caller.

Two hosted backends are supported, tried in a fixed priority order:

- Provider A: Hugging Face Inference API (plain HTTP via httpx)
- Provider B: Google Gemini (google-genai SDK)

Each adapter normalizes its native response envelope to one trimmed string
before it leaves the adapter. The caller never raises for provider trouble:
a failing provider only forfeits its slot, and when nothing answers the
deterministic mock layer produces the text instead.
"""

import asyncio
import logging
from typing import Any, List, Optional, Protocol

import httpx
from google import genai
from google.genai import types

from app.core.config import ProviderConfig
from app.core.exceptions import ProviderError
from app.schemas.workflow import StepType
from app.services.circuit_breaker import CircuitBreaker
from app.services.mock_responses import build_mock_response

logger = logging.getLogger(__name__)

HUGGING_FACE_API_URL = "https://api-inference.huggingface.co/models"
HUGGING_FACE_MAX_NEW_TOKENS = 500


class LLMProvider(Protocol):
    name: str

    async def generate(self, input_text: str, instruction: str, json_mode: bool) -> str: ...


def normalize_generation(provider: str, payload: Any) -> str:
    """Resolve a provider response envelope to a single trimmed string.

    Known shapes:
    - ``[{"generated_text": "..."}, ...]`` (text-generation pipelines)
    - ``{"generated_text": "..."}`` (single generation object)
    - ``"..."`` (SDKs that already hand back text)
    """
    if isinstance(payload, str):
        text = payload
    elif isinstance(payload, list) and payload and isinstance(payload[0], dict) \
            and isinstance(payload[0].get("generated_text"), str):
        text = payload[0]["generated_text"]
    elif isinstance(payload, dict) and isinstance(payload.get("generated_text"), str):
        text = payload["generated_text"]
    elif isinstance(payload, dict) and "error" in payload:
        raise ProviderError(provider, f"provider returned error: {payload['error']}")
    else:
        raise ProviderError(provider, f"unexpected response shape: {type(payload).__name__}")

    text = text.strip()
    if not text:
        raise ProviderError(provider, "empty generation")
    return text


class HuggingFaceProvider:
    """Provider A: hosted inference API for instruction-tuned models."""

    name = "huggingface"

    def __init__(
        self,
        api_key: str,
        model: str,
        timeout_seconds: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    def _build_prompt(self, input_text: str, instruction: str, json_mode: bool) -> str:
        if json_mode:
            instruction = f"{instruction}. Respond with JSON only"
        return f'<s>[INST] {instruction}:\n\n"{input_text}" [/INST]'

    async def generate(self, input_text: str, instruction: str, json_mode: bool) -> str:
        body = {
            "inputs": self._build_prompt(input_text, instruction, json_mode),
            "parameters": {
                "max_new_tokens": HUGGING_FACE_MAX_NEW_TOKENS,
                "return_full_text": False,
            },
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
            try:
                response = await client.post(f"{HUGGING_FACE_API_URL}/{self.model}", json=body, headers=headers)
            except httpx.HTTPError as e:
                raise ProviderError(self.name, f"request failed: {e}") from e

        if response.is_error:
            raise ProviderError(self.name, f"API error: {response.status_code} {response.reason_phrase}")

        try:
            payload = response.json()
        except ValueError as e:
            raise ProviderError(self.name, "response was not JSON") from e

        return normalize_generation(self.name, payload)


class GeminiProvider:
    """Provider B: Google Gemini through the google-genai async client."""

    name = "gemini"

    def __init__(self, api_key: str, model: str, client: Optional[genai.Client] = None):
        self.model = model
        self.client = client or genai.Client(api_key=api_key)

    async def generate(self, input_text: str, instruction: str, json_mode: bool) -> str:
        config_params = {}
        if json_mode:
            config_params["response_mime_type"] = "application/json"

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=f"{instruction}:\n\n{input_text}",
                config=types.GenerateContentConfig(**config_params),
            )
        except Exception as e:
            raise ProviderError(self.name, f"request failed: {e}") from e

        return normalize_generation(self.name, response.text)


def build_providers(config: ProviderConfig) -> List[LLMProvider]:
    """Instantiate configured providers in priority order."""
    providers: List[LLMProvider] = []
    if config.primary_api_key:
        providers.append(HuggingFaceProvider(
            api_key=config.primary_api_key,
            model=config.primary_model_name,
            timeout_seconds=config.request_timeout_seconds,
        ))
    if config.secondary_api_key:
        providers.append(GeminiProvider(
            api_key=config.secondary_api_key,
            model=config.secondary_model_name,
        ))
    return providers


class LLMCaller:
    """
    Unified LLM call: provider A, then provider B, then mock.

    Every provider is wrapped in its own circuit breaker so one that keeps
    failing is skipped without a network round-trip until it recovers.
    """
    def __init__(
        self,
        config: ProviderConfig,
        providers: Optional[List[LLMProvider]] = None,
    ):
        self.config = config
        self.providers = build_providers(config) if providers is None else providers
        self.breakers = {
            p.name: CircuitBreaker(name=p.name, failure_threshold=3, recovery_timeout=45)
            for p in self.providers
        }

    @property
    def mock_mode(self) -> bool:
        return not self.providers

    async def call(
        self,
        input_text: str,
        instruction: str,
        json_mode: bool = False,
        mock_key: Optional[StepType] = None,
    ) -> str:
        """Return raw response text. Never raises for provider failure."""
        for provider in self.providers:
            try:
                text = await self.breakers[provider.name].call(
                    provider.generate, input_text, instruction, json_mode
                )
                logger.debug("Provider %s answered (%d chars)", provider.name, len(text))
                return text
            except Exception as e:
                logger.error("❌ %s failed, falling back: %s", provider.name, e)

        if self.providers:
            logger.warning("⚠️ All providers failed, using mock response")

        await asyncio.sleep(self.config.mock_delay_seconds)
        return build_mock_response(input_text, instruction, json_mode, mock_key)
