"""LLM caller module for remote text analysis.

Builds the analysis prompt, issues a single-flight chat-completion request to
the configured provider and parses the semi-structured reply. Every failure
degrades to a local fallback result; nothing raised here reaches the caller.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any

import aiohttp
from loguru import logger
from pydantic import ValidationError

from occurrence_text_assistant.clarity_diagnostics import analyze_clarity_basic
from occurrence_text_assistant.config import Settings
from occurrence_text_assistant.models_api import (AnalysisContext,
                                                  AnalysisOrigin,
                                                  LLMAnalysisResponseSchema,
                                                  RemoteAnalysis)
from occurrence_text_assistant.utils.llm_utils import call_llm_api_with_retry

UNAVAILABLE_SUGGESTION = "Análise de IA não disponível. Verifique a conexão."

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class MalformedPayloadError(ValueError):
    """The LLM reply did not contain a usable JSON analysis object."""


class SingleFlightGuard:
    """Admits at most one in-flight remote call; later callers are turned away."""

    def __init__(self) -> None:
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def try_acquire(self) -> bool:
        """Take the slot if it is free. Never waits."""
        if self._in_flight:
            return False
        self._in_flight = True
        return True

    def release(self) -> None:
        self._in_flight = False


def build_analysis_prompt(text: str, context: AnalysisContext | None = None) -> str:
    """Build the user prompt asking for a JSON analysis of ``text``."""
    context_info = ""
    if context is not None and context.occurrence_type:
        context_info = f"Tipo de ocorrência: {context.occurrence_type}\n"

    return (
        f"{context_info}Analise o seguinte texto de descrição de ocorrência em obra:\n"
        "\n"
        f'"{text}"\n'
        "\n"
        "Forneça sugestões específicas para:\n"
        "1. Correções ortográficas (se houver)\n"
        "2. Melhorias na clareza e precisão técnica\n"
        "3. Termos mais profissionais\n"
        "4. Estrutura da frase\n"
        "\n"
        "Responda em formato JSON:\n"
        "{\n"
        '  "corrections": ["correção1", "correção2"],\n'
        '  "suggestions": ["sugestão1", "sugestão2"],\n'
        '  "improvedText": "texto melhorado",\n'
        '  "score": número de 1-10\n'
        "}"
    )


def extract_first_json_object(content: str) -> str:
    """Return the first balanced ``{...}`` span in ``content``.

    Braces inside JSON string literals are ignored. Prose around the object is
    tolerated.

    Raises:
        MalformedPayloadError: If no balanced object is present.
    """
    start = content.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(content)):
            char = content[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
            elif char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return content[start : index + 1]
        # Unbalanced from this brace on; try the next opening brace
        start = content.find("{", start + 1)
    raise MalformedPayloadError("No JSON object found in LLM response")


def decode_analysis_payload(content: str) -> LLMAnalysisResponseSchema:
    """Extract, decode and validate the JSON analysis embedded in ``content``.

    Raises:
        MalformedPayloadError: On any extraction, decoding or validation failure.
    """
    json_string = extract_first_json_object(content)
    try:
        parsed = json.loads(json_string)
    except ValueError as e:
        # JSONDecodeError, or an integer literal beyond the int digit limit
        raise MalformedPayloadError(f"Failed to parse LLM JSON response: {e!s}") from e
    if not isinstance(parsed, dict):
        raise MalformedPayloadError("LLM JSON response is not an object")
    try:
        return LLMAnalysisResponseSchema.model_validate(parsed)
    except ValidationError as e:
        raise MalformedPayloadError(f"Invalid analysis data from LLM: {e!s}") from e


def unavailable_fallback() -> RemoteAnalysis:
    """Fixed result for a reply that could not be parsed."""
    return RemoteAnalysis(
        origin=AnalysisOrigin.FALLBACK,
        suggestions=[UNAVAILABLE_SUGGESTION],
        succeeded=False,
    )


def clarity_fallback(text: str) -> RemoteAnalysis:
    """Local clarity diagnostics relabeled as a remote fallback result."""
    return RemoteAnalysis(
        origin=AnalysisOrigin.FALLBACK,
        suggestions=[issue.rationale for issue in analyze_clarity_basic(text)],
        succeeded=False,
    )


def parse_llm_response(content: str) -> RemoteAnalysis:
    """Turn the LLM reply text into a RemoteAnalysis, never raising."""
    try:
        payload = decode_analysis_payload(content)
    except MalformedPayloadError as e:
        logger.warning(f"Error processing LLM response: {e}")
        return unavailable_fallback()

    return RemoteAnalysis(
        origin=AnalysisOrigin.MODEL,
        corrections=payload.corrections,
        suggestions=payload.suggestions,
        improved_text=payload.improved_text,
        score=payload.score,
        succeeded=True,
    )


class BaseLLMProvider(ABC):
    PROVIDER_NAME = "BaseLLM"

    def __init__(
        self,
        session: aiohttp.ClientSession,
        settings: Settings,
        api_key: str | None = None,
    ) -> None:
        self.session = session
        self.settings = settings
        self.api_key = api_key or self._get_api_key()
        self.api_base = self._get_api_base()
        self.model_name = self._get_model_name()
        self.provider_name = self.PROVIDER_NAME

    def _get_api_key(self) -> str | None:
        # Forms 'openai_api_key' from 'OpenAI'
        api_key_name = f"{self.PROVIDER_NAME.lower()}_api_key"
        return getattr(self.settings, api_key_name, None)

    def _get_api_base(self) -> str | None:
        provider_config = self.settings.llm_providers.get(self.PROVIDER_NAME.lower())
        if provider_config and provider_config.api_base:
            return provider_config.api_base
        logger.warning(
            f"API base URL for {self.PROVIDER_NAME} not found in llm_providers config.",
        )
        return None

    def _get_model_name(self) -> str:
        model_name = self.settings.analysis_model
        # "openai/gpt-4.1-mini" becomes "gpt-4.1-mini" except for OpenRouter
        if self.PROVIDER_NAME != "OpenRouter" and "/" in model_name:
            prefix, name = model_name.split("/", 1)
            if prefix.lower() == self.PROVIDER_NAME.lower():
                model_name = name
        return model_name

    def _generation_params(self) -> tuple[int, float]:
        provider_cfg = self.settings.llm_providers.get(self.PROVIDER_NAME.lower())
        max_tokens = (
            provider_cfg.max_tokens
            if provider_cfg and provider_cfg.max_tokens is not None
            else self.settings.max_tokens_response
        )
        temperature = (
            provider_cfg.temperature
            if provider_cfg and provider_cfg.temperature is not None
            else self.settings.temperature
        )
        return max_tokens, temperature

    @abstractmethod
    def _prepare_request_details(
        self,
        system_prompt: str,
        user_prompt: str,
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        """Prepare provider-specific request details.
        Should raise ValueError if essential details are missing.
        Returns: (url, headers, json_payload)
        """

    @abstractmethod
    def _extract_content(self, response_data: dict[str, Any]) -> str:
        """Extract the reply text from the raw response data.
        Should raise KeyError, IndexError, TypeError or ValueError if the
        expected structure is not found.
        """

    async def _execute_http_request(
        self,
        url: str,
        headers: dict[str, str],
        json_payload: dict[str, Any],
    ) -> tuple[dict[str, Any] | str | None, str | None]:
        """POST the payload.

        Returns the decoded JSON body, or the raw body text when a 200 reply is
        not JSON, or ``(None, error)`` for a non-retryable error status.
        Retryable statuses and network errors are raised for the retry layer.
        """
        timeout_config = aiohttp.ClientTimeout(
            total=self.settings.llm_request_timeout_seconds,
        )
        async with self.session.post(
            url,
            headers=headers,
            json=json_payload,
            timeout=timeout_config,
        ) as response:
            if response.status == 200:
                body = await response.text()
                try:
                    return json.loads(body), None
                except ValueError:
                    logger.warning(
                        f"{self.provider_name} API success status (200) but body is not JSON; "
                        "treating it as plain text.",
                    )
                    return body, None

            error_text = await response.text()
            if response.status in RETRYABLE_STATUS_CODES:
                logger.warning(
                    f"{self.provider_name} API error ({response.status}): {error_text[:200]}",
                )
                response.raise_for_status()
            logger.warning(
                f"{self.provider_name} API error ({response.status}) - NOT RETRYABLE: "
                f"{error_text[:200]}",
            )
            return None, f"API error: {response.status} - {error_text}"

    async def _make_provider_api_request(
        self,
        system_prompt: str,
        user_prompt: str,
    ) -> tuple[str | None, str | None]:
        """Prepare, execute and unwrap one API request.

        A reply whose envelope cannot be unwrapped yields empty content, which
        the response parser reports as unavailable.
        """
        try:
            url, headers, json_payload = self._prepare_request_details(
                system_prompt,
                user_prompt,
            )
        except ValueError as e:
            logger.warning(f"Cannot prepare request for {self.provider_name}: {e}")
            return None, str(e)

        response_data, http_error = await self._execute_http_request(
            url,
            headers,
            json_payload,
        )
        if http_error:
            return None, http_error
        if isinstance(response_data, str):
            return response_data, None

        try:
            return self._extract_content(response_data or {}), None
        except (AttributeError, KeyError, IndexError, TypeError, ValueError) as e:
            logger.warning(
                f"Unexpected response structure from {self.provider_name}: {e}",
            )
            return "", None

    async def generate_completion(
        self,
        user_prompt: str,
        system_prompt_override: str | None = None,
    ) -> tuple[str | None, str | None]:
        """Request a completion for ``user_prompt``. Returns (content, error)."""
        if not self.api_key:
            error_msg = f"{self.provider_name} API key not configured."
            logger.debug(error_msg)
            return None, error_msg

        system_prompt = system_prompt_override or self.settings.system_prompt or ""

        return await call_llm_api_with_retry(
            api_request_func=lambda: self._make_provider_api_request(
                system_prompt,
                user_prompt,
            ),
            settings=self.settings,
            provider_name=self.provider_name,
        )


class OpenAIProvider(BaseLLMProvider):
    """LLM provider for the OpenAI chat completions API."""

    PROVIDER_NAME = "OpenAI"

    def _prepare_request_details(
        self,
        system_prompt: str,
        user_prompt: str,
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        if not self.api_base:
            raise ValueError(f"{self.provider_name} API base URL not configured.")
        if not self.api_key:
            raise ValueError(f"{self.provider_name} API key not configured.")

        endpoint = self.api_base.rstrip("/") + "/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        max_tokens, temperature = self._generation_params()
        payload = {
            "model": self.model_name,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        return endpoint, headers, payload

    def _extract_content(self, response_data: dict[str, Any]) -> str:
        content = response_data["choices"][0]["message"]["content"]
        if content is None:
            return ""
        if not isinstance(content, str):
            raise ValueError(
                f"Content in {self.provider_name} response is not a string: {content!r}",
            )
        return content


class OpenRouterProvider(OpenAIProvider):
    """LLM provider for OpenRouter's OpenAI-compatible API."""

    PROVIDER_NAME = "OpenRouter"


class AnthropicProvider(BaseLLMProvider):
    """LLM provider for the Anthropic messages API."""

    PROVIDER_NAME = "Anthropic"

    def _prepare_request_details(
        self,
        system_prompt: str,
        user_prompt: str,
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        if not self.api_base:
            raise ValueError(f"{self.provider_name} API base URL not configured.")
        if not self.api_key:
            raise ValueError(f"{self.provider_name} API key not configured.")

        endpoint = self.api_base.rstrip("/") + "/messages"
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": "2023-06-01",
            "content-type": "application/json",
        }
        max_tokens, temperature = self._generation_params()
        payload = {
            "model": self.model_name,
            "system": system_prompt,
            "messages": [{"role": "user", "content": user_prompt}],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        return endpoint, headers, payload

    def _extract_content(self, response_data: dict[str, Any]) -> str:
        blocks = response_data.get("content")
        if isinstance(blocks, list):
            for block in blocks:
                if isinstance(block, dict) and block.get("type") == "text":
                    text_content = block.get("text")
                    if not isinstance(text_content, str):
                        raise ValueError(
                            f"Text content block is not a string in {self.provider_name} response",
                        )
                    return text_content
        raise ValueError(f"No text content block found in {self.provider_name} response")


PROVIDER_MAP: dict[str, type[BaseLLMProvider]] = {
    "openai": OpenAIProvider,
    "openrouter": OpenRouterProvider,
    "anthropic": AnthropicProvider,
}


def get_provider_for_model(
    session: aiohttp.ClientSession,
    settings: Settings,
    api_key: str | None = None,
) -> BaseLLMProvider:
    """Instantiate the provider named by the model prefix or the default provider."""
    default_provider_name = settings.default_provider.lower()

    provider_prefix: str | None = None
    if "/" in settings.analysis_model:
        provider_prefix = settings.analysis_model.split("/", 1)[0].lower()

    effective_provider_name = default_provider_name
    if provider_prefix and provider_prefix in PROVIDER_MAP:
        effective_provider_name = provider_prefix

    provider_class = PROVIDER_MAP.get(effective_provider_name)
    if not provider_class:
        logger.error(
            f"Provider '{effective_provider_name}' is unknown. Falling back to OpenAIProvider.",
        )
        provider_class = OpenAIProvider

    return provider_class(session, settings, api_key)


class RemoteAugmenter:
    """Single-flight remote analysis with local fallbacks.

    While one request is in flight, further calls return the local clarity
    fallback immediately instead of waiting.
    """

    def __init__(
        self,
        settings: Settings,
        api_key: str | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.settings = settings
        self._api_key = api_key
        self._session = session
        self._guard = SingleFlightGuard()

    @property
    def api_key(self) -> str | None:
        if self._api_key:
            return self._api_key
        provider_name = self.settings.default_provider.lower()
        return getattr(self.settings, f"{provider_name}_api_key", None)

    def set_api_key(self, key: str | None) -> None:
        self._api_key = key

    @property
    def in_flight(self) -> bool:
        return self._guard.in_flight

    async def analyze(
        self, text: str, context: AnalysisContext | None = None
    ) -> RemoteAnalysis:
        if not self.api_key:
            logger.debug("No LLM API key configured, using basic analysis.")
            return clarity_fallback(text)
        if not self._guard.try_acquire():
            logger.debug("Remote analysis already in flight, using basic analysis.")
            return clarity_fallback(text)

        try:
            prompt = build_analysis_prompt(text, context)
            content, error = await self._request_completion(prompt)
            if error is not None or content is None:
                logger.warning(f"LLM analysis failed, using basic analysis: {error}")
                return clarity_fallback(text)
            return parse_llm_response(content)
        except Exception as e:  # pylint: disable=broad-except
            logger.exception(f"Unexpected error during LLM analysis: {e}")
            return clarity_fallback(text)
        finally:
            self._guard.release()

    async def _request_completion(self, prompt: str) -> tuple[str | None, str | None]:
        if self._session is not None:
            provider = get_provider_for_model(self._session, self.settings, self._api_key)
            return await provider.generate_completion(prompt)

        async with aiohttp.ClientSession() as session:
            provider = get_provider_for_model(session, self.settings, self._api_key)
            logger.debug(
                f"Requesting analysis from {provider.provider_name} with model {provider.model_name}",
            )
            return await provider.generate_completion(prompt)
