"""Pytest configuration for the occurrence text assistant tests.

Shared fixtures: isolated settings, assistants with and without an API key,
sample texts and loguru -> caplog propagation.
"""

import logging
from collections.abc import Generator

import pytest
from loguru import logger

from occurrence_text_assistant.assistant import TextAssistant
from occurrence_text_assistant.config import Settings


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "llm_api: test calls a real LLM API")


class PropagateHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        logging.getLogger(record.name).handle(record)


@pytest.fixture(autouse=True)
def caplog_interceptor(caplog: pytest.LogCaptureFixture) -> Generator[None, None, None]:
    """Propagate loguru messages to pytest's caplog."""
    handler_id = logger.add(PropagateHandler(), format="{message}", level="DEBUG")
    caplog.set_level(logging.DEBUG)
    yield
    logger.remove(handler_id)


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from .env and from API keys in the environment."""
    return Settings(
        _env_file=None,
        openai_api_key=None,
        anthropic_api_key=None,
        openrouter_api_key=None,
        default_provider="openai",
        analysis_model="gpt-4.1-mini",
        llm_retry_enabled=False,
    )


@pytest.fixture
def local_assistant(settings: Settings) -> TextAssistant:
    """Assistant without credential: local analysis only."""
    return TextAssistant(settings=settings)


@pytest.fixture
def remote_assistant(settings: Settings) -> TextAssistant:
    """Assistant with a (fake) credential configured."""
    return TextAssistant(settings=settings, api_key="test-openai-key")


def _chat_completion_payload(content: str) -> dict:
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }


@pytest.fixture
def chat_completion_payload():
    """Factory for OpenAI-style chat completion bodies wrapping a reply text."""
    return _chat_completion_payload


@pytest.fixture
def openai_chat_url() -> str:
    return "https://api.openai.com/v1/chat/completions"


@pytest.fixture
def pipe_description() -> str:
    """Three dictionary hits, three rewrite rules, no clarity issue."""
    return "O cano está quebrado e muito ruim"


@pytest.fixture
def clean_description() -> str:
    """No dictionary hit, no rewrite rule, no clarity issue."""
    return "A tubulação do banheiro apresenta vazamento constante na conexão."
