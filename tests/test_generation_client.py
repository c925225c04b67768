"""
LLM Generation Client 단위 테스트

SDK 객체를 stub으로 대체하여 네트워크 없이 검증
"""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock

import anthropic
import httpx
import openai
import pytest

from services.errors import UpstreamRejected, UpstreamUnavailable
from services.llm import (
    AnthropicGenerationClient,
    FakeGenerationClient,
    FallbackGenerationClient,
    OpenAIGenerationClient,
    build_generation_client,
)
from services.llm.client import METRICS_HISTORY_SIZE, display_model_name
from services.settings import Settings


ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"
OPENAI_URL = "https://api.openai.com/v1/chat/completions"


def _anthropic_stub(response=None, side_effect=None) -> SimpleNamespace:
    create = AsyncMock(return_value=response, side_effect=side_effect)
    return SimpleNamespace(messages=SimpleNamespace(create=create))


def _openai_stub(response=None, side_effect=None) -> SimpleNamespace:
    create = AsyncMock(return_value=response, side_effect=side_effect)
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


def _status_error(cls, url: str, status: int):
    request = httpx.Request("POST", url)
    return cls("failed", response=httpx.Response(status, request=request), body=None)


class TestDisplayModelName:
    def test_date_suffix_removed(self):
        assert display_model_name("claude-3-haiku-20240307") == "claude-3-haiku"

    def test_plain_name_kept(self):
        assert display_model_name("gpt-4o-mini") == "gpt-4o-mini"


class TestAnthropicGenerationClient:
    """AnthropicGenerationClient 테스트"""

    @pytest.mark.asyncio
    async def test_success(self):
        stub = _anthropic_stub(SimpleNamespace(
            content=[SimpleNamespace(type="text", text="따뜻한 답변")]
        ))
        client = AnthropicGenerationClient("key", client=stub)

        result = await client.generate("system", "user")

        assert result.answer == "따뜻한 답변"
        assert result.model == "claude-3-haiku"
        kwargs = stub.messages.create.call_args.kwargs
        assert kwargs["system"] == "system"
        assert kwargs["messages"] == [{"role": "user", "content": "user"}]
        assert kwargs["max_tokens"] == 1024

    @pytest.mark.asyncio
    async def test_status_error_is_rejected(self):
        stub = _anthropic_stub(side_effect=_status_error(anthropic.APIStatusError, ANTHROPIC_URL, 529))
        client = AnthropicGenerationClient("key", client=stub)

        with pytest.raises(UpstreamRejected) as exc_info:
            await client.generate("system", "user")

        assert exc_info.value.upstream_status == 529

    @pytest.mark.asyncio
    async def test_connection_error_is_unavailable(self):
        error = anthropic.APIConnectionError(request=httpx.Request("POST", ANTHROPIC_URL))
        client = AnthropicGenerationClient("key", client=_anthropic_stub(side_effect=error))

        with pytest.raises(UpstreamUnavailable):
            await client.generate("system", "user")

    @pytest.mark.asyncio
    async def test_timeout_is_unavailable(self):
        async def slow_create(**kwargs):
            await asyncio.sleep(1)

        stub = SimpleNamespace(messages=SimpleNamespace(create=slow_create))
        client = AnthropicGenerationClient("key", timeout=0.01, client=stub)

        with pytest.raises(UpstreamUnavailable):
            await client.generate("system", "user")

    @pytest.mark.asyncio
    async def test_empty_content_is_rejected(self):
        client = AnthropicGenerationClient("key", client=_anthropic_stub(SimpleNamespace(content=[])))

        with pytest.raises(UpstreamRejected):
            await client.generate("system", "user")


class TestOpenAIGenerationClient:
    """OpenAIGenerationClient 테스트"""

    @pytest.mark.asyncio
    async def test_success(self):
        stub = _openai_stub(SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content="답변"))]
        ))
        client = OpenAIGenerationClient("key", client=stub)

        result = await client.generate("system", "user")

        assert result.answer == "답변"
        assert result.model == "gpt-4o-mini"
        messages = stub.chat.completions.create.call_args.kwargs["messages"]
        assert messages == [
            {"role": "system", "content": "system"},
            {"role": "user", "content": "user"},
        ]

    @pytest.mark.asyncio
    async def test_status_error_is_rejected(self):
        stub = _openai_stub(side_effect=_status_error(openai.APIStatusError, OPENAI_URL, 500))
        client = OpenAIGenerationClient("key", client=stub)

        with pytest.raises(UpstreamRejected):
            await client.generate("system", "user")

    @pytest.mark.asyncio
    async def test_connection_error_is_unavailable(self):
        error = openai.APIConnectionError(request=httpx.Request("POST", OPENAI_URL))
        client = OpenAIGenerationClient("key", client=_openai_stub(side_effect=error))

        with pytest.raises(UpstreamUnavailable):
            await client.generate("system", "user")

    @pytest.mark.asyncio
    async def test_empty_choices_is_rejected(self):
        client = OpenAIGenerationClient("key", client=_openai_stub(SimpleNamespace(choices=[])))

        with pytest.raises(UpstreamRejected):
            await client.generate("system", "user")


class TestFallbackGenerationClient:
    """provider fallback 테스트"""

    @pytest.mark.asyncio
    async def test_primary_used_first(self):
        primary = FakeGenerationClient(answer="primary", model="claude-3-haiku")
        secondary = FakeGenerationClient(answer="secondary", model="gpt-4o-mini")
        client = FallbackGenerationClient([primary, secondary])

        result = await client.generate("system", "user")

        assert result.answer == "primary"
        assert secondary.call_count == 0
        assert client.metrics_history[-1].success

    @pytest.mark.asyncio
    async def test_unavailable_falls_back(self):
        primary = FakeGenerationClient(error=UpstreamUnavailable("down"))
        secondary = FakeGenerationClient(answer="secondary", model="gpt-4o-mini")
        client = FallbackGenerationClient([primary, secondary])

        result = await client.generate("system", "user")

        assert result.model == "gpt-4o-mini"
        assert primary.call_count == 1
        assert [m.success for m in client.metrics_history] == [False, True]

    @pytest.mark.asyncio
    async def test_rejected_does_not_fall_back(self):
        primary = FakeGenerationClient(error=UpstreamRejected("Claude API failed"))
        secondary = FakeGenerationClient()
        client = FallbackGenerationClient([primary, secondary])

        with pytest.raises(UpstreamRejected):
            await client.generate("system", "user")

        assert secondary.call_count == 0

    @pytest.mark.asyncio
    async def test_all_unavailable_raises_last(self):
        client = FallbackGenerationClient([
            FakeGenerationClient(error=UpstreamUnavailable("first down")),
            FakeGenerationClient(error=UpstreamUnavailable("second down")),
        ])

        with pytest.raises(UpstreamUnavailable) as exc_info:
            await client.generate("system", "user")

        assert exc_info.value.message == "second down"

    @pytest.mark.asyncio
    async def test_no_providers(self):
        client = FallbackGenerationClient([])

        with pytest.raises(UpstreamUnavailable) as exc_info:
            await client.generate("system", "user")

        assert exc_info.value.misconfigured is True
        assert exc_info.value.error == "No AI API configured"

    @pytest.mark.asyncio
    async def test_metrics_history_bounded(self):
        """장기 실행 시 메트릭 기록은 최근 호출만 유지"""
        client = FallbackGenerationClient([FakeGenerationClient()])

        for _ in range(METRICS_HISTORY_SIZE * 3):
            await client.generate("system", "user")

        assert len(client.metrics_history) == METRICS_HISTORY_SIZE
        assert client.metrics_history[-1].call_id == f"chat_{METRICS_HISTORY_SIZE * 3}"

    @pytest.mark.asyncio
    async def test_metrics_history_size_configurable(self):
        client = FallbackGenerationClient([
            FakeGenerationClient(error=UpstreamUnavailable("down")),
            FakeGenerationClient(),
        ], history_size=3)

        for _ in range(5):
            await client.generate("system", "user")

        assert len(client.metrics_history) == 3
        assert [m.success for m in client.metrics_history] == [True, False, True]
        assert client.metrics_history[0].call_id == "chat_8"


class TestBuildGenerationClient:
    """설정 기반 provider 구성"""

    def test_anthropic_then_openai(self):
        client = build_generation_client(Settings(anthropic_api_key="a", openai_api_key="o"))

        assert [p.name for p in client.providers] == ["anthropic", "openai"]

    def test_openai_only(self):
        client = build_generation_client(Settings(openai_api_key="o"))

        assert [p.name for p in client.providers] == ["openai"]

    def test_settings_passed_through(self):
        settings = Settings(anthropic_api_key="a", upstream_timeout=4.0, max_tokens=512)

        provider = build_generation_client(settings).providers[0]

        assert provider.timeout == 4.0
        assert provider.max_tokens == 512
        assert provider.model == "claude-3-haiku-20240307"

    def test_none_configured(self):
        assert build_generation_client(Settings()).providers == []
