"""
POST /api/chat API 테스트

FakeGenerationClient로 LLM을 대체하여 네트워크 없이 검증
"""

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from services.errors import UpstreamRejected, UpstreamUnavailable
from services.knowledge import StaticKnowledgeSource
from services.llm import FakeGenerationClient, FallbackGenerationClient
from services.llm.prompts import NO_CONTEXT_TEXT
from services.settings import Settings


def _client(generation_client) -> TestClient:
    app = create_app(
        settings=Settings(),
        knowledge_source=StaticKnowledgeSource(),
        generation_client=generation_client,
    )
    return TestClient(app)


class TestChatAPI:
    """POST /api/chat 테스트"""

    def test_answer(self):
        fake = FakeGenerationClient(answer="천천히 다시 시도해 보세요.", model="claude-3-haiku")

        response = _client(fake).post("/api/chat", json={
            "query": "아기가 젖을 안 물어요",
            "context": [{"title": "젖 거부 대처법", "content": "원인을 먼저 살펴보세요."}],
            "userInfo": {"babyAgeWeeks": 6},
        })

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "answer": "천천히 다시 시도해 보세요.",
            "model": "claude-3-haiku",
        }

    def test_prompt_contents(self):
        fake = FakeGenerationClient()

        _client(fake).post("/api/chat", json={
            "query": "젖양이 부족해요",
            "context": [{"title": "모유량 늘리기", "content": "자주 물리세요."}],
            "userInfo": {"babyAgeWeeks": 6},
        })

        call = fake.call_history[0]
        assert call["user_prompt"] == (
            "참고 정보:\n[1] 모유량 늘리기\n자주 물리세요.\n\n질문: 젖양이 부족해요"
        )
        assert '## 사용자 정보\n{"babyAgeWeeks": 6}' in call["system_prompt"]

    @pytest.mark.parametrize("user_info, expected", [
        ("생후 6주", "\"생후 6주\""),
        (["쌍둥이", 6], "[\"쌍둥이\", 6]"),
    ])
    def test_non_object_user_info_serialized(self, user_info, expected):
        """userInfo가 객체가 아니어도 그대로 직렬화하여 포함"""
        fake = FakeGenerationClient()

        response = _client(fake).post("/api/chat", json={"query": "황달", "userInfo": user_info})

        assert response.status_code == 200
        assert f"## 사용자 정보\n{expected}" in fake.call_history[0]["system_prompt"]

    def test_without_context(self):
        fake = FakeGenerationClient()

        response = _client(fake).post("/api/chat", json={"query": "황달이 있어요"})

        assert response.status_code == 200
        assert NO_CONTEXT_TEXT in fake.call_history[0]["user_prompt"]

    def test_non_list_context_tolerated(self):
        fake = FakeGenerationClient()

        response = _client(fake).post("/api/chat", json={"query": "황달", "context": "문자열"})

        assert response.status_code == 200
        assert NO_CONTEXT_TEXT in fake.call_history[0]["user_prompt"]

    def test_fallback_to_secondary(self):
        client = FallbackGenerationClient([
            FakeGenerationClient(error=UpstreamUnavailable("Claude API unreachable")),
            FakeGenerationClient(answer="대체 답변", model="gpt-4o-mini"),
        ])

        response = _client(client).post("/api/chat", json={"query": "유축 간격"})

        assert response.json()["model"] == "gpt-4o-mini"


class TestChatAPIErrors:
    """오류 응답 형식"""

    def test_query_required(self):
        fake = FakeGenerationClient()

        response = _client(fake).post("/api/chat", json={"context": []})

        assert response.status_code == 400
        assert response.json()["error"] == "query required"
        assert fake.call_count == 0

    def test_blank_query(self):
        response = _client(FakeGenerationClient()).post("/api/chat", json={"query": "  "})

        assert response.status_code == 400

    def test_no_provider_configured(self):
        response = _client(FallbackGenerationClient([])).post("/api/chat", json={"query": "황달"})

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": "No AI API configured",
            "message": "No AI API configured",
        }

    def test_provider_rejected(self):
        fake = FakeGenerationClient(error=UpstreamRejected("Claude API failed", error="Chat failed"))

        response = _client(fake).post("/api/chat", json={"query": "황달"})

        assert response.status_code == 502
        assert response.json()["error"] == "Chat failed"
        assert response.json()["message"] == "Claude API failed"

    def test_unexpected_error(self):
        class BrokenClient:
            name = "broken"

            async def generate(self, system_prompt, user_prompt):
                raise RuntimeError("boom")

        response = _client(BrokenClient()).post("/api/chat", json={"query": "황달"})

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Chat failed", "message": "boom"}


class TestHealth:
    def test_health(self):
        response = _client(FakeGenerationClient()).get("/health")

        assert response.json() == {"status": "healthy"}

    def test_root_lists_endpoints(self):
        response = _client(FakeGenerationClient()).get("/")

        paths = [e["path"] for e in response.json()["endpoints"]]
        assert "/api/search" in paths
        assert "/api/chat" in paths
