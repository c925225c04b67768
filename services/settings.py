"""
런타임 설정

API 키, 저장소 URL 등 환경 의존 값은 Settings 하나로 모아서
앱 생성 시점에 각 컴포넌트로 명시적으로 전달한다.
컴포넌트 내부에서는 os.environ을 직접 읽지 않음.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping


DEFAULT_ANTHROPIC_MODEL = "claude-3-haiku-20240307"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"


def _get_optional(env: Mapping[str, str], key: str) -> str | None:
    """빈 문자열은 미설정으로 취급"""
    value = env.get(key, "").strip()
    return value or None


@dataclass(frozen=True)
class Settings:
    """Companion API 설정"""

    # 지식 저장소 (Supabase REST 또는 Postgres 직접 연결)
    supabase_url: str | None = None
    supabase_key: str | None = None
    database_url: str | None = None

    # LLM 제공자 (Anthropic 우선, OpenAI 대체)
    anthropic_api_key: str | None = None
    openai_api_key: str | None = None
    anthropic_model: str = DEFAULT_ANTHROPIC_MODEL
    openai_model: str = DEFAULT_OPENAI_MODEL
    max_tokens: int = 1024

    # 외부 호출 타임아웃 (초)
    upstream_timeout: float = 10.0

    # 검색
    max_candidates: int = 500
    default_limit: int = 5

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Settings":
        """
        환경변수에서 설정 로드

        Args:
            env: 환경변수 매핑 (None이면 os.environ)
        """
        if env is None:
            env = os.environ

        return cls(
            supabase_url=_get_optional(env, "SUPABASE_URL"),
            supabase_key=_get_optional(env, "SUPABASE_ANON_KEY"),
            database_url=_get_optional(env, "DATABASE_URL"),
            anthropic_api_key=_get_optional(env, "ANTHROPIC_API_KEY"),
            openai_api_key=_get_optional(env, "OPENAI_API_KEY"),
            anthropic_model=env.get("ANTHROPIC_MODEL", DEFAULT_ANTHROPIC_MODEL),
            openai_model=env.get("OPENAI_MODEL", DEFAULT_OPENAI_MODEL),
            max_tokens=int(env.get("LLM_MAX_TOKENS", "1024")),
            upstream_timeout=float(env.get("UPSTREAM_TIMEOUT_SECONDS", "10")),
            max_candidates=int(env.get("SEARCH_MAX_CANDIDATES", "500")),
            default_limit=int(env.get("SEARCH_DEFAULT_LIMIT", "5")),
        )

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)
