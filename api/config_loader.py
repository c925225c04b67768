"""
Search Rule Configuration Loader

검색 랭킹 규칙 설정 파일 로더
- 연관 키워드 테이블 / 점수 보정 규칙 / 가중치를 YAML 설정 파일에서 로드
- 코드 수정 없이 설정 파일만으로 규칙 변경 가능
- 프로세스 수명 동안 1회 로드 후 캐싱 (요청 간 불변)
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml


# 설정 파일 디렉토리 경로
CONFIG_DIR = Path(__file__).parent.parent / "config"


@lru_cache(maxsize=None)
def _load_yaml(filename: str) -> Any:
    """YAML 파일 로드 (캐싱)"""
    filepath = CONFIG_DIR / filename
    if not filepath.exists():
        raise FileNotFoundError(f"Config file not found: {filepath}")

    with open(filepath, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def get_keyword_associations() -> list[dict[str, Any]]:
    """
    연관 키워드 테이블 반환 (정의 순서 유지)

    Returns:
        [{"trigger": "안물", "terms": ["젖 거부", ...]}, ...]
    """
    return _load_yaml("keyword_associations.yaml") or []


def get_adjustment_rules() -> list[dict[str, Any]]:
    """
    점수 보정 규칙 목록 반환 (적용 순서 유지)

    Returns:
        [{"name": "refusal_sleep_penalty", "query_triggers": [...], ...}, ...]
    """
    return _load_yaml("adjustment_rules.yaml") or []


def get_scoring_weights() -> dict[str, Any]:
    """
    필드별 점수 가중치 반환

    Returns:
        {"exact_match": {"title": 15, ...}, "urgency_bonus": {...}, ...}
    """
    return _load_yaml("scoring_weights.yaml") or {}


def clear_cache():
    """캐시 초기화 (테스트용)"""
    _load_yaml.cache_clear()
