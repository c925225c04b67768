"""
연관 키워드 테이블 / 점수 가중치

설정 파일(config/*.yaml)에서 로드하여 불변 객체로 캐싱.
연관 키워드 테이블은 정의 순서가 의미를 가짐 (첫 매칭 항목 = priority).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Mapping, Sequence

from api.config_loader import get_keyword_associations, get_scoring_weights

from .models import KeywordExpansion

logger = logging.getLogger(__name__)


# =============================================================================
# Keyword Association Table
# =============================================================================

@dataclass(frozen=True)
class KeywordAssociation:
    """trigger 부분문자열 → 연관 키워드 목록"""
    trigger: str
    terms: tuple[str, ...]

    @classmethod
    def from_config(cls, entry: Mapping[str, Any]) -> "KeywordAssociation":
        trigger = str(entry.get("trigger", "")).strip().lower()
        if not trigger:
            raise ValueError(f"Keyword association without trigger: {entry}")
        terms = tuple(
            str(term).strip().lower()
            for term in entry.get("terms") or []
            if str(term).strip()
        )
        return cls(trigger=trigger, terms=terms)


@lru_cache(maxsize=1)
def load_keyword_associations() -> tuple[KeywordAssociation, ...]:
    """연관 키워드 테이블 로드 (정의 순서 유지)"""
    return tuple(
        KeywordAssociation.from_config(entry)
        for entry in get_keyword_associations()
    )


def expand_keywords(
    search_term: str,
    associations: Sequence[KeywordAssociation],
    priority_limit: int = 3,
) -> KeywordExpansion:
    """
    검색어 확장

    테이블을 정의 순서대로 스캔하여 trigger가 검색어에 포함된 모든 항목의
    terms를 합친다 (중복 제거, 첫 등장 순서 유지).
    처음 매칭된 항목의 앞 priority_limit개 terms만 priority keyword.

    Args:
        search_term: 소문자/trim 처리된 검색어
        associations: 연관 키워드 테이블
        priority_limit: priority keyword 최대 개수

    Returns:
        KeywordExpansion
    """
    expanded: list[str] = []
    priority: tuple[str, ...] | None = None

    if not search_term:
        return KeywordExpansion()

    for association in associations:
        if association.trigger not in search_term:
            continue

        if priority is None:
            priority = association.terms[:priority_limit]

        for term in association.terms:
            if term not in expanded:
                expanded.append(term)

    return KeywordExpansion(expanded=tuple(expanded), priority=priority or ())


# =============================================================================
# Scoring Weights
# =============================================================================

@dataclass(frozen=True)
class FieldWeights:
    """필드별 가중치 (title / content / keywords)"""
    title: int
    content: int
    keywords: int

    @classmethod
    def from_config(cls, data: Mapping[str, Any] | None, default: "FieldWeights") -> "FieldWeights":
        if not data:
            return default
        return cls(
            title=int(data.get("title", default.title)),
            content=int(data.get("content", default.content)),
            keywords=int(data.get("keywords", default.keywords)),
        )


@dataclass(frozen=True)
class ScoringWeights:
    """검색 점수 가중치"""
    exact_match: FieldWeights = FieldWeights(title=15, content=8, keywords=12)
    priority_keyword: FieldWeights = FieldWeights(title=10, content=6, keywords=8)
    expanded_keyword: FieldWeights = FieldWeights(title=2, content=1, keywords=2)
    # (urgency 값, 가산점) 쌍
    urgency_bonus: tuple[tuple[str, int], ...] = (
        ("즉시대응필요", 3),
        ("24시간내확인", 2),
    )
    priority_keyword_limit: int = 3

    def urgency_bonus_for(self, urgency: str | None) -> int:
        """긴급도 가산점 (정의되지 않은 값은 0)"""
        if not urgency:
            return 0
        for value, bonus in self.urgency_bonus:
            if urgency == value:
                return bonus
        return 0

    @classmethod
    def from_config(cls, data: Mapping[str, Any]) -> "ScoringWeights":
        defaults = cls()
        urgency = data.get("urgency_bonus")
        return cls(
            exact_match=FieldWeights.from_config(
                data.get("exact_match"), defaults.exact_match
            ),
            priority_keyword=FieldWeights.from_config(
                data.get("priority_keyword"), defaults.priority_keyword
            ),
            expanded_keyword=FieldWeights.from_config(
                data.get("expanded_keyword"), defaults.expanded_keyword
            ),
            urgency_bonus=(
                tuple((str(k), int(v)) for k, v in urgency.items())
                if urgency else defaults.urgency_bonus
            ),
            priority_keyword_limit=int(
                data.get("priority_keyword_limit", defaults.priority_keyword_limit)
            ),
        )


@lru_cache(maxsize=1)
def load_scoring_weights() -> ScoringWeights:
    """가중치 로드"""
    weights = ScoringWeights.from_config(get_scoring_weights())
    logger.debug(f"Scoring weights loaded: {weights}")
    return weights


def clear_table_cache() -> None:
    """캐시 초기화 (테스트용)"""
    load_keyword_associations.cache_clear()
    load_scoring_weights.cache_clear()
