"""
Relevance Ranker

검색어 확장 + 휴리스틱 점수로 후보 레코드를 정렬하고 limit개로 자름.

처리 순서:
1. 검색어가 비어 있으면 채점 없이 앞에서 limit개 반환 (fetch 순서 유지)
2. 연관 키워드 테이블로 검색어 확장 (첫 매칭 항목 = priority keyword)
3. 후보별 점수 계산 (정확 일치 / priority / 확장 키워드 / 긴급도 / 보정 규칙)
4. 점수 0 이하 제거
5. 점수 내림차순 stable 정렬 (동점은 fetch 순서 유지)
6. limit개로 자름

요청 간 공유 상태 없음. 테이블/규칙/가중치는 불변.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Sequence

from .models import KeywordExpansion, KnowledgeUnit, RankResult, ScoredRecord
from .rules import AdjustmentRule, apply_adjustments, load_adjustment_rules
from .tables import (
    FieldWeights,
    KeywordAssociation,
    ScoringWeights,
    expand_keywords,
    load_keyword_associations,
    load_scoring_weights,
)

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 5


def normalize_search_term(query: str | None) -> str:
    """검색어 정규화 (trim + 소문자)"""
    if not query:
        return ""
    return query.strip().lower()


def _field_score(term: str, unit: KnowledgeUnit, weights: FieldWeights) -> int:
    """title / content / keywords 각각 포함 여부에 따른 점수"""
    score = 0
    if term in unit.title.lower():
        score += weights.title
    if term in unit.content.lower():
        score += weights.content
    if term in unit.keyword_text:
        score += weights.keywords
    return score


class RelevanceRanker:
    """
    검색 결과 랭커

    Args:
        associations: 연관 키워드 테이블 (None이면 설정 파일)
        rules: 점수 보정 규칙 (None이면 설정 파일)
        weights: 점수 가중치 (None이면 설정 파일)
    """

    def __init__(
        self,
        associations: Sequence[KeywordAssociation] | None = None,
        rules: Sequence[AdjustmentRule] | None = None,
        weights: ScoringWeights | None = None,
    ):
        self.associations = tuple(
            associations if associations is not None else load_keyword_associations()
        )
        self.rules = tuple(rules if rules is not None else load_adjustment_rules())
        self.weights = weights or load_scoring_weights()

    def expand(self, search_term: str) -> KeywordExpansion:
        return expand_keywords(
            search_term,
            self.associations,
            priority_limit=self.weights.priority_keyword_limit,
        )

    def score(
        self,
        search_term: str,
        unit: KnowledgeUnit,
        expansion: KeywordExpansion,
    ) -> int:
        """단일 후보 점수"""
        score = _field_score(search_term, unit, self.weights.exact_match)

        for term in expansion.priority:
            score += _field_score(term, unit, self.weights.priority_keyword)

        for term in expansion.secondary:
            score += _field_score(term, unit, self.weights.expanded_keyword)

        score += self.weights.urgency_bonus_for(unit.urgency)
        score += apply_adjustments(search_term, unit, self.rules)

        return score

    def rank(
        self,
        search_term: str | None,
        candidates: Iterable[KnowledgeUnit | Mapping[str, Any]],
        limit: int = DEFAULT_LIMIT,
    ) -> RankResult:
        """
        후보 랭킹

        Args:
            search_term: 검색어 (내부에서 trim + 소문자 처리)
            candidates: 카테고리 필터가 적용된 후보 목록 (fetch 순서)
            limit: 최대 반환 개수

        Returns:
            RankResult (results 길이 ≤ limit)
        """
        term = normalize_search_term(search_term)
        limit = max(int(limit), 0)
        units = [KnowledgeUnit.coerce(c) for c in candidates]

        if not term:
            return RankResult(results=[ScoredRecord(unit) for unit in units[:limit]])

        expansion = self.expand(term)
        logger.debug(
            f"Search term expanded: term={term!r} "
            f"priority={list(expansion.priority)} expanded={list(expansion.expanded)}"
        )

        scored = [ScoredRecord(unit, self.score(term, unit, expansion)) for unit in units]
        scored = [record for record in scored if record.score > 0]

        # sorted()는 stable → 동점은 fetch 순서 유지
        scored.sort(key=lambda record: -record.score)

        return RankResult(
            results=scored[:limit],
            expanded_keywords=list(expansion.expanded),
            priority_keywords=list(expansion.priority),
        )
