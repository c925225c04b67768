"""
Knowledge Unit 검색 랭킹 모듈

연관 키워드 확장 + 휴리스틱 점수 기반 랭킹.
테이블/규칙/가중치는 config/*.yaml 에서 로드되며 요청 간 불변.
"""

from .models import (
    KnowledgeUnit,
    ScoredRecord,
    RankResult,
    KeywordExpansion,
    URGENCY_IMMEDIATE,
    URGENCY_WITHIN_24H,
)
from .tables import (
    KeywordAssociation,
    ScoringWeights,
    FieldWeights,
    expand_keywords,
    load_keyword_associations,
    load_scoring_weights,
)
from .rules import AdjustmentRule, load_adjustment_rules
from .ranker import RelevanceRanker, normalize_search_term, DEFAULT_LIMIT

__all__ = [
    # Models
    "KnowledgeUnit",
    "ScoredRecord",
    "RankResult",
    "KeywordExpansion",
    "URGENCY_IMMEDIATE",
    "URGENCY_WITHIN_24H",
    # Tables
    "KeywordAssociation",
    "ScoringWeights",
    "FieldWeights",
    "expand_keywords",
    "load_keyword_associations",
    "load_scoring_weights",
    # Rules
    "AdjustmentRule",
    "load_adjustment_rules",
    # Ranker
    "RelevanceRanker",
    "normalize_search_term",
    "DEFAULT_LIMIT",
]
