"""
점수 보정 규칙

일반 점수 계산 이후 순서대로 적용되는 수동 보정 규칙.
각 규칙은 이름을 가진 독립 객체이며 enabled 플래그로 개별 비활성화 가능.

규칙 형태:
- 검색어에 query_triggers 중 하나가 포함되면 규칙 활성
- 대상 필드(title / content)에 match_triggers 중 하나가 포함되면 delta 적용
- 규칙당 최대 1회 적용
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Mapping, Sequence

from api.config_loader import get_adjustment_rules

from .models import KnowledgeUnit

logger = logging.getLogger(__name__)


RULE_FIELDS = ("title", "content")


@dataclass(frozen=True)
class AdjustmentRule:
    """점수 보정 규칙"""
    name: str
    query_triggers: tuple[str, ...]
    match_triggers: tuple[str, ...]
    delta: int
    fields: tuple[str, ...] = ("title",)
    enabled: bool = True

    @classmethod
    def from_config(cls, entry: Mapping[str, Any]) -> "AdjustmentRule":
        name = str(entry.get("name", "")).strip()
        if not name:
            raise ValueError(f"Adjustment rule without name: {entry}")

        fields = tuple(entry.get("fields") or ("title",))
        unknown = [f for f in fields if f not in RULE_FIELDS]
        if unknown:
            raise ValueError(f"Adjustment rule {name}: unknown fields {unknown}")

        return cls(
            name=name,
            query_triggers=tuple(str(t).lower() for t in entry.get("query_triggers") or []),
            match_triggers=tuple(str(t).lower() for t in entry.get("match_triggers") or []),
            delta=int(entry.get("delta", 0)),
            fields=fields,
            enabled=bool(entry.get("enabled", True)),
        )

    def is_active(self, search_term: str) -> bool:
        """검색어 기준 규칙 활성 여부"""
        return self.enabled and any(t in search_term for t in self.query_triggers)

    def matches(self, unit: KnowledgeUnit) -> bool:
        for field_name in self.fields:
            text = getattr(unit, field_name).lower()
            if any(t in text for t in self.match_triggers):
                return True
        return False

    def score_delta(self, search_term: str, unit: KnowledgeUnit) -> int:
        """후보에 적용할 점수 변화량 (미적용 시 0)"""
        if self.is_active(search_term) and self.matches(unit):
            return self.delta
        return 0


@lru_cache(maxsize=1)
def load_adjustment_rules() -> tuple[AdjustmentRule, ...]:
    """보정 규칙 로드 (적용 순서 유지)"""
    rules = tuple(AdjustmentRule.from_config(entry) for entry in get_adjustment_rules())
    disabled = [r.name for r in rules if not r.enabled]
    if disabled:
        logger.info(f"Adjustment rules disabled: {disabled}")
    return rules


def apply_adjustments(
    search_term: str,
    unit: KnowledgeUnit,
    rules: Sequence[AdjustmentRule],
) -> int:
    """모든 보정 규칙의 delta 합"""
    return sum(rule.score_delta(search_term, unit) for rule in rules)


def clear_rule_cache() -> None:
    """캐시 초기화 (테스트용)"""
    load_adjustment_rules.cache_clear()
