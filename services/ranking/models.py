"""
Knowledge Unit 검색 데이터 모델

- KnowledgeUnit: 외부 저장소에서 가져온 후보 레코드 (읽기 전용)
- ScoredRecord: 후보 + 점수 (요청 단위로만 존재)
- RankResult: 랭킹 결과 + 사용된 확장 키워드
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping


# 긴급도 값 (저장소 원문 그대로)
URGENCY_IMMEDIATE = "즉시대응필요"
URGENCY_WITHIN_24H = "24시간내확인"

_KNOWN_FIELDS = ("id", "title", "content", "keywords", "urgency", "category")


def _as_text(value: Any) -> str:
    """None / 비문자열 → 문자열"""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def _parse_keywords(value: Any) -> tuple[str, ...]:
    """
    keywords 필드 정규화

    저장소에 따라 list, JSON 문자열, 콤마 구분 문자열로 올 수 있음.
    파싱할 수 없으면 빈 tuple.
    """
    if value is None:
        return ()

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return ()
        if text.startswith("["):
            try:
                value = json.loads(text)
            except json.JSONDecodeError:
                return ()
        else:
            return tuple(kw.strip() for kw in text.split(",") if kw.strip())

    if not isinstance(value, (list, tuple)):
        return ()

    return tuple(_as_text(kw) for kw in value if kw is not None and _as_text(kw))


@dataclass(frozen=True)
class KnowledgeUnit:
    """지식 단위 후보 레코드"""
    id: Any
    title: str = ""
    content: str = ""
    keywords: tuple[str, ...] = ()
    urgency: str | None = None
    category: Any = None
    # chapter, timeline 등 그대로 응답에 포함할 필드
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "KnowledgeUnit":
        """
        저장소 row(dict) → KnowledgeUnit

        누락된 텍스트 필드는 빈 문자열, 누락/비정상 keywords는 빈 tuple
        """
        urgency = row.get("urgency")
        return cls(
            id=row.get("id"),
            title=_as_text(row.get("title")),
            content=_as_text(row.get("content")),
            keywords=_parse_keywords(row.get("keywords")),
            urgency=_as_text(urgency) if urgency is not None else None,
            category=row.get("category"),
            extra={k: v for k, v in row.items() if k not in _KNOWN_FIELDS},
        )

    @classmethod
    def coerce(cls, candidate: "KnowledgeUnit | Mapping[str, Any]") -> "KnowledgeUnit":
        if isinstance(candidate, KnowledgeUnit):
            return candidate
        if isinstance(candidate, Mapping):
            return cls.from_row(candidate)
        return cls(id=None)

    @property
    def keyword_text(self) -> str:
        """keyword 매칭용 소문자 결합 텍스트"""
        return " ".join(self.keywords).lower()

    def to_dict(self) -> dict[str, Any]:
        data = {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "keywords": list(self.keywords),
            "urgency": self.urgency,
            "category": self.category,
        }
        data.update(self.extra)
        return data


@dataclass(frozen=True)
class ScoredRecord:
    """점수가 매겨진 후보 (score None = 검색어 없이 반환된 미채점 후보)"""
    unit: KnowledgeUnit
    score: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data = self.unit.to_dict()
        if self.score is not None:
            data["score"] = self.score
        return data


@dataclass(frozen=True)
class KeywordExpansion:
    """검색어 확장 결과"""
    expanded: tuple[str, ...] = ()
    priority: tuple[str, ...] = ()

    @property
    def secondary(self) -> tuple[str, ...]:
        """priority가 아닌 확장 키워드"""
        return tuple(kw for kw in self.expanded if kw not in self.priority)


@dataclass(frozen=True)
class RankResult:
    """랭킹 결과"""
    results: list[ScoredRecord]
    expanded_keywords: list[str] = field(default_factory=list)
    priority_keywords: list[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.results)
