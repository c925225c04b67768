"""
Search API Router

POST /api/search - Knowledge Unit 검색

처리 흐름:
1. categoryId로 저장소에서 후보 조회 (카테고리 필터는 랭킹 이전)
2. 검색어 확장 + 점수 계산 + 정렬 (RelevanceRanker)
3. 상위 limit개 반환
"""

from __future__ import annotations

import logging
import time
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from api.dependencies import get_knowledge_source, get_ranker, get_settings
from services.errors import CompanionError, InvalidInput
from services.knowledge import KnowledgeSource
from services.ranking import RelevanceRanker, normalize_search_term
from services.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["search"])


class SearchRequest(BaseModel):
    """
    검색 요청

    입력:
    - query: 검색어 (query 또는 categoryId 중 하나 필수)
    - categoryId: 카테고리 필터
    - limit: 최대 결과 수 (미지정 시 기본값 5)
    """
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {"query": "안물어요", "categoryId": None, "limit": 5},
            ]
        },
    )

    query: str | None = Field(None, description="검색어")
    category_id: int | str | None = Field(None, alias="categoryId", description="카테고리 필터")
    limit: int | None = Field(None, ge=1, description="최대 결과 수")


class SearchResponse(BaseModel):
    """
    검색 응답

    출력:
    - results: 점수 내림차순 레코드 목록 (검색어가 있을 때만 score 포함)
    - count: 결과 수
    - expandedKeywords / priorityKeywords: 검색에 사용된 확장 키워드
    """
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    results: list[dict[str, Any]] = Field(default=[])
    count: int = 0
    expanded_keywords: list[str] = Field(default=[], alias="expandedKeywords")
    priority_keywords: list[str] = Field(default=[], alias="priorityKeywords")


@router.post("/search", response_model=SearchResponse)
def search_knowledge(
    request: SearchRequest,
    source: KnowledgeSource = Depends(get_knowledge_source),
    ranker: RelevanceRanker = Depends(get_ranker),
    settings: Settings = Depends(get_settings),
) -> SearchResponse:
    """
    Knowledge Unit 검색

    - 검색어가 없으면 카테고리 후보를 fetch 순서대로 limit개 반환 (score 없음)
    - 검색어가 있으면 점수 0 이하 제외, 점수 내림차순 (동점은 fetch 순서)
    """
    start_time = time.time()

    query = normalize_search_term(request.query)
    category_id = request.category_id if request.category_id != "" else None
    limit = request.limit or settings.default_limit

    # 공백뿐인 query도 입력된 것으로 취급 (정규화 후 빈 검색어 → 미채점 반환)
    if not request.query and category_id is None:
        raise InvalidInput("query or categoryId required", error="query or categoryId required")

    try:
        candidates = source.fetch_candidates(category_id)
        ranked = ranker.rank(query, candidates, limit=limit)
    except CompanionError:
        raise
    except Exception as e:
        logger.error(f"Search error: {e}")
        raise CompanionError(str(e), error="Search failed") from e

    latency_ms = (time.time() - start_time) * 1000
    logger.info(
        f"[SEARCH] query={query!r} category={category_id} "
        f"candidates={len(candidates)} results={len(ranked)} "
        f"latency={latency_ms:.0f}ms"
    )

    return SearchResponse(
        results=[record.to_dict() for record in ranked.results],
        count=len(ranked),
        expanded_keywords=ranked.expanded_keywords,
        priority_keywords=ranked.priority_keywords,
    )
