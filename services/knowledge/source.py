"""
Knowledge Unit 저장소 클라이언트

knowledge_units 테이블에서 후보 레코드를 가져옴.
카테고리 필터는 fetch 시점에 적용 (랭킹 이전).
검색어 필터링/정렬은 하지 않음 → RelevanceRanker 책임.

구현:
- SupabaseKnowledgeSource: Supabase REST (PostgREST) 조회
- PostgresKnowledgeSource: Postgres 직접 조회 (DATABASE_URL)
- StaticKnowledgeSource: 메모리 고정 목록 (테스트/로컬)

재시도 없음. 호출자가 타임아웃을 설정함.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Protocol, runtime_checkable

import psycopg
import requests
from psycopg.rows import dict_row

from services.errors import UpstreamRejected, UpstreamUnavailable
from services.ranking.models import KnowledgeUnit
from services.settings import Settings

logger = logging.getLogger(__name__)


KNOWLEDGE_TABLE = "knowledge_units"
KNOWLEDGE_COLUMNS = (
    "id",
    "title",
    "content",
    "chapter",
    "timeline",
    "urgency",
    "category",
    "keywords",
)


@runtime_checkable
class KnowledgeSource(Protocol):
    """후보 레코드 조회 프로토콜"""

    def fetch_candidates(self, category_id: Any = None) -> list[KnowledgeUnit]:
        """
        후보 레코드 조회

        Args:
            category_id: 카테고리 필터 (None이면 전체)

        Returns:
            KnowledgeUnit 리스트 (id 오름차순)

        Raises:
            UpstreamUnavailable: 저장소 연결 불가 / 미설정
            UpstreamRejected: 저장소 실패 응답
        """
        ...


# =============================================================================
# Supabase REST
# =============================================================================

class SupabaseKnowledgeSource:
    """
    Supabase REST 클라이언트

    GET {SUPABASE_URL}/rest/v1/knowledge_units?select=...&category=eq.{id}
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        timeout: float = 10.0,
        max_rows: int = 500,
        session: requests.Session | None = None,
    ):
        self.url = url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.max_rows = max_rows
        self._session = session or requests.Session()

    @property
    def endpoint(self) -> str:
        return f"{self.url}/rest/v1/{KNOWLEDGE_TABLE}"

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
        }

    def _params(self, category_id: Any) -> dict[str, str]:
        params = {
            "select": ",".join(KNOWLEDGE_COLUMNS),
            "order": "id.asc",
            "limit": str(self.max_rows),
        }
        if category_id is not None:
            params["category"] = f"eq.{category_id}"
        return params

    def fetch_candidates(self, category_id: Any = None) -> list[KnowledgeUnit]:
        try:
            response = self._session.get(
                self.endpoint,
                headers=self._headers(),
                params=self._params(category_id),
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            raise UpstreamUnavailable(
                f"Supabase request timed out after {self.timeout}s",
                error="Search failed",
            ) from e
        except requests.RequestException as e:
            raise UpstreamUnavailable(
                f"Supabase unreachable: {e}",
                error="Search failed",
            ) from e

        if not response.ok:
            logger.warning(
                f"Supabase search failed: status={response.status_code} "
                f"body={response.text[:200]}"
            )
            raise UpstreamRejected(
                "Supabase search failed",
                error="Search failed",
                upstream_status=response.status_code,
            )

        try:
            rows = response.json()
        except ValueError as e:
            raise UpstreamRejected(
                "Supabase returned invalid JSON",
                error="Search failed",
            ) from e

        if not isinstance(rows, list):
            raise UpstreamRejected(
                "Supabase returned unexpected payload",
                error="Search failed",
            )

        return [KnowledgeUnit.from_row(row) for row in rows if isinstance(row, Mapping)]


# =============================================================================
# Postgres (direct)
# =============================================================================

class PostgresKnowledgeSource:
    """Postgres 직접 조회 클라이언트"""

    def __init__(self, db_url: str, timeout: float = 10.0, max_rows: int = 500):
        self._db_url = db_url
        self.timeout = timeout
        self.max_rows = max_rows

    def _build_query(self, category_id: Any) -> tuple[str, list[Any]]:
        sql = f"SELECT {', '.join(KNOWLEDGE_COLUMNS)} FROM {KNOWLEDGE_TABLE} WHERE 1=1"
        params: list[Any] = []

        if category_id is not None:
            sql += " AND category = %s"
            params.append(category_id)

        sql += " ORDER BY id LIMIT %s"
        params.append(self.max_rows)
        return sql, params

    def fetch_candidates(self, category_id: Any = None) -> list[KnowledgeUnit]:
        sql, params = self._build_query(category_id)

        try:
            with psycopg.connect(
                self._db_url,
                row_factory=dict_row,
                connect_timeout=max(int(self.timeout), 1),
            ) as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, params)
                    rows = cur.fetchall()
        except psycopg.OperationalError as e:
            raise UpstreamUnavailable(
                f"Database unreachable: {e}",
                error="Search failed",
            ) from e
        except psycopg.Error as e:
            raise UpstreamRejected(
                f"Database query failed: {e}",
                error="Search failed",
            ) from e

        return [KnowledgeUnit.from_row(row) for row in rows]


# =============================================================================
# Static (tests / local)
# =============================================================================

class StaticKnowledgeSource:
    """
    고정 목록 저장소

    테스트에서 네트워크 없이 API를 검증하기 위해 사용
    """

    def __init__(self, rows: Iterable[KnowledgeUnit | Mapping[str, Any]] = ()):
        self.units = [KnowledgeUnit.coerce(row) for row in rows]
        self.call_history: list[Any] = []

    def fetch_candidates(self, category_id: Any = None) -> list[KnowledgeUnit]:
        self.call_history.append(category_id)
        if category_id is None:
            return list(self.units)
        return [unit for unit in self.units if unit.category == category_id]


class UnconfiguredKnowledgeSource:
    """저장소 미설정 상태 (모든 조회 실패)"""

    def fetch_candidates(self, category_id: Any = None) -> list[KnowledgeUnit]:
        raise UpstreamUnavailable(
            "Supabase not configured",
            error="Supabase not configured",
            misconfigured=True,
        )


def build_knowledge_source(settings: Settings) -> KnowledgeSource:
    """
    설정 기반 저장소 선택

    DATABASE_URL 우선, 없으면 Supabase REST, 둘 다 없으면 미설정
    """
    if settings.database_url:
        logger.info("Knowledge source: postgres")
        return PostgresKnowledgeSource(
            settings.database_url,
            timeout=settings.upstream_timeout,
            max_rows=settings.max_candidates,
        )

    if settings.supabase_configured:
        logger.info("Knowledge source: supabase")
        return SupabaseKnowledgeSource(
            settings.supabase_url,
            settings.supabase_key,
            timeout=settings.upstream_timeout,
            max_rows=settings.max_candidates,
        )

    logger.warning("Knowledge source not configured (SUPABASE_URL / DATABASE_URL)")
    return UnconfiguredKnowledgeSource()
