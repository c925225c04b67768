"""
Nursing Companion RAG API

Main FastAPI application
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.chat import router as chat_router
from api.search import router as search_router
from services.errors import CompanionError
from services.knowledge import KnowledgeSource, build_knowledge_source
from services.llm import GenerationClient, build_generation_client
from services.ranking import RelevanceRanker
from services.settings import Settings

logger = logging.getLogger(__name__)


def _error_body(error: str, message: str | None) -> dict:
    return {"success": False, "error": error, "message": message}


async def companion_error_handler(request: Request, exc: CompanionError) -> JSONResponse:
    logger.error(f"{request.url.path} error: {exc.error}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.error, exc.message),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """요청 본문 검증 실패 → 400"""
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()) if p != 'body')}: {err.get('msg')}"
        for err in exc.errors()
    )
    logger.warning(f"{request.url.path} invalid request: {details}")
    return JSONResponse(
        status_code=400,
        content=_error_body("Invalid input", details),
    )


def create_app(
    settings: Settings | None = None,
    knowledge_source: KnowledgeSource | None = None,
    generation_client: GenerationClient | None = None,
    ranker: RelevanceRanker | None = None,
) -> FastAPI:
    """
    앱 생성

    지정하지 않은 컴포넌트는 settings(기본: 환경변수)로 구성
    """
    settings = settings or Settings.from_env()

    app = FastAPI(
        title="Nursing Companion RAG API",
        description="육아 컴패니언 모유수유 상담 RAG API",
        version="0.1.0",
    )

    app.state.settings = settings
    app.state.knowledge_source = knowledge_source or build_knowledge_source(settings)
    app.state.generation_client = generation_client or build_generation_client(settings)
    app.state.ranker = ranker or RelevanceRanker()

    # CORS 설정
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    app.add_exception_handler(CompanionError, companion_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # 라우터 등록
    app.include_router(search_router)
    app.include_router(chat_router)

    @app.get("/health")
    async def health_check():
        """헬스 체크"""
        return {"status": "healthy"}

    @app.get("/")
    async def root():
        """API 정보"""
        return {
            "name": "Nursing Companion RAG API",
            "version": "0.1.0",
            "endpoints": [
                {"path": "/api/search", "method": "POST", "description": "지식 검색 (키워드 확장 랭킹)"},
                {"path": "/api/chat", "method": "POST", "description": "상담 답변 생성"},
                {"path": "/health", "method": "GET", "description": "헬스 체크"},
            ],
        }

    return app


app = create_app()
