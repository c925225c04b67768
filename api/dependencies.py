"""
FastAPI 의존성

create_app()에서 app.state에 등록한 컴포넌트를 라우터로 주입
"""

from __future__ import annotations

from fastapi import Request

from services.knowledge import KnowledgeSource
from services.llm import GenerationClient
from services.ranking import RelevanceRanker
from services.settings import Settings


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_knowledge_source(request: Request) -> KnowledgeSource:
    return request.app.state.knowledge_source


def get_ranker(request: Request) -> RelevanceRanker:
    return request.app.state.ranker


def get_generation_client(request: Request) -> GenerationClient:
    return request.app.state.generation_client
