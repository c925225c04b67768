"""
Knowledge Unit 저장소 모듈
"""

from .source import (
    KnowledgeSource,
    SupabaseKnowledgeSource,
    PostgresKnowledgeSource,
    StaticKnowledgeSource,
    UnconfiguredKnowledgeSource,
    build_knowledge_source,
)

__all__ = [
    "KnowledgeSource",
    "SupabaseKnowledgeSource",
    "PostgresKnowledgeSource",
    "StaticKnowledgeSource",
    "UnconfiguredKnowledgeSource",
    "build_knowledge_source",
]
