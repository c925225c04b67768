"""
육아 컴패니언 프롬프트

- 시스템 프롬프트 (상담사 역할 / 응답 스타일 / 주의사항 + 사용자 정보)
- 검색 결과 → 참고 정보 텍스트
"""

from __future__ import annotations

import json
from typing import Any, Mapping


NO_CONTEXT_TEXT = "관련 정보 없음"

SYSTEM_PROMPT = """당신은 '육아 컴패니언 AI'입니다. 모유수유에 대해 따뜻하고 전문적인 조언을 제공합니다.

## 역할
- 모유수유 전문 상담사 (IBCLC 수준의 지식)
- 공감적이고 지지적인 태도
- 과학적 근거 기반 정보 제공

## 응답 스타일
- 따뜻하고 친근한 말투 사용
- 핵심 정보를 먼저 제공
- 불릿 포인트로 가독성 높이기
- 응급 상황은 명확히 경고
- 200-300자 내외로 간결하게

## 주의사항
- 의료 진단을 하지 않음
- 심각한 증상은 전문가 상담 권유
- 불확실한 정보는 제공하지 않음
"""


def build_system_prompt(user_info: Any = None) -> str:
    """사용자 정보가 있으면 시스템 프롬프트 끝에 추가"""
    if not user_info:
        return SYSTEM_PROMPT

    user_text = json.dumps(user_info, ensure_ascii=False, default=str)
    return f"{SYSTEM_PROMPT}\n## 사용자 정보\n{user_text}"


def _item_text(item: Any, key: str) -> str:
    if isinstance(item, Mapping):
        value = item.get(key)
        return "" if value is None else str(value)
    return ""


def format_context(context: Any) -> str:
    """
    검색 결과 → 참고 정보 텍스트

    [1] 제목
    내용

    [2] ...
    """
    if not context or not isinstance(context, list):
        return NO_CONTEXT_TEXT

    return "\n\n".join(
        f"[{i}] {_item_text(item, 'title')}\n{_item_text(item, 'content')}"
        for i, item in enumerate(context, start=1)
    )


def build_user_prompt(query: str, context: Any) -> str:
    return f"참고 정보:\n{format_context(context)}\n\n질문: {query}"
