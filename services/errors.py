"""
Companion API 오류 분류

- InvalidInput: 필수 필드 누락 / 잘못된 요청 본문
- UpstreamUnavailable: 외부 저장소 / LLM 제공자 연결 불가 또는 미설정
- UpstreamRejected: 외부 호출이 실패 상태 코드를 반환

모든 오류는 요청 단위로 격리되며 재시도하지 않음
"""

from __future__ import annotations


class CompanionError(Exception):
    """API 오류 기본 클래스"""

    status_code: int = 500
    error: str = "Request failed"

    def __init__(self, message: str, *, error: str | None = None):
        super().__init__(message)
        self.message = message
        if error is not None:
            self.error = error


class InvalidInput(CompanionError):
    """필수 입력 누락"""

    status_code = 400
    error = "Invalid input"


class UpstreamUnavailable(CompanionError):
    """외부 서비스 연결 불가 / 미설정"""

    status_code = 503
    error = "Upstream unavailable"

    def __init__(
        self,
        message: str,
        *,
        error: str | None = None,
        misconfigured: bool = False,
    ):
        super().__init__(message, error=error)
        self.misconfigured = misconfigured
        # 미설정은 서버 설정 문제 (500)
        if misconfigured:
            self.status_code = 500


class UpstreamRejected(CompanionError):
    """외부 서비스가 실패 응답 반환"""

    status_code = 502
    error = "Upstream rejected"

    def __init__(
        self,
        message: str,
        *,
        error: str | None = None,
        upstream_status: int | None = None,
    ):
        super().__init__(message, error=error)
        self.upstream_status = upstream_status
