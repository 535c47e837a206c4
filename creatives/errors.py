"""
creatives/errors.py — 데이터 접근 코어 예외 계층

    CreativeLibraryError
    ├── ValidationError      필수 항목 누락 / 형식 오류 (쓰기 전 검증)
    ├── StorageError         DB 가 읽기·쓰기를 거부 (code / message / hint)
    ├── MalformedInputError  YouTube URL/ID 에서 11자 ID 를 추출할 수 없음
    └── NotFoundError        식별자로 조회한 행이 없음

재시도는 어디에서도 하지 않습니다.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

import psycopg2
from sqlalchemy.exc import DBAPIError, SQLAlchemyError


class CreativeLibraryError(Exception):
    """기본 예외 — 호출자에게 그대로 전달되는 코어 오류."""


class ValidationError(CreativeLibraryError):
    """
    제출 필수 항목이 비었거나 형식이 맞지 않습니다.
    어떤 쓰기도 일어나기 전에 발생합니다.
    """

    def __init__(self, fields: Sequence[str], message: Optional[str] = None) -> None:
        self.fields = list(fields)
        super().__init__(message or f"필수 항목이 비어 있습니다: {', '.join(self.fields)}")


class MalformedInputError(CreativeLibraryError):
    """YouTube URL/ID 입력에서 유효한 영상 ID 를 얻지 못했습니다."""

    def __init__(self, raw: str) -> None:
        self.raw = raw
        super().__init__(f"YouTube URL/ID 에서 youtube_id 를 추출할 수 없습니다: {raw!r}")


class NotFoundError(CreativeLibraryError):
    """식별자로 조회한 행이 없습니다."""

    def __init__(self, entity: str, key: Any) -> None:
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} not found: {key!r}")


class StorageError(CreativeLibraryError):
    """
    DB 가 쿼리를 거부했습니다.

    code    : 백엔드 고유 코드 (PostgreSQL SQLSTATE, SQLite 오류명 등)
    message : 백엔드 메시지
    hint    : 백엔드가 준 힌트 (PostgreSQL diag.message_hint)
    details : 백엔드가 준 상세 (PostgreSQL diag.message_detail)
    """

    def __init__(
        self,
        message: str,
        code:    Optional[str] = None,
        hint:    Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.hint = hint
        self.details = details
        super().__init__(message)

    @classmethod
    def from_exception(cls, exc: SQLAlchemyError) -> "StorageError":
        """SQLAlchemy 예외에서 백엔드 고유 정보를 꺼내 StorageError 로 변환합니다."""
        orig = exc.orig if isinstance(exc, DBAPIError) else None

        if isinstance(orig, psycopg2.Error):
            diag = orig.diag
            return cls(
                message = (diag.message_primary or str(orig)).strip(),
                code    = orig.pgcode,
                hint    = diag.message_hint,
                details = diag.message_detail,
            )

        if orig is not None:
            return cls(
                message = str(orig).strip(),
                code    = getattr(orig, "sqlite_errorname", None) or exc.code,
            )

        return cls(message=str(exc).strip(), code=exc.code)

    def to_dict(self) -> dict[str, Optional[str]]:
        return {
            "code":    self.code,
            "message": self.message,
            "hint":    self.hint,
            "details": self.details,
        }
