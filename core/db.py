"""
core/db.py — 저장소 연결과 세션 스코프

코어 연산은 모두 SessionScope(인자 없이 호출하면 with 블록을 돌려주는 callable)를
받습니다. 기본값은 프로세스 엔진에 묶인 get_db 이고, 테스트는 SQLite 엔진에
묶은 session_scope(...) 를 넘깁니다.

    from core.db import get_db
    with get_db() as db:
        db.execute(select(Video))

    scope = session_scope(sessionmaker(bind=test_engine))
    apply_filter({}, session_scope=scope)

PostgreSQL 연결 옵션:
    pool_pre_ping      유휴 연결 재사용 전 확인 (서버리스 DB 재연결)
    pool_recycle=1800  30분 지난 연결은 새로 엽니다
    TIME ZONE 'UTC'    created_at 비교·정렬 기준 고정
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, ContextManager, Generator, Optional

from sqlalchemy import Engine, create_engine, event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

logger = logging.getLogger(__name__)

SessionScope = Callable[[], ContextManager[Session]]

APPLICATION_NAME = "creative-library"

_POSTGRES_POOL: dict[str, Any] = {
    "pool_pre_ping": True,
    "pool_size":     5,
    "max_overflow":  10,
    "pool_recycle":  1800,
}


def _engine_options(url: str) -> dict[str, Any]:
    if not url.startswith("postgresql"):
        return {}
    return {
        **_POSTGRES_POOL,
        "connect_args": {
            "connect_timeout":  10,
            "application_name": APPLICATION_NAME,
        },
    }


def create_library_engine(url: Optional[str] = None, echo: bool = False) -> Engine:
    """
    저장소 엔진을 만듭니다. url 을 생략하면 설정의 DATABASE_URL 을 씁니다.
    """
    if url is None:
        from core.config import settings
        url = settings.sqlalchemy_url

    eng = create_engine(url, echo=echo, **_engine_options(url))

    if eng.dialect.name == "postgresql":
        @event.listens_for(eng, "connect")
        def _utc_session(dbapi_conn, connection_record):
            with dbapi_conn.cursor() as cur:
                cur.execute("SET TIME ZONE 'UTC'")

    return eng


# ─────────────────────────────────────────────────────────────
# 프로세스 엔진 (첫 사용 시 생성)
# ─────────────────────────────────────────────────────────────

_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


def get_engine() -> Engine:
    global _engine, _SessionLocal
    if _engine is None:
        from core.config import settings
        _engine = create_library_engine(echo=settings.ENVIRONMENT == "development")
        _SessionLocal = sessionmaker(bind=_engine, autoflush=False, expire_on_commit=False)
        logger.info("저장소 엔진 초기화 | dialect=%s", _engine.dialect.name)
    return _engine


def dispose_engine() -> None:
    """프로세스 종료 시 연결 풀을 정리합니다."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None


# ─────────────────────────────────────────────────────────────
# 세션 스코프
# ─────────────────────────────────────────────────────────────

def session_scope(factory: Callable[[], Session]) -> SessionScope:
    """
    세션 팩토리를 커밋/롤백 스코프로 감쌉니다.

    블록이 정상 종료하면 커밋, 예외면 롤백 후 재발생, 어느 쪽이든 세션을 닫습니다.
    UpsertCoordinator 는 단계마다 새 스코프를 열기 때문에
    뒤 단계의 실패가 앞 단계의 커밋을 되돌리지 않습니다.
    """

    @contextmanager
    def _scope() -> Generator[Session, None, None]:
        session = factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    return _scope


@contextmanager
def get_db() -> Generator[Session, None, None]:
    get_engine()
    with session_scope(_SessionLocal)() as session:
        yield session


def ping_db() -> bool:
    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as exc:
        logger.error("저장소 연결 실패: %s", exc)
        return False
