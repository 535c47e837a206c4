"""
Creative Library 테스트 설정
============================

[FIXTURES]
- engine        : 테스트마다 새 in-memory SQLite (StaticPool, ORM 메타데이터로 스키마 생성)
- scope         : engine 에 묶인 커밋/롤백 세션 스코프 (core.db.session_scope)
- reject_writes : 테이블에 RAISE(ABORT) 트리거를 걸어 실제 저장 실패를 만듭니다
- add_video     : 목록·필터 테스트용 영상 + 종속 행 직접 삽입
- submission    : 필수 항목이 모두 채워진 제출 폼

Usage:
    pytest tests/
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.db import session_scope  # noqa: E402
from database.base import Base  # noqa: E402
from database.models import CoreSummary, StructureCore, Video  # noqa: E402

BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def scope(engine):
    return session_scope(sessionmaker(bind=engine, autoflush=False, expire_on_commit=False))


@pytest.fixture
def reject_writes(engine):
    """reject_writes("video_structure_detail") → 이후 해당 테이블 INSERT/UPDATE 가 실패합니다."""

    def _reject(table: str) -> None:
        with engine.begin() as conn:
            for when in ("INSERT", "UPDATE"):
                conn.exec_driver_sql(
                    f"CREATE TRIGGER reject_{table}_{when.lower()} "
                    f"BEFORE {when} ON {table} "
                    f"BEGIN SELECT RAISE(ABORT, '{table} write rejected'); END;"
                )

    return _reject


@pytest.fixture
def add_video(scope):
    """
    add_video("aaaaaaaaaaa", minutes=1, core={"product_value_focus": "A"}, summary="...")

    minutes: BASE_TIME 기준 created_at 오프셋 (클수록 최신)
    core:    None 이면 video_structure_core 행을 만들지 않습니다
    """

    def _add(youtube_id, minutes=0, core=None, summary=None, title=None):
        with scope() as session:
            video = Video(
                youtube_id = youtube_id,
                title      = title or f"title-{youtube_id}",
                created_at = BASE_TIME + timedelta(minutes=minutes),
            )
            session.add(video)
            session.flush()
            if core is not None:
                session.add(StructureCore(video_id=video.id, **core))
            if summary is not None:
                session.add(CoreSummary(video_id=video.id, hitokoto_summary=summary))
            return video.id

    return _add


@pytest.fixture
def count_rows(scope):
    def _count(model) -> int:
        with scope() as session:
            return session.execute(select(func.count()).select_from(model)).scalar_one()

    return _count


@pytest.fixture
def submission():
    return {
        "youtube_url":                "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "title":                      "  Never Gonna Give You Up  ",
        "channel_name":               "Rick Astley",
        "published_year":             "2009",
        "hitokoto_summary":           "約束を繰り返すだけで記憶に残る",
        "product_value_focus":        "信頼",
        "visual_main_character":      "",
        "emotional_tone":             "高揚",
        "product_value_focus_detail": "約束の反復で信頼感を作る",
        "appeal_method":              "反復",
        "observation_text":           "サビ前の溜めが長い",
        "observation_points":         "冒頭3秒で顔\n\n  手拍子  \n",
    }
