"""
database 패키지 — 크리에이티브 라이브러리 저장소 스키마

    base.py        DeclarativeBase + 제약 이름 규칙
    models.py      videos / video_core_summary / video_structure_core /
                   video_structure_detail / video_observation_notes
    migrations/    Alembic (alembic.ini 의 script_location)

스키마 적용:
    alembic upgrade head
"""

from database.base import Base  # noqa: F401
