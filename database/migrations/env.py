"""
database/migrations/env.py — Creative Library 스키마 마이그레이션 환경

연결 대상은 core.config 의 DATABASE_URL (환경 변수 → .env → Secrets Manager) 입니다.
alembic.ini 에는 URL 을 적지 않습니다.

autogenerate 비교 범위는 ORM 에 등록된 5개 테이블
(videos + video_* 종속 4테이블) 로 한정합니다. 같은 DB 를 쓰는
다른 서비스의 테이블은 drop 후보로 잡히지 않습니다.
"""

from __future__ import annotations

import sys
from logging.config import fileConfig
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parents[2]))

from alembic import context  # noqa: E402
from sqlalchemy import create_engine, pool  # noqa: E402

from core.config import get_settings  # noqa: E402
from database.base import Base  # noqa: E402
import database.models  # noqa: E402, F401  (모델 등록)

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata
MANAGED_TABLES = frozenset(target_metadata.tables)


def _database_url() -> str:
    s = get_settings()
    if not s.DATABASE_URL:
        raise RuntimeError(
            "DATABASE_URL 이 없어 마이그레이션을 실행할 수 없습니다 "
            "(.env 또는 crl/DATABASE_URL 시크릿 확인)"
        )
    return s.sqlalchemy_url


def _include_object(obj, name, type_, reflected, compare_to) -> bool:
    if type_ == "table":
        return name in MANAGED_TABLES
    return True


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata        = target_metadata,
        include_object         = _include_object,
        compare_type           = True,
        compare_server_default = True,
        **kwargs,
    )


def run_migrations_offline() -> None:
    """SQL 스크립트만 출력 (alembic upgrade head --sql)."""
    _configure(
        url           = _database_url(),
        literal_binds = True,
        dialect_opts  = {"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(_database_url(), poolclass=pool.NullPool)
    with engine.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()
    engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
