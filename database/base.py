"""database/base.py — 선언적 Base 와 제약 조건 이름 규칙."""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

# 인덱스·제약 이름을 고정해 Alembic autogenerate 결과가 DB 마다 달라지지 않게 합니다.
NAMING_CONVENTION = {
    "ix": "idx_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)
