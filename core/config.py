"""
core/config.py — 크리에이티브 라이브러리 설정

값의 출처 (앞이 우선):
    1. 프로세스 환경 변수
    2. .env (python-dotenv)
    3. AWS Secrets Manager  crl/DATABASE_URL
       ENVIRONMENT=production 이고 1·2 에 DATABASE_URL 이 없을 때만 조회

    from core.config import settings
    settings.LISTING_LIMIT        # 50
    settings.NULL_SENTINEL        # "__NULL__"

DATABASE_URL 이 끝내 비어 있으면 validate_settings() 가 ValueError 를 올립니다.
프로세스 진입점에서 한 번 호출해 기동을 막습니다.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

SECRET_PREFIX = "crl"


def _secret_value(key: str, region: str) -> Optional[str]:
    """Secrets Manager 의 {SECRET_PREFIX}/{key} 시크릿에서 key 값을 꺼냅니다."""
    import boto3
    from botocore.exceptions import BotoCoreError, ClientError

    secret_id = f"{SECRET_PREFIX}/{key}"
    try:
        response = boto3.client("secretsmanager", region_name=region).get_secret_value(SecretId=secret_id)
        payload = json.loads(response["SecretString"])
    except (BotoCoreError, ClientError, ValueError, KeyError) as exc:
        logger.warning("시크릿 조회 실패 [%s]: %s", secret_id, exc)
        return None
    return payload.get(key) if isinstance(payload, dict) else None


@dataclass(frozen=True)
class Settings:
    DATABASE_URL: str
    ENVIRONMENT:  str = "development"
    AWS_REGION:   str = "ap-northeast-1"
    LOG_LEVEL:    str = "INFO"

    # 공개 목록
    LISTING_LIMIT:              int = 50
    PUBLIC_OPTION_SAMPLE_LIMIT: int = 500

    # 관리 화면
    ADMIN_OPTION_SAMPLE_LIMIT: int = 2000
    RECENT_VIDEOS_LIMIT:       int = 10

    # "값이 실제로 NULL" 을 고르는 필터 값. 실제 패싯 값과 겹치면 안 됩니다.
    NULL_SENTINEL: str = "__NULL__"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def sqlalchemy_url(self) -> str:
        """postgres:// 스킴은 SQLAlchemy 2.x 가 받지 않으므로 postgresql:// 로 바꿉니다."""
        if self.DATABASE_URL.startswith("postgres://"):
            return "postgresql://" + self.DATABASE_URL[len("postgres://"):]
        return self.DATABASE_URL


_INT_KEYS = (
    "LISTING_LIMIT",
    "PUBLIC_OPTION_SAMPLE_LIMIT",
    "ADMIN_OPTION_SAMPLE_LIMIT",
    "RECENT_VIDEOS_LIMIT",
)


def _int_overrides() -> dict[str, int]:
    """정수 설정 환경 변수. 숫자가 아니면 경고 후 기본값을 씁니다."""
    overrides: dict[str, int] = {}
    for key in _INT_KEYS:
        raw = os.getenv(key, "").strip()
        if not raw:
            continue
        try:
            overrides[key] = int(raw)
        except ValueError:
            logger.warning("정수가 아닌 설정값 무시 [%s=%r]", key, raw)
    return overrides


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    environment = os.getenv("ENVIRONMENT", "development")
    region = os.getenv("AWS_REGION", "ap-northeast-1")

    database_url = os.getenv("DATABASE_URL", "").strip()
    if not database_url and environment == "production":
        database_url = _secret_value("DATABASE_URL", region) or ""

    return Settings(
        DATABASE_URL = database_url,
        ENVIRONMENT  = environment,
        AWS_REGION   = region,
        LOG_LEVEL    = os.getenv("LOG_LEVEL", "INFO"),
        **_int_overrides(),
    )


settings = get_settings()


def validate_settings() -> None:
    """필수 설정 확인. 빠진 값이 있으면 ValueError."""
    current = get_settings()
    if not current.DATABASE_URL:
        raise ValueError(
            "DATABASE_URL 이 설정되지 않았습니다 "
            f"(.env 또는 Secrets Manager {SECRET_PREFIX}/DATABASE_URL)"
        )
    logger.info("설정 확인 완료 | env=%s", current.ENVIRONMENT)
