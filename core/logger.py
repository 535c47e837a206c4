"""
core/logger.py — 구조화 로깅 (structlog → stdlib)

구성:
    structlog 이벤트와 stdlib 로거(sqlalchemy, alembic, botocore)가
    같은 ProcessorFormatter 체인을 통과합니다.

        콘솔   개발: 컬러 콘솔 / 운영(또는 json_logs=True): JSON
        파일   선택. 항상 JSON, 10 MB 회전, 백업 5개 (logs/creative-library.log)

컨텍스트:
    log_context() 로 묶은 블록 안의 모든 로그에 video_id / youtube_id / phase / step
    이 자동으로 붙습니다. 블록을 벗어나면 (예외 포함) 이전 상태로 돌아갑니다.

    from core.logger import configure_logging, get_logger, log_context, Phase
    configure_logging()
    logger = get_logger(__name__)

    with log_context(youtube_id="dQw4w9WgXcQ", phase=Phase.SUBMISSION):
        logger.info("제출 처리 시작")
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator, Optional

import structlog
from structlog.stdlib import ProcessorFormatter

SERVICE_NAME = "creative-library"
LOG_DIR = Path(os.getenv("LOG_DIR", "logs"))


class Phase:
    """로그 컨텍스트의 phase 값."""
    INIT        = "init"
    CATALOG     = "catalog"          # 필터 후보 집계
    FILTER_READ = "filter_read"      # 공개 목록 조회
    DETAIL_READ = "detail_read"      # 상세 조회
    SUBMISSION  = "submission"       # 일괄 등록 (검증 + videos)
    DB_WRITE    = "db_write"         # 종속 테이블 단계


# 운영이 아니면 SQL 을 INFO 로 보고, 나머지 라이브러리는 WARNING 이상만
_QUIET_LIBRARIES = ("sqlalchemy.pool", "boto3", "botocore", "urllib3")


def _service(logger: Any, method: str, event_dict: dict) -> dict:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def _event_as_message(logger: Any, method: str, event_dict: dict) -> dict:
    """파일 JSON 에서는 event 대신 message 키를 씁니다 (로그 수집기 기본 필드)."""
    event_dict["message"] = event_dict.pop("event", "")
    return event_dict


def _pre_chain() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="@timestamp"),
        _service,
    ]


def _formatter(pre_chain: list, *render: Any) -> ProcessorFormatter:
    return ProcessorFormatter(
        foreign_pre_chain=pre_chain,
        processors=[
            ProcessorFormatter.remove_processors_meta,
            structlog.processors.ExceptionRenderer(),
            *render,
        ],
    )


def configure_logging(
    level:     Optional[str]  = None,
    json_logs: Optional[bool] = None,
    log_file:  bool           = False,
) -> None:
    """
    프로세스 시작 시 1회 호출합니다.

    Args:
        level:     기본 settings.LOG_LEVEL
        json_logs: 콘솔 JSON 여부. 기본은 운영 환경일 때만
        log_file:  logs/creative-library.log 회전 파일 추가
    """
    from core.config import settings

    level_name = (level or settings.LOG_LEVEL).upper()
    log_level = getattr(logging, level_name, logging.INFO)
    use_json = settings.is_production if json_logs is None else json_logs
    pre_chain = _pre_chain()

    structlog.configure(
        processors=[*pre_chain, ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=True,
    )

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(_formatter(
        pre_chain,
        structlog.processors.JSONRenderer() if use_json
        else structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty(), sort_keys=False),
    ))
    handlers: list[logging.Handler] = [console]

    if log_file:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        rotating = logging.handlers.RotatingFileHandler(
            LOG_DIR / f"{SERVICE_NAME}.log",
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
            delay=True,
        )
        rotating.setFormatter(_formatter(pre_chain, _event_as_message, structlog.processors.JSONRenderer()))
        handlers.append(rotating)

    root = logging.getLogger()
    root.handlers.clear()
    for handler in handlers:
        handler.setLevel(log_level)
        root.addHandler(handler)
    root.setLevel(log_level)

    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.WARNING if settings.is_production else logging.INFO
    )
    for name in _QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)

    get_logger(__name__).info(
        "로깅 설정 완료",
        phase  = Phase.INIT,
        level  = level_name,
        format = "json" if use_json else "console",
        file   = log_file,
    )


# ─────────────────────────────────────────────────────────────
# 로그 컨텍스트
# ─────────────────────────────────────────────────────────────

def bind_log_context(
    *,
    video_id:   Optional[int] = None,
    youtube_id: Optional[str] = None,
    phase:      Optional[str] = None,
    step:       Optional[str] = None,
    **extra: Any,
) -> None:
    """None 이 아닌 값만 현재 컨텍스트에 추가/갱신합니다."""
    values = {"video_id": video_id, "youtube_id": youtube_id, "phase": phase, "step": step, **extra}
    bound = {k: v for k, v in values.items() if v is not None}
    if bound:
        structlog.contextvars.bind_contextvars(**bound)


def clear_log_context() -> None:
    structlog.contextvars.clear_contextvars()


@contextmanager
def log_context(**values: Any) -> Generator[None, None, None]:
    """bind_log_context 와 같은 인자. 블록 종료 시 이전 컨텍스트를 복원합니다."""
    saved = structlog.contextvars.get_contextvars()
    bind_log_context(**values)
    try:
        yield
    finally:
        structlog.contextvars.clear_contextvars()
        if saved:
            structlog.contextvars.bind_contextvars(**saved)


def get_logger(name: str = __name__) -> Any:
    return structlog.get_logger(name)
