"""
creatives/upsert.py — 일괄 등록 (UpsertCoordinator)

제출 1건을 5개 테이블에 나눠 저장합니다. 의도는 원자적이지만 실행은 단계별 커밋입니다.

실행 순서:
    0. 검증        youtube_id 추출 + 필수 항목 확인 → 실패 시 쓰기 없이 중단
    1. videos      INSERT … ON CONFLICT (youtube_id) DO UPDATE RETURNING id
                   → 실패 시 치명적 오류, 종속 단계는 시도하지 않음
    2. core_summary / structure_core / structure_detail
                   INSERT … ON CONFLICT (video_id) DO UPDATE  (재제출 시 덮어쓰기)
    3. observation_notes
                   단순 INSERT (재제출마다 1행 추가)

부분 실패:
    2~3 단계의 StorageError 는 잡아서 로그(단계·테이블·video_id)를 남기고
    failed_steps 에 순서대로 기록한 뒤 나머지 단계를 계속 진행합니다.

동시성:
    같은 youtube_id 의 동시 최초 등록 경합은 DB UNIQUE 위반으로 드러나며
    다른 저장 실패와 똑같이 처리됩니다. 앱 레벨 잠금은 두지 않습니다.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.db import SessionScope, get_db
from core.logger import Phase, get_logger, log_context
from creatives.errors import CreativeLibraryError, StorageError, ValidationError
from creatives.identifiers import require_youtube_id
from creatives.schemas import SubmissionPayload
from database.models import (
    CoreSummary,
    ObservationNote,
    StructureCore,
    StructureDetail,
    Video,
)

logger = get_logger(__name__)

# ── 단계 라벨 ─────────────────────────────────────────────────
STEP_CORE_SUMMARY      = "core_summary"
STEP_STRUCTURE_CORE    = "structure_core"
STEP_STRUCTURE_DETAIL  = "structure_detail"
STEP_OBSERVATION_NOTES = "observation_notes"


# ─────────────────────────────────────────────────────────────
# 결과 컨테이너
# ─────────────────────────────────────────────────────────────

class SubmissionOutcome(str, enum.Enum):
    SUCCESS = "success"   # 모든 단계 성공
    PARTIAL = "partial"   # videos 는 저장, 종속 단계 일부 실패
    FATAL   = "fatal"     # 검증 실패 또는 videos 저장 실패 — 종속 단계 미실행


@dataclass
class StepFailure:
    step:  str
    table: str
    error: StorageError

    def to_dict(self) -> dict[str, Any]:
        return {"step": self.step, "table": self.table, **self.error.to_dict()}


@dataclass
class SubmissionResult:
    """submit() 반환 타입."""

    outcome:    SubmissionOutcome
    video_id:   Optional[int] = None
    youtube_id: Optional[str] = None
    failures:   list[StepFailure] = field(default_factory=list)
    reason:     Optional[str] = None
    error:      Optional[CreativeLibraryError] = None

    @property
    def failed_steps(self) -> list[str]:
        return [f.step for f in self.failures]

    @property
    def ok(self) -> bool:
        return self.outcome is SubmissionOutcome.SUCCESS

    @classmethod
    def fatal(cls, error: CreativeLibraryError, youtube_id: Optional[str] = None) -> "SubmissionResult":
        return cls(
            outcome    = SubmissionOutcome.FATAL,
            youtube_id = youtube_id,
            reason     = str(error),
            error      = error,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "outcome":      self.outcome.value,
            "video_id":     self.video_id,
            "youtube_id":   self.youtube_id,
            "failed_steps": self.failed_steps,
            "diagnostics":  [f.to_dict() for f in self.failures],
            "reason":       self.reason,
        }


# ─────────────────────────────────────────────────────────────
# dialect 별 INSERT (ON CONFLICT 지원)
# ─────────────────────────────────────────────────────────────

def _insert_for(session: Session) -> Callable:
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert
    if dialect == "sqlite":
        return sqlite.insert
    raise NotImplementedError(f"ON CONFLICT UPSERT 미지원 dialect: {dialect}")


def _upsert(session: Session, model: type, conflict_column: str, values: dict[str, Any], update: dict[str, Any]):
    insert = _insert_for(session)
    stmt = insert(model).values(**values)
    return stmt.on_conflict_do_update(
        index_elements=[conflict_column],
        set_={
            **{k: stmt.excluded[k] for k in update},
            "updated_at": func.now(),
        },
    )


# ─────────────────────────────────────────────────────────────
# UpsertCoordinator
# ─────────────────────────────────────────────────────────────

class UpsertCoordinator:
    """
    제출 1건을 videos + 종속 4테이블에 저장합니다.

    Usage:
        coordinator = UpsertCoordinator()            # 프로세스 DB (core.db.get_db)
        result = coordinator.submit(form_dict)
        if result.outcome is SubmissionOutcome.PARTIAL:
            print(result.failed_steps)

    단계마다 session_scope 를 새로 열어 커밋하므로,
    한 단계의 실패가 앞서 커밋된 단계를 되돌리지 않습니다.
    """

    def __init__(self, session_scope: SessionScope = get_db) -> None:
        self._scope = session_scope

    # ── 입력 ────────────────────────────────────────────────

    @staticmethod
    def parse(form: Union[SubmissionPayload, Mapping[str, Any]]) -> SubmissionPayload:
        if isinstance(form, SubmissionPayload):
            return form
        try:
            return SubmissionPayload.model_validate(dict(form))
        except PydanticValidationError as exc:
            fields = [".".join(str(p) for p in err["loc"]) for err in exc.errors()]
            raise ValidationError(fields, f"입력 형식이 올바르지 않습니다: {', '.join(fields)}") from exc

    # ── 실행 ────────────────────────────────────────────────

    def submit(self, form: Union[SubmissionPayload, Mapping[str, Any]]) -> SubmissionResult:
        """
        제출을 저장합니다.

        Raises:
            MalformedInputError: youtube_url 에서 ID 를 추출할 수 없음 (쓰기 없음)
            ValidationError:     필수 항목 누락 / 형식 오류 (쓰기 없음)
            StorageError:        videos UPSERT 실패 (종속 단계 미실행)

        Returns:
            SUCCESS 또는 PARTIAL 결과
        """
        payload = self.parse(form)
        youtube_id = require_youtube_id(payload.youtube_url)

        missing = payload.missing_required()
        if missing:
            logger.warning("필수 항목 누락 — 저장 중단", youtube_id=youtube_id, missing=missing)
            raise ValidationError(missing)

        with log_context(youtube_id=youtube_id, phase=Phase.SUBMISSION):
            video_id = self._upsert_video(youtube_id, payload)

            with log_context(video_id=video_id, phase=Phase.DB_WRITE):
                failures: list[StepFailure] = []
                steps = [
                    (STEP_CORE_SUMMARY,      CoreSummary,     self._summary_values(payload)),
                    (STEP_STRUCTURE_CORE,    StructureCore,   self._core_values(payload)),
                    (STEP_STRUCTURE_DETAIL,  StructureDetail, self._detail_values(payload)),
                ]
                for label, model, values in steps:
                    failure = self._run_step(
                        label, model.__tablename__, video_id,
                        lambda s, m=model, v=values: s.execute(
                            _upsert(s, m, "video_id", {"video_id": video_id, **v}, v)
                        ),
                    )
                    if failure:
                        failures.append(failure)

                failure = self._run_step(
                    STEP_OBSERVATION_NOTES, ObservationNote.__tablename__, video_id,
                    lambda s: s.add(ObservationNote(video_id=video_id, **self._note_values(payload))),
                )
                if failure:
                    failures.append(failure)

            outcome = SubmissionOutcome.PARTIAL if failures else SubmissionOutcome.SUCCESS
            logger.info(
                "제출 저장 완료",
                video_id     = video_id,
                outcome      = outcome.value,
                failed_steps = [f.step for f in failures],
            )
            return SubmissionResult(
                outcome    = outcome,
                video_id   = video_id,
                youtube_id = youtube_id,
                failures   = failures,
            )

    def _upsert_video(self, youtube_id: str, payload: SubmissionPayload) -> int:
        values = {
            "title":          payload.title,
            "channel_name":   payload.channel_name,
            "published_year": payload.published_year,
        }
        try:
            with self._scope() as session:
                stmt = _upsert(
                    session, Video, "youtube_id",
                    {"youtube_id": youtube_id, **values}, values,
                ).returning(Video.id)
                video_id: int = session.execute(stmt).scalar_one()
        except SQLAlchemyError as exc:
            error = StorageError.from_exception(exc)
            logger.error(
                "videos 저장 실패 — 중단",
                table = Video.__tablename__,
                code  = error.code,
                error = error.message,
                hint  = error.hint,
            )
            raise error from exc

        logger.info("videos 저장", video_id=video_id)
        return video_id

    def _run_step(
        self,
        label:    str,
        table:    str,
        video_id: int,
        write:    Callable[[Session], Any],
    ) -> Optional[StepFailure]:
        try:
            with self._scope() as session:
                write(session)
        except SQLAlchemyError as exc:
            error = StorageError.from_exception(exc)
            logger.error(
                "종속 테이블 저장 실패 — 다음 단계 계속",
                step     = label,
                table    = table,
                video_id = video_id,
                code     = error.code,
                error    = error.message,
                hint     = error.hint,
            )
            return StepFailure(step=label, table=table, error=error)

        logger.debug("단계 저장", step=label, table=table)
        return None

    # ── 단계별 값 ───────────────────────────────────────────

    @staticmethod
    def _summary_values(p: SubmissionPayload) -> dict[str, Any]:
        return {"hitokoto_summary": p.hitokoto_summary}

    @staticmethod
    def _core_values(p: SubmissionPayload) -> dict[str, Any]:
        return {
            "product_value_focus":   p.product_value_focus,
            "visual_main_character": p.visual_main_character,
            "emotional_tone":        p.emotional_tone,
        }

    @staticmethod
    def _detail_values(p: SubmissionPayload) -> dict[str, Any]:
        return {name: getattr(p, name) for name in SubmissionPayload.DETAIL_FIELDS}

    @staticmethod
    def _note_values(p: SubmissionPayload) -> dict[str, Any]:
        return {
            "observation_text":   p.observation_text,
            "observation_points": p.observation_points or None,
        }
