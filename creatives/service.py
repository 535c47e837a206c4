"""
creatives/service.py — 화면/전송 계층이 호출하는 코어 연산

    apply_filter(params)        목록 + 필터 후보 (공개 목록)
    submit_record(form)         일괄 등록 → success / partial / fatal
    get_video_detail(video_id)  상세 1건 (없으면 NotFoundError)
    list_recent_videos()        관리 화면 최근 등록
    fetch_admin_tag_options()   관리 화면 태그 후보 (기본 어휘 병합)

모든 연산은 동기·요청 단위이며 호출 간 상태를 갖지 않습니다.
읽기 경로의 StorageError 는 그대로 올려 보냅니다 (대체 데이터 없음).
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence, Union

from sqlalchemy.exc import SQLAlchemyError

from core.config import settings
from core.db import SessionScope, get_db
from core.logger import Phase, get_logger, log_context
from creatives.assembler import (
    CORE_KEY,
    DETAIL_KEY,
    NOTES_KEY,
    SUMMARY_KEY,
    assemble_card,
    assemble_detail,
)
from creatives.errors import CreativeLibraryError, NotFoundError, StorageError
from creatives.facets import (
    build_facet_catalog,
    merge_options,
    sample_appeal_methods,
    sample_structure_core,
    unique_non_empty,
)
from creatives.query import (
    build_detail_query,
    build_listing_query,
    build_recent_query,
    join_mode,
)
from creatives.schemas import (
    AdminTagOptions,
    FacetCatalog,
    FacetSelection,
    ListingPage,
    RecentVideo,
    SubmissionPayload,
    VideoDetail,
)
from creatives.upsert import SubmissionResult, UpsertCoordinator
from database.models import Video, row_to_dict

logger = get_logger(__name__)


def video_to_mapping(video: Video) -> dict[str, Any]:
    """ORM Video → 저장소 응답 형태의 중첩 딕셔너리 (관계 키 = 테이블명)."""
    row = row_to_dict(video)
    row[SUMMARY_KEY] = row_to_dict(video.core_summary)
    row[CORE_KEY] = row_to_dict(video.structure_core)
    return row


def _storage_error(exc: SQLAlchemyError, operation: str) -> StorageError:
    error = StorageError.from_exception(exc)
    logger.error("조회 실패", operation=operation, code=error.code, error=error.message, hint=error.hint)
    return error


# ─────────────────────────────────────────────────────────────
# 읽기
# ─────────────────────────────────────────────────────────────

def fetch_facet_catalog(
    limit:         Optional[int] = None,
    session_scope: SessionScope  = get_db,
) -> FacetCatalog:
    """video_structure_core 샘플에서 필터 후보를 집계합니다."""
    if limit is None:
        limit = settings.PUBLIC_OPTION_SAMPLE_LIMIT
    with log_context(phase=Phase.CATALOG):
        try:
            with session_scope() as session:
                rows = sample_structure_core(session, limit)
        except SQLAlchemyError as exc:
            raise _storage_error(exc, "fetch_facet_catalog") from exc
        logger.debug("필터 후보 샘플", sampled=len(rows), limit=limit)
    return build_facet_catalog(rows)


def apply_filter(
    params:        Union[FacetSelection, Mapping[str, Any], None] = None,
    session_scope: SessionScope = get_db,
) -> ListingPage:
    """
    필터 선택값으로 목록을 조회하고, 필터 후보와 함께 반환합니다.

    Args:
        params: FacetSelection 또는 {"pvf": ..., "vmc": ..., "tone": ...} 요청 파라미터

    Raises:
        StorageError: 후보 집계 또는 목록 조회가 거부됨
    """
    if isinstance(params, FacetSelection):
        selection = params
    else:
        selection = FacetSelection.from_params(params or {})

    with log_context(phase=Phase.FILTER_READ):
        options = fetch_facet_catalog(session_scope=session_scope)

        stmt = build_listing_query(
            selection,
            limit         = settings.LISTING_LIMIT,
            null_sentinel = settings.NULL_SENTINEL,
        )
        try:
            with session_scope() as session:
                videos = session.execute(stmt).unique().scalars().all()
                rows = [video_to_mapping(v) for v in videos]
        except SQLAlchemyError as exc:
            raise _storage_error(exc, "apply_filter") from exc

        logger.info(
            "목록 조회",
            join    = join_mode(selection),
            filters = dict(selection.active_items()),
            count   = len(rows),
        )

    return ListingPage(
        selection = selection,
        records   = [assemble_card(r) for r in rows],
        options   = options,
    )


def get_video_detail(video_id: int, session_scope: SessionScope = get_db) -> VideoDetail:
    """
    영상 1건의 상세 뷰.

    Raises:
        NotFoundError: 해당 id 의 영상이 없음
        StorageError:  조회가 거부됨
    """
    with log_context(video_id=video_id, phase=Phase.DETAIL_READ):
        try:
            with session_scope() as session:
                video = session.execute(build_detail_query(video_id)).scalars().first()
                if video is None:
                    raise NotFoundError("video", video_id)
                row = video_to_mapping(video)
                row[DETAIL_KEY] = row_to_dict(video.structure_detail)
                row[NOTES_KEY] = [row_to_dict(n) for n in video.observation_notes]
        except SQLAlchemyError as exc:
            raise _storage_error(exc, "get_video_detail") from exc

    return assemble_detail(row)


def list_recent_videos(
    limit:         Optional[int] = None,
    session_scope: SessionScope  = get_db,
) -> list[RecentVideo]:
    """관리 화면: 최근 등록 영상 (최신순)."""
    if limit is None:
        limit = settings.RECENT_VIDEOS_LIMIT
    try:
        with session_scope() as session:
            videos = session.execute(build_recent_query(limit)).scalars().all()
            return [RecentVideo.model_validate(v) for v in videos]
    except SQLAlchemyError as exc:
        raise _storage_error(exc, "list_recent_videos") from exc


def fetch_admin_tag_options(
    base:          Optional[Mapping[str, Sequence[str]]] = None,
    limit:         Optional[int] = None,
    session_scope: SessionScope  = get_db,
) -> AdminTagOptions:
    """
    관리 화면 태그 후보.

    base 에 {"pvf": [...], "vmc": [...], "tone": [...], "appeal_method": [...]}
    기본 어휘를 주면 그 순서를 유지하고 DB 관측값을 정렬해 뒤에 붙입니다.
    """
    base = base or {}
    if limit is None:
        limit = settings.ADMIN_OPTION_SAMPLE_LIMIT
    try:
        with session_scope() as session:
            core_rows = sample_structure_core(session, limit)
            appeal_values = sample_appeal_methods(session, limit)
    except SQLAlchemyError as exc:
        raise _storage_error(exc, "fetch_admin_tag_options") from exc

    catalog = build_facet_catalog(core_rows)
    return AdminTagOptions(
        pvf           = merge_options(base.get("pvf", ()), catalog.pvf.values),
        vmc           = merge_options(base.get("vmc", ()), catalog.vmc.values),
        tone          = merge_options(base.get("tone", ()), catalog.tone.values),
        appeal_method = merge_options(base.get("appeal_method", ()), unique_non_empty(appeal_values)),
    )


# ─────────────────────────────────────────────────────────────
# 쓰기
# ─────────────────────────────────────────────────────────────

def submit_record(
    form:          Union[SubmissionPayload, Mapping[str, Any]],
    session_scope: SessionScope = get_db,
) -> SubmissionResult:
    """
    일괄 등록. 예외를 올리지 않고 결과 객체로 돌려줍니다.

        success  모든 단계 성공
        partial  failed_steps + diagnostics
        fatal    검증 실패 / youtube_id 추출 실패 / videos 저장 실패 (error 에 원 예외)
    """
    coordinator = UpsertCoordinator(session_scope)
    try:
        return coordinator.submit(form)
    except CreativeLibraryError as exc:
        logger.warning("제출 중단", reason=str(exc), error_type=type(exc).__name__)
        return SubmissionResult.fatal(exc)
