"""
일괄 등록 (UpsertCoordinator / submit_record) 테스트

저장 실패는 SQLite 트리거(RAISE ABORT)로 실제 DB 오류를 만들어 확인합니다.
"""

import pytest

from creatives.errors import MalformedInputError, StorageError, ValidationError
from creatives.service import get_video_detail, submit_record
from creatives.upsert import (
    STEP_STRUCTURE_DETAIL,
    SubmissionOutcome,
    UpsertCoordinator,
)
from database.models import (
    CoreSummary,
    ObservationNote,
    StructureCore,
    StructureDetail,
    Video,
)

ALL_MODELS = (Video, CoreSummary, StructureCore, StructureDetail, ObservationNote)


def _assert_no_rows(count_rows):
    for model in ALL_MODELS:
        assert count_rows(model) == 0, model.__tablename__


class TestValidation:
    @pytest.mark.parametrize("field", ["title", "hitokoto_summary", "observation_text"])
    def test_missing_required_field_writes_nothing(self, scope, count_rows, submission, field):
        submission[field] = "   "
        result = submit_record(submission, session_scope=scope)

        assert result.outcome is SubmissionOutcome.FATAL
        assert isinstance(result.error, ValidationError)
        assert field in result.error.fields
        _assert_no_rows(count_rows)

    def test_all_detail_fields_empty(self, scope, count_rows, submission):
        for name in ("product_value_focus_detail", "appeal_method"):
            submission[name] = ""
        result = submit_record(submission, session_scope=scope)

        assert result.outcome is SubmissionOutcome.FATAL
        assert result.error.fields == ["structure_detail"]
        _assert_no_rows(count_rows)

    def test_malformed_url_is_fatal(self, scope, count_rows, submission):
        submission["youtube_url"] = "https://www.youtube.com/watch?v=short"
        result = submit_record(submission, session_scope=scope)

        assert result.outcome is SubmissionOutcome.FATAL
        assert isinstance(result.error, MalformedInputError)
        _assert_no_rows(count_rows)

    def test_unparseable_url_is_fatal(self, scope, count_rows, submission):
        submission["youtube_url"] = "https://[youtube.com/watch?v=dQw4w9WgXcQ"
        result = submit_record(submission, session_scope=scope)

        assert result.outcome is SubmissionOutcome.FATAL
        assert isinstance(result.error, MalformedInputError)
        _assert_no_rows(count_rows)

    def test_bad_year_type(self, scope, count_rows, submission):
        submission["published_year"] = "nineteen"
        result = submit_record(submission, session_scope=scope)

        assert isinstance(result.error, ValidationError)
        assert result.error.fields == ["published_year"]
        _assert_no_rows(count_rows)

    def test_coordinator_raises_directly(self, scope, submission):
        submission["title"] = None
        with pytest.raises(ValidationError):
            UpsertCoordinator(scope).submit(submission)


class TestSubmit:
    def test_success_writes_all_tables(self, scope, count_rows, submission):
        result = submit_record(submission, session_scope=scope)

        assert result.outcome is SubmissionOutcome.SUCCESS
        assert result.ok
        assert result.youtube_id == "dQw4w9WgXcQ"
        assert result.failed_steps == []
        for model in ALL_MODELS:
            assert count_rows(model) == 1

        detail = get_video_detail(result.video_id, session_scope=scope)
        assert detail.title == "Never Gonna Give You Up"
        assert detail.published_year == 2009
        assert detail.product_value_focus == "信頼"
        assert detail.visual_main_character is None
        assert detail.appeal_method == "反復"
        assert detail.notes[0].bullets == ["冒頭3秒で顔", "手拍子"]

    def test_resubmission_reuses_video_and_appends_note(self, scope, count_rows, submission):
        first = submit_record(submission, session_scope=scope)

        submission["youtube_url"] = "https://youtu.be/dQw4w9WgXcQ"
        submission["hitokoto_summary"] = "二回目の要約"
        submission["observation_text"] = "二回目のメモ"
        second = submit_record(submission, session_scope=scope)

        assert second.outcome is SubmissionOutcome.SUCCESS
        assert second.video_id == first.video_id
        assert count_rows(Video) == 1
        assert count_rows(CoreSummary) == 1
        assert count_rows(StructureDetail) == 1
        assert count_rows(ObservationNote) == 2

        detail = get_video_detail(first.video_id, session_scope=scope)
        assert detail.hitokoto_summary == "二回目の要約"
        assert [n.text for n in detail.notes] == ["サビ前の溜めが長い", "二回目のメモ"]

    def test_partial_failure_keeps_other_steps(self, scope, count_rows, reject_writes, submission):
        first = submit_record(submission, session_scope=scope)
        reject_writes("video_structure_detail")

        submission["hitokoto_summary"] = "更新された要約"
        submission["product_value_focus_detail"] = "書き込まれない解説"
        result = submit_record(submission, session_scope=scope)

        assert result.outcome is SubmissionOutcome.PARTIAL
        assert result.failed_steps == [STEP_STRUCTURE_DETAIL]
        assert result.video_id == first.video_id
        failure = result.failures[0]
        assert failure.table == "video_structure_detail"
        assert "write rejected" in failure.error.message
        assert result.to_dict()["diagnostics"][0]["step"] == STEP_STRUCTURE_DETAIL

        detail = get_video_detail(first.video_id, session_scope=scope)
        assert detail.hitokoto_summary == "更新された要約"
        assert detail.product_value_focus_detail == "約束の反復で信頼感を作る"
        assert count_rows(ObservationNote) == 2

    def test_first_submission_partial(self, scope, count_rows, reject_writes, submission):
        reject_writes("video_core_summary")
        result = submit_record(submission, session_scope=scope)

        assert result.outcome is SubmissionOutcome.PARTIAL
        assert result.failed_steps == ["core_summary"]
        assert count_rows(Video) == 1
        assert count_rows(CoreSummary) == 0
        assert count_rows(StructureDetail) == 1
        assert count_rows(ObservationNote) == 1

    def test_video_failure_is_fatal_and_skips_dependents(self, scope, count_rows, reject_writes, submission):
        reject_writes("videos")
        result = submit_record(submission, session_scope=scope)

        assert result.outcome is SubmissionOutcome.FATAL
        assert isinstance(result.error, StorageError)
        assert result.video_id is None
        _assert_no_rows(count_rows)

    def test_points_as_list(self, scope, submission):
        submission["observation_points"] = [" a ", "", "b", None]
        result = submit_record(submission, session_scope=scope)

        detail = get_video_detail(result.video_id, session_scope=scope)
        assert detail.notes[0].bullets == ["a", "b"]
