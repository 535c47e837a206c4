"""
YouTube 영상 ID 추출 테스트

Usage:
    pytest tests/test_identifiers.py -v
"""

import pytest

from creatives.errors import MalformedInputError
from creatives.identifiers import (
    extract_youtube_id,
    is_valid_youtube_id,
    require_youtube_id,
)

VID = "dQw4w9WgXcQ"


class TestExtractYoutubeId:
    @pytest.mark.parametrize(
        "raw",
        [
            VID,
            f"  {VID}  ",
            f"https://youtu.be/{VID}",
            f"https://youtu.be/{VID}?t=42",
            f"https://www.youtube.com/watch?v={VID}",
            f"https://www.youtube.com/watch?feature=share&v={VID}",
            f"https://m.youtube.com/watch?v={VID}",
            f"https://www.youtube.com/shorts/{VID}",
            f"https://www.youtube.com/embed/{VID}",
            f"https://www.youtube.com/live/{VID}",
            f"https://www.youtube-nocookie.com/embed/{VID}",
        ],
    )
    def test_supported_forms(self, raw):
        assert extract_youtube_id(raw) == VID

    def test_id_with_underscore_and_dash(self):
        assert extract_youtube_id("https://youtu.be/ab_cd-EF123") == "ab_cd-EF123"

    @pytest.mark.parametrize(
        "raw",
        [
            None,
            "",
            "   ",
            "not a url",
            "dQw4w9WgXc",                                      # 10자
            "dQw4w9WgXcQQ",                                    # 12자
            "https://www.youtube.com/watch?v=short",          # URL 은 맞지만 ID 모양이 틀림
            "https://youtu.be/",
            "https://www.youtube.com/shorts/",
            "https://www.youtube.com/channel/UC1234567890",
            "https://example.com/x",
            "http://[dQw4w9WgXcQ",                             # 괄호가 닫히지 않은 호스트
            f"https://[youtube.com/watch?v={VID}",
            f"youtube.com/watch?v={VID}",                      # 스킴 없음
        ],
    )
    def test_rejected_inputs(self, raw):
        assert extract_youtube_id(raw) is None

    @pytest.mark.parametrize(
        "raw",
        [
            f"https://example.com/watch?v={VID}",
            f"https://mirror.example.org/embed/{VID}",
        ],
    )
    def test_any_host_with_valid_id(self, raw):
        assert extract_youtube_id(raw) == VID

    def test_invalid_v_param_falls_through_to_path(self):
        url = f"https://www.youtube.com/embed/{VID}?v=bad"
        assert extract_youtube_id(url) == VID


class TestValidation:
    def test_is_valid(self):
        assert is_valid_youtube_id(VID)
        assert not is_valid_youtube_id("dQw4w9WgXc!")
        assert not is_valid_youtube_id(None)

    def test_require_raises_malformed(self):
        with pytest.raises(MalformedInputError) as exc_info:
            require_youtube_id("https://www.youtube.com/watch?v=short")
        assert exc_info.value.raw == "https://www.youtube.com/watch?v=short"

    def test_require_returns_id(self):
        assert require_youtube_id(f"https://youtu.be/{VID}") == VID
