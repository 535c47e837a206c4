"""
creatives/identifiers.py — YouTube 영상 ID 추출

지원 입력:
    dQw4w9WgXcQ                                  ID 직접 입력
    https://youtu.be/dQw4w9WgXcQ                 단축 링크
    https://www.youtube.com/watch?v=dQw4w9WgXcQ  쿼리 파라미터
    https://www.youtube.com/shorts/dQw4w9WgXcQ   경로 (shorts / embed / live)

모든 경로에서 추출한 후보를 11자 [A-Za-z0-9_-] 패턴으로 다시 검증합니다.
URL 형식이 맞아도 ID 모양이 틀리면 실패입니다. 부분 결과는 돌려주지 않습니다.
"""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import parse_qs, urlparse

from creatives.errors import MalformedInputError

_ID_RE = re.compile(r"[A-Za-z0-9_-]{11}")

_SHORT_HOSTS = {"youtu.be"}
_PATH_PREFIXES = ("shorts", "embed", "live")


def is_valid_youtube_id(candidate: Optional[str]) -> bool:
    return bool(candidate) and _ID_RE.fullmatch(candidate) is not None


def _checked(candidate: Optional[str]) -> Optional[str]:
    return candidate if is_valid_youtube_id(candidate) else None


def extract_youtube_id(raw: Optional[str]) -> Optional[str]:
    """
    자유 입력에서 YouTube 영상 ID 를 추출합니다.

    youtu.be 이외의 호스트는 가리지 않습니다. v 파라미터와 shorts/embed/live
    경로는 어느 호스트에서든 시도하고, 후보는 항상 ID 패턴으로 검증합니다.
    URL 로 해석되지 않는 입력(스킴 없음, 괄호가 맞지 않는 호스트 등)은 None 입니다.

    Returns:
        11자 영상 ID, 추출할 수 없으면 None
    """
    s = (raw or "").strip()
    if not s:
        return None

    if is_valid_youtube_id(s):
        return s

    try:
        parsed = urlparse(s)
        host = (parsed.hostname or "").lower()
    except ValueError:
        return None
    if not parsed.scheme or not parsed.netloc:
        return None

    if host.startswith("www."):
        host = host[4:]
    segments = [p for p in parsed.path.split("/") if p]

    if host in _SHORT_HOSTS:
        return _checked(segments[0]) if segments else None

    v = parse_qs(parsed.query).get("v")
    if v and is_valid_youtube_id(v[0]):
        return v[0]

    for idx, part in enumerate(segments):
        if part in _PATH_PREFIXES:
            return _checked(segments[idx + 1]) if idx + 1 < len(segments) else None

    return None


def require_youtube_id(raw: Optional[str]) -> str:
    """extract_youtube_id 와 같지만 실패 시 MalformedInputError 를 발생시킵니다."""
    youtube_id = extract_youtube_id(raw)
    if youtube_id is None:
        raise MalformedInputError(raw or "")
    return youtube_id
