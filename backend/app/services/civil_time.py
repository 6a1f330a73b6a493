"""
고정 시간대(기본 UTC+9) 기준 날짜 변환
- 날짜 필터와 화면 표시는 모두 이 모듈을 거친다.
- naive datetime은 UTC로 간주한다 (DB에 UTC로 저장).
"""

import re
from datetime import datetime, timedelta, timezone

from app.config import settings

# 소수점 이하 초 — fromisoformat이 받는 6자리로 맞춘다
_FRACTION_RE = re.compile(r"(T\d{2}:\d{2}:\d{2})\.(\d+)")


def _normalize_fraction(m: re.Match) -> str:
    return f"{m.group(1)}.{m.group(2)[:6].ljust(6, '0')}"


def parse_timestamp(value) -> datetime | None:
    """datetime 또는 ISO-8601 문자열 → aware datetime. 해석 불가면 None."""
    if isinstance(value, datetime):
        ts = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z") or text.endswith("z"):
            text = text[:-1] + "+00:00"
        text = _FRACTION_RE.sub(_normalize_fraction, text, count=1)
        try:
            ts = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def _civil_tz(offset_minutes: int | None) -> timezone:
    if offset_minutes is None:
        offset_minutes = settings.CIVIL_TZ_OFFSET_MINUTES
    return timezone(timedelta(minutes=offset_minutes))


def to_civil(value, offset_minutes: int | None = None) -> datetime | None:
    """고정 시간대로 옮긴 datetime. 해석 불가나 범위 밖이면 None."""
    ts = parse_timestamp(value)
    if ts is None:
        return None
    try:
        return ts.astimezone(_civil_tz(offset_minutes))
    except (OverflowError, ValueError):
        return None


def to_civil_date_key(value, offset_minutes: int | None = None) -> str | None:
    """타임스탬프를 고정 시간대의 'YYYY-MM-DD' 키로 변환"""
    civil = to_civil(value, offset_minutes)
    return civil.strftime("%Y-%m-%d") if civil is not None else None


def format_civil_datetime(value, offset_minutes: int | None = None) -> str:
    """표시용 'YYYY-MM-DD HH:MM:SS'. 해석 불가면 원문 그대로 반환."""
    civil = to_civil(value, offset_minutes)
    if civil is None:
        return "" if value is None else str(value)
    return civil.strftime("%Y-%m-%d %H:%M:%S")
