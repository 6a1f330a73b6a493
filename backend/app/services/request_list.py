"""
회수 요청 목록 엔진 — 관리자 화면의 필터/검색/정렬
- 입력 행(JSON 형태 dict)과 화면 상태로부터 표시할 순서를 계산하는 순수 함수 모음
- 필터: 제품(SKU) → 날짜(UTC+9 기준) → 검색어 (모두 AND)
- 정렬: 검색어가 있으면 개별번호 완전일치 우선, 그 다음 created_at 최신순
- 같은 입력이면 항상 같은 결과 (내부 상태 없음)
"""

from dataclasses import dataclass, asdict, fields, replace
from typing import Any, Mapping, Sequence

from app.services.civil_time import parse_timestamp, to_civil_date_key

ALL = "ALL"

# 검색 대상 필드 (변형별 필드의 합집합)
SEARCH_FIELDS = ("item_no", "sku", "address", "note")


@dataclass(frozen=True)
class DateRange:
    """'YYYY-MM-DD' 키 범위 (양 끝 포함, 한쪽만 지정 가능)"""
    start: str | None = None
    end: str | None = None

    def contains(self, key: str) -> bool:
        if self.start and key < self.start:
            return False
        if self.end and key > self.end:
            return False
        return True


@dataclass(frozen=True)
class ListProjection:
    rows: tuple
    exact_count: int


def _value(row: Any, name: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(name)
    return getattr(row, name, None)


def _text(row: Any, name: str) -> str:
    value = _value(row, name)
    if value is None:
        return ""
    # enum 컬럼 대응
    return str(value.value if hasattr(value, "value") else value)


def normalize_query(query: str | None) -> str:
    return (query or "").strip().upper()


def _normalize_date_filter(date_filter) -> str | DateRange | None:
    if isinstance(date_filter, DateRange):
        start = (date_filter.start or "").strip() or None
        end = (date_filter.end or "").strip() or None
        if start is None and end is None:
            return None
        return DateRange(start=start, end=end)
    key = (date_filter or "").strip()
    if not key or key.upper() == ALL:
        return None
    return key


def matches_sku(row: Any, sku_filter: str | None) -> bool:
    wanted = (sku_filter or ALL).strip().upper()
    if wanted in ("", ALL):
        return True
    return _text(row, "sku").upper() == wanted


def matches_date(row: Any, date_filter, offset_minutes: int | None = None) -> bool:
    date_filter = _normalize_date_filter(date_filter)
    if date_filter is None:
        return True
    key = to_civil_date_key(_value(row, "created_at"), offset_minutes)
    if key is None:
        return False
    if isinstance(date_filter, DateRange):
        return date_filter.contains(key)
    return key == date_filter


def matches_text(row: Any, query: str) -> bool:
    """query는 normalize_query()를 거친 값"""
    if not query:
        return True
    return any(query in _text(row, name).upper() for name in SEARCH_FIELDS)


def is_exact_match(row: Any, query: str) -> bool:
    return bool(query) and _text(row, "item_no").upper() == query


def _sort_key(row: Any, query: str) -> tuple:
    exact = 0 if is_exact_match(row, query) else 1
    ts = parse_timestamp(_value(row, "created_at"))
    try:
        epoch = ts.timestamp() if ts is not None else None
    except (OverflowError, ValueError):
        epoch = None
    if epoch is None:
        # 해석 불가 타임스탬프는 유효한 날짜들 뒤로
        return (exact, 1, 0.0)
    return (exact, 0, -epoch)


def filter_and_rank(
    rows: Sequence[Any],
    text_query: str | None = "",
    sku_filter: str | None = ALL,
    date_filter=None,
    offset_minutes: int | None = None,
) -> ListProjection:
    """필터 후 정렬한 결과와 완전일치 건수를 반환한다."""
    query = normalize_query(text_query)

    out = [
        r for r in rows
        if matches_sku(r, sku_filter)
        and matches_date(r, date_filter, offset_minutes)
        and matches_text(r, query)
    ]
    # sorted()는 안정 정렬 — 동률은 입력 순서 유지
    out = sorted(out, key=lambda r: _sort_key(r, query))
    exact_count = sum(1 for r in out if is_exact_match(r, query))
    return ListProjection(rows=tuple(out), exact_count=exact_count)


def sku_options(rows: Sequence[Any]) -> list[str]:
    skus = {_text(r, "sku").upper() for r in rows}
    skus.discard("")
    return [ALL] + sorted(skus)


def date_options(rows: Sequence[Any], offset_minutes: int | None = None) -> list[str]:
    keys = set()
    for r in rows:
        key = to_civil_date_key(_value(r, "created_at"), offset_minutes)
        if key:
            keys.add(key)
    return [ALL] + sorted(keys, reverse=True)


@dataclass(frozen=True)
class AdminViewState:
    """
    관리자 화면 상태 — 직렬화 가능한 단일 레코드.
    전이 함수는 새 상태를 반환하고 기존 상태를 바꾸지 않는다.
    """
    query: str = ""
    sku_filter: str = ALL
    date_filter: str = ALL
    date_from: str | None = None
    date_to: str | None = None
    photo_modal_url: str | None = None
    photo_modal_title: str = ""

    def with_query(self, query: str) -> "AdminViewState":
        return replace(self, query=query or "")

    def with_sku_filter(self, sku: str | None) -> "AdminViewState":
        return replace(self, sku_filter=(sku or ALL).strip().upper() or ALL)

    def with_date(self, date_key: str | None) -> "AdminViewState":
        """단일 날짜 선택 — 범위는 해제"""
        return replace(self, date_filter=(date_key or ALL).strip() or ALL, date_from=None, date_to=None)

    def with_date_range(self, date_from: str | None, date_to: str | None) -> "AdminViewState":
        """날짜 범위 선택 — 단일 날짜는 해제"""
        return replace(self, date_filter=ALL, date_from=date_from or None, date_to=date_to or None)

    def open_photo(self, url: str, title: str = "") -> "AdminViewState":
        return replace(self, photo_modal_url=url, photo_modal_title=title)

    def close_photo(self) -> "AdminViewState":
        return replace(self, photo_modal_url=None, photo_modal_title="")

    @property
    def effective_date_filter(self) -> str | DateRange | None:
        if self.date_from or self.date_to:
            return DateRange(start=self.date_from, end=self.date_to)
        return _normalize_date_filter(self.date_filter)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AdminViewState":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


def project(rows: Sequence[Any], state: AdminViewState, offset_minutes: int | None = None) -> ListProjection:
    """화면 상태를 목록 엔진에 적용"""
    return filter_and_rank(
        rows,
        text_query=state.query,
        sku_filter=state.sku_filter,
        date_filter=state.effective_date_filter,
        offset_minutes=offset_minutes,
    )
