from app.services.request_list import (
    ALL,
    AdminViewState,
    DateRange,
    date_options,
    filter_and_rank,
    project,
    sku_options,
)


def _row(id, created_at, sku="MS108", item_no=None, address=None, note=None):
    return {
        "id": id,
        "created_at": created_at,
        "sku": sku,
        "item_no": item_no,
        "address": address,
        "note": note,
    }


def _ids(projection):
    return [r["id"] for r in projection.rows]


def test_exact_item_number_match_is_listed_first():
    rows = [
        _row(1, "2024-01-03T00:00:00Z", item_no="KDA00010"),
        _row(2, "2024-01-02T00:00:00Z", item_no="KDA0002", note="KDA0001 옆 박스"),
        _row(3, "2024-01-01T00:00:00Z", item_no="KDA0001"),
    ]

    result = filter_and_rank(rows, text_query="kda0001")

    assert _ids(result) == [3, 1, 2]
    assert result.exact_count == 1


def test_substring_query_excludes_rows_without_any_match():
    rows = [
        _row(1, "2024-01-03T00:00:00Z", item_no="KDA00010"),
        _row(2, "2024-01-02T00:00:00Z", item_no="KDA0002"),
        _row(3, "2024-01-01T00:00:00Z", item_no="KDA0001"),
    ]

    result = filter_and_rank(rows, text_query="KDA0001")

    assert _ids(result) == [3, 1]


def test_search_covers_sku_address_and_note():
    rows = [
        _row(1, "2024-01-01T00:00:00Z", sku="BPS"),
        _row(2, "2024-01-02T00:00:00Z", address="서울특별시 중구 세종대로"),
        _row(3, "2024-01-03T00:00:00Z", note="경비실 앞"),
        _row(4, "2024-01-04T00:00:00Z"),
    ]

    assert _ids(filter_and_rank(rows, text_query="bps")) == [1]
    assert _ids(filter_and_rank(rows, text_query="세종대로")) == [2]
    assert _ids(filter_and_rank(rows, text_query="경비실")) == [3]


def test_no_query_orders_by_created_at_descending():
    rows = [
        _row(1, "2024-01-01T00:00:00Z"),
        _row(2, "2024-01-03T00:00:00Z"),
        _row(3, "2024-01-02T00:00:00Z"),
    ]

    result = filter_and_rank(rows)

    assert _ids(result) == [2, 3, 1]
    assert result.exact_count == 0


def test_whitespace_query_is_treated_as_no_query():
    rows = [_row(1, "2024-01-01T00:00:00Z"), _row(2, "2024-01-02T00:00:00Z")]

    assert _ids(filter_and_rank(rows, text_query="   ")) == _ids(filter_and_rank(rows))


def test_date_range_from_excludes_earlier_civil_dates():
    # UTC+9 기준 날짜: 01-01, 01-02, 01-03
    rows = [
        _row(1, "2023-12-31T18:00:00Z"),
        _row(2, "2024-01-01T16:00:00Z"),
        _row(3, "2024-01-03T01:00:00+09:00"),
    ]

    result = filter_and_rank(rows, date_filter=DateRange(start="2024-01-02"))

    assert _ids(result) == [3, 2]


def test_single_date_filter_uses_civil_date():
    rows = [
        _row(1, "2024-01-01T14:59:59Z"),  # 01-01 23:59:59 KST
        _row(2, "2024-01-01T15:00:00Z"),  # 01-02 00:00:00 KST
    ]

    assert _ids(filter_and_rank(rows, date_filter="2024-01-01")) == [1]
    assert _ids(filter_and_rank(rows, date_filter="2024-01-02")) == [2]
    assert _ids(filter_and_rank(rows, date_filter=ALL)) == [2, 1]


def test_date_range_with_both_ends_is_inclusive():
    rows = [
        _row(1, "2024-01-01T03:00:00Z"),
        _row(2, "2024-01-02T03:00:00Z"),
        _row(3, "2024-01-03T03:00:00Z"),
        _row(4, "2024-01-04T03:00:00Z"),
    ]

    result = filter_and_rank(rows, date_filter=DateRange(start="2024-01-02", end="2024-01-03"))

    assert _ids(result) == [3, 2]


def test_sku_filter_is_case_insensitive():
    rows = [
        _row(1, "2024-01-01T00:00:00Z", sku="ms108"),
        _row(2, "2024-01-02T00:00:00Z", sku="BPS"),
    ]

    assert _ids(filter_and_rank(rows, sku_filter="MS108")) == [1]
    assert _ids(filter_and_rank(rows, sku_filter="bps")) == [2]
    assert _ids(filter_and_rank(rows, sku_filter=ALL)) == [2, 1]


def test_filters_apply_together():
    rows = [
        _row(1, "2024-01-02T03:00:00Z", sku="BPS", item_no="KDA0001"),
        _row(2, "2024-01-02T04:00:00Z", sku="MS108", item_no="KDA0001"),
        _row(3, "2024-01-05T03:00:00Z", sku="BPS", item_no="KDA0001"),
    ]

    result = filter_and_rank(rows, text_query="KDA0001", sku_filter="BPS", date_filter="2024-01-02")

    assert _ids(result) == [1]


def test_empty_rows_give_empty_projection():
    result = filter_and_rank([], text_query="KDA0001", sku_filter="BPS", date_filter="2024-01-01")

    assert result.rows == ()
    assert result.exact_count == 0


def test_unparseable_created_at_sorts_last_without_crashing():
    rows = [
        _row(1, "not-a-date"),
        _row(2, "2024-01-01T00:00:00Z"),
        _row(3, None),
        _row(4, "2024-01-02T00:00:00Z"),
    ]

    result = filter_and_rank(rows)

    assert _ids(result) == [4, 2, 1, 3]
    # 날짜 필터에는 걸리지 않는다
    assert _ids(filter_and_rank(rows, date_filter="2024-01-01")) == [2]


def test_projection_is_repeatable():
    rows = [
        _row(1, "2024-01-01T00:00:00Z", item_no="A1"),
        _row(2, "2024-01-01T00:00:00Z", item_no="A1"),
        _row(3, "2024-01-01T00:00:00Z", item_no="A10"),
        _row(4, "2024-01-02T00:00:00Z", item_no="B1"),
    ]

    first = filter_and_rank(rows, text_query="a1")
    second = filter_and_rank(rows, text_query="a1")

    assert first == second
    # 동률은 입력 순서 유지
    assert _ids(first) == [1, 2, 3]


def test_options_from_rows():
    rows = [
        _row(1, "2024-01-01T03:00:00Z", sku="ms112"),
        _row(2, "2024-01-02T03:00:00Z", sku="BPS"),
        _row(3, "2024-01-02T05:00:00Z", sku="BPS"),
        _row(4, "garbage", sku="MS108"),
    ]

    assert sku_options(rows) == ["ALL", "BPS", "MS108", "MS112"]
    assert date_options(rows) == ["ALL", "2024-01-02", "2024-01-01"]


def test_view_state_transitions_do_not_mutate():
    state = AdminViewState()
    next_state = state.with_query("KDA").with_sku_filter("bps").with_date("2024-01-02")

    assert state == AdminViewState()
    assert next_state.query == "KDA"
    assert next_state.sku_filter == "BPS"
    assert next_state.effective_date_filter == "2024-01-02"

    ranged = next_state.with_date_range("2024-01-01", None)
    assert ranged.date_filter == ALL
    assert ranged.effective_date_filter == DateRange(start="2024-01-01", end=None)

    back = ranged.with_date("2024-01-05")
    assert back.date_from is None and back.date_to is None


def test_view_state_photo_modal_and_serialization():
    state = AdminViewState().open_photo("https://storage.test/a.jpg", "MS108 / KDA0001")

    assert state.photo_modal_url == "https://storage.test/a.jpg"
    assert AdminViewState.from_dict(state.to_dict()) == state

    closed = state.close_photo()
    assert closed.photo_modal_url is None
    assert closed.photo_modal_title == ""


def test_project_applies_view_state():
    rows = [
        _row(1, "2024-01-01T03:00:00Z", sku="BPS", item_no="KDA0001"),
        _row(2, "2024-01-02T03:00:00Z", sku="BPS", item_no="KDA00011"),
        _row(3, "2024-01-02T03:00:00Z", sku="MS108", item_no="KDA0001"),
    ]
    state = AdminViewState().with_query("kda0001").with_sku_filter("BPS")

    result = project(rows, state)

    assert _ids(result) == [1, 2]
    assert result.exact_count == 1


def test_out_of_range_created_at_does_not_break_the_engine():
    rows = [
        _row(1, "9999-12-31T23:00:00+00:00"),
        _row(2, "2024-01-01T00:00:00Z"),
    ]

    assert _ids(filter_and_rank(rows, date_filter="2024-01-01")) == [2]
    assert date_options(rows) == [ALL, "2024-01-01"]
    assert _ids(filter_and_rank(rows)) == [1, 2]
