"""검색 → 속성 필터 → 정렬 → 페이지네이션.

``derive`` is a pure function of the records and a ``ViewState``; the UI calls
it on every rerun, so any change in the inputs is reflected immediately.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from math import ceil
from typing import Callable, Sequence

import pandas as pd

from . import config
from .models import EPOCH, safe_float, safe_str

ALL = "all"
ASC = "asc"
DESC = "desc"

KIND_STRING = "string"
KIND_NUMBER = "number"
KIND_DATE = "date"


@dataclass(frozen=True)
class ViewState:
    search: str = ""
    filters: dict = field(default_factory=dict)
    sort_field: str = ""
    sort_direction: str = ASC
    page: int = 1
    page_size: int = config.PAGE_SIZE
    selected: tuple = ()


@dataclass(frozen=True)
class ViewResult:
    filtered: list
    paginated: list
    total_pages: int
    page: int

    @property
    def total(self) -> int:
        return len(self.filtered)


FilterPredicate = Callable[[object, object], bool]


@dataclass(frozen=True)
class ViewSpec:
    search_fields: tuple
    sort_kinds: dict
    filters: dict
    default_sort: str
    default_direction: str = ASC

    def initial_state(self, page_size: int = config.PAGE_SIZE) -> ViewState:
        return ViewState(
            filters={name: default for name, (_, default) in self.filters.items()},
            sort_field=self.default_sort,
            sort_direction=self.default_direction,
            page_size=page_size,
        )


# ----------------------
# 필터 술어
# ----------------------
def exact_or_all(attr: str) -> FilterPredicate:
    def predicate(record, value) -> bool:
        if not value or value == ALL:
            return True
        return getattr(record, attr, None) == value

    return predicate


def any_tag(record, wanted) -> bool:
    """선택된 태그 중 하나라도 있으면 통과 (OR)."""
    if not wanted:
        return True
    tags = getattr(record, "tags", None) or []
    return any(tag in tags for tag in wanted)


SHOP_VIEW = ViewSpec(
    search_fields=("shop_id", "client_name", "tags"),
    sort_kinds={"client_name": KIND_STRING, "credit_score": KIND_NUMBER, "balance": KIND_NUMBER},
    filters={"status": (exact_or_all("status"), ALL), "tags": (any_tag, ())},
    default_sort="client_name",
)

ORDER_VIEW = ViewSpec(
    search_fields=("shop_id", "client_name", "location"),
    sort_kinds={"client_name": KIND_STRING, "amount": KIND_NUMBER, "created_at": KIND_DATE},
    filters={"location": (exact_or_all("location"), ALL)},
    default_sort="created_at",
    default_direction=DESC,
)

ADVANCE_ORDER_VIEW = ViewSpec(
    search_fields=("order_id", "shop_id", "message"),
    sort_kinds={
        "order_id": KIND_STRING,
        "shop_id": KIND_STRING,
        "request_type": KIND_STRING,
        "created_at": KIND_DATE,
    },
    filters={"request_type": (exact_or_all("request_type"), ALL)},
    default_sort="created_at",
    default_direction=DESC,
)


# ----------------------
# 검색 / 필터
# ----------------------
def matches_search(record, term: str, fields: Sequence[str]) -> bool:
    needle = safe_str(term).lower()
    if not needle:
        return True
    for name in fields:
        value = getattr(record, name, None)
        values = value if isinstance(value, (list, tuple)) else [value]
        if any(needle in safe_str(v).lower() for v in values):
            return True
    return False


def apply_filters(records: Sequence, state: ViewState, spec: ViewSpec) -> list:
    out = []
    for rec in records:
        if not matches_search(rec, state.search, spec.search_fields):
            continue
        ok = True
        for name, (predicate, default) in spec.filters.items():
            if not predicate(rec, state.filters.get(name, default)):
                ok = False
                break
        if ok:
            out.append(rec)
    return out


# ----------------------
# 정렬
# ----------------------
def sort_key(kind: str, value):
    if kind == KIND_NUMBER:
        return safe_float(value, 0.0)
    if kind == KIND_DATE:
        return value.timestamp() if isinstance(value, datetime) else EPOCH.timestamp()
    return safe_str(value).lower()


def sort_records(records: Sequence, field_name: str, direction: str, spec: ViewSpec) -> list:
    kind = spec.sort_kinds.get(field_name, KIND_STRING)
    # sorted()는 안정 정렬이고 reverse=True도 동률 순서를 유지합니다
    return sorted(
        records,
        key=lambda rec: sort_key(kind, getattr(rec, field_name, None)),
        reverse=(direction == DESC),
    )


def toggle_sort(state: ViewState, field_name: str) -> ViewState:
    if state.sort_field == field_name:
        return replace(state, sort_direction=DESC if state.sort_direction == ASC else ASC)
    return replace(state, sort_field=field_name, sort_direction=ASC)


# ----------------------
# 페이지네이션
# ----------------------
def total_pages(count: int, page_size: int) -> int:
    return ceil(count / page_size) if page_size > 0 else 0


def clamp_page(page: int, pages: int) -> int:
    return max(1, min(int(page or 1), max(pages, 1)))


def paginate(records: Sequence, page: int, page_size: int) -> list:
    start = (page - 1) * page_size
    return list(records[start:start + page_size])


def derive(records: Sequence, state: ViewState, spec: ViewSpec) -> ViewResult:
    filtered = sort_records(
        apply_filters(records, state, spec),
        state.sort_field or spec.default_sort,
        state.sort_direction,
        spec,
    )
    pages = total_pages(len(filtered), state.page_size)
    page = clamp_page(state.page, pages)
    return ViewResult(
        filtered=filtered,
        paginated=paginate(filtered, page, state.page_size),
        total_pages=pages,
        page=page,
    )


# ----------------------
# 상태 변경 (검색/필터가 바뀌면 1페이지로)
# ----------------------
def with_search(state: ViewState, term: str) -> ViewState:
    if term == state.search:
        return state
    return replace(state, search=term, page=1)


def with_filter(state: ViewState, name: str, value) -> ViewState:
    if state.filters.get(name) == value:
        return state
    return replace(state, filters={**state.filters, name: value}, page=1)


def with_page(state: ViewState, page: int) -> ViewState:
    return replace(state, page=max(1, int(page)))


def toggle_select(state: ViewState, key, checked: bool) -> ViewState:
    selected = [k for k in state.selected if k != key]
    if checked:
        selected.append(key)
    return replace(state, selected=tuple(selected))


def select_all(state: ViewState, page_records: Sequence, checked: bool, key_attr: str = "id") -> ViewState:
    """전체 선택은 현재 페이지만 대상으로 합니다."""
    if not checked:
        return replace(state, selected=())
    return replace(state, selected=tuple(getattr(rec, key_attr) for rec in page_records))


def with_selection(state: ViewState, keys) -> ViewState:
    return replace(state, selected=tuple(dict.fromkeys(keys)))


def clear_selection(state: ViewState) -> ViewState:
    return replace(state, selected=())


def to_frame(records: Sequence, columns: dict) -> pd.DataFrame:
    """{속성명: 표시 라벨} 순서대로 DataFrame을 만듭니다."""
    rows = []
    for rec in records:
        row = {}
        for attr, label in columns.items():
            value = getattr(rec, attr, None)
            row[label] = ", ".join(value) if isinstance(value, (list, tuple)) else value
        rows.append(row)
    return pd.DataFrame(rows, columns=list(columns.values()))
