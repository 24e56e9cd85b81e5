"""CSV / JSON 내보내기와 클립보드 텍스트."""
import csv
import json
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime

import pandas as pd

from .errors import ShopAdminError
from .models import (
    CREDIT_SCORE_MAX,
    CREDIT_SCORE_MIN,
    LOCATION_TRANSLATIONS,
    safe_datetime,
    safe_float,
)
from .view import ALL

logger = logging.getLogger(__name__)

FORMAT_CSV = "csv"
FORMAT_JSON = "json"
FORMAT_EXCEL = "excel"
EXPORT_FORMATS = {"CSV": FORMAT_CSV, "Excel": FORMAT_EXCEL, "JSON": FORMAT_JSON}

SCOPE_ALL = "all"
SCOPE_FILTERED = "filtered"
SCOPE_SELECTED = "selected"
EXPORT_SCOPES = {"All Data": SCOPE_ALL, "Filtered Data": SCOPE_FILTERED, "Selected Rows": SCOPE_SELECTED}

# (문서 필드, 레코드 속성, 라벨)
SHOP_COLUMNS = (
    ("shopId", "shop_id", "Shop ID"),
    ("clientName", "client_name", "Client Name"),
    ("status", "status", "Status"),
    ("tags", "tags", "Tags"),
    ("creditScore", "credit_score", "Credit Score"),
    ("balance", "balance", "Balance"),
)
ORDER_COLUMNS = (
    ("id", "id", "Order ID"),
    ("shopId", "shop_id", "Shop ID"),
    ("clientName", "client_name", "Client Name"),
    ("amount", "amount", "Amount"),
    ("location", "location", "Location"),
    ("createdAt", "created_at", "Date"),
)

MIME_TYPES = {FORMAT_CSV: "text/csv", FORMAT_JSON: "application/json"}
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass
class ShopExportSettings:
    format: str = FORMAT_CSV
    scope: str = SCOPE_ALL
    columns: list = field(default_factory=lambda: [c[0] for c in SHOP_COLUMNS])
    status: str = ALL
    tags: list = field(default_factory=list)
    credit_min: int = CREDIT_SCORE_MIN
    credit_max: int = CREDIT_SCORE_MAX
    balance_min: float | None = None
    balance_max: float | None = None


@dataclass
class OrderExportSettings:
    format: str = FORMAT_CSV
    scope: str = SCOPE_ALL
    columns: list = field(default_factory=lambda: [c[0] for c in ORDER_COLUMNS])
    location: str = ALL
    date_from: datetime | None = None
    date_to: datetime | None = None
    amount_min: float | None = None
    amount_max: float | None = None


def select_scope(records, filtered, selected_ids, scope: str, key_attr: str = "id") -> list:
    if scope == SCOPE_ALL:
        return list(records)
    if scope == SCOPE_FILTERED:
        return list(filtered)
    if scope == SCOPE_SELECTED:
        wanted = set(selected_ids or [])
        return [rec for rec in records if getattr(rec, key_attr) in wanted]
    raise ShopAdminError(f"Unknown export scope: {scope!r}")


def filter_shops_for_export(shops, filtered, selected_ids, settings: ShopExportSettings) -> list:
    out = []
    for shop in select_scope(shops, filtered, selected_ids, settings.scope):
        if settings.status != ALL and shop.status != settings.status:
            continue
        # 내보내기 태그 조건은 AND (모든 태그 포함)
        if settings.tags and not all(tag in shop.tags for tag in settings.tags):
            continue
        if shop.credit_score < settings.credit_min or shop.credit_score > settings.credit_max:
            continue
        if settings.balance_min is not None and shop.balance < settings.balance_min:
            continue
        if settings.balance_max is not None and shop.balance > settings.balance_max:
            continue
        out.append(shop)
    return out


def filter_orders_for_export(orders, filtered, selected_ids, settings: OrderExportSettings) -> list:
    out = []
    for order in select_scope(orders, filtered, selected_ids, settings.scope):
        if settings.location != ALL and order.location != settings.location:
            continue
        if settings.date_from is not None and order.created_at < safe_datetime(settings.date_from):
            continue
        if settings.date_to is not None and order.created_at > safe_datetime(settings.date_to):
            continue
        if settings.amount_min is not None and order.amount < settings.amount_min:
            continue
        if settings.amount_max is not None and order.amount > settings.amount_max:
            continue
        out.append(order)
    return out


def project(records, columns, column_defs) -> list[dict]:
    """선택된 컬럼만 남긴 dict 목록 (날짜는 문자열로)."""
    attr_of = {key: attr for key, attr, _ in column_defs}
    rows = []
    for rec in records:
        row = {}
        for key in columns:
            value = getattr(rec, attr_of.get(key, key), None)
            if isinstance(value, datetime):
                value = value.strftime(DATE_FORMAT)
            elif isinstance(value, (list, tuple)):
                value = list(value)
            row[key] = value
        rows.append(row)
    return rows


def to_csv(rows: list[dict], columns, column_defs) -> str:
    labels = {key: label for key, _, label in column_defs}
    df = pd.DataFrame(rows, columns=list(columns))
    for col in df.columns:
        df[col] = df[col].apply(lambda v: "; ".join(v) if isinstance(v, list) else v)
    df = df.rename(columns=lambda key: labels.get(key, key))
    return df.to_csv(index=False, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")


def to_json(rows: list[dict]) -> str:
    return json.dumps(rows, indent=2, ensure_ascii=False)


def render(rows, columns, column_defs, fmt: str, basename: str) -> tuple[str, str, str]:
    """(파일명, MIME, 내용)"""
    if fmt == FORMAT_CSV:
        return f"{basename}.csv", MIME_TYPES[FORMAT_CSV], to_csv(rows, columns, column_defs)
    if fmt == FORMAT_JSON:
        return f"{basename}.json", MIME_TYPES[FORMAT_JSON], to_json(rows)
    if fmt == FORMAT_EXCEL:
        raise ShopAdminError("Excel export is not supported; use CSV or JSON.")
    raise ShopAdminError(f"Unknown export format: {fmt!r}")


def export_shops(shops, filtered, selected_ids, settings: ShopExportSettings):
    data = filter_shops_for_export(shops, filtered, selected_ids, settings)
    rows = project(data, settings.columns, SHOP_COLUMNS)
    logger.info("Exporting %d shops as %s", len(rows), settings.format)
    return render(rows, settings.columns, SHOP_COLUMNS, settings.format, "shops")


def export_orders(orders, filtered, selected_ids, settings: OrderExportSettings):
    data = filter_orders_for_export(orders, filtered, selected_ids, settings)
    rows = project(data, settings.columns, ORDER_COLUMNS)
    logger.info("Exporting %d orders as %s", len(rows), settings.format)
    return render(rows, settings.columns, ORDER_COLUMNS, settings.format, "orders")


# ----------------------
# 클립보드 텍스트
# ----------------------
def translate_location(location: str) -> str:
    return LOCATION_TRANSLATIONS.get(location, location)


def orders_clipboard_text(orders) -> str:
    return "\n\n---\n\n".join(
        f"SHOP ID: {o.shop_id}\nAMOUNT: ${safe_float(o.amount):,.2f}\nLOCATION: {o.location}"
        for o in orders
    )


def orders_clipboard_text_chinese(orders) -> str:
    return "\n\n---\n\n".join(
        f"{o.shop_id}\n ${math.floor(safe_float(o.amount) + 0.5)}\n{translate_location(o.location)}"
        for o in orders
    )
