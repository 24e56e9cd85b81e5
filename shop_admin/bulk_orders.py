"""주문 일괄 입력 행 (상점 코드 → 고객 조회 → 주문 생성)."""
from dataclasses import dataclass, replace

from .models import Shop, safe_float, safe_str

SHOP_NOT_FOUND = "Shop ID not found. Please check and try again."


@dataclass(frozen=True)
class BulkOrderRow:
    row_id: int
    shop_id: str = ""
    amount: float | None = None
    location: str = ""
    client: Shop | None = None
    error: str = ""


def blank_rows() -> list[BulkOrderRow]:
    return [BulkOrderRow(row_id=1)]


def _parse_amount(amount) -> float | None:
    if amount is None or amount == "":
        return None
    return safe_float(amount, None)


def add_row(rows: list[BulkOrderRow]) -> list[BulkOrderRow]:
    next_id = max((r.row_id for r in rows), default=0) + 1
    return [*rows, BulkOrderRow(row_id=next_id)]


def remove_row(rows: list[BulkOrderRow], row_id: int) -> list[BulkOrderRow]:
    return [r for r in rows if r.row_id != row_id]


def lookup_client(row: BulkOrderRow, shops) -> BulkOrderRow:
    code = safe_str(row.shop_id).strip()
    if not code:
        return replace(row, client=None, error="")
    found = next((s for s in shops if s.shop_id == code), None)
    return replace(row, client=found, error="" if found else SHOP_NOT_FOUND)


def update_row(rows, row_id: int, shops, **changes) -> list[BulkOrderRow]:
    """shop_id가 바뀌면 고객 정보를 다시 조회합니다."""
    out = []
    for row in rows:
        if row.row_id != row_id:
            out.append(row)
            continue
        if "amount" in changes:
            changes["amount"] = _parse_amount(changes["amount"])
        updated = replace(row, **changes)
        if "shop_id" in changes:
            updated = lookup_client(replace(updated, client=None, error=""), shops)
        out.append(updated)
    return out


def rows_from_shop_codes(rows, codes, shops, amount=None, location: str = "") -> list[BulkOrderRow]:
    """선택한 상점 코드마다 행을 추가하고 바로 조회합니다."""
    start = max((r.row_id for r in rows), default=0)
    new_rows = [
        lookup_client(
            BulkOrderRow(
                row_id=start + index + 1,
                shop_id=code,
                amount=_parse_amount(amount),
                location=location or "",
            ),
            shops,
        )
        for index, code in enumerate(codes)
    ]
    return [*rows, *new_rows]


def apply_bulk_amount(rows, amount) -> list[BulkOrderRow]:
    value = _parse_amount(amount)
    if value is None or value <= 0:
        return list(rows)
    return [replace(r, amount=value) for r in rows]


def apply_bulk_location(rows, location: str) -> list[BulkOrderRow]:
    if not location:
        return list(rows)
    return [replace(r, location=location) for r in rows]


def is_valid(row: BulkOrderRow) -> bool:
    return bool(
        row.shop_id.strip()
        and row.client is not None
        and row.amount is not None
        and row.amount > 0
        and row.location.strip()
    )


def valid_rows(rows) -> list[BulkOrderRow]:
    return [r for r in rows if is_valid(r)]


def order_payloads(rows) -> list[dict]:
    return [
        {
            "shopId": r.shop_id.strip(),
            "clientName": r.client.client_name,
            "amount": r.amount,
            "location": r.location,
        }
        for r in valid_rows(rows)
    ]
