"""CSV → 상점 후보 목록 (행별 검증 + 중복 표시)."""
import io
import logging
from dataclasses import dataclass, field

import pandas as pd

from .errors import ImportFormatError
from .models import (
    CREDIT_SCORE_MAX,
    CREDIT_SCORE_MIN,
    STATUS_ACTIVE,
    STATUS_OPTIONS,
    safe_float,
    safe_str,
)

logger = logging.getLogger(__name__)

HEADER_SYNONYMS = {
    "shopid": "shop_id",
    "shop_id": "shop_id",
    "shop id": "shop_id",
    "client": "client_name",
    "clientname": "client_name",
    "client_name": "client_name",
    "client name": "client_name",
    "status": "status",
    "tags": "tags",
    "creditscore": "credit_score",
    "credit_score": "credit_score",
    "credit score": "credit_score",
    "balance": "balance",
}

EXAMPLE_CSV = """shopid,client,status,tags,creditscore,balance
SH001,John's Electronics,Active,New Shop;VIP,85,15000.50
SH002,Mary's Boutique,On Hold,With Loan;Old Client,72,-2500.00
SH003,Tech Solutions Inc,Active,VIP;No Product,78,8750.25
"""


@dataclass
class ParsedShop:
    row_number: int
    shop_id: str = ""
    client_name: str = ""
    status: str = STATUS_ACTIVE
    tags: list = field(default_factory=list)
    credit_score: int = 0
    balance: float = 0.0
    errors: list = field(default_factory=list)
    is_duplicate: bool = False

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_payload(self) -> dict:
        return {
            "shopId": self.shop_id,
            "clientName": self.client_name,
            "status": self.status,
            "tags": list(self.tags),
            "creditScore": self.credit_score,
            "balance": self.balance,
        }


def _parse_credit_score(value: str) -> int:
    """0~100 밖이거나 숫자가 아니면 0."""
    score = safe_float(value, None)
    if score is None:
        return 0
    score = int(score)
    if CREDIT_SCORE_MIN <= score <= CREDIT_SCORE_MAX:
        return score
    return 0


def _read_frame(text: str) -> pd.DataFrame:
    if not str(text or "").strip():
        raise ImportFormatError("CSV file is empty")
    try:
        header = pd.read_csv(io.StringIO(text), nrows=0, dtype=str)
        width = len(header.columns)
        # index_col=False: 행 끝 쉼표가 있어도 첫 열을 인덱스로 쓰지 않음
        df = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            index_col=False,
            engine="python",
            on_bad_lines=lambda bad: bad[:width],
        )
    except pd.errors.EmptyDataError as e:
        raise ImportFormatError("CSV file is empty") from e
    except (pd.errors.ParserError, ValueError) as e:
        raise ImportFormatError(f"Error processing CSV file: {e}") from e
    if df.empty:
        raise ImportFormatError("CSV file must contain at least a header and one data row")
    return df


def parse_shop_csv(text: str, existing_shops) -> list[ParsedShop]:
    df = _read_frame(text)
    columns = {}
    for col in df.columns:
        key = HEADER_SYNONYMS.get(str(col).strip().lower())
        if key and key not in columns:
            columns[key] = col

    existing_codes = {shop.shop_id for shop in existing_shops or []}
    seen_codes: set = set()
    parsed: list[ParsedShop] = []
    for index, row in enumerate(df.itertuples(index=False), start=2):
        raw = dict(zip(df.columns, row))

        def cell(key):
            col = columns.get(key)
            return safe_str(raw.get(col)).strip().replace('"', "") if col is not None else ""

        shop = ParsedShop(row_number=index)
        shop.shop_id = cell("shop_id")
        shop.client_name = cell("client_name")
        status = cell("status")
        if status in STATUS_OPTIONS:
            shop.status = status
        tags = cell("tags")
        if tags:
            shop.tags = [t.strip() for t in tags.split(";") if t.strip()]
        shop.credit_score = _parse_credit_score(cell("credit_score"))
        shop.balance = safe_float(cell("balance"), 0.0)

        if not shop.shop_id:
            shop.errors.append("Shop ID is required")
        if not shop.client_name:
            shop.errors.append("Client name is required")
        if shop.shop_id and shop.shop_id in existing_codes:
            shop.is_duplicate = True
            shop.errors.append("Shop ID already exists")
        elif shop.shop_id and shop.shop_id in seen_codes:
            shop.is_duplicate = True
            shop.errors.append("Duplicate Shop ID in file")
        if shop.shop_id:
            seen_codes.add(shop.shop_id)
        parsed.append(shop)

    logger.info("Parsed %d CSV rows (%d importable)", len(parsed), len(importable(parsed)))
    return parsed


def importable(parsed) -> list[dict]:
    return [p.to_payload() for p in parsed if p.is_valid and not p.is_duplicate]


def import_summary(parsed) -> dict:
    return {
        "valid": sum(1 for p in parsed if p.is_valid and not p.is_duplicate),
        "errors": sum(1 for p in parsed if not p.is_valid),
        "duplicates": sum(1 for p in parsed if p.is_duplicate),
    }
