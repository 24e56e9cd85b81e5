"""Shop / Order / AdvanceOrder records and the coercion helpers used when
mirroring Firestore documents.

Firestore documents keep the camelCase field names (``shopId``,
``clientName``, ``creditScore`` ...). Records in memory use snake_case
attributes and carry a remote handle: ``Pending`` until the record has been
seen in a snapshot, ``Synced(doc_id)`` afterwards.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Union

import pandas as pd

# ----------------------
# 옵션 상수
# ----------------------
STATUS_ACTIVE = "Active"
STATUS_ON_HOLD = "On Hold"
STATUS_INACTIVE = "Inactive"
STATUS_OPTIONS = (STATUS_ACTIVE, STATUS_ON_HOLD, STATUS_INACTIVE)

REQUEST_SYSTEM_MESSAGE = "System Message"
REQUEST_BUYER_INQUIRY = "Buyer Inquiry"
REQUEST_TYPE_OPTIONS = (REQUEST_SYSTEM_MESSAGE, REQUEST_BUYER_INQUIRY)

ROLE_ADMIN = "admin"
ROLE_VIEWER = "viewer"
ROLE_OPTIONS = (ROLE_ADMIN, ROLE_VIEWER)

TAG_OPTIONS = (
    "New Shop",
    "With Loan",
    "Frozen",
    "Hold Withdrawal",
    "No Product",
    "Old Client",
    "VIP",
)

LOCATION_TRANSLATIONS = {
    "Albania": "阿尔巴尼亚",
    "Argentina": "阿根廷",
    "Australia": "澳大利亚",
    "Canada": "加拿大",
    "France": "法国",
    "Germany": "德国",
    "Italy": "意大利",
    "Japan": "日本",
    "Malaysia": "马来西亚",
    "Netherlands": "荷兰",
    "Philippines": "菲律宾",
    "Russia": "俄罗斯",
    "Singapore": "新加坡",
    "South Korea": "韩国",
    "Spain": "西班牙",
    "Switzerland": "瑞士",
    "Thailand": "泰国",
    "Turkey": "土耳其",
    "United Arab Emirates": "阿拉伯联合酋长国",
    "United Kingdom": "英国",
    "United States": "美国",
    "Vietnam": "越南",
    "China": "中国",
}
LOCATION_OPTIONS = tuple(LOCATION_TRANSLATIONS)

CREDIT_SCORE_MIN = 0
CREDIT_SCORE_MAX = 100

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


# ----------------------
# ✅ 안전 변환 유틸
# ----------------------
def safe_float(x, default=0.0):
    if x is None:
        return default
    try:
        if isinstance(x, bool):
            return float(x)
        if isinstance(x, (int, float)):
            if pd.isna(x) or math.isinf(x):
                return default
            return float(x)
        if isinstance(x, str):
            s = x.strip()
            if s == "" or s.lower() in {"nan", "none"}:
                return default
            s = s.replace(",", "")
            val = float(s)
            return default if (math.isnan(val) or math.isinf(val)) else val
        return float(x)
    except Exception:
        return default


def safe_int(x, default=0):
    val = safe_float(x, None)
    if val is None:
        return default
    return int(val)


def safe_str(x, default="") -> str:
    if x is None:
        return default
    try:
        if pd.isna(x):
            return default
    except (TypeError, ValueError):
        pass
    return str(x)


def safe_tags(x) -> list[str]:
    """리스트 방어 복사: 문자열화 + 중복 제거(순서 유지)."""
    if not isinstance(x, (list, tuple)):
        return []
    out: list[str] = []
    for tag in x:
        s = safe_str(tag).strip()
        if s and s not in out:
            out.append(s)
    return out


def safe_datetime(x) -> datetime:
    """Firestore Timestamp / datetime / ISO 문자열 → tz-aware datetime (실패 시 현재 시각)."""
    if isinstance(x, datetime):
        return x if x.tzinfo else x.replace(tzinfo=timezone.utc)
    if hasattr(x, "to_datetime"):
        return safe_datetime(x.to_datetime())
    if isinstance(x, str) and x.strip():
        ts = pd.to_datetime(x.strip(), errors="coerce", utc=True)
        if not pd.isna(ts):
            return ts.to_pydatetime()
    return datetime.now(timezone.utc)


def clamp_credit_score(x) -> int:
    return max(CREDIT_SCORE_MIN, min(CREDIT_SCORE_MAX, safe_int(x, 0)))


def normalize_status(x) -> str:
    s = safe_str(x)
    return s if s in STATUS_OPTIONS else STATUS_ACTIVE


def normalize_request_type(x) -> str:
    s = safe_str(x)
    return s if s in REQUEST_TYPE_OPTIONS else REQUEST_SYSTEM_MESSAGE


# ----------------------
# 원격 핸들 (Pending | Synced)
# ----------------------
@dataclass(frozen=True)
class Pending:
    pass


@dataclass(frozen=True)
class Synced:
    doc_id: str


RemoteHandle = Union[Pending, Synced]


def doc_id_of(record) -> str | None:
    handle = getattr(record, "handle", None)
    return handle.doc_id if isinstance(handle, Synced) else None


# ----------------------
# 레코드
# ----------------------
@dataclass
class Shop:
    id: int
    shop_id: str
    client_name: str
    status: str = STATUS_ACTIVE
    tags: list[str] = field(default_factory=list)
    credit_score: int = 0
    balance: float = 0.0
    handle: RemoteHandle = field(default_factory=Pending)

    @classmethod
    def from_document(cls, doc_id: str | None, data: dict) -> "Shop":
        data = data or {}
        return cls(
            id=safe_int(data.get("id")),
            shop_id=safe_str(data.get("shopId")),
            client_name=safe_str(data.get("clientName")),
            status=normalize_status(data.get("status")),
            tags=safe_tags(data.get("tags")),
            credit_score=safe_int(data.get("creditScore")),
            balance=safe_float(data.get("balance")),
            handle=Synced(doc_id) if doc_id else Pending(),
        )

    def to_document(self) -> dict:
        return {
            "id": self.id,
            "shopId": self.shop_id,
            "clientName": self.client_name,
            "status": self.status,
            "tags": list(self.tags),
            "creditScore": self.credit_score,
            "balance": self.balance,
        }


@dataclass
class Order:
    id: int
    shop_id: str
    client_name: str
    amount: float
    location: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    handle: RemoteHandle = field(default_factory=Pending)

    @classmethod
    def from_document(cls, doc_id: str | None, data: dict) -> "Order":
        data = data or {}
        return cls(
            id=safe_int(data.get("id")),
            shop_id=safe_str(data.get("shopId")),
            client_name=safe_str(data.get("clientName")),
            amount=safe_float(data.get("amount")),
            location=safe_str(data.get("location")),
            created_at=safe_datetime(data.get("createdAt")),
            handle=Synced(doc_id) if doc_id else Pending(),
        )

    def to_document(self) -> dict:
        return {
            "id": self.id,
            "shopId": self.shop_id,
            "clientName": self.client_name,
            "amount": self.amount,
            "location": self.location,
            "createdAt": self.created_at,
        }


@dataclass
class AdvanceOrder:
    id: int
    order_id: str
    shop_id: str
    request_type: str = REQUEST_SYSTEM_MESSAGE
    message: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    handle: RemoteHandle = field(default_factory=Pending)

    @classmethod
    def from_document(cls, doc_id: str | None, data: dict) -> "AdvanceOrder":
        data = data or {}
        return cls(
            id=safe_int(data.get("id")),
            order_id=safe_str(data.get("orderId")),
            shop_id=safe_str(data.get("shopId")),
            request_type=normalize_request_type(data.get("requestType")),
            message=safe_str(data.get("message")),
            created_at=safe_datetime(data.get("createdAt")),
            handle=Synced(doc_id) if doc_id else Pending(),
        )

    def to_document(self) -> dict:
        return {
            "id": self.id,
            "orderId": self.order_id,
            "shopId": self.shop_id,
            "requestType": self.request_type,
            "message": self.message,
            "createdAt": self.created_at,
        }
