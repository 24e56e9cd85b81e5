# ----------------------
# 0️⃣ 경로/상수 (Secrets → 환경변수 → 기본값)
# ----------------------
import logging
import os
from pathlib import Path

import streamlit as st

BASE_DIR = Path(__file__).resolve().parent.parent

try:
    SECRETS = dict(st.secrets)
except Exception:
    SECRETS = {}


def setting(name: str, default=None):
    """st.secrets → 환경변수 → 기본값 순서로 설정값을 찾습니다."""
    val = SECRETS.get(name)
    if val is None or val == "":
        val = os.environ.get(name)
    if val is None or val == "":
        return default
    return val


def _resolve_path(val, default: Path) -> Path:
    if not val:
        return default
    p = Path(str(val))
    return p if p.is_absolute() else (BASE_DIR / p)


KEYS_DIR = _resolve_path(setting("KEYS_DIR") or os.environ.get("SHOP_ADMIN_KEYS_DIR"), BASE_DIR / "keys")
SA_FILE_PATH = KEYS_DIR / "serviceAccount.json"

SHOPS_COLLECTION = "shops"
ORDERS_COLLECTION = "orders"
ADVANCE_ORDERS_COLLECTION = "advanceOrders"
USERS_COLLECTION = "users"

PAGE_SIZE = 30

FIREBASE_WEB_API_KEY = setting("FIREBASE_WEB_API_KEY", "")
LOG_LEVEL = str(setting("LOG_LEVEL", "INFO")).upper()

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> logging.Logger:
    """패키지 루트 로거에 핸들러를 한 번만 붙입니다."""
    root = logging.getLogger("shop_admin")
    root.setLevel(level or LOG_LEVEL)
    if not any(getattr(h, "_shop_admin", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._shop_admin = True
        root.addHandler(handler)
    return root
