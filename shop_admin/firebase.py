# ----------------------
# 0-1️⃣ Firebase 초기화 (Secrets → 환경변수 JSON → keys/ → GOOGLE_APPLICATION_CREDENTIALS)
# ----------------------
import json
import logging
import os
from pathlib import Path

import firebase_admin
from firebase_admin import credentials, firestore

from . import config
from .errors import ShopAdminError

logger = logging.getLogger(__name__)


def init_firestore():
    """Firebase 인증 및 Firestore 클라이언트 초기화 (중복 호출 방지)"""
    if firebase_admin._apps:
        return firestore.client()
    svc_dict = config.SECRETS.get("firebase_service_account")
    if isinstance(svc_dict, dict) and svc_dict:
        cred = credentials.Certificate(dict(svc_dict))
        firebase_admin.initialize_app(cred)
        logger.info("Firebase initialised from st.secrets")
        return firestore.client()
    gac_json = os.environ.get("GOOGLE_APPLICATION_CREDENTIALS_JSON")
    if gac_json:
        cred = credentials.Certificate(json.loads(gac_json))
        firebase_admin.initialize_app(cred)
        logger.info("Firebase initialised from GOOGLE_APPLICATION_CREDENTIALS_JSON")
        return firestore.client()
    if config.SA_FILE_PATH.exists():
        cred = credentials.Certificate(str(config.SA_FILE_PATH))
        firebase_admin.initialize_app(cred)
        logger.info("Firebase initialised from %s", config.SA_FILE_PATH)
        return firestore.client()
    gac = os.environ.get("GOOGLE_APPLICATION_CREDENTIALS")
    if gac and Path(gac).expanduser().exists():
        firebase_admin.initialize_app()
        logger.info("Firebase initialised from GOOGLE_APPLICATION_CREDENTIALS")
        return firestore.client()
    raise ShopAdminError(
        "Firebase credentials not found. Set st.secrets['firebase_service_account'], "
        "GOOGLE_APPLICATION_CREDENTIALS_JSON, keys/serviceAccount.json "
        "or GOOGLE_APPLICATION_CREDENTIALS."
    )


def check_connection(db) -> bool:
    try:
        db.collection("test").document("connection").get()
        logger.info("Firebase connection successful")
        return True
    except Exception:
        logger.exception("Firebase connection failed")
        return False
