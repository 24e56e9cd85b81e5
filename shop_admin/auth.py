"""Firebase Auth 로그인 + Firestore users/{uid} 역할 조회.

Password sign-in goes through the Identity Toolkit REST endpoint (the admin
SDK cannot verify passwords). The role stored in ``users/{uid}`` only gates
write controls in the UI.
"""
import logging
from dataclasses import dataclass
from typing import Callable

import requests

from . import config
from .errors import AuthError
from .models import ROLE_ADMIN, ROLE_OPTIONS, ROLE_VIEWER, safe_str

logger = logging.getLogger(__name__)

SIGN_IN_URL = "https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword"

# REST 에러 코드 → 화면 문구
ERROR_MESSAGES = {
    "EMAIL_NOT_FOUND": "No account found for this email.",
    "INVALID_PASSWORD": "Incorrect password.",
    "INVALID_LOGIN_CREDENTIALS": "Invalid email or password.",
    "USER_DISABLED": "This account has been disabled.",
    "INVALID_EMAIL": "Invalid email address.",
    "MISSING_PASSWORD": "Password is required.",
}


@dataclass(frozen=True)
class AuthUser:
    uid: str
    email: str
    role: str = ROLE_VIEWER

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


AuthListener = Callable[["AuthUser | None"], None]


class AuthService:
    def __init__(self, db, api_key: str | None = None, session=None, timeout: float = 8):
        self.db = db
        self.api_key = api_key if api_key is not None else config.FIREBASE_WEB_API_KEY
        self.session = session or requests.Session()
        self.timeout = timeout
        self.user: AuthUser | None = None
        self.error: str | None = None
        self.loading = False
        self._listeners: list[AuthListener] = []

    def on_auth_state_change(self, callback: AuthListener) -> Callable[[], None]:
        self._listeners.append(callback)
        callback(self.user)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _set_user(self, user: AuthUser | None) -> None:
        self.user = user
        for callback in list(self._listeners):
            try:
                callback(user)
            except Exception:
                logger.exception("Auth listener failed")

    def _request_sign_in(self, email: str, password: str) -> dict:
        if not self.api_key:
            raise AuthError("FIREBASE_WEB_API_KEY is not configured.")
        res = self.session.post(
            SIGN_IN_URL,
            params={"key": self.api_key},
            json={"email": email, "password": password, "returnSecureToken": True},
            timeout=self.timeout,
        )
        if res.status_code >= 400:
            try:
                code = res.json().get("error", {}).get("message", "")
            except ValueError:
                code = ""
            code = code.split(" ")[0]
            raise AuthError(ERROR_MESSAGES.get(code, code or f"Login failed ({res.status_code})"))
        return res.json()

    def load_profile(self, uid: str) -> dict | None:
        snap = self.db.collection(config.USERS_COLLECTION).document(uid).get()
        if not snap.exists:
            return None
        return snap.to_dict() or {}

    def load_role(self, uid: str) -> str:
        profile = self.load_profile(uid) or {}
        role = safe_str(profile.get("role"))
        return role if role in ROLE_OPTIONS else ROLE_VIEWER

    def sign_in(self, email: str, password: str) -> AuthUser | None:
        self.error = None
        self.loading = True
        try:
            payload = self._request_sign_in(email.strip(), password)
            uid = payload["localId"]
            profile = self.load_profile(uid)
            if profile is None:
                raise AuthError("User profile not found")
            role = safe_str(profile.get("role"))
            user = AuthUser(
                uid=uid,
                email=payload.get("email") or email,
                role=role if role in ROLE_OPTIONS else ROLE_VIEWER,
            )
            self._set_user(user)
            logger.info("Signed in %s as %s", user.email, user.role)
            return user
        except AuthError as e:
            logger.warning("Login rejected for %s: %s", email, e)
            self.error = str(e) or "Login failed"
            return None
        except Exception as e:
            logger.exception("Login error")
            self.error = str(e) or "Login failed"
            return None
        finally:
            self.loading = False

    def sign_out(self) -> None:
        self.error = None
        if self.user is not None:
            logger.info("Signed out %s", self.user.email)
        self._set_user(None)
