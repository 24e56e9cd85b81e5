import pytest

from shop_admin.auth import SIGN_IN_URL, AuthService


class FakeResponse:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.calls = []

    def post(self, url, params=None, json=None, timeout=None):
        self.calls.append({"url": url, "params": params, "json": json, "timeout": timeout})
        return self.response


def _ok(uid="u1", email="admin@example.com"):
    return FakeResponse(200, {"localId": uid, "email": email, "idToken": "t"})


def _error(code):
    return FakeResponse(400, {"error": {"code": 400, "message": code}})


@pytest.fixture
def make_auth(db):
    def make(response, api_key="key-123"):
        session = FakeSession(response)
        return AuthService(db, api_key=api_key, session=session), session

    return make


def test_sign_in_loads_role(db, make_auth):
    db.collection("users").document("u1").set({"email": "admin@example.com", "role": "admin"})
    auth, session = make_auth(_ok())
    user = auth.sign_in(" admin@example.com ", "secret")
    assert user.uid == "u1"
    assert user.is_admin
    assert auth.user == user
    assert auth.error is None
    assert not auth.loading
    call = session.calls[0]
    assert call["url"] == SIGN_IN_URL
    assert call["params"] == {"key": "key-123"}
    assert call["json"]["email"] == "admin@example.com"


def test_unknown_role_defaults_to_viewer(db, make_auth):
    db.collection("users").document("u1").set({"role": "owner"})
    auth, _ = make_auth(_ok())
    assert auth.sign_in("admin@example.com", "secret").role == "viewer"
    assert auth.load_role("missing") == "viewer"


def test_missing_profile_is_an_error(make_auth):
    auth, _ = make_auth(_ok())
    assert auth.sign_in("admin@example.com", "secret") is None
    assert auth.error == "User profile not found"
    assert auth.user is None


@pytest.mark.parametrize(
    "response, message",
    [
        (_error("INVALID_PASSWORD"), "Incorrect password."),
        (_error("INVALID_LOGIN_CREDENTIALS"), "Invalid email or password."),
        (_error("TOO_MANY_ATTEMPTS_TRY_LATER : Access disabled"), "TOO_MANY_ATTEMPTS_TRY_LATER"),
        (FakeResponse(500, None), "Login failed (500)"),
    ],
)
def test_rest_errors_are_reported(make_auth, response, message):
    auth, _ = make_auth(response)
    assert auth.sign_in("a@b.c", "x") is None
    assert auth.error == message


def test_missing_api_key(make_auth):
    auth, session = make_auth(_ok(), api_key="")
    assert auth.sign_in("a@b.c", "x") is None
    assert auth.error == "FIREBASE_WEB_API_KEY is not configured."
    assert session.calls == []


def test_auth_state_listeners(db, make_auth):
    db.collection("users").document("u1").set({"role": "viewer"})
    auth, _ = make_auth(_ok())
    seen = []
    unsubscribe = auth.on_auth_state_change(seen.append)
    assert seen == [None]
    auth.sign_in("admin@example.com", "secret")
    auth.sign_out()
    assert [u.uid if u else None for u in seen] == [None, "u1", None]
    unsubscribe()
    auth.sign_in("admin@example.com", "secret")
    assert len(seen) == 3
