import time
from urllib.parse import parse_qs, urlparse

import jwt
import pytest

from src.sd_clockin.sd_clockin.admin_users.model import AdminUser
from src.sd_clockin.sd_clockin.auth import microsoft
from src.sd_clockin.sd_clockin.auth.guards import SESSION_KEY
from src.sd_clockin.sd_clockin.auth.microsoft import MicrosoftAuthConfig
from src.sd_clockin.sd_clockin.main import create_app
from tests.fakes import build_fake_container

TENANT = "11111111-2222-3333-4444-555555555555"
AUTH_CONFIG = MicrosoftAuthConfig(
    tenant_id=TENANT,
    client_id="client-1",
    client_secret="s3cret",
    redirect_uri="http://localhost:5050/api/auth/callback",
)


def _make_client(monkeypatch, **container_kwargs):
    monkeypatch.setenv("APP_ENV", "testing")
    container = build_fake_container(
        admins=[AdminUser(admin_user_id=1, email="lead@example.edu")], **container_kwargs
    )
    app = create_app(container=container)
    app.config["AUTH_REQUIRED"] = True
    app.config["FRONTEND_URL"] = "http://localhost:5173"
    return app.test_client()


@pytest.fixture
def client(monkeypatch):
    return _make_client(monkeypatch, microsoft_auth=AUTH_CONFIG)


def _id_token(nonce, **overrides):
    claims = {
        "aud": "client-1",
        "iss": f"https://login.microsoftonline.com/{TENANT}/v2.0",
        "tid": TENANT,
        "exp": int(time.time()) + 600,
        "oid": "object-id",
        "name": "Lead Person",
        "preferred_username": "Lead@Example.edu",
        "nonce": nonce,
    }
    claims.update(overrides)
    return jwt.encode(claims, "k" * 32, algorithm="HS256")


def _start_login(client):
    resp = client.get("/api/auth/login")
    assert resp.status_code == 302
    query = parse_qs(urlparse(resp.headers["Location"]).query)
    return query["state"][0], query["nonce"][0]


def test_protected_routes_need_session(client):
    resp = client.get("/api/students")

    assert resp.status_code == 401
    assert resp.get_json() == {"message": "Unauthorized"}
    assert client.get("/api/auth/me").status_code == 401


def test_kiosk_routes_are_public(client):
    # No active term in this container, but the route is reachable.
    assert client.get("/api/terms/active").status_code == 404
    assert client.post("/api/checkins/swipe", json={"cardData": "1"}).status_code == 404


def test_login_without_configuration_redirects_with_error(monkeypatch):
    client = _make_client(monkeypatch)

    resp = client.get("/api/auth/login")

    assert resp.status_code == 302
    assert resp.headers["Location"] == "http://localhost:5173/?authError=auth_config"


def test_full_sign_in(client, monkeypatch):
    state, nonce = _start_login(client)
    calls = []

    def fake_exchange(config, code, *, redirect_uri):
        calls.append((code, redirect_uri))
        return {"id_token": _id_token(nonce)}

    monkeypatch.setattr(microsoft, "exchange_code_for_tokens", fake_exchange)

    resp = client.get(f"/api/auth/callback?code=abc&state={state}")

    assert resp.status_code == 302
    assert resp.headers["Location"] == "http://localhost:5173/admin"
    assert calls == [("abc", AUTH_CONFIG.redirect_uri)]

    me = client.get("/api/auth/me").get_json()
    assert me == {"sub": "object-id", "name": "Lead Person", "email": "lead@example.edu", "roles": ["admin"]}
    assert client.get("/api/students").status_code == 200

    assert client.post("/api/auth/logout").get_json() == {"message": "Logged out"}
    assert client.get("/api/auth/me").status_code == 401


@pytest.mark.parametrize(
    "query, expected",
    [
        ("error=access_denied", "microsoft_error"),
        ("code=abc&state=wrong", "invalid_state"),
        ("state={state}", "missing_code"),
    ],
)
def test_callback_rejects_bad_requests(client, query, expected):
    state, _ = _start_login(client)

    resp = client.get("/api/auth/callback?" + query.format(state=state))

    assert resp.headers["Location"] == f"http://localhost:5173/?authError={expected}"


def test_callback_rejects_bad_tokens(client, monkeypatch):
    state, nonce = _start_login(client)
    monkeypatch.setattr(
        microsoft, "exchange_code_for_tokens", lambda *a, **k: {"id_token": _id_token("other-nonce")}
    )

    resp = client.get(f"/api/auth/callback?code=abc&state={state}")

    assert resp.headers["Location"].endswith("authError=invalid_nonce")


def test_callback_rejects_non_admins(client, monkeypatch):
    state, nonce = _start_login(client)
    monkeypatch.setattr(
        microsoft,
        "exchange_code_for_tokens",
        lambda *a, **k: {"id_token": _id_token(nonce, preferred_username="stranger@example.edu")},
    )

    resp = client.get(f"/api/auth/callback?code=abc&state={state}")

    assert resp.headers["Location"].endswith("authError=not_allowed_admin")
    with client.session_transaction() as sess:
        assert SESSION_KEY not in sess


def test_callback_token_exchange_failure(client, monkeypatch):
    state, _ = _start_login(client)

    def failing(*args, **kwargs):
        raise microsoft.AuthenticationError("Code expired")

    monkeypatch.setattr(microsoft, "exchange_code_for_tokens", failing)

    resp = client.get(f"/api/auth/callback?code=abc&state={state}")

    assert resp.headers["Location"].endswith("authError=callback_failed")


def test_logout_get_redirects_home(client):
    resp = client.get("/api/auth/logout")

    assert resp.status_code == 302
    assert resp.headers["Location"] == "http://localhost:5173/"
