import time

import pytest
from flask import Flask, session

from src.sd_clockin.sd_clockin.auth.guards import SESSION_KEY, admin_required, current_admin, store_admin_session
from src.sd_clockin.sd_clockin.core.exceptions import AuthenticationError


@pytest.fixture
def app():
    app = Flask(__name__)
    app.secret_key = "test"
    app.config["AUTH_REQUIRED"] = True
    return app


@admin_required
def _protected():
    return "ok"


def test_store_and_read_session(app):
    with app.test_request_context():
        payload = store_admin_session({"sub": "s1", "name": "Lead", "email": "lead@example.edu"}, ttl_seconds=60)

        assert payload["roles"] == ["admin"]
        assert payload["exp"] - payload["iat"] == 60
        assert current_admin() == payload


def test_expired_session_is_dropped(app):
    with app.test_request_context():
        session[SESSION_KEY] = {"sub": "s1", "exp": int(time.time()) - 5}

        assert current_admin() is None
        assert SESSION_KEY not in session


def test_admin_required(app):
    with app.test_request_context():
        with pytest.raises(AuthenticationError):
            _protected()

        store_admin_session({"sub": "s1"}, ttl_seconds=60)
        assert _protected() == "ok"


def test_admin_required_can_be_switched_off(app):
    app.config["AUTH_REQUIRED"] = False
    with app.test_request_context():
        assert _protected() == "ok"
