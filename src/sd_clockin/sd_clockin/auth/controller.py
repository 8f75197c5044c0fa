from __future__ import annotations

import logging

from flask import Flask, jsonify, redirect, request, session, url_for
from werkzeug.security import gen_salt

from ..container import Container
from ..core.exceptions import AuthenticationError, DomainError
from . import microsoft
from .guards import SESSION_KEY, current_admin, store_admin_session

logger = logging.getLogger(__name__)

STATE_KEY = "oauth_state"
NONCE_KEY = "oauth_nonce"


def register(app: Flask, container: Container) -> None:
    config = container.microsoft_auth

    def _frontend(path: str) -> str:
        return f"{app.config.get('FRONTEND_URL', '').rstrip('/')}{path}"

    def _fail(code: str):
        session.pop(STATE_KEY, None)
        session.pop(NONCE_KEY, None)
        return redirect(_frontend(f"/?authError={code}"))

    def _redirect_uri() -> str:
        return config.redirect_uri or url_for("auth_callback", _external=True)

    @app.route("/api/auth/login", methods=["GET"], endpoint="auth_login")
    def auth_login():
        if not config.is_configured:
            logger.error("Microsoft sign-in requested but MICROSOFT_* settings are missing")
            return _fail("auth_config")

        state, nonce = gen_salt(32), gen_salt(32)
        session[STATE_KEY] = state
        session[NONCE_KEY] = nonce
        return redirect(microsoft.build_authorize_url(config, state=state, nonce=nonce, redirect_uri=_redirect_uri()))

    @app.route("/api/auth/callback", methods=["GET"], endpoint="auth_callback")
    def auth_callback():
        if request.args.get("error"):
            return _fail("microsoft_error")

        expected_state = session.get(STATE_KEY)
        expected_nonce = session.get(NONCE_KEY)
        if not expected_state or request.args.get("state") != expected_state:
            return _fail("invalid_state")
        code = request.args.get("code")
        if not code:
            return _fail("missing_code")

        identity: dict = {}
        try:
            tokens = microsoft.exchange_code_for_tokens(config, code, redirect_uri=_redirect_uri())
            id_token = tokens.get("id_token")
            if not id_token:
                return _fail("missing_id_token")

            claims = microsoft.parse_id_token_claims(id_token)
            if not microsoft.validate_id_token_claims(claims, config):
                return _fail("invalid_token")
            if not expected_nonce or claims.get("nonce") != expected_nonce:
                return _fail("invalid_nonce")
            if not microsoft.is_user_allowed(claims, config):
                return _fail("not_allowed")

            identity = microsoft.user_identity(claims)
            if not identity["sub"]:
                return _fail("missing_subject")

            admin = container.admin_user_service.authorize(email=identity["email"], name=identity["name"])
        except AuthenticationError as e:
            logger.warning("Microsoft callback rejected: %s", e)
            return _fail("callback_failed")
        except DomainError as e:
            logger.info("Sign-in refused for %s: %s", identity.get("email"), e)
            return _fail("not_allowed_admin")

        session.pop(STATE_KEY, None)
        session.pop(NONCE_KEY, None)
        store_admin_session(
            {**identity, "name": admin.name or identity["name"], "email": admin.email},
            ttl_seconds=config.session_ttl_seconds,
        )
        logger.info("Admin %s signed in", admin.email)
        return redirect(_frontend("/admin"))

    @app.route("/api/auth/me", methods=["GET"], endpoint="auth_me")
    def auth_me():
        payload = current_admin()
        if payload is None:
            return jsonify({"message": "Unauthorized"}), 401
        return jsonify(
            {
                "sub": payload["sub"],
                "name": payload.get("name") or "",
                "email": payload.get("email") or "",
                "roles": payload.get("roles", ["admin"]),
            }
        )

    @app.route("/api/auth/logout", methods=["POST", "GET"], endpoint="auth_logout")
    def auth_logout():
        session.pop(SESSION_KEY, None)
        if request.method == "GET":
            return redirect(_frontend("/"))
        return jsonify({"message": "Logged out"})
