"""Microsoft Entra ID (OpenID Connect) sign-in helpers.

Only the authorization-code flow is supported. The id token is read from the
token endpoint response over TLS, so its signature is not re-verified here;
issuer, audience, tenant, expiry and nonce are checked instead.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional
from urllib.parse import urlencode

import jwt
import requests

from ..core.constants import ADMIN_SESSION_TTL_SECONDS
from ..core.exceptions import AuthenticationError

AUTHORITY = "https://login.microsoftonline.com"
DEFAULT_SCOPES = "openid profile email offline_access"
TENANT_MODES = {"common", "organizations", "consumers"}


def parse_csv_set(value: Optional[str]) -> frozenset[str]:
    if not value:
        return frozenset()
    return frozenset(item.strip().lower() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class MicrosoftAuthConfig:
    tenant_id: str = ""
    client_id: str = ""
    client_secret: str = ""
    redirect_uri: str = ""
    scopes: str = DEFAULT_SCOPES
    allowed_emails: frozenset[str] = field(default_factory=frozenset)
    allowed_domains: frozenset[str] = field(default_factory=frozenset)
    allowed_group_ids: frozenset[str] = field(default_factory=frozenset)
    session_ttl_seconds: int = ADMIN_SESSION_TTL_SECONDS

    @property
    def is_configured(self) -> bool:
        return bool(self.tenant_id and self.client_id and self.client_secret)

    @property
    def token_url(self) -> str:
        return f"{AUTHORITY}/{self.tenant_id}/oauth2/v2.0/token"

    @classmethod
    def from_settings(cls, settings: Any) -> "MicrosoftAuthConfig":
        ttl = int(getattr(settings, "ADMIN_SESSION_TTL_SECONDS", 0) or 0)
        return cls(
            tenant_id=getattr(settings, "MICROSOFT_TENANT_ID", "") or "",
            client_id=getattr(settings, "MICROSOFT_CLIENT_ID", "") or "",
            client_secret=getattr(settings, "MICROSOFT_CLIENT_SECRET", "") or "",
            redirect_uri=getattr(settings, "MICROSOFT_REDIRECT_URI", "") or "",
            scopes=getattr(settings, "MICROSOFT_SCOPES", "") or DEFAULT_SCOPES,
            allowed_emails=parse_csv_set(getattr(settings, "MICROSOFT_ALLOWED_EMAILS", "")),
            allowed_domains=parse_csv_set(getattr(settings, "MICROSOFT_ALLOWED_DOMAINS", "")),
            allowed_group_ids=parse_csv_set(getattr(settings, "MICROSOFT_ALLOWED_GROUP_IDS", "")),
            session_ttl_seconds=ttl if ttl > 0 else ADMIN_SESSION_TTL_SECONDS,
        )


def build_authorize_url(config: MicrosoftAuthConfig, *, state: str, nonce: str, redirect_uri: str) -> str:
    query = urlencode(
        {
            "client_id": config.client_id,
            "response_type": "code",
            "response_mode": "query",
            "redirect_uri": redirect_uri,
            "scope": config.scopes,
            "state": state,
            "nonce": nonce,
        }
    )
    return f"{AUTHORITY}/{config.tenant_id}/oauth2/v2.0/authorize?{query}"


def exchange_code_for_tokens(
    config: MicrosoftAuthConfig,
    code: str,
    *,
    redirect_uri: str,
    http: Any = requests,
    timeout: float = 10,
) -> dict:
    try:
        resp = http.post(
            config.token_url,
            data={
                "client_id": config.client_id,
                "client_secret": config.client_secret,
                "code": code,
                "grant_type": "authorization_code",
                "redirect_uri": redirect_uri,
                "scope": config.scopes,
            },
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            timeout=timeout,
        )
    except requests.RequestException as e:
        raise AuthenticationError(f"Microsoft token exchange failed: {e}")

    try:
        payload = resp.json()
    except ValueError:
        payload = {}
    if not resp.ok:
        raise AuthenticationError(
            payload.get("error_description") or payload.get("error") or "Microsoft token exchange failed"
        )
    return payload


def parse_id_token_claims(id_token: str) -> dict:
    try:
        return jwt.decode(id_token, options={"verify_signature": False})
    except jwt.PyJWTError:
        raise AuthenticationError("Invalid id_token returned by Microsoft")


def validate_id_token_claims(claims: Mapping[str, Any], config: MicrosoftAuthConfig, *, now: Optional[float] = None) -> bool:
    now = time.time() if now is None else now
    exp = claims.get("exp")
    if not exp or exp <= now:
        return False
    if claims.get("aud") != config.client_id:
        return False
    if not str(claims.get("iss") or "").startswith(f"{AUTHORITY}/"):
        return False
    if config.tenant_id.lower() not in TENANT_MODES:
        return claims.get("tid") == config.tenant_id
    return True


def normalized_email(claims: Mapping[str, Any]) -> Optional[str]:
    value = claims.get("email") or claims.get("preferred_username")
    return str(value).lower() if value else None


def is_user_allowed(claims: Mapping[str, Any], config: MicrosoftAuthConfig) -> bool:
    """Optional allow-lists. With none configured everyone passes to the admin check."""

    if not (config.allowed_emails or config.allowed_domains or config.allowed_group_ids):
        return True

    email = normalized_email(claims)
    if email and email in config.allowed_emails:
        return True
    if email and "@" in email and email.split("@", 1)[1] in config.allowed_domains:
        return True
    groups = claims.get("groups") or []
    return any(str(g).lower() in config.allowed_group_ids for g in groups)


def user_identity(claims: Mapping[str, Any]) -> dict:
    return {
        "sub": claims.get("oid") or claims.get("sub") or "",
        "name": claims.get("name"),
        "email": claims.get("email") or claims.get("preferred_username"),
        "tid": claims.get("tid"),
    }
