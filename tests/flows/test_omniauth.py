"""
Request tests for Entra ID single sign-on. The provider round trip is stubbed.
"""

from typing import Any, Dict

import pytest
from authlib.integrations.base_client import OAuthError
from fastapi.testclient import TestClient
from sqlmodel import Session

from gatehouse.api.routers import omniauth
from gatehouse.services.users import count_users

USERINFO = {
    "oid": "12345",
    "sub": "pairwise-subject",
    "email": "sso@example.com",
    "name": "SSO User",
}


@pytest.fixture
def sso_enabled(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(omniauth, "SSO_ENABLED", True)


@pytest.fixture
def provider_token(monkeypatch: pytest.MonkeyPatch) -> Dict[str, Any]:
    token: Dict[str, Any] = {"access_token": "token", "userinfo": dict(USERINFO)}

    async def authorize_access_token(request, **kwargs):
        return token

    monkeypatch.setattr(omniauth.oauth.entra_id, "authorize_access_token", authorize_access_token)
    return token


def test_routes_are_hidden_when_not_configured(client: TestClient) -> None:
    assert client.get("/users/auth/entra_id", follow_redirects=False).status_code == 404
    assert client.get("/users/auth/entra_id/callback").status_code == 404


def test_authorize_redirects_to_provider(
    client: TestClient, sso_enabled: None, monkeypatch: pytest.MonkeyPatch
) -> None:
    captured: Dict[str, str] = {}

    async def authorize_redirect(request, redirect_uri, **kwargs):
        from starlette.responses import RedirectResponse

        captured["redirect_uri"] = str(redirect_uri)
        return RedirectResponse("https://login.microsoftonline.com/authorize", status_code=302)

    monkeypatch.setattr(omniauth.oauth.entra_id, "authorize_redirect", authorize_redirect)

    response = client.get("/users/auth/entra_id", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"].startswith("https://login.microsoftonline.com/")
    assert captured["redirect_uri"].endswith("/users/auth/entra_id/callback")


def test_callback_provisions_and_signs_in(
    client: TestClient, db_session: Session, sso_enabled: None, provider_token: Dict[str, Any]
) -> None:
    response = client.get("/users/auth/entra_id/callback", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/"
    assert count_users(db_session) == 1
    home = client.get("/").text
    assert "sso@example.com" in home
    assert "SSO User" in home


def test_repeat_sign_in_reuses_the_account(
    client: TestClient, db_session: Session, sso_enabled: None, provider_token: Dict[str, Any]
) -> None:
    client.get("/users/auth/entra_id/callback")
    client.delete("/users/sign_out")
    client.get("/users/auth/entra_id/callback")

    assert count_users(db_session) == 1


def test_provider_error_redirects_to_sign_in(
    client: TestClient, db_session: Session, sso_enabled: None, monkeypatch: pytest.MonkeyPatch
) -> None:
    async def authorize_access_token(request, **kwargs):
        raise OAuthError(error="access_denied", description="User cancelled")

    monkeypatch.setattr(omniauth.oauth.entra_id, "authorize_access_token", authorize_access_token)

    response = client.get("/users/auth/entra_id/callback", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/users/sign_in"
    assert "Could not authenticate you from Microsoft" in client.get("/users/sign_in").text
    assert count_users(db_session) == 0


def test_missing_email_is_rejected(
    client: TestClient, db_session: Session, sso_enabled: None, provider_token: Dict[str, Any]
) -> None:
    provider_token["userinfo"] = {"oid": "12345"}

    response = client.get("/users/auth/entra_id/callback", follow_redirects=False)

    assert response.headers["location"] == "/users/sign_in"
    assert count_users(db_session) == 0


def test_auth_hash_prefers_object_id() -> None:
    auth = omniauth.auth_hash_from_userinfo(
        {"sub": "s", "oid": "o", "preferred_username": "upn@example.com", "name": "N"}
    )
    assert auth.provider == "entra_id"
    assert auth.uid == "o"
    assert auth.email == "upn@example.com"
    assert auth.name == "N"


def test_email_taken_during_provisioning_redirects_to_sign_in(
    client: TestClient,
    db_session: Session,
    sso_enabled: None,
    provider_token: Dict[str, Any],
    email_claimed_concurrently: None,
) -> None:
    response = client.get("/users/auth/entra_id/callback", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/users/sign_in"
    assert "Email has already been taken" in client.get("/users/sign_in").text
    assert count_users(db_session) == 1
