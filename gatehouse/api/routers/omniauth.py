"""Microsoft Entra ID single sign-on routes."""

from __future__ import annotations

import logging

from authlib.integrations.base_client import OAuthError
from authlib.integrations.starlette_client import OAuth
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlmodel import Session

from ...core import SSO_ENABLED, get_session
from ...core.config import (
    ENTRA_CLIENT_ID,
    ENTRA_CLIENT_SECRET,
    ENTRA_TENANT_ID,
    OAUTH_REDIRECT_URL,
)
from ...services.users import AuthHash, RecordInvalid, from_omniauth
from ...web import flash, redirect, sign_in

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users/auth", tags=["omniauth"])

PROVIDER = "entra_id"

oauth = OAuth()
oauth.register(
    name=PROVIDER,
    # Placeholder credentials let the app boot without SSO configured.
    client_id=ENTRA_CLIENT_ID or "unconfigured",
    client_secret=ENTRA_CLIENT_SECRET or "unconfigured",
    server_metadata_url=(
        f"https://login.microsoftonline.com/{ENTRA_TENANT_ID}/v2.0/.well-known/openid-configuration"
    ),
    client_kwargs={"scope": "openid email profile"},
)


def auth_hash_from_userinfo(userinfo: dict) -> AuthHash:
    """Map Entra ID claims onto the provider-neutral identity."""

    uid = userinfo.get("oid") or userinfo.get("sub")
    email = userinfo.get("email") or userinfo.get("preferred_username")
    return AuthHash(provider=PROVIDER, uid=uid, email=email, name=userinfo.get("name"))


def _failure(request: Request, reason: str):
    flash(request, f'Could not authenticate you from Microsoft because "{reason}".', "alert")
    return redirect("/users/sign_in")


@router.get("/entra_id", name="user_entra_id_omniauth_authorize")
async def entra_id_authorize(request: Request):
    if not SSO_ENABLED:
        raise HTTPException(status_code=404, detail="Single sign-on is not configured")
    redirect_uri = OAUTH_REDIRECT_URL or str(request.url_for("user_entra_id_omniauth_callback"))
    return await oauth.entra_id.authorize_redirect(request, redirect_uri)


@router.get("/entra_id/callback", name="user_entra_id_omniauth_callback")
async def entra_id_callback(request: Request, session: Session = Depends(get_session)):
    if not SSO_ENABLED:
        raise HTTPException(status_code=404, detail="Single sign-on is not configured")

    try:
        token = await oauth.entra_id.authorize_access_token(request)
    except OAuthError as exc:
        logger.warning("Entra ID handshake failed: %s", exc.error)
        return _failure(request, exc.description or exc.error or "Invalid credentials")

    userinfo = token.get("userinfo") or {}
    auth = auth_hash_from_userinfo(userinfo)
    if not auth.uid or not auth.email:
        return _failure(request, "Missing account details")

    try:
        user = from_omniauth(session, auth)
    except RecordInvalid as exc:
        logger.warning("Entra ID account could not be provisioned: %s", exc)
        return _failure(request, "; ".join(exc.errors.full_messages()))

    sign_in(request, user)
    flash(request, "Successfully authenticated from Microsoft account.")
    return redirect("/")


__all__ = ["auth_hash_from_userinfo", "oauth", "router"]
