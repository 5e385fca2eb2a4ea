"""Helpers shared by the HTML routers: templates, flash messages and the
signed-in user."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from fastapi import Depends, Request
from fastapi.responses import RedirectResponse, Response
from fastapi.templating import Jinja2Templates
from sqlmodel import Session

from .core import (
    COOKIE_DOMAIN,
    COOKIE_SAMESITE,
    COOKIE_SECURE,
    REMEMBER_FOR_DAYS,
    SSO_ENABLED,
    get_session,
)
from .models import User
from .services.formatting import format_currency, to_title_case, truncate
from .services.users import forget_me, remember_me, user_from_remember_token

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
STATIC_DIR = Path(__file__).resolve().parent / "static"

REMEMBER_COOKIE = "remember_user_token"

_SESSION_USER_KEY = "user_id"
_SESSION_FLASH_KEY = "_flash"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["currency"] = format_currency
templates.env.filters["truncate_text"] = truncate
templates.env.filters["titlecase"] = to_title_case


def flash(request: Request, message: str, category: str = "notice") -> None:
    messages = request.session.get(_SESSION_FLASH_KEY) or []
    messages.append([category, message])
    request.session[_SESSION_FLASH_KEY] = messages


def pop_flashes(request: Request) -> List[Tuple[str, str]]:
    return [tuple(item) for item in request.session.pop(_SESSION_FLASH_KEY, None) or []]


def get_current_user(
    request: Request, session: Session = Depends(get_session)
) -> Optional[User]:
    """Resolve the signed-in user from the session or the remember-me cookie."""

    user: Optional[User] = None
    uid = request.session.get(_SESSION_USER_KEY)
    if uid is not None:
        user = session.get(User, int(uid))
        if user is None:
            request.session.pop(_SESSION_USER_KEY, None)

    if user is None:
        user = user_from_remember_token(session, request.cookies.get(REMEMBER_COOKIE))
        if user is not None:
            request.session[_SESSION_USER_KEY] = user.id

    request.state.current_user = user
    return user


def sign_in(request: Request, user: User) -> None:
    request.session[_SESSION_USER_KEY] = user.id
    request.state.current_user = user


def remember(response: Response, session: Session, user: User) -> None:
    response.set_cookie(
        REMEMBER_COOKIE,
        remember_me(session, user),
        max_age=REMEMBER_FOR_DAYS * 24 * 3600,
        httponly=True,
        secure=COOKIE_SECURE,
        samesite=COOKIE_SAMESITE,
        domain=COOKIE_DOMAIN,
    )


def sign_out(request: Request, response: Response, session: Session, user: Optional[User]) -> None:
    if user is not None:
        forget_me(session, user)
    flashes = request.session.get(_SESSION_FLASH_KEY)
    request.session.clear()
    if flashes:
        request.session[_SESSION_FLASH_KEY] = flashes
    request.state.current_user = None
    response.delete_cookie(REMEMBER_COOKIE, domain=COOKIE_DOMAIN)


def redirect(url: str) -> RedirectResponse:
    """Redirect after a form post; 303 makes the browser follow up with GET."""
    return RedirectResponse(url, status_code=303)


def render(
    request: Request,
    name: str,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 200,
) -> Response:
    page: Dict[str, Any] = {
        "current_user": getattr(request.state, "current_user", None),
        "flashes": pop_flashes(request),
        "sso_enabled": SSO_ENABLED,
        "errors": None,
    }
    page.update(context or {})
    return templates.TemplateResponse(request, name, page, status_code=status_code)


__all__ = [
    "REMEMBER_COOKIE",
    "STATIC_DIR",
    "flash",
    "get_current_user",
    "pop_flashes",
    "redirect",
    "remember",
    "render",
    "sign_in",
    "sign_out",
    "templates",
]
