"""Sign-in and sign-out."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse
from sqlmodel import Session

from ...core import get_session
from ...models import User
from ...services.users import authenticate
from ...web import flash, get_current_user, redirect, remember, render, sign_in, sign_out

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["sessions"])

INVALID_CREDENTIALS = "Invalid Email or password."


@router.get("/sign_in", response_class=HTMLResponse, name="new_user_session")
def new_session(request: Request, current_user: Optional[User] = Depends(get_current_user)):
    if current_user is not None:
        flash(request, "You are already signed in.", "alert")
        return redirect("/")
    return render(request, "users/sign_in.html", {"email": ""})


@router.post("/sign_in", name="user_session")
def create_session(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    remember_me: Optional[str] = Form(None),
    session: Session = Depends(get_session),
):
    user = authenticate(session, email, password)
    if user is None:
        logger.warning("Failed sign-in attempt")
        flash(request, INVALID_CREDENTIALS, "alert")
        return render(request, "users/sign_in.html", {"email": email}, status_code=422)

    sign_in(request, user)
    logger.info("User id=%s signed in", user.id)
    flash(request, "Signed in successfully.")
    response = redirect("/")
    if remember_me in ("1", "on", "true"):
        remember(response, session, user)
    return response


@router.api_route("/sign_out", methods=["DELETE", "POST"], name="destroy_user_session")
def destroy_session(
    request: Request,
    current_user: Optional[User] = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    response = redirect("/")
    sign_out(request, response, session, current_user)
    if current_user is not None:
        logger.info("User id=%s signed out", current_user.id)
    flash(request, "Signed out successfully.")
    return response


__all__ = ["router"]
