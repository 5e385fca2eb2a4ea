"""Password recovery by emailed token."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse
from sqlmodel import Session

from ...core import BASE_URL, get_session
from ...services.mailer import Mailer, get_mailer
from ...services.users import (
    RecordInvalid,
    reset_password_by_token,
    send_reset_password_instructions,
)
from ...web import flash, redirect, render, sign_in

router = APIRouter(prefix="/users/password", tags=["passwords"])

SENT_INSTRUCTIONS = (
    "You will receive an email with instructions on how to reset your password in a few minutes."
)
NO_TOKEN = (
    "You can't access this page without coming from a password reset email. "
    "If you do come from a password reset email, please make sure you used the full URL provided."
)


@router.get("/new", response_class=HTMLResponse, name="new_user_password")
def new_password(request: Request):
    return render(request, "users/password_new.html", {"email": ""})


@router.post("", name="user_password")
def create_password(
    request: Request,
    email: str = Form(""),
    session: Session = Depends(get_session),
    mailer: Mailer = Depends(get_mailer),
):
    base_url = BASE_URL or str(request.base_url)
    try:
        send_reset_password_instructions(session, email, mailer, base_url)
    except RecordInvalid as exc:
        return render(
            request,
            "users/password_new.html",
            {"email": email, "errors": exc.errors},
            status_code=422,
        )
    flash(request, SENT_INSTRUCTIONS)
    return redirect("/users/sign_in")


@router.get("/edit", response_class=HTMLResponse, name="edit_user_password")
def edit_password(request: Request, reset_password_token: Optional[str] = None):
    if not reset_password_token:
        flash(request, NO_TOKEN, "alert")
        return redirect("/users/sign_in")
    return render(request, "users/password_edit.html", {"reset_password_token": reset_password_token})


def _update_password(
    request: Request,
    session: Session,
    reset_password_token: str,
    password: str,
    password_confirmation: Optional[str],
):
    try:
        user = reset_password_by_token(session, reset_password_token, password, password_confirmation)
    except RecordInvalid as exc:
        return render(
            request,
            "users/password_edit.html",
            {"reset_password_token": reset_password_token, "errors": exc.errors},
            status_code=422,
        )
    sign_in(request, user)
    flash(request, "Your password has been changed successfully. You are now signed in.")
    return redirect("/")


@router.post("/edit", name="update_user_password_form")
def update_password_form(
    request: Request,
    reset_password_token: str = Form(""),
    password: str = Form(""),
    password_confirmation: Optional[str] = Form(None),
    session: Session = Depends(get_session),
):
    return _update_password(request, session, reset_password_token, password, password_confirmation)


@router.api_route("", methods=["PUT", "PATCH"], name="update_user_password")
def update_password(
    request: Request,
    reset_password_token: str = Form(""),
    password: str = Form(""),
    password_confirmation: Optional[str] = Form(None),
    session: Session = Depends(get_session),
):
    return _update_password(request, session, reset_password_token, password, password_confirmation)


__all__ = ["router"]
