"""Self-service sign-up."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse
from sqlmodel import Session

from ...core import get_session
from ...models import User
from ...services.users import RecordInvalid, register_user
from ...web import flash, get_current_user, redirect, render, sign_in

router = APIRouter(prefix="/users", tags=["registrations"])


@router.get("/sign_up", response_class=HTMLResponse, name="new_user_registration")
def new_registration(request: Request, current_user: Optional[User] = Depends(get_current_user)):
    if current_user is not None:
        flash(request, "You are already signed in.", "alert")
        return redirect("/")
    return render(request, "users/sign_up.html", {"form": {}})


@router.post("", name="user_registration")
def create_registration(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    password_confirmation: Optional[str] = Form(None),
    session: Session = Depends(get_session),
):
    try:
        user = register_user(
            session,
            email=email,
            password=password,
            password_confirmation=password_confirmation,
            name=name,
        )
    except RecordInvalid as exc:
        return render(
            request,
            "users/sign_up.html",
            {"form": {"name": name, "email": email}, "errors": exc.errors},
            status_code=422,
        )

    sign_in(request, user)
    flash(request, "Welcome! You have signed up successfully.")
    return redirect("/")


__all__ = ["router"]
