"""Landing page."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from ...models import User
from ...web import get_current_user, render

router = APIRouter(tags=["home"])


@router.get("/", response_class=HTMLResponse, name="root")
def home(request: Request, current_user: Optional[User] = Depends(get_current_user)):
    return render(request, "home.html", {"user": current_user})


__all__ = ["router"]
