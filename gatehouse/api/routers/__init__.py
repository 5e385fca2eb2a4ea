"""Aggregate routers."""

from fastapi import APIRouter

from .home import router as home_router
from .omniauth import router as omniauth_router
from .passwords import router as passwords_router
from .registrations import router as registrations_router
from .sessions import router as sessions_router
from .system import router as system_router

ALL_ROUTERS: tuple[APIRouter, ...] = (
    system_router,
    home_router,
    sessions_router,
    registrations_router,
    passwords_router,
    omniauth_router,
)

__all__ = ["ALL_ROUTERS"]
