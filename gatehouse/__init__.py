"""Gatehouse: account registration, sign-in and single sign-on."""

__version__ = "0.1.0"
