"""HTTP API exposing the published server directory."""

from __future__ import annotations

from .app import app, create_app  # noqa: F401

__all__ = ["app", "create_app"]
