"""Moderation package integration helpers exposed to the application."""

from app.moderation.api import router
from app.moderation.domain.container import configure

__all__ = ["router", "configure"]
