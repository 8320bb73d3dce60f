"""API routes."""

from . import control, observability, webhook

__all__ = ["control", "observability", "webhook"]
