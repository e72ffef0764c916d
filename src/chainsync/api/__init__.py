"""HTTP surface of chainsync."""

from __future__ import annotations

from .server import API_PREFIX, create_app

__all__ = ["API_PREFIX", "create_app"]
