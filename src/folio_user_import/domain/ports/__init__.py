"""Domain port definitions for adapters."""

from __future__ import annotations

from .directory import UserDirectory

__all__ = ["UserDirectory"]
