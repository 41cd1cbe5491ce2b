"""Utility helpers."""

from __future__ import annotations

from .progress import RichProgress, SimpleProgress, batch_progress_callback, create_progress

__all__ = [
    "RichProgress",
    "SimpleProgress",
    "batch_progress_callback",
    "create_progress",
]
