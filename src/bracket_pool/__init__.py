"""Bracket progression, pick cascade and scoring core for a 64-entrant prediction pool."""

from __future__ import annotations

__version__ = "0.1.0"
