"""Data model for operator-defined chat commands."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class CustomCommand:
    """Trigger/response pair. ``name`` is stored lower-cased, prefix included."""

    id: str
    name: str
    response: str
