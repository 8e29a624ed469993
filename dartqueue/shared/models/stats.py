"""Data model for per-player match statistics."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class PlayerStats:
    """Cumulative record for one player."""

    games: int = 0
    wins: int = 0
    losses: int = 0
    legs_for: float = 0
    legs_against: float = 0
    avg_sum: float = 0

    @property
    def average(self) -> float | None:
        """Mean of the recorded match averages, None before the first game."""
        if self.games <= 0:
            return None
        return self.avg_sum / self.games

    def apply_result(self, legs_for: float, legs_against: float, average: float) -> None:
        self.games += 1
        self.legs_for += legs_for
        self.legs_against += legs_against
        self.avg_sum += average
        if legs_for > legs_against:
            self.wins += 1
        else:
            self.losses += 1


def normalize_number(value: float) -> float:
    """Collapse integral floats to int so ``3.0`` is stored and printed as ``3``."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value
