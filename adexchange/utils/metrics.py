"""Pure metric math helpers used by the stats read-path."""
from __future__ import annotations

from typing import Mapping


def safe_div(numerator: float | int, denominator: float | int) -> float:
    if denominator in (0, 0.0):
        return 0.0
    return float(numerator) / float(denominator)


def ctr_pct(clicks: int, views: int) -> float:
    """Click-through rate as a percentage (0 when there were no views)."""
    return safe_div(clicks, views) * 100.0


def share_pct(counts: Mapping[str, int]) -> dict[str, int]:
    """Rounded percentage share of each key; empty dict when the total is zero."""
    total = sum(counts.values())
    if total == 0:
        return {}
    return {key: int(round(safe_div(value, total) * 100)) for key, value in counts.items()}


__all__ = ["safe_div", "ctr_pct", "share_pct"]
