"""
Score Normalization

Breakdown scores from the model arrive on an unknown scale (0-1, 0-10 or
0-100, sometimes as text). They are mapped onto a 0-10 display value and a
0-100 bar fill.

The thresholds are heuristic and must stay as they are: a genuine 0-10 score
of exactly 1 is indistinguishable from a 0-1 score of 1 and is read as the
latter (display 10.0).
"""

import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, NamedTuple


class NormalizedScore(NamedTuple):
    display: float  # 0-10, one decimal
    fill: float     # 0-100 bar width


def _coerce(raw: Any) -> float:
    """Best-effort numeric coercion; anything unparseable or non-finite counts as 0."""
    if raw is None:
        return 0.0
    if isinstance(raw, bool):
        return float(raw)
    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str):
        text = raw.strip()
        if not text:
            return 0.0
        try:
            value = float(text)
        except ValueError:
            return 0.0
    else:
        return 0.0
    return value if math.isfinite(value) else 0.0


def to_fixed(value: float, digits: int) -> str:
    """Format with a fixed number of decimals, halves rounded away from zero."""
    if math.isinf(value) or math.isnan(value):
        return str(value)
    quantum = Decimal(1).scaleb(-digits)
    try:
        return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))
    except InvalidOperation:
        # Beyond Decimal's default precision, halves no longer matter
        return f"{value:.{digits}f}"


def _one_decimal(value: float) -> float:
    return float(to_fixed(value, 1))


def normalize_score(raw: Any) -> NormalizedScore:
    """
    Map a raw score of unknown scale to a display value and a bar fill.

    Args:
        raw: Number or numeric text as returned by the model

    Returns:
        NormalizedScore with display on 0-10 and fill clamped to [0, 100]
    """
    value = _coerce(raw)

    if value > 10:
        # Assume 0-100 scale
        display = value / 10
        fill = value
    elif 0 < value <= 1:
        # Assume 0-1 scale
        display = value * 10
        fill = value * 100
    else:
        # Assume 0-10 scale
        display = value
        fill = value * 10

    fill = min(max(fill, 0.0), 100.0)
    return NormalizedScore(display=_one_decimal(display), fill=fill)
