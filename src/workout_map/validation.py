from __future__ import annotations

import math

from workout_map.errors import ValidationError

INVALID_INPUT_MESSAGE = "Input has to be positive numbers!"

RUNNING = "running"
CYCLING = "cycling"
WORKOUT_TYPES = (RUNNING, CYCLING)


def parse_number(raw: object) -> float:
    """
    Coerce a form entry into a float the way the workout form always has:
      - surrounding whitespace is ignored
      - an empty entry counts as 0
      - anything that is not a number becomes NaN (and fails validation).
    """
    if raw is None or isinstance(raw, bool):
        return math.nan
    if isinstance(raw, (int, float)):
        return float(raw)
    text = str(raw).strip()
    if not text:
        return 0.0
    # float() takes digit separators ("1_000"), the form never did
    if "_" in text:
        return math.nan
    try:
        return float(text)
    except ValueError:
        return math.nan


def _all_finite(*values: object) -> bool:
    return all(
        isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)
        for v in values
    )


def _all_positive(*values: float) -> bool:
    return all(v > 0 for v in values)


def validate(
    workout_type: str,
    distance: float,
    duration: float,
    cadence_or_elevation: float,
) -> None:
    """
    Raise ValidationError unless the inputs can build a workout of the given type.

    Distance and duration must be finite and strictly positive for both types.
    Running cadence must be finite and strictly positive; cycling elevation gain
    only has to be finite, a zero or negative gain is accepted.
    """
    if workout_type not in WORKOUT_TYPES:
        raise ValidationError(f"Unknown workout type: {workout_type!r}")

    if workout_type == RUNNING:
        ok = _all_finite(distance, duration, cadence_or_elevation) and _all_positive(
            distance, duration, cadence_or_elevation
        )
    else:
        ok = _all_finite(distance, duration, cadence_or_elevation) and _all_positive(
            distance, duration
        )

    if not ok:
        raise ValidationError(INVALID_INPUT_MESSAGE)


def format_number(value: float | None) -> str:
    """Inverse of parse_number for pre-filling the form: 24.0 -> "24", 5.2 -> "5.2"."""
    if value is None:
        return ""
    if math.isfinite(value) and float(value).is_integer():
        return str(int(value))
    return repr(float(value))
