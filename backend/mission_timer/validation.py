import math
from typing import Any

from mission_timer.exceptions import ValidationError

# Largest value a signed 64-bit INTEGER column can hold
MAX_TIME_MS = 2 ** 63 - 1


def clean_name(value: Any) -> str:
    """Return the trimmed name, or raise if it is missing or blank."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError('Invalid name')
    return value.strip()


def clean_time_ms(value: Any) -> int:
    """Coerce a submitted time to whole milliseconds.

    Numbers and numeric strings are accepted; booleans, NaN, infinities and
    negatives are not, nor anything past MAX_TIME_MS. Fractions round
    half up.
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError('Invalid time')
    try:
        numeric = float(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError('Invalid time')
    if not math.isfinite(numeric) or numeric < 0:
        raise ValidationError('Invalid time')
    millis = int(math.floor(numeric + 0.5))
    if millis > MAX_TIME_MS:
        raise ValidationError('Invalid time')
    return millis
