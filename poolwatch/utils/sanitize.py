# poolwatch/utils/sanitize.py
import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

_CENTS = Decimal("0.01")


def to_int(value: Any, default: int = 0) -> int:
    """Lenient integer coercion for upstream JSON ("12", 12.7, None …)."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return int(number)


def to_float(value: Any, default: float = 0.0) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return default if math.isnan(number) else number


def to_timestamp(value: Any, divisor: int = 1) -> float:
    """
    Unix-seconds timestamp from an upstream value, truncated to whole
    seconds. Returns NaN when the value is missing or not numeric so the
    caller can sanitize it explicitly.
    """
    try:
        number = float(value)
    except (TypeError, ValueError):
        return math.nan
    if math.isnan(number) or math.isinf(number):
        return math.nan
    return float(int(number / divisor))


def sanitize_last_block(value: Any) -> int:
    if value is None:
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number) or math.isinf(number):
        return 0
    return int(number)


def round_percent(value: Any) -> float:
    """Round a fee/donation percentage to 2 places, half-up."""
    try:
        quantized = Decimal(str(value)).quantize(_CENTS, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        return 0.0
    return float(quantized)
