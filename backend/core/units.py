import math
from typing import Optional, Union

Number = Union[int, float]

UNITS = ("kg", "g", "liters", "ml", "pieces", "boxes", "cans", "bottles")
DISCRETE_UNITS = frozenset({"pieces", "boxes", "cans", "bottles"})
DEFAULT_UNIT = "kg"


def is_discrete_unit(unit: str) -> bool:
    return unit in DISCRETE_UNITS


def parse_number(raw) -> float:
    """Lenient numeric parse for form input: blanks and garbage become 0."""
    if raw is None or isinstance(raw, bool):
        return 0.0
    try:
        value = float(str(raw).strip())
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value) or math.isinf(value):
        return 0.0
    return value


def coerce_amount(value: Number, unit: str) -> Number:
    """Clamp to >= 0 and floor to a whole number for discrete units."""
    value = max(0.0, float(value))
    if is_discrete_unit(unit):
        return int(math.floor(value))
    return value


def coerce_price(value: Number) -> float:
    return max(0.0, float(value))


def price_to_minor(price) -> Optional[int]:
    if price is None:
        return None
    return int(round(float(price) * 100))


def minor_to_price(price_minor) -> float:
    if price_minor is None:
        return 0.0
    return float(price_minor) / 100.0
