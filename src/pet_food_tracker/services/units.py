"""Unit conversion for food quantities."""

GRAMS_PER_UNIT: dict[str, float] = {
    "grams": 1.0,
    "kg": 1000.0,
    "pounds": 453.592,
    "oz": 28.3495,
    # Dry food volume proxy.
    "cups": 120.0,
}


def to_grams(value: float, unit: str) -> float:
    """Convert a quantity in a supported unit to grams."""
    return value * GRAMS_PER_UNIT[unit]


def from_grams(grams: float, unit: str) -> float:
    """Convert grams back to a supported unit."""
    return grams / GRAMS_PER_UNIT[unit]
