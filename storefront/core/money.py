from decimal import ROUND_HALF_UP, Decimal

MINOR_UNITS_PER_MAJOR = 100
ZERO_MONEY = Decimal("0")


def from_minor_units(amount: int | None) -> Decimal:
    """Convert a minor-unit amount (e.g. cents) to major units. ``None`` is zero."""
    if not amount:
        return ZERO_MONEY
    return Decimal(amount) / MINOR_UNITS_PER_MAJOR


def to_minor_units(value: Decimal | int | float | str) -> int:
    return int((Decimal(str(value)) * MINOR_UNITS_PER_MAJOR).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
