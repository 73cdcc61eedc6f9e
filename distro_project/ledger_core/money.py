from decimal import ROUND_HALF_UP, Decimal

# Money is kept at 2 places, stock quantities and unit costs at 4
ZERO = Decimal("0.00")
CENT = Decimal("0.01")
FOUR_PLACES = Decimal("0.0001")


def _as_decimal(value):
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    # str() first so floats like 0.1 don't leak binary noise
    return Decimal(str(value))


def to_money(value):
    """Round a value to cents (half-up), the way every posted amount is stored"""
    return _as_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_quantity(value):
    return _as_decimal(value).quantize(FOUR_PLACES, rounding=ROUND_HALF_UP)


# unit costs share the quantity precision
to_unit_cost = to_quantity
