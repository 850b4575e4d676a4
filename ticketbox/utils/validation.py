from decimal import Decimal, InvalidOperation


def is_positive_int(value):
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def parse_price(value):
    """Money from JSON (number or string) as a 2-place Decimal; None if invalid or negative."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return None
    try:
        price = Decimal(str(value))
    except InvalidOperation:
        return None
    if not price.is_finite() or price < 0:
        return None
    return price.quantize(Decimal('0.01'))


def is_non_negative_int(value):
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0
