from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENT = Decimal("0.01")


def parse_money(value) -> float:
    """Parse an amount from a ledger row.

    Numbers pass through unchanged. Strings may carry a currency sign,
    thousands separators, or accounting-style parentheses for negatives,
    and are rounded to cents.
    """
    if value is None:
        raise ValueError("missing money value")

    if isinstance(value, bool):
        raise ValueError("invalid money value")

    if isinstance(value, (int, float, Decimal)):
        return float(value)

    normalized = str(value).strip()
    if not normalized:
        raise ValueError("empty money value")

    is_negative = normalized.startswith("(") and normalized.endswith(")")
    if is_negative:
        normalized = normalized[1:-1]

    for symbol in ("$", "₴", "€", "£", ","):
        normalized = normalized.replace(symbol, "")
    normalized = normalized.replace(" ", "")

    try:
        amount = Decimal(normalized).quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise ValueError(f"invalid money value: {value!r}") from exc

    return float(-amount if is_negative else amount)
