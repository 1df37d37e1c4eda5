"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import re

MILLIUNITS_PER_UNIT = 1000


def parse_amount(amount_str: str, decimal_comma: bool = False) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45"
    - "-123.45"
    - "1,234.56"
    - "(123.45)" (negative in parentheses)
    - "1.234,56" when ``decimal_comma`` is set

    Args:
        amount_str: Amount string
        decimal_comma: Treat "," as the decimal separator and "." as grouping

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols and codes
    amount_str = re.sub(r"[$€£¥]|[A-Z]{3}", "", amount_str)

    if decimal_comma:
        amount_str = amount_str.replace(".", "").replace(",", ".")
    else:
        amount_str = amount_str.replace(",", "")

    amount_str = amount_str.replace(" ", "").replace("\u00a0", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")
    return -amount if is_negative else amount


def to_milliunits(amount: Decimal) -> int:
    """Convert a major-unit amount into integer milliunits."""
    return int((amount * MILLIUNITS_PER_UNIT).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def parse_milliunits(amount_str: str, decimal_comma: bool = False) -> int:
    """Parse an amount string straight into milliunits."""
    return to_milliunits(parse_amount(amount_str, decimal_comma=decimal_comma))
