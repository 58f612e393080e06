"""
Amount Handling Module

The ledger keeps every amount as an integer number of minor units (cents for
a two-decimal currency). This module validates such amounts and converts
between them and the decimal text people type and read. NEVER uses float for
monetary values.
"""

from decimal import Decimal, DecimalException, Inexact, InvalidOperation, localcontext
import re

from .errors import InvalidAmount


DEFAULT_PRECISION = 2
DEFAULT_SYMBOL = "$"

# Largest accepted amount has this many digits in minor units
MAX_AMOUNT_DIGITS = 28

# Currency symbols and whitespace accepted in typed input
_IGNORED_CHARACTERS = re.compile(r"[\s$€£]")

# Digits with comma thousands separators, e.g. "-1,234,567.89"
_GROUPED_NUMBER = re.compile(r"[+-]?\d{1,3}(,\d{3})+(\.\d*)?")


def validate_amount(amount) -> int:
    """
    Check that amount is a positive integer number of minor units

    Args:
        amount: Candidate amount

    Returns:
        The amount, unchanged

    Raises:
        InvalidAmount: If amount is not an int, or is zero or negative
    """
    # bool is an int subclass but never a meaningful amount
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmount(amount, f"Amount must be an integer number of minor units, got {amount!r}")
    if amount <= 0:
        raise InvalidAmount(amount, f"Amount must be positive, got {amount}")
    return amount


def decimal_from_string(value: str) -> Decimal:
    """
    Convert typed text such as "1,234.50" or "$12" to a finite Decimal

    Commas are accepted only as thousands separators in groups of three.

    Raises:
        InvalidAmount: If the text is empty, not a number, or not finite
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidAmount(value, "Amount must be a non-empty string")

    clean_value = _IGNORED_CHARACTERS.sub("", value)
    if "," in clean_value:
        if not _GROUPED_NUMBER.fullmatch(clean_value):
            raise InvalidAmount(value, f"Misplaced thousands separator in '{value}'")
        clean_value = clean_value.replace(",", "")

    try:
        result = Decimal(clean_value)
    except InvalidOperation:
        raise InvalidAmount(value, f"Cannot convert '{value}' to an amount")

    if not result.is_finite():
        raise InvalidAmount(value, f"Amount must be finite, got '{value}'")
    return result


def to_minor_units(value, precision: int = DEFAULT_PRECISION) -> int:
    """
    Convert a major-unit amount ("12.50", Decimal('12.5'), 12) to minor units

    Values carrying more decimal places than the currency precision are
    rejected rather than rounded, and so are values with more than
    MAX_AMOUNT_DIGITS digits in minor units.

    Args:
        value: Amount in major units as str, Decimal or int
        precision: Number of minor-unit decimal places of the currency

    Returns:
        Positive integer amount in minor units

    Raises:
        InvalidAmount: If value is unparsable, non-finite, too precise, too large or not positive
    """
    if isinstance(value, bool):
        raise InvalidAmount(value)
    if isinstance(value, str):
        major = decimal_from_string(value)
    else:
        try:
            major = value if isinstance(value, Decimal) else Decimal(str(value))
        except InvalidOperation:
            raise InvalidAmount(value)
        if not major.is_finite():
            raise InvalidAmount(value, f"Amount must be finite, got {value!r}")

    # Scaling must be exact: rounding, overflow and underflow all reject the value
    with localcontext() as ctx:
        ctx.traps[Inexact] = True
        try:
            minor = major.scaleb(precision)
        except DecimalException:
            raise InvalidAmount(value, f"Amount {value!r} is out of range")

    if not minor.is_zero() and minor.adjusted() >= MAX_AMOUNT_DIGITS:
        raise InvalidAmount(value, f"Amount {value!r} is too large")
    if minor != minor.to_integral_value():
        raise InvalidAmount(value, f"Amount {value!r} has more than {precision} decimal places")

    return validate_amount(int(minor))


def format_minor_units(amount: int, precision: int = DEFAULT_PRECISION,
                       symbol: str = DEFAULT_SYMBOL) -> str:
    """Format minor units for display, e.g. 123450 -> "$1,234.50" """
    major = Decimal(amount).scaleb(-precision)
    sign = "-" if major < 0 else ""
    return f"{sign}{symbol}{abs(major):,.{precision}f}"
