"""Money rounding and percentage helpers.

All engine arithmetic runs on ``Decimal``. Floats are converted through
``str`` so ``0.1`` becomes ``Decimal("0.1")`` rather than its binary
expansion.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from clinic_finance.exceptions import InvalidAmountError

CENT = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value: Any) -> Decimal:
    """Coerce a numeric value to ``Decimal``.

    Parameters
    ----------
    value : Any
        ``Decimal``, ``int``, ``float`` or numeric ``str``.

    Returns
    -------
    Decimal
        The value as a finite decimal.

    Raises
    ------
    InvalidAmountError
        If the value is not numeric, is a bool, or is NaN/infinite.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidAmountError(f"Not a numeric amount: {value!r}")

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, (float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise InvalidAmountError(f"Not a numeric amount: {value!r}") from exc
    else:
        raise InvalidAmountError(f"Not a numeric amount: {value!r}")

    if not result.is_finite():
        raise InvalidAmountError(f"Amount must be finite: {value!r}")
    return result


def to_decimal_or_zero(value: Any) -> Decimal:
    """Coerce to ``Decimal``, treating blanks and garbage as zero.

    Mirrors how the clinic forms read optional numeric inputs.
    """
    if value is None or value == "":
        return ZERO
    try:
        return to_decimal(value)
    except InvalidAmountError:
        return ZERO


def round_money(value: Any, quantum: Decimal = CENT) -> Decimal:
    """Round an amount half-up to ``quantum`` (cents by default)."""
    return to_decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)


def apply_percentage(amount: Any, percent: Any) -> Decimal:
    """Return ``percent`` percent of ``amount`` (unrounded)."""
    return to_decimal(amount) * to_decimal(percent) / HUNDRED


def is_close(a: Any, b: Any, tolerance: Any = CENT) -> bool:
    """Whether two amounts differ by no more than ``tolerance``."""
    return abs(to_decimal(a) - to_decimal(b)) <= to_decimal(tolerance)
