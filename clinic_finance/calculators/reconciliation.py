"""Cash-session counting and reconciliation.

A session is opened with a counted balance, accumulates income and
expense movements, and is closed once against a physical cash count:

    ABIERTA --close(actual_closing, notes)--> CERRADA

CERRADA is terminal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping

from clinic_finance.calculators.money import CENT, ZERO, to_decimal
from clinic_finance.exceptions import (
    InvalidAmountError,
    InvalidDenominationInputError,
    InvalidEntityStateError,
    ReferentialIntegrityError,
)
from clinic_finance.models.cash import CashMovement, CashSession, ReconciliationResult
from clinic_finance.models.enums import CashSessionStatus, MovementType, PaymentMethod

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Denomination:
    """A bill or coin accepted at the register."""

    key: str
    value: Decimal
    kind: str  # "bill" or "coin"


DENOMINATIONS: tuple[Denomination, ...] = (
    Denomination("bills_1000", Decimal("1000"), "bill"),
    Denomination("bills_500", Decimal("500"), "bill"),
    Denomination("bills_200", Decimal("200"), "bill"),
    Denomination("bills_100", Decimal("100"), "bill"),
    Denomination("bills_50", Decimal("50"), "bill"),
    Denomination("bills_20", Decimal("20"), "bill"),
    Denomination("coins_20", Decimal("20"), "coin"),
    Denomination("coins_10", Decimal("10"), "coin"),
    Denomination("coins_5", Decimal("5"), "coin"),
    Denomination("coins_2", Decimal("2"), "coin"),
    Denomination("coins_1", Decimal("1"), "coin"),
    Denomination("coins_050", Decimal("0.5"), "coin"),
)

DENOMINATION_VALUES: dict[str, Decimal] = {d.key: d.value for d in DENOMINATIONS}


def _parse_quantity(key: str, raw: Any, strict: bool) -> int:
    if raw is None or raw == "":
        return 0

    try:
        if isinstance(raw, bool):
            raise TypeError(raw)
        quantity = Decimal(str(raw).strip())
        if not quantity.is_finite():
            raise InvalidOperation(raw)
    except (InvalidOperation, TypeError) as exc:
        if strict:
            raise InvalidDenominationInputError(f"{key}: quantity {raw!r} is not numeric") from exc
        return 0

    if strict and quantity != quantity.to_integral_value():
        raise InvalidDenominationInputError(f"{key}: quantity {raw!r} is not a whole number")
    if quantity < 0:
        if strict:
            raise InvalidDenominationInputError(f"{key}: quantity {raw!r} is negative")
        return 0
    # Form inputs are read as integers, dropping any fraction
    return int(quantity)


def normalize_counts(counts: Mapping[str, Any], *, strict: bool = False) -> dict[str, int]:
    """Parse raw form counts into whole quantities for every denomination.

    Absent, blank and non-numeric quantities become 0; with ``strict``
    they raise ``InvalidDenominationInputError`` instead, as do negative
    quantities and unknown keys.
    """
    if strict:
        unknown = sorted(set(counts) - set(DENOMINATION_VALUES))
        if unknown:
            raise InvalidDenominationInputError(f"Unknown denominations: {', '.join(unknown)}")

    return {d.key: _parse_quantity(d.key, counts.get(d.key), strict) for d in DENOMINATIONS}


def count_denominations(counts: Mapping[str, Any], *, strict: bool = False) -> Decimal:
    """Total cash represented by a denomination count.

    Parameters
    ----------
    counts : Mapping[str, Any]
        Quantity per denomination key (e.g. ``{"bills_100": 5}``).
    strict : bool
        Reject bad input instead of counting it as zero.

    Returns
    -------
    Decimal
        Counted total.
    """
    quantities = normalize_counts(counts, strict=strict)
    return sum(
        (DENOMINATION_VALUES[key] * quantity for key, quantity in quantities.items()),
        ZERO,
    )


def expected_closing(opening_balance: Any, total_income: Any, total_expense: Any) -> Decimal:
    """Balance the register should hold at close."""
    return to_decimal(opening_balance) + to_decimal(total_income) - to_decimal(total_expense)


def reconcile(
    counted_total: Any,
    expected: Any,
    *,
    tolerance: Any = CENT,
) -> ReconciliationResult:
    """Compare counted cash with the expected balance.

    The difference keeps its sign: positive is a surplus, negative a
    shortage. ``requires_notes`` is set when it exceeds ``tolerance``.
    """
    counted = to_decimal(counted_total)
    expected_value = to_decimal(expected)
    difference = counted - expected_value
    return ReconciliationResult(
        counted_total=counted,
        expected_closing=expected_value,
        difference=difference,
        requires_notes=abs(difference) > to_decimal(tolerance),
    )


def _movement_type(movement: CashMovement) -> MovementType:
    try:
        return MovementType(movement.movement_type)
    except ValueError as exc:
        raise InvalidEntityStateError(
            f"Movement {movement.movement_id} has unknown type {movement.movement_type!r}"
        ) from exc


def _movement_method(movement: CashMovement) -> PaymentMethod:
    try:
        return PaymentMethod(movement.payment_method)
    except ValueError as exc:
        raise InvalidEntityStateError(
            f"Movement {movement.movement_id} has unknown payment method "
            f"{movement.payment_method!r}"
        ) from exc


def add_movement(session: CashSession, movement: CashMovement) -> CashSession:
    """Register an income or expense movement on an open session."""
    if movement.session_id != session.session_id:
        raise ReferentialIntegrityError(
            f"Movement {movement.movement_id} belongs to session {movement.session_id}, "
            f"not {session.session_id}"
        )
    if not session.is_open:
        raise InvalidEntityStateError(f"Cash session {session.session_id} is closed")

    movement_type = _movement_type(movement)
    method = _movement_method(movement)
    amount = to_decimal(movement.amount)
    if amount <= 0:
        raise InvalidAmountError(f"Movement amount must be positive, got {amount}")
    movement.movement_type = movement_type
    movement.payment_method = method
    movement.amount = amount

    if movement_type == MovementType.INCOME:
        session.total_income += amount
    else:
        session.total_expense += amount

    if movement.created_at is None:
        movement.created_at = datetime.now()
    session.movements.append(movement)
    return session


def close_session(
    session: CashSession,
    actual_closing: Any = None,
    notes: str | None = None,
    discrepancy_notes: str | None = None,
    denominations: Mapping[str, Any] | None = None,
    *,
    closed_at: datetime | None = None,
    tolerance: Any = CENT,
    strict: bool = False,
) -> ReconciliationResult:
    """Close ``session`` against a cash count.

    ``actual_closing`` defaults to the total of ``denominations`` when
    only the count is given.

    Raises
    ------
    InvalidEntityStateError
        If the session is already closed.
    InvalidAmountError
        If no closing amount can be determined, or it is negative.
    """
    if session.status == CashSessionStatus.CLOSED:
        raise InvalidEntityStateError(f"Cash session {session.session_id} is already closed")

    counted_from_denominations = None
    if denominations is not None:
        counted_from_denominations = count_denominations(denominations, strict=strict)

    if actual_closing is None:
        if counted_from_denominations is None:
            raise InvalidAmountError("Actual closing balance is required")
        actual = counted_from_denominations
    else:
        actual = to_decimal(actual_closing)
    if actual < 0:
        raise InvalidAmountError(f"Actual closing balance cannot be negative, got {actual}")

    result = reconcile(actual, session.expected_closing, tolerance=tolerance)

    if result.requires_notes and not discrepancy_notes:
        logger.warning(
            "Cash session %s closed with difference %s and no discrepancy notes",
            session.session_id,
            result.difference,
            extra={"session_id": session.session_id},
        )

    session.actual_closing = actual
    session.difference = result.difference
    session.denominations = normalize_counts(denominations, strict=strict) if denominations else None
    session.notes = notes
    session.discrepancy_notes = discrepancy_notes
    session.closed_at = closed_at or datetime.now()
    session.status = CashSessionStatus.CLOSED

    logger.info(
        "Closed cash session %s: expected=%s actual=%s difference=%s",
        session.session_id,
        result.expected_closing,
        actual,
        result.difference,
        extra={"session_id": session.session_id, "register_id": session.register_id},
    )
    return result


def summarize_movements(movements: Iterable[CashMovement]) -> dict[str, Any]:
    """Group movements by type/category and by payment method.

    Returns
    -------
    dict[str, Any]
        ``total_income``, ``total_expense``, ``by_category`` keyed
        ``"<TYPE>_<category>"`` and ``by_payment_method``.
    """
    total_income = ZERO
    total_expense = ZERO
    by_category: dict[str, dict[str, Any]] = {}
    by_method: dict[str, dict[str, Any]] = {}

    for movement in movements:
        movement_type = _movement_type(movement)
        amount = to_decimal(movement.amount)
        if movement_type == MovementType.INCOME:
            total_income += amount
        else:
            total_expense += amount

        key = f"{movement_type.value}_{movement.category}"
        bucket = by_category.setdefault(
            key,
            {"type": movement_type, "category": movement.category, "count": 0, "amount": ZERO},
        )
        bucket["count"] += 1
        bucket["amount"] += amount

        method = by_method.setdefault(_movement_method(movement), {"count": 0, "amount": ZERO})
        method["count"] += 1
        method["amount"] += amount

    return {
        "total_income": total_income,
        "total_expense": total_expense,
        "by_category": by_category,
        "by_payment_method": by_method,
    }
