"""Budget totals calculator."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Iterable

from clinic_finance.calculators.money import ZERO, apply_percentage, to_decimal_or_zero
from clinic_finance.exceptions import InvalidAmountError
from clinic_finance.models.budget import BudgetItem, BudgetTotals


def line_amounts(item: BudgetItem) -> tuple[Decimal, Decimal, Decimal]:
    """Return ``(line_subtotal, line_discount, line_total)`` for one item.

    Blank or non-numeric fields count as zero, as in the budget form.
    """
    quantity = to_decimal_or_zero(item.quantity)
    unit_price = to_decimal_or_zero(item.unit_price)
    discount = to_decimal_or_zero(item.discount_percent)

    if quantity < 0 or unit_price < 0:
        raise InvalidAmountError(
            f"Budget item {item.description!r}: quantity and unit price cannot be negative"
        )

    line_subtotal = quantity * unit_price
    line_discount = apply_percentage(line_subtotal, discount)
    return line_subtotal, line_discount, line_subtotal - line_discount


def compute_totals(items: Iterable[BudgetItem], tax_rate_percent: Any) -> BudgetTotals:
    """Compute subtotal, discount, tax and total of a budget.

    ``subtotal`` sums the discounted line totals, while ``discount_total``
    is summed independently from the line discounts. Both are reported;
    the discount is not subtracted a second time.

    Parameters
    ----------
    items : Iterable[BudgetItem]
        Budget lines.
    tax_rate_percent : Any
        Tax rate as a percentage (e.g. 16 for IVA).

    Returns
    -------
    BudgetTotals
        Aggregated figures plus each line total.
    """
    subtotal = ZERO
    discount_total = ZERO
    line_totals = []

    for item in items:
        _, line_discount, line_total = line_amounts(item)
        subtotal += line_total
        discount_total += line_discount
        line_totals.append(line_total)

    tax_amount = apply_percentage(subtotal, to_decimal_or_zero(tax_rate_percent))

    return BudgetTotals(
        subtotal=subtotal,
        discount_total=discount_total,
        tax_amount=tax_amount,
        total=subtotal + tax_amount,
        line_totals=tuple(line_totals),
    )
