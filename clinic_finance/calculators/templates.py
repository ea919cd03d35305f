"""Build plan terms from a financing template."""

from __future__ import annotations

from datetime import date
from typing import Any

from clinic_finance.calculators.money import apply_percentage, round_money, to_decimal
from clinic_finance.exceptions import InvalidAmountError, InvalidPlanParametersError
from clinic_finance.models.financing import FinancingTemplate, PlanTerms


def terms_from_template(
    template: FinancingTemplate,
    total_amount: Any,
    first_payment_date: date,
) -> PlanTerms:
    """Apply ``template`` defaults to a total amount.

    Raises
    ------
    InvalidPlanParametersError
        If the amount falls outside the template's bounds.
    """
    try:
        total = to_decimal(total_amount)
    except InvalidAmountError as exc:
        raise InvalidPlanParametersError(str(exc)) from exc

    if template.min_amount is not None and total < template.min_amount:
        raise InvalidPlanParametersError(
            f"Template {template.name!r} requires at least {template.min_amount}, got {total}"
        )
    if template.max_amount is not None and total > template.max_amount:
        raise InvalidPlanParametersError(
            f"Template {template.name!r} allows at most {template.max_amount}, got {total}"
        )

    return PlanTerms(
        total_amount=total,
        down_payment=round_money(apply_percentage(total, template.default_down_payment_percent)),
        number_of_payments=template.default_number_of_payments,
        payment_frequency=template.default_payment_frequency,
        interest_rate=to_decimal(template.default_interest_rate),
        first_payment_date=first_payment_date,
    )


def pick_template(templates: list[FinancingTemplate], total_amount: Any) -> FinancingTemplate | None:
    """Choose the template to offer for ``total_amount``.

    Templates whose bounds accept the amount are eligible; the default
    template wins, then the first by name.
    """
    total = to_decimal(total_amount)
    eligible = [
        t
        for t in templates
        if (t.min_amount is None or total >= t.min_amount)
        and (t.max_amount is None or total <= t.max_amount)
    ]
    if not eligible:
        return None
    return sorted(eligible, key=lambda t: (not t.is_default, t.name))[0]
