"""Amortization calculator for financing plans.

Produces the fixed periodic payment, total interest and the dated
installment schedule for a plan. Pure: no I/O, no hidden state.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Any

from dateutil.relativedelta import relativedelta

from clinic_finance.calculators.money import CENT, HUNDRED, ZERO, round_money, to_decimal
from clinic_finance.exceptions import InvalidAmountError, InvalidPlanParametersError
from clinic_finance.models.enums import PaymentFrequency, RateConvention
from clinic_finance.models.financing import AmortizationSchedule, PlanTerms, ScheduleEntry

logger = logging.getLogger(__name__)

# Day offsets for the fixed-length frequencies; monthly uses calendar months
PERIOD_DAYS = {
    PaymentFrequency.WEEKLY: 7,
    PaymentFrequency.BIWEEKLY: 15,
}

PERIODS_PER_YEAR = {
    PaymentFrequency.WEEKLY: 52,
    PaymentFrequency.BIWEEKLY: 24,
    PaymentFrequency.MONTHLY: 12,
}


def coerce_frequency(frequency: PaymentFrequency | str) -> PaymentFrequency:
    """Accept a ``PaymentFrequency`` or its API string (e.g. ``"Mensual"``)."""
    try:
        return PaymentFrequency(frequency)
    except ValueError as exc:
        raise InvalidPlanParametersError(f"Unknown payment frequency: {frequency!r}") from exc


def period_offset(frequency: PaymentFrequency | str, periods: int) -> timedelta | relativedelta:
    """Offset of ``periods`` payment periods from the first due date."""
    frequency = coerce_frequency(frequency)
    if frequency == PaymentFrequency.MONTHLY:
        return relativedelta(months=periods)
    return timedelta(days=PERIOD_DAYS[frequency] * periods)


def advance_date(start: date, frequency: PaymentFrequency | str, periods: int) -> date:
    """Move ``start`` forward by ``periods`` payment periods.

    Monthly steps are calendar months counted from ``start``, so a plan
    starting on the 31st falls on the last day of shorter months and
    returns to the 31st afterwards.
    """
    return start + period_offset(frequency, periods)


def periodic_rate(
    annual_interest_rate: Decimal,
    frequency: PaymentFrequency,
    rate_convention: RateConvention = RateConvention.MONTHLY,
) -> Decimal:
    """Convert an annual percentage into the rate applied each period.

    The clinic has always divided by 12 regardless of frequency
    (``RateConvention.MONTHLY``). ``PER_PERIOD`` divides by the number
    of periods per year instead.
    """
    try:
        convention = RateConvention(rate_convention)
    except ValueError as exc:
        raise InvalidPlanParametersError(f"Unknown rate convention: {rate_convention!r}") from exc

    annual = annual_interest_rate / HUNDRED
    if convention == RateConvention.PER_PERIOD:
        return annual / PERIODS_PER_YEAR[frequency]
    return annual / 12


def _validate(
    total_amount: Any,
    down_payment: Any,
    number_of_payments: Any,
    annual_interest_rate: Any,
) -> tuple[Decimal, Decimal, int, Decimal]:
    try:
        total = to_decimal(total_amount)
        down = to_decimal(down_payment if down_payment is not None else ZERO)
        rate = to_decimal(annual_interest_rate if annual_interest_rate is not None else ZERO)
    except InvalidAmountError as exc:
        raise InvalidPlanParametersError(str(exc)) from exc

    if isinstance(number_of_payments, bool) or not isinstance(number_of_payments, int):
        raise InvalidPlanParametersError(
            f"Number of payments must be an integer, got {number_of_payments!r}"
        )
    if total <= 0:
        raise InvalidPlanParametersError(f"Total amount must be positive, got {total}")
    if number_of_payments < 1:
        raise InvalidPlanParametersError(
            f"Number of payments must be at least 1, got {number_of_payments}"
        )
    if down < 0:
        raise InvalidPlanParametersError(f"Down payment cannot be negative, got {down}")
    if down >= total:
        raise InvalidPlanParametersError(
            f"Down payment {down} must be less than total amount {total}"
        )
    if rate < 0:
        raise InvalidPlanParametersError(f"Interest rate cannot be negative, got {rate}")

    return total, down, number_of_payments, rate


def validate_terms(terms: PlanTerms) -> None:
    """Raise ``InvalidPlanParametersError`` if ``terms`` cannot be scheduled."""
    _validate(terms.total_amount, terms.down_payment, terms.number_of_payments, terms.interest_rate)
    coerce_frequency(terms.payment_frequency)


def compute_schedule(
    total_amount: Any,
    down_payment: Any,
    number_of_payments: int,
    annual_interest_rate: Any,
    frequency: PaymentFrequency | str,
    first_payment_date: date,
    *,
    rate_convention: RateConvention = RateConvention.MONTHLY,
    adjust_final_installment: bool = False,
) -> AmortizationSchedule:
    """Compute the payment schedule of a financing plan.

    Parameters
    ----------
    total_amount : Any
        Total price being financed, down payment included.
    down_payment : Any
        Amount paid up front; must be below ``total_amount``.
    number_of_payments : int
        Number of installments (>= 1).
    annual_interest_rate : Any
        Annual interest as a percentage (0 for interest-free plans).
    frequency : PaymentFrequency | str
        Installment frequency.
    first_payment_date : date
        Due date of the first installment.
    rate_convention : RateConvention
        How the annual rate becomes a periodic rate.
    adjust_final_installment : bool
        Round installments to cents and absorb the residual in the last one.
        By default every installment carries the unrounded payment.

    Returns
    -------
    AmortizationSchedule
        Financed amount, payment, total interest, final date and entries.

    Raises
    ------
    InvalidPlanParametersError
        If amounts, term or rate are out of range.
    """
    total, down, n, rate = _validate(
        total_amount, down_payment, number_of_payments, annual_interest_rate
    )
    frequency = coerce_frequency(frequency)
    financed = total - down

    if rate == 0:
        payment = financed / n
        total_interest = ZERO
    else:
        r = periodic_rate(rate, frequency, rate_convention)
        factor = (1 + r) ** n
        payment = financed * r * factor / (factor - 1)
        total_interest = payment * n - financed

    amounts = [payment] * n
    if adjust_final_installment:
        payment = round_money(payment, CENT)
        amounts = [payment] * (n - 1)
        amounts.append(round_money(financed + total_interest, CENT) - payment * (n - 1))
        total_interest = sum(amounts, ZERO) - financed

    installments = tuple(
        ScheduleEntry(
            payment_number=i + 1,
            due_date=advance_date(first_payment_date, frequency, i),
            scheduled_amount=amount,
        )
        for i, amount in enumerate(amounts)
    )

    logger.debug(
        "Computed schedule: financed=%s n=%d rate=%s%% payment=%s interest=%s",
        financed,
        n,
        rate,
        payment,
        total_interest,
    )

    return AmortizationSchedule(
        financed_amount=financed,
        payment_amount=payment,
        total_interest=total_interest,
        final_date=installments[-1].due_date,
        installments=installments,
    )


def compute_schedule_from_terms(
    terms: PlanTerms,
    *,
    rate_convention: RateConvention = RateConvention.MONTHLY,
    adjust_final_installment: bool = False,
) -> AmortizationSchedule:
    """Compute the schedule for a ``PlanTerms`` value object."""
    return compute_schedule(
        terms.total_amount,
        terms.down_payment,
        terms.number_of_payments,
        terms.interest_rate,
        terms.payment_frequency,
        terms.first_payment_date,
        rate_convention=rate_convention,
        adjust_final_installment=adjust_final_installment,
    )
