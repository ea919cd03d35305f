"""Payment ledger for financing plan installments.

Status rules
------------
- paid >= scheduled            -> Pagado
- 0 < paid < scheduled         -> Parcial
- paid == 0 and due < today    -> Vencido (derived at read time only)
- otherwise                    -> Pendiente
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from clinic_finance.calculators.money import HUNDRED, ZERO, to_decimal
from clinic_finance.exceptions import (
    EntityNotFoundError,
    InvalidAmountError,
    InvalidEntityStateError,
    InvalidPaymentError,
    OverpaymentRejectedError,
)
from clinic_finance.models.enums import (
    ApprovalStatus,
    InstallmentStatus,
    PaymentMethod,
    PlanStatus,
)
from clinic_finance.models.financing import (
    FinancingPlan,
    PaymentInstallment,
    PaymentRecord,
    PlanStats,
)

logger = logging.getLogger(__name__)

CLOSED_PLAN_STATUSES = (PlanStatus.CANCELLED, PlanStatus.COMPLETED)


def _stored_status(paid_amount: Decimal, scheduled_amount: Decimal) -> InstallmentStatus:
    if paid_amount >= scheduled_amount:
        return InstallmentStatus.PAID
    if paid_amount > 0:
        return InstallmentStatus.PARTIAL
    return InstallmentStatus.PENDING


def derive_status(
    due_date: date,
    paid_amount: Any,
    scheduled_amount: Any,
    today: date,
) -> InstallmentStatus:
    """Status of an installment as shown to users on ``today``."""
    status = _stored_status(to_decimal(paid_amount), to_decimal(scheduled_amount))
    if status == InstallmentStatus.PENDING and due_date < today:
        return InstallmentStatus.OVERDUE
    return status


def installment_view(installment: PaymentInstallment, today: date | None = None) -> InstallmentStatus:
    """Derived status of a stored installment."""
    return derive_status(
        installment.due_date,
        installment.paid_amount,
        installment.scheduled_amount,
        today or date.today(),
    )


def pending_installments(plan: FinancingPlan) -> list[PaymentInstallment]:
    """Installments that can still receive payments, in schedule order."""
    return sorted(
        (i for i in plan.installments if i.status != InstallmentStatus.PAID),
        key=lambda i: i.payment_number,
    )


def record_payment(
    plan: FinancingPlan,
    installment_id: str,
    amount: Any,
    method: PaymentMethod | str,
    reference: str | None = None,
    notes: str | None = None,
    *,
    paid_at: datetime | None = None,
) -> PaymentInstallment:
    """Apply a payment to one installment of ``plan``.

    Parameters
    ----------
    plan : FinancingPlan
        Plan owning the installment; mutated in place.
    installment_id : str
        Installment receiving the payment.
    amount : Any
        Positive amount, at most the installment's remaining balance.
    method : PaymentMethod | str
        Payment method.
    reference : str | None
        Voucher, transfer or card reference.
    notes : str | None
        Free-form notes.
    paid_at : datetime | None
        Payment timestamp (defaults to now).

    Returns
    -------
    PaymentInstallment
        The updated installment.

    Raises
    ------
    InvalidPaymentError
        If the amount is not positive or the method is unknown.
    OverpaymentRejectedError
        If the amount exceeds the remaining balance. Nothing is changed.
    EntityNotFoundError
        If the installment does not belong to the plan.
    InvalidEntityStateError
        If the plan is rejected, cancelled or completed.
    """
    if plan.status in CLOSED_PLAN_STATUSES or plan.approval_status == ApprovalStatus.REJECTED:
        raise InvalidEntityStateError(
            f"Plan {plan.plan_id} does not accept payments "
            f"(status={plan.status.value}, approval={plan.approval_status.value})"
        )

    try:
        value = to_decimal(amount)
    except InvalidAmountError as exc:
        raise InvalidPaymentError(str(exc)) from exc
    if value <= 0:
        raise InvalidPaymentError(f"Payment amount must be positive, got {value}")

    try:
        payment_method = PaymentMethod(method)
    except ValueError as exc:
        raise InvalidPaymentError(f"Unknown payment method: {method!r}") from exc

    installment = plan.get_installment(installment_id)
    if installment is None:
        raise EntityNotFoundError(
            f"Installment {installment_id} not found in plan {plan.plan_id}"
        )

    remaining = installment.remaining_amount
    if value > remaining:
        raise OverpaymentRejectedError(
            f"Payment {value} exceeds remaining {remaining} "
            f"on installment #{installment.payment_number}"
        )

    when = paid_at or datetime.now()
    installment.paid_amount += value
    installment.status = _stored_status(installment.paid_amount, installment.scheduled_amount)
    installment.payment_date = when
    installment.payment_method = payment_method
    installment.reference = reference
    installment.notes = notes

    plan.payments.append(
        PaymentRecord(
            installment_id=installment_id,
            amount=value,
            method=payment_method,
            recorded_at=when,
            reference=reference,
            notes=notes,
        )
    )
    plan.updated_at = when

    logger.debug(
        "Recorded %s on plan %s installment #%d -> %s",
        value,
        plan.plan_id,
        installment.payment_number,
        installment.status.value,
        extra={"plan_id": plan.plan_id, "installment_id": installment_id},
    )

    if plan.installments and all(i.status == InstallmentStatus.PAID for i in plan.installments):
        plan.status = PlanStatus.COMPLETED
        logger.info("Plan %s completed", plan.plan_id, extra={"plan_id": plan.plan_id})

    return installment


def compute_plan_stats(plan: FinancingPlan, today: date | None = None) -> PlanStats:
    """Aggregate paid, remaining and overdue figures for ``plan``."""
    today = today or date.today()
    installments = plan.installments

    total = len(installments)
    paid = sum(1 for i in installments if i.status == InstallmentStatus.PAID)
    overdue = sum(
        1 for i in installments if i.status == InstallmentStatus.PENDING and i.due_date < today
    )
    total_paid = sum((i.paid_amount for i in installments), ZERO)
    remaining = sum((i.remaining_amount for i in installments), ZERO)

    if total:
        progress = int((HUNDRED * paid / total).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    else:
        progress = 0

    return PlanStats(
        total_installments=total,
        paid_installments=paid,
        pending_installments=total - paid,
        overdue_installments=overdue,
        total_paid=total_paid,
        remaining_amount=remaining,
        progress=progress,
    )
