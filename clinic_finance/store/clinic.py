"""Clinic finance data store with referential integrity."""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping

from clinic_finance.calculators import ledger, reconciliation
from clinic_finance.calculators.amortization import coerce_frequency, compute_schedule_from_terms
from clinic_finance.calculators.budget import compute_totals
from clinic_finance.calculators.money import ZERO, round_money, to_decimal
from clinic_finance.calculators.templates import terms_from_template
from clinic_finance.config import MoneyConfig, ReconciliationConfig, ScheduleConfig
from clinic_finance.exceptions import (
    EntityNotFoundError,
    InvalidAmountError,
    InvalidEntityStateError,
    InvalidPlanParametersError,
    ReferentialIntegrityError,
)
from clinic_finance.models import (
    ApprovalStatus,
    Budget,
    BudgetStatus,
    BudgetTotals,
    CashMovement,
    CashSession,
    FinancingPlan,
    FinancingTemplate,
    PaymentFrequency,
    PaymentInstallment,
    PaymentMethod,
    PlanStats,
    PlanStatus,
    PlanTerms,
    ReconciliationResult,
)

logger = logging.getLogger(__name__)

BUDGET_TRANSITIONS: dict[BudgetStatus, tuple[BudgetStatus, ...]] = {
    BudgetStatus.DRAFT: (BudgetStatus.SENT, BudgetStatus.APPROVED, BudgetStatus.REJECTED),
    BudgetStatus.SENT: (
        BudgetStatus.DRAFT,
        BudgetStatus.APPROVED,
        BudgetStatus.REJECTED,
        BudgetStatus.EXPIRED,
    ),
    BudgetStatus.APPROVED: (),
    BudgetStatus.REJECTED: (),
    BudgetStatus.EXPIRED: (),
}


@dataclass
class ClinicDataStore:
    """In-memory store for plans, budgets and cash sessions."""

    money_config: MoneyConfig = field(default_factory=MoneyConfig)
    schedule_config: ScheduleConfig = field(default_factory=ScheduleConfig)
    reconciliation_config: ReconciliationConfig = field(default_factory=ReconciliationConfig)

    # Primary entities
    plans: dict[str, FinancingPlan] = field(default_factory=dict)
    budgets: dict[str, Budget] = field(default_factory=dict)
    cash_sessions: dict[str, CashSession] = field(default_factory=dict)
    templates: dict[str, FinancingTemplate] = field(default_factory=dict)

    # Relationship indexes
    _patient_plans: dict[str, list[str]] = field(default_factory=dict)
    _patient_budgets: dict[str, list[str]] = field(default_factory=dict)
    _register_sessions: dict[str, list[str]] = field(default_factory=dict)

    # Financing plans
    def create_plan(
        self,
        plan_id: str,
        patient_id: str,
        title: str,
        terms: PlanTerms,
        *,
        budget_id: str | None = None,
        requires_approval: bool = True,
        notes: str | None = None,
        today: date | None = None,
        created_at: datetime | None = None,
    ) -> FinancingPlan:
        """Create a financing plan and its installment schedule.

        Parameters
        ----------
        plan_id : str
            New plan id.
        patient_id : str
            Patient being financed.
        title : str
            Plan title.
        terms : PlanTerms
            Financing parameters.
        budget_id : str | None
            Budget the plan finances, if any.
        requires_approval : bool
            When False the plan is approved and active immediately.
        notes : str | None
            Free-form notes.
        today : date | None
            Reference date for the first-payment check (defaults to today).
        created_at : datetime | None
            Creation timestamp (defaults to now).

        Returns
        -------
        FinancingPlan
            The stored plan.
        """
        if plan_id in self.plans:
            raise InvalidEntityStateError(f"Plan {plan_id} already exists")
        if budget_id is not None and budget_id not in self.budgets:
            raise ReferentialIntegrityError(f"Budget {budget_id} not found")

        today = today or date.today()
        if terms.first_payment_date < today:
            raise InvalidPlanParametersError(
                f"First payment date {terms.first_payment_date} is in the past"
            )

        schedule = compute_schedule_from_terms(
            terms,
            rate_convention=self.schedule_config.rate_convention,
            adjust_final_installment=self.schedule_config.adjust_final_installment,
        )

        plan = FinancingPlan(
            plan_id=plan_id,
            patient_id=patient_id,
            title=title,
            terms=terms,
            payment_amount=schedule.payment_amount,
            total_interest=schedule.total_interest,
            final_payment_date=schedule.final_date,
            budget_id=budget_id,
            notes=notes,
            created_at=created_at or datetime.now(),
            installments=[
                PaymentInstallment(
                    installment_id=f"{plan_id}-{entry.payment_number:03d}",
                    plan_id=plan_id,
                    payment_number=entry.payment_number,
                    due_date=entry.due_date,
                    scheduled_amount=entry.scheduled_amount,
                )
                for entry in schedule.installments
            ],
        )
        if not requires_approval:
            plan.approval_status = ApprovalStatus.APPROVED
            plan.status = PlanStatus.ACTIVE

        self.plans[plan_id] = plan
        self._patient_plans.setdefault(patient_id, []).append(plan_id)

        logger.info(
            "Created plan %s for patient %s: %d x %s (%s)",
            plan_id,
            patient_id,
            terms.number_of_payments,
            round_money(schedule.payment_amount, self.money_config.quantum),
            plan.status.value,
            extra={"plan_id": plan_id, "budget_id": budget_id},
        )
        return plan

    def approve_plan(self, plan_id: str) -> FinancingPlan:
        """Approve a pending plan and activate it."""
        plan = self.get_plan(plan_id)
        if plan.approval_status != ApprovalStatus.PENDING:
            raise InvalidEntityStateError(
                f"Plan {plan_id} is {plan.approval_status.value}, cannot approve"
            )
        plan.approval_status = ApprovalStatus.APPROVED
        plan.status = PlanStatus.ACTIVE
        plan.updated_at = datetime.now()
        logger.info("Approved plan %s", plan_id, extra={"plan_id": plan_id})
        return plan

    def reject_plan(self, plan_id: str) -> FinancingPlan:
        """Reject a pending plan; a rejected plan is cancelled."""
        plan = self.get_plan(plan_id)
        if plan.approval_status != ApprovalStatus.PENDING:
            raise InvalidEntityStateError(
                f"Plan {plan_id} is {plan.approval_status.value}, cannot reject"
            )
        plan.approval_status = ApprovalStatus.REJECTED
        plan.status = PlanStatus.CANCELLED
        plan.updated_at = datetime.now()
        logger.info("Rejected plan %s", plan_id, extra={"plan_id": plan_id})
        return plan

    def cancel_plan(self, plan_id: str) -> FinancingPlan:
        """Cancel a plan that is not already completed or cancelled."""
        plan = self.get_plan(plan_id)
        if plan.status in (PlanStatus.COMPLETED, PlanStatus.CANCELLED):
            raise InvalidEntityStateError(f"Plan {plan_id} is {plan.status.value}, cannot cancel")
        plan.status = PlanStatus.CANCELLED
        plan.updated_at = datetime.now()
        logger.info("Cancelled plan %s", plan_id, extra={"plan_id": plan_id})
        return plan

    def delete_plan(self, plan_id: str) -> None:
        """Remove a plan that never received a payment."""
        plan = self.get_plan(plan_id)
        if any(i.paid_amount > 0 for i in plan.installments):
            raise InvalidEntityStateError(f"Plan {plan_id} has payments and cannot be deleted")
        del self.plans[plan_id]
        self._patient_plans[plan.patient_id].remove(plan_id)

    def record_payment(
        self,
        plan_id: str,
        installment_id: str,
        amount: Any,
        method: PaymentMethod | str,
        reference: str | None = None,
        notes: str | None = None,
        *,
        paid_at: datetime | None = None,
    ) -> PaymentInstallment:
        """Apply a payment to an installment of a stored plan."""
        plan = self.get_plan(plan_id)
        return ledger.record_payment(
            plan, installment_id, amount, method, reference, notes, paid_at=paid_at
        )

    def get_plan(self, plan_id: str) -> FinancingPlan:
        """Get a plan by id."""
        try:
            return self.plans[plan_id]
        except KeyError:
            raise EntityNotFoundError(f"Plan {plan_id} not found") from None

    def get_patient_plans(self, patient_id: str) -> list[FinancingPlan]:
        """Get all plans for a patient."""
        plan_ids = self._patient_plans.get(patient_id, [])
        return [self.plans[pid] for pid in plan_ids]

    def plan_stats(self, plan_id: str, today: date | None = None) -> PlanStats:
        """Aggregate statistics for a plan."""
        return ledger.compute_plan_stats(self.get_plan(plan_id), today)

    # Templates
    def add_template(self, template: FinancingTemplate) -> None:
        """Add a financing template to the store."""
        self.templates[template.name] = template

    # Budgets
    def add_budget(self, budget: Budget) -> None:
        """Add a budget to the store."""
        if budget.budget_id in self.budgets:
            raise InvalidEntityStateError(f"Budget {budget.budget_id} already exists")
        if budget.created_at is None:
            budget.created_at = datetime.now()
        self.budgets[budget.budget_id] = budget
        self._patient_budgets.setdefault(budget.patient_id, []).append(budget.budget_id)

    def get_budget(self, budget_id: str) -> Budget:
        """Get a budget by id."""
        try:
            return self.budgets[budget_id]
        except KeyError:
            raise EntityNotFoundError(f"Budget {budget_id} not found") from None

    def get_patient_budgets(self, patient_id: str) -> list[Budget]:
        """Get all budgets for a patient."""
        budget_ids = self._patient_budgets.get(patient_id, [])
        return [self.budgets[bid] for bid in budget_ids]

    def set_budget_status(self, budget_id: str, status: BudgetStatus | str) -> Budget:
        """Move a budget to a new status."""
        budget = self.get_budget(budget_id)
        try:
            new_status = BudgetStatus(status)
        except ValueError as exc:
            raise InvalidEntityStateError(f"Unknown budget status: {status!r}") from exc
        if new_status not in BUDGET_TRANSITIONS[budget.status]:
            raise InvalidEntityStateError(
                f"Budget {budget_id} cannot go from {budget.status.value} to {new_status.value}"
            )
        budget.status = new_status
        budget.updated_at = datetime.now()
        logger.info(
            "Budget %s is now %s", budget_id, new_status.value, extra={"budget_id": budget_id}
        )
        return budget

    def budget_totals(self, budget_id: str) -> BudgetTotals:
        """Compute the totals of a stored budget."""
        budget = self.get_budget(budget_id)
        return compute_totals(budget.items, budget.tax_rate)

    def plan_from_budget(
        self,
        budget_id: str,
        plan_id: str,
        first_payment_date: date,
        *,
        number_of_payments: int | None = None,
        payment_frequency: PaymentFrequency | str = PaymentFrequency.MONTHLY,
        down_payment: Any = ZERO,
        interest_rate: Any = ZERO,
        template: FinancingTemplate | None = None,
        today: date | None = None,
    ) -> FinancingPlan:
        """Finance an approved budget.

        The budget total, rounded to the money quantum, becomes the plan's
        total. A template supplies the term, frequency, rate and down payment
        when given; otherwise ``number_of_payments`` is required.
        """
        budget = self.get_budget(budget_id)
        if budget.status != BudgetStatus.APPROVED:
            raise InvalidEntityStateError(
                f"Budget {budget_id} is {budget.status.value}; only approved budgets can be financed"
            )

        total = round_money(self.budget_totals(budget_id).total, self.money_config.quantum)
        if template is not None:
            terms = terms_from_template(template, total, first_payment_date)
            requires_approval = template.requires_approval
        else:
            if number_of_payments is None:
                raise InvalidPlanParametersError("Number of payments is required without a template")
            terms = PlanTerms(
                total_amount=total,
                down_payment=to_decimal(down_payment),
                number_of_payments=number_of_payments,
                payment_frequency=coerce_frequency(payment_frequency),
                interest_rate=to_decimal(interest_rate),
                first_payment_date=first_payment_date,
            )
            requires_approval = True

        return self.create_plan(
            plan_id,
            budget.patient_id,
            budget.title,
            terms,
            budget_id=budget_id,
            requires_approval=requires_approval,
            today=today,
        )

    # Cash sessions
    def open_session(
        self,
        session_id: str,
        register_id: str,
        opening_balance: Any,
        *,
        opened_at: datetime | None = None,
    ) -> CashSession:
        """Open a cash session; a register holds at most one open session."""
        if session_id in self.cash_sessions:
            raise InvalidEntityStateError(f"Cash session {session_id} already exists")

        opening = to_decimal(opening_balance)
        if opening < 0:
            raise InvalidAmountError(f"Opening balance cannot be negative, got {opening}")

        for other in self.get_register_sessions(register_id):
            if other.is_open:
                raise InvalidEntityStateError(
                    f"Register {register_id} already has open session {other.session_id}"
                )

        session = CashSession(
            session_id=session_id,
            register_id=register_id,
            opening_balance=opening,
            opened_at=opened_at or datetime.now(),
        )
        self.cash_sessions[session_id] = session
        self._register_sessions.setdefault(register_id, []).append(session_id)
        logger.info(
            "Opened cash session %s on register %s with %s",
            session_id,
            register_id,
            opening,
            extra={"session_id": session_id, "register_id": register_id},
        )
        return session

    def add_movement(self, movement: CashMovement) -> CashSession:
        """Register a movement on its (open) session."""
        if movement.session_id not in self.cash_sessions:
            raise ReferentialIntegrityError(f"Cash session {movement.session_id} not found")
        return reconciliation.add_movement(self.cash_sessions[movement.session_id], movement)

    def close_session(
        self,
        session_id: str,
        actual_closing: Any = None,
        notes: str | None = None,
        discrepancy_notes: str | None = None,
        denominations: Mapping[str, Any] | None = None,
        *,
        closed_at: datetime | None = None,
        tolerance: Decimal | None = None,
        strict: bool | None = None,
    ) -> ReconciliationResult:
        """Close a cash session against a cash count.

        ``tolerance`` and ``strict`` default to the store's reconciliation
        config.
        """
        config = self.reconciliation_config
        return reconciliation.close_session(
            self.get_session(session_id),
            actual_closing,
            notes,
            discrepancy_notes,
            denominations,
            closed_at=closed_at,
            tolerance=config.tolerance if tolerance is None else tolerance,
            strict=config.strict_denominations if strict is None else strict,
        )

    def get_session(self, session_id: str) -> CashSession:
        """Get a cash session by id."""
        try:
            return self.cash_sessions[session_id]
        except KeyError:
            raise EntityNotFoundError(f"Cash session {session_id} not found") from None

    def get_register_sessions(self, register_id: str) -> list[CashSession]:
        """Get all sessions for a register."""
        session_ids = self._register_sessions.get(register_id, [])
        return [self.cash_sessions[sid] for sid in session_ids]

    def summary(self) -> dict[str, int]:
        """Return summary counts of all entities."""
        return {
            "plans": len(self.plans),
            "installments": sum(len(p.installments) for p in self.plans.values()),
            "payments": sum(len(p.payments) for p in self.plans.values()),
            "budgets": len(self.budgets),
            "cash_sessions": len(self.cash_sessions),
            "cash_movements": sum(len(s.movements) for s in self.cash_sessions.values()),
            "templates": len(self.templates),
        }
