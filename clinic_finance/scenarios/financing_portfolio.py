"""Financing portfolio scenario: generated plans with payment history."""

from __future__ import annotations

import logging
import random
from datetime import date, datetime, time, timedelta
from typing import Any

from clinic_finance.calculators.ledger import compute_plan_stats
from clinic_finance.calculators.money import ZERO, round_money
from clinic_finance.config import FinanceConfig
from clinic_finance.generators.financing import FinancingPlanGenerator
from clinic_finance.models.enums import PaymentMethod, PlanStatus
from clinic_finance.store.clinic import ClinicDataStore

logger = logging.getLogger(__name__)


class FinancingPortfolioScenario:
    """Generate a portfolio of financing plans with payment behavior.

    This scenario creates:
    - Plans opened over the last year, most of them approved
    - Installments paid on time, partially paid, or left unpaid
      (and therefore overdue) up to the reference date
    """

    METHODS = list(PaymentMethod)
    METHOD_WEIGHTS = [0.45, 0.25, 0.20, 0.10]

    def __init__(
        self,
        num_plans: int = 50,
        approval_rate: float = 0.90,
        on_time_rate: float = 0.80,
        partial_rate: float = 0.10,
        seed: int | None = None,
        today: date | None = None,
        *,
        config: FinanceConfig | None = None,
    ) -> None:
        """Initialize financing portfolio scenario.

        Parameters
        ----------
        num_plans : int
            Number of plans to generate.
        approval_rate : float
            Share of plans approved (the rest are rejected).
        on_time_rate : float
            Probability a due installment is fully paid.
        partial_rate : float
            Probability a due installment is partially paid.
        seed : int | None
            Random seed for reproducibility.
        today : date | None
            Reference date; installments due before it receive payments.
        config : FinanceConfig | None
            Optional configuration; its money, schedule and reconciliation
            sections configure the store, and its seed applies when ``seed``
            is not given.
        """
        self.config = config or FinanceConfig()
        self.seed = seed if seed is not None else self.config.seed
        self.num_plans = num_plans
        self.approval_rate = approval_rate
        self.on_time_rate = on_time_rate
        self.partial_rate = partial_rate
        self.today = today or date.today()

        if self.seed is not None:
            random.seed(self.seed)

        self.store = ClinicDataStore(
            money_config=self.config.money,
            schedule_config=self.config.schedule,
            reconciliation_config=self.config.reconciliation,
        )
        self._plan_gen = FinancingPlanGenerator(
            seed=self.seed, locale=self.config.money.locale.replace("-", "_")
        )

    def generate(self) -> ClinicDataStore:
        """Generate all plans and payments.

        Returns
        -------
        ClinicDataStore
            Store containing the generated portfolio.
        """
        logger.info("Starting financing portfolio scenario: %d plans", self.num_plans)

        for _ in range(self.num_plans):
            created_on = self.today - timedelta(days=random.randint(0, 365))
            first_payment = created_on + timedelta(days=random.randint(7, 30))
            request = self._plan_gen.generate(first_payment_date=first_payment)

            self.store.create_plan(
                request.plan_id,
                request.patient_id,
                request.title,
                request.terms,
                today=created_on,
                created_at=datetime.combine(created_on, time(9, 0)),
            )

            if random.random() < self.approval_rate:
                self.store.approve_plan(request.plan_id)
                self._apply_payment_behavior(request.plan_id)
            else:
                self.store.reject_plan(request.plan_id)

        logger.info(
            "Generated %d plans with %d payments",
            len(self.store.plans),
            sum(len(p.payments) for p in self.store.plans.values()),
        )
        return self.store

    def _apply_payment_behavior(self, plan_id: str) -> None:
        """Pay installments due up to the reference date."""
        plan = self.store.get_plan(plan_id)

        for installment in list(plan.installments):
            if installment.due_date > self.today or plan.status != PlanStatus.ACTIVE:
                break

            roll = random.random()
            if roll < self.on_time_rate:
                amount = installment.remaining_amount
            elif roll < self.on_time_rate + self.partial_rate:
                amount = round_money(installment.remaining_amount / 2, self.config.money.quantum)
                if amount <= 0 or amount >= installment.remaining_amount:
                    continue
            else:
                continue

            method = random.choices(self.METHODS, weights=self.METHOD_WEIGHTS)[0]
            paid_on = installment.due_date - timedelta(days=random.randint(0, 3))
            self.store.record_payment(
                plan_id,
                installment.installment_id,
                amount,
                method,
                reference=f"REF-{random.randint(100000, 999999)}",
                paid_at=datetime.combine(paid_on, time(12, 0)),
            )

    def export(self, sinks: list[Any]) -> None:
        """Export generated data to sinks.

        Parameters
        ----------
        sinks : list[Any]
            List of sink instances (JsonFileSink, ConsoleSink).
        """
        plans = list(self.store.plans.values())
        installments = [i for p in plans for i in p.installments]
        payments = [
            {"plan_id": p.plan_id, **vars(record)} for p in plans for record in p.payments
        ]
        for sink in sinks:
            sink.write_batch("financing_plans", plans)
            sink.write_batch("installments", installments)
            sink.write_batch("payments", payments)

        logger.info("Exported financing portfolio to %d sinks", len(sinks))

    def get_portfolio_summary(self, today: date | None = None) -> dict[str, Any]:
        """Get summary statistics for the portfolio.

        Returns
        -------
        dict[str, Any]
            Collected and pending totals over active plans, plans with
            overdue installments and status distributions.
        """
        today = today or self.today
        plans = list(self.store.plans.values())
        if not plans:
            return {}

        active = [p for p in plans if p.status == PlanStatus.ACTIVE]
        stats = [compute_plan_stats(p, today) for p in active]

        status_counts: dict[str, int] = {}
        for plan in plans:
            status_counts[plan.status.value] = status_counts.get(plan.status.value, 0) + 1

        approval_counts: dict[str, int] = {}
        for plan in plans:
            key = plan.approval_status.value
            approval_counts[key] = approval_counts.get(key, 0) + 1

        return {
            "total_plans": len(plans),
            "active_plans": len(active),
            "total_financed": sum((p.financed_amount for p in plans), ZERO),
            "total_collected": sum((s.total_paid for s in stats), ZERO),
            "total_pending": sum((s.remaining_amount for s in stats), ZERO),
            "overdue_plans": sum(1 for s in stats if s.overdue_installments > 0),
            "plan_status_distribution": status_counts,
            "approval_status_distribution": approval_counts,
        }
