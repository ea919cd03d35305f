"""Financing plan generator for demos and tests."""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterator

from clinic_finance.generators.base import BaseGenerator
from clinic_finance.models.enums import PaymentFrequency
from clinic_finance.models.financing import PlanTerms


@dataclass(frozen=True)
class PlanRequest:
    """Everything needed to create a plan in the store."""

    plan_id: str
    patient_id: str
    title: str
    terms: PlanTerms


class FinancingPlanGenerator(BaseGenerator):
    """Generate synthetic financing plan requests."""

    TREATMENTS = [
        "Ortodoncia",
        "Implante dental",
        "Endodoncia",
        "Carillas",
        "Prótesis fija",
        "Rehabilitación oral",
    ]

    # Treatment price ranges (MXN)
    PRICE_RANGES = {
        "Ortodoncia": (18000, 45000),
        "Implante dental": (15000, 35000),
        "Endodoncia": (3500, 9000),
        "Carillas": (8000, 40000),
        "Prótesis fija": (9000, 30000),
        "Rehabilitación oral": (40000, 120000),
    }

    TERMS_BY_FREQUENCY = {
        PaymentFrequency.MONTHLY: [3, 6, 9, 12, 18, 24],
        PaymentFrequency.BIWEEKLY: [4, 6, 8, 12, 24],
        PaymentFrequency.WEEKLY: [4, 8, 12, 16],
    }
    FREQUENCIES = [PaymentFrequency.MONTHLY, PaymentFrequency.BIWEEKLY, PaymentFrequency.WEEKLY]
    FREQUENCY_WEIGHTS = [0.70, 0.20, 0.10]

    INTEREST_RATES = [Decimal("0"), Decimal("0"), Decimal("6"), Decimal("12"), Decimal("18")]

    def generate_terms(self, first_payment_date: date | None = None) -> PlanTerms:
        """Generate valid plan terms.

        Parameters
        ----------
        first_payment_date : date | None
            Due date of the first installment (default: 7-30 days ahead).

        Returns
        -------
        PlanTerms
            Generated terms.
        """
        treatment = random.choice(self.TREATMENTS)
        return self._terms_for(treatment, first_payment_date)

    def generate(self, first_payment_date: date | None = None) -> PlanRequest:
        """Generate a plan request for a new patient."""
        treatment = random.choice(self.TREATMENTS)
        return PlanRequest(
            plan_id=self.fake.uuid4(),
            patient_id=self.fake.uuid4(),
            title=f"{treatment} - {self.fake.name()}",
            terms=self._terms_for(treatment, first_payment_date),
        )

    def generate_batch(
        self, count: int, first_payment_date: date | None = None
    ) -> Iterator[PlanRequest]:
        """Generate ``count`` plan requests."""
        for _ in range(count):
            yield self.generate(first_payment_date)

    def _terms_for(self, treatment: str, first_payment_date: date | None) -> PlanTerms:
        low, high = self.PRICE_RANGES[treatment]
        # Prices end in hundreds
        total = Decimal(random.randint(low // 100, high // 100) * 100)

        # Down payment 0-30%, rounded to hundreds
        down_pct = random.choice([0, 0, 10, 20, 30])
        down = Decimal(int(total * down_pct / 100 / 100) * 100)

        frequency = random.choices(self.FREQUENCIES, weights=self.FREQUENCY_WEIGHTS)[0]
        n = random.choice(self.TERMS_BY_FREQUENCY[frequency])

        if first_payment_date is None:
            first_payment_date = date.today() + timedelta(days=random.randint(7, 30))

        return PlanTerms(
            total_amount=total,
            down_payment=down,
            number_of_payments=n,
            payment_frequency=frequency,
            interest_rate=random.choice(self.INTEREST_RATES),
            first_payment_date=first_payment_date,
        )
