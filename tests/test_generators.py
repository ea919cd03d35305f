"""Tests for sample-data generators."""

from datetime import date
from decimal import Decimal

import pytest

from clinic_finance.calculators.amortization import validate_terms
from clinic_finance.calculators.budget import compute_totals
from clinic_finance.calculators.reconciliation import DENOMINATION_VALUES, count_denominations
from clinic_finance.generators import (
    BudgetGenerator,
    DenominationCountGenerator,
    FinancingPlanGenerator,
    PlanRequest,
)
from clinic_finance.exceptions import InvalidAmountError
from clinic_finance.models import BudgetStatus


class TestFinancingPlanGenerator:
    """Tests for FinancingPlanGenerator."""

    def test_generate(self, seed: int) -> None:
        """Test a generated request has valid terms."""
        gen = FinancingPlanGenerator(seed=seed)

        request = gen.generate(first_payment_date=date(2024, 2, 1))

        assert isinstance(request, PlanRequest)
        assert request.terms.first_payment_date == date(2024, 2, 1)
        validate_terms(request.terms)

    def test_terms_within_catalogue(self, seed: int) -> None:
        """Test totals, terms and down payments stay in range."""
        gen = FinancingPlanGenerator(seed=seed)

        for _ in range(50):
            terms = gen.generate_terms()
            assert terms.total_amount % 100 == 0
            assert terms.down_payment <= terms.total_amount * Decimal("0.3")
            assert terms.number_of_payments in gen.TERMS_BY_FREQUENCY[terms.payment_frequency]
            assert terms.first_payment_date > date.today()

    def test_reproducible(self, seed: int) -> None:
        """Test the same seed yields the same requests."""
        first = list(FinancingPlanGenerator(seed=seed).generate_batch(5, date(2024, 2, 1)))
        second = list(FinancingPlanGenerator(seed=seed).generate_batch(5, date(2024, 2, 1)))

        assert first == second

    def test_generate_batch(self, seed: int) -> None:
        """Test batch generation yields unique plans."""
        requests = list(FinancingPlanGenerator(seed=seed).generate_batch(10))

        assert len({r.plan_id for r in requests}) == 10


class TestBudgetGenerator:
    """Tests for BudgetGenerator."""

    def test_generate(self, seed: int) -> None:
        """Test a generated budget is a priced draft."""
        budget = BudgetGenerator(seed=seed).generate(patient_id="pat-1", max_items=3)

        assert budget.patient_id == "pat-1"
        assert budget.status == BudgetStatus.DRAFT
        assert 1 <= len(budget.items) <= 3
        assert budget.tax_rate in (Decimal("0"), Decimal("16"))
        assert compute_totals(budget.items, budget.tax_rate).total > 0


class TestDenominationCountGenerator:
    """Tests for DenominationCountGenerator."""

    def test_generate(self, seed: int) -> None:
        """Test every denomination gets a bounded count."""
        counts = DenominationCountGenerator(seed=seed).generate(max_per_denomination=5)

        assert set(counts) == set(DENOMINATION_VALUES)
        assert all(0 <= q <= 5 for q in counts.values())

    @pytest.mark.parametrize("target", ["0", "1908.5", "12345.50", "760"])
    def test_generate_for_total(self, seed: int, target: str) -> None:
        """Test the count adds up to the target."""
        counts = DenominationCountGenerator(seed=seed).generate_for_total(Decimal(target))

        assert count_denominations(counts, strict=True) == Decimal(target)

    @pytest.mark.parametrize("target", ["-1", "10.25"])
    def test_generate_for_total_invalid(self, seed: int, target: str) -> None:
        """Test impossible totals are rejected."""
        with pytest.raises(InvalidAmountError):
            DenominationCountGenerator(seed=seed).generate_for_total(Decimal(target))
