"""Pytest configuration and fixtures."""

from datetime import date
from decimal import Decimal

import pytest

from clinic_finance.models import PaymentFrequency, PlanTerms
from clinic_finance.store import ClinicDataStore


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def today() -> date:
    """Reference date used by plan and ledger tests."""
    return date(2024, 1, 1)


@pytest.fixture
def sample_patient_id() -> str:
    """Sample patient ID."""
    return "pat-test-001"


@pytest.fixture
def sample_plan_id() -> str:
    """Sample plan ID."""
    return "plan-test-001"


@pytest.fixture
def simple_terms() -> PlanTerms:
    """3 monthly interest-free installments of 1000 starting 2024-01-15."""
    return PlanTerms(
        total_amount=Decimal("3000"),
        number_of_payments=3,
        payment_frequency=PaymentFrequency.MONTHLY,
        first_payment_date=date(2024, 1, 15),
    )


@pytest.fixture
def store() -> ClinicDataStore:
    """Create a fresh store for each test."""
    return ClinicDataStore()


@pytest.fixture
def active_plan(store, simple_terms, sample_plan_id, sample_patient_id, today):
    """An approved, active plan with three 1000 installments."""
    return store.create_plan(
        sample_plan_id,
        sample_patient_id,
        "Ortodoncia",
        simple_terms,
        requires_approval=False,
        today=today,
    )
