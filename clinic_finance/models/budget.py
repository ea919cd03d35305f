"""Budget (presupuesto) models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from clinic_finance.models.enums import BudgetStatus


@dataclass
class BudgetItem:
    """Treatment line on a budget."""

    description: str
    quantity: Decimal
    unit_price: Decimal
    discount_percent: Decimal = Decimal("0")
    treatment_code: str | None = None


@dataclass(frozen=True)
class BudgetTotals:
    """Computed budget figures.

    ``subtotal`` already nets out line discounts; ``discount_total`` is
    reported alongside it and is not subtracted again.
    """

    subtotal: Decimal
    discount_total: Decimal
    tax_amount: Decimal
    total: Decimal
    line_totals: tuple[Decimal, ...] = ()


@dataclass
class Budget:
    """Treatment quote for a patient."""

    budget_id: str
    patient_id: str
    title: str
    items: list[BudgetItem] = field(default_factory=list)
    tax_rate: Decimal = Decimal("0")  # Percent (e.g., 16 for IVA 16%)
    status: BudgetStatus = BudgetStatus.DRAFT
    valid_until: date | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
