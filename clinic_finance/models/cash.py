"""Cash register session models."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from clinic_finance.models.enums import CashSessionStatus, MovementType, PaymentMethod


@dataclass
class CashMovement:
    """Money entering or leaving the register during a session."""

    movement_id: str
    session_id: str
    movement_type: MovementType
    category: str
    amount: Decimal
    description: str
    payment_method: PaymentMethod = PaymentMethod.CASH
    reference: str | None = None
    created_at: datetime | None = None


@dataclass
class CashSession:
    """Cash-register session between an opening and a closing count."""

    session_id: str
    register_id: str
    opening_balance: Decimal
    total_income: Decimal = Decimal("0")
    total_expense: Decimal = Decimal("0")
    status: CashSessionStatus = CashSessionStatus.OPEN
    actual_closing: Decimal | None = None
    difference: Decimal | None = None
    denominations: dict[str, int] | None = None
    notes: str | None = None
    discrepancy_notes: str | None = None
    opened_at: datetime | None = None
    closed_at: datetime | None = None
    movements: list[CashMovement] = field(default_factory=list)

    @property
    def expected_closing(self) -> Decimal:
        """Balance the register should hold according to recorded movements."""
        return self.opening_balance + self.total_income - self.total_expense

    @property
    def is_open(self) -> bool:
        return self.status == CashSessionStatus.OPEN


@dataclass(frozen=True)
class ReconciliationResult:
    """Counted cash compared against the expected balance."""

    counted_total: Decimal
    expected_closing: Decimal
    difference: Decimal  # Positive = surplus, negative = shortage
    requires_notes: bool

    @property
    def is_balanced(self) -> bool:
        return not self.requires_notes
