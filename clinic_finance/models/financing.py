"""Financing plan models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from clinic_finance.models.enums import (
    ApprovalStatus,
    InstallmentStatus,
    PaymentFrequency,
    PaymentMethod,
    PlanStatus,
)


@dataclass(frozen=True)
class PlanTerms:
    """Financing parameters being edited before a plan is saved."""

    total_amount: Decimal
    number_of_payments: int
    payment_frequency: PaymentFrequency
    first_payment_date: date
    down_payment: Decimal = Decimal("0")
    interest_rate: Decimal = Decimal("0")  # Annual percentage (e.g., 12 for 12%)

    @property
    def financed_amount(self) -> Decimal:
        """Amount left to pay in installments."""
        return self.total_amount - self.down_payment


@dataclass(frozen=True)
class ScheduleEntry:
    """One row of an amortization schedule."""

    payment_number: int  # 1, 2, 3, ...
    due_date: date
    scheduled_amount: Decimal


@dataclass(frozen=True)
class AmortizationSchedule:
    """Result of an amortization calculation."""

    financed_amount: Decimal
    payment_amount: Decimal
    total_interest: Decimal
    final_date: date
    installments: tuple[ScheduleEntry, ...]


@dataclass
class PaymentInstallment:
    """Installment (cuota) owned by a financing plan."""

    installment_id: str
    plan_id: str
    payment_number: int
    due_date: date
    scheduled_amount: Decimal
    paid_amount: Decimal = Decimal("0")
    status: InstallmentStatus = InstallmentStatus.PENDING
    payment_date: datetime | None = None
    payment_method: PaymentMethod | None = None
    reference: str | None = None
    notes: str | None = None

    @property
    def remaining_amount(self) -> Decimal:
        """Balance still owed on this installment."""
        return self.scheduled_amount - self.paid_amount


@dataclass(frozen=True)
class PaymentRecord:
    """A payment applied to one installment."""

    installment_id: str
    amount: Decimal
    method: PaymentMethod
    recorded_at: datetime
    reference: str | None = None
    notes: str | None = None


@dataclass
class FinancingPlan:
    """Financing plan aggregate: terms, computed figures and installments."""

    plan_id: str
    patient_id: str
    title: str
    terms: PlanTerms
    payment_amount: Decimal
    total_interest: Decimal
    final_payment_date: date
    approval_status: ApprovalStatus = ApprovalStatus.PENDING
    status: PlanStatus = PlanStatus.PENDING
    budget_id: str | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    installments: list[PaymentInstallment] = field(default_factory=list)
    payments: list[PaymentRecord] = field(default_factory=list)

    @property
    def financed_amount(self) -> Decimal:
        return self.terms.financed_amount

    def get_installment(self, installment_id: str) -> PaymentInstallment | None:
        """Find an installment by id."""
        for installment in self.installments:
            if installment.installment_id == installment_id:
                return installment
        return None


@dataclass(frozen=True)
class PlanStats:
    """Aggregate plan statistics, recomputed on every read."""

    total_installments: int
    paid_installments: int
    pending_installments: int
    overdue_installments: int
    total_paid: Decimal
    remaining_amount: Decimal
    progress: int  # Whole percent of installments fully paid


@dataclass(frozen=True)
class FinancingTemplate:
    """Preset financing conditions offered by the clinic."""

    name: str
    default_number_of_payments: int
    default_payment_frequency: PaymentFrequency = PaymentFrequency.MONTHLY
    default_interest_rate: Decimal = Decimal("0")
    default_down_payment_percent: Decimal = Decimal("0")
    requires_approval: bool = True
    min_amount: Decimal | None = None
    max_amount: Decimal | None = None
    is_default: bool = False
    description: str = ""
