"""Clinic finance domain models."""

from clinic_finance.models.budget import Budget, BudgetItem, BudgetTotals
from clinic_finance.models.cash import CashMovement, CashSession, ReconciliationResult
from clinic_finance.models.enums import (
    ApprovalStatus,
    BudgetStatus,
    CashSessionStatus,
    InstallmentStatus,
    MovementType,
    PaymentFrequency,
    PaymentMethod,
    PlanStatus,
    RateConvention,
)
from clinic_finance.models.financing import (
    AmortizationSchedule,
    FinancingPlan,
    FinancingTemplate,
    PaymentInstallment,
    PaymentRecord,
    PlanStats,
    PlanTerms,
    ScheduleEntry,
)

__all__ = [
    "AmortizationSchedule",
    "ApprovalStatus",
    "Budget",
    "BudgetItem",
    "BudgetStatus",
    "BudgetTotals",
    "CashMovement",
    "CashSession",
    "CashSessionStatus",
    "FinancingPlan",
    "FinancingTemplate",
    "InstallmentStatus",
    "MovementType",
    "PaymentFrequency",
    "PaymentInstallment",
    "PaymentMethod",
    "PaymentRecord",
    "PlanStats",
    "PlanStatus",
    "PlanTerms",
    "RateConvention",
    "ReconciliationResult",
    "ScheduleEntry",
]
