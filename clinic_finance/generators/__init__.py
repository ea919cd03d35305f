"""Sample-data generators."""

from clinic_finance.generators.budget import BudgetGenerator
from clinic_finance.generators.cash import DenominationCountGenerator
from clinic_finance.generators.financing import FinancingPlanGenerator, PlanRequest

__all__ = [
    "BudgetGenerator",
    "DenominationCountGenerator",
    "FinancingPlanGenerator",
    "PlanRequest",
]
