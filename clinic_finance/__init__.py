"""clinic-finance: financing, budget and cash-register calculations for dental clinics."""

from clinic_finance.calculators import (
    close_session,
    compute_plan_stats,
    compute_schedule,
    compute_totals,
    count_denominations,
    reconcile,
    record_payment,
)
from clinic_finance.store import ClinicDataStore

__version__ = "0.1.0"

__all__ = [
    "ClinicDataStore",
    "__version__",
    "close_session",
    "compute_plan_stats",
    "compute_schedule",
    "compute_totals",
    "count_denominations",
    "reconcile",
    "record_payment",
]
