"""Pure financial calculators for the clinic back office."""

from clinic_finance.calculators.amortization import (
    advance_date,
    compute_schedule,
    compute_schedule_from_terms,
    validate_terms,
)
from clinic_finance.calculators.budget import compute_totals
from clinic_finance.calculators.ledger import (
    compute_plan_stats,
    derive_status,
    installment_view,
    pending_installments,
    record_payment,
)
from clinic_finance.calculators.money import apply_percentage, round_money, to_decimal
from clinic_finance.calculators.reconciliation import (
    DENOMINATIONS,
    add_movement,
    close_session,
    count_denominations,
    expected_closing,
    reconcile,
    summarize_movements,
)
from clinic_finance.calculators.templates import pick_template, terms_from_template

__all__ = [
    "DENOMINATIONS",
    "add_movement",
    "advance_date",
    "apply_percentage",
    "close_session",
    "compute_plan_stats",
    "compute_schedule",
    "compute_schedule_from_terms",
    "compute_totals",
    "count_denominations",
    "derive_status",
    "expected_closing",
    "installment_view",
    "pending_installments",
    "pick_template",
    "reconcile",
    "record_payment",
    "round_money",
    "summarize_movements",
    "terms_from_template",
    "to_decimal",
    "validate_terms",
]
