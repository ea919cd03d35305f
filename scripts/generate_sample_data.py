#!/usr/bin/env python3
"""Generate sample data files for validation.

Writes JSON files with a generated financing portfolio, approved budgets
financed into plans, and reconciled cash sessions. The files can be used
for manual validation of the engine's figures.
"""

import argparse
import sys
from datetime import date, datetime, time, timedelta
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from clinic_finance.calculators.money import round_money
from clinic_finance.config import FinanceConfig
from clinic_finance.generators import BudgetGenerator, DenominationCountGenerator
from clinic_finance.logging import get_logger, setup_logging
from clinic_finance.models import BudgetStatus, CashMovement, MovementType, PaymentMethod
from clinic_finance.scenarios import FinancingPortfolioScenario
from clinic_finance.sinks import ConsoleSink, JsonFileSink
from clinic_finance.store import ClinicDataStore

logger = get_logger("generate_sample_data")


def generate_budgets(
    budget_gen: BudgetGenerator,
    store: ClinicDataStore,
    num_budgets: int,
    today: date,
) -> list:
    """Generate budgets, approve half of them and finance those."""
    budgets = []
    for i in range(num_budgets):
        budget = budget_gen.generate()
        store.add_budget(budget)
        store.set_budget_status(budget.budget_id, BudgetStatus.SENT)
        if i % 2 == 0:
            store.set_budget_status(budget.budget_id, BudgetStatus.APPROVED)
            store.plan_from_budget(
                budget.budget_id,
                f"plan-{budget.budget_id}",
                today + timedelta(days=15),
                number_of_payments=6,
                today=today,
            )
        budgets.append(budget)
    logger.info("Generated %d budgets", len(budgets))
    return budgets


def generate_cash_sessions(
    count_gen: DenominationCountGenerator,
    store: ClinicDataStore,
    num_sessions: int,
    today: date,
) -> list:
    """Open, move and close one session per day on a single register."""
    sessions = []
    for day in range(num_sessions):
        session_date = today - timedelta(days=num_sessions - day)
        session_id = f"session-{session_date.isoformat()}"
        store.open_session(
            session_id,
            "register-1",
            "2000",
            opened_at=datetime.combine(session_date, time(8, 0)),
        )
        for n, (movement_type, category, amount) in enumerate(
            [
                (MovementType.INCOME, "Consulta", "800"),
                (MovementType.INCOME, "Tratamiento", "3500"),
                (MovementType.EXPENSE, "Insumos", "650.50"),
            ]
        ):
            store.add_movement(
                CashMovement(
                    movement_id=f"{session_id}-{n}",
                    session_id=session_id,
                    movement_type=movement_type,
                    category=category,
                    amount=amount,
                    description=category,
                    payment_method=PaymentMethod.CASH,
                )
            )

        session = store.get_session(session_id)
        # Every third day the drawer comes up 100 short
        shortage = 100 if day % 3 == 0 else 0
        counts = count_gen.generate_for_total(round_money(session.expected_closing - shortage))
        store.close_session(
            session_id,
            denominations=counts,
            discrepancy_notes="Faltante en caja" if shortage else None,
            closed_at=datetime.combine(session_date, time(20, 0)),
        )
        sessions.append(session)
    logger.info("Generated %d cash sessions", len(sessions))
    return sessions


def main() -> None:
    """Generate all sample data files."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--plans", type=int, default=20, help="Number of financing plans")
    parser.add_argument("--budgets", type=int, default=6, help="Number of budgets")
    parser.add_argument("--sessions", type=int, default=5, help="Number of cash sessions")
    parser.add_argument("--output", type=Path, default=None, help="Output directory")
    parser.add_argument("--console", action="store_true", help="Also print to console")
    args = parser.parse_args()

    config = FinanceConfig.from_env()
    setup_logging(config.log_level)
    seed = config.seed if config.seed is not None else 42
    today = date.today()

    output_dir = args.output or config.output.json_output_dir
    sinks: list = [JsonFileSink(output_dir, pretty=config.output.pretty_json)]
    if args.console:
        sinks.append(ConsoleSink(max_records=3, currency=config.money.currency))

    scenario = FinancingPortfolioScenario(num_plans=args.plans, seed=seed, today=today, config=config)
    store = scenario.generate()
    scenario.export(sinks)

    locale = config.money.locale.replace("-", "_")
    budgets = generate_budgets(BudgetGenerator(seed=seed, locale=locale), store, args.budgets, today)
    sessions = generate_cash_sessions(
        DenominationCountGenerator(seed=seed, locale=locale), store, args.sessions, today
    )
    for sink in sinks:
        sink.write_batch("budgets", budgets)
        sink.write_batch("cash_sessions", sessions)
        sink.write_batch("summary", [scenario.get_portfolio_summary(today)])
        sink.close()

    logger.info("Store summary: %s", store.summary())


if __name__ == "__main__":
    main()
