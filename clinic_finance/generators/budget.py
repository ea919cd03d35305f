"""Budget generator for demos and tests."""

from __future__ import annotations

import random
from datetime import date, timedelta
from decimal import Decimal

from clinic_finance.generators.base import BaseGenerator
from clinic_finance.models.budget import Budget, BudgetItem


class BudgetGenerator(BaseGenerator):
    """Generate synthetic treatment budgets."""

    # (code, description, price range MXN)
    CATALOGUE = [
        ("LIM-01", "Limpieza dental", (600, 1200)),
        ("RES-01", "Resina", (800, 1800)),
        ("EXT-01", "Extracción simple", (700, 1500)),
        ("END-01", "Endodoncia", (3500, 9000)),
        ("COR-01", "Corona de zirconia", (6000, 12000)),
        ("IMP-01", "Implante dental", (15000, 35000)),
        ("BLA-01", "Blanqueamiento", (3000, 7000)),
    ]

    TAX_RATES = [Decimal("0"), Decimal("16")]

    def generate(self, patient_id: str | None = None, max_items: int = 5) -> Budget:
        """Generate a draft budget.

        Parameters
        ----------
        patient_id : str | None
            Patient the budget is for (random when omitted).
        max_items : int
            Maximum number of lines.

        Returns
        -------
        Budget
            Generated budget in draft status.
        """
        k = random.randint(1, min(max_items, len(self.CATALOGUE)))
        lines = random.sample(self.CATALOGUE, k=k)
        items = [
            BudgetItem(
                description=description,
                quantity=Decimal(random.randint(1, 3)),
                unit_price=Decimal(random.randint(low // 50, high // 50) * 50),
                discount_percent=Decimal(random.choice([0, 0, 0, 5, 10, 15])),
                treatment_code=code,
            )
            for code, description, (low, high) in lines
        ]

        return Budget(
            budget_id=self.fake.uuid4(),
            patient_id=patient_id or self.fake.uuid4(),
            title=f"Presupuesto {self.fake.last_name()}",
            items=items,
            tax_rate=random.choice(self.TAX_RATES),
            valid_until=date.today() + timedelta(days=30),
        )
