"""Cash-count generator for demos and tests."""

from __future__ import annotations

import random
from typing import Any

from clinic_finance.calculators.money import to_decimal
from clinic_finance.calculators.reconciliation import DENOMINATIONS
from clinic_finance.exceptions import InvalidAmountError
from clinic_finance.generators.base import BaseGenerator


class DenominationCountGenerator(BaseGenerator):
    """Generate denomination counts such as a cashier would enter."""

    def generate(self, max_per_denomination: int = 20) -> dict[str, int]:
        """Generate a random count over all denominations."""
        return {d.key: random.randint(0, max_per_denomination) for d in DENOMINATIONS}

    def generate_for_total(self, target: Any) -> dict[str, int]:
        """Generate a count adding up to ``target``.

        Uses as many of the largest denominations as fit, skipping a few
        bills at random so counts look less uniform.

        Raises
        ------
        InvalidAmountError
            If ``target`` is negative or not a multiple of 0.50.
        """
        remaining = to_decimal(target)
        smallest = DENOMINATIONS[-1].value
        if remaining < 0 or remaining % smallest != 0:
            raise InvalidAmountError(f"Cannot count {target} with the available denominations")

        counts = {d.key: 0 for d in DENOMINATIONS}
        for denomination in DENOMINATIONS:
            fits = int(remaining // denomination.value)
            if fits and denomination.value > 1 and random.random() < 0.3:
                fits -= random.randint(0, fits)
            counts[denomination.key] = fits
            remaining -= denomination.value * fits

        return counts
