"""Console sink for debugging and development."""

import json
from typing import Any

from clinic_finance.models.financing import AmortizationSchedule
from clinic_finance.sinks.serialization import to_dict


class ConsoleSink:
    """Output records to console (stdout) for debugging."""

    def __init__(
        self,
        pretty: bool = True,
        max_records: int | None = None,
        currency: str = "MXN",
    ) -> None:
        """Initialize console sink.

        Parameters
        ----------
        pretty : bool
            Pretty-print JSON output.
        max_records : int | None
            Maximum records to print per batch (None for all).
        currency : str
            Currency code shown next to schedule totals.
        """
        self.pretty = pretty
        self.max_records = max_records
        self.currency = currency
        self._counts: dict[str, int] = {}

    def write_batch(self, entity_type: str, records: list[Any]) -> None:
        """Write a batch of records to console."""
        print(f"\n{'='*60}")
        print(f"Entity: {entity_type} ({len(records)} records)")
        print("=" * 60)

        display_records = records[: self.max_records] if self.max_records else records

        for record in display_records:
            data = to_dict(record)
            if self.pretty:
                print(json.dumps(data, indent=2, ensure_ascii=False))
            else:
                print(json.dumps(data, ensure_ascii=False))

        if self.max_records and len(records) > self.max_records:
            print(f"... and {len(records) - self.max_records} more records")

        self._counts[entity_type] = self._counts.get(entity_type, 0) + len(records)

    def write_schedule(self, schedule: AmortizationSchedule) -> None:
        """Print an amortization schedule as a table, amounts to cents."""
        amount_header = f"Amount ({self.currency})"
        print(f"\n{'#':>4}  {'Due date':<10}  {amount_header:>14}")
        print("-" * 32)
        for entry in schedule.installments:
            print(
                f"{entry.payment_number:>4}  {entry.due_date.isoformat():<10}  "
                f"{entry.scheduled_amount:>14,.2f}"
            )
        print("-" * 32)
        print(f"Financed: {schedule.financed_amount:,.2f} {self.currency}")
        print(f"Payment:  {schedule.payment_amount:,.2f} {self.currency}")
        print(f"Interest: {schedule.total_interest:,.2f} {self.currency}")
        print(f"Final:    {schedule.final_date.isoformat()}")
        self._counts["schedules"] = self._counts.get("schedules", 0) + 1

    def close(self) -> None:
        """Print summary and close."""
        print(f"\n{'='*60}")
        print("Console Sink Summary")
        print("=" * 60)
        for entity_type, count in self._counts.items():
            print(f"  {entity_type}: {count} records")
