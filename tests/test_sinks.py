"""Tests for output sinks."""

import json
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from clinic_finance.calculators.amortization import compute_schedule
from clinic_finance.exceptions import SinkError
from clinic_finance.models import PaymentFrequency
from clinic_finance.sinks import ConsoleSink, JsonFileSink


class TestConsoleSink:
    """Tests for ConsoleSink."""

    def test_init_default(self) -> None:
        """Test default initialization."""
        sink = ConsoleSink()

        assert sink.pretty is True
        assert sink.max_records is None

    def test_write_batch(self, capsys: pytest.CaptureFixture, active_plan) -> None:
        """Test writing a batch of plans."""
        sink = ConsoleSink(pretty=False)

        sink.write_batch("financing_plans", [active_plan])
        captured = capsys.readouterr()

        assert "financing_plans (1 records)" in captured.out
        assert "plan-test-001" in captured.out

    def test_write_batch_with_max_records(self, capsys: pytest.CaptureFixture) -> None:
        """Test writing batch with max_records limit."""
        sink = ConsoleSink(max_records=2)

        sink.write_batch("payments", [{"id": i} for i in range(10)])
        captured = capsys.readouterr()

        assert "and 8 more records" in captured.out

    def test_write_schedule(self, capsys: pytest.CaptureFixture) -> None:
        """Test printing a schedule table."""
        schedule = compute_schedule(10000, 0, 6, 5, PaymentFrequency.MONTHLY, date(2024, 1, 15))
        sink = ConsoleSink()

        sink.write_schedule(schedule)
        captured = capsys.readouterr()

        assert "2024-06-15" in captured.out
        assert "Financed: 10,000.00" in captured.out

    def test_write_schedule_currency(self, capsys: pytest.CaptureFixture) -> None:
        """Test schedule amounts are labelled with the configured currency."""
        schedule = compute_schedule(10000, 0, 6, 5, PaymentFrequency.MONTHLY, date(2024, 1, 15))
        sink = ConsoleSink(currency="USD")

        sink.write_schedule(schedule)
        captured = capsys.readouterr()

        assert "Amount (USD)" in captured.out
        assert "Financed: 10,000.00 USD" in captured.out
        assert "MXN" not in captured.out

    def test_close(self, capsys: pytest.CaptureFixture) -> None:
        """Test close method prints summary."""
        sink = ConsoleSink(pretty=False)
        sink.write_batch("budgets", [{"id": 1}])
        sink.write_batch("budgets", [{"id": 2}])

        sink.close()
        captured = capsys.readouterr()

        assert "Console Sink Summary" in captured.out
        assert "budgets: 2 records" in captured.out


class TestJsonFileSink:
    """Tests for JsonFileSink."""

    def test_creates_directory(self, tmp_path: Path) -> None:
        """Test the output directory is created."""
        output_dir = tmp_path / "nested" / "out"

        JsonFileSink(output_dir)

        assert output_dir.is_dir()

    def test_write_batch(self, tmp_path: Path, active_plan) -> None:
        """Test writing plans to a JSON file."""
        sink = JsonFileSink(tmp_path, pretty=True)

        path = sink.write_batch("financing_plans", [active_plan])

        data = json.loads(path.read_text(encoding="utf-8"))
        assert path.name == "financing_plans.json"
        assert data[0]["plan_id"] == "plan-test-001"
        assert data[0]["installments"][2]["scheduled_amount"] == "1000"
        assert sink.counts == {"financing_plans": 1}

    def test_write_batch_overwrites(self, tmp_path: Path) -> None:
        """Test a second batch replaces the file."""
        sink = JsonFileSink(tmp_path)
        sink.write_batch("summary", [{"total": Decimal("1")}])

        path = sink.write_batch("summary", [{"total": Decimal("2")}, {"total": Decimal("3")}])

        assert len(json.loads(path.read_text(encoding="utf-8"))) == 2
        assert sink.counts["summary"] == 2

    def test_write_jsonl_appends(self, tmp_path: Path) -> None:
        """Test JSONL output appends one object per line."""
        sink = JsonFileSink(tmp_path)

        sink.write_jsonl("movements", [{"amount": Decimal("10")}])
        path = sink.write_jsonl("movements", [{"amount": Decimal("20")}])

        lines = path.read_text(encoding="utf-8").splitlines()
        assert [json.loads(line)["amount"] for line in lines] == ["10", "20"]
        assert sink.counts["movements"] == 2

    def test_unwritable_directory(self, tmp_path: Path) -> None:
        """Test a file in place of the directory raises SinkError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("x", encoding="utf-8")

        with pytest.raises(SinkError):
            JsonFileSink(blocker / "out")
