"""Tests for config and logging."""

import json
import logging
import sys
from decimal import Decimal
from pathlib import Path

import pytest

from clinic_finance.calculators.ledger import record_payment
from clinic_finance.config import (
    FinanceConfig,
    MoneyConfig,
    OutputConfig,
    ReconciliationConfig,
    ScheduleConfig,
)
from clinic_finance.exceptions import ConfigurationError
from clinic_finance.logging import JsonFormatter, get_logger, setup_logging
from clinic_finance.models import PaymentMethod, RateConvention

ENV_VARS = [
    "CURRENCY",
    "LOCALE",
    "MONEY_QUANTUM",
    "RATE_CONVENTION",
    "ADJUST_FINAL_INSTALLMENT",
    "RECONCILIATION_TOLERANCE",
    "STRICT_DENOMINATIONS",
    "OUTPUT_DIR",
    "PRETTY_JSON",
    "SEED",
    "LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove every variable read by FinanceConfig.from_env."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture(autouse=True)
def restore_logging():
    """Restore root and package logger state after each test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    levels = {name: logging.getLogger(name).level for name in ("", "clinic_finance", "faker")}
    yield
    root.handlers[:] = handlers
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)


class TestSectionConfigs:
    """Tests for the configuration sections."""

    def test_money_defaults(self) -> None:
        """Test default money configuration."""
        config = MoneyConfig()

        assert config.quantum == Decimal("0.01")
        assert config.currency == "MXN"
        assert config.locale == "es-MX"

    def test_schedule_defaults(self) -> None:
        """Test default schedule configuration."""
        config = ScheduleConfig()

        assert config.rate_convention == RateConvention.MONTHLY
        assert config.adjust_final_installment is False

    def test_reconciliation_defaults(self) -> None:
        """Test default reconciliation configuration."""
        config = ReconciliationConfig()

        assert config.tolerance == Decimal("0.01")
        assert config.strict_denominations is False

    def test_output_defaults(self) -> None:
        """Test default output configuration."""
        config = OutputConfig()

        assert config.json_output_dir == Path("output")
        assert config.pretty_json is False


class TestFinanceConfig:
    """Tests for FinanceConfig."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        config = FinanceConfig()

        assert isinstance(config.money, MoneyConfig)
        assert isinstance(config.schedule, ScheduleConfig)
        assert isinstance(config.reconciliation, ReconciliationConfig)
        assert isinstance(config.output, OutputConfig)
        assert config.seed is None
        assert config.log_level == "INFO"

    def test_from_env_default(self, clean_env) -> None:
        """Test creating config from an empty environment."""
        config = FinanceConfig.from_env()

        assert config == FinanceConfig()

    def test_from_env_custom(self, clean_env) -> None:
        """Test creating config from custom environment variables."""
        values = {
            "CURRENCY": "USD",
            "LOCALE": "en-US",
            "MONEY_QUANTUM": "0.5",
            "RATE_CONVENTION": "PER_PERIOD",
            "ADJUST_FINAL_INSTALLMENT": "true",
            "RECONCILIATION_TOLERANCE": "1",
            "STRICT_DENOMINATIONS": "TRUE",
            "OUTPUT_DIR": "/data/output",
            "PRETTY_JSON": "true",
            "SEED": "12345",
            "LOG_LEVEL": "DEBUG",
        }
        for name, value in values.items():
            clean_env.setenv(name, value)

        config = FinanceConfig.from_env()

        assert config.money.currency == "USD"
        assert config.money.locale == "en-US"
        assert config.money.quantum == Decimal("0.5")
        assert config.schedule.rate_convention == RateConvention.PER_PERIOD
        assert config.schedule.adjust_final_installment is True
        assert config.reconciliation.tolerance == Decimal("1")
        assert config.reconciliation.strict_denominations is True
        assert config.output.json_output_dir == Path("/data/output")
        assert config.output.pretty_json is True
        assert config.seed == 12345
        assert config.log_level == "DEBUG"

    @pytest.mark.parametrize(
        "name,value",
        [
            ("RATE_CONVENTION", "daily"),
            ("SEED", "forty-two"),
            ("MONEY_QUANTUM", "cents"),
            ("MONEY_QUANTUM", "0"),
            ("RECONCILIATION_TOLERANCE", "-1"),
        ],
    )
    def test_from_env_invalid(self, clean_env, name, value) -> None:
        """Test invalid environment values raise ConfigurationError."""
        clean_env.setenv(name, value)

        with pytest.raises(ConfigurationError):
            FinanceConfig.from_env()


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_logging_default(self) -> None:
        """Test default logging setup."""
        setup_logging()

        assert logging.getLogger("clinic_finance").level == logging.INFO

    def test_setup_logging_debug(self) -> None:
        """Test debug level logging setup."""
        setup_logging(level="DEBUG")

        assert logging.getLogger().level == logging.DEBUG

    def test_setup_logging_invalid_level(self) -> None:
        """Test logging with invalid level defaults to INFO."""
        setup_logging(level="INVALID")

        assert logging.getLogger().level == logging.INFO

    def test_setup_logging_json_format(self) -> None:
        """Test JSON format logging."""
        setup_logging(format_type="json")

        handlers = logging.getLogger().handlers
        assert any(isinstance(h.formatter, JsonFormatter) for h in handlers)

    def test_setup_logging_replaces_handlers(self) -> None:
        """Test that setup_logging replaces existing handlers."""
        root = logging.getLogger()
        root.addHandler(logging.StreamHandler())
        root.addHandler(logging.StreamHandler())

        setup_logging()

        assert len(root.handlers) == 1

    def test_faker_logger_quieted(self) -> None:
        """Test that faker's logger stays at WARNING."""
        setup_logging(level="DEBUG")

        assert logging.getLogger("faker").level == logging.WARNING


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def _record(self, **kwargs) -> logging.LogRecord:
        defaults = dict(
            name="clinic_finance.ledger",
            level=logging.INFO,
            pathname="/path/to/file.py",
            lineno=42,
            msg="Plan %s completed",
            args=("plan-1",),
            exc_info=None,
        )
        defaults.update(kwargs)
        return logging.LogRecord(**defaults)

    def test_format_basic(self) -> None:
        """Test basic log formatting."""
        data = json.loads(JsonFormatter().format(self._record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "clinic_finance.ledger"
        assert data["message"] == "Plan plan-1 completed"
        assert "timestamp" in data

    def test_format_with_exception(self) -> None:
        """Test formatting with exception info."""
        try:
            raise ValueError("Test error")
        except ValueError:
            exc_info = sys.exc_info()

        data = json.loads(JsonFormatter().format(self._record(exc_info=exc_info)))

        assert "ValueError" in data["exception"]

    def test_format_with_extra_decimal(self) -> None:
        """Test extra fields are merged and non-JSON values stringified."""
        record = self._record()
        record.extra = {"amount": Decimal("10.50")}

        data = json.loads(JsonFormatter().format(record))

        assert data["amount"] == "10.50"

    def test_format_with_context_fields(self) -> None:
        """Test plan and session identifiers passed as extra become top-level JSON fields."""
        record = self._record()
        record.plan_id = "plan-1"
        record.session_id = "ses-1"

        data = json.loads(JsonFormatter().format(record))

        assert data["plan_id"] == "plan-1"
        assert data["session_id"] == "ses-1"
        assert "budget_id" not in data

    def test_ledger_records_carry_plan_id(self, active_plan, caplog) -> None:
        """Test ledger log records expose the plan id to the JSON formatter."""
        caplog.set_level(logging.DEBUG, logger="clinic_finance")

        for installment in active_plan.installments:
            record_payment(active_plan, installment.installment_id, 1000, PaymentMethod.CASH)

        completed = [r for r in caplog.records if "completed" in r.getMessage()]
        assert completed
        assert completed[0].plan_id == active_plan.plan_id
        data = json.loads(JsonFormatter().format(completed[0]))
        assert data["plan_id"] == active_plan.plan_id


class TestGetLogger:
    """Tests for get_logger function."""

    def test_get_logger(self) -> None:
        """Test getting a logger."""
        logger = get_logger("clinic_finance.test")

        assert isinstance(logger, logging.Logger)
        assert logger.name == "clinic_finance.test"

    def test_get_logger_same_instance(self) -> None:
        """Test that get_logger returns same instance for same name."""
        assert get_logger("test.same") is get_logger("test.same")


class TestPackageInit:
    """Tests for clinic_finance __init__.py."""

    def test_version_exported(self) -> None:
        """Test that __version__ is exported."""
        from clinic_finance import __version__

        assert isinstance(__version__, str)
