"""Configuration management for clinic-finance."""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path

from clinic_finance.exceptions import ConfigurationError
from clinic_finance.models.enums import RateConvention


@dataclass
class MoneyConfig:
    """Currency handling configuration.

    ``locale`` is carried for callers that format amounts for display;
    the engine itself never formats.
    """

    quantum: Decimal = Decimal("0.01")
    currency: str = "MXN"
    locale: str = "es-MX"


@dataclass
class ScheduleConfig:
    """Amortization schedule options."""

    rate_convention: RateConvention = RateConvention.MONTHLY
    adjust_final_installment: bool = False


@dataclass
class ReconciliationConfig:
    """Cash-session reconciliation options."""

    tolerance: Decimal = Decimal("0.01")
    strict_denominations: bool = False


@dataclass
class OutputConfig:
    """Output configuration."""

    json_output_dir: Path = field(default_factory=lambda: Path("output"))
    pretty_json: bool = False


@dataclass
class FinanceConfig:
    """Main configuration for clinic-finance."""

    money: MoneyConfig = field(default_factory=MoneyConfig)
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    reconciliation: ReconciliationConfig = field(default_factory=ReconciliationConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    seed: int | None = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "FinanceConfig":
        """Create config from environment variables."""
        import os

        money = MoneyConfig(
            quantum=_decimal_env("MONEY_QUANTUM", "0.01"),
            currency=os.getenv("CURRENCY", "MXN"),
            locale=os.getenv("LOCALE", "es-MX"),
        )

        convention = os.getenv("RATE_CONVENTION", RateConvention.MONTHLY.value)
        try:
            rate_convention = RateConvention(convention.lower())
        except ValueError as exc:
            raise ConfigurationError(f"Unknown RATE_CONVENTION: {convention!r}") from exc

        schedule = ScheduleConfig(
            rate_convention=rate_convention,
            adjust_final_installment=os.getenv("ADJUST_FINAL_INSTALLMENT", "false").lower() == "true",
        )

        reconciliation = ReconciliationConfig(
            tolerance=_decimal_env("RECONCILIATION_TOLERANCE", "0.01"),
            strict_denominations=os.getenv("STRICT_DENOMINATIONS", "false").lower() == "true",
        )

        output = OutputConfig(
            json_output_dir=Path(os.getenv("OUTPUT_DIR", "output")),
            pretty_json=os.getenv("PRETTY_JSON", "false").lower() == "true",
        )

        seed_str = os.getenv("SEED")
        try:
            seed = int(seed_str) if seed_str else None
        except ValueError as exc:
            raise ConfigurationError(f"SEED must be an integer, got {seed_str!r}") from exc

        return cls(
            money=money,
            schedule=schedule,
            reconciliation=reconciliation,
            output=output,
            seed=seed,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


def _decimal_env(name: str, default: str) -> Decimal:
    """Read a positive decimal from the environment."""
    import os

    raw = os.getenv(name, default)
    try:
        value = Decimal(raw)
    except InvalidOperation as exc:
        raise ConfigurationError(f"{name} must be a decimal number, got {raw!r}") from exc
    if not value.is_finite() or value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}")
    return value
