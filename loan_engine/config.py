"""Policy and runtime configuration for loan-engine.

Regulatory thresholds and modelling assumptions live here rather than in
the engine functions so they can be changed without code edits.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any

from loan_engine.exceptions import ConfigurationError


@dataclass
class AssetClassificationConfig:
    """Days-past-due boundaries for the IRAC asset buckets.

    Each boundary is the first DPD value of the next, riskier bucket.
    """

    sub_standard_from: int = 90
    doubtful_from: int = 365
    loss_from: int = 730

    def __post_init__(self) -> None:
        if not 0 < self.sub_standard_from < self.doubtful_from < self.loss_from:
            raise ConfigurationError(
                "DPD thresholds must be positive and strictly increasing: "
                f"{self.sub_standard_from}, {self.doubtful_from}, {self.loss_from}"
            )


@dataclass
class ConcentrationConfig:
    """Product concentration limits, all in percent of total exposure."""

    high_threshold: Decimal = Decimal("50")
    medium_threshold: Decimal = Decimal("30")
    product_limit: Decimal = Decimal("25")

    def __post_init__(self) -> None:
        if not Decimal("0") <= self.medium_threshold <= self.high_threshold <= Decimal("100"):
            raise ConfigurationError(
                "Concentration thresholds must satisfy 0 <= medium <= high <= 100: "
                f"medium={self.medium_threshold}, high={self.high_threshold}"
            )


@dataclass
class LiquidityConfig:
    """ALM statement assumptions.

    ``outflow_ratio`` is a modelling assumption, not observed liability
    data: outflows per bucket are taken as this fraction of inflows unless
    the caller injects a different outflow model.
    """

    outflow_ratio: Decimal = Decimal("0.70")

    def __post_init__(self) -> None:
        if self.outflow_ratio < 0:
            raise ConfigurationError(f"Outflow ratio cannot be negative: {self.outflow_ratio}")


@dataclass
class RebalancingConfig:
    """LTV ceiling and urgency bands for collateral rebalancing.

    Bands are percentage points above the target LTV at which urgency
    steps up to MEDIUM, HIGH and CRITICAL.
    """

    target_ltv: Decimal = Decimal("75")
    medium_band: Decimal = Decimal("5")
    high_band: Decimal = Decimal("15")
    critical_band: Decimal = Decimal("25")

    def __post_init__(self) -> None:
        if not Decimal("0") < self.target_ltv <= Decimal("100"):
            raise ConfigurationError(f"Target LTV must be in (0, 100]: {self.target_ltv}")
        if not Decimal("0") < self.medium_band < self.high_band < self.critical_band:
            raise ConfigurationError(
                "Urgency bands must be positive and strictly increasing: "
                f"{self.medium_band}, {self.high_band}, {self.critical_band}"
            )


@dataclass
class ForecastConfig:
    """Collection forecast parameters."""

    months: int = 6
    collection_efficiency: Decimal = Decimal("0.95")
    seasonality: dict[int, Decimal] | None = None

    def __post_init__(self) -> None:
        if self.months <= 0:
            raise ConfigurationError(f"Forecast horizon must be positive: {self.months}")
        if not Decimal("0") < self.collection_efficiency <= Decimal("1"):
            raise ConfigurationError(
                f"Collection efficiency must be in (0, 1]: {self.collection_efficiency}"
            )


@dataclass
class CapitalConfig:
    """Capital assumptions for the prudential norms report.

    Capital figures are expressed as fractions of assets under management
    until real accounting data is wired in.
    """

    tier_one_ratio: Decimal = Decimal("0.15")
    tier_two_ratio: Decimal = Decimal("0.05")
    risk_weight: Decimal = Decimal("1.0")
    min_crar: Decimal = Decimal("15")
    min_tier_one: Decimal = Decimal("10")
    min_net_owned_funds: Decimal = Decimal("20000000")


@dataclass
class KafkaConfig:
    """Kafka producer configuration for publishing reports."""

    bootstrap_servers: str = "localhost:9092"
    acks: str = "all"
    batch_size: int = 16384
    linger_ms: int = 5
    compression: str = "snappy"
    retries: int = 3
    topic_prefix: str = "risk.reports"

    def to_dict(self) -> dict[str, Any]:
        """Convert to confluent-kafka config dict."""
        return {
            "bootstrap.servers": self.bootstrap_servers,
            "acks": self.acks,
            "batch.size": self.batch_size,
            "linger.ms": self.linger_ms,
            "compression.type": self.compression,
            "retries": self.retries,
        }


@dataclass
class OutputConfig:
    """Output configuration."""

    json_output_dir: Path = field(default_factory=lambda: Path("output"))
    pretty_json: bool = False


@dataclass
class EngineConfig:
    """Main configuration for loan-engine."""

    classification: AssetClassificationConfig = field(default_factory=AssetClassificationConfig)
    concentration: ConcentrationConfig = field(default_factory=ConcentrationConfig)
    liquidity: LiquidityConfig = field(default_factory=LiquidityConfig)
    rebalancing: RebalancingConfig = field(default_factory=RebalancingConfig)
    forecast: ForecastConfig = field(default_factory=ForecastConfig)
    capital: CapitalConfig = field(default_factory=CapitalConfig)
    kafka: KafkaConfig = field(default_factory=KafkaConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Create config from environment variables."""
        import json
        import os

        def decimal_env(name: str, default: str) -> Decimal:
            raw = os.getenv(name, default)
            try:
                return Decimal(raw)
            except ArithmeticError as exc:
                raise ConfigurationError(f"{name} is not a number: {raw!r}") from exc

        def int_env(name: str, default: str) -> int:
            raw = os.getenv(name, default)
            try:
                return int(raw)
            except ValueError as exc:
                raise ConfigurationError(f"{name} is not an integer: {raw!r}") from exc

        classification = AssetClassificationConfig(
            sub_standard_from=int_env("DPD_SUB_STANDARD", "90"),
            doubtful_from=int_env("DPD_DOUBTFUL", "365"),
            loss_from=int_env("DPD_LOSS", "730"),
        )

        concentration = ConcentrationConfig(
            high_threshold=decimal_env("CONCENTRATION_HIGH", "50"),
            medium_threshold=decimal_env("CONCENTRATION_MEDIUM", "30"),
            product_limit=decimal_env("PRODUCT_EXPOSURE_LIMIT", "25"),
        )

        liquidity = LiquidityConfig(outflow_ratio=decimal_env("OUTFLOW_RATIO", "0.70"))

        rebalancing = RebalancingConfig(target_ltv=decimal_env("TARGET_LTV", "75"))

        seasonality_str = os.getenv("SEASONALITY")
        seasonality = None
        if seasonality_str:
            # Expected shape: {"10": 1.1, "11": 1.2}, month number to factor
            try:
                seasonality = {int(k): Decimal(str(v)) for k, v in json.loads(seasonality_str).items()}
            except (ValueError, AttributeError, ArithmeticError) as exc:
                raise ConfigurationError(f"SEASONALITY is not a month-to-factor mapping: {seasonality_str!r}") from exc
        forecast = ForecastConfig(
            months=int_env("FORECAST_MONTHS", "6"),
            collection_efficiency=decimal_env("COLLECTION_EFFICIENCY", "0.95"),
            seasonality=seasonality,
        )

        kafka = KafkaConfig(
            bootstrap_servers=os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092"),
            acks=os.getenv("KAFKA_ACKS", "all"),
            topic_prefix=os.getenv("TOPIC_PREFIX", "risk.reports"),
        )

        output = OutputConfig(
            json_output_dir=Path(os.getenv("OUTPUT_DIR", "output")),
            pretty_json=os.getenv("PRETTY_JSON", "false").lower() == "true",
        )

        return cls(
            classification=classification,
            concentration=concentration,
            liquidity=liquidity,
            rebalancing=rebalancing,
            forecast=forecast,
            kafka=kafka,
            output=output,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
