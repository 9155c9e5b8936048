"""Tests for report sinks and serialization."""

import json
import tempfile
from datetime import date, datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Iterator
from unittest.mock import MagicMock, patch

import pytest
from confluent_kafka import KafkaException

from loan_engine.config import KafkaConfig
from loan_engine.exceptions import SinkError
from loan_engine.models import Collateral, Report, ReportType, Urgency
from loan_engine.sinks.console import ConsoleSink
from loan_engine.sinks.json_file import JsonFileSink
from loan_engine.sinks.serialization import serialize_value, to_dict


@pytest.fixture
def report() -> Report:
    return Report(
        headers=["Time Bucket", "Inflows"],
        rows=[["0-30 Days", Decimal("1000.00")], ["31-90 Days", Decimal("0.00")]],
        summary={"liquidity_status": "ADEQUATE", "total_inflows": Decimal("1000.00")},
        report_type=ReportType.ALM,
        title="Asset Liability Mismatch",
        generated_at=datetime(2024, 6, 30, 12, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


class TestSerialization:
    """Tests for serialization helpers."""

    def test_decimal_keeps_minor_units(self) -> None:
        assert serialize_value(Decimal("1.50")) == "1.50"

    def test_enum_and_dates(self) -> None:
        assert serialize_value(Urgency.HIGH) == "HIGH"
        assert serialize_value(date(2024, 1, 2)) == "2024-01-02"
        assert serialize_value(datetime(2024, 1, 2, 3, 4)) == "2024-01-02T03:04:00"

    def test_nested_containers(self) -> None:
        value = {"a": [Decimal("1"), (Urgency.LOW,)], Urgency.CRITICAL: {"b": None}}

        assert serialize_value(value) == {"a": ["1", ["LOW"]], "CRITICAL": {"b": None}}

    def test_report_to_dict(self, report: Report) -> None:
        data = to_dict(report)

        assert data["reportType"] == "ALM"
        assert data["rows"][0] == ["0-30 Days", "1000.00"]
        assert data["summary"]["total_inflows"] == "1000.00"
        assert data["generatedAt"] == "2024-06-30T12:00:00+00:00"

    def test_dataclass_to_dict(self) -> None:
        data = to_dict(Collateral("c1", "L1", Decimal("250.00")))

        assert data["collateral_id"] == "c1"
        assert data["current_value"] == "250.00"
        assert data["pledge_status"] == "PLEDGED"

    def test_other_values(self) -> None:
        assert to_dict(42) == {"value": "42"}


class TestConsoleSink:
    """Tests for ConsoleSink."""

    def test_init_default(self) -> None:
        sink = ConsoleSink()

        assert sink.pretty is True
        assert sink.max_rows is None
        assert sink._counts == {}

    def test_write_report(self, report: Report, capsys: pytest.CaptureFixture) -> None:
        sink = ConsoleSink(pretty=False)
        sink.write_report("alm", report)
        captured = capsys.readouterr()

        assert "Asset Liability Mismatch (2 rows)" in captured.out
        assert "31-90 Days" in captured.out
        assert '"liquidity_status": "ADEQUATE"' in captured.out
        assert sink._counts["alm"] == 1

    def test_max_rows(self, report: Report, capsys: pytest.CaptureFixture) -> None:
        ConsoleSink(max_rows=1).write_report("alm", report)
        captured = capsys.readouterr()

        assert "31-90 Days" not in captured.out
        assert "... and 1 more rows" in captured.out

    def test_write_batch_and_close(self, capsys: pytest.CaptureFixture) -> None:
        sink = ConsoleSink(pretty=False)
        sink.write_batch("collaterals", [Collateral("c1", "L1", Decimal("1"))])
        sink.close()
        captured = capsys.readouterr()

        assert "collaterals (1 records)" in captured.out
        assert "Console Sink Summary" in captured.out
        assert "collaterals: 1" in captured.out


class TestJsonFileSink:
    """Tests for JsonFileSink."""

    def test_creates_output_dir(self, temp_dir: Path) -> None:
        output = temp_dir / "nested" / "reports"
        JsonFileSink(output)

        assert output.is_dir()

    def test_write_report(self, report: Report, temp_dir: Path) -> None:
        sink = JsonFileSink(temp_dir, pretty=True)
        path = sink.write_report("alm", report)

        assert path == temp_dir / "alm.json"
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        assert data["headers"] == ["Time Bucket", "Inflows"]
        assert data["summary"]["total_inflows"] == "1000.00"

    def test_write_batch(self, temp_dir: Path) -> None:
        sink = JsonFileSink(temp_dir)
        path = sink.write_batch("collaterals", [Collateral("c1", "L1", Decimal("5"))])

        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        assert data[0]["loan_id"] == "L1"

    def test_close_prints_counts(self, report: Report, temp_dir: Path, capsys: pytest.CaptureFixture) -> None:
        sink = JsonFileSink(temp_dir)
        sink.write_report("alm", report)
        sink.close()

        assert "alm: 2 rows" in capsys.readouterr().out

    def test_write_failure(self, report: Report, temp_dir: Path) -> None:
        sink = JsonFileSink(temp_dir)

        with patch("builtins.open", side_effect=PermissionError("denied")):
            with pytest.raises(SinkError, match="denied"):
                sink.write_report("alm", report)


class TestKafkaSink:
    """Tests for KafkaSink with a mocked producer."""

    @pytest.fixture
    def producer(self) -> Iterator[MagicMock]:
        with patch("loan_engine.sinks.kafka.Producer") as mock_producer_class:
            mock_producer = MagicMock()
            mock_producer.flush.return_value = 0
            mock_producer_class.return_value = mock_producer
            yield mock_producer_class

    def test_init_from_bootstrap_string(self, producer: MagicMock) -> None:
        from loan_engine.sinks.kafka import KafkaSink

        sink = KafkaSink("kafka:9092")

        assert sink.config.bootstrap_servers == "kafka:9092"
        producer.assert_called_once_with(KafkaConfig(bootstrap_servers="kafka:9092").to_dict())

    def test_topic_for(self, producer: MagicMock) -> None:
        from loan_engine.sinks.kafka import KafkaSink

        sink = KafkaSink(KafkaConfig(topic_prefix="bank.risk"))

        assert sink.topic_for("CASH_FLOW") == "bank.risk.cash-flow"

    def test_write_report(self, producer: MagicMock, report: Report) -> None:
        """Test a report is one JSON message keyed by report type."""
        from loan_engine.sinks.kafka import KafkaSink

        sink = KafkaSink(KafkaConfig())
        sink.write_report("alm", report)

        mock_producer = producer.return_value
        kwargs = mock_producer.produce.call_args.kwargs
        assert kwargs["topic"] == "risk.reports.alm"
        assert kwargs["key"] == b"ALM"
        assert json.loads(kwargs["value"])["summary"]["liquidity_status"] == "ADEQUATE"
        mock_producer.flush.assert_called()
        assert sink.stats.sent == 1

    def test_write_batch_keys_by_loan(self, producer: MagicMock) -> None:
        from loan_engine.sinks.kafka import KafkaSink

        sink = KafkaSink(KafkaConfig())
        sink.write_batch("collaterals", [Collateral("c1", "L1", Decimal("1")), Collateral("c2", "L2", Decimal("2"))])

        keys = [c.kwargs["key"] for c in producer.return_value.produce.call_args_list]
        assert keys == [b"L1", b"L2"]
        assert sink.stats.sent == 2

    def test_produce_failure(self, producer: MagicMock, report: Report) -> None:
        from loan_engine.sinks.kafka import KafkaSink

        producer.return_value.produce.side_effect = BufferError("queue full")
        sink = KafkaSink(KafkaConfig())

        with pytest.raises(SinkError, match="queue full"):
            sink.write_report("alm", report)

    def test_kafka_exception_wrapped(self, producer: MagicMock, report: Report) -> None:
        from loan_engine.sinks.kafka import KafkaSink

        producer.return_value.produce.side_effect = KafkaException("broker down")
        sink = KafkaSink(KafkaConfig())

        with pytest.raises(SinkError):
            sink.write_report("alm", report)

    def test_delivery_callback(self, producer: MagicMock) -> None:
        from loan_engine.sinks.kafka import KafkaSink

        sink = KafkaSink(KafkaConfig())
        msg = MagicMock()
        msg.topic.return_value = "risk.reports.alm"
        msg.partition.return_value = 0
        msg.offset.return_value = 7
        sink._delivery_callback(None, msg)
        sink._delivery_callback("timeout", None)

        assert sink.stats.delivered == 1
        assert sink.stats.failed == 1
        assert sink.stats.success_rate == 0.5

    def test_close_flushes(self, producer: MagicMock) -> None:
        from loan_engine.sinks.kafka import KafkaSink

        sink = KafkaSink(KafkaConfig())
        sink.close()

        producer.return_value.flush.assert_called_once_with(30.0)
