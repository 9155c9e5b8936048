#!/usr/bin/env python3
"""Generate a sample loan book and publish every regulatory report.

Reports are built as of ``--today`` (default: the current date) and written
to one of:
- console: table plus summary on stdout
- json: one ``<report>.json`` file per report under ``--output-dir``
- kafka: one message per report on ``<topic prefix>.<report>``
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from loan_engine.config import EngineConfig
from loan_engine.exceptions import LoanEngineError
from loan_engine.logging import setup_logging
from loan_engine.scenarios import SamplePortfolioScenario
from loan_engine.sinks import ConsoleSink, JsonFileSink

logger = logging.getLogger(__name__)


def build_sink(kind: str, config: EngineConfig, output_dir: Path | None):
    """Create the sink selected on the command line."""
    if kind == "json":
        return JsonFileSink(output_dir or config.output.json_output_dir, pretty=config.output.pretty_json)
    if kind == "kafka":
        from loan_engine.sinks.kafka import KafkaSink

        return KafkaSink(config.kafka)
    return ConsoleSink(pretty=True, max_rows=20)


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Generate a sample loan portfolio and run all regulatory reports"
    )
    parser.add_argument(
        "--loans",
        type=int,
        default=200,
        help="Number of loans to generate (default: 200)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed for reproducibility (default: 42)",
    )
    parser.add_argument(
        "--today",
        type=date.fromisoformat,
        default=None,
        help="Reporting date as YYYY-MM-DD (default: current date)",
    )
    parser.add_argument(
        "--sink",
        type=str,
        choices=["console", "json", "kafka"],
        default="console",
        help="Where to write the reports (default: console)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory for --sink json (default: OUTPUT_DIR or ./output)",
    )
    parser.add_argument(
        "--export-records",
        action="store_true",
        help="Also write the generated loans, schedule, payments and collaterals",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level (default: LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--log-format",
        type=str,
        choices=["standard", "json"],
        default="standard",
        help="Log output format (default: standard)",
    )
    args = parser.parse_args()

    try:
        config = EngineConfig.from_env()
    except LoanEngineError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        sys.exit(2)

    setup_logging(args.log_level or config.log_level, args.log_format, stream=sys.stderr)

    scenario = SamplePortfolioScenario(
        num_loans=args.loans,
        reference_date=args.today,
        seed=args.seed,
    )
    scenario.generate()
    logger.info("Portfolio summary: %s", scenario.get_portfolio_summary())

    sink = build_sink(args.sink, config, args.output_dir)
    try:
        if args.export_records:
            scenario.export([sink])
        scenario.export_reports([sink], config)
    except LoanEngineError as exc:
        logger.error("Report run failed: %s", exc)
        sys.exit(1)
    finally:
        sink.close()


if __name__ == "__main__":
    main()
