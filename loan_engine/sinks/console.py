"""Console sink for debugging and development."""

import json
from typing import Any

from loan_engine.models.base import Report
from loan_engine.sinks.serialization import to_dict


class ConsoleSink:
    """Print reports and records to stdout."""

    def __init__(self, pretty: bool = True, max_rows: int | None = None) -> None:
        """Initialize console sink.

        Parameters
        ----------
        pretty : bool
            Pretty-print JSON output.
        max_rows : int | None
            Maximum rows or records to print per call (None for all).
        """
        self.pretty = pretty
        self.max_rows = max_rows
        self._counts: dict[str, int] = {}

    def write_report(self, name: str, report: Report) -> None:
        """Print a report as a table followed by its summary."""
        print(f"\n{'='*60}")
        print(f"Report: {report.title or name} ({len(report.rows)} rows)")
        print("=" * 60)

        data = to_dict(report)
        widths = [len(h) for h in data["headers"]]
        display_rows = data["rows"][: self.max_rows] if self.max_rows else data["rows"]
        for row in display_rows:
            widths = [max(w, len(str(cell))) for w, cell in zip(widths, row)]

        print(" | ".join(h.ljust(w) for h, w in zip(data["headers"], widths)))
        print("-+-".join("-" * w for w in widths))
        for row in display_rows:
            print(" | ".join(str(cell).ljust(w) for cell, w in zip(row, widths)))

        if self.max_rows and len(report.rows) > self.max_rows:
            print(f"... and {len(report.rows) - self.max_rows} more rows")

        print(self._dumps(data["summary"]))
        self._counts[name] = self._counts.get(name, 0) + 1

    def write_batch(self, entity_type: str, records: list[Any]) -> None:
        """Print a batch of records as JSON."""
        print(f"\n{'='*60}")
        print(f"Entity: {entity_type} ({len(records)} records)")
        print("=" * 60)

        display_records = records[: self.max_rows] if self.max_rows else records
        for record in display_records:
            print(self._dumps(to_dict(record)))

        if self.max_rows and len(records) > self.max_rows:
            print(f"... and {len(records) - self.max_rows} more records")

        self._counts[entity_type] = self._counts.get(entity_type, 0) + len(records)

    def close(self) -> None:
        """Print summary and close."""
        print(f"\n{'='*60}")
        print("Console Sink Summary")
        print("=" * 60)
        for name, count in self._counts.items():
            print(f"  {name}: {count}")

    def _dumps(self, data: Any) -> str:
        if self.pretty:
            return json.dumps(data, indent=2, ensure_ascii=False, default=str)
        return json.dumps(data, ensure_ascii=False, default=str)
