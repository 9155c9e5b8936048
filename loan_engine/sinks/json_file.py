"""JSON file sink for exporting reports."""

import json
from pathlib import Path
from typing import Any

from loan_engine.exceptions import SinkError
from loan_engine.models.base import Report
from loan_engine.sinks.serialization import to_dict


class JsonFileSink:
    """Write each report or record batch to its own JSON file."""

    def __init__(self, output_dir: str | Path, pretty: bool = False) -> None:
        """Initialize JSON file sink.

        Parameters
        ----------
        output_dir : str | Path
            Directory to write JSON files.
        pretty : bool
            Pretty-print JSON output.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.pretty = pretty
        self._counts: dict[str, int] = {}

    def write_report(self, name: str, report: Report) -> Path:
        """Write ``report`` to ``<name>.json`` and return the path."""
        file_path = self.output_dir / f"{name}.json"
        self._dump(file_path, to_dict(report))
        self._counts[name] = len(report.rows)
        return file_path

    def write_batch(self, entity_type: str, records: list[Any]) -> Path:
        """Write a batch of records to ``<entity_type>.json``."""
        file_path = self.output_dir / f"{entity_type}.json"
        self._dump(file_path, [to_dict(record) for record in records])
        self._counts[entity_type] = len(records)
        return file_path

    def close(self) -> None:
        """Print summary."""
        print(f"JSON files written to: {self.output_dir}")
        for name, count in self._counts.items():
            print(f"  {name}: {count} rows")

    def _dump(self, file_path: Path, data: Any) -> None:
        try:
            with open(file_path, "w", encoding="utf-8") as f:
                if self.pretty:
                    json.dump(data, f, indent=2, ensure_ascii=False, default=str)
                else:
                    json.dump(data, f, ensure_ascii=False, default=str)
        except OSError as exc:
            raise SinkError(f"Cannot write {file_path}: {exc}") from exc
