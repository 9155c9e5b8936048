"""Report envelope shared by every report-producing component."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from loan_engine.models.enums import ReportType


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Report:
    """Tabular report consumed by display and export collaborators.

    Currency cells hold ``Decimal`` values rounded to the minor unit.
    Percentage cells hold plain numbers; the ``%`` lives in the header.
    """

    headers: list[str]
    rows: list[list[Any]]
    summary: dict[str, Any]
    report_type: ReportType | None = None
    title: str = ""
    generated_at: datetime = field(default_factory=utc_now)

    def column(self, header: str) -> list[Any]:
        """Return every cell under ``header``."""
        idx = self.headers.index(header)
        return [row[idx] for row in self.rows]

    def row(self, label: Any) -> list[Any] | None:
        """Return the first row whose leading cell equals ``label``."""
        for row in self.rows:
            if row and row[0] == label:
                return row
        return None

    def to_dict(self) -> dict[str, Any]:
        """Output contract: headers, rows, summary and generation time."""
        return {
            "reportType": self.report_type.value if self.report_type else None,
            "title": self.title,
            "headers": list(self.headers),
            "rows": [list(row) for row in self.rows],
            "summary": dict(self.summary),
            "generatedAt": self.generated_at.isoformat(),
        }
