"""Structural liquidity (ALM) gap statement."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Mapping, Protocol

from loan_engine.engine.money import ZERO, quantize_money, to_decimal
from loan_engine.exceptions import InvalidParameter
from loan_engine.models.base import Report
from loan_engine.models.enums import InstallmentStatus, LiquidityStatus, ReportType
from loan_engine.models.loan import ScheduleEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimeBucket:
    """Inclusive window of day offsets from the reporting date."""

    label: str
    start_day: int
    end_day: int

    def contains(self, offset: int) -> bool:
        return self.start_day <= offset <= self.end_day


DEFAULT_BUCKETS: tuple[TimeBucket, ...] = (
    TimeBucket("0-30 Days", 0, 30),
    TimeBucket("31-90 Days", 31, 90),
    TimeBucket("91-180 Days", 91, 180),
    TimeBucket("181-365 Days", 181, 365),
    TimeBucket("1-3 Years", 366, 1095),
)


def validate_buckets(buckets: Iterable[TimeBucket]) -> tuple[TimeBucket, ...]:
    """Check buckets start at day 0 and tile the horizon without gaps or overlaps."""
    buckets = tuple(buckets)
    if not buckets:
        raise InvalidParameter("At least one time bucket is required")
    expected_start = 0
    for bucket in buckets:
        if bucket.start_day != expected_start or bucket.end_day < bucket.start_day:
            raise InvalidParameter(
                f"Bucket {bucket.label!r} must start at day {expected_start} "
                f"and end on or after it (got {bucket.start_day}-{bucket.end_day})"
            )
        expected_start = bucket.end_day + 1
    return buckets


class OutflowModel(Protocol):
    """Source of modelled outflows for each time bucket."""

    def outflow(self, bucket: TimeBucket, inflow: Decimal) -> Decimal: ...

    def describe(self) -> str: ...


@dataclass(frozen=True)
class ProportionalOutflow:
    """Assume outflows are a fixed fraction of the same bucket's inflows.

    This is a placeholder assumption, not a liability-side figure.
    """

    ratio: Decimal = Decimal("0.70")

    def __post_init__(self) -> None:
        if self.ratio < 0:
            raise InvalidParameter(f"Outflow ratio cannot be negative: {self.ratio}")

    def outflow(self, bucket: TimeBucket, inflow: Decimal) -> Decimal:
        return quantize_money(inflow * self.ratio)

    def describe(self) -> str:
        return f"proportional: {self.ratio} x inflow (assumption)"


@dataclass(frozen=True)
class ScheduledOutflow:
    """Outflows supplied per bucket label from liability data."""

    amounts: Mapping[str, Decimal]

    def outflow(self, bucket: TimeBucket, inflow: Decimal) -> Decimal:
        return quantize_money(self.amounts.get(bucket.label, ZERO))

    def describe(self) -> str:
        return "scheduled liabilities"


def build_gap_statement(
    today: date,
    pending_emis: Iterable[ScheduleEntry],
    *,
    outflow_model: OutflowModel | None = None,
    buckets: Iterable[TimeBucket] = DEFAULT_BUCKETS,
) -> Report:
    """Bucket expected EMI inflows and compute the cumulative liquidity gap.

    Parameters
    ----------
    today : date
        Reporting date; bucket windows are day offsets from it.
    pending_emis : Iterable[ScheduleEntry]
        Schedule entries. Only PENDING entries with a due date inside a
        window contribute inflow; each lands in at most one bucket.
    outflow_model : OutflowModel | None
        Outflow assumption, ``ProportionalOutflow()`` when omitted.
    buckets : Iterable[TimeBucket]
        Contiguous time windows in chronological order.

    Returns
    -------
    Report
        Inflow, outflow, gap and cumulative gap per bucket. The book is
        ADEQUATE when the final cumulative gap is non-negative.
    """
    buckets = validate_buckets(buckets)
    model = outflow_model or ProportionalOutflow()

    inflows = {bucket.label: ZERO for bucket in buckets}
    skipped = 0
    for entry in pending_emis:
        if entry.status != InstallmentStatus.PENDING or entry.due_date is None:
            continue
        offset = (entry.due_date - today).days
        for bucket in buckets:
            if bucket.contains(offset):
                inflows[bucket.label] += to_decimal(entry.emi_amount)
                break
        else:
            skipped += 1

    if skipped:
        logger.debug("%d pending EMIs fall outside the ALM horizon", skipped)

    rows = []
    cumulative = ZERO
    total_inflow = ZERO
    total_outflow = ZERO
    for bucket in buckets:
        inflow = quantize_money(inflows[bucket.label])
        outflow = quantize_money(model.outflow(bucket, inflow))
        gap = inflow - outflow
        cumulative += gap
        total_inflow += inflow
        total_outflow += outflow
        rows.append([bucket.label, inflow, outflow, gap, cumulative])

    status = LiquidityStatus.ADEQUATE if cumulative >= 0 else LiquidityStatus.ATTENTION_NEEDED

    return Report(
        headers=["Time Bucket", "Inflows", "Outflows", "Gap", "Cumulative Gap"],
        rows=rows,
        summary={
            "liquidity_status": status.value,
            "total_inflows": total_inflow,
            "total_outflows": total_outflow,
            "cumulative_gap": cumulative,
            "outflow_model": model.describe(),
        },
        report_type=ReportType.ALM,
        title="Asset Liability Mismatch",
    )
