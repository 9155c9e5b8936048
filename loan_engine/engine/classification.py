"""Days-past-due and IRAC asset classification for a single loan."""

from datetime import date
from typing import Iterable

from loan_engine.config import AssetClassificationConfig
from loan_engine.models.enums import RegulatoryBucket
from loan_engine.models.loan import ScheduleEntry
from loan_engine.models.risk import Classification

DEFAULT_THRESHOLDS = AssetClassificationConfig()


def oldest_unpaid(entries: Iterable[ScheduleEntry]) -> ScheduleEntry | None:
    """Return the earliest-due installment that is not paid.

    Entries without a due date cannot be overdue and are skipped.
    """
    unpaid = [e for e in entries if not e.is_paid and e.due_date is not None]
    if not unpaid:
        return None
    return min(unpaid, key=lambda e: (e.due_date, e.month))


def days_past_due(today: date, entries: Iterable[ScheduleEntry]) -> int:
    """Whole days the oldest unpaid installment is overdue (0 if none).

    Installments not yet due give a zero or negative difference, which is
    reported as is; callers treat anything below the first threshold as
    standard.
    """
    entry = oldest_unpaid(entries)
    if entry is None:
        return 0
    return (today - entry.due_date).days


def bucket_for_dpd(
    dpd: int,
    thresholds: AssetClassificationConfig = DEFAULT_THRESHOLDS,
) -> RegulatoryBucket:
    """Map days past due to a regulatory bucket.

    Boundaries are half-open: with the defaults, ``< 90`` is STANDARD,
    ``[90, 365)`` SUB_STANDARD, ``[365, 730)`` DOUBTFUL and ``>= 730`` LOSS.
    """
    if dpd < thresholds.sub_standard_from:
        return RegulatoryBucket.STANDARD
    if dpd < thresholds.doubtful_from:
        return RegulatoryBucket.SUB_STANDARD
    if dpd < thresholds.loss_from:
        return RegulatoryBucket.DOUBTFUL
    return RegulatoryBucket.LOSS


def classify(
    today: date,
    entries: Iterable[ScheduleEntry],
    *,
    loan_id: str | None = None,
    thresholds: AssetClassificationConfig | None = None,
) -> Classification:
    """Classify one loan from its schedule as of ``today``.

    Parameters
    ----------
    today : date
        Reporting date.
    entries : Iterable[ScheduleEntry]
        The loan's schedule with current installment statuses.
    loan_id : str | None
        Carried into the result for reporting.
    thresholds : AssetClassificationConfig | None
        DPD boundaries, IRAC defaults when omitted.

    Returns
    -------
    Classification
        DPD (never negative) and bucket.
    """
    dpd = max(0, days_past_due(today, entries))
    return Classification(
        dpd=dpd,
        bucket=bucket_for_dpd(dpd, thresholds or DEFAULT_THRESHOLDS),
        loan_id=loan_id,
    )
