"""Monthly collection forecast from scheduled EMI demand."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Collection, Iterable, Mapping

from loan_engine.engine.amortization import add_months
from loan_engine.engine.money import ZERO, quantize_money, to_decimal
from loan_engine.exceptions import InvalidParameter
from loan_engine.models.base import Report
from loan_engine.models.enums import InstallmentStatus, ReportType
from loan_engine.models.loan import ScheduleEntry

logger = logging.getLogger(__name__)

# Collection dips around monsoon and the festival season (month -> factor)
FESTIVAL_SEASONALITY: dict[int, Decimal] = {
    1: Decimal("0.98"),
    2: Decimal("1.00"),
    3: Decimal("1.02"),
    4: Decimal("0.97"),
    5: Decimal("1.00"),
    6: Decimal("1.00"),
    7: Decimal("0.95"),
    8: Decimal("0.93"),
    9: Decimal("0.92"),
    10: Decimal("0.88"),
    11: Decimal("0.95"),
    12: Decimal("0.98"),
}


def _check_efficiency(value: Decimal | float | str) -> Decimal:
    efficiency = to_decimal(value)
    if not ZERO < efficiency <= 1:
        raise InvalidParameter(f"Collection efficiency must be in (0, 1]: {efficiency}")
    return efficiency


def trailing_efficiency(
    entries: Iterable[ScheduleEntry],
    today: date,
    lookback_months: int = 6,
    default: Decimal = Decimal("0.95"),
) -> Decimal:
    """Share of EMI value paid among installments due in the trailing window.

    Callers use this to derive the efficiency scalar passed to
    :func:`forecast`; the forecast itself never recomputes it. Returns
    ``default`` when nothing fell due in the window.
    """
    window_start = add_months(today, -lookback_months)
    due = ZERO
    paid = ZERO
    for entry in entries:
        if entry.due_date is None or not window_start <= entry.due_date < today:
            continue
        due += entry.emi_amount
        if entry.is_paid:
            paid += entry.emi_amount

    if due == 0:
        return default
    return (paid / due).quantize(Decimal("0.0001"))


def forecast(
    today: date,
    months: int,
    schedule_snapshot: Iterable[ScheduleEntry],
    historical_efficiency: Decimal | float | str,
    *,
    seasonality: Mapping[int, Decimal] | None = None,
    active_loan_ids: Collection[str] | None = None,
) -> Report:
    """Project collections for the next ``months`` calendar months.

    Parameters
    ----------
    today : date
        Reporting date; the first projected month is the month of ``today``.
    months : int
        Number of calendar months to project.
    schedule_snapshot : Iterable[ScheduleEntry]
        Schedule entries across the book; PENDING installments form the
        expected demand.
    historical_efficiency : Decimal | float | str
        Share of demand expected to be collected, in (0, 1].
    seasonality : Mapping[int, Decimal] | None
        Optional calendar-month multiplier applied on top of efficiency.
    active_loan_ids : Collection[str] | None
        When given, demand from other loans is ignored.

    Returns
    -------
    Report
        One row per month; the summary echoes the efficiency and totals.
    """
    if months <= 0:
        raise InvalidParameter(f"Forecast horizon must be positive: {months}")
    efficiency = _check_efficiency(historical_efficiency)

    first = today.replace(day=1)
    month_starts = [add_months(first, i) for i in range(months)]
    keys = [(d.year, d.month) for d in month_starts]
    demand = {key: ZERO for key in keys}
    loans_due: dict[tuple[int, int], set[str]] = {key: set() for key in keys}

    for entry in schedule_snapshot:
        if entry.status != InstallmentStatus.PENDING or entry.due_date is None:
            continue
        if active_loan_ids is not None and entry.loan_id not in active_loan_ids:
            continue
        key = (entry.due_date.year, entry.due_date.month)
        if key in demand:
            demand[key] += entry.emi_amount
            loans_due[key].add(entry.loan_id)

    rows = []
    total_expected = ZERO
    total_projected = ZERO
    for start, key in zip(month_starts, keys):
        expected = quantize_money(demand[key])
        factor = seasonality.get(start.month, Decimal("1")) if seasonality else Decimal("1")
        projected = quantize_money(expected * efficiency * factor)
        loan_count = len(loans_due[key])
        avg_ticket = quantize_money(expected / loan_count) if loan_count else ZERO
        rows.append(
            [
                start.strftime("%Y-%m"),
                start.strftime("%b %Y"),
                expected,
                projected,
                loan_count,
                avg_ticket,
            ]
        )
        total_expected += expected
        total_projected += projected

    logger.debug("Forecast %d months from %s at efficiency %s", months, first, efficiency)

    return Report(
        headers=["Month", "Month Name", "Expected", "Projected", "Loan Count", "Avg Ticket"],
        rows=rows,
        summary={
            "efficiency": efficiency,
            "total_expected": total_expected,
            "total_projected": total_projected,
            "shortfall": total_expected - total_projected,
        },
        report_type=ReportType.CASH_FLOW,
        title="Cash Flow Forecast",
    )
