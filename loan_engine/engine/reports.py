"""Regulatory report dispatch over a portfolio snapshot."""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable

from loan_engine.config import EngineConfig
from loan_engine.engine.forecasting import forecast
from loan_engine.engine.liquidity import ProportionalOutflow, build_gap_statement
from loan_engine.engine.portfolio import PortfolioAggregator
from loan_engine.engine.prudential import prudential_norms
from loan_engine.engine.rebalancing import detect_rebalancing_needs, rebalancing_report
from loan_engine.exceptions import UnknownReportType
from loan_engine.models.base import Report
from loan_engine.models.enums import ReportType
from loan_engine.store.snapshot import PortfolioSnapshot

logger = logging.getLogger(__name__)

ReportBuilder = Callable[[PortfolioSnapshot, date, EngineConfig], Report]


def _npa(snapshot: PortfolioSnapshot, today: date, config: EngineConfig) -> Report:
    aggregator = PortfolioAggregator(config.classification, config.concentration)
    return aggregator.classify_portfolio(snapshot.loans.values(), snapshot.schedules_by_loan(), today)


def _sector_exposure(snapshot: PortfolioSnapshot, today: date, config: EngineConfig) -> Report:
    aggregator = PortfolioAggregator(config.classification, config.concentration)
    return aggregator.sector_exposure(snapshot.loans.values(), snapshot.products or None)


def _alm(snapshot: PortfolioSnapshot, today: date, config: EngineConfig) -> Report:
    return build_gap_statement(
        today,
        snapshot.pending_entries(),
        outflow_model=ProportionalOutflow(config.liquidity.outflow_ratio),
    )


def _prudential(snapshot: PortfolioSnapshot, today: date, config: EngineConfig) -> Report:
    return prudential_norms(snapshot.loans.values(), config.capital)


def _rebalancing(snapshot: PortfolioSnapshot, today: date, config: EngineConfig) -> Report:
    active = snapshot.active_loans()
    collateral = {loan.loan_id: snapshot.get_loan_collaterals(loan.loan_id) for loan in active}
    needs = detect_rebalancing_needs(active, collateral, config=config.rebalancing)
    return rebalancing_report(needs, loans_checked=len(active))


def _cash_flow(snapshot: PortfolioSnapshot, today: date, config: EngineConfig) -> Report:
    return forecast(
        today,
        config.forecast.months,
        snapshot.pending_entries(),
        config.forecast.collection_efficiency,
        seasonality=config.forecast.seasonality,
        active_loan_ids={loan.loan_id for loan in snapshot.active_loans()},
    )


REPORT_BUILDERS: dict[ReportType, ReportBuilder] = {
    ReportType.NPA: _npa,
    ReportType.SECTOR_EXPOSURE: _sector_exposure,
    ReportType.ALM: _alm,
    ReportType.PRUDENTIAL_NORMS: _prudential,
    ReportType.REBALANCING: _rebalancing,
    ReportType.CASH_FLOW: _cash_flow,
}


def generate_regulatory_report(
    report_type: ReportType | str,
    snapshot: PortfolioSnapshot,
    today: date,
    config: EngineConfig | None = None,
) -> Report:
    """Generate one report from a snapshot.

    Parameters
    ----------
    report_type : ReportType | str
        Report to build, e.g. ``"NPA"`` or ``ReportType.ALM``.
    snapshot : PortfolioSnapshot
        Records to report on; not modified.
    today : date
        Reporting date.
    config : EngineConfig | None
        Policy parameters, defaults when omitted.

    Raises
    ------
    UnknownReportType
        If no builder exists for ``report_type``.
    """
    try:
        kind = report_type if isinstance(report_type, ReportType) else ReportType(report_type.upper())
    except (ValueError, AttributeError):
        raise UnknownReportType(f"Unknown report type: {report_type}") from None

    config = config or EngineConfig()
    logger.info("Generating %s report as of %s", kind.value, today.isoformat(), extra={"report_type": kind.value})
    return REPORT_BUILDERS[kind](snapshot, today, config)


def generate_all(
    snapshot: PortfolioSnapshot,
    today: date,
    config: EngineConfig | None = None,
) -> dict[ReportType, Report]:
    """Generate every report type over the same snapshot and date."""
    config = config or EngineConfig()
    return {kind: generate_regulatory_report(kind, snapshot, today, config) for kind in ReportType}
