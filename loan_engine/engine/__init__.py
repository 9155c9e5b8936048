"""Loan financial and risk computations."""

from loan_engine.engine.amortization import build_schedule, compute_emi, validate_terms
from loan_engine.engine.classification import bucket_for_dpd, classify, days_past_due
from loan_engine.engine.forecasting import forecast, trailing_efficiency
from loan_engine.engine.liquidity import (
    DEFAULT_BUCKETS,
    ProportionalOutflow,
    ScheduledOutflow,
    TimeBucket,
    build_gap_statement,
)
from loan_engine.engine.portfolio import PortfolioAggregator
from loan_engine.engine.rebalancing import (
    detect_rebalancing_needs,
    optimal_reallocation,
    rebalancing_report,
    urgency_for,
)

__all__ = [
    "DEFAULT_BUCKETS",
    "PortfolioAggregator",
    "ProportionalOutflow",
    "ScheduledOutflow",
    "TimeBucket",
    "bucket_for_dpd",
    "build_gap_statement",
    "build_schedule",
    "classify",
    "compute_emi",
    "days_past_due",
    "detect_rebalancing_needs",
    "forecast",
    "optimal_reallocation",
    "rebalancing_report",
    "trailing_efficiency",
    "urgency_for",
    "validate_terms",
]
