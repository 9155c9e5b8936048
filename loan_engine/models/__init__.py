"""Domain models for the loan engine."""

from loan_engine.models.base import Report
from loan_engine.models.collateral import Collateral
from loan_engine.models.enums import (
    ComplianceStatus,
    ConcentrationRisk,
    InstallmentStatus,
    LiquidityStatus,
    LoanStatus,
    PaymentMode,
    PaymentStatus,
    PledgeStatus,
    RebalancingActionType,
    RegulatoryBucket,
    ReportType,
    Urgency,
)
from loan_engine.models.loan import Loan, Payment, ScheduleEntry
from loan_engine.models.risk import Classification, RebalancingAction, RebalancingNeed

__all__ = [
    "Classification",
    "Collateral",
    "ComplianceStatus",
    "ConcentrationRisk",
    "InstallmentStatus",
    "LiquidityStatus",
    "Loan",
    "LoanStatus",
    "Payment",
    "PaymentMode",
    "PaymentStatus",
    "PledgeStatus",
    "RebalancingAction",
    "RebalancingActionType",
    "RebalancingNeed",
    "RegulatoryBucket",
    "Report",
    "ReportType",
    "ScheduleEntry",
    "Urgency",
]
