"""Enumeration types for the lending domain."""

from enum import Enum


class LoanStatus(str, Enum):
    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"
    DEFAULTED = "DEFAULTED"
    WRITTEN_OFF = "WRITTEN_OFF"


class InstallmentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    OVERDUE = "OVERDUE"


class PaymentMode(str, Enum):
    NACH = "NACH"
    UPI = "UPI"
    NEFT = "NEFT"
    CHEQUE = "CHEQUE"
    CASH = "CASH"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    REVERSED = "REVERSED"


class PledgeStatus(str, Enum):
    PENDING = "PENDING"
    PLEDGED = "PLEDGED"
    RELEASED = "RELEASED"
    INVOKED = "INVOKED"


class RegulatoryBucket(str, Enum):
    """IRAC asset class, ordered from safest to riskiest."""

    STANDARD = "STANDARD"
    SUB_STANDARD = "SUB_STANDARD"
    DOUBTFUL = "DOUBTFUL"
    LOSS = "LOSS"

    @property
    def severity(self) -> int:
        return _BUCKET_SEVERITY[self]

    @property
    def is_npa(self) -> bool:
        return self is not RegulatoryBucket.STANDARD


_BUCKET_SEVERITY = {
    RegulatoryBucket.STANDARD: 0,
    RegulatoryBucket.SUB_STANDARD: 1,
    RegulatoryBucket.DOUBTFUL: 2,
    RegulatoryBucket.LOSS: 3,
}


class Urgency(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return _URGENCY_RANK[self]


_URGENCY_RANK = {
    Urgency.LOW: 0,
    Urgency.MEDIUM: 1,
    Urgency.HIGH: 2,
    Urgency.CRITICAL: 3,
}


class RebalancingActionType(str, Enum):
    TOP_UP = "TOP_UP"
    SWITCH = "SWITCH"
    PARTIAL_REPAY = "PARTIAL_REPAY"


class ConcentrationRisk(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class LiquidityStatus(str, Enum):
    ADEQUATE = "ADEQUATE"
    ATTENTION_NEEDED = "ATTENTION_NEEDED"


class ComplianceStatus(str, Enum):
    COMPLIANT = "COMPLIANT"
    NON_COMPLIANT = "NON_COMPLIANT"
    REVIEW_NEEDED = "REVIEW_NEEDED"


class ReportType(str, Enum):
    NPA = "NPA"
    SECTOR_EXPOSURE = "SECTOR_EXPOSURE"
    ALM = "ALM"
    PRUDENTIAL_NORMS = "PRUDENTIAL_NORMS"
    REBALANCING = "REBALANCING"
    CASH_FLOW = "CASH_FLOW"
