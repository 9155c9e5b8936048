"""Loan, schedule and payment models."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from loan_engine.models.enums import (
    InstallmentStatus,
    LoanStatus,
    PaymentMode,
    PaymentStatus,
)


@dataclass
class Loan:
    """Disbursed loan contract."""

    loan_id: str
    principal: Decimal
    annual_rate: Decimal  # Percent per annum (e.g., 12 for 12%)
    tenure_months: int
    status: LoanStatus
    outstanding_principal: Decimal
    outstanding_interest: Decimal = Decimal("0")
    product_id: str | None = None
    customer_id: str | None = None
    disbursement_date: date | None = None
    current_ltv: Decimal | None = None  # Cached, recomputed by rebalancing runs

    @property
    def outstanding_amount(self) -> Decimal:
        """Total exposure: principal plus accrued interest outstanding."""
        return self.outstanding_principal + self.outstanding_interest

    @property
    def is_active(self) -> bool:
        return self.status == LoanStatus.ACTIVE


@dataclass
class ScheduleEntry:
    """One EMI installment of a loan's amortization schedule."""

    loan_id: str
    month: int  # 1..tenure
    due_date: date | None
    emi_amount: Decimal
    principal_component: Decimal
    interest_component: Decimal
    closing_balance: Decimal
    status: InstallmentStatus = InstallmentStatus.PENDING

    @property
    def is_paid(self) -> bool:
        return self.status == InstallmentStatus.PAID


@dataclass
class Payment:
    """Entry of the append-only payment ledger."""

    payment_id: str
    loan_id: str
    amount: Decimal
    payment_date: date
    mode: PaymentMode
    status: PaymentStatus = PaymentStatus.SUCCESS
