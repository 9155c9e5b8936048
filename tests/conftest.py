"""Pytest configuration and fixtures."""

from datetime import date, timedelta
from decimal import Decimal
from typing import Callable

import pytest

from loan_engine.models import InstallmentStatus, Loan, LoanStatus, ScheduleEntry


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def today() -> date:
    """Reporting date used across engine tests."""
    return date(2024, 6, 30)


@pytest.fixture
def sample_loan_id() -> str:
    """Sample loan ID."""
    return "loan-test-001"


@pytest.fixture
def make_loan() -> Callable[..., Loan]:
    """Factory for active loans with a given outstanding principal."""

    def _make(
        loan_id: str,
        outstanding: str | int = "100000",
        product_id: str | None = "PL",
        status: LoanStatus = LoanStatus.ACTIVE,
        interest: str | int = "0",
    ) -> Loan:
        return Loan(
            loan_id=loan_id,
            principal=Decimal("100000"),
            annual_rate=Decimal("12"),
            tenure_months=12,
            status=status,
            outstanding_principal=Decimal(str(outstanding)),
            outstanding_interest=Decimal(str(interest)),
            product_id=product_id,
            customer_id=f"cust-{loan_id}",
        )

    return _make


@pytest.fixture
def make_entry(today: date) -> Callable[..., ScheduleEntry]:
    """Factory for schedule entries due ``offset`` days from ``today``."""

    def _make(
        loan_id: str,
        offset: int,
        amount: str | int = "1000",
        status: InstallmentStatus = InstallmentStatus.PENDING,
        month: int = 1,
    ) -> ScheduleEntry:
        return ScheduleEntry(
            loan_id=loan_id,
            month=month,
            due_date=today + timedelta(days=offset),
            emi_amount=Decimal(str(amount)),
            principal_component=Decimal(str(amount)),
            interest_component=Decimal("0"),
            closing_balance=Decimal("0"),
            status=status,
        )

    return _make


@pytest.fixture
def loan_feed() -> list[dict]:
    """Loan records as served by the data-access layer."""
    return [
        {
            "id": "L1",
            "principal": "500000",
            "annualRate": "12",
            "tenureMonths": 24,
            "outstandingPrincipal": "300000",
            "status": "ACTIVE",
            "productId": "LAS",
            "customerId": "C1",
            "disbursementDate": "2023-06-01",
        },
        {
            "id": "L2",
            "principal": "200000",
            "annualRate": 14.5,
            "tenureMonths": 12,
            "outstandingPrincipal": "150000",
            "outstandingInterest": "2000",
            "status": "ACTIVE",
            "productId": "PL",
            "customerId": "C2",
        },
        {
            "id": "L3",
            "principal": "100000",
            "annualRate": "10",
            "tenureMonths": 12,
            "outstandingPrincipal": "0",
            "status": "CLOSED",
            "productId": "PL",
        },
    ]


@pytest.fixture
def schedule_feed() -> list[dict]:
    """Schedule records for the loans in ``loan_feed``."""
    return [
        {"loanId": "L1", "month": 2, "dueDate": "2024-07-15", "emiAmount": "23536.74", "status": "PENDING"},
        {"loanId": "L1", "month": 1, "dueDate": "2024-06-15", "emiAmount": "23536.74", "status": "PAID"},
        {"loanId": "L2", "month": 1, "dueDate": "2024-02-01", "emiAmount": "18000.00", "status": "OVERDUE"},
        {"loanId": "L2", "month": 2, "dueDate": "2024-08-01", "emiAmount": "18000.00", "status": "PENDING"},
    ]


@pytest.fixture
def collateral_feed() -> list[dict]:
    """Collateral records for the loans in ``loan_feed``."""
    return [
        {"loanId": "L1", "currentValue": "350000", "pledgeStatus": "PLEDGED", "instrument": "Equity Fund"},
        {"loanId": "L1", "currentValue": "50000", "pledgeStatus": "RELEASED", "instrument": "Debt Fund"},
    ]
