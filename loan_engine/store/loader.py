"""Build a snapshot from the external record feeds.

Feeds arrive as dictionaries with camelCase keys, as served by the
data-access layer::

    loans:       {id, principal, annualRate, tenureMonths, outstandingPrincipal,
                  outstandingInterest, status, productId}
    schedule:    {loanId, month, dueDate, emiAmount, status}
    collaterals: {loanId, currentValue, pledgeStatus}
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Mapping, TypeVar

from loan_engine.engine.amortization import validate_terms
from loan_engine.engine.money import ZERO, to_decimal
from loan_engine.exceptions import InvalidLoanTerms, InvalidParameter, MissingReferenceData
from loan_engine.models.collateral import Collateral
from loan_engine.models.enums import (
    InstallmentStatus,
    LoanStatus,
    PaymentMode,
    PaymentStatus,
    PledgeStatus,
)
from loan_engine.models.loan import Loan, Payment, ScheduleEntry
from loan_engine.store.snapshot import PortfolioSnapshot

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


def _require(record: Mapping[str, Any], key: str, context: str) -> Any:
    value = record.get(key)
    if value is None:
        raise MissingReferenceData(f"{context} is missing '{key}'")
    return value


def _money(record: Mapping[str, Any], key: str, default: Decimal | None = None) -> Decimal:
    value = record.get(key)
    if value is None:
        return default if default is not None else ZERO
    return to_decimal(value)


def _date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _enum(enum_type: type[E], value: Any, context: str) -> E:
    try:
        return enum_type(str(value).upper())
    except ValueError:
        raise InvalidParameter(f"{context}: unknown {enum_type.__name__} {value!r}") from None


def parse_loan(record: Mapping[str, Any]) -> Loan:
    """Parse one loan feed record, rejecting invalid terms."""
    loan_id = str(_require(record, "id", "Loan record"))
    context = f"Loan {loan_id}"
    raw_tenure = _require(record, "tenureMonths", context)
    try:
        tenure_months = int(raw_tenure)
    except (TypeError, ValueError):
        raise InvalidLoanTerms("tenure_months", raw_tenure, loan_id) from None
    principal, rate, tenure = validate_terms(
        _require(record, "principal", context),
        _require(record, "annualRate", context),
        tenure_months,
        loan_id,
    )
    return Loan(
        loan_id=loan_id,
        principal=principal,
        annual_rate=rate,
        tenure_months=tenure,
        status=_enum(LoanStatus, _require(record, "status", context), context),
        outstanding_principal=_money(record, "outstandingPrincipal", principal),
        outstanding_interest=_money(record, "outstandingInterest"),
        product_id=record.get("productId") or None,
        customer_id=record.get("customerId") or None,
        disbursement_date=_date(record.get("disbursementDate")),
        current_ltv=to_decimal(record["currentLtv"]) if record.get("currentLtv") is not None else None,
    )


def parse_schedule_entry(record: Mapping[str, Any]) -> ScheduleEntry:
    """Parse one schedule feed record."""
    loan_id = str(_require(record, "loanId", "Schedule record"))
    context = f"Schedule entry of loan {loan_id}"
    return ScheduleEntry(
        loan_id=loan_id,
        month=int(_require(record, "month", context)),
        due_date=_date(_require(record, "dueDate", context)),
        emi_amount=to_decimal(_require(record, "emiAmount", context)),
        principal_component=_money(record, "principalAmount"),
        interest_component=_money(record, "interestAmount"),
        closing_balance=_money(record, "closingBalance"),
        status=_enum(InstallmentStatus, record.get("status", "PENDING"), context),
    )


def parse_collateral(record: Mapping[str, Any], index: int = 0) -> Collateral:
    """Parse one collateral feed record."""
    loan_id = str(_require(record, "loanId", "Collateral record"))
    context = f"Collateral of loan {loan_id}"
    return Collateral(
        collateral_id=str(record.get("id") or f"{loan_id}-col-{index}"),
        loan_id=loan_id,
        current_value=to_decimal(_require(record, "currentValue", context)),
        pledge_status=_enum(PledgeStatus, record.get("pledgeStatus", "PLEDGED"), context),
        customer_id=record.get("customerId") or None,
        instrument=str(record.get("instrument", "")),
        units=_money(record, "units"),
        purchase_value=_money(record, "purchaseValue"),
        ltv_allowance=_money(record, "ltvAllowance", Decimal("50")),
    )


def parse_payment(record: Mapping[str, Any]) -> Payment:
    """Parse one payment ledger record."""
    loan_id = str(_require(record, "loanId", "Payment record"))
    context = f"Payment of loan {loan_id}"
    return Payment(
        payment_id=str(_require(record, "id", context)),
        loan_id=loan_id,
        amount=to_decimal(_require(record, "amount", context)),
        payment_date=_date(_require(record, "date", context)),
        mode=_enum(PaymentMode, record.get("mode", "NACH"), context),
        status=_enum(PaymentStatus, record.get("status", "SUCCESS"), context),
    )


def load_snapshot(
    loans: Iterable[Mapping[str, Any]],
    schedule: Iterable[Mapping[str, Any]] = (),
    collaterals: Iterable[Mapping[str, Any]] = (),
    payments: Iterable[Mapping[str, Any]] = (),
    products: Mapping[str, str] | None = None,
) -> PortfolioSnapshot:
    """Parse all feeds into a :class:`PortfolioSnapshot`.

    Raises
    ------
    InvalidLoanTerms
        If a loan record has non-positive principal or tenure, or a
        negative rate.
    ReferentialIntegrityError
        If a schedule, collateral or payment row names an unknown loan.
    """
    snapshot = PortfolioSnapshot()
    for product_id, name in (products or {}).items():
        snapshot.add_product(product_id, name)

    for record in loans:
        snapshot.add_loan(parse_loan(record))
    for record in schedule:
        snapshot.add_schedule_entry(parse_schedule_entry(record))
    for index, record in enumerate(collaterals):
        snapshot.add_collateral(parse_collateral(record, index))
    for record in payments:
        snapshot.add_payment(parse_payment(record))

    logger.info("Loaded snapshot: %s", snapshot.summary())
    return snapshot
