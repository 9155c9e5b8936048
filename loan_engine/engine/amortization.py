"""EMI computation and amortization schedules.

Money is carried as ``Decimal`` and rounded half-up to the minor unit at
every period boundary, so the schedule reproduces what a bank statement
shows: constant EMI, with the final installment absorbing whatever few
minor units of rounding drift accumulated over the term.
"""

import calendar
from datetime import date
from decimal import Decimal, InvalidOperation

from loan_engine.engine.money import CENT, HUNDRED, ZERO, quantize_money, to_decimal
from loan_engine.exceptions import InvalidLoanTerms
from loan_engine.models.enums import InstallmentStatus
from loan_engine.models.loan import ScheduleEntry

MONTHS_PER_YEAR = Decimal("12")


def _finite_decimal(field: str, value: object, loan_id: str | None) -> Decimal:
    try:
        number = to_decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidLoanTerms(field, value, loan_id) from None
    if not number.is_finite():
        raise InvalidLoanTerms(field, value, loan_id)
    return number


def validate_terms(
    principal: Decimal | int | float | str,
    annual_rate_percent: Decimal | int | float | str,
    tenure_months: int,
    loan_id: str | None = None,
) -> tuple[Decimal, Decimal, int]:
    """Check loan terms and return them normalised.

    Raises
    ------
    InvalidLoanTerms
        If principal or rate is not a finite number, principal or tenure
        is not positive, or the rate is negative.
    """
    principal = _finite_decimal("principal", principal, loan_id)
    rate = _finite_decimal("annual_rate", annual_rate_percent, loan_id)

    if principal <= 0:
        raise InvalidLoanTerms("principal", principal, loan_id)
    if not isinstance(tenure_months, int) or isinstance(tenure_months, bool) or tenure_months <= 0:
        raise InvalidLoanTerms("tenure_months", tenure_months, loan_id)
    if rate < 0:
        raise InvalidLoanTerms("annual_rate", rate, loan_id)

    return principal, rate, tenure_months


def monthly_rate(annual_rate_percent: Decimal | int | float | str) -> Decimal:
    """Convert a percent-per-annum rate to a monthly fraction."""
    return to_decimal(annual_rate_percent) / MONTHS_PER_YEAR / HUNDRED


def compute_emi(
    principal: Decimal | int | float | str,
    annual_rate_percent: Decimal | int | float | str,
    tenure_months: int,
) -> Decimal:
    """Compute the equated monthly installment.

    Parameters
    ----------
    principal : Decimal | int | float | str
        Amount disbursed.
    annual_rate_percent : Decimal | int | float | str
        Nominal annual rate in percent (12 means 12% p.a.).
    tenure_months : int
        Number of monthly installments.

    Returns
    -------
    Decimal
        EMI rounded half-up to the minor unit. A zero rate gives
        straight-line repayment, ``principal / tenure`` rounded the same
        way, so 1000 over 3 months is 333.33 and the last installment of
        the schedule carries the remainder (333.34).
    """
    principal, rate, n = validate_terms(principal, annual_rate_percent, tenure_months)
    r = monthly_rate(rate)

    if r == 0:
        return quantize_money(principal / n)

    growth = (1 + r) ** n
    return quantize_money(principal * r * growth / (growth - 1))


def add_months(start: date, months: int) -> date:
    """Shift ``start`` by calendar months, clamping to the month's last day."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def build_schedule(
    principal: Decimal | int | float | str,
    annual_rate_percent: Decimal | int | float | str,
    tenure_months: int,
    *,
    loan_id: str = "",
    disbursement_date: date | None = None,
) -> list[ScheduleEntry]:
    """Build the month-by-month amortization schedule.

    Each period charges interest on the opening balance and applies the
    rest of the EMI to principal. The last period repays whatever balance
    remains, so its EMI may differ from the nominal one by a few minor
    units and the closing balance is exactly zero.
    """
    principal, rate, n = validate_terms(principal, annual_rate_percent, tenure_months, loan_id or None)
    emi = compute_emi(principal, rate, n)
    r = monthly_rate(rate)

    entries: list[ScheduleEntry] = []
    balance = quantize_money(principal)

    for month in range(1, n + 1):
        interest = quantize_money(balance * r)
        if month == n:
            principal_part = balance
        else:
            # Tiny straight-line loans can reach zero before the last period
            principal_part = max(ZERO.quantize(CENT), min(emi - interest, balance))
        payment = principal_part + interest
        balance = max(ZERO.quantize(CENT), balance - principal_part)

        entries.append(
            ScheduleEntry(
                loan_id=loan_id,
                month=month,
                due_date=add_months(disbursement_date, month) if disbursement_date else None,
                emi_amount=payment,
                principal_component=principal_part,
                interest_component=interest,
                closing_balance=balance,
                status=InstallmentStatus.PENDING,
            )
        )

    return entries


def schedule_totals(entries: list[ScheduleEntry]) -> dict[str, Decimal]:
    """Sum principal, interest and total payment over a schedule."""
    total_principal = sum((e.principal_component for e in entries), ZERO)
    total_interest = sum((e.interest_component for e in entries), ZERO)
    return {
        "total_principal": total_principal,
        "total_interest": total_interest,
        "total_payment": total_principal + total_interest,
    }


def outstanding_after(entries: list[ScheduleEntry], paid_count: int) -> Decimal:
    """Principal still owed once the first ``paid_count`` installments are paid."""
    if paid_count <= 0:
        return entries[0].closing_balance + entries[0].principal_component if entries else ZERO
    if paid_count >= len(entries):
        return ZERO.quantize(CENT)
    return entries[paid_count - 1].closing_balance
