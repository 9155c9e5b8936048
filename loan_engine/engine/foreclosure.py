"""Foreclosure (early closure) quotes."""

from dataclasses import dataclass
from decimal import Decimal

from loan_engine.engine.amortization import build_schedule, monthly_rate, outstanding_after
from loan_engine.engine.money import HUNDRED, ZERO, percent, quantize_money, to_decimal
from loan_engine.exceptions import InvalidParameter

DAYS_PER_YEAR = Decimal("365")
PENAL_MULTIPLIER = Decimal("2")


@dataclass
class ForeclosureQuote:
    outstanding_principal: Decimal
    outstanding_interest: Decimal
    foreclosure_charge_percent: Decimal
    foreclosure_charges: Decimal
    penal_interest: Decimal
    processing_fee: Decimal
    gst_on_charges: Decimal
    total_payable: Decimal
    remaining_emi_total: Decimal
    savings: Decimal
    savings_percent: Decimal


def foreclosure_quote(
    principal: Decimal | int | float | str,
    annual_rate_percent: Decimal | int | float | str,
    tenure_months: int,
    paid_emis: int,
    *,
    foreclosure_charge_percent: Decimal = Decimal("4"),
    penal_interest_days: int = 0,
    processing_fee: Decimal = Decimal("500"),
    include_gst: bool = True,
    gst_rate: Decimal = Decimal("0.18"),
) -> ForeclosureQuote:
    """Price closing a loan after ``paid_emis`` installments.

    Outstanding principal comes from the exact amortization schedule.
    Interest for the running period is charged for half a month, penal
    interest at twice the daily rate, and GST on the foreclosure charge
    and processing fee. Savings compare the payoff with the EMIs that
    would otherwise remain.
    """
    schedule = build_schedule(principal, annual_rate_percent, tenure_months)
    if not 0 <= paid_emis < len(schedule):
        raise InvalidParameter(
            f"Paid EMIs must be between 0 and {len(schedule) - 1}: {paid_emis}"
        )
    if penal_interest_days < 0:
        raise InvalidParameter(f"Penal interest days cannot be negative: {penal_interest_days}")

    rate = to_decimal(annual_rate_percent)
    remaining = outstanding_after(schedule, paid_emis)
    charge_pct = to_decimal(foreclosure_charge_percent)
    fee = quantize_money(processing_fee)

    interest = quantize_money(remaining * monthly_rate(rate) / 2)
    charges = quantize_money(remaining * charge_pct / HUNDRED)
    daily_rate = rate / DAYS_PER_YEAR / HUNDRED
    penal = quantize_money(remaining * daily_rate * penal_interest_days * PENAL_MULTIPLIER)
    gst = quantize_money((charges + fee) * to_decimal(gst_rate)) if include_gst else ZERO

    total = remaining + interest + charges + penal + fee + gst
    remaining_emis = sum((e.emi_amount for e in schedule[paid_emis:]), ZERO)
    savings = max(ZERO, remaining_emis - total)

    return ForeclosureQuote(
        outstanding_principal=remaining,
        outstanding_interest=interest,
        foreclosure_charge_percent=charge_pct,
        foreclosure_charges=charges,
        penal_interest=penal,
        processing_fee=fee,
        gst_on_charges=gst,
        total_payable=total,
        remaining_emi_total=remaining_emis,
        savings=savings,
        savings_percent=percent(savings, remaining_emis),
    )
