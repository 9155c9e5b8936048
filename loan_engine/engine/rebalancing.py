"""Loan-to-value breach detection and corrective action sizing."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Mapping, Sequence, Union

from loan_engine.config import RebalancingConfig
from loan_engine.engine.money import HUNDRED, ZERO, percent, quantize_money, to_decimal
from loan_engine.exceptions import InvalidParameter
from loan_engine.models.base import Report
from loan_engine.models.collateral import Collateral
from loan_engine.models.enums import RebalancingActionType, ReportType, Urgency
from loan_engine.models.loan import Loan
from loan_engine.models.risk import RebalancingAction, RebalancingNeed

logger = logging.getLogger(__name__)

CollateralInput = Union[Sequence[Collateral], Collateral, Decimal, int, float, str]


def current_ltv(outstanding: Decimal, collateral_value: Decimal) -> Decimal:
    """Outstanding exposure as a percent of collateral value; 0 without collateral."""
    return percent(outstanding, collateral_value)


def urgency_for(
    ltv: Decimal,
    target_ltv: Decimal,
    config: RebalancingConfig | None = None,
) -> Urgency:
    """Grade how far ``ltv`` sits above ``target_ltv``.

    Bands are inclusive-low, exclusive-high: with the default bands an LTV
    below target+5 is LOW, below target+15 MEDIUM, below target+25 HIGH,
    and anything else CRITICAL.
    """
    config = config or RebalancingConfig()
    excess = to_decimal(ltv) - to_decimal(target_ltv)
    if excess < config.medium_band:
        return Urgency.LOW
    if excess < config.high_band:
        return Urgency.MEDIUM
    if excess < config.critical_band:
        return Urgency.HIGH
    return Urgency.CRITICAL


def collateral_value(collateral: CollateralInput | None) -> Decimal:
    """Total current value of pledged collateral.

    Accepts a list of ``Collateral`` records (released or invoked pledges
    are ignored), a single record, or a pre-aggregated value.
    """
    if collateral is None:
        return ZERO
    if isinstance(collateral, Collateral):
        return collateral.current_value if collateral.is_pledged else ZERO
    if isinstance(collateral, (Decimal, int, float, str)):
        return to_decimal(collateral)
    return sum((c.current_value for c in collateral if c.is_pledged), ZERO)


def _suggest_actions(
    shortfall: Decimal,
    collateral_required: Decimal,
    collateral: Decimal,
    target_ltv: Decimal,
) -> list[RebalancingAction]:
    actions = [
        RebalancingAction(
            action_type=RebalancingActionType.TOP_UP,
            description=f"Pledge additional collateral to cover a shortfall of {shortfall:,.2f}",
            amount=shortfall,
            impact=(
                f"Restores LTV to {target_ltv}% "
                f"(about {collateral_required:,.2f} of market value at target LTV)"
            ),
        )
    ]
    if collateral > 0:
        actions.append(
            RebalancingAction(
                action_type=RebalancingActionType.SWITCH,
                description="Switch volatile holdings to lower-risk debt instruments",
                amount=ZERO,
                impact="May increase eligible collateral value",
            )
        )
    actions.append(
        RebalancingAction(
            action_type=RebalancingActionType.PARTIAL_REPAY,
            description=f"Prepay {shortfall:,.2f} of principal",
            amount=shortfall,
            impact=f"Restores LTV to {target_ltv}%",
        )
    )
    return actions


def detect_rebalancing_needs(
    loans: Iterable[Loan],
    collateral_by_loan: Mapping[str, CollateralInput],
    target_ltv: Decimal | int | float | str | None = None,
    *,
    config: RebalancingConfig | None = None,
) -> list[RebalancingNeed]:
    """Find active loans whose exposure exceeds the target LTV ceiling.

    Parameters
    ----------
    loans : Iterable[Loan]
        Loan book; only active loans are analysed.
    collateral_by_loan : Mapping[str, CollateralInput]
        Collateral per loan id. A loan with no entry is analysed with zero
        collateral rather than dropped.
    target_ltv : Decimal | int | float | str | None
        LTV ceiling in percent; ``config.target_ltv`` when omitted.
    config : RebalancingConfig | None
        Urgency bands and default target.

    Returns
    -------
    list[RebalancingNeed]
        Loans with a positive shortfall, most urgent first and, within an
        urgency tier, largest shortfall first.
    """
    config = config or RebalancingConfig()
    target = to_decimal(target_ltv) if target_ltv is not None else config.target_ltv
    if target <= 0:
        raise InvalidParameter(f"Target LTV must be positive: {target}")

    needs: list[RebalancingNeed] = []
    for loan in loans:
        if not loan.is_active:
            continue

        if loan.loan_id not in collateral_by_loan:
            logger.warning(
                "No collateral on record for loan %s; treating value as 0",
                loan.loan_id,
                extra={"loan_id": loan.loan_id, "field": "collateral"},
            )
        value = quantize_money(collateral_value(collateral_by_loan.get(loan.loan_id)))
        outstanding = quantize_money(loan.outstanding_amount)

        shortfall = quantize_money(outstanding - value * target / HUNDRED)
        if shortfall <= 0:
            continue

        ltv = current_ltv(outstanding, value)
        unsecured = value == 0
        # Exposure with nothing pledged against it is the worst case.
        # Bands are graded on the exact ratio, not the rounded display value.
        urgency = (
            Urgency.CRITICAL if unsecured else urgency_for(outstanding / value * HUNDRED, target, config)
        )
        required = quantize_money(outstanding * HUNDRED / target - value)

        needs.append(
            RebalancingNeed(
                loan_id=loan.loan_id,
                customer_id=loan.customer_id,
                current_ltv=ltv,
                target_ltv=target,
                collateral_value=value,
                outstanding_amount=outstanding,
                shortfall=shortfall,
                collateral_required=required,
                urgency=urgency,
                unsecured=unsecured,
                suggested_actions=_suggest_actions(shortfall, required, value, target),
            )
        )

    needs.sort(key=lambda n: (-n.urgency.rank, -n.shortfall))
    logger.info("%d loans breach the %s%% LTV ceiling", len(needs), target)
    return needs


def rebalancing_report(needs: Sequence[RebalancingNeed], loans_checked: int) -> Report:
    """Tabulate rebalancing needs in presentation order."""
    rows = [
        [
            need.loan_id,
            need.outstanding_amount,
            need.collateral_value,
            need.current_ltv,
            need.target_ltv,
            need.shortfall,
            need.urgency.value,
            ", ".join(a.action_type.value for a in need.suggested_actions),
        ]
        for need in needs
    ]
    by_urgency = {u.value: 0 for u in Urgency}
    for need in needs:
        by_urgency[need.urgency.value] += 1

    return Report(
        headers=[
            "Loan",
            "Outstanding",
            "Collateral Value",
            "Current LTV %",
            "Target LTV %",
            "Shortfall",
            "Urgency",
            "Suggested Actions",
        ],
        rows=rows,
        summary={
            "total_loans_checked": loans_checked,
            "loans_at_risk": len(needs),
            "total_shortfall": sum((n.shortfall for n in needs), ZERO),
            "by_urgency": by_urgency,
        },
        report_type=ReportType.REBALANCING,
        title="Collateral Rebalancing",
    )


@dataclass
class Allocation:
    """Exposure carried by one collateral holding."""

    instrument: str
    value: Decimal
    ltv_allowance: Decimal
    allocated_loan: Decimal
    utilization: Decimal  # Percent of the holding's value


@dataclass
class Reallocation:
    allocations: list[Allocation] = field(default_factory=list)
    expected_ltv: Decimal = ZERO
    unallocated: Decimal = ZERO  # Exposure no holding can absorb


def optimal_reallocation(
    collaterals: Sequence[Collateral],
    outstanding: Decimal | int | float | str,
) -> Reallocation:
    """Spread exposure across holdings, most generous LTV allowance first.

    Each holding carries at most ``value * ltv_allowance / 100`` of the
    loan. Whatever cannot be placed is reported as ``unallocated``.
    """
    remaining = quantize_money(outstanding)
    ordered = sorted(collaterals, key=lambda c: c.ltv_allowance, reverse=True)
    result = Reallocation()

    for holding in ordered:
        if remaining <= 0:
            break
        capacity = quantize_money(holding.current_value * holding.ltv_allowance / HUNDRED)
        allocated = min(remaining, capacity)
        result.allocations.append(
            Allocation(
                instrument=holding.instrument,
                value=holding.current_value,
                ltv_allowance=holding.ltv_allowance,
                allocated_loan=allocated,
                utilization=percent(allocated, holding.current_value),
            )
        )
        remaining -= allocated

    total_value = sum((c.current_value for c in collaterals), ZERO)
    result.expected_ltv = percent(quantize_money(outstanding), total_value)
    result.unallocated = max(remaining, ZERO)
    return result
