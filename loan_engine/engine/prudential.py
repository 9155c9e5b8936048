"""Capital adequacy and prudential norms compliance."""

from typing import Iterable

from loan_engine.config import CapitalConfig
from loan_engine.engine.money import ZERO, percent, quantize_money
from loan_engine.models.base import Report
from loan_engine.models.enums import ComplianceStatus, ReportType
from loan_engine.models.loan import Loan


def _status(ok: bool) -> str:
    return (ComplianceStatus.COMPLIANT if ok else ComplianceStatus.NON_COMPLIANT).value


def prudential_norms(loans: Iterable[Loan], config: CapitalConfig | None = None) -> Report:
    """Check CRAR, tier-1 ratio and net owned funds against regulatory minimums.

    Capital is estimated from assets under management using the ratios in
    ``config``; these are assumptions until accounting data is supplied.
    """
    config = config or CapitalConfig()
    aum = sum((loan.outstanding_principal for loan in loans if loan.is_active), ZERO)

    tier_one = quantize_money(aum * config.tier_one_ratio)
    tier_two = quantize_money(aum * config.tier_two_ratio)
    total_capital = tier_one + tier_two
    rwa = quantize_money(aum * config.risk_weight)

    crar = percent(total_capital, rwa)
    tier_one_ratio = percent(tier_one, rwa)

    crar_ok = crar >= config.min_crar
    tier_one_ok = tier_one_ratio >= config.min_tier_one
    nof_ok = total_capital >= config.min_net_owned_funds

    rows = [
        ["Capital Adequacy (CRAR) %", config.min_crar, crar, _status(crar_ok)],
        ["Tier-1 Capital Ratio %", config.min_tier_one, tier_one_ratio, _status(tier_one_ok)],
        ["Net Owned Funds", config.min_net_owned_funds, total_capital, _status(nof_ok)],
    ]

    overall = ComplianceStatus.COMPLIANT if crar_ok and tier_one_ok else ComplianceStatus.REVIEW_NEEDED

    return Report(
        headers=["Parameter", "Regulatory Minimum", "Actual", "Status"],
        rows=rows,
        summary={
            "overall_status": overall.value,
            "assets_under_management": quantize_money(aum),
            "total_capital": total_capital,
            "risk_weighted_assets": rwa,
        },
        report_type=ReportType.PRUDENTIAL_NORMS,
        title="Prudential Norms",
    )
