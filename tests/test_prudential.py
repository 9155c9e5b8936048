"""Tests for prudential norms and foreclosure quotes."""

from decimal import Decimal
from typing import Callable

import pytest

from loan_engine.config import CapitalConfig
from loan_engine.engine.amortization import build_schedule
from loan_engine.engine.foreclosure import foreclosure_quote
from loan_engine.engine.money import quantize_money
from loan_engine.engine.prudential import prudential_norms
from loan_engine.exceptions import InvalidParameter
from loan_engine.models import ComplianceStatus, Loan, LoanStatus, ReportType


class TestPrudentialNorms:
    """Tests for prudential_norms."""

    def test_compliant_book(self, make_loan: Callable[..., Loan]) -> None:
        """Test a 20 crore book at default capital ratios."""
        report = prudential_norms([make_loan("L1", outstanding="200000000")])

        assert report.report_type == ReportType.PRUDENTIAL_NORMS
        assert report.row("Capital Adequacy (CRAR) %")[2] == Decimal("20.00")
        assert report.row("Tier-1 Capital Ratio %")[2] == Decimal("15.00")
        assert report.row("Net Owned Funds")[2] == Decimal("40000000.00")
        assert report.column("Status") == [ComplianceStatus.COMPLIANT.value] * 3
        assert report.summary["overall_status"] == ComplianceStatus.COMPLIANT.value
        assert report.summary["assets_under_management"] == Decimal("200000000.00")

    def test_small_book_fails_net_owned_funds(self, make_loan: Callable[..., Loan]) -> None:
        report = prudential_norms([make_loan("L1", outstanding="1000000")])

        assert report.row("Net Owned Funds")[3] == ComplianceStatus.NON_COMPLIANT.value

    def test_thin_capital_needs_review(self, make_loan: Callable[..., Loan]) -> None:
        config = CapitalConfig(tier_one_ratio=Decimal("0.05"), tier_two_ratio=Decimal("0.05"))
        report = prudential_norms([make_loan("L1", outstanding="500000000")], config)

        assert report.row("Capital Adequacy (CRAR) %")[3] == ComplianceStatus.NON_COMPLIANT.value
        assert report.summary["overall_status"] == ComplianceStatus.REVIEW_NEEDED.value

    def test_closed_loans_excluded(self, make_loan: Callable[..., Loan]) -> None:
        report = prudential_norms([make_loan("L1", outstanding="1000", status=LoanStatus.CLOSED)])

        assert report.summary["assets_under_management"] == 0

    def test_empty_book_has_no_division_error(self) -> None:
        report = prudential_norms([])

        assert report.row("Capital Adequacy (CRAR) %")[2] == 0
        assert report.summary["overall_status"] == ComplianceStatus.REVIEW_NEEDED.value


class TestForeclosureQuote:
    """Tests for foreclosure_quote."""

    def test_breakdown(self) -> None:
        schedule = build_schedule(100000, 12, 12)
        quote = foreclosure_quote(100000, 12, 12, 6)

        remaining = schedule[5].closing_balance
        assert quote.outstanding_principal == remaining
        assert quote.outstanding_interest == quantize_money(remaining * Decimal("0.005"))
        assert quote.foreclosure_charges == quantize_money(remaining * Decimal("0.04"))
        assert quote.processing_fee == Decimal("500.00")
        assert quote.gst_on_charges == quantize_money((quote.foreclosure_charges + 500) * Decimal("0.18"))
        assert quote.total_payable == (
            quote.outstanding_principal
            + quote.outstanding_interest
            + quote.foreclosure_charges
            + quote.penal_interest
            + quote.processing_fee
            + quote.gst_on_charges
        )
        assert quote.remaining_emi_total == sum(e.emi_amount for e in schedule[6:])

    def test_before_first_emi(self) -> None:
        quote = foreclosure_quote(100000, 12, 12, 0)

        assert quote.outstanding_principal == Decimal("100000.00")

    def test_penal_interest_and_no_gst(self) -> None:
        quote = foreclosure_quote(100000, 12, 12, 0, penal_interest_days=10, include_gst=False)

        # 100000 x 12% / 365 x 10 days x 2
        assert quote.penal_interest == Decimal("657.53")
        assert quote.gst_on_charges == 0

    def test_savings_never_negative(self) -> None:
        quote = foreclosure_quote(100000, 12, 12, 11, foreclosure_charge_percent=Decimal("50"))

        assert quote.savings == 0
        assert quote.savings_percent == 0

    @pytest.mark.parametrize("paid", [-1, 12, 20])
    def test_paid_emis_out_of_range(self, paid: int) -> None:
        with pytest.raises(InvalidParameter):
            foreclosure_quote(100000, 12, 12, paid)

    def test_negative_penal_days(self) -> None:
        with pytest.raises(InvalidParameter):
            foreclosure_quote(100000, 12, 12, 1, penal_interest_days=-1)
