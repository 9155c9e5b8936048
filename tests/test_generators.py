"""Tests for sample data generators and the sample portfolio scenario."""

from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from loan_engine.engine.reports import generate_all
from loan_engine.generators import CollateralGenerator, LoanGenerator, PaymentBehavior
from loan_engine.models import InstallmentStatus, LoanStatus, PledgeStatus, ReportType
from loan_engine.scenarios import SamplePortfolioScenario
from loan_engine.sinks import JsonFileSink

REFERENCE_DATE = date(2024, 6, 30)


class TestLoanGenerator:
    """Tests for LoanGenerator."""

    def test_generate_loan(self, seed: int) -> None:
        loan, schedule = LoanGenerator(seed=seed).generate("PL", REFERENCE_DATE)

        assert loan.status == LoanStatus.ACTIVE
        assert loan.product_id == "PL"
        assert loan.principal > 0
        assert loan.disbursement_date < REFERENCE_DATE
        assert len(schedule) == loan.tenure_months
        assert all(e.loan_id == loan.loan_id for e in schedule)
        assert sum(e.principal_component for e in schedule) == loan.principal

    def test_reproducible(self, seed: int) -> None:
        first, _ = LoanGenerator(seed=seed).generate("LAS", REFERENCE_DATE)
        second, _ = LoanGenerator(seed=seed).generate("LAS", REFERENCE_DATE)

        assert first == second

    def test_unknown_product_uses_personal_terms(self, seed: int) -> None:
        loan, _ = LoanGenerator(seed=seed).generate("GOLD", REFERENCE_DATE)

        assert loan.tenure_months in LoanGenerator.PRODUCT_TERMS["PL"][2]

    def test_sync_outstanding(self, seed: int) -> None:
        loan, schedule = LoanGenerator(seed=seed).generate("PL", REFERENCE_DATE)
        schedule[0].status = InstallmentStatus.PAID

        LoanGenerator.sync_outstanding(loan, schedule, REFERENCE_DATE)

        assert loan.outstanding_principal == loan.principal - schedule[0].principal_component

    def test_sync_outstanding_closes_repaid_loan(self, seed: int) -> None:
        loan, schedule = LoanGenerator(seed=seed).generate("PL", REFERENCE_DATE)
        for entry in schedule:
            entry.status = InstallmentStatus.PAID

        LoanGenerator.sync_outstanding(loan, schedule, REFERENCE_DATE)

        assert loan.outstanding_principal == 0
        assert loan.status == LoanStatus.CLOSED


class TestPaymentBehavior:
    """Tests for PaymentBehavior."""

    def test_future_installments_stay_pending(self, seed: int) -> None:
        _, schedule = LoanGenerator(seed=seed).generate("PL", REFERENCE_DATE)
        payments = PaymentBehavior(seed=seed).apply(schedule, REFERENCE_DATE)

        for entry in schedule:
            if entry.due_date > REFERENCE_DATE:
                assert entry.status == InstallmentStatus.PENDING
        assert len(payments) == sum(1 for e in schedule if e.is_paid)
        assert all(p.payment_date <= REFERENCE_DATE for p in payments)

    def test_always_on_time(self, seed: int) -> None:
        _, schedule = LoanGenerator(seed=seed).generate("BL", REFERENCE_DATE)
        PaymentBehavior(seed=seed).apply(schedule, date(2030, 1, 1), on_time_rate=1, late_rate=0, default_rate=0)

        assert all(e.status == InstallmentStatus.PAID for e in schedule)

    def test_stopped_paying_goes_overdue(self, seed: int) -> None:
        _, schedule = LoanGenerator(seed=seed).generate("BL", REFERENCE_DATE)
        PaymentBehavior(seed=seed).apply(schedule, date(2030, 1, 1), on_time_rate=0, late_rate=0, default_rate=1)

        assert schedule[-1].status == InstallmentStatus.OVERDUE


class TestCollateralGenerator:
    """Tests for CollateralGenerator."""

    def test_value_matches_requested_ltv(self, seed: int) -> None:
        loan, _ = LoanGenerator(seed=seed).generate("LAS", REFERENCE_DATE)
        collaterals = CollateralGenerator(seed=seed).generate(loan, ltv_range=(80.0, 80.0))

        total = sum(c.current_value for c in collaterals)
        assert abs(total - loan.outstanding_amount * Decimal("1.25")) <= Decimal("0.01")
        assert all(c.pledge_status == PledgeStatus.PLEDGED for c in collaterals)
        assert all(c.loan_id == loan.loan_id for c in collaterals)
        assert all(c.instrument for c in collaterals)


class TestSamplePortfolioScenario:
    """Tests for SamplePortfolioScenario."""

    @pytest.fixture
    def scenario(self, seed: int) -> SamplePortfolioScenario:
        scenario = SamplePortfolioScenario(num_loans=25, reference_date=REFERENCE_DATE, seed=seed)
        scenario.generate()
        return scenario

    def test_generate(self, scenario: SamplePortfolioScenario) -> None:
        snapshot = scenario.snapshot

        assert len(snapshot.loans) == 25
        assert set(snapshot.products) == {"LAS", "PL", "BL"}
        assert all(loan.product_id in snapshot.products for loan in snapshot.loans.values())
        assert len(snapshot.schedule) == sum(loan.tenure_months for loan in snapshot.loans.values())

    def test_only_active_secured_loans_have_collateral(self, scenario: SamplePortfolioScenario) -> None:
        for loan_id in scenario.snapshot.collateral_by_loan():
            loan = scenario.snapshot.get_loan(loan_id)
            assert loan.product_id == "LAS"
            assert loan.current_ltv is not None

    def test_reproducible(self, scenario: SamplePortfolioScenario, seed: int) -> None:
        other = SamplePortfolioScenario(num_loans=25, reference_date=REFERENCE_DATE, seed=seed)
        other.generate()

        assert other.get_portfolio_summary() == scenario.get_portfolio_summary()

    def test_summary(self, scenario: SamplePortfolioScenario) -> None:
        summary = scenario.get_portfolio_summary()

        assert summary["loans"] == 25
        assert summary["active_loans"] + summary["closed_loans"] == 25
        assert sum(summary["loans_by_product"].values()) == 25

    def test_reports_over_generated_book(self, scenario: SamplePortfolioScenario) -> None:
        reports = generate_all(scenario.snapshot, REFERENCE_DATE)

        assert reports[ReportType.NPA].summary["total_loans"] == len(scenario.snapshot.active_loans())
        assert reports[ReportType.REBALANCING].summary["total_loans_checked"] == len(
            scenario.snapshot.active_loans()
        )

    def test_export(self, scenario: SamplePortfolioScenario, tmp_path: Path) -> None:
        sink = JsonFileSink(tmp_path)
        scenario.export([sink])
        scenario.export_reports([sink])

        assert (tmp_path / "loans.json").exists()
        assert (tmp_path / "schedule.json").exists()
        for kind in ReportType:
            assert (tmp_path / f"{kind.value.lower()}.json").exists()
