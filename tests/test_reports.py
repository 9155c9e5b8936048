"""Tests for the regulatory report dispatcher."""

from datetime import date
from decimal import Decimal

import pytest

from loan_engine.config import EngineConfig, RebalancingConfig
from loan_engine.engine.reports import REPORT_BUILDERS, generate_all, generate_regulatory_report
from loan_engine.exceptions import UnknownReportType
from loan_engine.models import ReportType, Urgency
from loan_engine.store import PortfolioSnapshot, load_snapshot


@pytest.fixture
def snapshot(loan_feed: list[dict], schedule_feed: list[dict], collateral_feed: list[dict]) -> PortfolioSnapshot:
    return load_snapshot(
        loan_feed,
        schedule_feed,
        collateral_feed,
        products={"LAS": "Loan Against Securities", "PL": "Personal Loan"},
    )


class TestGenerateRegulatoryReport:
    """Tests for generate_regulatory_report."""

    def test_every_type_has_a_builder(self) -> None:
        assert set(REPORT_BUILDERS) == set(ReportType)

    @pytest.mark.parametrize("name", ["NPA", "npa", ReportType.NPA])
    def test_accepts_names_and_enum(self, snapshot: PortfolioSnapshot, today: date, name: object) -> None:
        report = generate_regulatory_report(name, snapshot, today)  # type: ignore[arg-type]

        assert report.report_type == ReportType.NPA

    @pytest.mark.parametrize("name", ["BOGUS", "", None])
    def test_unknown_type(self, snapshot: PortfolioSnapshot, today: date, name: object) -> None:
        with pytest.raises(UnknownReportType):
            generate_regulatory_report(name, snapshot, today)  # type: ignore[arg-type]

    def test_npa_report(self, snapshot: PortfolioSnapshot, today: date) -> None:
        """Test L2's February installment makes it sub-standard."""
        report = generate_regulatory_report(ReportType.NPA, snapshot, today)

        assert report.summary["total_loans"] == 2
        assert report.summary["npa_accounts"] == 1
        assert report.row("SUB_STANDARD")[3] == Decimal("150000.00")

    def test_sector_exposure_uses_product_names(self, snapshot: PortfolioSnapshot, today: date) -> None:
        report = generate_regulatory_report("SECTOR_EXPOSURE", snapshot, today)

        assert report.column("Product") == ["Loan Against Securities", "Personal Loan"]
        assert report.summary["concentration_risk"] == "HIGH"

    def test_alm_uses_pending_entries(self, snapshot: PortfolioSnapshot, today: date) -> None:
        report = generate_regulatory_report("ALM", snapshot, today)

        assert report.row("0-30 Days")[1] == Decimal("23536.74")
        assert report.row("31-90 Days")[1] == Decimal("18000.00")

    def test_rebalancing_ignores_released_collateral(self, snapshot: PortfolioSnapshot, today: date) -> None:
        config = EngineConfig(rebalancing=RebalancingConfig(target_ltv=Decimal("75")))
        report = generate_regulatory_report("REBALANCING", snapshot, today, config)

        # L1 has 350000 pledged plus 50000 released; L2 has no collateral
        assert report.column("Loan") == ["L2", "L1"]
        assert report.row("L2")[6] == Urgency.CRITICAL.value
        assert report.row("L1")[2] == Decimal("350000.00")
        assert report.row("L1")[5] == Decimal("37500.00")
        assert report.row("L1")[6] == Urgency.MEDIUM.value
        assert report.summary["total_loans_checked"] == 2

    def test_cash_flow_horizon_from_config(self, snapshot: PortfolioSnapshot, today: date) -> None:
        report = generate_regulatory_report("CASH_FLOW", snapshot, today)

        assert len(report.rows) == 6
        assert report.row("2024-07")[2] == Decimal("23536.74")
        assert report.row("2024-08")[2] == Decimal("18000.00")

    def test_prudential(self, snapshot: PortfolioSnapshot, today: date) -> None:
        report = generate_regulatory_report("prudential_norms", snapshot, today)

        assert report.summary["assets_under_management"] == Decimal("450000.00")


class TestGenerateAll:
    """Tests for generate_all."""

    def test_all_reports(self, snapshot: PortfolioSnapshot, today: date) -> None:
        reports = generate_all(snapshot, today)

        assert set(reports) == set(ReportType)
        for kind, report in reports.items():
            assert report.report_type == kind
            assert all(len(row) == len(report.headers) for row in report.rows)

    def test_snapshot_not_modified(self, snapshot: PortfolioSnapshot, today: date) -> None:
        before = snapshot.summary()
        statuses = [e.status for e in snapshot.schedule]

        generate_all(snapshot, today)

        assert snapshot.summary() == before
        assert [e.status for e in snapshot.schedule] == statuses

    def test_to_dict_contract(self, snapshot: PortfolioSnapshot, today: date) -> None:
        data = generate_regulatory_report("NPA", snapshot, today).to_dict()

        assert set(data) == {"reportType", "title", "headers", "rows", "summary", "generatedAt"}
        assert data["reportType"] == "NPA"
