"""Loan and collateral generators."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from loan_engine.engine.amortization import build_schedule
from loan_engine.engine.money import ZERO, quantize_money
from loan_engine.generators.base import BaseGenerator
from loan_engine.models.collateral import Collateral
from loan_engine.models.enums import LoanStatus, PledgeStatus
from loan_engine.models.loan import Loan, ScheduleEntry


class LoanGenerator(BaseGenerator):
    """Generate disbursed loans with their amortization schedules."""

    # Product id -> (principal range in thousands, annual rate range %, tenures)
    PRODUCT_TERMS = {
        "LAS": ((100, 5000), (9.0, 13.0), [12, 24, 36]),
        "PL": ((50, 1500), (11.0, 18.0), [12, 24, 36, 48, 60]),
        "BL": ((500, 10000), (12.0, 16.0), [24, 36, 60]),
    }

    def generate(
        self,
        product_id: str | None,
        reference_date: date,
    ) -> tuple[Loan, list[ScheduleEntry]]:
        """Generate one active loan disbursed before ``reference_date``.

        Outstanding principal starts at the full principal; call
        :meth:`sync_outstanding` once installment statuses are known.
        """
        principal_range, rate_range, tenures = self.PRODUCT_TERMS.get(
            product_id or "PL", self.PRODUCT_TERMS["PL"]
        )
        principal = Decimal(self.rng.randint(*principal_range) * 1000)
        annual_rate = Decimal(str(round(self.rng.uniform(*rate_range), 2)))
        tenure = self.rng.choice(tenures)
        disbursed = reference_date - timedelta(days=self.rng.randint(30, min(tenure * 30, 900)))

        loan = Loan(
            loan_id=self.fake.uuid4(),
            principal=principal,
            annual_rate=annual_rate,
            tenure_months=tenure,
            status=LoanStatus.ACTIVE,
            outstanding_principal=principal,
            product_id=product_id,
            customer_id=self.fake.uuid4(),
            disbursement_date=disbursed,
        )
        schedule = build_schedule(
            principal,
            annual_rate,
            tenure,
            loan_id=loan.loan_id,
            disbursement_date=disbursed,
        )
        return loan, schedule

    @staticmethod
    def sync_outstanding(loan: Loan, schedule: list[ScheduleEntry], reference_date: date) -> None:
        """Derive outstanding principal and interest from installment statuses.

        Principal outstanding is everything not yet repaid; interest
        outstanding is the interest of installments already due but unpaid.
        """
        paid_principal = sum((e.principal_component for e in schedule if e.is_paid), ZERO)
        overdue_interest = sum(
            (
                e.interest_component
                for e in schedule
                if not e.is_paid and e.due_date is not None and e.due_date <= reference_date
            ),
            ZERO,
        )
        loan.outstanding_principal = loan.principal - paid_principal
        loan.outstanding_interest = overdue_interest
        if loan.outstanding_principal == 0:
            loan.status = LoanStatus.CLOSED


class CollateralGenerator(BaseGenerator):
    """Generate pledged fund units backing a loan."""

    SCHEME_TYPES = {
        "Equity Fund": Decimal("50"),
        "Hybrid Fund": Decimal("60"),
        "Debt Fund": Decimal("80"),
    }

    def generate(self, loan: Loan, ltv_range: tuple[float, float] = (40.0, 120.0)) -> list[Collateral]:
        """Generate one or two holdings valued so the loan's LTV lands in ``ltv_range``."""
        target_ltv = Decimal(str(round(self.rng.uniform(*ltv_range), 2)))
        total_value = quantize_money(loan.outstanding_amount * 100 / target_ltv)
        holdings = self.rng.randint(1, 2)
        split = Decimal(str(round(self.rng.uniform(0.3, 0.7), 2))) if holdings == 2 else Decimal("1")
        values = [quantize_money(total_value * split)]
        if holdings == 2:
            values.append(total_value - values[0])

        collaterals = []
        for index, value in enumerate(values):
            scheme, allowance = self.rng.choice(list(self.SCHEME_TYPES.items()))
            nav = Decimal(str(round(self.rng.uniform(10, 500), 4)))
            drift = Decimal(str(round(self.rng.uniform(0.8, 1.3), 2)))
            collaterals.append(
                Collateral(
                    collateral_id=f"{loan.loan_id}-col-{index}",
                    loan_id=loan.loan_id,
                    current_value=value,
                    pledge_status=PledgeStatus.PLEDGED,
                    customer_id=loan.customer_id,
                    instrument=f"{self.fake.company()} {scheme}",
                    units=(value / nav).quantize(Decimal("0.001")),
                    purchase_value=quantize_money(value / drift),
                    ltv_allowance=allowance,
                )
            )
        return collaterals
