"""Sample portfolio scenario for demos and report smoke runs."""

from __future__ import annotations

import logging
import random
from datetime import date
from typing import Any

from loan_engine.config import EngineConfig
from loan_engine.engine.money import quantize_money
from loan_engine.engine.reports import generate_all
from loan_engine.generators import CollateralGenerator, LoanGenerator, PaymentBehavior
from loan_engine.store.snapshot import PortfolioSnapshot

logger = logging.getLogger(__name__)

DEFAULT_PRODUCTS = {
    "LAS": "Loan Against Securities",
    "PL": "Personal Loan",
    "BL": "Business Loan",
}


class SamplePortfolioScenario:
    """Generate a loan book with repayment history and pledged collateral.

    This scenario creates:
    - Loans spread across a small product catalogue
    - EMI schedules with paid, overdue and pending installments
    - Pledged fund units for secured (LAS) loans, valued across a range
      of LTVs so some loans need rebalancing
    """

    def __init__(
        self,
        num_loans: int = 100,
        reference_date: date | None = None,
        products: dict[str, str] | None = None,
        product_weights: list[float] | None = None,
        on_time_rate: float = 0.80,
        late_rate: float = 0.12,
        default_rate: float = 0.08,
        ltv_range: tuple[float, float] = (40.0, 120.0),
        seed: int | None = None,
    ) -> None:
        """Initialize sample portfolio scenario.

        Parameters
        ----------
        num_loans : int
            Number of loans to generate.
        reference_date : date | None
            "Today" for the generated history; defaults to the current date.
        products : dict[str, str] | None
            Product id to display name.
        product_weights : list[float] | None
            Relative frequency of each product, in ``products`` order.
        on_time_rate, late_rate, default_rate : float
            Borrower behavior weights passed to :class:`PaymentBehavior`.
        ltv_range : tuple[float, float]
            Range of LTVs at which secured loans are collateralised.
        seed : int | None
            Random seed for reproducibility.
        """
        self.num_loans = num_loans
        self.reference_date = reference_date or date.today()
        self.products = products or dict(DEFAULT_PRODUCTS)
        self.product_weights = product_weights or [1.0] * len(self.products)
        self.on_time_rate = on_time_rate
        self.late_rate = late_rate
        self.default_rate = default_rate
        self.ltv_range = ltv_range
        self.seed = seed

        self._rng = random.Random(seed)
        self.snapshot = PortfolioSnapshot()
        self._loan_gen = LoanGenerator(seed=seed)
        self._collateral_gen = CollateralGenerator(seed=seed)
        self._payment_behavior = PaymentBehavior(seed=seed)

    def generate(self) -> PortfolioSnapshot:
        """Generate all data for the scenario.

        Returns
        -------
        PortfolioSnapshot
            Snapshot containing all generated records.
        """
        logger.info(
            "Starting sample portfolio scenario: %d loans as of %s",
            self.num_loans,
            self.reference_date.isoformat(),
        )

        for product_id, name in self.products.items():
            self.snapshot.add_product(product_id, name)

        product_ids = list(self.products)
        for _ in range(self.num_loans):
            product_id = self._rng.choices(product_ids, weights=self.product_weights, k=1)[0]
            self._generate_loan(product_id)

        logger.info(
            "Generated %d loans with %d installments, %d payments and %d collaterals",
            len(self.snapshot.loans),
            len(self.snapshot.schedule),
            len(self.snapshot.payments),
            len(self.snapshot.collaterals),
        )
        return self.snapshot

    def _generate_loan(self, product_id: str) -> None:
        loan, schedule = self._loan_gen.generate(product_id, self.reference_date)
        payments = self._payment_behavior.apply(
            schedule,
            self.reference_date,
            on_time_rate=self.on_time_rate,
            late_rate=self.late_rate,
            default_rate=self.default_rate,
        )
        LoanGenerator.sync_outstanding(loan, schedule, self.reference_date)

        self.snapshot.add_loan(loan)
        for entry in schedule:
            self.snapshot.add_schedule_entry(entry)
        for payment in payments:
            self.snapshot.add_payment(payment)

        # Only loans against securities carry pledged collateral
        if product_id == "LAS" and loan.is_active:
            collaterals = self._collateral_gen.generate(loan, self.ltv_range)
            for collateral in collaterals:
                self.snapshot.add_collateral(collateral)
            total = sum(c.current_value for c in collaterals)
            loan.current_ltv = quantize_money(loan.outstanding_amount * 100 / total)

    def export(self, sinks: list[Any]) -> None:
        """Write the generated records to each sink as entity batches."""
        batches = {
            "loans": list(self.snapshot.loans.values()),
            "schedule": self.snapshot.schedule,
            "payments": self.snapshot.payments,
            "collaterals": self.snapshot.collaterals,
        }
        for sink in sinks:
            for entity_type, records in batches.items():
                if records:
                    sink.write_batch(entity_type, records)

    def export_reports(self, sinks: list[Any], config: EngineConfig | None = None) -> None:
        """Generate every report as of the reference date and write it to each sink."""
        reports = generate_all(self.snapshot, self.reference_date, config)
        for sink in sinks:
            for kind, report in reports.items():
                sink.write_report(kind.value.lower(), report)

    def get_portfolio_summary(self) -> dict[str, Any]:
        """Get summary statistics of the generated portfolio."""
        loans = list(self.snapshot.loans.values())
        active = self.snapshot.active_loans()
        return {
            **self.snapshot.summary(),
            "closed_loans": len(loans) - len(active),
            "total_principal": sum(loan.principal for loan in loans),
            "total_outstanding": sum(loan.outstanding_amount for loan in active),
            "loans_by_product": {
                product_id: sum(1 for loan in loans if loan.product_id == product_id)
                for product_id in self.products
            },
        }
