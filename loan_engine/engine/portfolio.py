"""Portfolio-level NPA classification and product exposure."""

from __future__ import annotations

import logging
import multiprocessing as mp
from datetime import date
from decimal import Decimal
from typing import Iterable, Mapping, Sequence

from loan_engine.config import AssetClassificationConfig, ConcentrationConfig
from loan_engine.engine.classification import classify
from loan_engine.engine.money import ZERO, percent, quantize_money
from loan_engine.models.base import Report
from loan_engine.models.enums import ConcentrationRisk, RegulatoryBucket, ReportType
from loan_engine.models.loan import Loan, ScheduleEntry
from loan_engine.models.risk import Classification

logger = logging.getLogger(__name__)

UNKNOWN_PRODUCT = "Unknown"


def _classify_task(
    today: date,
    loan_id: str,
    entries: Sequence[ScheduleEntry],
    thresholds: AssetClassificationConfig,
) -> Classification:
    """Module-level wrapper so worker processes can unpickle the call."""
    return classify(today, entries, loan_id=loan_id, thresholds=thresholds)


def concentration_risk(max_share: Decimal, config: ConcentrationConfig) -> ConcentrationRisk:
    """Grade the largest single-product share of exposure."""
    if max_share > config.high_threshold:
        return ConcentrationRisk.HIGH
    if max_share > config.medium_threshold:
        return ConcentrationRisk.MEDIUM
    return ConcentrationRisk.LOW


class PortfolioAggregator:
    """Run asset classification and exposure grouping over a loan book.

    Parameters
    ----------
    classification : AssetClassificationConfig | None
        DPD thresholds for the asset buckets.
    concentration : ConcentrationConfig | None
        Concentration thresholds and per-product exposure limit.
    workers : int | None
        When greater than 1, loans are classified in a process pool.
        Each classification is independent, so no coordination is needed.
    """

    def __init__(
        self,
        classification: AssetClassificationConfig | None = None,
        concentration: ConcentrationConfig | None = None,
        workers: int | None = None,
    ) -> None:
        self.classification = classification or AssetClassificationConfig()
        self.concentration = concentration or ConcentrationConfig()
        self.workers = workers

    def bucket_labels(self) -> dict[RegulatoryBucket, str]:
        """DPD range description for each bucket under the current thresholds."""
        t = self.classification
        return {
            RegulatoryBucket.STANDARD: f"0-{t.sub_standard_from - 1} DPD",
            RegulatoryBucket.SUB_STANDARD: f"{t.sub_standard_from}-{t.doubtful_from - 1} DPD",
            RegulatoryBucket.DOUBTFUL: f"{t.doubtful_from}-{t.loss_from - 1} DPD",
            RegulatoryBucket.LOSS: f">={t.loss_from} DPD",
        }

    def classify_loans(
        self,
        loans: Iterable[Loan],
        schedules: Mapping[str, Sequence[ScheduleEntry]],
        today: date,
    ) -> dict[str, Classification]:
        """Classify every active loan.

        A loan without a schedule is logged and classified as STANDARD with
        zero DPD so that it still counts towards portfolio totals.
        """
        tasks = []
        for loan in loans:
            if not loan.is_active:
                continue
            entries = schedules.get(loan.loan_id)
            if entries is None:
                logger.warning(
                    "No schedule for loan %s; classifying as current",
                    loan.loan_id,
                    extra={"loan_id": loan.loan_id, "field": "schedule"},
                )
                entries = []
            tasks.append((today, loan.loan_id, list(entries), self.classification))

        if self.workers and self.workers > 1 and len(tasks) > 1:
            with mp.Pool(processes=self.workers) as pool:
                results = pool.starmap(_classify_task, tasks)
        else:
            results = [_classify_task(*task) for task in tasks]

        return {result.loan_id: result for result in results}

    def classify_portfolio(
        self,
        loans: Iterable[Loan],
        schedules: Mapping[str, Sequence[ScheduleEntry]],
        today: date,
    ) -> Report:
        """Build the NPA classification report.

        Returns
        -------
        Report
            One row per bucket with loan count, outstanding principal and
            share of active loans by count. Gross NPA % is the share of
            loans outside STANDARD, 0 for an empty book.
        """
        loans = list(loans)
        results = self.classify_loans(loans, schedules, today)
        by_id = {loan.loan_id: loan for loan in loans}

        counts = {bucket: 0 for bucket in RegulatoryBucket}
        outstanding = {bucket: ZERO for bucket in RegulatoryBucket}
        for loan_id, result in results.items():
            counts[result.bucket] += 1
            outstanding[result.bucket] += by_id[loan_id].outstanding_principal

        total = len(results)
        npa_count = sum(counts[b] for b in RegulatoryBucket if b.is_npa)
        npa_outstanding = sum((outstanding[b] for b in RegulatoryBucket if b.is_npa), ZERO)
        total_outstanding = sum(outstanding.values(), ZERO)
        labels = self.bucket_labels()

        rows = [
            [
                bucket.value,
                labels[bucket],
                counts[bucket],
                quantize_money(outstanding[bucket]),
                percent(counts[bucket], total),
            ]
            for bucket in RegulatoryBucket
        ]

        logger.info(
            "Classified %d active loans as of %s: %d NPA",
            total,
            today.isoformat(),
            npa_count,
            extra={"report_type": ReportType.NPA.value},
        )

        return Report(
            headers=["Asset Class", "DPD Range", "Count", "Outstanding", "% of Portfolio"],
            rows=rows,
            summary={
                "total_loans": total,
                "total_outstanding": quantize_money(total_outstanding),
                "npa_accounts": npa_count,
                "npa_outstanding": quantize_money(npa_outstanding),
                "gross_npa_percent": percent(npa_count, total),
            },
            report_type=ReportType.NPA,
            title="NPA Classification",
        )

    def sector_exposure(
        self,
        loans: Iterable[Loan],
        products: Mapping[str, str] | None = None,
    ) -> Report:
        """Group active outstanding principal by product.

        Parameters
        ----------
        loans : Iterable[Loan]
            Loan book; only active loans carry exposure.
        products : Mapping[str, str] | None
            Product id to display name. Loans with no product, or a product
            missing from this mapping, are grouped under ``"Unknown"``.

        Returns
        -------
        Report
            One row per product, largest exposure first. Every active loan
            lands in exactly one row.
        """
        exposure: dict[str, Decimal] = {}
        counts: dict[str, int] = {}

        for loan in loans:
            if not loan.is_active:
                continue
            label = self._product_label(loan, products)
            exposure[label] = exposure.get(label, ZERO) + loan.outstanding_principal
            counts[label] = counts.get(label, 0) + 1

        total = sum(exposure.values(), ZERO)
        limit = self.concentration.product_limit

        rows = []
        shares = []
        for label in sorted(exposure, key=lambda k: (-exposure[k], k)):
            share = percent(exposure[label], total)
            shares.append(share)
            rows.append(
                [
                    label,
                    counts[label],
                    quantize_money(exposure[label]),
                    limit,
                    share,
                    "BREACH" if share > limit else "WITHIN_LIMIT",
                ]
            )

        max_share = max(shares, default=ZERO)
        risk = concentration_risk(max_share, self.concentration)

        return Report(
            headers=["Product", "Loan Count", "Exposure", "Limit %", "Current %", "Limit Status"],
            rows=rows,
            summary={
                "total_exposure": quantize_money(total),
                "product_count": len(rows),
                "max_share_percent": max_share,
                "concentration_risk": risk.value,
                "products_over_limit": [row[0] for row in rows if row[5] == "BREACH"],
            },
            report_type=ReportType.SECTOR_EXPOSURE,
            title="Product Concentration",
        )

    @staticmethod
    def _product_label(loan: Loan, products: Mapping[str, str] | None) -> str:
        if not loan.product_id:
            logger.warning(
                "Loan %s has no product; grouped under %s",
                loan.loan_id,
                UNKNOWN_PRODUCT,
                extra={"loan_id": loan.loan_id, "field": "product_id"},
            )
            return UNKNOWN_PRODUCT
        if products is None:
            return loan.product_id
        name = products.get(loan.product_id)
        if name is None:
            logger.warning(
                "Loan %s references unknown product %s",
                loan.loan_id,
                loan.product_id,
                extra={"loan_id": loan.loan_id, "field": "product_id"},
            )
            return UNKNOWN_PRODUCT
        return name
