"""Repayment behavior applied to generated schedules."""

from __future__ import annotations

import random
from datetime import date, timedelta

from loan_engine.models.enums import InstallmentStatus, PaymentMode, PaymentStatus
from loan_engine.models.loan import Payment, ScheduleEntry

BEHAVIORS = ("good", "occasional_late", "stopped_paying")


class PaymentBehavior:
    """Mark past-due installments paid or overdue and emit matching payments."""

    def __init__(self, seed: int | None = None) -> None:
        self.rng = random.Random(seed)

    def apply(
        self,
        entries: list[ScheduleEntry],
        reference_date: date,
        on_time_rate: float = 0.80,
        late_rate: float = 0.12,
        default_rate: float = 0.08,
    ) -> list[Payment]:
        """Set installment statuses in place as of ``reference_date``.

        Parameters
        ----------
        entries : list[ScheduleEntry]
            One loan's schedule, ordered by month.
        reference_date : date
            Installments due after this date stay PENDING.
        on_time_rate, late_rate, default_rate : float
            Weights for the borrower's behavior profile.

        Returns
        -------
        list[Payment]
            Payments recorded for the installments marked PAID.
        """
        behavior = self.rng.choices(
            BEHAVIORS, weights=[on_time_rate, late_rate, default_rate], k=1
        )[0]
        stop_after = self.rng.randint(0, 6)

        payments: list[Payment] = []
        for entry in entries:
            if entry.due_date is None or entry.due_date > reference_date:
                continue

            if behavior == "stopped_paying" and entry.month > stop_after:
                entry.status = InstallmentStatus.OVERDUE
                continue

            delay = self.rng.randint(0, 3)
            if behavior == "occasional_late" and self.rng.random() < 0.3:
                delay = self.rng.randint(10, 40)
            paid_on = entry.due_date + timedelta(days=delay)
            if paid_on > reference_date:
                entry.status = InstallmentStatus.OVERDUE
                continue

            entry.status = InstallmentStatus.PAID
            payments.append(
                Payment(
                    payment_id=f"{entry.loan_id}-pay-{entry.month}",
                    loan_id=entry.loan_id,
                    amount=entry.emi_amount,
                    payment_date=paid_on,
                    mode=self.rng.choice(list(PaymentMode)),
                    status=PaymentStatus.SUCCESS,
                )
            )
        return payments
