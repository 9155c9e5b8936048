"""Read-only portfolio snapshot with referential integrity checks."""

from dataclasses import dataclass, field

from loan_engine.exceptions import MissingReferenceData, ReferentialIntegrityError
from loan_engine.models.collateral import Collateral
from loan_engine.models.enums import InstallmentStatus
from loan_engine.models.loan import Loan, Payment, ScheduleEntry


@dataclass
class PortfolioSnapshot:
    """In-memory snapshot of loan, schedule, payment and collateral records.

    Built once by the data-access layer and then only read by the engine.
    Every child record must reference a loan already in the snapshot.
    """

    loans: dict[str, Loan] = field(default_factory=dict)
    products: dict[str, str] = field(default_factory=dict)  # product_id -> name

    schedule: list[ScheduleEntry] = field(default_factory=list)
    payments: list[Payment] = field(default_factory=list)
    collaterals: list[Collateral] = field(default_factory=list)

    # Relationship indexes
    _loan_schedule: dict[str, list[int]] = field(default_factory=dict)
    _loan_payments: dict[str, list[int]] = field(default_factory=dict)
    _loan_collaterals: dict[str, list[int]] = field(default_factory=dict)

    def add_product(self, product_id: str, name: str) -> None:
        """Register a product display name."""
        self.products[product_id] = name

    def add_loan(self, loan: Loan) -> None:
        """Add a loan to the snapshot."""
        self.loans[loan.loan_id] = loan
        self._loan_schedule.setdefault(loan.loan_id, [])
        self._loan_payments.setdefault(loan.loan_id, [])
        self._loan_collaterals.setdefault(loan.loan_id, [])

    def add_schedule_entry(self, entry: ScheduleEntry) -> None:
        """Add an EMI schedule entry."""
        self._require_loan(entry.loan_id, "schedule entry")
        self._loan_schedule[entry.loan_id].append(len(self.schedule))
        self.schedule.append(entry)

    def add_payment(self, payment: Payment) -> None:
        """Append a payment to the ledger."""
        self._require_loan(payment.loan_id, "payment")
        self._loan_payments[payment.loan_id].append(len(self.payments))
        self.payments.append(payment)

    def add_collateral(self, collateral: Collateral) -> None:
        """Add a collateral record."""
        self._require_loan(collateral.loan_id, "collateral")
        self._loan_collaterals[collateral.loan_id].append(len(self.collaterals))
        self.collaterals.append(collateral)

    def _require_loan(self, loan_id: str, kind: str) -> None:
        if loan_id not in self.loans:
            raise ReferentialIntegrityError(f"Loan {loan_id} not found for {kind}")

    # Query methods
    def get_loan(self, loan_id: str) -> Loan:
        """Get a loan by id."""
        try:
            return self.loans[loan_id]
        except KeyError:
            raise MissingReferenceData(f"Loan {loan_id} not found") from None

    def get_loan_schedule(self, loan_id: str) -> list[ScheduleEntry]:
        """Get a loan's schedule ordered by month."""
        indices = self._loan_schedule.get(loan_id, [])
        return sorted((self.schedule[i] for i in indices), key=lambda e: e.month)

    def get_loan_payments(self, loan_id: str) -> list[Payment]:
        """Get a loan's payments in ledger order."""
        indices = self._loan_payments.get(loan_id, [])
        return [self.payments[i] for i in indices]

    def get_loan_collaterals(self, loan_id: str) -> list[Collateral]:
        """Get all collateral records for a loan."""
        indices = self._loan_collaterals.get(loan_id, [])
        return [self.collaterals[i] for i in indices]

    def active_loans(self) -> list[Loan]:
        """Loans currently in ACTIVE status."""
        return [loan for loan in self.loans.values() if loan.is_active]

    def schedules_by_loan(self) -> dict[str, list[ScheduleEntry]]:
        """Schedules of loans that have at least one entry."""
        return {
            loan_id: self.get_loan_schedule(loan_id)
            for loan_id, indices in self._loan_schedule.items()
            if indices
        }

    def collateral_by_loan(self) -> dict[str, list[Collateral]]:
        """Collateral of loans that have at least one record."""
        return {
            loan_id: self.get_loan_collaterals(loan_id)
            for loan_id, indices in self._loan_collaterals.items()
            if indices
        }

    def pending_entries(self) -> list[ScheduleEntry]:
        """Installments still awaiting payment."""
        return [e for e in self.schedule if e.status == InstallmentStatus.PENDING]

    def summary(self) -> dict[str, int]:
        """Return summary counts of all records."""
        return {
            "loans": len(self.loans),
            "active_loans": len(self.active_loans()),
            "products": len(self.products),
            "schedule_entries": len(self.schedule),
            "payments": len(self.payments),
            "collaterals": len(self.collaterals),
        }
