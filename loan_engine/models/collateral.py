"""Collateral pledged against loans."""

from dataclasses import dataclass
from decimal import Decimal

from loan_engine.models.enums import PledgeStatus


@dataclass
class Collateral:
    """Security pledged against a loan (units of a fund, shares, etc.)."""

    collateral_id: str
    loan_id: str
    current_value: Decimal  # Revalued periodically by the market feed
    pledge_status: PledgeStatus = PledgeStatus.PLEDGED
    customer_id: str | None = None
    instrument: str = ""
    units: Decimal = Decimal("0")
    purchase_value: Decimal = Decimal("0")
    ltv_allowance: Decimal = Decimal("50")  # Percent of value the lender advances

    @property
    def is_pledged(self) -> bool:
        return self.pledge_status == PledgeStatus.PLEDGED
