"""Derived risk results. Recomputed on every run, never persisted."""

from dataclasses import dataclass, field
from decimal import Decimal

from loan_engine.models.enums import RebalancingActionType, RegulatoryBucket, Urgency


@dataclass(frozen=True)
class Classification:
    """Asset classification of one loan as of a given day."""

    dpd: int
    bucket: RegulatoryBucket
    loan_id: str | None = None


@dataclass
class RebalancingAction:
    """Corrective action proposed for an LTV breach."""

    action_type: RebalancingActionType
    description: str
    amount: Decimal
    impact: str


@dataclass
class RebalancingNeed:
    """LTV breach of one loan and the actions that would cure it.

    ``current_ltv`` is rounded to two decimals for display. A loan with no
    collateral value is flagged ``unsecured``, reports an LTV of 0 and is
    always CRITICAL regardless of the urgency bands.
    """

    loan_id: str
    current_ltv: Decimal
    target_ltv: Decimal
    collateral_value: Decimal
    outstanding_amount: Decimal
    shortfall: Decimal
    collateral_required: Decimal  # Additional collateral value restoring the target LTV
    urgency: Urgency
    customer_id: str | None = None
    unsecured: bool = False
    suggested_actions: list[RebalancingAction] = field(default_factory=list)

    def action(self, action_type: RebalancingActionType) -> RebalancingAction | None:
        """Return the suggested action of the given type, if any."""
        for action in self.suggested_actions:
            if action.action_type == action_type:
                return action
        return None
