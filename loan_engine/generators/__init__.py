"""Sample portfolio generators."""

from loan_engine.generators.loan import CollateralGenerator, LoanGenerator
from loan_engine.generators.patterns import PaymentBehavior

__all__ = ["CollateralGenerator", "LoanGenerator", "PaymentBehavior"]
