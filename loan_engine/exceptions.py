"""Custom exception hierarchy for loan-engine."""


class LoanEngineError(Exception):
    """Base exception for all loan-engine errors."""


class InvalidLoanTerms(LoanEngineError):
    """Raised when principal, rate or tenure cannot describe a loan."""

    def __init__(self, field: str, value: object, loan_id: str | None = None) -> None:
        self.field = field
        self.value = value
        self.loan_id = loan_id
        where = f" for loan {loan_id}" if loan_id else ""
        super().__init__(f"Invalid {field}{where}: {value!r}")


class InvalidParameter(LoanEngineError):
    """Raised when a policy parameter is outside its valid range."""


class MissingReferenceData(LoanEngineError):
    """Raised when a record references data that is not in the snapshot."""


class ReferentialIntegrityError(MissingReferenceData):
    """Raised when a snapshot record points at an unknown loan."""


class ConfigurationError(LoanEngineError):
    """Raised when configuration is invalid or missing."""


class UnknownReportType(LoanEngineError):
    """Raised when a report type has no generator."""


class SinkError(LoanEngineError):
    """Raised when a sink operation fails."""
