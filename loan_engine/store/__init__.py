"""Portfolio snapshot and feed loading."""

from loan_engine.store.loader import load_snapshot
from loan_engine.store.snapshot import PortfolioSnapshot

__all__ = ["PortfolioSnapshot", "load_snapshot"]
