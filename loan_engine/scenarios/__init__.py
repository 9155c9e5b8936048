"""Sample data scenarios."""

from loan_engine.scenarios.sample_portfolio import SamplePortfolioScenario

__all__ = ["SamplePortfolioScenario"]
