"""Pre-built scenarios producing complete sample portfolios."""

from clinic_finance.scenarios.financing_portfolio import FinancingPortfolioScenario

__all__ = ["FinancingPortfolioScenario"]
