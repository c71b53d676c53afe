"""
Error classes for the payoff engine.

Two tiers: contract violations in the loan math raise immediately, and
malformed request payloads or policy files raise while they are loaded.
Conditions that arise while simulating (exhausted holdings, a trigger that
never fires) are reported as data and never raised.
"""


class InvalidLoanParameters(ValueError):
    """Loan math called with a non-positive principal, a negative rate, or a term under one payment."""

    def __init__(self, principal: float, annual_rate: float, term_years: float):
        super().__init__(
            f"Invalid loan parameters: principal={principal}, "
            f"annual_rate={annual_rate}, term_years={term_years}"
        )
        self.principal = principal
        self.annual_rate = annual_rate
        self.term_years = term_years


class ConfigError(Exception):
    """Request payload or engine policy file failed validation."""

    pass
