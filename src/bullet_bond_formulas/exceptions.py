# Requires Python 3.12+
from __future__ import annotations


class ValidationError(ValueError):
    """
    Raised when instrument parameters violate one or more input constraints.

    All violations are collected before raising so that a caller can flag
    every offending field at once. ``violations`` maps field name to message.
    """

    def __init__(self, violations: dict[str, str]):
        self.violations = dict(violations)
        detail = "; ".join(f"{name}: {msg}" for name, msg in self.violations.items())
        super().__init__(f"Invalid instrument parameters ({len(self.violations)}): {detail}")


class NonConvergenceWarning(RuntimeWarning):
    """Issued when the IRR solver returns a rate that did not converge."""
