"""Exception taxonomy shared by the budget analytics modules."""

from __future__ import annotations


class BudgetError(Exception):
    """Base class for every error raised by ``budget_analytics``."""


class ValidationError(BudgetError, ValueError):
    """Malformed amount, unknown type/category pair, unparseable date or bad query."""


class ConfigurationError(BudgetError, ValueError):
    """Invalid budget limit configuration (negative or non-numeric limits)."""


class NotAvailable(BudgetError):
    """The persistence collaborator cannot be reached."""
