"""Top-level package for the budget analytics engine.

The engine turns a flat ledger of dated, typed, categorized money movements
into derived views.  The primary modules are:

* ``aggregation`` – monthly and yearly rollups, category breakdowns
* ``comparison`` – period-to-period comparisons and improvement flags
* ``table_view`` – filtered, sorted, paginated ledger table and CSV export
* ``recurring`` – once-a-month materialization of recurring fixed expenses
* ``limits`` – progress against monthly limits and long-term goals

Storage sits behind ``persistence.BudgetStore``; ``services`` wires a store to
the pure functions.  The helper scripts in ``scripts/`` show typical use.
"""

import logging

from . import aggregation  # noqa: F401  # re-exported for convenience
from . import comparison  # noqa: F401
from . import limits  # noqa: F401
from . import recurring  # noqa: F401
from . import table_view  # noqa: F401
from .categories import EntryType
from .errors import BudgetError, ConfigurationError, NotAvailable, ValidationError
from .models import BudgetEntry, BudgetLimitConfig, Period, RecurringExpenseRule

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "aggregation",
    "comparison",
    "limits",
    "recurring",
    "table_view",
    "EntryType",
    "BudgetEntry",
    "BudgetLimitConfig",
    "Period",
    "RecurringExpenseRule",
    "BudgetError",
    "ConfigurationError",
    "NotAvailable",
    "ValidationError",
]
