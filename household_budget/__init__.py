"""Top-level package for the household budget engine.

This file makes the directory a Python package and exposes
convenient names.  The primary modules are:

* ``recurrence`` – deciding when a fixed expense is due and what it costs
* ``auto_register`` – the once-a-day auto-registration pass
* ``statistics`` – monthly income/expense/saving aggregation
* ``db`` – a SQLite store implementing the persistence callbacks

To run today's auto-registration pass against the local database:

```bash
python scripts/run_auto_register.py --user user1
```
"""

from . import auto_register  # noqa: F401  # re-exported for convenience
from . import recurrence  # noqa: F401  # re-exported for convenience
from . import statistics  # noqa: F401  # re-exported for convenience
from .auto_register import AutoRegistrar, RegistrationReport
from .models import FixedOccurrence, RecurringExpense, Transaction
from .statistics import MonthlyStatistics, MonthlySummary

__all__ = [
    "auto_register",
    "recurrence",
    "statistics",
    "AutoRegistrar",
    "RegistrationReport",
    "FixedOccurrence",
    "RecurringExpense",
    "Transaction",
    "MonthlyStatistics",
    "MonthlySummary",
]
