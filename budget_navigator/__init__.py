"""Top-level package for Budget Navigator.

A personal-finance tracker: record income and expenses, set category
budgets, track savings goals, chart spending and export reports.  The
primary modules are:

* ``analytics`` - pandas aggregations over fetched transactions
* ``reports`` - CSV and PDF exports
* ``forms`` - validation and submission of new records
* ``store`` / ``db`` / ``supabase_store`` - the persistence backends
* ``app`` - the Streamlit app that ties everything together

To run the app from the command line you can execute:

```bash
streamlit run budget_navigator/Home.py
```
"""

from . import analytics  # noqa: F401  # re-exported for convenience
from . import reports  # noqa: F401  # re-exported for convenience

__all__ = ["analytics", "reports"]
