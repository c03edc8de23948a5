"""
Finance Tracker - Source Package

Monthly reporting engine for a shared household finance tracker.
Transactions, salaries and card purchases go in; monthly summaries,
comparisons, a financial health score and insights come out.

DESIGN PRINCIPLES:
1. Reports are pure functions of their inputs
2. Load everything or nothing
3. Degrade gracefully on malformed records, never crash a report
4. Every refresh and edit is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Tracker Team"
