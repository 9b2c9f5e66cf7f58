"""
Budget Tracker - Source Package

A personal monthly budget tracker: one budget per user, any number of
expenses, and a small set of derived figures (remaining budget, daily
allowance, savings ratio, recommendations).

DESIGN PRINCIPLES:
1. Calculations are pure functions of (Budget, Expense[])
2. Missing budgets and bad input are reported, never defaulted
3. No NaN or Infinity ever reaches a caller
4. Every write is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Budget Tracker Team"
