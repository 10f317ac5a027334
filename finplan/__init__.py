"""
Household Finance Planner - Core Package

Normalises recurring expenses and incomes to a common monthly basis,
aggregates them per person and category, and projects "what-if" plans
against the live household baseline.

DESIGN PRINCIPLES:
1. Calculations are pure functions over in-memory records
2. Plans own frozen copies, never live records
3. Unknown data degrades gracefully instead of failing aggregates
4. Every plan change is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Household Finance Planner Team"
