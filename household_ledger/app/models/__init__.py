"""
models — ORM table definitions.

Every model module is imported here so that string-based relationship()
targets ("User", "Household", ...) resolve no matter which model a caller
imports first.
"""

from household_ledger.app.models.expense import Expense, ExpenseSplit
from household_ledger.app.models.household import Household, HouseholdMember, MemberRole
from household_ledger.app.models.user import User

__all__ = [
    "Expense",
    "ExpenseSplit",
    "Household",
    "HouseholdMember",
    "MemberRole",
    "User",
]
