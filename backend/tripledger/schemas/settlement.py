"""
Pydantic schemas for balances and settlements.
"""
from pydantic import BaseModel
from typing import List


class UserBalance(BaseModel):
    """Net position of one user in the trip's base currency."""
    user_id: str
    display_name: str = ""
    net_balance: int  # Minor units; positive = is owed, negative = owes
    currency: str


class OptimizedSettlement(BaseModel):
    """A single suggested payment from a debtor to a creditor."""
    from_user_id: str
    from_user_name: str = ""
    to_user_id: str
    to_user_name: str = ""
    amount: int  # Minor units, always positive
    currency: str


class SettlementSummary(BaseModel):
    """Balances and suggested settlements for a trip."""
    trip_id: str
    base_currency: str
    balances: List[UserBalance]
    settlements: List[OptimizedSettlement]
    total_expenses: int  # Number of expenses considered
    excluded_expenses: List[str]  # Expense ids skipped for a missing FX rate
    summary: str = ""
