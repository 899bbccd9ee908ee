"""
Expense model for tracking shared spending.
"""
from sqlalchemy import Column, String, Numeric, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from tripledger.db.base import BaseModel


class Expense(BaseModel):
    """Expense model representing a single shared cost."""
    __tablename__ = "expenses"

    trip_id = Column(String(36), ForeignKey("trips.id"), nullable=False, index=True)
    payer_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    date = Column(DateTime(timezone=True), nullable=False, index=True)
    amount = Column(Integer, nullable=False)  # Minor units of `currency`
    currency = Column(String(3), nullable=False)
    fx_rate = Column(Numeric(18, 8), nullable=True)  # Base currency per 1 unit of `currency`; NULL if same currency or unavailable
    description = Column(Text, nullable=True)
    category = Column(String(50), nullable=False, default="other")
    split_type = Column(String(20), nullable=False, default="equal")

    # Relationships
    trip = relationship("Trip", back_populates="expenses")
    payer = relationship("User", foreign_keys=[payer_id], back_populates="expenses_paid")
    participants = relationship(
        "ExpenseParticipant",
        back_populates="expense",
        cascade="all, delete-orphan",
        order_by="ExpenseParticipant.position",
    )


class ExpenseParticipant(BaseModel):
    """A participant's materialized share of an expense."""
    __tablename__ = "expense_participants"

    expense_id = Column(String(36), ForeignKey("expenses.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)  # Order the split was computed in
    share_amount = Column(Integer, nullable=False)  # Minor units of the expense currency
    share_type = Column(String(20), nullable=False)  # equal / percentage / amount
    share_value = Column(Numeric(15, 4), nullable=True)  # Percentage or custom amount as entered

    # Relationships
    expense = relationship("Expense", back_populates="participants")
    user = relationship("User", back_populates="expense_participants")
