"""
User model for trip members.
"""
from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
from tripledger.db.base import BaseModel


class User(BaseModel):
    """User model; full_name is what participants are matched against."""
    __tablename__ = "users"

    full_name = Column(String(200), nullable=False)
    email = Column(String(255), unique=True, nullable=True, index=True)

    # Relationships
    trips = relationship("TripParticipant", back_populates="user", cascade="all, delete-orphan")
    expenses_paid = relationship("Expense", foreign_keys="Expense.payer_id", back_populates="payer")
    expense_participants = relationship("ExpenseParticipant", back_populates="user", cascade="all, delete-orphan")
