"""Models package - Import all models for SQLAlchemy registration."""
from tripledger.models.user import User
from tripledger.models.trip import Trip, TripParticipant, ParticipantRole
from tripledger.models.expense import Expense, ExpenseParticipant
from tripledger.models.exchange_rate import FxRate

__all__ = [
    "User",
    "Trip",
    "TripParticipant",
    "ParticipantRole",
    "Expense",
    "ExpenseParticipant",
    "FxRate",
]
