"""
Trip model for group travel management.
"""
from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from tripledger.db.base import BaseModel
import enum


class ParticipantRole(str, enum.Enum):
    """Trip participant role enumeration."""
    OWNER = "owner"
    PARTICIPANT = "participant"
    VIEWER = "viewer"


class Trip(BaseModel):
    """Trip model representing a group travel event."""
    __tablename__ = "trips"

    name = Column(String(200), nullable=False)
    base_currency = Column(String(3), nullable=False, default="EUR")  # Currency balances and settlements are expressed in

    # Relationships
    participants = relationship(
        "TripParticipant",
        back_populates="trip",
        cascade="all, delete-orphan",
        order_by="TripParticipant.joined_at",
    )
    expenses = relationship("Expense", back_populates="trip", cascade="all, delete-orphan")


class TripParticipant(BaseModel):
    """Junction table for Trip and User many-to-many relationship."""
    __tablename__ = "trip_participants"

    trip_id = Column(String(36), ForeignKey("trips.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    role = Column(SQLEnum(ParticipantRole), default=ParticipantRole.PARTICIPANT, nullable=False)
    joined_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    # Relationships
    trip = relationship("Trip", back_populates="participants")
    user = relationship("User", back_populates="trips")
