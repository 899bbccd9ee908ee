"""
Pydantic schemas for Trip entity.
"""
from pydantic import BaseModel


class TripMember(BaseModel):
    """A trip participant as seen by participant resolution."""
    user_id: str
    full_name: str

    class Config:
        frozen = True
