"""
Pydantic schemas for FxRate entity.
"""
from pydantic import BaseModel
from datetime import date as dt_date
from decimal import Decimal


class FxRateResponse(BaseModel):
    """Schema for FX rate response (1 target_currency = rate base_currency)."""
    base_currency: str
    target_currency: str
    date: dt_date
    rate: Decimal
