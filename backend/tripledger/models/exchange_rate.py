"""
FX rate cache model.
"""
from sqlalchemy import Column, String, Date, Numeric, UniqueConstraint
from tripledger.db.base import BaseModel


class FxRate(BaseModel):
    """Cached daily exchange rate (1 target_currency = rate base_currency)."""
    __tablename__ = "fx_rates"

    base_currency = Column(String(3), nullable=False)
    target_currency = Column(String(3), nullable=False)
    date = Column(Date, nullable=False, index=True)
    rate = Column(Numeric(18, 8), nullable=False)

    # One rate per currency pair per date
    __table_args__ = (
        UniqueConstraint('base_currency', 'target_currency', 'date', name='uq_fx_pair_date'),
    )
