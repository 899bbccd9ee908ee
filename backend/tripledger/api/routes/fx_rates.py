"""
Foreign exchange rates routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from datetime import date
from tripledger.core.currency import normalize_currency
from tripledger.db.session import get_db
from tripledger.schemas.exchange_rate import FxRateResponse
from tripledger.services.fx_service import get_fx_rate

router = APIRouter(prefix="/fx-rates", tags=["fx-rates"])


@router.get("/{date}", response_model=FxRateResponse)
async def get_exchange_rate_for_date(
    date: date,
    base: str,
    target: str,
    db: Session = Depends(get_db)
):
    """Get the rate for 1 unit of `target` in `base` on a date (cached or fetched)."""
    rate = get_fx_rate(db, base, target, date)
    if rate is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Exchange rate unavailable for {normalize_currency(target)} on {date}"
        )

    return FxRateResponse(
        base_currency=normalize_currency(base),
        target_currency=normalize_currency(target),
        date=date,
        rate=rate
    )
