"""
Settlement routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from tripledger.db.session import get_db
from tripledger.schemas.settlement import SettlementSummary
from tripledger.services.exceptions import TripNotFoundError
from tripledger.services.settlement_service import get_settlement_summary

router = APIRouter(prefix="/settlements", tags=["settlements"])


@router.get("/{trip_id}", response_model=SettlementSummary)
async def get_trip_settlement(
    trip_id: str,
    db: Session = Depends(get_db)
):
    """Net balances and suggested settlements for a trip."""
    try:
        return get_settlement_summary(trip_id, db)
    except TripNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Trip not found"
        )
