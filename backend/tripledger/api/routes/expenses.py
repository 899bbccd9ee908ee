"""
Expense management routes.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from tripledger.db.session import get_db
from tripledger.models.expense import Expense
from tripledger.schemas.expense import ExpenseCreate, ExpenseResponse, ExpenseParticipantResponse
from tripledger.services.exceptions import ExpenseValidationError, TripNotFoundError
from tripledger.services import expense_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/expenses", tags=["expenses"])


def build_expense_response(expense: Expense, base_currency: str) -> ExpenseResponse:
    """Build the API response for an expense with its shares."""
    participant_responses = []
    for ep in expense.participants:
        participant_responses.append(ExpenseParticipantResponse(
            user_id=ep.user_id,
            user_name=ep.user.full_name if ep.user else "",
            share_amount=ep.share_amount,
            share_type=ep.share_type,
            share_value=ep.share_value
        ))

    return ExpenseResponse(
        id=expense.id,
        trip_id=expense.trip_id,
        payer_id=expense.payer_id,
        payer_name=expense.payer.full_name if expense.payer else "",
        date=expense.date,
        amount=expense.amount,
        currency=expense.currency,
        fx_rate=expense.fx_rate,
        base_currency=base_currency,
        description=expense.description,
        category=expense.category,
        split_type=expense.split_type,
        participants=participant_responses,
        created_at=expense.created_at
    )


@router.get("/{trip_id}", response_model=List[ExpenseResponse])
async def get_trip_expenses(
    trip_id: str,
    db: Session = Depends(get_db)
):
    """Get all expenses of a trip."""
    trip = expense_service.get_trip(db, trip_id)
    if not trip:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Trip not found"
        )

    base_currency = expense_service.get_base_currency(trip)
    return [
        build_expense_response(expense, base_currency)
        for expense in expense_service.list_trip_expenses(db, trip_id)
    ]


@router.post("/{trip_id}", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    trip_id: str,
    expense_data: ExpenseCreate,
    db: Session = Depends(get_db)
):
    """Create an expense and split it among participants."""
    try:
        expense = expense_service.create_expense(db, trip_id, expense_data)
    except TripNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Trip not found"
        )
    except ExpenseValidationError as e:
        # Message is shown to the user as-is
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    trip = expense_service.get_trip(db, trip_id)
    return build_expense_response(expense, expense_service.get_base_currency(trip))
