"""
Expense service for expense-related business logic.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional
import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload
from tripledger.core.config import settings
from tripledger.core.currency import normalize_currency
from tripledger.models.expense import Expense, ExpenseParticipant
from tripledger.models.trip import Trip, TripParticipant
from tripledger.schemas.expense import ExpenseCreate, ExpenseRecord, ParticipantShare
from tripledger.schemas.trip import TripMember
from tripledger.services.exceptions import ExpenseValidationError, TripNotFoundError
from tripledger.services.fx_service import get_fx_rate
from tripledger.services.participant_resolver import ParticipantResolver, get_resolver, resolve_payer
from tripledger.services.split_service import compute_split_shares

logger = logging.getLogger(__name__)


def get_trip(db: Session, trip_id: str) -> Optional[Trip]:
    return db.query(Trip).filter(Trip.id == trip_id).first()


def get_base_currency(trip: Trip) -> str:
    """Trip's base currency, falling back to DEFAULT_BASE_CURRENCY."""
    return normalize_currency(trip.base_currency or settings.DEFAULT_BASE_CURRENCY)


def get_trip_roster(db: Session, trip_id: str) -> List[TripMember]:
    """Trip participants in join order."""
    participants = db.query(TripParticipant).options(
        joinedload(TripParticipant.user)
    ).filter(
        TripParticipant.trip_id == trip_id
    ).order_by(TripParticipant.joined_at).all()

    return [TripMember(user_id=p.user_id, full_name=p.user.full_name if p.user else "") for p in participants]


def list_trip_expenses(db: Session, trip_id: str) -> List[Expense]:
    """All expenses of a trip with payer and shares loaded, oldest first."""
    return db.query(Expense).options(
        joinedload(Expense.payer),
        joinedload(Expense.participants).joinedload(ExpenseParticipant.user)
    ).filter(
        Expense.trip_id == trip_id
    ).order_by(Expense.date, Expense.created_at).all()


def to_expense_record(expense: Expense) -> ExpenseRecord:
    """Map an ORM expense onto the record the ledger computations consume."""
    return ExpenseRecord(
        id=expense.id,
        amount=expense.amount,
        currency=expense.currency,
        payer_id=expense.payer_id,
        payer_name=expense.payer.full_name if expense.payer else "",
        fx_rate=expense.fx_rate,
        participants=[
            ParticipantShare(
                user_id=p.user_id,
                user_name=p.user.full_name if p.user else "",
                share_amount=p.share_amount,
                share_type=p.share_type,
                share_value=p.share_value,
            )
            for p in expense.participants
        ],
    )


def create_expense(
    db: Session,
    trip_id: str,
    data: ExpenseCreate,
    resolver: Optional[ParticipantResolver] = None,
    fetch_fx: bool = True,
    http_client: Optional[httpx.Client] = None
) -> Expense:
    """
    Create an expense together with its participant shares.

    The FX rate is resolved once here and stored on the expense; a missing
    rate is allowed (the expense is then left out of balances until a rate
    exists). If the split cannot be computed the tentatively inserted
    expense is deleted again and ExpenseValidationError is raised.
    """
    trip = get_trip(db, trip_id)
    if trip is None:
        raise TripNotFoundError(trip_id)

    resolver = resolver or get_resolver(settings.PARTICIPANT_MATCHING)
    roster = get_trip_roster(db, trip_id)

    if not data.payer and not data.created_by:
        raise ExpenseValidationError("A payer is required")

    if data.created_by and not any(m.user_id == data.created_by for m in roster):
        raise ExpenseValidationError(f'Creator "{data.created_by}" is not a participant in this trip')

    payer = resolve_payer(data.payer, data.created_by, roster, resolver=resolver)
    if payer.error:
        raise ExpenseValidationError(payer.error)

    base_currency = get_base_currency(trip)
    expense_date = data.date or datetime.now(timezone.utc)

    # Rate is only stored for foreign-currency expenses
    fx_rate = None
    if data.currency != base_currency:
        fx_rate = get_fx_rate(db, base_currency, data.currency, expense_date.date(),
                              fetch=fetch_fx, client=http_client)

    expense = Expense(
        trip_id=trip_id,
        payer_id=payer.payer_id,
        created_by=data.created_by,
        date=expense_date,
        amount=data.amount,
        currency=data.currency,
        fx_rate=fx_rate,
        description=data.description,
        category=data.category,
        split_type=data.split_type
    )
    db.add(expense)
    db.flush()

    split = compute_split_shares(expense.id, data, roster, resolver=resolver)
    if split.error:
        # Compensating delete: the expense must not exist without its shares
        db.delete(expense)
        db.commit()
        logger.warning("Expense creation for trip %s rolled back: %s", trip_id, split.error)
        raise ExpenseValidationError(split.error)

    try:
        for position, record in enumerate(split.participants):
            db.add(ExpenseParticipant(
                expense_id=expense.id,
                user_id=record.user_id,
                position=position,
                share_amount=record.share_amount,
                share_type=record.share_type,
                share_value=record.share_value
            ))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to persist shares for expense in trip %s", trip_id)
        raise

    db.refresh(expense)
    logger.info("Created expense %s in trip %s (%s %s, %d shares)",
                expense.id, trip_id, expense.amount, expense.currency, len(split.participants))
    return expense
