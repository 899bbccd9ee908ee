"""
Split calculator: divide an expense total into per-participant shares.

All amounts are integer minor units. Rounding leftovers are placed by two
fixed policies, and callers rely on the exact placement:

- equal splits give the whole remainder to the first participant;
- percentage splits let the last participant absorb every rounding error.

Failures never raise. They come back as ``SplitResult.error`` with no shares
(all-or-nothing), and the expense-creation flow treats them as fatal.
"""
import logging
from decimal import Decimal, ROUND_FLOOR
from typing import List, Optional, Sequence, Tuple
from tripledger.schemas.expense import ExpenseParticipantRecord, SplitInput, SplitResult
from tripledger.schemas.trip import TripMember
from tripledger.services.participant_resolver import ParticipantResolver, resolve_participant_id

logger = logging.getLogger(__name__)

# Index of the participant who receives the equal-split remainder
EQUAL_REMAINDER_TO_FIRST = 0
# Index of the participant who absorbs percentage rounding
PERCENTAGE_REMAINDER_TO_LAST = -1


def _failure(message: str) -> SplitResult:
    logger.info("Split rejected: %s", message)
    return SplitResult(participants=[], error=message)


def _unknown_participant(name: str) -> str:
    return f'Participant "{name}" is not in this trip'


def _resolve_all(
    identifiers: Sequence[str],
    roster: Sequence[TripMember],
    resolver: ParticipantResolver
) -> Tuple[List[str], Optional[str]]:
    """Resolve every identifier; each user may hold only one share."""
    user_ids = []
    for identifier in identifiers:
        user_id = resolver(identifier, roster)
        if not user_id:
            return [], _unknown_participant(identifier)
        if user_id in user_ids:
            return [], f'Participant "{identifier}" is listed more than once'
        user_ids.append(user_id)
    return user_ids, None


def split_equal(amount: int, count: int) -> List[int]:
    """Floor-divide ``amount``; the remainder goes to EQUAL_REMAINDER_TO_FIRST."""
    share = amount // count
    shares = [share] * count
    shares[EQUAL_REMAINDER_TO_FIRST] += amount - share * count
    return shares


def split_percentage(amount: int, percentages: Sequence[Decimal]) -> List[int]:
    """Floor each percentage share; PERCENTAGE_REMAINDER_TO_LAST gets what is left."""
    shares = [
        int((Decimal(amount) * Decimal(percentage) / 100).to_integral_value(rounding=ROUND_FLOOR))
        for percentage in percentages
    ]
    absorbed = shares[PERCENTAGE_REMAINDER_TO_LAST]
    shares[PERCENTAGE_REMAINDER_TO_LAST] = amount - (sum(shares) - absorbed)
    return shares


def _equal_participant_ids(
    split_input: SplitInput,
    roster: Sequence[TripMember],
    resolver: ParticipantResolver
) -> Tuple[List[str], Optional[str]]:
    if split_input.participants:
        return _resolve_all(split_input.participants, roster, resolver)

    members = list(roster)
    if split_input.split_count:
        members = members[:split_input.split_count]
    return [member.user_id for member in members], None


def compute_split_shares(
    expense_id: str,
    split_input: SplitInput,
    trip_participants: Sequence[TripMember],
    resolver: ParticipantResolver = resolve_participant_id
) -> SplitResult:
    """
    Compute the share records for one expense.

    Args:
        expense_id: Expense the shares belong to
        split_input: Total amount and split strategy
        trip_participants: Trip roster used for name resolution and defaults
        resolver: Participant matching policy

    Returns:
        SplitResult with one record per participant in input order, or an error
    """
    amount = split_input.amount
    split_type = split_input.split_type

    if split_type == "none":
        return SplitResult(participants=[])

    if split_type == "equal":
        user_ids, error = _equal_participant_ids(split_input, trip_participants, resolver)
        if error:
            return _failure(error)
        if not user_ids:
            return _failure("No participants available for equal split")

        shares = split_equal(amount, len(user_ids))
        return SplitResult(participants=[
            ExpenseParticipantRecord(
                expense_id=expense_id,
                user_id=user_id,
                share_amount=share,
                share_type="equal",
            )
            for user_id, share in zip(user_ids, shares)
        ])

    if split_type == "percentage":
        splits = split_input.percentage_splits
        if not splits:
            return _failure("Percentage splits are required for a percentage split")

        total = sum(split.percentage for split in splits)
        if total != 100:
            return _failure(f"Percentages ({total}) must add up to 100")

        user_ids, error = _resolve_all([split.name for split in splits], trip_participants, resolver)
        if error:
            return _failure(error)

        shares = split_percentage(amount, [split.percentage for split in splits])
        return SplitResult(participants=[
            ExpenseParticipantRecord(
                expense_id=expense_id,
                user_id=user_id,
                share_amount=share,
                share_type="percentage",
                share_value=split.percentage,
            )
            for user_id, share, split in zip(user_ids, shares, splits)
        ])

    if split_type == "custom":
        splits = split_input.custom_splits
        if not splits:
            return _failure("Custom splits are required for a custom split")

        total = sum(split.amount for split in splits)
        if total != amount:
            return _failure(f"Participant shares ({total}) do not sum to expense total ({amount})")

        user_ids, error = _resolve_all([split.name for split in splits], trip_participants, resolver)
        if error:
            return _failure(error)

        return SplitResult(participants=[
            ExpenseParticipantRecord(
                expense_id=expense_id,
                user_id=user_id,
                share_amount=split.amount,
                share_type="amount",
                share_value=Decimal(split.amount),
            )
            for user_id, split in zip(user_ids, splits)
        ])

    return _failure(f"Unsupported split type: {split_type}")
