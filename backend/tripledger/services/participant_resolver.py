"""
Participant resolution: map a free-text name or a user id onto a trip member.

Resolvers are plain functions ``(identifier, roster) -> user_id | None`` so the
matching policy can change without touching the split arithmetic.
"""
import re
import unicodedata
from typing import Callable, Optional, Sequence
from pydantic import BaseModel
from tripledger.schemas.trip import TripMember

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

ParticipantResolver = Callable[[str, Sequence[TripMember]], Optional[str]]


class PayerResolution(BaseModel):
    """Resolved payer id, or the default id plus an error message."""
    payer_id: Optional[str] = None
    error: Optional[str] = None


def normalize_name(name: str) -> str:
    """Lower-case, trim, collapse whitespace and strip accents (é -> e)."""
    value = " ".join((name or "").split()).casefold()
    decomposed = unicodedata.normalize("NFD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def is_user_id(identifier: str) -> bool:
    return bool(UUID_PATTERN.match((identifier or "").strip()))


def _match_by_id(identifier: str, roster: Sequence[TripMember]) -> Optional[str]:
    wanted = identifier.strip().lower()
    for member in roster:
        if member.user_id.lower() == wanted:
            return member.user_id
    return None


def resolve_participant_id(identifier: str, roster: Sequence[TripMember]) -> Optional[str]:
    """
    Exact policy: a UUID must be a roster id; anything else must equal a
    member's full name, case-insensitively.
    """
    if is_user_id(identifier):
        return _match_by_id(identifier, roster)

    wanted = normalize_name(identifier)
    if not wanted:
        return None
    for member in roster:
        if normalize_name(member.full_name) == wanted:
            return member.user_id
    return None


def resolve_participant_id_partial(identifier: str, roster: Sequence[TripMember]) -> Optional[str]:
    """
    Partial policy: exact matching first, then a single member whose name
    contains the input as a word or word prefix ("Rob" -> "Robert Williams").
    Ambiguous input resolves to None.
    """
    exact = resolve_participant_id(identifier, roster)
    if exact or is_user_id(identifier):
        return exact

    wanted = normalize_name(identifier)
    if not wanted:
        return None

    candidates = []
    for member in roster:
        words = normalize_name(member.full_name).split(" ")
        if any(word.startswith(wanted) for word in words):
            candidates.append(member.user_id)

    if len(candidates) == 1:
        return candidates[0]
    return None


RESOLVERS = {
    "exact": resolve_participant_id,
    "partial": resolve_participant_id_partial,
}


def get_resolver(policy: str) -> ParticipantResolver:
    """Look up a resolver by its PARTICIPANT_MATCHING name."""
    try:
        return RESOLVERS[policy]
    except KeyError:
        raise ValueError(f"Unknown participant matching policy: {policy}")


def resolve_payer(
    payer: Optional[str],
    default_payer_id: Optional[str],
    roster: Sequence[TripMember],
    resolver: ParticipantResolver = resolve_participant_id
) -> PayerResolution:
    """
    Resolve the payer, falling back to ``default_payer_id`` when none is given.
    The fallback must itself be a roster id.
    """
    if not payer:
        if default_payer_id is None:
            return PayerResolution()
        member_id = _match_by_id(default_payer_id, roster)
        if not member_id:
            return PayerResolution(error=f'Payer "{default_payer_id}" is not a participant in this trip')
        return PayerResolution(payer_id=member_id)

    resolved = resolver(payer, roster)
    if not resolved:
        return PayerResolution(
            payer_id=default_payer_id,
            error=f'Payer "{payer}" is not a participant in this trip',
        )
    return PayerResolution(payer_id=resolved)
