"""
Tests for participant and payer resolution.
"""
import pytest

from conftest import ALICE_ID, BOB_ID, OUTSIDER_ID
from tripledger.schemas.trip import TripMember
from tripledger.services.participant_resolver import (
    get_resolver,
    resolve_participant_id,
    resolve_participant_id_partial,
    resolve_payer,
)


@pytest.fixture
def full_names():
    return [
        TripMember(user_id=ALICE_ID, full_name="Alice Smith"),
        TripMember(user_id=BOB_ID, full_name="Robert Williams"),
        TripMember(user_id="00000000-0000-0000-0000-000000000005", full_name="José García"),
    ]


def test_exact_match_is_case_insensitive(roster):
    assert resolve_participant_id("ALICE", roster) == ALICE_ID
    assert resolve_participant_id("  bob ", roster) == BOB_ID


def test_exact_match_ignores_accents(full_names):
    assert resolve_participant_id("jose garcia", full_names) == "00000000-0000-0000-0000-000000000005"


def test_exact_match_rejects_partial_names(full_names):
    assert resolve_participant_id("Alice", full_names) is None


def test_uuid_must_be_on_roster(roster):
    assert resolve_participant_id(ALICE_ID, roster) == ALICE_ID
    assert resolve_participant_id(ALICE_ID.upper(), roster) == ALICE_ID
    assert resolve_participant_id(OUTSIDER_ID, roster) is None


def test_unknown_and_empty_names(roster):
    assert resolve_participant_id("Unknown", roster) is None
    assert resolve_participant_id("", roster) is None


def test_partial_match_by_word_and_prefix(full_names):
    assert resolve_participant_id_partial("alice", full_names) == ALICE_ID
    assert resolve_participant_id_partial("Rob", full_names) == BOB_ID
    assert resolve_participant_id_partial("Williams", full_names) == BOB_ID


def test_partial_match_ambiguous_is_unresolved():
    roster = [
        TripMember(user_id=ALICE_ID, full_name="Sam Smith"),
        TripMember(user_id=BOB_ID, full_name="Sam Jones"),
    ]
    assert resolve_participant_id_partial("Sam", roster) is None
    assert resolve_participant_id_partial("sam jones", roster) == BOB_ID


def test_partial_match_does_not_widen_uuid_lookup(full_names):
    assert resolve_participant_id_partial(OUTSIDER_ID, full_names) is None


def test_get_resolver():
    assert get_resolver("exact") is resolve_participant_id
    assert get_resolver("partial") is resolve_participant_id_partial
    with pytest.raises(ValueError):
        get_resolver("fuzzy")


def test_resolve_payer_defaults_when_missing(roster):
    result = resolve_payer(None, BOB_ID, roster)
    assert result.payer_id == BOB_ID
    assert result.error is None


def test_resolve_payer_by_name(roster):
    assert resolve_payer("alice", BOB_ID, roster).payer_id == ALICE_ID


def test_resolve_payer_unknown(roster):
    result = resolve_payer("Mallory", BOB_ID, roster)
    assert result.error == 'Payer "Mallory" is not a participant in this trip'
    assert result.payer_id == BOB_ID


def test_resolve_payer_default_must_be_member(roster):
    result = resolve_payer(None, OUTSIDER_ID, roster)
    assert result.payer_id is None
    assert result.error == f'Payer "{OUTSIDER_ID}" is not a participant in this trip'
