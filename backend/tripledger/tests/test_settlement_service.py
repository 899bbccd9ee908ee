"""
Tests for balance aggregation and settlement optimization.
"""
import random
from decimal import Decimal

from tripledger.schemas.expense import ExpenseRecord, ParticipantShare, SplitInput
from tripledger.schemas.settlement import OptimizedSettlement, UserBalance
from tripledger.schemas.trip import TripMember
from tripledger.services.settlement_service import (
    build_settlement_summary,
    calculate_user_balances,
    greedy_settlements,
    optimize_settlements,
)
from tripledger.services.split_service import compute_split_shares


def share(user_id, amount, name=None, share_type="equal"):
    return ParticipantShare(user_id=user_id, user_name=name or user_id.title(), share_amount=amount, share_type=share_type)


def expense(expense_id, payer, amount, shares, currency="EUR", fx_rate=None):
    return ExpenseRecord(
        id=expense_id,
        amount=amount,
        currency=currency,
        payer_id=payer,
        payer_name=payer.title(),
        fx_rate=fx_rate,
        participants=shares,
    )


def balance(user_id, net, currency="EUR"):
    return UserBalance(user_id=user_id, display_name=user_id.title(), net_balance=net, currency=currency)


def as_dict(balances):
    return {b.user_id: b.net_balance for b in balances}


def apply_settlements(balances, settlements):
    result = as_dict(balances)
    for s in settlements:
        result[s.from_user_id] += s.amount
        result[s.to_user_id] -= s.amount
    return result


def test_single_expense_equal_split():
    expenses = [expense("e1", "alice", 6000, [share("alice", 2000), share("bob", 2000), share("carol", 2000)])]

    balances = calculate_user_balances(expenses, "EUR")

    assert as_dict(balances) == {"alice": 4000, "bob": -2000, "carol": -2000}
    assert all(b.currency == "EUR" for b in balances)
    assert balances[0].display_name == "Alice"


def test_balances_keep_first_appearance_order_and_zero_users():
    expenses = [
        expense("e1", "carol", 1000, [share("carol", 1000)]),
        expense("e2", "alice", 1000, [share("bob", 1000)]),
    ]

    balances = calculate_user_balances(expenses, "EUR")

    assert [b.user_id for b in balances] == ["carol", "alice", "bob"]
    assert as_dict(balances)["carol"] == 0


def test_no_expenses_gives_no_balances():
    assert calculate_user_balances([], "EUR") == []


def test_missing_fx_rate_excludes_expense_entirely():
    expenses = [
        expense("e1", "alice", 1000, [share("alice", 500), share("bob", 500)]),
        expense("e2", "dave", 5000, [share("dave", 2500), share("erin", 2500)], currency="USD"),
    ]

    balances = calculate_user_balances(expenses, "EUR")

    assert as_dict(balances) == {"alice": 500, "bob": -500}


def test_foreign_shares_converted_individually():
    # 3 shares of 1 unit at 0.5 round to 1 each, the total 3 * 0.5 rounds to 2
    expenses = [
        expense("e1", "alice", 3, [share("alice", 1), share("bob", 1), share("carol", 1)],
                currency="USD", fx_rate=Decimal("0.5")),
    ]

    balances = as_dict(calculate_user_balances(expenses, "EUR"))

    assert balances == {"alice": 1, "bob": -1, "carol": -1}
    assert sum(balances.values()) == -1


def test_conservation_single_currency():
    rng = random.Random(7)
    users = ["alice", "bob", "carol", "dave", "erin"]
    members = [TripMember(user_id=u, full_name=u) for u in users]

    expenses = []
    for i in range(40):
        amount = rng.randint(1, 50000)
        names = rng.sample(users, rng.randint(1, len(users)))
        split = compute_split_shares(f"e{i}", SplitInput(amount=amount, participants=names), members)
        expenses.append(expense(f"e{i}", rng.choice(users), amount,
                                [share(p.user_id, p.share_amount) for p in split.participants]))

    balances = calculate_user_balances(expenses, "EUR")

    assert sum(b.net_balance for b in balances) == 0


def test_optimize_empty():
    assert optimize_settlements([]) == []


def test_optimize_one_sided_balances():
    assert optimize_settlements([balance("alice", 500), balance("bob", 0)]) == []
    assert optimize_settlements([balance("alice", -500)]) == []


def test_optimize_largest_debtor_pays_largest_creditor():
    balances = [balance("alice", 4000), balance("bob", -2500), balance("carol", -1500), balance("dave", 0)]

    settlements = optimize_settlements(balances)

    assert [(s.from_user_id, s.to_user_id, s.amount) for s in settlements] == [
        ("bob", "alice", 2500),
        ("carol", "alice", 1500),
    ]
    assert settlements[0].from_user_name == "Bob"
    assert settlements[0].to_user_name == "Alice"
    assert all(s.currency == "EUR" for s in settlements)


def test_optimize_zeroes_all_balances():
    balances = [
        balance("a", 700), balance("b", -300), balance("c", 250),
        balance("d", -400), balance("e", -250), balance("f", 0),
    ]

    settlements = optimize_settlements(balances)

    assert all(s.amount > 0 for s in settlements)
    assert all(v == 0 for v in apply_settlements(balances, settlements).values())
    assert len(settlements) <= 4


def test_optimize_is_idempotent_and_does_not_mutate():
    balances = [balance("a", 1000), balance("b", -600), balance("c", -400)]
    before = [b.model_copy() for b in balances]

    first = optimize_settlements(balances)
    second = optimize_settlements(balances)

    assert first == second
    assert balances == before


def test_optimize_accepts_other_strategy():
    def pay_first_creditor(balances):
        creditor = next(b for b in balances if b.net_balance > 0)
        return [
            OptimizedSettlement(from_user_id=b.user_id, to_user_id=creditor.user_id,
                                amount=-b.net_balance, currency=b.currency)
            for b in balances if b.net_balance < 0
        ]

    balances = [balance("a", 1000), balance("b", -600), balance("c", -400)]

    assert optimize_settlements(balances, strategy=pay_first_creditor) == pay_first_creditor(balances)
    assert optimize_settlements(balances) == greedy_settlements(balances)


def test_end_to_end_usd_expense_in_eur_trip():
    roster = [TripMember(user_id="alice", full_name="Alice"), TripMember(user_id="bob", full_name="Bob")]
    split = compute_split_shares("e1", SplitInput(amount=301, participants=["Alice", "Bob"]), roster)
    expenses = [
        expense("e1", "alice", 301, [share(p.user_id, p.share_amount) for p in split.participants],
                currency="USD", fx_rate=Decimal("1.0")),
    ]

    balances = calculate_user_balances(expenses, "EUR")
    settlements = optimize_settlements(balances)

    assert as_dict(balances) == {"alice": 150, "bob": -150}
    assert [(s.from_user_id, s.to_user_id, s.amount, s.currency) for s in settlements] == [("bob", "alice", 150, "EUR")]


def test_settlement_summary_lists_excluded_expenses():
    expenses = [
        expense("e1", "alice", 6000, [share("alice", 3000), share("bob", 3000)]),
        expense("e2", "bob", 1000, [share("alice", 1000)], currency="JPY"),
    ]

    summary = build_settlement_summary("trip-1", expenses, "eur")

    assert summary.base_currency == "EUR"
    assert summary.total_expenses == 1
    assert summary.excluded_expenses == ["e2"]
    assert as_dict(summary.balances) == {"alice": 3000, "bob": -3000}
    assert len(summary.settlements) == 1
    assert "Bob -> Alice: 30.00 EUR" in summary.summary


def test_settlement_summary_empty():
    summary = build_settlement_summary("trip-1", [], "EUR")

    assert summary.balances == []
    assert summary.settlements == []
    assert summary.total_expenses == 0
    assert summary.excluded_expenses == []
