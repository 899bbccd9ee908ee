"""
Settlement service: net balances and suggested payments for a trip.
"""
import logging
from sqlalchemy.orm import Session
from typing import Callable, Dict, List, Sequence
from tripledger.core.currency import format_amount, normalize_currency
from tripledger.schemas.expense import ExpenseRecord
from tripledger.schemas.settlement import OptimizedSettlement, SettlementSummary, UserBalance
from tripledger.services.exceptions import TripNotFoundError
from tripledger.services.expense_service import get_base_currency, get_trip, list_trip_expenses, to_expense_record
from tripledger.services.fx_service import convert_expense_to_base_currency, convert_minor_units

logger = logging.getLogger(__name__)

SettlementStrategy = Callable[[Sequence[UserBalance]], List[OptimizedSettlement]]


def calculate_user_balances(expenses: Sequence[ExpenseRecord], base_currency: str) -> List[UserBalance]:
    """
    Calculate net balance for each user across all expenses.

    Net balance = total paid - total owed, in base currency minor units.
    Expenses whose FX rate is missing are skipped entirely. Users appear in
    order of first appearance and are kept even when they net to zero.

    Each share of a foreign-currency expense is converted on its own, so in
    multi-currency trips the converted shares can differ from the converted
    total by a few minor units.
    """
    base = normalize_currency(base_currency)
    balances: Dict[str, UserBalance] = {}  # user_id -> balance, insertion ordered

    def entry(user_id: str, name: str) -> UserBalance:
        if user_id not in balances:
            balances[user_id] = UserBalance(user_id=user_id, display_name=name, net_balance=0, currency=base)
        return balances[user_id]

    for expense in expenses:
        conversion = convert_expense_to_base_currency(expense, base)
        if conversion.needs_fx_rate:
            logger.debug("Skipping expense %s: no FX rate for %s", expense.id, expense.currency)
            continue

        # Payer paid the full amount
        entry(expense.payer_id, expense.payer_name).net_balance += conversion.amount

        foreign = normalize_currency(expense.currency) != base
        for share in expense.participants:
            share_base = share.share_amount
            if foreign:
                share_base = convert_minor_units(share.share_amount, expense.fx_rate)
            entry(share.user_id, share.user_name).net_balance -= share_base

    return list(balances.values())


def greedy_settlements(balances: Sequence[UserBalance]) -> List[OptimizedSettlement]:
    """
    Match the largest debtor with the largest creditor until one side runs out.

    Keeps the number of transfers low but is not guaranteed minimal for
    every balance topology.
    """
    # Separate creditors (positive balance) and debtors (negative balance); zero balances drop out
    creditors = [[b, b.net_balance] for b in balances if b.net_balance > 0]
    debtors = [[b, -b.net_balance] for b in balances if b.net_balance < 0]  # Store as positive

    if not creditors or not debtors:
        return []

    # Sort in descending order (stable, so ties keep input order)
    creditors.sort(key=lambda x: x[1], reverse=True)
    debtors.sort(key=lambda x: x[1], reverse=True)

    settlements = []
    cred_idx = 0
    debt_idx = 0

    while cred_idx < len(creditors) and debt_idx < len(debtors):
        creditor, cred_amount = creditors[cred_idx]
        debtor, debt_amount = debtors[debt_idx]

        # Transfer the minimum of what's owed and what's needed
        amount = min(cred_amount, debt_amount)
        if amount <= 0:
            break

        settlements.append(OptimizedSettlement(
            from_user_id=debtor.user_id,
            from_user_name=debtor.display_name,
            to_user_id=creditor.user_id,
            to_user_name=creditor.display_name,
            amount=amount,
            currency=debtor.currency,
        ))

        creditors[cred_idx][1] = cred_amount - amount
        debtors[debt_idx][1] = debt_amount - amount

        if creditors[cred_idx][1] == 0:
            cred_idx += 1
        if debtors[debt_idx][1] == 0:
            debt_idx += 1

    return settlements


def optimize_settlements(
    balances: Sequence[UserBalance],
    strategy: SettlementStrategy = greedy_settlements
) -> List[OptimizedSettlement]:
    """Suggest payments that bring every balance to zero. Does not modify ``balances``."""
    if not balances:
        return []
    return strategy(balances)


def _summary_text(balances: List[UserBalance], settlements: List[OptimizedSettlement],
                  expense_count: int, excluded: List[str], base_currency: str) -> str:
    lines = [f"Expenses: {expense_count}"]
    if excluded:
        lines.append(f"Excluded (missing FX rate): {len(excluded)}")
    lines.append(f"Participants: {len(balances)}")
    lines.append("\nNet balances:")
    for balance in balances:
        name = balance.display_name or balance.user_id
        amount = format_amount(balance.net_balance, base_currency)
        lines.append(f"  {name}: {'+' if balance.net_balance > 0 else ''}{amount}")
    lines.append("\nTransfers:")
    for settlement in settlements:
        lines.append(
            f"  {settlement.from_user_name or settlement.from_user_id} -> "
            f"{settlement.to_user_name or settlement.to_user_id}: "
            f"{format_amount(settlement.amount, base_currency)}"
        )
    return "\n".join(lines)


def build_settlement_summary(
    trip_id: str,
    expenses: Sequence[ExpenseRecord],
    base_currency: str,
    strategy: SettlementStrategy = greedy_settlements
) -> SettlementSummary:
    """Balances, settlements and excluded expenses for an already-loaded expense list."""
    base = normalize_currency(base_currency)
    excluded = [
        expense.id for expense in expenses
        if convert_expense_to_base_currency(expense, base).needs_fx_rate
    ]
    if excluded:
        logger.warning("Trip %s: %d expense(s) excluded for missing FX rate", trip_id, len(excluded))

    balances = calculate_user_balances(expenses, base)
    settlements = optimize_settlements(balances, strategy=strategy)
    expense_count = len(expenses) - len(excluded)

    return SettlementSummary(
        trip_id=trip_id,
        base_currency=base,
        balances=balances,
        settlements=settlements,
        total_expenses=expense_count,
        excluded_expenses=excluded,
        summary=_summary_text(balances, settlements, expense_count, excluded, base),
    )


def get_settlement_summary(trip_id: str, db: Session) -> SettlementSummary:
    """Load a trip's expenses and compute its settlement summary."""
    trip = get_trip(db, trip_id)
    if trip is None:
        raise TripNotFoundError(trip_id)

    expenses = [to_expense_record(expense) for expense in list_trip_expenses(db, trip_id)]
    return build_settlement_summary(trip_id, expenses, get_base_currency(trip))
