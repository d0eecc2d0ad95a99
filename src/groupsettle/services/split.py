from __future__ import annotations

from enum import Enum
from typing import Collection, Iterable, Optional, Sequence

from groupsettle.db.models import ExpenseRecord, MemberId
from groupsettle.logging import get_logger

log = get_logger(__name__)


class RemainderPolicy(str, Enum):
    """Where the units left over by an uneven split end up."""

    FIRST_PARTICIPANTS = "first_participants"
    PAYER = "payer"
    DROP = "drop"


def distinct_participants(split_between: Iterable[MemberId]) -> list[MemberId]:
    return list(dict.fromkeys(split_between))


def truncated_share(amount: int, n: int) -> int:
    """Per-participant share of ``amount``, truncated toward zero."""
    if n <= 0:
        raise ValueError("n must be positive")
    share = abs(amount) // n
    return share if amount >= 0 else -share


def split_amount(
    amount: int,
    participants: Sequence[MemberId],
    payer_id: Optional[MemberId] = None,
    policy: RemainderPolicy = RemainderPolicy.FIRST_PARTICIPANTS,
) -> dict[MemberId, int]:
    if not participants:
        raise ValueError("participants must not be empty")

    n = len(participants)
    base_share = truncated_share(amount, n)
    shares = {participant: base_share for participant in participants}
    remainder = amount - base_share * n

    if remainder == 0 or policy == RemainderPolicy.DROP:
        return shares

    if policy == RemainderPolicy.PAYER:
        if payer_id is None:
            raise ValueError("payer_id is required for the payer remainder policy")
        shares[payer_id] = shares.get(payer_id, 0) + remainder
        return shares

    step = 1 if remainder > 0 else -1
    for participant in participants[: abs(remainder)]:
        shares[participant] += step
    return shares


def lookup_member(roster: Collection[MemberId], member_id: MemberId) -> Optional[MemberId]:
    """Lenient roster lookup: unknown ids resolve to ``None`` and contribute nothing.

    Expense history can reference members that were removed from the group
    later, so an unknown id is never an error.
    """
    if member_id in roster:
        return member_id
    log.debug("balance.unknown_member", member_id=str(member_id))
    return None


def calculate_balances(
    roster_ids: Iterable[MemberId],
    expenses: Iterable[ExpenseRecord],
    policy: RemainderPolicy = RemainderPolicy.FIRST_PARTICIPANTS,
) -> dict[MemberId, int]:
    balances: dict[MemberId, int] = {member_id: 0 for member_id in roster_ids}

    for expense in expenses:
        if expense.amount == 0:
            continue

        participants = distinct_participants(expense.split_between)
        if participants:
            shares = split_amount(expense.amount, participants, expense.payer_id, policy)
            for member_id, share in shares.items():
                known = lookup_member(balances, member_id)
                if known is not None:
                    balances[known] -= share
        else:
            log.info("balance.degenerate_split", expense_id=str(expense.id), amount=expense.amount)

        payer = lookup_member(balances, expense.payer_id)
        if payer is not None:
            balances[payer] += expense.amount

    return balances
