from __future__ import annotations

from typing import List, Mapping

from groupsettle.db.models import MemberId, Transfer
from groupsettle.logging import get_logger

log = get_logger(__name__)


def _by_magnitude(entry: tuple[MemberId, int]) -> tuple[int, str]:
    member_id, amount = entry
    return -amount, str(member_id)


def settle(balances: Mapping[MemberId, int]) -> List[Transfer]:
    """Greedily match the largest debtor with the largest creditor.

    Emits at most ``len(debtors) + len(creditors) - 1`` transfers. Both lists
    are sorted once by descending magnitude, ties by member id.
    """
    creditors: list[tuple[MemberId, int]] = []
    debtors: list[tuple[MemberId, int]] = []

    for member_id, balance in balances.items():
        if balance > 0:
            creditors.append((member_id, balance))
        elif balance < 0:
            debtors.append((member_id, -balance))

    creditors.sort(key=_by_magnitude)
    debtors.sort(key=_by_magnitude)

    transfers: list[Transfer] = []
    i, j = 0, 0

    while i < len(debtors) and j < len(creditors):
        debt_id, debt_amount = debtors[i]
        cred_id, cred_amount = creditors[j]

        pay = min(debt_amount, cred_amount)
        if pay > 0:
            transfers.append(Transfer(from_member=debt_id, to_member=cred_id, amount=pay))

        debt_amount -= pay
        cred_amount -= pay

        if debt_amount == 0:
            i += 1
        else:
            debtors[i] = (debt_id, debt_amount)

        if cred_amount == 0:
            j += 1
        else:
            creditors[j] = (cred_id, cred_amount)

    unmatched_debt = sum(amount for _, amount in debtors[i:])
    unmatched_credit = sum(amount for _, amount in creditors[j:])
    if unmatched_debt or unmatched_credit:
        log.warning(
            "settle.unbalanced",
            unmatched_debt=unmatched_debt,
            unmatched_credit=unmatched_credit,
        )

    return transfers
