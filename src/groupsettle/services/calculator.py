from __future__ import annotations

from typing import Hashable, Iterable, Optional, Protocol, Sequence
from uuid import UUID

from structlog.contextvars import bound_contextvars

from groupsettle.db.models import CalculationResult, ExpenseRecord, Member
from groupsettle.logging import get_logger
from groupsettle.services.settlement import settle
from groupsettle.services.split import RemainderPolicy, calculate_balances
from groupsettle.services.summary import compose_result

log = get_logger(__name__)


class GroupNotFoundError(LookupError):
    def __init__(self, group_id: Optional[Hashable] = None) -> None:
        self.group_id = group_id
        if group_id is None:
            super().__init__("group has no members to settle against")
        else:
            super().__init__(f"group {group_id} not found")


class InvalidGroupIdError(ValueError):
    pass


class RosterSource(Protocol):
    def members_of(self, group_id: UUID) -> Sequence[Member]: ...


class GroupSource(Protocol):
    async def members_of(self, group_id: UUID) -> Sequence[Member]: ...

    async def expenses_of(self, group_id: UUID) -> Sequence[ExpenseRecord]: ...


def parse_group_id(raw: str | UUID) -> UUID:
    if isinstance(raw, UUID):
        return raw
    try:
        return UUID(str(raw))
    except ValueError as exc:
        raise InvalidGroupIdError(f"invalid group id: {raw!r}") from exc


def calculate_settlements(
    roster: Iterable[Member],
    expenses: Iterable[ExpenseRecord],
    policy: RemainderPolicy = RemainderPolicy.FIRST_PARTICIPANTS,
    *,
    group_id: Optional[Hashable] = None,
) -> CalculationResult:
    members = list(roster)
    if not members:
        raise GroupNotFoundError(group_id)

    records = list(expenses)
    balances = calculate_balances((member.id for member in members), records, policy)
    transfers = settle(balances)
    result = compose_result(members, balances, transfers)

    log.info(
        "calculate.done",
        group_id=str(group_id) if group_id is not None else None,
        members=len(members),
        expenses=len(records),
        settlements=len(result.settlements),
    )
    return result


def calculate_group_settlements(
    source: RosterSource,
    group_id: str | UUID,
    expenses: Iterable[ExpenseRecord],
    policy: RemainderPolicy = RemainderPolicy.FIRST_PARTICIPANTS,
) -> CalculationResult:
    gid = parse_group_id(group_id)
    with bound_contextvars(group_id=str(gid)):
        return calculate_settlements(source.members_of(gid), expenses, policy, group_id=gid)


async def calculate_group_settlements_async(
    source: GroupSource,
    group_id: str | UUID,
    expenses: Optional[Iterable[ExpenseRecord]] = None,
    policy: RemainderPolicy = RemainderPolicy.FIRST_PARTICIPANTS,
) -> CalculationResult:
    """Load the roster (and stored expenses when none are given) before running the engine."""
    gid = parse_group_id(group_id)
    with bound_contextvars(group_id=str(gid)):
        roster = list(await source.members_of(gid))
        if not roster:
            raise GroupNotFoundError(gid)
        if expenses is None:
            expenses = await source.expenses_of(gid)
            log.info("calculate.stored_expenses", count=len(expenses))
        return calculate_settlements(roster, expenses, policy, group_id=gid)
