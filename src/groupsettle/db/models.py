from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Hashable, Optional, Sequence

MemberId = Hashable


@dataclass(slots=True, frozen=True)
class Member:
    id: MemberId
    name: str


@dataclass(slots=True, frozen=True)
class ExpenseRecord:
    id: Hashable
    payer_id: MemberId
    amount: int
    split_between: Sequence[MemberId] = field(default_factory=tuple)
    description: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(slots=True, frozen=True)
class Transfer:
    from_member: MemberId
    to_member: MemberId
    amount: int


@dataclass(slots=True, frozen=True)
class SettlementLine:
    from_member_id: MemberId
    to_member_id: MemberId
    amount: int
    from_name: str
    to_name: str


@dataclass(slots=True, frozen=True)
class MemberBalance:
    member_id: MemberId
    member_name: str
    balance: int


@dataclass(slots=True)
class CalculationResult:
    settlements: list[SettlementLine]
    balances: list[MemberBalance]
