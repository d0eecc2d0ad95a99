"""JSON request/response bodies for the settlement calculation."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from groupsettle.db.models import CalculationResult, ExpenseRecord, Member


class MemberInput(BaseModel):
    id: UUID
    name: str

    def to_member(self) -> Member:
        return Member(id=self.id, name=self.name)


class ExpenseInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    payer_id: UUID = Field(alias="payerId")
    amount: StrictInt
    description: Optional[str] = None
    split_between: List[UUID] = Field(default_factory=list, alias="splitBetween")
    created_at: Optional[datetime] = Field(None, alias="createdAt")

    def to_record(self) -> ExpenseRecord:
        return ExpenseRecord(
            id=self.id,
            payer_id=self.payer_id,
            amount=self.amount,
            split_between=tuple(self.split_between),
            description=self.description,
            created_at=self.created_at,
        )


class CalculateSettlementsRequest(BaseModel):
    expenses: List[ExpenseInput] = Field(default_factory=list)

    def to_records(self) -> list[ExpenseRecord]:
        return [expense.to_record() for expense in self.expenses]


class SettlementOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_member_id: UUID = Field(alias="fromMemberId")
    to_member_id: UUID = Field(alias="toMemberId")
    amount: int
    from_name: str = Field(alias="fromName")
    to_name: str = Field(alias="toName")


class BalanceOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    member_id: UUID = Field(alias="memberId")
    member_name: str = Field(alias="memberName")
    balance: int


class CalculateSettlementsResponse(BaseModel):
    settlements: List[SettlementOut]
    balances: List[BalanceOut]

    @classmethod
    def from_result(cls, result: CalculationResult) -> "CalculateSettlementsResponse":
        return cls(
            settlements=[
                SettlementOut(
                    from_member_id=line.from_member_id,
                    to_member_id=line.to_member_id,
                    amount=line.amount,
                    from_name=line.from_name,
                    to_name=line.to_name,
                )
                for line in result.settlements
            ],
            balances=[
                BalanceOut(
                    member_id=entry.member_id,
                    member_name=entry.member_name,
                    balance=entry.balance,
                )
                for entry in result.balances
            ],
        )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
