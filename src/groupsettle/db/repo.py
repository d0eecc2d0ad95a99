from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

import asyncpg

from groupsettle.db.models import ExpenseRecord, Member
from groupsettle.logging import get_logger, sql_logger


class Database:
    def __init__(self, dsn: str) -> None:
        self._dsn = dsn
        self._pool: asyncpg.Pool | None = None
        self._log = get_logger(__name__)

    async def connect(self) -> None:
        if self._pool is None:
            # asyncpg expects a plain postgresql:// scheme
            dsn = self._dsn.replace("+asyncpg", "")
            self._pool = await asyncpg.create_pool(dsn)
            self._log.info("db.pool.created")

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            self._log.info("db.pool.closed")

    async def fetch(self, query: str, *args: Any) -> list[asyncpg.Record]:
        await self._ensure_pool()
        assert self._pool
        sql_logger.info("sql.fetch", query=query, args=args)
        return await self._pool.fetch(query, *args)

    async def _ensure_pool(self) -> None:
        if self._pool is None:
            await self.connect()


class GroupRepository:
    """Read-only view over the group tables owned by the CRUD service."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def members_of(self, group_id: UUID) -> list[Member]:
        rows = await self.db.fetch(
            """
            SELECT id, name
            FROM members
            WHERE group_id = $1
            ORDER BY joined_at, id
            """,
            group_id,
        )
        return [Member(id=row["id"], name=row["name"]) for row in rows]

    async def expenses_of(self, group_id: UUID) -> list[ExpenseRecord]:
        rows = await self.db.fetch(
            """
            -- members holding a leftover unit of an uneven split are listed first
            SELECT e.id, e.paid_by_id, e.amount, e.description, e.created_at,
                   array_agg(es.member_id ORDER BY abs(es.amount) DESC, es.member_id)
                       FILTER (WHERE es.member_id IS NOT NULL) AS split_between
            FROM expenses e
            LEFT JOIN expense_splits es ON es.expense_id = e.id
            WHERE e.group_id = $1
            GROUP BY e.id
            ORDER BY e.created_at, e.id
            """,
            group_id,
        )
        return [
            ExpenseRecord(
                id=row["id"],
                payer_id=row["paid_by_id"],
                amount=int(row["amount"]),
                split_between=tuple(row["split_between"] or ()),
                description=row["description"],
                created_at=row["created_at"],
            )
            for row in rows
        ]


class InMemoryGroupStore:
    """Explicit in-process store; each instance owns its own data."""

    def __init__(self) -> None:
        self._members: dict[UUID, list[Member]] = {}
        self._expenses: dict[UUID, list[ExpenseRecord]] = {}

    def add_member(self, group_id: UUID, member: Member) -> None:
        self._members.setdefault(group_id, []).append(member)

    def remove_member(self, group_id: UUID, member_id: UUID) -> Optional[Member]:
        members = self._members.get(group_id, [])
        for index, member in enumerate(members):
            if member.id == member_id:
                return members.pop(index)
        return None

    def add_expense(self, group_id: UUID, expense: ExpenseRecord) -> None:
        self._expenses.setdefault(group_id, []).append(expense)

    def members_of(self, group_id: UUID) -> list[Member]:
        return list(self._members.get(group_id, []))

    def expenses_of(self, group_id: UUID) -> list[ExpenseRecord]:
        return list(self._expenses.get(group_id, []))
