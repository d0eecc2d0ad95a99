from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from groupsettle.config import get_settings
from groupsettle.db.models import CalculationResult, Member
from groupsettle.db.repo import Database, GroupRepository, InMemoryGroupStore
from groupsettle.logging import configure_logging, get_logger
from groupsettle.schemas import CalculateSettlementsRequest, CalculateSettlementsResponse, MemberInput
from groupsettle.services.calculator import (
    GroupNotFoundError,
    InvalidGroupIdError,
    calculate_group_settlements,
    calculate_group_settlements_async,
    parse_group_id,
)
from groupsettle.services.split import RemainderPolicy
from groupsettle.services.summary import format_summary

EXIT_CLIENT_ERROR = 2

_roster_adapter = TypeAdapter(List[MemberInput])


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="groupsettle", description="Compute who owes whom in a group.")
    parser.add_argument("group_id", help="group UUID")
    parser.add_argument("--request", type=Path, help="request JSON file (default: stdin)")
    parser.add_argument("--roster", type=Path, help="roster JSON file; loaded from DATABASE_URL when omitted")
    parser.add_argument("--stored", action="store_true", help="use the group's stored expenses")
    parser.add_argument("--policy", choices=[p.value for p in RemainderPolicy], help="remainder policy")
    parser.add_argument("--format", choices=["json", "text"], default="json", dest="output_format")
    parser.add_argument("--currency", default="", help="currency label for text output")
    parser.add_argument(
        "--exponent",
        type=int,
        default=2,
        help="minor-unit digits of the currency for text output (0 for JPY)",
    )
    return parser


def load_roster(path: Path) -> list[Member]:
    entries = _roster_adapter.validate_json(path.read_text(encoding="utf-8"))
    return [entry.to_member() for entry in entries]


def load_request(path: Optional[Path]) -> CalculateSettlementsRequest:
    raw = path.read_text(encoding="utf-8") if path else sys.stdin.read()
    return CalculateSettlementsRequest.model_validate_json(raw)


async def _calculate_from_database(
    database_url: str,
    group_id: str,
    request: Optional[CalculateSettlementsRequest],
    policy: RemainderPolicy,
) -> CalculationResult:
    db = Database(database_url)
    await db.connect()
    try:
        repo = GroupRepository(db)
        expenses = request.to_records() if request is not None else None
        return await calculate_group_settlements_async(repo, group_id, expenses, policy)
    finally:
        await db.close()


def run(args: argparse.Namespace) -> CalculationResult:
    settings = get_settings()
    policy = RemainderPolicy(args.policy) if args.policy else settings.remainder_policy
    request = None if args.stored else load_request(args.request)

    if args.roster is not None:
        gid = parse_group_id(args.group_id)
        store = InMemoryGroupStore()
        for member in load_roster(args.roster):
            store.add_member(gid, member)
        return calculate_group_settlements(store, gid, request.to_records(), policy)

    if not settings.database_url:
        raise ValueError("DATABASE_URL is not configured; pass --roster instead")
    return asyncio.run(_calculate_from_database(settings.database_url, args.group_id, request, policy))


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.stored and args.roster is not None:
        parser.error("--stored reads expenses from the database and cannot be combined with --roster")
    try:
        settings = get_settings()
    except ValidationError as exc:
        print(f"error: invalid settings: {exc}", file=sys.stderr)
        return EXIT_CLIENT_ERROR

    configure_logging(settings.log_level)
    log = get_logger(__name__)

    try:
        result = run(args)
    except (GroupNotFoundError, InvalidGroupIdError, ValidationError, ValueError) as exc:
        log.warning("cli.rejected", error=str(exc))
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_CLIENT_ERROR

    if args.output_format == "text":
        print(format_summary(result, args.currency, args.exponent))
    else:
        print(CalculateSettlementsResponse.from_result(result).to_json())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
