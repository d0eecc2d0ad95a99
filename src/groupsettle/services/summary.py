from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from groupsettle.db.models import (
    CalculationResult,
    Member,
    MemberBalance,
    MemberId,
    SettlementLine,
    Transfer,
)


def compose_result(
    roster: Sequence[Member],
    balances: Mapping[MemberId, int],
    transfers: Iterable[Transfer],
) -> CalculationResult:
    """Attach display names to transfers and list every roster member's balance in roster order."""
    names = {member.id: member.name for member in roster}

    settlements = [
        SettlementLine(
            from_member_id=transfer.from_member,
            to_member_id=transfer.to_member,
            amount=transfer.amount,
            from_name=names.get(transfer.from_member, ""),
            to_name=names.get(transfer.to_member, ""),
        )
        for transfer in transfers
    ]

    member_balances: list[MemberBalance] = []
    seen: set[MemberId] = set()
    for member in roster:
        if member.id in seen:
            continue
        seen.add(member.id)
        member_balances.append(
            MemberBalance(
                member_id=member.id,
                member_name=member.name,
                balance=balances.get(member.id, 0),
            )
        )

    return CalculationResult(settlements=settlements, balances=member_balances)


def format_amount(amount: int, exponent: int = 2) -> str:
    """Render minor units as a decimal string; ``exponent`` is the currency's minor-unit digits."""
    sign = "-" if amount < 0 else ""
    if exponent <= 0:
        return f"{sign}{abs(amount)}"
    units, minor = divmod(abs(amount), 10**exponent)
    return f"{sign}{units}.{minor:0{exponent}d}"


def format_summary(result: CalculationResult, currency: str = "", exponent: int = 2) -> str:
    suffix = f" {currency}" if currency else ""
    lines = ["Balances:"]
    for entry in result.balances:
        lines.append(f"• {entry.member_name}: {format_amount(entry.balance, exponent)}{suffix}")

    lines.append("Settlements:")
    if not result.settlements:
        lines.append("• nothing to settle")
    for line in result.settlements:
        lines.append(f"• {line.from_name} → {line.to_name}: {format_amount(line.amount, exponent)}{suffix}")
    return "\n".join(lines)
