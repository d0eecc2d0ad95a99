from __future__ import annotations

from uuid import UUID

import pytest

from groupsettle.db.models import Member

ALICE = UUID("00000000-0000-0000-0000-00000000000a")
BOB = UUID("00000000-0000-0000-0000-00000000000b")
CAROL = UUID("00000000-0000-0000-0000-00000000000c")
DAVE = UUID("00000000-0000-0000-0000-00000000000d")
GHOST = UUID("00000000-0000-0000-0000-0000000000ff")
GROUP = UUID("11111111-1111-1111-1111-111111111111")


@pytest.fixture
def roster() -> list[Member]:
    return [
        Member(id=ALICE, name="Alice"),
        Member(id=BOB, name="Bob"),
        Member(id=CAROL, name="Carol"),
    ]
