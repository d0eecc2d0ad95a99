import pytest

from groupsettle.db.models import ExpenseRecord
from groupsettle.services.split import (
    RemainderPolicy,
    calculate_balances,
    distinct_participants,
    lookup_member,
    split_amount,
    truncated_share,
)

from conftest import ALICE, BOB, CAROL, GHOST


def test_split_amount_even():
    shares = split_amount(1000, [1, 2, 3, 4])
    assert shares == {1: 250, 2: 250, 3: 250, 4: 250}


def test_split_amount_remainder_goes_to_first_participants():
    shares = split_amount(1001, [1, 2, 3])
    assert shares == {1: 334, 2: 334, 3: 333}
    assert sum(shares.values()) == 1001


def test_split_amount_negative_truncates_toward_zero():
    assert truncated_share(-10, 3) == -3
    shares = split_amount(-10, [1, 2, 3])
    assert shares == {1: -4, 2: -3, 3: -3}


def test_split_amount_payer_absorbs_remainder():
    shares = split_amount(10, [1, 2, 3], payer_id=1, policy=RemainderPolicy.PAYER)
    assert shares == {1: 4, 2: 3, 3: 3}

    shares = split_amount(10, [2, 3, 4], payer_id=1, policy=RemainderPolicy.PAYER)
    assert shares == {1: 1, 2: 3, 3: 3, 4: 3}


def test_split_amount_drop_loses_remainder():
    shares = split_amount(10, [1, 2, 3], policy=RemainderPolicy.DROP)
    assert shares == {1: 3, 2: 3, 3: 3}


def test_split_amount_requires_participants():
    with pytest.raises(ValueError):
        split_amount(100, [])


def test_distinct_participants_keeps_order():
    assert distinct_participants([3, 1, 3, 2, 1]) == [3, 1, 2]


def test_lookup_member_is_lenient():
    roster = {ALICE: 0, BOB: 0}
    assert lookup_member(roster, ALICE) == ALICE
    assert lookup_member(roster, GHOST) is None


def test_two_members_one_expense():
    expenses = [ExpenseRecord(id=1, payer_id=ALICE, amount=1000, split_between=[ALICE, BOB])]

    balances = calculate_balances([ALICE, BOB], expenses)

    assert balances == {ALICE: 500, BOB: -500}


def test_three_members_even_split():
    expenses = [ExpenseRecord(id=1, payer_id=ALICE, amount=3000, split_between=[ALICE, BOB, CAROL])]

    balances = calculate_balances([ALICE, BOB, CAROL], expenses)

    assert balances == {ALICE: 2000, BOB: -1000, CAROL: -1000}


def test_uneven_split_stays_zero_sum_by_default():
    expenses = [ExpenseRecord(id=1, payer_id=ALICE, amount=10, split_between=[ALICE, BOB, CAROL])]

    balances = calculate_balances([ALICE, BOB, CAROL], expenses)

    assert sum(balances.values()) == 0
    assert balances == {ALICE: 6, BOB: -3, CAROL: -3}


def test_uneven_split_drop_policy_leaks_remainder():
    expenses = [ExpenseRecord(id=1, payer_id=ALICE, amount=10, split_between=[ALICE, BOB, CAROL])]

    balances = calculate_balances([ALICE, BOB, CAROL], expenses, RemainderPolicy.DROP)

    assert balances == {ALICE: 7, BOB: -3, CAROL: -3}
    assert sum(balances.values()) == 1


def test_zero_amount_is_skipped():
    expenses = [ExpenseRecord(id=1, payer_id=ALICE, amount=0, split_between=[BOB])]
    assert calculate_balances([ALICE, BOB], expenses) == {ALICE: 0, BOB: 0}


def test_empty_split_credits_only_payer():
    expenses = [ExpenseRecord(id=1, payer_id=ALICE, amount=700, split_between=[])]
    assert calculate_balances([ALICE, BOB], expenses) == {ALICE: 700, BOB: 0}


def test_unknown_participant_debit_is_dropped():
    expenses = [ExpenseRecord(id=1, payer_id=ALICE, amount=900, split_between=[ALICE, BOB, GHOST])]

    balances = calculate_balances([ALICE, BOB], expenses)

    assert balances == {ALICE: 600, BOB: -300}
    assert GHOST not in balances


def test_unknown_payer_credit_is_dropped():
    expenses = [ExpenseRecord(id=1, payer_id=GHOST, amount=400, split_between=[ALICE, BOB])]
    assert calculate_balances([ALICE, BOB], expenses) == {ALICE: -200, BOB: -200}


def test_duplicate_participants_counted_once():
    expenses = [ExpenseRecord(id=1, payer_id=ALICE, amount=600, split_between=[BOB, BOB, CAROL])]
    assert calculate_balances([ALICE, BOB, CAROL], expenses) == {ALICE: 600, BOB: -300, CAROL: -300}


def test_refund_reverses_expense():
    expenses = [
        ExpenseRecord(id=1, payer_id=ALICE, amount=1200, split_between=[ALICE, BOB, CAROL]),
        ExpenseRecord(id=2, payer_id=ALICE, amount=-1200, split_between=[ALICE, BOB, CAROL]),
    ]
    assert calculate_balances([ALICE, BOB, CAROL], expenses) == {ALICE: 0, BOB: 0, CAROL: 0}


def test_recomputation_is_identical():
    expenses = [
        ExpenseRecord(id=1, payer_id=ALICE, amount=1001, split_between=[ALICE, BOB, CAROL]),
        ExpenseRecord(id=2, payer_id=BOB, amount=457, split_between=[CAROL, ALICE]),
        ExpenseRecord(id=3, payer_id=CAROL, amount=-99, split_between=[BOB]),
    ]
    roster = [ALICE, BOB, CAROL]

    first = calculate_balances(roster, expenses)
    second = calculate_balances(roster, expenses)

    assert first == second
    assert sum(first.values()) == 0
