import pytest

from cottagetrip.core.errors import ValidationError
from cottagetrip.core.utils import compute_equal_splits, validate_splits


def test_remainder_goes_to_first_members():
    assert compute_equal_splits(1000, ["A", "B", "C"]) == [("A", 334), ("B", 333), ("C", 333)]


def test_rental_remainder_of_two_cents():
    result = compute_equal_splits(234200, ["alice", "bob", "carol"])

    assert [share for _, share in result] == [78067, 78067, 78066]
    assert sum(share for _, share in result) == 234200


def test_even_split_has_no_remainder():
    assert compute_equal_splits(900, ["A", "B", "C"]) == [("A", 300), ("B", 300), ("C", 300)]


def test_zero_total_gives_zero_shares():
    assert compute_equal_splits(0, ["A", "B"]) == [("A", 0), ("B", 0)]


def test_single_member_takes_everything():
    assert compute_equal_splits(5789, ["A"]) == [("A", 5789)]


def test_member_order_decides_who_gets_the_extra_cent():
    assert compute_equal_splits(10, ["C", "B", "A"]) == [("C", 4), ("B", 3), ("A", 3)]


@pytest.mark.parametrize("total", [0, 1, 2, 7, 99, 100, 101, 1001, 234200, 999999])
@pytest.mark.parametrize("n", [1, 2, 3, 4, 7, 13])
def test_shares_sum_exactly_and_differ_by_at_most_one(total, n):
    members = [f"u{i}" for i in range(n)]
    shares = [share for _, share in compute_equal_splits(total, members)]

    assert sum(shares) == total
    assert max(shares) - min(shares) <= 1
    assert compute_equal_splits(total, members) == compute_equal_splits(total, members)


def test_no_members_is_rejected():
    with pytest.raises(ValidationError) as exc:
        compute_equal_splits(100, [])

    assert exc.value.status_code == 400
    assert exc.value.detail == "No members selected"


def test_negative_total_is_rejected():
    with pytest.raises(ValidationError):
        compute_equal_splits(-1, ["A"])


def test_float_total_is_rejected():
    with pytest.raises(ValidationError):
        compute_equal_splits(10.5, ["A", "B"])


def test_duplicate_members_are_rejected():
    with pytest.raises(ValidationError):
        compute_equal_splits(100, ["A", "A"])


def test_validate_splits_accepts_matching_sum():
    validate_splits(1000, [("A", 500), ("B", 500)])


def test_validate_splits_rejects_mismatched_sum():
    with pytest.raises(ValidationError) as exc:
        validate_splits(1000, [("A", 500), ("B", 499)])

    assert exc.value.detail == "Splits must sum to expense amount"


def test_validate_splits_rejects_negative_share():
    with pytest.raises(ValidationError):
        validate_splits(100, [("A", 150), ("B", -50)])


def test_validate_splits_rejects_empty_and_duplicates():
    with pytest.raises(ValidationError):
        validate_splits(0, [])

    with pytest.raises(ValidationError):
        validate_splits(100, [("A", 50), ("A", 50)])
