"""Rank Generator - tests for append-at-end ordering keys.

Tests cover:
    - Empty scope yields the initial rank
    - Result sorts after every existing rank (string comparison)
    - Near the top of the range the key narrows instead of overflowing
    - Unparseable maxima are extended
    - Repeated appends never decrease
"""

from fractions import Fraction

from trackref.core.make_rank import INITIAL_RANK, format_rank, next_rank, parse_rank


def test_empty_scope_yields_initial_rank():
    assert next_rank([]) == INITIAL_RANK
    assert next_rank([None, ""]) == INITIAL_RANK


def test_append_after_initial_rank_steps_integer_part():
    assert next_rank([INITIAL_RANK]) == "0|i00007:"


def test_result_sorts_after_the_maximum():
    existing = ["0|aaaaaa:", "0|hzzzzz:"]
    rank = next_rank(existing)
    assert rank > "0|hzzzzz:"
    assert all(rank > r for r in existing)


def test_order_of_existing_ranks_does_not_matter():
    assert next_rank(["0|hzzzzz:", "0|aaaaaa:"]) == next_rank(["0|aaaaaa:", "0|hzzzzz:"])


def test_near_top_uses_midpoint_to_upper_bound():
    assert next_rank(["0|zzzzzt:"]) == "0|zzzzzw:"


def test_fraction_digits_appear_when_integer_space_is_exhausted():
    first = next_rank(["0|zzzzzy:"])
    assert first == "0|zzzzzy:i"
    second = next_rank(["0|zzzzzy:", first])
    assert second == "0|zzzzzy:r"
    assert second > first


def test_maximal_rank_is_extended():
    assert next_rank(["0|zzzzzz:"]) == "0|zzzzzz:i"


def test_unparseable_maximum_is_extended():
    rank = next_rank(["legacy-rank"])
    assert rank == "legacy-ranki"
    assert rank > "legacy-rank"


def test_repeated_appends_are_monotonic():
    ranks = ["0|aaaaaa:"]
    for _ in range(50):
        rank = next_rank(ranks)
        assert rank > max(ranks)
        ranks.append(rank)


def test_repeated_appends_near_the_top_stay_monotonic():
    ranks = ["0|zzzzzx:"]
    for _ in range(30):
        rank = next_rank(ranks)
        assert rank > max(ranks)
        ranks.append(rank)


def test_parse_and_format_agree():
    bucket, value = parse_rank("0|zzzzzy:i")
    assert bucket == "0"
    assert value == Fraction(36 ** 6 - 2) + Fraction(1, 2)
    assert format_rank(bucket, value) == "0|zzzzzy:i"
    assert parse_rank("not-a-rank") is None
