"""Rank Generator - lexicographic ordering keys for appending a sibling.

Invariants:
    - Pure function: no IO, no async, never raises
    - next_rank(R) compares greater (byte-wise) than every string in R
    - Existing ranks are never rewritten; each append costs one comparison
      against the current maximum
    - Empty sibling set -> INITIAL_RANK

Design Decisions:
    - Rank format is "bucket|iiiiii:fff": six fixed-width base-36 integer digits,
      a ':' separator, then base-36 fraction digits without trailing zeros.
      Fixed width plus the stripped fraction makes string order equal numeric order
    - Appends step the integer part by 8; near the top of the range the key is
      the midpoint between the current maximum and the upper bound, so the
      space never runs out
    - A maximum that does not parse as a rank is extended with one digit, which
      still sorts after it
"""

import re
from fractions import Fraction
from typing import Iterable

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"
_BASE = len(_DIGITS)
_INTEGER_WIDTH = 6
_MAX_INTEGER = _BASE ** _INTEGER_WIDTH - 1
_STEP = 8
_EXTENSION_DIGIT = "i"
_RANK = re.compile(r"^([0-9])\|([0-9a-z]{6}):([0-9a-z]*)$")

INITIAL_RANK = "0|hzzzzz:"


def _to_base36(value: int, width: int) -> str:
    digits = []
    while value:
        value, d = divmod(value, _BASE)
        digits.append(_DIGITS[d])
    return "".join(reversed(digits)).rjust(width, "0")


def parse_rank(rank: str) -> tuple[str, Fraction] | None:
    """Split a rank into (bucket, numeric value); None when it is not rank-shaped."""
    match = _RANK.match(rank)
    if not match:
        return None
    bucket, integer, fraction = match.groups()
    value = Fraction(int(integer, _BASE))
    scale = Fraction(1)
    for ch in fraction:
        scale /= _BASE
        value += _DIGITS.index(ch) * scale
    return bucket, value


def format_rank(bucket: str, value: Fraction) -> str:
    """Encode a value whose base-36 expansion terminates."""
    integer = value.numerator // value.denominator
    remainder = value - integer
    fraction = []
    while remainder:
        remainder *= _BASE
        digit = remainder.numerator // remainder.denominator
        fraction.append(_DIGITS[digit])
        remainder -= digit
    return f"{bucket}|{_to_base36(integer, _INTEGER_WIDTH)}:{''.join(fraction)}"


def _between(low: Fraction, high: Fraction) -> Fraction:
    """Shortest truncation of the midpoint that lies strictly inside (low, high)."""
    mid = (low + high) / 2
    scale = 1
    while True:
        candidate = Fraction((mid * scale).numerator // (mid * scale).denominator, scale)
        if low < candidate < high:
            return candidate
        scale *= _BASE


def next_rank(existing_ranks: Iterable[str | None]) -> str:
    """Key for a new sibling appended after every existing one."""
    ranks = [r for r in existing_ranks if r]
    if not ranks:
        return INITIAL_RANK

    top = max(ranks)
    parsed = parse_rank(top)
    if parsed is None:
        return top + _EXTENSION_DIGIT

    bucket, value = parsed
    upper = Fraction(_MAX_INTEGER)
    if value >= upper:
        return top + _EXTENSION_DIGIT

    stepped = value.numerator // value.denominator + _STEP
    if stepped <= _MAX_INTEGER:
        return format_rank(bucket, Fraction(stepped))
    return format_rank(bucket, _between(value, upper))
