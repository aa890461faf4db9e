"""Issue Identifier Parser - normalizes loose issue references.

Invariants:
    - Pure function: no IO, no async, never raises
    - "PREFIX-number" (any case) keeps its own prefix, uppercased, so references
      into other projects survive parsing
    - Bare integers and digit strings are qualified with the default prefix
    - Anything else comes back verbatim with number=None

Design Decisions:
    - Ambiguity is left to the Entity Locator, which falls back to the number
      when the formatted identifier misses
"""

import re
from dataclasses import dataclass

_PREFIXED = re.compile(r"^([A-Za-z]+)-([0-9]+)$")
_DIGITS = re.compile(r"^[0-9]+$")


@dataclass(frozen=True)
class ParsedIdentifier:
    full_identifier: str
    number: int | None


def parse_issue_identifier(
    identifier: str | int, default_prefix: str,
) -> ParsedIdentifier:
    """Parse "HULY-42", "huly-42", "42" or 42 against a default project prefix."""
    raw = str(identifier).strip()

    match = _PREFIXED.match(raw)
    if match:
        return ParsedIdentifier(
            full_identifier=f"{match.group(1).upper()}-{match.group(2)}",
            number=int(match.group(2)),
        )

    if _DIGITS.match(raw):
        number = int(raw)
        return ParsedIdentifier(
            full_identifier=f"{default_prefix.upper()}-{number}",
            number=number,
        )

    return ParsedIdentifier(full_identifier=raw, number=None)


def identifier_prefix(full_identifier: str) -> str | None:
    """Uppercased project prefix of a "PREFIX-number" string, else None."""
    match = _PREFIXED.match(full_identifier.strip())
    return match.group(1).upper() if match else None
