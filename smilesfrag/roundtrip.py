"""
Round-trip validation.

Parses a SMILES string, writes it back, and compares. Inputs outside the
exactly reproducible subset usually settle on a normalized form after one
more parse; anything that keeps changing points at a parser bug.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from .exceptions import RoundTripError
from .parser import parse
from .types import Fragment

logger = logging.getLogger(__name__)


class RoundTripStatus(Enum):
    """Outcome of a round-trip check."""

    PERFECT = "perfect"
    STABILIZED = "stabilized"
    UNSTABLE = "unstable"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class RoundTripResult:
    """Result of :func:`validate_round_trip`.

    Attributes:
        original: Input string.
        first_round_trip: Output of parse-then-write on the input.
        second_round_trip: Output of parse-then-write on the first output.
        status: Perfect, stabilized or unstable.
        recommendation: What to do about it.
        ast: Fragment tree parsed from the input.
    """

    original: str
    first_round_trip: str
    second_round_trip: str
    status: RoundTripStatus
    recommendation: str
    ast: Fragment

    @property
    def perfect(self) -> bool:
        return self.status is RoundTripStatus.PERFECT

    @property
    def stabilizes(self) -> bool:
        return self.status is not RoundTripStatus.UNSTABLE


def validate_round_trip(smiles: str) -> RoundTripResult:
    """Parse and write smiles up to twice and classify the result.

    Raises:
        ParseError: If smiles cannot be parsed.
    """
    ast = parse(smiles)
    first = ast.smiles

    if first == smiles:
        return RoundTripResult(
            smiles,
            first,
            first,
            RoundTripStatus.PERFECT,
            "SMILES round-trips perfectly. No action needed.",
            ast,
        )

    second = parse(first).smiles
    if second == first:
        return RoundTripResult(
            smiles,
            first,
            second,
            RoundTripStatus.STABILIZED,
            f"SMILES stabilizes on second parse. Use the normalized form: {first}",
            ast,
        )

    return RoundTripResult(
        smiles,
        first,
        second,
        RoundTripStatus.UNSTABLE,
        "SMILES does not stabilize after two round-trips. This is a parser bug.",
        ast,
    )


def parse_with_validation(smiles: str, silent: bool = False, strict: bool = False) -> Fragment:
    """Parse smiles and report when it does not round-trip exactly.

    Args:
        smiles: SMILES string to parse.
        silent: Do not log anything.
        strict: Raise instead of returning when the round trip is not
            perfect.

    Returns:
        The parsed fragment.

    Raises:
        RoundTripError: In strict mode, if the round trip is not perfect.
    """
    result = validate_round_trip(smiles)
    if result.perfect:
        return result.ast

    if result.stabilizes:
        if not silent:
            logger.warning(
                "SMILES round trip is not exact: input %s, normalized %s",
                result.original,
                result.first_round_trip,
            )
        if strict:
            raise RoundTripError(
                f"Round-trip not perfect. Input: {result.original}, "
                f"Output: {result.first_round_trip}",
                result.original,
                result.first_round_trip,
            )
        return result.ast

    if not silent:
        logger.error(
            "SMILES round trip does not stabilize: input %s, first %s, second %s",
            result.original,
            result.first_round_trip,
            result.second_round_trip,
        )
    if strict:
        raise RoundTripError(
            f"SMILES does not stabilize. {result.recommendation}",
            result.original,
            result.first_round_trip,
        )
    return result.ast


def is_valid_round_trip(smiles: str) -> bool:
    """True if smiles is written back unchanged."""
    return validate_round_trip(smiles).perfect


def normalize(smiles: str) -> str:
    """The string smiles is written back as after one parse."""
    return validate_round_trip(smiles).first_round_trip


def stabilizes(smiles: str) -> bool:
    """True if writing back settles after at most two parses."""
    return validate_round_trip(smiles).stabilizes
