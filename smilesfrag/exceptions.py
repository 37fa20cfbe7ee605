"""
Custom exceptions for the smilesfrag library.

This module defines a hierarchy of exceptions for reporting SMILES syntax
problems, malformed fragments and invalid builder calls in a structured way.

Hierarchy:
    ChemError
        ParseError          - tokenizer and atom-list errors (carry a position)
        FragmentError       - structural errors from fragment constructors
        UsageError          - invalid arguments to combinators
        RoundTripError      - strict round-trip validation failures
"""

from __future__ import annotations

from collections.abc import Sequence


class ChemError(Exception):
    """Base exception for all smilesfrag errors."""

    pass


# ---------------------------------------------------------------------------
# Syntax family
# ---------------------------------------------------------------------------


class ParseError(ChemError):
    """Error during SMILES tokenizing or atom-list construction.

    Attributes:
        position: Character position in the SMILES string where error occurred.
        smiles: The original SMILES string being parsed.
        message: Description of what went wrong.
    """

    def __init__(
        self,
        message: str,
        smiles: str | None = None,
        position: int | None = None,
    ) -> None:
        self.message = message
        self.smiles = smiles
        self.position = position

        # Build detailed error message
        parts = [message]
        if smiles is not None and position is not None:
            parts.append(f"\n  {smiles}")
            parts.append(f"\n  {' ' * position}^")
        elif smiles is not None:
            parts.append(f" in: {smiles}")

        super().__init__("".join(parts))


class UnknownCharacterError(ParseError):
    """A character outside the supported SMILES grammar."""

    def __init__(self, char: str, smiles: str, position: int) -> None:
        self.char = char
        super().__init__(
            f"Unknown character '{char}' at position {position}",
            smiles,
            position,
        )


class UnclosedBracketError(ParseError):
    """A ``[`` without a matching ``]``."""

    def __init__(self, smiles: str, position: int) -> None:
        super().__init__(
            f"Unmatched bracket at position {position}",
            smiles,
            position,
        )


class InvalidRingMarkerError(ParseError):
    """A ``%`` that is not followed by exactly two digits."""

    def __init__(self, smiles: str, position: int) -> None:
        super().__init__(
            f"Invalid ring marker at position {position}",
            smiles,
            position,
        )


class UnclosedRingError(ParseError):
    """One or more ring numbers still open at the end of input.

    Attributes:
        ring_numbers: The ring numbers left open, in opening order.
    """

    def __init__(self, ring_numbers: Sequence[int], smiles: str | None = None) -> None:
        self.ring_numbers = list(ring_numbers)
        listed = ", ".join(str(n) for n in self.ring_numbers)
        super().__init__(f"Unclosed rings: {listed}", smiles)


class DisconnectedFragmentError(ParseError):
    """A ``.`` separator; disconnected fragments are not modeled."""

    def __init__(self, smiles: str | None, position: int | None) -> None:
        super().__init__(
            "Disconnected fragments ('.') are not supported",
            smiles,
            position,
        )


# ---------------------------------------------------------------------------
# Structural family
# ---------------------------------------------------------------------------


class FragmentError(ChemError):
    """Error raised when a fragment cannot be constructed."""

    pass


class InvalidSizeError(FragmentError):
    """Ring size is not an integer of at least 3."""

    def __init__(self, message: str, size: object = None) -> None:
        self.size = size
        super().__init__(message)


class EmptyAtomsError(FragmentError):
    """Ring base element is an empty string."""

    pass


class EmptyInputError(FragmentError):
    """Linear chain constructed from an empty atom list."""

    pass


class NonStringAtomError(FragmentError):
    """Linear chain atom that is not a string."""

    pass


class NonArrayInputError(FragmentError):
    """Constructor argument that should be a list or tuple."""

    pass


class NonRingMemberError(FragmentError):
    """FusedRing member that is not a Ring."""

    pass


class TooFewRingsError(FragmentError):
    """Fused ring system with an unsupported number of rings."""

    pass


# ---------------------------------------------------------------------------
# Usage family
# ---------------------------------------------------------------------------


class UsageError(ChemError):
    """Invalid argument passed to a combinator."""

    pass


class InvalidPositionError(UsageError):
    """Position outside the valid range of a fragment.

    Attributes:
        position: The position that was received.
        lower: Smallest valid position.
        upper: Largest valid position.
    """

    def __init__(
        self,
        message: str,
        position: object = None,
        lower: int | None = None,
        upper: int | None = None,
    ) -> None:
        self.message = message
        self.position = position
        self.lower = lower
        self.upper = upper
        super().__init__(message)


class NotSupportedError(UsageError):
    """Feature gate for combinations that are not implemented."""

    pass


class RingError(UsageError):
    """Error related to ring numbering.

    Attributes:
        ring_index: The problematic ring number.
    """

    def __init__(self, message: str, ring_index: int | None = None) -> None:
        self.message = message
        self.ring_index = ring_index
        super().__init__(message)


class RoundTripError(ChemError):
    """Strict round-trip validation failed."""

    def __init__(self, message: str, smiles: str, output: str) -> None:
        self.smiles = smiles
        self.output = output
        super().__init__(message)
