"""
Lexical constants of the supported SMILES subset.

This module collects the character classes shared by the tokenizer, the
codegen and the ring-number arbiter.
"""

from __future__ import annotations

from typing import Final, FrozenSet


# Organic-subset symbols spelled with two letters. Every other unbracketed
# letter is read as a one-letter atom.
TWO_LETTER_ORGANIC: Final[FrozenSet[str]] = frozenset({"Cl", "Br"})

WILDCARD: Final[str] = "*"

# Bond characters that may precede an atom, a ring marker or a branch
BOND_SYMBOLS: Final[FrozenSet[str]] = frozenset({"-", "=", "#", ":", "/", "\\"})

BRACKET_OPEN: Final[str] = "["
BRACKET_CLOSE: Final[str] = "]"
BRANCH_OPEN: Final[str] = "("
BRANCH_CLOSE: Final[str] = ")"
DOT: Final[str] = "."

# Two-digit ring markers are written as %NN
RING_MARKER_PREFIX: Final[str] = "%"
MAX_SINGLE_DIGIT_RING: Final[int] = 9
MAX_RING_NUMBER: Final[int] = 99


def is_atom_start(char: str) -> bool:
    """Check whether an unbracketed atom token can start with char."""
    return char == WILDCARD or (char.isascii() and char.isalpha())
