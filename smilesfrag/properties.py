"""
Quick molecular properties read off the SMILES text.

These helpers work on the token stream alone; they do not build a
molecular graph or perceive aromaticity. Hydrogen counts follow a
saturated-carbon estimate, so aromatic and hetero-rich inputs get only
approximate formulas and weights.

    >>> calculate_formula("CCO")
    'C2H6O'
    >>> calculate_molecular_weight("CC(=O)O")
    60.05
"""

from __future__ import annotations

from collections import Counter
from typing import Final, Mapping, Union

from smilesfrag.elements import WILDCARD
from smilesfrag.tokenizer import Token, TokenType, tokenize
from smilesfrag.types import Fragment

SmilesLike = Union[Fragment, str]

# Standard atomic weights, g/mol
ATOMIC_WEIGHTS: Final[Mapping[str, float]] = {
    "H": 1.008,
    "B": 10.81,
    "C": 12.011,
    "N": 14.007,
    "O": 15.999,
    "F": 18.998,
    "Na": 22.990,
    "Mg": 24.305,
    "Si": 28.085,
    "P": 30.974,
    "S": 32.06,
    "Cl": 35.45,
    "K": 39.098,
    "Ca": 40.078,
    "Fe": 55.845,
    "Zn": 65.38,
    "Se": 78.971,
    "Br": 79.904,
    "I": 126.90,
}

# Hydrogens lost per bond token by the saturated-carbon estimate
_BOND_HYDROGEN_LOSS: Final[Mapping[str, int]] = {"=": 2, "#": 4}


def _smiles_of(molecule: SmilesLike) -> str:
    return molecule.smiles if isinstance(molecule, Fragment) else str(molecule)


def _atom_tokens(tokens: list[Token]) -> list[Token]:
    return [token for token in tokens if token.type is TokenType.ATOM]


def element_symbol(token: Token) -> str | None:
    """Element symbol of an atom token.

    Aromatic symbols are capitalized and bracket atoms lose their isotope,
    hydrogen count, charge and chirality, so ``[13CH3]`` and ``c`` both give
    ``C``.

    Returns:
        The symbol, or None for the ``*`` wildcard.
    """
    if not token.is_bracket_atom:
        return None if token.value == WILDCARD else token.value.capitalize()

    text = token.value[1:-1].lstrip("0123456789")
    if not text or text[0] == WILDCARD:
        return None
    if text[0].isupper():
        return text[:2] if len(text) > 1 and text[1].islower() else text[0]
    # Aromatic two-letter symbols
    if text[:2] in ("se", "as"):
        return text[:2].capitalize()
    return text[0].upper()


def count_atoms(molecule: SmilesLike) -> int:
    """Number of atoms written in the SMILES, implicit hydrogens excluded.

    Args:
        molecule: SMILES text or a fragment.

    Raises:
        ParseError: If the text cannot be tokenized.
    """
    return len(_atom_tokens(tokenize(_smiles_of(molecule))))


def count_rings(molecule: SmilesLike) -> int:
    """Number of ring closures, i.e. ring-number pairs that open and close."""
    open_numbers: set[int] = set()
    closed = 0
    for token in tokenize(_smiles_of(molecule)):
        if token.type is not TokenType.RING_MARKER:
            continue
        if token.ring_number in open_numbers:
            open_numbers.remove(token.ring_number)
            closed += 1
        else:
            open_numbers.add(token.ring_number)
    return closed


def element_counts(molecule: SmilesLike) -> Counter[str]:
    """Count elements, adding the estimated implicit hydrogens.

    Every carbon count n contributes 2n + 2 hydrogens, less two per double
    bond and four per triple bond, less any explicit hydrogen atoms. The
    estimate never goes below zero.
    """
    tokens = tokenize(_smiles_of(molecule))
    counts: Counter[str] = Counter()
    for token in _atom_tokens(tokens):
        symbol = element_symbol(token)
        if symbol:
            counts[symbol] += 1

    hydrogens = 0
    if counts["C"]:
        hydrogens = 2 * counts["C"] + 2
    hydrogens -= sum(
        _BOND_HYDROGEN_LOSS.get(token.value, 0)
        for token in tokens
        if token.type is TokenType.BOND
    )
    hydrogens -= counts["H"]
    if hydrogens > 0:
        counts["H"] += hydrogens
    return +counts


def _hill_key(symbol: str) -> tuple[int, str]:
    if symbol == "C":
        return (0, "")
    if symbol == "H":
        return (1, "")
    return (2, symbol)


def calculate_formula(molecule: SmilesLike) -> str:
    """Molecular formula in Hill order: C, then H, then the rest A to Z.

    Example:
        >>> calculate_formula("C=O")
        'CH2O'
    """
    counts = element_counts(molecule)
    return "".join(
        symbol if counts[symbol] == 1 else f"{symbol}{counts[symbol]}"
        for symbol in sorted(counts, key=_hill_key)
    )


def calculate_molecular_weight(molecule: SmilesLike) -> float:
    """Molecular weight in g/mol, rounded to two decimals.

    Elements without a tabulated weight count as zero.
    """
    weight = sum(
        ATOMIC_WEIGHTS.get(symbol, 0.0) * count
        for symbol, count in element_counts(molecule).items()
    )
    return round(weight, 2)
