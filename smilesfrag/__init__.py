"""
smilesfrag - SMILES fragment builder and round-trip parser.

A zero-dependency library that builds SMILES from composable fragments
(rings, chains, fused ring systems) and parses SMILES back into the same
fragment tree, so that writing a parsed string reproduces it exactly.

    >>> from smilesfrag import Ring, Linear, parse
    >>> Ring("c", 6).attach(Linear(["C"]), 4).smiles
    'c1ccc(C)cc1'
    >>> parse("CC(=O)O").smiles
    'CC(=O)O'

Submodules:
    smilesfrag.numbering - Ring-number arbitration
    smilesfrag.roundtrip - Round-trip validation
    smilesfrag.properties - Atom and ring counts, formula, weight
    smilesfrag.validator - Bracket, branch and ring-number balance
"""

__version__ = "0.1.0"

# Fragment types
from smilesfrag.types import Fragment, FusedRing, Linear, Molecule, RawFragment, Ring
from smilesfrag.fused_rings import FusedRings

# Parsing and writing
from smilesfrag.tokenizer import Token, TokenType, tokenize
from smilesfrag.parser import parse, SmilesParser
from smilesfrag.writer import to_smiles, SmilesWriter
from smilesfrag.decompiler import decompile
from smilesfrag.repeats import Repeat, repeat

# Quick properties and pre-checks
from smilesfrag.properties import (
    calculate_formula,
    calculate_molecular_weight,
    count_atoms,
    count_rings,
)
from smilesfrag.validator import ValidationResult, validate_smiles

# Round-trip validation
from smilesfrag.roundtrip import (
    RoundTripResult,
    RoundTripStatus,
    is_valid_round_trip,
    normalize,
    parse_with_validation,
    stabilizes,
    validate_round_trip,
)

# Exceptions
from smilesfrag.exceptions import (
    ChemError,
    DisconnectedFragmentError,
    EmptyAtomsError,
    EmptyInputError,
    FragmentError,
    InvalidPositionError,
    InvalidRingMarkerError,
    InvalidSizeError,
    NonArrayInputError,
    NonRingMemberError,
    NonStringAtomError,
    NotSupportedError,
    ParseError,
    RingError,
    RoundTripError,
    TooFewRingsError,
    UnclosedBracketError,
    UnclosedRingError,
    UnknownCharacterError,
    UsageError,
)

# Submodules
from smilesfrag import numbering, properties, roundtrip, validator

__all__ = [
    # Types
    "Fragment", "Linear", "Ring", "FusedRing", "Molecule", "RawFragment", "FusedRings",
    # Parsing
    "parse", "SmilesParser", "tokenize", "Token", "TokenType",
    # Writing
    "to_smiles", "SmilesWriter", "decompile", "repeat", "Repeat",
    # Properties
    "count_atoms", "count_rings", "calculate_formula", "calculate_molecular_weight",
    "validate_smiles", "ValidationResult",
    # Round trip
    "validate_round_trip", "parse_with_validation", "is_valid_round_trip",
    "normalize", "stabilizes", "RoundTripResult", "RoundTripStatus",
    # Exceptions
    "ChemError", "ParseError", "UnknownCharacterError", "UnclosedBracketError",
    "InvalidRingMarkerError", "UnclosedRingError", "DisconnectedFragmentError",
    "FragmentError", "InvalidSizeError", "EmptyAtomsError", "EmptyInputError",
    "NonStringAtomError", "NonArrayInputError", "NonRingMemberError", "TooFewRingsError",
    "UsageError", "InvalidPositionError", "NotSupportedError", "RingError",
    "RoundTripError",
    # Submodules
    "numbering", "properties", "roundtrip", "validator",
]
