"""
SMILES tokenizer.

Lexes a SMILES string into a flat stream of typed tokens. The tokenizer is
stateless beyond its scan cursor and performs no structural checks; those
belong to the atom-list builder.

Token kinds:
    - ATOM: bracket atoms ``[...]`` (kept raw), ``Cl``/``Br``, any other
      single letter, or ``*``
    - BOND: ``- = # : / \\``
    - RING_MARKER: a single digit, or ``%`` followed by two digits
    - BRANCH_OPEN / BRANCH_CLOSE: ``(`` and ``)``
    - DOT: ``.``
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from smilesfrag.elements import (
    BOND_SYMBOLS,
    BRACKET_CLOSE,
    BRACKET_OPEN,
    BRANCH_CLOSE,
    BRANCH_OPEN,
    DOT,
    RING_MARKER_PREFIX,
    TWO_LETTER_ORGANIC,
    is_atom_start,
)
from smilesfrag.exceptions import (
    InvalidRingMarkerError,
    UnclosedBracketError,
    UnknownCharacterError,
)


class TokenType(Enum):
    """Kinds of SMILES tokens."""

    ATOM = "atom"
    BOND = "bond"
    RING_MARKER = "ring_marker"
    BRANCH_OPEN = "branch_open"
    BRANCH_CLOSE = "branch_close"
    DOT = "dot"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexical token.

    Attributes:
        type: Token kind.
        value: Raw source text of the token.
        position: 0-based offset of the token in the source string.
        atom: Element symbol for simple atoms, or the bracket text for
            bracket atoms. None for non-atom tokens.
        ring_number: Ring number for ring markers, otherwise None.
    """

    type: TokenType
    value: str
    position: int
    atom: str | None = None
    ring_number: int | None = None

    @property
    def is_bracket_atom(self) -> bool:
        return self.type is TokenType.ATOM and self.value.startswith(BRACKET_OPEN)


class _Cursor:
    """Character cursor over a SMILES string with lookahead."""

    __slots__ = ("_string", "_pos")

    def __init__(self, string: str) -> None:
        self._string = string
        self._pos = 0

    @property
    def position(self) -> int:
        """Current position in the string."""
        return self._pos

    def peek(self, offset: int = 0) -> str | None:
        """Look at character at current position + offset without consuming."""
        pos = self._pos + offset
        if pos >= len(self._string):
            return None
        return self._string[pos]

    def skip(self, count: int = 1) -> None:
        """Skip forward by count characters."""
        self._pos += count

    def is_eof(self) -> bool:
        """Check if at end of string."""
        return self._pos >= len(self._string)

    def read_bracket(self) -> str | None:
        """Read a bracket region including both brackets.

        Nested brackets are balanced. Returns None, without moving, if the
        region is never closed.
        """
        depth = 0
        end = self._pos
        while end < len(self._string):
            char = self._string[end]
            if char == BRACKET_OPEN:
                depth += 1
            elif char == BRACKET_CLOSE:
                depth -= 1
                if depth == 0:
                    text = self._string[self._pos:end + 1]
                    self._pos = end + 1
                    return text
            end += 1
        return None


class SmilesTokenizer:
    """Tokenizer for the supported SMILES subset.

    Example:
        >>> [t.value for t in SmilesTokenizer("C(=O)Cl").tokenize()]
        ['C', '(', '=', 'O', ')', 'Cl']
    """

    def __init__(self, smiles: str) -> None:
        self._smiles = smiles
        self._cursor = _Cursor(smiles)

    def tokenize(self) -> list[Token]:
        """Split the SMILES string into tokens.

        Returns:
            Tokens in source order. Whitespace produces no tokens.

        Raises:
            UnclosedBracketError: If a ``[`` is never closed.
            InvalidRingMarkerError: If ``%`` is not followed by two digits.
            UnknownCharacterError: On any character outside the grammar.
        """
        cur = self._cursor
        tokens: list[Token] = []

        while not cur.is_eof():
            char = cur.peek()
            pos = cur.position

            if char.isspace():
                cur.skip()
                continue

            if char == BRACKET_OPEN:
                text = cur.read_bracket()
                if text is None:
                    raise UnclosedBracketError(self._smiles, pos)
                tokens.append(Token(TokenType.ATOM, text, pos, atom=text))
                continue

            if is_atom_start(char):
                pair = char + (cur.peek(1) or "")
                symbol = pair if pair in TWO_LETTER_ORGANIC else char
                cur.skip(len(symbol))
                tokens.append(Token(TokenType.ATOM, symbol, pos, atom=symbol))
                continue

            if char in BOND_SYMBOLS:
                cur.skip()
                tokens.append(Token(TokenType.BOND, char, pos))
                continue

            if char.isdigit():
                cur.skip()
                tokens.append(Token(TokenType.RING_MARKER, char, pos, ring_number=int(char)))
                continue

            if char == RING_MARKER_PREFIX:
                d1, d2 = cur.peek(1), cur.peek(2)
                if not (d1 and d1.isdigit() and d2 and d2.isdigit()):
                    raise InvalidRingMarkerError(self._smiles, pos)
                cur.skip(3)
                tokens.append(
                    Token(TokenType.RING_MARKER, char + d1 + d2, pos, ring_number=int(d1 + d2))
                )
                continue

            if char == BRANCH_OPEN:
                cur.skip()
                tokens.append(Token(TokenType.BRANCH_OPEN, char, pos))
                continue

            if char == BRANCH_CLOSE:
                cur.skip()
                tokens.append(Token(TokenType.BRANCH_CLOSE, char, pos))
                continue

            if char == DOT:
                cur.skip()
                tokens.append(Token(TokenType.DOT, char, pos))
                continue

            raise UnknownCharacterError(char, self._smiles, pos)

        return tokens


def tokenize(smiles: str) -> list[Token]:
    """Tokenize a SMILES string.

    This is a convenience function that creates a SmilesTokenizer and
    calls tokenize().

    Args:
        smiles: SMILES string to tokenize.

    Returns:
        List of tokens in source order.

    Raises:
        ParseError: If the string contains characters outside the grammar.

    Example:
        >>> [t.type.value for t in tokenize("C1CC1")]
        ['atom', 'ring_marker', 'atom', 'atom', 'ring_marker']
    """
    return SmilesTokenizer(smiles).tokenize()


def detokenize(tokens: list[Token]) -> str:
    """Join tokens back into SMILES text."""
    return "".join(token.value for token in tokens)
