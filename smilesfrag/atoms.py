"""
Atom-list builder (parser pass 1).

A single linear scan over the token stream that produces a flat list of
atom records, each annotated with its branch context, plus one ring
boundary per matched pair of ring markers.

Tracked state:
    - branch stack of (parent_index, branch_id) frames
    - last atom emitted at each branch depth
    - whether a ``)`` was seen at a depth since its last atom
    - currently open ring numbers
    - a one-shot pending bond
"""

from __future__ import annotations

from dataclasses import dataclass, field

from smilesfrag.exceptions import DisconnectedFragmentError, ParseError, UnclosedRingError
from smilesfrag.rings import collect_ring_path
from smilesfrag.tokenizer import Token, TokenType


@dataclass(slots=True)
class AtomRecord:
    """One atom of the flat atom list.

    Attributes:
        index: 0-based position in the atom list.
        value: Element symbol, or the bracket text for bracket atoms.
        raw_value: Original token text.
        bond: Bond written immediately before this atom, if any.
        rings: Ring numbers whose marker was written at, or whose cycle
            passes through, this atom, in the order they were recorded.
        branch_depth: Number of open branches enclosing the atom.
        branch_id: Token index of the ``(`` that opened the innermost
            enclosing branch; None on the main chain.
        parent_index: Atom the enclosing branch hangs off; None on the
            main chain.
        prev_atom_index: Previous atom at the same depth within the same
            branch; None if this is the first.
        after_branch_close: True if a ``)`` was seen between the previous
            atom at this depth and this one.
        markers: Ring markers written after this atom, in source order, as
            (ring number, opens, after) triples. ``after`` counts the atoms
            bonded to this one that were written before the marker; it is
            nonzero only for a marker that follows a closed branch.
    """

    index: int
    value: str
    raw_value: str
    bond: str | None = None
    rings: list[int] = field(default_factory=list)
    branch_depth: int = 0
    branch_id: int | None = None
    parent_index: int | None = None
    prev_atom_index: int | None = None
    after_branch_close: bool = False
    markers: list[tuple[int, bool, int]] = field(default_factory=list)

    @property
    def tree_parent(self) -> int | None:
        """Atom this one is bonded to in the written order; None for the first atom."""
        if self.prev_atom_index is not None:
            return self.prev_atom_index
        return self.parent_index

    @property
    def opens_branch(self) -> bool:
        """True if this atom is the first one inside a ``(...)``."""
        return self.prev_atom_index is None and self.parent_index is not None


@dataclass(frozen=True, slots=True)
class RingBoundary:
    """A matched pair of ring markers and the cycle it closes.

    Attributes:
        ring_number: Ring number used in the source.
        start: Atom index of the opening marker.
        end: Atom index of the closing marker.
        positions: Ordered atom indices forming the cycle.
        branch_depth: Branch depth at which the ring was opened.
        branch_id: Branch id at which the ring was opened.
        closure_bond: Bond written immediately before one of the markers.
        closure_bond_at_close: True if that bond preceded the closing marker.
    """

    ring_number: int
    start: int
    end: int
    positions: tuple[int, ...]
    branch_depth: int = 0
    branch_id: int | None = None
    closure_bond: str | None = None
    closure_bond_at_close: bool = False

    def shares_atoms(self, other: RingBoundary) -> bool:
        """Check if two rings have at least one atom in common."""
        return not set(self.positions).isdisjoint(other.positions)


@dataclass(frozen=True, slots=True)
class AtomList:
    """Result of pass 1."""

    atoms: list[AtomRecord]
    ring_boundaries: list[RingBoundary]


@dataclass(slots=True)
class _OpenRing:
    start_index: int
    branch_depth: int
    branch_id: int | None
    bond: str | None = None


@dataclass(slots=True)
class _BranchFrame:
    parent_index: int
    branch_id: int


@dataclass
class _BuilderState:
    """Mutable state for the atom-list builder."""

    branch_stack: list[_BranchFrame] = field(default_factory=list)
    last_atom_at_depth: dict[int, int] = field(default_factory=dict)
    branch_closed_since_last_atom: dict[int, bool] = field(default_factory=dict)
    open_rings: dict[int, _OpenRing] = field(default_factory=dict)
    pending_bond: str | None = None
    pending_bond_position: int | None = None
    current_atom: int = -1

    @property
    def depth(self) -> int:
        return len(self.branch_stack)

    @property
    def branch_id(self) -> int | None:
        return self.branch_stack[-1].branch_id if self.branch_stack else None

    @property
    def parent_index(self) -> int | None:
        return self.branch_stack[-1].parent_index if self.branch_stack else None


class AtomListBuilder:
    """Builds the flat atom list and ring boundaries from tokens.

    Example:
        >>> from smilesfrag.tokenizer import tokenize
        >>> result = AtomListBuilder(tokenize("C1CC1")).build()
        >>> [b.positions for b in result.ring_boundaries]
        [(0, 1, 2)]
    """

    def __init__(self, tokens: list[Token], smiles: str | None = None) -> None:
        self._tokens = tokens
        self._smiles = smiles
        self._atoms: list[AtomRecord] = []
        self._boundaries: list[RingBoundary] = []
        self._state = _BuilderState()

    def build(self) -> AtomList:
        """Scan the tokens once.

        Returns:
            The atom list and ring boundaries.

        Raises:
            ParseError: On misplaced ring markers, branches or bonds.
            DisconnectedFragmentError: On a ``.`` token.
            UnclosedRingError: If any ring is still open at the end.
        """
        for token_index, token in enumerate(self._tokens):
            kind = token.type

            if kind is TokenType.ATOM:
                self._add_atom(token)
            elif kind is TokenType.BOND:
                if self._state.current_atom < 0:
                    raise ParseError("Bond without preceding atom", self._smiles, token.position)
                self._state.pending_bond = token.value
                self._state.pending_bond_position = token.position
            elif kind is TokenType.RING_MARKER:
                self._ring_marker(token)
            elif kind is TokenType.BRANCH_OPEN:
                self._open_branch(token, token_index)
            elif kind is TokenType.BRANCH_CLOSE:
                self._close_branch(token)
            elif kind is TokenType.DOT:
                raise DisconnectedFragmentError(self._smiles, token.position)

        state = self._state
        if state.pending_bond is not None:
            raise ParseError("Bond without following atom", self._smiles, state.pending_bond_position)
        if state.branch_stack:
            raise ParseError("Unclosed branch", self._smiles)
        if state.open_rings:
            raise UnclosedRingError(list(state.open_rings), self._smiles)

        return AtomList(self._atoms, self._boundaries)

    def _add_atom(self, token: Token) -> None:
        state = self._state
        depth = state.depth
        state.current_atom += 1

        atom = AtomRecord(
            index=state.current_atom,
            value=token.atom or token.value,
            raw_value=token.value,
            bond=state.pending_bond,
            branch_depth=depth,
            branch_id=state.branch_id,
            parent_index=state.parent_index,
            prev_atom_index=state.last_atom_at_depth.get(depth),
            after_branch_close=state.branch_closed_since_last_atom.get(depth, False),
        )
        self._atoms.append(atom)

        state.last_atom_at_depth[depth] = atom.index
        state.branch_closed_since_last_atom[depth] = False
        state.pending_bond = None
        state.pending_bond_position = None

    def _ring_marker(self, token: Token) -> None:
        state = self._state
        if state.current_atom < 0:
            raise ParseError("Ring marker without preceding atom", self._smiles, token.position)

        number = token.ring_number
        bond = state.pending_bond
        state.pending_bond = None
        state.pending_bond_position = None

        # After a closed branch the marker belongs to the branch point
        atom = state.current_atom
        after = 0
        if state.branch_closed_since_last_atom.get(state.depth):
            atom = state.last_atom_at_depth[state.depth]
            after = sum(1 for record in self._atoms if record.tree_parent == atom)

        opened = state.open_rings.pop(number, None)
        if opened is None:
            state.open_rings[number] = _OpenRing(
                start_index=atom,
                branch_depth=state.depth,
                branch_id=state.branch_id,
                bond=bond,
            )
            self._atoms[atom].rings.append(number)
            self._atoms[atom].markers.append((number, True, after))
            return

        self._atoms[atom].markers.append((number, False, after))
        positions = collect_ring_path(opened.start_index, atom, self._atoms, self._boundaries)
        if len(positions) < 3:
            raise ParseError(
                f"Ring {number} closes over fewer than 3 atoms", self._smiles, token.position
            )
        boundary = RingBoundary(
            ring_number=number,
            start=opened.start_index,
            end=atom,
            positions=tuple(positions),
            branch_depth=opened.branch_depth,
            branch_id=opened.branch_id,
            closure_bond=bond if bond is not None else opened.bond,
            closure_bond_at_close=bond is not None,
        )
        self._boundaries.append(boundary)

        for pos in positions:
            self._atoms[pos].rings.append(number)

    def _open_branch(self, token: Token, token_index: int) -> None:
        state = self._state
        depth = state.depth
        parent = state.last_atom_at_depth.get(depth)
        if parent is None:
            raise ParseError("Branch without preceding atom", self._smiles, token.position)

        state.branch_stack.append(_BranchFrame(parent_index=parent, branch_id=token_index))
        state.last_atom_at_depth.pop(depth + 1, None)

    def _close_branch(self, token: Token) -> None:
        state = self._state
        if not state.branch_stack:
            raise ParseError("Unmatched closing branch", self._smiles, token.position)
        if state.pending_bond is not None:
            raise ParseError("Bond without following atom", self._smiles, state.pending_bond_position)

        state.branch_stack.pop()
        state.branch_closed_since_last_atom[state.depth] = True


def build_atom_list(tokens: list[Token], smiles: str | None = None) -> AtomList:
    """Run pass 1 over a token stream.

    Args:
        tokens: Tokens from :func:`smilesfrag.tokenizer.tokenize`.
        smiles: Source string, used only for error messages.

    Returns:
        The flat atom list and ring boundaries.
    """
    return AtomListBuilder(tokens, smiles).build()
