"""
Fragment AST types.

This module defines the immutable fragment tree shared by the parser and
the builder DSL: Linear chains, Rings, FusedRing systems, Molecules and
opaque RawFragments. Every combinator returns a new fragment; inputs are
never mutated and sub-fragments are shared by reference.

SMILES text is not stored. It is computed by :mod:`smilesfrag.writer`
each time :attr:`Fragment.smiles` is read.
"""

from __future__ import annotations

import copy
import dataclasses
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

from .exceptions import (
    EmptyAtomsError,
    EmptyInputError,
    FragmentError,
    InvalidPositionError,
    InvalidSizeError,
    NonArrayInputError,
    NonRingMemberError,
    NonStringAtomError,
    NotSupportedError,
    RingError,
    TooFewRingsError,
)
from .elements import MAX_RING_NUMBER


Attachments = dict[int, tuple["Fragment", ...]]
FragmentLike = Union["Fragment", str]


class Fragment:
    """Base class of every AST node.

    Subclasses are frozen dataclasses carrying two placement fields:

    Attributes:
        leading_bond: Bond joining the fragment to whatever precedes it.
        is_sibling: Placement hint for attachments of parsed rings. False
            means the attachment continues the enclosing branch and is
            written without parentheses.
    """

    __slots__ = ()

    _code_name: ClassVar[str] = "fragment"

    leading_bond: str | None
    is_sibling: bool | None

    @property
    def smiles(self) -> str:
        """SMILES text of this fragment, generated on every access."""
        from .writer import to_smiles

        return to_smiles(self)

    def __str__(self) -> str:
        return self.smiles

    def clone(self) -> Fragment:
        """Deep copy of the fragment tree."""
        return copy.deepcopy(self)

    def to_object(self) -> dict[str, Any]:
        """Plain-dict dump of the fragment, tagged with ``"type"``."""
        raise NotImplementedError

    def to_code(self, var_name: str | None = None) -> str:
        """Python source that rebuilds this fragment with the builder API.

        Args:
            var_name: Variable name prefix. Defaults to a per-type name
                such as ``ring`` or ``linear``.
        """
        from .decompiler import decompile

        return decompile(self, var_name or self._code_name)

    def concat(self, other: FragmentLike) -> Fragment:
        """Join this fragment and other end to end.

        Returns:
            A Molecule of both; a Molecule argument is flattened.
        """
        other = as_fragment(other)
        if isinstance(other, Molecule):
            return Molecule((self, *other.components))
        return Molecule((self, other))

    def _placement_object(self) -> dict[str, Any]:
        obj: dict[str, Any] = {}
        if self.leading_bond:
            obj["leading_bond"] = self.leading_bond
        if self.is_sibling is not None:
            obj["is_sibling"] = self.is_sibling
        return obj


# ---------------------------------------------------------------------------
# Normalization helpers
# ---------------------------------------------------------------------------


def as_fragment(sub: object) -> Fragment:
    """Coerce a combinator argument to a fragment.

    Strings are wrapped as :class:`RawFragment`.

    Raises:
        NotSupportedError: If sub is neither a fragment nor a string.
    """
    if isinstance(sub, Fragment):
        return sub
    if isinstance(sub, str):
        return RawFragment(sub)
    raise NotSupportedError(f"Cannot use {type(sub).__name__} as a fragment")


def check_position(position: object, upper: int) -> int:
    """Validate a 1-based position against ``1..upper``."""
    if isinstance(position, bool) or not isinstance(position, int) or not 1 <= position <= upper:
        raise InvalidPositionError(
            f"Position {position!r} is out of range 1..{upper}",
            position,
            1,
            upper,
        )
    return position


def _normalize_bonds(bonds: object, what: str) -> tuple[str | None, ...]:
    if bonds is None:
        return ()
    if not isinstance(bonds, (list, tuple)):
        raise NonArrayInputError(f"{what} bonds must be a list or tuple")
    return tuple(bond or None for bond in bonds)


def _normalize_attachments(attachments: Mapping[Any, Any] | None, upper: int) -> Attachments:
    result: Attachments = {}
    if not attachments:
        return result
    for key in sorted(attachments, key=int):
        position = check_position(int(key), upper)
        value = attachments[key]
        if isinstance(value, (list, tuple)):
            subs = tuple(as_fragment(sub) for sub in value)
        else:
            subs = (as_fragment(value),)
        if subs:
            result[position] = subs
    return result


def _add_attachment(attachments: Attachments, position: int, sub: Fragment) -> Attachments:
    updated = dict(attachments)
    updated[position] = (*attachments.get(position, ()), sub)
    return dict(sorted(updated.items()))


def _attachments_object(attachments: Attachments) -> dict[int, list[dict[str, Any]]]:
    return {pos: [sub.to_object() for sub in subs] for pos, subs in attachments.items()}


# ---------------------------------------------------------------------------
# Parser metadata
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AtomSlot:
    """A ring-system atom written after the atom it is bonded to.

    Attributes:
        index: Atom index in the source atom list.
        in_branch: True if the atom opened a ``(...)`` branch.
    """

    index: int
    in_branch: bool = False


@dataclass(frozen=True, slots=True)
class AttachmentSlot:
    """An attachment of a member ring, written after a ring-system atom.

    Attributes:
        member: Index of the member ring the attachment belongs to.
        position: 1-based position in that member.
        order: Index in the member's attachment list at that position.
    """

    member: int
    position: int
    order: int


@dataclass(frozen=True, slots=True)
class MarkerSlot:
    """A ring marker written after a ring-system atom.

    Attributes:
        member: Index of the member ring the marker opens or closes.
        opens: True for the opening marker.
        after: Number of the atom's slots written before the marker.
    """

    member: int
    opens: bool
    after: int = 0


Slot = Union[AtomSlot, AttachmentSlot]


@dataclass(frozen=True, slots=True)
class SourceLayout:
    """Order in which a parsed ring system was written.

    The ring-system atoms form a subtree of the source bond tree. Walking
    it from ``root``, each atom is followed by its ring markers and then by
    its slots, which reproduces the input text.

    Attributes:
        root: Atom index written first.
        markers: Atom index to its ring markers, in source order.
        children: Atom index to the ring-system atoms and attachments
            written after it, in source order.
    """

    root: int
    markers: dict[int, tuple[MarkerSlot, ...]] = field(default_factory=dict)
    children: dict[int, tuple[Slot, ...]] = field(default_factory=dict)

    def attachment_slots(self) -> set[tuple[int, int, int]]:
        """(member, position, order) of every attachment the layout places."""
        return {
            (slot.member, slot.position, slot.order)
            for slots in self.children.values()
            for slot in slots
            if isinstance(slot, AttachmentSlot)
        }


@dataclass(frozen=True, slots=True)
class RingMeta:
    """Source layout of a parsed ring.

    Attributes:
        positions: Atom indices of the ring, in ring order from the atom
            carrying the opening marker to the one carrying the closing
            marker.
        start: Atom index of the opening marker.
        end: Atom index of the closing marker.
        branch_depths: Branch depth of each ring atom.
        parent_indices: Parent atom of each ring atom.
        closure_bond_at_close: True if the closure bond was written before
            the closing marker.
        connects_to_component: Index of the earlier component the ring is
            bonded to.
        connects_at_position: Atom index it is bonded to in that component.
        layout: Write order of the ring when it stands alone; None for a
            member of a fused system.
    """

    positions: tuple[int, ...] = ()
    start: int = 0
    end: int = 0
    branch_depths: tuple[int, ...] = ()
    parent_indices: tuple[int | None, ...] = ()
    closure_bond_at_close: bool = False
    connects_to_component: int | None = None
    connects_at_position: int | None = None
    layout: SourceLayout | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "positions", tuple(self.positions))
        object.__setattr__(self, "branch_depths", tuple(self.branch_depths))
        object.__setattr__(self, "parent_indices", tuple(self.parent_indices))

    @property
    def crosses_branches(self) -> bool:
        """True if the ring atoms do not all sit at one branch depth."""
        return len(set(self.branch_depths)) > 1


@dataclass(frozen=True, slots=True)
class FusedRingMeta:
    """Source layout of a parsed fused, spiro or bridged ring system.

    All maps are keyed by atom index in the source atom list.
    """

    total_atoms: int = 0
    all_positions: tuple[int, ...] = ()
    branch_depth_map: dict[int, int] = field(default_factory=dict)
    parent_index_map: dict[int, int | None] = field(default_factory=dict)
    atom_value_map: dict[int, str] = field(default_factory=dict)
    bond_map: dict[int, str | None] = field(default_factory=dict)
    connects_to_component: int | None = None
    connects_at_position: int | None = None
    layout: SourceLayout | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "all_positions", tuple(self.all_positions))
        object.__setattr__(
            self, "branch_depth_map", {int(k): v for k, v in self.branch_depth_map.items()}
        )
        object.__setattr__(
            self, "parent_index_map", {int(k): v for k, v in self.parent_index_map.items()}
        )
        object.__setattr__(
            self, "atom_value_map", {int(k): v for k, v in self.atom_value_map.items()}
        )
        object.__setattr__(self, "bond_map", {int(k): v for k, v in self.bond_map.items()})

    @property
    def is_interleaved(self) -> bool:
        """True if the system is written from its source layout."""
        return self.layout is not None


# ---------------------------------------------------------------------------
# Fragment nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Linear(Fragment):
    """A chain of atoms, optionally with branches.

    ``bonds`` uses one of two layouts. In the main-chain layout it has
    ``len(atoms) - 1`` entries and ``bonds[i]`` joins ``atoms[i]`` to
    ``atoms[i + 1]``. In the branch layout it has ``len(atoms)`` entries
    and ``bonds[i]`` precedes ``atoms[i]``, so ``bonds[0]`` is the bond to
    the host atom.

    Example:
        >>> Linear(["C", "C", "O"]).smiles
        'CCO'
        >>> Linear(["C", "C"], ["="]).smiles
        'C=C'
    """

    _code_name: ClassVar[str] = "linear"

    atoms: tuple[str, ...]
    bonds: tuple[str | None, ...] = ()
    attachments: Attachments = field(default_factory=dict)
    leading_bond: str | None = None
    is_sibling: bool | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.atoms, (list, tuple)):
            raise NonArrayInputError("Linear atoms must be a list or tuple")
        if not self.atoms:
            raise EmptyInputError("Linear requires at least one atom")
        for atom in self.atoms:
            if not isinstance(atom, str):
                raise NonStringAtomError(
                    f"Linear atoms must be strings, got {type(atom).__name__}"
                )
        object.__setattr__(self, "atoms", tuple(self.atoms))
        object.__setattr__(self, "bonds", _normalize_bonds(self.bonds, "Linear"))
        object.__setattr__(
            self, "attachments", _normalize_attachments(self.attachments, len(self.atoms))
        )

    @property
    def is_branch_layout(self) -> bool:
        """True if ``bonds[0]`` is the bond to the host atom."""
        return len(self.bonds) == len(self.atoms)

    def main_bonds(self) -> tuple[str | None, ...]:
        """Bonds in the main-chain layout, padded to ``len(atoms) - 1``."""
        n = len(self.atoms) - 1
        bonds = self.bonds[1:] if self.is_branch_layout else self.bonds[:n]
        return bonds + (None,) * (n - len(bonds))

    def entry_bond(self) -> str | None:
        """Bond joining the chain to the atom written before it."""
        if self.is_branch_layout and self.bonds[0]:
            return self.bonds[0]
        return self.leading_bond

    def attach(self, sub: FragmentLike, position: int) -> Linear:
        """Append sub as a branch after the atom at position (1-based).

        Ring numbers used by sub that clash with this chain's are
        renumbered.

        Raises:
            InvalidPositionError: If position is outside ``1..len(atoms)``.
        """
        from .numbering import resolve_ring_conflicts

        check_position(position, len(self.atoms))
        sub = resolve_ring_conflicts(self, as_fragment(sub))
        return dataclasses.replace(
            self, attachments=_add_attachment(self.attachments, position, sub)
        )

    def branch(self, position: int, *subs: FragmentLike) -> Linear:
        """Attach several branches at one position, in order."""
        result = self
        for sub in subs:
            result = result.attach(sub, position)
        return result

    def branch_at(self, branches: Mapping[int, FragmentLike | Sequence[FragmentLike]]) -> Linear:
        """Attach branches given as ``{position: sub or [subs]}``."""
        result = self
        for position, value in branches.items():
            subs = value if isinstance(value, (list, tuple)) else (value,)
            result = result.branch(int(position), *subs)
        return result

    def concat(self, other: FragmentLike) -> Fragment:
        """Join two chains into one, or fall back to a Molecule.

        Both chains are brought to the main-chain layout. The bond that
        other brings with it becomes the junction bond, and other's
        attachments move along with its atoms.
        """
        other = as_fragment(other)
        if not isinstance(other, Linear):
            return Fragment.concat(self, other)

        shift = len(self.atoms)
        attachments = dict(self.attachments)
        for pos, subs in other.attachments.items():
            attachments[pos + shift] = subs

        return Linear(
            self.atoms + other.atoms,
            self.main_bonds() + (other.entry_bond(),) + other.main_bonds(),
            attachments,
            leading_bond=self.entry_bond(),
            is_sibling=self.is_sibling,
        )

    def to_object(self) -> dict[str, Any]:
        obj: dict[str, Any] = {"type": "linear", "atoms": list(self.atoms)}
        if self.bonds:
            obj["bonds"] = list(self.bonds)
        if self.attachments:
            obj["attachments"] = _attachments_object(self.attachments)
        obj.update(self._placement_object())
        return obj


@dataclass(frozen=True, slots=True)
class Ring(Fragment):
    """A single ring of ``size`` atoms.

    Attributes:
        atoms: Base element used for every position not substituted.
        size: Number of ring atoms (at least 3).
        ring_number: Ring-closure number written in the SMILES.
        offset: For a member of a fused system, index into the base ring
            where the member is fused.
        substitutions: 1-based position to element.
        attachments: 1-based position to branches.
        bonds: ``size`` slots. ``bonds[i - 2]`` precedes atom ``i``; the
            last slot is the ring-closure bond.
        meta: Source layout when the ring came from the parser.

    Example:
        >>> Ring("c", 6).smiles
        'c1ccccc1'
        >>> Ring("c", 6).substitute(1, "n").smiles
        'n1ccccc1'
    """

    _code_name: ClassVar[str] = "ring"

    atoms: str
    size: int
    ring_number: int = 1
    offset: int = 0
    substitutions: dict[int, str] = field(default_factory=dict)
    attachments: Attachments = field(default_factory=dict)
    bonds: tuple[str | None, ...] = ()
    leading_bond: str | None = None
    is_sibling: bool | None = None
    meta: RingMeta | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.atoms, str):
            raise NonStringAtomError(
                f"Ring base atom must be a string, got {type(self.atoms).__name__}"
            )
        if not self.atoms:
            raise EmptyAtomsError("Ring base atom must not be empty")
        size = self.size
        if isinstance(size, bool) or not isinstance(size, int) or size < 3:
            raise InvalidSizeError(f"Ring size must be an integer >= 3, got {size!r}", size)
        number = self.ring_number
        if isinstance(number, bool) or not isinstance(number, int) or not 0 <= number <= MAX_RING_NUMBER:
            raise RingError(f"Ring number must be in 0..{MAX_RING_NUMBER}, got {number!r}", number)
        if isinstance(self.offset, bool) or not isinstance(self.offset, int) or self.offset < 0:
            raise InvalidPositionError(f"Ring offset must be a non-negative integer, got {self.offset!r}", self.offset)

        bonds = _normalize_bonds(self.bonds, "Ring")
        if len(bonds) > size:
            raise FragmentError(f"Ring of size {size} accepts at most {size} bonds, got {len(bonds)}")
        object.__setattr__(self, "bonds", bonds + (None,) * (size - len(bonds)))

        substitutions: dict[int, str] = {}
        for key in sorted(self.substitutions or {}, key=int):
            element = self.substitutions[key]
            if not isinstance(element, str) or not element:
                raise NonStringAtomError(f"Substitution at position {key} must be a non-empty string")
            substitutions[check_position(int(key), size)] = element
        object.__setattr__(self, "substitutions", substitutions)
        object.__setattr__(self, "attachments", _normalize_attachments(self.attachments, size))

    @property
    def base_atom(self) -> str:
        return self.atoms

    @property
    def closure_bond(self) -> str | None:
        return self.bonds[-1]

    def atom_at(self, position: int) -> str:
        """Element written at a 1-based position."""
        return self.substitutions.get(position, self.atoms)

    def attach(self, sub: FragmentLike, position: int) -> Ring:
        """Append sub as a branch on the ring atom at position (1-based).

        Raises:
            InvalidPositionError: If position is outside ``1..size``.
        """
        from .numbering import resolve_ring_conflicts

        check_position(position, self.size)
        sub = resolve_ring_conflicts(self, as_fragment(sub))
        return self.with_attachment(position, sub)

    def with_attachment(self, position: int, sub: Fragment) -> Ring:
        """Append sub at position without ring-number arbitration."""
        check_position(position, self.size)
        return dataclasses.replace(
            self, attachments=_add_attachment(self.attachments, position, sub)
        )

    def substitute(self, position: int, element: str) -> Ring:
        """Set the element at position; the base atom clears the entry."""
        check_position(position, self.size)
        substitutions = dict(self.substitutions)
        if element == self.atoms:
            substitutions.pop(position, None)
        else:
            substitutions[position] = element
        return dataclasses.replace(self, substitutions=substitutions)

    def substitute_multiple(self, substitutions: Mapping[int, str]) -> Ring:
        """Apply :meth:`substitute` for each ``{position: element}`` entry."""
        for position in substitutions:
            check_position(int(position), self.size)
        result = self
        for position, element in substitutions.items():
            result = result.substitute(int(position), element)
        return result

    def fuse(self, other: Ring, offset: int) -> FusedRing:
        """Fuse other onto this ring's edge starting at offset.

        The other ring is renumbered if its ring numbers clash with this
        ring's.
        """
        from .numbering import resolve_ring_conflicts

        if not isinstance(other, Ring):
            raise NonRingMemberError(f"Can only fuse a Ring, got {type(other).__name__}")
        base = self if self.offset == 0 else dataclasses.replace(self, offset=0)
        member = resolve_ring_conflicts(base, other)
        return FusedRing((base, dataclasses.replace(member, offset=offset)))

    def to_object(self) -> dict[str, Any]:
        obj: dict[str, Any] = {
            "type": "ring",
            "atoms": self.atoms,
            "size": self.size,
            "ring_number": self.ring_number,
            "offset": self.offset,
        }
        if self.substitutions:
            obj["substitutions"] = dict(self.substitutions)
        if self.attachments:
            obj["attachments"] = _attachments_object(self.attachments)
        if any(self.bonds):
            obj["bonds"] = list(self.bonds)
        obj.update(self._placement_object())
        return obj


@dataclass(frozen=True, slots=True)
class FusedRing(Fragment):
    """A system of rings sharing atoms.

    Built by hand, the first ring is the base and every other member of
    size ``s`` with offset ``k`` is fused onto the base edge between
    atoms ``k`` and ``k + 1`` (0-based). Parsed systems carry a
    :class:`FusedRingMeta` that drives codegen instead.

    Example:
        >>> FusedRing([Ring("C", 6), Ring("C", 6, ring_number=2, offset=2)]).smiles
        'C1CC2CCCCC2CC1'
    """

    _code_name: ClassVar[str] = "fused_ring"

    rings: tuple[Ring, ...]
    leading_bond: str | None = None
    is_sibling: bool | None = None
    meta: FusedRingMeta | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.rings, (list, tuple)):
            raise NonArrayInputError("FusedRing rings must be a list or tuple")
        for ring in self.rings:
            if not isinstance(ring, Ring):
                raise NonRingMemberError(
                    f"FusedRing members must be Ring, got {type(ring).__name__}"
                )
        rings = tuple(self.rings)
        if self.meta is None:
            if len(rings) < 2:
                raise TooFewRingsError(f"FusedRing requires at least 2 rings, got {len(rings)}")
            rings = _dedupe_ring_numbers(rings)
            _check_offsets(rings)
        elif not rings:
            raise TooFewRingsError("FusedRing requires at least 1 ring")
        object.__setattr__(self, "rings", rings)

    def _find(self, ring_number: int) -> tuple[int, Ring]:
        for i, ring in enumerate(self.rings):
            if ring.ring_number == ring_number:
                return i, ring
        raise RingError(f"Ring {ring_number} not found in fused ring system", ring_number)

    def _replace_ring(self, index: int, ring: Ring, meta: FusedRingMeta | None) -> FusedRing:
        rings = self.rings[:index] + (ring,) + self.rings[index + 1:]
        return dataclasses.replace(self, rings=rings, meta=meta)

    def get_ring(self, ring_number: int) -> Ring | None:
        """Member ring with the given number, if any."""
        try:
            return self._find(ring_number)[1]
        except RingError:
            return None

    def add_ring(self, ring: Ring, offset: int) -> FusedRing:
        """Fuse another ring onto the base. Parser metadata is dropped."""
        from .numbering import resolve_ring_conflicts

        if not isinstance(ring, Ring):
            raise NonRingMemberError(f"Can only add a Ring, got {type(ring).__name__}")
        member = resolve_ring_conflicts(self, ring)
        rings = self.rings + (dataclasses.replace(member, offset=offset),)
        return FusedRing(rings, leading_bond=self.leading_bond, is_sibling=self.is_sibling)

    def substitute_in_ring(self, ring_number: int, position: int, element: str) -> FusedRing:
        """Substitute an atom of one member ring.

        Raises:
            RingError: If no ring has ring_number.
        """
        index, ring = self._find(ring_number)
        updated = ring.substitute(position, element)
        meta = self.meta
        if meta is not None and ring.meta is not None and meta.atom_value_map:
            atom_index = ring.meta.positions[position - 1]
            values = dict(meta.atom_value_map)
            values[atom_index] = updated.atom_at(position)
            meta = dataclasses.replace(meta, atom_value_map=values)
        return self._replace_ring(index, updated, meta)

    def attach_to_ring(self, ring_number: int, sub: FragmentLike, position: int) -> FusedRing:
        """Attach sub to an atom of one member ring.

        Raises:
            RingError: If no ring has ring_number.
        """
        from .numbering import resolve_ring_conflicts

        index, ring = self._find(ring_number)
        check_position(position, ring.size)
        sub = resolve_ring_conflicts(self, as_fragment(sub))
        return self._replace_ring(index, ring.with_attachment(position, sub), self.meta)

    def renumber(self, start: int = 1) -> FusedRing:
        """Number member rings consecutively from start."""
        from .numbering import renumber_fragment

        mapping: dict[int, int] = {}
        number = start
        for ring in self.rings:
            mapping.setdefault(ring.ring_number, number)
            number += 1
        return renumber_fragment(self, mapping)

    def to_object(self) -> dict[str, Any]:
        obj: dict[str, Any] = {
            "type": "fused_ring",
            "rings": [ring.to_object() for ring in self.rings],
        }
        obj.update(self._placement_object())
        return obj


def _dedupe_ring_numbers(rings: tuple[Ring, ...]) -> tuple[Ring, ...]:
    """Give members that reuse a ring number the lowest free number."""
    from .numbering import get_next_ring_number, ring_numbers_in

    used: set[int] = set()
    for ring in rings:
        used |= ring_numbers_in(ring)

    seen: set[int] = set()
    result: list[Ring] = []
    for ring in rings:
        if ring.ring_number in seen:
            number = get_next_ring_number(used)
            used.add(number)
            ring = dataclasses.replace(ring, ring_number=number)
        seen.add(ring.ring_number)
        result.append(ring)
    return tuple(result)


def _check_offsets(rings: tuple[Ring, ...]) -> None:
    base = rings[0]
    upper = base.size - 2
    seen: set[int] = set()
    for ring in rings[1:]:
        if ring.offset > upper:
            raise InvalidPositionError(
                f"Fused ring offset {ring.offset} is out of range 0..{upper}",
                ring.offset,
                0,
                upper,
            )
        if ring.offset in seen:
            raise InvalidPositionError(
                f"Two rings are fused at the same offset {ring.offset}",
                ring.offset,
                0,
                upper,
            )
        seen.add(ring.offset)


def create_fused_ring_node(rings: Iterable[Ring], meta: FusedRingMeta | None = None) -> FusedRing:
    """Build a FusedRing without builder checks; a single ring is allowed."""
    return FusedRing(tuple(rings), meta=meta if meta is not None else FusedRingMeta())


@dataclass(frozen=True, slots=True)
class Molecule(Fragment):
    """Fragments written one after another.

    A component after the first is preceded by its ``leading_bond``.

    Example:
        >>> Molecule([Linear(["C"]), Ring("c", 6)]).smiles
        'Cc1ccccc1'
    """

    _code_name: ClassVar[str] = "molecule"

    components: tuple[Fragment, ...] = ()
    leading_bond: str | None = None
    is_sibling: bool | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.components, (list, tuple)):
            raise NonArrayInputError("Molecule components must be a list or tuple")
        object.__setattr__(
            self, "components", tuple(as_fragment(c) for c in self.components)
        )

    def __len__(self) -> int:
        return len(self.components)

    def append(self, component: FragmentLike) -> Molecule:
        return dataclasses.replace(self, components=(*self.components, as_fragment(component)))

    def prepend(self, component: FragmentLike) -> Molecule:
        return dataclasses.replace(self, components=(as_fragment(component), *self.components))

    def concat(self, other: FragmentLike) -> Molecule:
        other = as_fragment(other)
        extra = other.components if isinstance(other, Molecule) else (other,)
        return dataclasses.replace(self, components=self.components + extra)

    def get_component(self, index: int) -> Fragment:
        return self.components[index]

    def replace_component(self, index: int, component: FragmentLike) -> Molecule:
        components = list(self.components)
        components[index] = as_fragment(component)
        return dataclasses.replace(self, components=tuple(components))

    def to_object(self) -> dict[str, Any]:
        obj: dict[str, Any] = {
            "type": "molecule",
            "components": [c.to_object() for c in self.components],
        }
        obj.update(self._placement_object())
        return obj


@dataclass(frozen=True, slots=True)
class RawFragment(Fragment):
    """Verbatim SMILES text used as a fragment."""

    _code_name: ClassVar[str] = "raw"

    # Shadows Fragment.smiles; field() keeps the argument required
    smiles: str = field()
    leading_bond: str | None = None
    is_sibling: bool | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.smiles, str):
            raise NonStringAtomError(
                f"RawFragment text must be a string, got {type(self.smiles).__name__}"
            )

    def to_object(self) -> dict[str, Any]:
        obj: dict[str, Any] = {"type": "raw", "smiles": self.smiles}
        obj.update(self._placement_object())
        return obj
