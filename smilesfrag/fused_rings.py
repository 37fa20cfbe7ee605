"""
High-level two-ring fused system builder.

:class:`FusedRings` lays out a bicyclic system from its two ring sizes
and addresses atoms as ``(ring_index, atom_index)`` pairs, which is more
convenient than working with the member rings of a FusedRing.

Layout for sizes ``(s0, s1)``, in global atom order::

    first atom (marker 1)
    s0 - 4 first-ring atoms
    bridge atom (marker 2)
    s1 - 2 second-ring atoms
    bridge atom (marker 2)
    last atom (marker 1)
"""

from __future__ import annotations

import dataclasses
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, ClassVar, Final

from .elements import BRANCH_CLOSE, BRANCH_OPEN
from .exceptions import (
    InvalidPositionError,
    InvalidSizeError,
    NonArrayInputError,
    NonStringAtomError,
    NotSupportedError,
    TooFewRingsError,
)
from .numbering import find_used_ring_numbers, format_ring_number, remap_ring_numbers
from .types import Fragment, FragmentLike

# Ring numbers the layout always writes
RESERVED_RING_NUMBERS: Final[tuple[int, int]] = (1, 2)


def _substituent_text(sub: object) -> str:
    if isinstance(sub, str):
        return sub
    if isinstance(sub, Fragment):
        return sub.smiles
    raise NotSupportedError(f"Cannot use {type(sub).__name__} as a substituent")


@dataclass(frozen=True, slots=True)
class FusedRings(Fragment):
    """Two fused rings with hetero atoms and substituents.

    Attributes:
        sizes: The two ring sizes. The first ring needs at least 4 atoms,
            the second at least 3.
        atom: Element used for every atom not listed in hetero.
        hetero: Global atom index to element.
        substituents: Global atom index to substituent text. Filled by
            :meth:`attach_at`.

    Example:
        >>> FusedRings([6, 6]).smiles
        'c1ccc2ccccc2c1'
        >>> FusedRings([6, 5], hetero={4: "[nH]"}).smiles
        'c1ccc2[nH]ccc2c1'
        >>> FusedRings([6, 6]).attach_at((0, 0), "C").smiles
        'c1(C)ccc2ccccc2c1'
    """

    _code_name: ClassVar[str] = "fused_rings"

    sizes: tuple[int, ...]
    atom: str = "c"
    hetero: dict[int, str] = field(default_factory=dict)
    substituents: dict[int, str] = field(default_factory=dict)
    leading_bond: str | None = None
    is_sibling: bool | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.sizes, (list, tuple)):
            raise NonArrayInputError("FusedRings sizes must be a list or tuple")
        if len(self.sizes) != 2:
            raise TooFewRingsError("FusedRings currently only supports 2 rings")
        s0, s1 = self.sizes
        for size, least in ((s0, 4), (s1, 3)):
            if isinstance(size, bool) or not isinstance(size, int) or size < least:
                raise InvalidSizeError(
                    f"FusedRings ring size must be an integer >= {least}, got {size!r}", size
                )
        if not isinstance(self.atom, str) or not self.atom:
            raise NonStringAtomError("FusedRings atom must be a non-empty string")
        object.__setattr__(self, "sizes", (s0, s1))

        total = s0 + s1 - 2
        hetero: dict[int, str] = {}
        for key, element in sorted((self.hetero or {}).items(), key=lambda kv: int(kv[0])):
            index = int(key)
            if not 0 <= index < total:
                raise InvalidPositionError(
                    f"Hetero atom index {index} is out of range 0..{total - 1}",
                    index,
                    0,
                    total - 1,
                )
            if not isinstance(element, str) or not element:
                raise NonStringAtomError(f"Hetero atom at {index} must be a non-empty string")
            hetero[index] = element
        object.__setattr__(self, "hetero", hetero)
        object.__setattr__(self, "substituents", dict(self.substituents or {}))

    @property
    def num_atoms(self) -> int:
        return self.sizes[0] + self.sizes[1] - 2

    @property
    def num_rings(self) -> int:
        return len(self.sizes)

    @property
    def _bridges(self) -> tuple[int, int]:
        s0, s1 = self.sizes
        return s0 - 3, s0 + s1 - 4

    def atom_value(self, index: int) -> str:
        """Element at a global atom index."""
        return self.hetero.get(index, self.atom)

    def global_position(self, ring_index: int, atom_index: int) -> int | None:
        """Global atom index of ``(ring_index, atom_index)``, if it exists.

        Both bridge atoms can be addressed from either ring.
        """
        s0, s1 = self.sizes
        bridge1, bridge2 = self._bridges
        if ring_index == 0:
            if 0 <= atom_index <= s0 - 3:
                return atom_index
            if atom_index == s0 - 2:
                return bridge2
            if atom_index == s0 - 1:
                return self.num_atoms - 1
        elif ring_index == 1:
            if atom_index == 0:
                return bridge1
            if 1 <= atom_index <= s1 - 2:
                return bridge1 + atom_index
            if atom_index == s1 - 1:
                return bridge2
        return None

    def _resolve(self, position: object) -> int:
        if (
            not isinstance(position, (list, tuple))
            or len(position) != 2
            or not all(isinstance(p, int) and not isinstance(p, bool) for p in position)
        ):
            raise InvalidPositionError("Position must be [ring_index, atom_index]", position)
        ring_index, atom_index = position
        if not 0 <= ring_index < self.num_rings:
            raise InvalidPositionError(
                f"Ring index {ring_index} is out of range", ring_index, 0, self.num_rings - 1
            )
        index = self.global_position(ring_index, atom_index)
        if index is None:
            raise InvalidPositionError(
                f"Position [{ring_index}, {atom_index}] not found in fused ring system",
                position,
            )
        return index

    def attach_at(
        self,
        position: Sequence[int],
        sub: FragmentLike,
        at: Sequence[int] | None = None,
    ) -> FusedRings:
        """Attach a substituent at ``(ring_index, atom_index)``.

        A substituent already at that atom is replaced. Ring numbers in
        the substituent are remapped when the system is written.

        Args:
            position: Host atom as ``(ring_index, atom_index)``.
            sub: Substituent fragment or SMILES text.
            at: For a FusedRings substituent, the atom of sub that bonds to
                the host. sub is rewritten to start from that atom.

        Raises:
            InvalidPositionError: If a position is malformed or not found.
            NotSupportedError: If at is given for another substituent type.
        """
        index = self._resolve(position)

        if at is None:
            text = _substituent_text(sub)
        else:
            if not isinstance(sub, FusedRings):
                raise NotSupportedError(
                    "'at' is currently only supported for FusedRings substituents"
                )
            root = None
            if isinstance(at, (list, tuple)) and len(at) == 2:
                root = sub.global_position(*at)
                shown = list(at)
            else:
                shown = at
            if root is None:
                raise InvalidPositionError(f"Attachment position {shown} not found", at)
            text = sub.rooted_at(root)

        substituents = dict(self.substituents)
        substituents[index] = text
        return dataclasses.replace(self, substituents=substituents)

    def render(self) -> str:
        """SMILES text of the system, substituents included."""
        bridge1, bridge2 = self._bridges
        markers = {0: 1, bridge1: 2, bridge2: 2, self.num_atoms - 1: 1}

        parts: list[str] = []
        for index in range(self.num_atoms):
            parts.append(self.atom_value(index))
            if index in markers:
                parts.append(format_ring_number(markers[index]))
            sub = self.substituents.get(index)
            if sub:
                text = remap_ring_numbers("".join(parts), sub, reserved=RESERVED_RING_NUMBERS)
                parts.append(f"{BRANCH_OPEN}{text}{BRANCH_CLOSE}")
        return "".join(parts)

    def _edges(self) -> dict[int, list[int]]:
        n = self.num_atoms
        bridge1, bridge2 = self._bridges
        neighbors: dict[int, list[int]] = {i: [] for i in range(n)}
        for a, b in [*((i, i + 1) for i in range(n - 1)), (0, n - 1), (bridge1, bridge2)]:
            neighbors[a].append(b)
            neighbors[b].append(a)
        for nbrs in neighbors.values():
            nbrs.sort()
        return neighbors

    def rooted_at(self, root: int) -> str:
        """SMILES text of the system written starting from atom root.

        The bicyclic graph is walked depth first from root. Substituents
        are written as branches of their atom.
        """
        neighbors = self._edges()

        # Phase 1: find ring closures
        WHITE, GREY, BLACK = 0, 1, 2
        colors = dict.fromkeys(neighbors, WHITE)
        closures: dict[int, list[tuple[int, int]]] = {i: [] for i in neighbors}

        def dfs_find_cycles(atom: int, parent: int | None) -> None:
            colors[atom] = GREY
            for nbr in neighbors[atom]:
                if nbr == parent:
                    continue
                if colors[nbr] == WHITE:
                    dfs_find_cycles(nbr, atom)
                elif colors[nbr] == GREY:
                    edge = (min(atom, nbr), max(atom, nbr))
                    closures[nbr].append(edge)
                    closures[atom].append(edge)
            colors[atom] = BLACK

        dfs_find_cycles(root, None)

        # Phase 2: build SMILES
        taken: set[int] = set()
        for text in self.substituents.values():
            taken |= find_used_ring_numbers(text)
        available = [d for d in range(1, 100) if d not in taken]
        digit_of: dict[tuple[int, int], int] = {}
        colors = dict.fromkeys(neighbors, WHITE)
        out: list[str] = []

        def dfs_build(atom: int, parent: int | None) -> None:
            colors[atom] = GREY
            out.append(self.atom_value(atom))

            closed: set[int] = set()
            for edge in closures[atom]:
                if edge in digit_of:
                    digit = digit_of.pop(edge)
                    out.append(format_ring_number(digit))
                    available.append(digit)
                    available.sort()
                else:
                    digit = available.pop(0)
                    digit_of[edge] = digit
                    out.append(format_ring_number(digit))
                closed.add(edge[0] if edge[1] == atom else edge[1])

            sub = self.substituents.get(atom)
            if sub:
                out.append(f"{BRANCH_OPEN}{sub}{BRANCH_CLOSE}")

            children = [
                nbr
                for nbr in neighbors[atom]
                if nbr != parent and nbr not in closed and colors[nbr] == WHITE
            ]
            for i, nbr in enumerate(children):
                if colors[nbr] != WHITE:
                    continue
                last = i + 1 == len(children)
                if not last:
                    out.append(BRANCH_OPEN)
                dfs_build(nbr, atom)
                if not last:
                    out.append(BRANCH_CLOSE)

            colors[atom] = BLACK

        dfs_build(root, None)
        return "".join(out)

    def to_object(self) -> dict[str, Any]:
        obj: dict[str, Any] = {
            "type": "fused_rings",
            "sizes": list(self.sizes),
            "atom": self.atom,
        }
        if self.hetero:
            obj["hetero"] = dict(self.hetero)
        if self.substituents:
            obj["substituents"] = dict(self.substituents)
        obj.update(self._placement_object())
        return obj

