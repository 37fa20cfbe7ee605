"""
Ring path resolution and ring grouping.

Pass 1 calls :func:`collect_ring_path` each time a ring closes, to decide
which atoms between the two markers belong to the cycle. Pass 2 uses the
grouping helpers to find fused systems and to turn a ring's atoms into a
base element, substitutions and bonds.

Atoms are joined by the bonds of the written order (each atom to its
:attr:`~smilesfrag.atoms.AtomRecord.tree_parent`) and by the closures of
rings already closed. A ring is the shortest path between its two marker
atoms over those bonds, so a ring closing around an inner ring takes the
inner ring's closure as a shortcut, whatever branch levels it crosses.
"""

from __future__ import annotations

from collections import Counter, deque
from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from smilesfrag.atoms import AtomRecord, RingBoundary


DEFAULT_BASE_ATOM = "C"


def build_adjacency(
    atoms: Sequence[AtomRecord],
    closed_rings: Sequence[RingBoundary],
) -> dict[int, list[int]]:
    """Neighbours of every atom over written bonds and earlier closures.

    Neighbour lists are sorted, so path search is deterministic.
    """
    adjacency: dict[int, set[int]] = {atom.index: set() for atom in atoms}
    for atom in atoms:
        parent = atom.tree_parent
        if parent is not None:
            adjacency[atom.index].add(parent)
            adjacency[parent].add(atom.index)
    for ring in closed_rings:
        adjacency[ring.start].add(ring.end)
        adjacency[ring.end].add(ring.start)
    return {index: sorted(neighbours) for index, neighbours in adjacency.items()}


def collect_ring_path(
    start: int,
    end: int,
    atoms: Sequence[AtomRecord],
    closed_rings: Sequence[RingBoundary],
) -> list[int]:
    """Compute the ordered atom positions of a ring that just closed.

    Args:
        start: Atom index of the opening marker.
        end: Atom index of the closing marker.
        atoms: Atom records built so far.
        closed_rings: Rings closed before this one.

    Returns:
        Atom indices of the cycle, from start to end. On a tie between
        equally short paths the one through lower atom indices wins.
    """
    adjacency = build_adjacency(atoms, closed_rings)
    came_from: dict[int, int | None] = {start: None}
    queue: deque[int] = deque([start])
    while queue:
        current = queue.popleft()
        if current == end:
            break
        for neighbour in adjacency[current]:
            if neighbour not in came_from:
                came_from[neighbour] = current
                queue.append(neighbour)

    if end not in came_from:
        return []

    path: list[int] = []
    node: int | None = end
    while node is not None:
        path.append(node)
        node = came_from[node]
    path.reverse()
    return path


def rings_share_atoms(ring1: RingBoundary, ring2: RingBoundary) -> bool:
    """Check if two rings have at least one atom in common."""
    return ring1.shares_atoms(ring2)


def group_fused_rings(boundaries: Sequence[RingBoundary]) -> list[list[RingBoundary]]:
    """Partition rings into groups connected by shared atoms.

    Groups are seeded in boundary order and grown until no unassigned ring
    overlaps any member.
    """
    groups: list[list[RingBoundary]] = []
    assigned: set[int] = set()

    for i, ring in enumerate(boundaries):
        if i in assigned:
            continue

        group: list[RingBoundary] = [ring]
        assigned.add(i)

        expanded = True
        while expanded:
            expanded = False
            for j, other in enumerate(boundaries):
                if j in assigned:
                    continue
                if any(member.shares_atoms(other) for member in group):
                    group.append(other)
                    assigned.add(j)
                    expanded = True

        groups.append(group)

    return groups


def calculate_offset(ring: RingBoundary, base_ring: RingBoundary) -> int:
    """Index in base_ring of the first position ring shares with it, or 0."""
    base_positions = set(base_ring.positions)
    for pos in ring.positions:
        if pos in base_positions:
            return base_ring.positions.index(pos)
    return 0


def determine_base_atom(ring_atoms: Sequence[AtomRecord]) -> str:
    """Most common raw atom value in a ring.

    On a tie the value seen first among the tied ones loses, so the one
    counted last wins. An empty ring gives ``'C'``.
    """
    base = DEFAULT_BASE_ATOM
    best = 0
    for value, count in Counter(atom.raw_value for atom in ring_atoms).items():
        if count >= best:
            best = count
            base = value
    return base


def calculate_substitutions(ring_atoms: Sequence[AtomRecord], base_atom: str) -> dict[int, str]:
    """1-based positions whose raw value differs from the base atom."""
    return {
        i: atom.raw_value
        for i, atom in enumerate(ring_atoms, start=1)
        if atom.raw_value != base_atom
    }


def edge_bond(
    first: int,
    second: int,
    atoms: Sequence[AtomRecord],
    closed_rings: Sequence[RingBoundary],
) -> str | None:
    """Bond between two adjacent cycle atoms.

    A written bond belongs to the later atom of the pair; otherwise the
    pair is the closure of an earlier ring and carries its closure bond.
    """
    if atoms[second].tree_parent == first:
        return atoms[second].bond
    if atoms[first].tree_parent == second:
        return atoms[first].bond
    for ring in closed_rings:
        if {ring.start, ring.end} == {first, second}:
            return ring.closure_bond
    return None


def extract_ring_bonds(
    ring: RingBoundary,
    atoms: Sequence[AtomRecord],
    closed_rings: Sequence[RingBoundary],
) -> list[str | None]:
    """Bonds along a ring in ring order; the last slot is its closure bond."""
    positions = ring.positions
    bonds = [
        edge_bond(positions[i], positions[i + 1], atoms, closed_rings)
        for i in range(len(positions) - 1)
    ]
    bonds.append(ring.closure_bond)
    return bonds
