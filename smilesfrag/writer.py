"""
SMILES code generation.

This module turns a fragment tree back into SMILES text. Parsed rings
record the order their atoms, ring markers and branches were written in,
and are written back character for character. Builder fragments are laid
out from their ring sizes and offsets.
"""

from __future__ import annotations

from collections.abc import Iterable

from .elements import BRANCH_CLOSE, BRANCH_OPEN
from .fused_rings import FusedRings
from .numbering import format_ring_number
from .types import (
    AtomSlot,
    FusedRing,
    Fragment,
    Linear,
    Molecule,
    RawFragment,
    Ring,
    Slot,
    SourceLayout,
)


def entry_bond(fragment: Fragment) -> str:
    """Bond text to write before a fragment that hangs off an atom.

    A branch-layout Linear writes its own entry bond, so nothing is added
    for it.
    """
    if isinstance(fragment, Linear):
        if fragment.is_branch_layout and fragment.bonds[0]:
            return ""
        return fragment.leading_bond or ""
    if isinstance(fragment, Molecule) and not fragment.leading_bond:
        return entry_bond(fragment.components[0]) if fragment.components else ""
    return fragment.leading_bond or ""


class SmilesWriter:
    """Writes a fragment tree as SMILES.

    Example:
        >>> from smilesfrag import parse
        >>> SmilesWriter(parse("CC(=O)O")).to_smiles()
        'CC(=O)O'
    """

    def __init__(self, fragment: Fragment) -> None:
        self._fragment = fragment

    def to_smiles(self) -> str:
        """Generate the SMILES string."""
        return self._write(self._fragment)

    def _write(self, node: Fragment) -> str:
        if isinstance(node, Molecule):
            return self._write_molecule(node)
        if isinstance(node, FusedRing):
            if node.meta is not None and node.meta.layout is not None:
                return _LayoutWriter(self, node, node.meta.layout).write()
            return self._write_fused_layout(node)
        if isinstance(node, Ring):
            if node.meta is not None and node.meta.layout is not None:
                return _LayoutWriter(self, node, node.meta.layout).write()
            return self._write_ring(node)
        if isinstance(node, Linear):
            return self._write_linear(node)
        if isinstance(node, RawFragment):
            return node.smiles
        if isinstance(node, FusedRings):
            return node.render()
        raise TypeError(f"Unknown fragment type: {type(node).__name__}")

    def branch_text(self, node: Fragment) -> str:
        """Text of an attachment, including its entry bond."""
        return entry_bond(node) + self._write(node)

    def write_branches(self, parts: list[str], subs: Iterable[Fragment]) -> None:
        """Append each attachment in its own parentheses."""
        for sub in subs:
            parts.append(f"{BRANCH_OPEN}{self.branch_text(sub)}{BRANCH_CLOSE}")

    def _write_molecule(self, molecule: Molecule) -> str:
        parts: list[str] = []
        for i, component in enumerate(molecule.components):
            if i > 0:
                parts.append(entry_bond(component))
            parts.append(self._write(component))
        return "".join(parts)

    def _write_linear(self, linear: Linear) -> str:
        parts: list[str] = []
        bonds = linear.bonds if linear.is_branch_layout else (None, *linear.main_bonds())

        for i, atom in enumerate(linear.atoms):
            if bonds[i]:
                parts.append(bonds[i])
            parts.append(atom)
            self.write_branches(parts, linear.attachments.get(i + 1, ()))

        return "".join(parts)

    def _write_ring(self, ring: Ring) -> str:
        parts: list[str] = []
        marker = format_ring_number(ring.ring_number)
        closure = ring.closure_bond
        at_close = ring.meta is not None and ring.meta.closure_bond_at_close

        for i in range(1, ring.size + 1):
            if i > 1 and ring.bonds[i - 2]:
                parts.append(ring.bonds[i - 2])
            parts.append(ring.atom_at(i))

            if i == 1:
                if closure and not at_close:
                    parts.append(closure)
                parts.append(marker)
            if i == ring.size:
                if closure and at_close:
                    parts.append(closure)
                parts.append(marker)

            self.write_branches(parts, ring.attachments.get(i, ()))

        return "".join(parts)

    def _write_fused_layout(self, fused: FusedRing) -> str:
        """Lay out a hand-built fused system around its base ring.

        A member with offset ``k`` is opened at base atom ``k``, writes its
        ``size - 2`` own atoms, and is closed at base atom ``k + 1``.
        Shared atoms take the base ring's element.
        """
        base, *members = fused.rings
        by_offset = {member.offset: member for member in members}
        parts: list[str] = []

        for k in range(base.size):
            position = k + 1
            closing = by_offset.get(k - 1)
            opening = by_offset.get(k)

            if k > 0:
                if closing is not None:
                    bond = closing.bonds[closing.size - 2]
                else:
                    bond = base.bonds[k - 1]
                if bond:
                    parts.append(bond)
            parts.append(base.atom_at(position))

            if k == 0:
                if base.closure_bond:
                    parts.append(base.closure_bond)
                parts.append(format_ring_number(base.ring_number))
            if closing is not None:
                parts.append(format_ring_number(closing.ring_number))
            if opening is not None:
                bond = opening.closure_bond or base.bonds[k]
                if bond:
                    parts.append(bond)
                parts.append(format_ring_number(opening.ring_number))
            if k == base.size - 1:
                parts.append(format_ring_number(base.ring_number))

            self.write_branches(parts, base.attachments.get(position, ()))
            if closing is not None:
                self.write_branches(parts, closing.attachments.get(closing.size, ()))
            if opening is not None:
                self.write_branches(parts, opening.attachments.get(1, ()))
                for j in range(2, opening.size):
                    if opening.bonds[j - 2]:
                        parts.append(opening.bonds[j - 2])
                    parts.append(opening.atom_at(j))
                    self.write_branches(parts, opening.attachments.get(j, ()))

        return "".join(parts)


class _LayoutWriter:
    """Writes a parsed ring or ring system by walking its source layout.

    Each atom is followed by its ring markers, then by any attachments
    added after parsing (in parentheses), then by its recorded slots. A
    marker that was written after a closed branch goes back after the
    same number of slots.
    """

    def __init__(self, writer: SmilesWriter, node: Ring | FusedRing, layout: SourceLayout) -> None:
        self.writer = writer
        self.node = node
        self.layout = layout
        self.members: tuple[Ring, ...] = node.rings if isinstance(node, FusedRing) else (node,)
        self.parts: list[str] = []
        self.extras = self._unplaced_attachments()

    def write(self) -> str:
        self._write_atom(self.layout.root, None)
        return "".join(self.parts)

    def _unplaced_attachments(self) -> dict[int, list[Fragment]]:
        placed = self.layout.attachment_slots()
        extras: dict[int, list[Fragment]] = {}
        for m, ring in enumerate(self.members):
            if ring.meta is None:
                continue
            for position, subs in ring.attachments.items():
                for order, sub in enumerate(subs):
                    if (m, position, order) not in placed:
                        atom = ring.meta.positions[position - 1]
                        extras.setdefault(atom, []).append(sub)
        return extras

    def _atom_text(self, index: int) -> str:
        node = self.node
        if isinstance(node, FusedRing):
            return node.meta.atom_value_map[index]
        return node.atom_at(node.meta.positions.index(index) + 1)

    def _bond(self, parent: int, index: int) -> str | None:
        node = self.node
        if isinstance(node, FusedRing):
            return node.meta.bond_map.get(index)
        positions = node.meta.positions
        a, b = positions.index(parent), positions.index(index)
        if b == a + 1:
            return node.bonds[a]
        if a == b + 1:
            return node.bonds[b]
        return None

    def _write_markers(self, index: int, after: int) -> None:
        for marker in self.layout.markers.get(index, ()):
            if marker.after != after:
                continue
            ring = self.members[marker.member]
            at_close = ring.meta is not None and ring.meta.closure_bond_at_close
            if ring.closure_bond and marker.opens != at_close:
                self.parts.append(ring.closure_bond)
            self.parts.append(format_ring_number(ring.ring_number))

    def _write_atom(self, index: int, parent: int | None) -> None:
        parts = self.parts
        if parent is not None:
            bond = self._bond(parent, index)
            if bond:
                parts.append(bond)
        parts.append(self._atom_text(index))
        self._write_markers(index, 0)
        self.writer.write_branches(parts, self.extras.get(index, ()))

        for written, slot in enumerate(self.layout.children.get(index, ()), start=1):
            self._write_slot(index, slot)
            self._write_markers(index, written)

    def _write_slot(self, index: int, slot: Slot) -> None:
        parts = self.parts
        if isinstance(slot, AtomSlot):
            if slot.in_branch:
                parts.append(BRANCH_OPEN)
            self._write_atom(slot.index, index)
            if slot.in_branch:
                parts.append(BRANCH_CLOSE)
            return

        subs = self.members[slot.member].attachments.get(slot.position, ())
        if slot.order >= len(subs):
            return
        sub = subs[slot.order]
        if sub.is_sibling is False:
            parts.append(self.writer.branch_text(sub))
        else:
            self.writer.write_branches(parts, (sub,))


def to_smiles(fragment: Fragment) -> str:
    """Convert a fragment tree to a SMILES string.

    This is a convenience function that creates a SmilesWriter and
    calls to_smiles().

    Args:
        fragment: Fragment to write.

    Returns:
        SMILES string.

    Example:
        >>> from smilesfrag import Ring, Linear
        >>> to_smiles(Ring("c", 6).attach(Linear(["C"]), 4))
        'c1ccc(C)cc1'
    """
    return SmilesWriter(fragment).to_smiles()
