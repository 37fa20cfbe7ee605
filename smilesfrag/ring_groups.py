"""
Ring and fused-ring node construction (parser pass 2).

A ring group is a set of ring boundaries connected by shared atoms. The
union of their atoms is a connected part of the source tree whose first
atom is written before all the others. A group of one ring becomes a
Ring, larger groups a FusedRing; either way the node records the order
its atoms, markers and attachments were written in, as a
:class:`~smilesfrag.types.SourceLayout`.

Branches hanging off a group atom become attachments of the first member
ring containing that atom. The chain that carries on inline after the
group is not an attachment; it is returned to the caller, which makes it
the next component.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

from .branches import follow_tail
from .rings import (
    calculate_offset,
    calculate_substitutions,
    determine_base_atom,
    extract_ring_bonds,
)
from .types import (
    AtomSlot,
    AttachmentSlot,
    FusedRingMeta,
    Fragment,
    MarkerSlot,
    Ring,
    RingMeta,
    Slot,
    SourceLayout,
    create_fused_ring_node,
)

if TYPE_CHECKING:
    from .atoms import AtomRecord, RingBoundary
    from .parser import AstBuilder

logger = logging.getLogger(__name__)


def build_single_ring_node(
    ring: RingBoundary,
    builder: AstBuilder,
    offset: int = 0,
    attachments: Mapping[int, Sequence[Fragment]] | None = None,
    layout: SourceLayout | None = None,
) -> Ring:
    """Build a Ring node from one ring boundary.

    Args:
        ring: The ring boundary.
        builder: AST builder holding the atom list.
        offset: Offset of the ring inside its fused system.
        attachments: Branches by 1-based ring position.
        layout: Write order, for a ring that stands alone.

    Returns:
        The Ring, with :class:`RingMeta` describing its source layout.
    """
    atoms = builder.atoms
    ring_atoms = [atoms[pos] for pos in ring.positions]
    base_atom = determine_base_atom(ring_atoms)

    meta = RingMeta(
        positions=ring.positions,
        start=ring.start,
        end=ring.end,
        branch_depths=[atom.branch_depth for atom in ring_atoms],
        parent_indices=[atom.parent_index for atom in ring_atoms],
        closure_bond_at_close=ring.closure_bond_at_close,
        layout=layout,
    )
    return Ring(
        base_atom,
        len(ring_atoms),
        ring_number=ring.ring_number,
        offset=offset,
        substitutions=calculate_substitutions(ring_atoms, base_atom),
        attachments=dict(attachments or {}),
        bonds=extract_ring_bonds(ring, atoms, builder.boundaries),
        meta=meta,
    )


def _member_positions(members: Sequence[RingBoundary]) -> dict[int, tuple[int, int]]:
    """Atom index to (member, 1-based position) of the first member holding it."""
    owners: dict[int, tuple[int, int]] = {}
    for m, ring in enumerate(members):
        for position, pos in enumerate(ring.positions, start=1):
            owners.setdefault(pos, (m, position))
    return owners


def _marker_slots(atom: AtomRecord, members: Sequence[RingBoundary]) -> tuple[MarkerSlot, ...]:
    slots: list[MarkerSlot] = []
    for number, opens, after in atom.markers:
        for m, ring in enumerate(members):
            if ring.ring_number == number and (ring.start if opens else ring.end) == atom.index:
                slots.append(MarkerSlot(m, opens, after))
                break
    return tuple(slots)


def build_ring_group_node(
    group: Sequence[RingBoundary],
    builder: AstBuilder,
) -> tuple[Fragment, AtomRecord | None]:
    """Build the node for one group of rings connected by shared atoms.

    Args:
        group: Ring boundaries of the group.
        builder: AST builder holding the atom list.

    Returns:
        The Ring or FusedRing node, and the atom that continues the chain
        inline after the group (None if the group ends it).
    """
    atoms = builder.atoms
    members = sorted(group, key=lambda ring: ring.start)
    region = {pos for ring in members for pos in ring.positions}
    top = atoms[min(region)]
    continuation = follow_tail(builder.children, top, region)
    owners = _member_positions(members)

    attachments: list[dict[int, list[Fragment]]] = [{} for _ in members]
    children: dict[int, tuple[Slot, ...]] = {}
    markers: dict[int, tuple[MarkerSlot, ...]] = {}

    for pos in sorted(region):
        if atoms[pos].markers:
            markers[pos] = _marker_slots(atoms[pos], members)

        slots: list[Slot] = []
        for child in builder.children.get(pos, ()):
            if child.index in region:
                slots.append(AtomSlot(child.index, child.opens_branch))
                continue
            if child is continuation:
                continue

            sub = builder.build_chain(child, is_branch=True)
            if not child.opens_branch:
                sub = dataclasses.replace(sub, is_sibling=False)
            m, position = owners[pos]
            subs = attachments[m].setdefault(position, [])
            slots.append(AttachmentSlot(m, position, len(subs)))
            subs.append(sub)
        if slots:
            children[pos] = tuple(slots)

    layout = SourceLayout(root=top.index, markers=markers, children=children)

    if len(members) == 1:
        node: Fragment = build_single_ring_node(
            members[0], builder, attachments=attachments[0], layout=layout
        )
    else:
        base = members[0]
        rings = [
            build_single_ring_node(
                ring,
                builder,
                offset=0 if ring is base else calculate_offset(ring, base),
                attachments=attachments[m],
            )
            for m, ring in enumerate(members)
        ]
        ordered = sorted(region)
        meta = FusedRingMeta(
            total_atoms=len(ordered),
            all_positions=ordered,
            branch_depth_map={pos: atoms[pos].branch_depth for pos in ordered},
            parent_index_map={pos: atoms[pos].parent_index for pos in ordered},
            atom_value_map={pos: atoms[pos].raw_value for pos in ordered},
            bond_map={pos: atoms[pos].bond for pos in ordered},
            layout=layout,
        )
        node = create_fused_ring_node(rings, meta)
        logger.debug("Fused %d rings over %d atoms", len(rings), len(ordered))

    if top.bond:
        node = dataclasses.replace(node, leading_bond=top.bond)
    return node, continuation
