"""
Source-tree helpers for the AST builder.

Every atom but the first is bonded to one earlier atom, its
:attr:`~smilesfrag.atoms.AtomRecord.tree_parent`, so the atom list forms a
tree in written order. The children of an atom are ordered by index. At
most one child is written inline, and it always comes last; the others
each open a ``(...)`` branch.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping, Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from smilesfrag.atoms import AtomRecord


Children = Mapping[int, Sequence["AtomRecord"]]


def build_children(atoms: Sequence[AtomRecord]) -> dict[int, list[AtomRecord]]:
    """Map each atom index to the atoms bonded after it, in written order."""
    children: dict[int, list[AtomRecord]] = {}
    for atom in atoms:
        parent = atom.tree_parent
        if parent is not None:
            children.setdefault(parent, []).append(atom)
    return children


def inline_child(children: Children, atom: AtomRecord) -> AtomRecord | None:
    """The atom written right after atom without parentheses, if any."""
    kids = children.get(atom.index, ())
    if kids and not kids[-1].opens_branch:
        return kids[-1]
    return None


def branch_children(children: Children, atom: AtomRecord) -> list[AtomRecord]:
    """First atoms of the ``(...)`` branches hanging off atom."""
    return [kid for kid in children.get(atom.index, ()) if kid.opens_branch]


def follow_tail(
    children: Children,
    top: AtomRecord,
    members: Collection[int],
) -> AtomRecord | None:
    """Find the atom that continues a chain after a group of atoms.

    Starting at top, follow each atom's last child while it is a member
    written inline. The walk ends at a child written in parentheses or at
    an atom with no children. A non-member written inline is where the
    chain carries on past the group.

    Args:
        children: Source tree from :func:`build_children`.
        top: First atom of the group.
        members: Atom indices of the group.

    Returns:
        The continuing atom, or None if the text of the group ends the
        enclosing chain.
    """
    atom = top
    while True:
        kids = children.get(atom.index, ())
        if not kids:
            return None
        last = kids[-1]
        if last.opens_branch:
            return None
        if last.index not in members:
            return last
        atom = last
