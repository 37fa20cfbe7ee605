"""
SMILES string parser.

This module turns a SMILES string into a fragment tree in two passes:

    1. :mod:`smilesfrag.atoms` scans the tokens once and produces a flat
       atom list plus one boundary per ring.
    2. :class:`AstBuilder` groups rings that share atoms, walks the atoms
       in written order, and recursively builds branches into Linear,
       Ring, FusedRing and Molecule nodes.

Supported features:
    - Organic subset atoms, ``*`` and raw bracket atoms
    - Bonds ``- = # : / \\``, including ring-closure bonds on either side
    - Ring closures ``0``-``9`` and ``%10``-``%99``, with reuse
    - Nested branches, fused, spiro and bridged rings, rings crossing branches

The parsed tree writes back to the input string unchanged.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Sequence

from smilesfrag.atoms import AtomList, AtomRecord, RingBoundary, build_atom_list
from smilesfrag.branches import branch_children, build_children, inline_child
from smilesfrag.ring_groups import build_ring_group_node
from smilesfrag.rings import group_fused_rings
from smilesfrag.tokenizer import tokenize
from smilesfrag.types import FusedRing, Fragment, Linear, Molecule, Ring

logger = logging.getLogger(__name__)


def _with_leading_bond(node: Fragment, bond: str | None) -> Fragment:
    if not bond:
        return node
    return dataclasses.replace(node, leading_bond=bond)


def _with_connection(node: Fragment, component: int, position: int) -> Fragment:
    """Record which earlier component a ring node is bonded to."""
    if isinstance(node, (Ring, FusedRing)) and node.meta is not None:
        meta = dataclasses.replace(
            node.meta,
            connects_to_component=component,
            connects_at_position=position,
        )
        return dataclasses.replace(node, meta=meta)
    return node


class AstBuilder:
    """Builds the fragment tree from a pass-1 atom list.

    The atom list is walked in written order. Atoms outside rings
    collect into Linear runs; a ring group becomes one Ring or FusedRing
    node, after which the walk carries on from the atom written inline
    after the group. Each ``(...)`` branch is built the same way and
    attached to the atom it hangs off.

    Attributes:
        atoms: All atom records.
        boundaries: All ring boundaries, in closing order.
        children: Source tree, atom index to the atoms bonded after it.
    """

    def __init__(self, atom_list: AtomList) -> None:
        self.atoms: list[AtomRecord] = atom_list.atoms
        self.boundaries: list[RingBoundary] = atom_list.ring_boundaries
        self.children = build_children(self.atoms)
        self._groups = group_fused_rings(self.boundaries)
        self._group_of: dict[int, int] = {
            pos: gi
            for gi, group in enumerate(self._groups)
            for ring in group
            for pos in ring.positions
        }

    def build(self) -> Fragment:
        """Build the tree for the whole atom list.

        Returns:
            A single component, or a Molecule of the main-chain components.
            An empty atom list gives an empty Molecule.
        """
        if not self.atoms:
            return Molecule(())
        root = self.build_chain(self.atoms[0])
        logger.debug("Built %s from %d ring groups", type(root).__name__, len(self._groups))
        return root

    def build_chain(self, first: AtomRecord, is_branch: bool = False) -> Fragment:
        """Build the node for everything written from first onwards.

        Args:
            first: First atom of the chain.
            is_branch: True if the chain hangs off a host atom; its first
                bond is then kept as the bond to the host.

        Returns:
            A Linear, Ring or FusedRing, or a Molecule of them in written
            order.
        """
        components: list[Fragment] = []
        run: list[AtomRecord] = []
        atom: AtomRecord | None = first

        while atom is not None:
            gi = self._group_of.get(atom.index)
            if gi is None:
                run.append(atom)
                atom = inline_child(self.children, atom)
                continue

            if run:
                components.append(self._run_component(run, is_branch, components))
                run = []

            node, following = build_ring_group_node(self._groups[gi], self)
            if components and atom.tree_parent is not None:
                node = _with_connection(node, len(components) - 1, atom.tree_parent)
            components.append(node)
            atom = following

        if run:
            components.append(self._run_component(run, is_branch, components))

        if len(components) == 1:
            return components[0]
        return Molecule(tuple(components))

    def _run_component(
        self,
        run: list[AtomRecord],
        is_branch: bool,
        components: list[Fragment],
    ) -> Fragment:
        linear = self.build_linear(run, is_branch and not components)
        if components:
            linear = _with_leading_bond(linear, run[0].bond)
        return linear

    def build_linear(self, chain: Sequence[AtomRecord], is_branch: bool = False) -> Linear:
        """Build a Linear from a run of atoms written one after another.

        Branches off the run become attachments of the atom they hang off.
        """
        if is_branch:
            bonds = [atom.bond for atom in chain]
        else:
            bonds = [atom.bond for atom in chain[1:]]

        attachments: dict[int, list[Fragment]] = {}
        for position, atom in enumerate(chain, start=1):
            branches = branch_children(self.children, atom)
            if branches:
                attachments[position] = [
                    self.build_chain(branch, is_branch=True) for branch in branches
                ]

        return Linear([atom.raw_value for atom in chain], bonds, attachments)


def build_ast(atom_list: AtomList) -> Fragment:
    """Run pass 2 over a pass-1 atom list."""
    return AstBuilder(atom_list).build()


class SmilesParser:
    """SMILES string parser.

    Parses a SMILES string into the same fragment tree the builder API
    produces. Bracket atoms are kept as raw text and never decoded.

    Example:
        >>> parser = SmilesParser("CCO")
        >>> ast = parser.parse()
        >>> ast.atoms
        ('C', 'C', 'O')

    For convenience, use the module-level `parse()` function:
        >>> from smilesfrag import parse
        >>> parse("c1ccccc1").size
        6
    """

    def __init__(self, smiles: str) -> None:
        """Initialize parser with a SMILES string.

        Args:
            smiles: SMILES string to parse.
        """
        self._smiles = smiles

    def parse(self) -> Fragment:
        """Parse the SMILES string into a fragment tree.

        Returns:
            The root fragment.

        Raises:
            ParseError: If the SMILES syntax is invalid.
            DisconnectedFragmentError: If the string contains ``.``.
            UnclosedRingError: If a ring is left open.
        """
        tokens = tokenize(self._smiles)
        atom_list = build_atom_list(tokens, self._smiles)
        logger.debug(
            "Parsed %r: %d atoms, %d rings",
            self._smiles,
            len(atom_list.atoms),
            len(atom_list.ring_boundaries),
        )
        return build_ast(atom_list)


def parse(smiles: str) -> Fragment:
    """Parse a SMILES string into a fragment tree.

    This is a convenience function that creates a SmilesParser and
    calls parse().

    Args:
        smiles: SMILES string to parse.

    Returns:
        Parsed fragment.

    Raises:
        ParseError: If SMILES syntax is invalid.

    Example:
        >>> parse("CC(=O)O").smiles
        'CC(=O)O'
    """
    return SmilesParser(smiles).parse()
