"""
Fragment decompiler.

Turns a fragment tree into Python statements that rebuild it with the
builder API, one assignment per step. Running the generated code leaves
the result in the last variable assigned.

Every node is rebuilt alongside the code emitted for it. A parsed node
whose layout the builder API cannot express (a ring written across
branches, a fused system that is not a base ring with members on its
edges) rebuilds to different text; such a node is emitted as a
``RawFragment`` of its SMILES instead, so the generated code always
writes the same SMILES as the input.
"""

from __future__ import annotations

import logging

from .exceptions import ChemError, NotSupportedError
from .fused_rings import FusedRings
from .types import FusedRing, Fragment, Linear, Molecule, RawFragment, Ring

logger = logging.getLogger(__name__)


def _bond_list(bonds: tuple[str | None, ...]) -> str:
    return "[" + ", ".join(repr(bond) for bond in bonds) + "]"


def _placement(fragment: Fragment) -> str:
    extra = ""
    if fragment.leading_bond:
        extra += f", leading_bond={fragment.leading_bond!r}"
    if fragment.is_sibling is not None:
        extra += f", is_sibling={fragment.is_sibling!r}"
    return extra


class _Decompiler:
    """Emits one assignment per builder call and rebuilds as it goes."""

    def __init__(self, var_name: str) -> None:
        self._prefix = var_name
        self._count = 0
        self.lines: list[str] = []

    def _next_var(self) -> str:
        self._count += 1
        return f"{self._prefix}{self._count}"

    def _emit(self, expression: str) -> str:
        var = self._next_var()
        self.lines.append(f"{var} = {expression}")
        return var

    def node(self, fragment: Fragment) -> tuple[str, Fragment]:
        """Emit code for fragment.

        Returns:
            The variable holding the result, and the fragment that the
            emitted code builds.
        """
        if isinstance(fragment, RawFragment):
            return self._raw(fragment)
        if isinstance(fragment, FusedRings):
            return self._fused_rings(fragment)

        mark = (len(self.lines), self._count)
        try:
            var, built = self._structured(fragment)
        except ChemError as exc:
            logger.debug("Builder cannot rebuild %r: %s", fragment.smiles, exc)
        else:
            if built.smiles == fragment.smiles:
                return var, built
            logger.debug("Builder layout differs for %r", fragment.smiles)

        del self.lines[mark[0]:]
        self._count = mark[1]
        return self._raw(fragment)

    def _structured(self, fragment: Fragment) -> tuple[str, Fragment]:
        if isinstance(fragment, Ring):
            return self._ring(fragment)
        if isinstance(fragment, Linear):
            return self._linear(fragment)
        if isinstance(fragment, FusedRing):
            return self._fused_ring(fragment)
        if isinstance(fragment, Molecule):
            return self._molecule(fragment)
        raise TypeError(f"Cannot decompile {type(fragment).__name__}")

    def _raw(self, fragment: Fragment) -> tuple[str, Fragment]:
        built = RawFragment(
            fragment.smiles, leading_bond=fragment.leading_bond, is_sibling=fragment.is_sibling
        )
        return self._emit(f"RawFragment({fragment.smiles!r}{_placement(fragment)})"), built

    def _attachments(
        self, var: str, built: Ring | Linear, fragment: Ring | Linear
    ) -> tuple[str, Fragment]:
        for position, subs in fragment.attachments.items():
            for sub in subs:
                sub_var, sub_built = self.node(sub)
                var = self._emit(f"{var}.attach({sub_var}, {position})")
                built = built.attach(sub_built, position)
        return var, built

    def _ring(self, ring: Ring) -> tuple[str, Fragment]:
        args = [repr(ring.atoms), str(ring.size)]
        kwargs: dict[str, object] = {}
        if ring.ring_number != 1:
            args.append(f"ring_number={ring.ring_number}")
            kwargs["ring_number"] = ring.ring_number
        if ring.offset != 0:
            args.append(f"offset={ring.offset}")
            kwargs["offset"] = ring.offset
        if any(ring.bonds):
            args.append(f"bonds={_bond_list(ring.bonds)}")
            kwargs["bonds"] = ring.bonds
        var = self._emit(f"Ring({', '.join(args)}{_placement(ring)})")
        built = Ring(
            ring.atoms,
            ring.size,
            leading_bond=ring.leading_bond,
            is_sibling=ring.is_sibling,
            **kwargs,
        )

        for position, element in ring.substitutions.items():
            var = self._emit(f"{var}.substitute({position}, {element!r})")
            built = built.substitute(position, element)
        return self._attachments(var, built, ring)

    def _linear(self, linear: Linear) -> tuple[str, Fragment]:
        args = ["[" + ", ".join(repr(atom) for atom in linear.atoms) + "]"]
        bonds: tuple[str | None, ...] = ()
        if any(linear.bonds):
            args.append(_bond_list(linear.bonds))
            bonds = linear.bonds
        var = self._emit(f"Linear({', '.join(args)}{_placement(linear)})")
        built = Linear(
            list(linear.atoms),
            list(bonds),
            leading_bond=linear.leading_bond,
            is_sibling=linear.is_sibling,
        )
        return self._attachments(var, built, linear)

    def _fused_ring(self, fused: FusedRing) -> tuple[str, Fragment]:
        if len(fused.rings) < 2:
            raise NotSupportedError("A single-ring system has no builder form")

        ring_vars: list[str] = []
        members: list[Ring] = []
        for ring in fused.rings:
            var, built = self._ring(ring)
            if not isinstance(built, Ring):
                raise NotSupportedError("Fused members must rebuild as rings")
            ring_vars.append(var)
            members.append(built)

        if len(ring_vars) == 2 and not fused.leading_bond and fused.is_sibling is None:
            offset = fused.rings[1].offset
            var = self._emit(f"{ring_vars[0]}.fuse({ring_vars[1]}, {offset})")
            return var, members[0].fuse(members[1], offset)

        var = self._emit(f"FusedRing([{', '.join(ring_vars)}]{_placement(fused)})")
        built_fused = FusedRing(
            tuple(members), leading_bond=fused.leading_bond, is_sibling=fused.is_sibling
        )
        return var, built_fused

    def _molecule(self, molecule: Molecule) -> tuple[str, Fragment]:
        component_vars: list[str] = []
        components: list[Fragment] = []
        for component in molecule.components:
            var, built = self.node(component)
            component_vars.append(var)
            components.append(built)
        var = self._emit(f"Molecule([{', '.join(component_vars)}]{_placement(molecule)})")
        built_molecule = Molecule(
            tuple(components), leading_bond=molecule.leading_bond, is_sibling=molecule.is_sibling
        )
        return var, built_molecule

    def _fused_rings(self, fused: FusedRings) -> tuple[str, Fragment]:
        args = [str(list(fused.sizes)), repr(fused.atom)]
        if fused.hetero:
            args.append(f"hetero={fused.hetero!r}")
        if fused.substituents:
            args.append(f"substituents={fused.substituents!r}")
        return self._emit(f"FusedRings({', '.join(args)}{_placement(fused)})"), fused


def decompile(fragment: Fragment, var_name: str = "v") -> str:
    """Python source that rebuilds fragment with the builder API.

    Args:
        fragment: Fragment to decompile.
        var_name: Prefix of the generated variable names.

    Returns:
        Newline-separated assignments. The last one holds a fragment that
        writes the same SMILES as fragment.

    Example:
        >>> print(decompile(Ring("c", 6).substitute(1, "n")))
        v1 = Ring('c', 6)
        v2 = v1.substitute(1, 'n')
    """
    decompiler = _Decompiler(var_name)
    decompiler.node(fragment)
    return "\n".join(decompiler.lines)
