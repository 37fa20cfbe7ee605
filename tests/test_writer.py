"""Tests for SMILES code generation."""

import pytest

from smilesfrag import parse, to_smiles, SmilesWriter
from smilesfrag import FusedRing, Linear, Molecule, RawFragment, Ring
from smilesfrag.types import MarkerSlot
from smilesfrag.writer import entry_bond


def walk(fragment):
    """Yield every fragment in a tree, depth first."""
    yield fragment
    if isinstance(fragment, Molecule):
        children = fragment.components
    elif isinstance(fragment, (Linear, Ring)):
        children = [sub for subs in fragment.attachments.values() for sub in subs]
    elif isinstance(fragment, FusedRing):
        children = list(fragment.rings)
    else:
        children = []
    for child in children:
        yield from walk(child)


class TestWriterApi:
    """Test the writer entry points."""

    def test_to_smiles(self):
        assert to_smiles(Ring("c", 6)) == "c1ccccc1"

    def test_writer_class(self):
        assert SmilesWriter(Linear(["C", "O"])).to_smiles() == "CO"

    def test_smiles_property_matches(self):
        ring = Ring("c", 6).attach("C", 2)
        assert ring.smiles == to_smiles(ring)

    def test_unknown_type(self):
        with pytest.raises(TypeError):
            to_smiles(42)


class TestEntryBond:
    """Test the bond written before an attachment."""

    def test_branch_layout_linear_writes_own_bond(self):
        assert entry_bond(Linear(["O"], ["="])) == ""

    def test_leading_bond(self):
        assert entry_bond(Ring("C", 3, leading_bond="=")) == "="
        assert entry_bond(Linear(["C"], leading_bond="#")) == "#"

    def test_molecule_uses_first_component(self):
        molecule = Molecule([Linear(["C"], leading_bond="="), Linear(["O"])])
        assert entry_bond(molecule) == "="

    def test_no_bond(self):
        assert entry_bond(RawFragment("C")) == ""
        assert entry_bond(Molecule([])) == ""


class TestLayouts:
    """Test the layouts used for parsed fragments."""

    def test_interleaved_fused_layout(self):
        """Parsed fused systems are written from their source layout."""
        ast = parse("c1ccc2ccccc2c1")
        assert ast.meta.is_interleaved
        assert to_smiles(ast) == "c1ccc2ccccc2c1"

    def test_builder_fused_layout(self):
        """Built fused systems are laid out around the base ring."""
        fused = Ring("c", 6).fuse(Ring("c", 6), 2)
        assert fused.meta is None
        assert to_smiles(fused) == "c1cc2ccccc2cc1"

    def test_branch_crossing_ring(self, cannabidiol):
        """A ring whose atoms sit at several depths is written depth by depth."""
        ast = parse(cannabidiol)
        crossing = [
            node
            for node in walk(ast)
            if isinstance(node, Ring) and node.meta is not None and node.meta.crosses_branches
        ]
        assert crossing
        assert to_smiles(ast) == cannabidiol

    def test_fused_substituents(self):
        ast = parse("c1(C)ccc2ccccc2c1")
        assert to_smiles(ast) == "c1(C)ccc2ccccc2c1"

    def test_empty_molecule(self):
        assert to_smiles(Molecule([])) == ""

    def test_codegen_is_pure(self):
        """Writing twice gives the same text."""
        ast = parse("CC(c1ccccc1)C")
        assert ast.smiles == ast.smiles


class TestSourceLayout:
    """Test writing parsed rings from their recorded layout."""

    def test_spiro_markers_keep_source_order(self):
        ast = parse("C3CCCCC31CCCCC1")
        assert ast.meta.layout.markers[5] == (MarkerSlot(0, False), MarkerSlot(1, True))
        assert to_smiles(ast) == "C3CCCCC31CCCCC1"

    def test_spiro_renumbered(self):
        """Markers follow their member rings through renumbering."""
        assert parse("C3CCCCC31CCCCC1").renumber(1).smiles == "C1CCCCC12CCCCC2"

    def test_attachment_added_after_parsing(self):
        """New attachments are written in parentheses after the atom's markers."""
        ring = parse("c1ccc(C)cc1")
        assert ring.attach("O", 1).smiles == "c1(O)ccc(C)cc1"
        assert ring.attach("O", 4).smiles == "c1ccc(O)(C)cc1"

    def test_substitution_after_parsing(self):
        ring = parse("C1CCC(C)1")
        assert ring.substitute(2, "N").smiles == "C1NCC(C)1"

    def test_inline_attachment_stays_inline(self):
        """A chain written inline after a ring atom is not wrapped in parentheses."""
        ast = parse("C1=CC(=C(C(=C1)O)C)O")
        assert to_smiles(ast) == "C1=CC(=C(C(=C1)O)C)O"
        assert any(
            sub.is_sibling is False
            for node in walk(ast)
            if isinstance(node, Ring)
            for subs in node.attachments.values()
            for sub in subs
        )

    def test_marker_after_branch(self):
        ast = parse("C1CC2CCCC2CC(C(C)C)1")
        assert ast.meta.layout.markers[8] == (MarkerSlot(0, False, after=1),)
        assert to_smiles(ast) == "C1CC2CCCC2CC(C(C)C)1"
