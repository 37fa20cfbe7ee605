"""Tests for the atom-list builder (parser pass 1)."""

import pytest

from smilesfrag.atoms import AtomListBuilder, AtomRecord, RingBoundary, build_atom_list
from smilesfrag.tokenizer import tokenize
from smilesfrag.exceptions import DisconnectedFragmentError, ParseError, UnclosedRingError


def atom_list(smiles: str):
    return build_atom_list(tokenize(smiles), smiles)


class TestAtomRecords:
    """Test the per-atom branch context."""

    def test_linear_chain(self):
        """Main-chain atoms have depth 0 and link to their predecessor."""
        atoms = atom_list("CCO").atoms
        assert [a.value for a in atoms] == ["C", "C", "O"]
        assert [a.branch_depth for a in atoms] == [0, 0, 0]
        assert [a.prev_atom_index for a in atoms] == [None, 0, 1]
        assert all(a.parent_index is None for a in atoms)

    def test_bond_recorded_on_following_atom(self):
        """A bond is stored on the atom written after it."""
        atoms = atom_list("C=CC#N").atoms
        assert [a.bond for a in atoms] == [None, "=", None, "#"]

    def test_branch_context(self):
        """Branch atoms know their depth, parent and opening token."""
        atoms = atom_list("CC(C)O").atoms
        methyl = atoms[2]
        assert methyl.branch_depth == 1
        assert methyl.parent_index == 1
        assert methyl.branch_id == 2
        assert methyl.prev_atom_index is None

    def test_atom_after_branch(self):
        """The atom after a closed branch continues from the branch point."""
        oxygen = atom_list("CC(C)O").atoms[3]
        assert oxygen.branch_depth == 0
        assert oxygen.prev_atom_index == 1
        assert oxygen.after_branch_close

    def test_sibling_branches(self):
        """Each branch gets its own id; the second starts fresh."""
        atoms = atom_list("CC(CC)(O)C").atoms
        assert atoms[2].branch_id == atoms[3].branch_id == 2
        assert atoms[3].prev_atom_index == 2
        assert atoms[4].branch_id == 6
        assert atoms[4].prev_atom_index is None
        assert atoms[4].parent_index == 1

    def test_bracket_atom_value(self):
        """Bracket atoms keep their full text."""
        atom = atom_list("C[NH3+]").atoms[1]
        assert atom.value == "[NH3+]"
        assert atom.raw_value == "[NH3+]"

    def test_record_is_mutable_dataclass(self):
        """Records can be built directly for helper tests."""
        record = AtomRecord(0, "C", "C")
        assert record.rings == []
        assert record.bond is None


class TestRingBoundaries:
    """Test ring detection."""

    def test_simple_ring(self):
        """One boundary with every atom on the path."""
        result = atom_list("c1ccccc1")
        assert len(result.ring_boundaries) == 1
        ring = result.ring_boundaries[0]
        assert ring.ring_number == 1
        assert (ring.start, ring.end) == (0, 5)
        assert ring.positions == (0, 1, 2, 3, 4, 5)
        assert ring.closure_bond is None

    def test_ring_numbers_recorded_on_atoms(self):
        """The opening atom records the number twice, others once."""
        atoms = atom_list("C1CC1").atoms
        assert atoms[0].rings == [1, 1]
        assert atoms[1].rings == [1]
        assert atoms[2].rings == [1]

    def test_closure_bond_at_close(self):
        """A bond before the closing marker is the closure bond."""
        ring = atom_list("C1CC=1").ring_boundaries[0]
        assert ring.closure_bond == "="
        assert ring.closure_bond_at_close

    def test_closure_bond_at_open(self):
        """A bond before the opening marker is the closure bond too."""
        ring = atom_list("C=1CC1").ring_boundaries[0]
        assert ring.closure_bond == "="
        assert not ring.closure_bond_at_close

    def test_branch_atoms_not_on_ring_path(self):
        """A substituent written inside the ring is not a ring atom."""
        ring = atom_list("c1ccc(C)cc1").ring_boundaries[0]
        assert ring.positions == (0, 1, 2, 3, 5, 6)

    def test_fused_rings(self):
        """The outer ring skips over the inner ring's interior."""
        boundaries = atom_list("c1ccc2ccccc2c1").ring_boundaries
        assert [b.ring_number for b in boundaries] == [2, 1]
        assert boundaries[0].positions == (3, 4, 5, 6, 7, 8)
        assert boundaries[1].positions == (0, 1, 2, 3, 8, 9)
        assert boundaries[0].shares_atoms(boundaries[1])

    def test_ring_number_reuse(self):
        """A closed number can open a new ring."""
        boundaries = atom_list("C1CC1C1CC1").ring_boundaries
        assert [b.positions for b in boundaries] == [(0, 1, 2), (3, 4, 5)]
        assert not boundaries[0].shares_atoms(boundaries[1])

    def test_ring_inside_branch(self):
        """A ring opened in a branch records that branch."""
        ring = atom_list("CC(c1ccccc1)C").ring_boundaries[0]
        assert ring.branch_depth == 1
        assert ring.branch_id == 2
        assert ring.positions == (2, 3, 4, 5, 6, 7)

    def test_builder_class(self):
        """AtomListBuilder gives the same result as build_atom_list."""
        tokens = tokenize("C1CC1")
        result = AtomListBuilder(tokens).build()
        assert result.ring_boundaries == [
            RingBoundary(ring_number=1, start=0, end=2, positions=(0, 1, 2))
        ]


class TestRingMarkers:
    """Test the ring markers recorded on each atom."""

    def test_markers_in_source_order(self):
        """A shared atom keeps the order its markers were written in."""
        atoms = atom_list("C3CCCCC31CCCCC1").atoms
        assert atoms[0].markers == [(3, True, 0)]
        assert atoms[5].markers == [(3, False, 0), (1, True, 0)]
        assert atoms[10].markers == [(1, False, 0)]

    def test_atoms_without_markers(self):
        atoms = atom_list("C1CC1").atoms
        assert atoms[1].markers == []

    def test_marker_after_branch(self):
        """After ``)`` the marker goes to the branch point, after its branch."""
        result = atom_list("C1CCC(C)1")
        atoms = result.atoms
        assert atoms[3].markers == [(1, False, 1)]
        assert atoms[4].markers == []
        assert result.ring_boundaries[0].positions == (0, 1, 2, 3)

    def test_marker_between_branches(self):
        result = atom_list("C1CCC(C)1(O)C")
        assert result.atoms[3].markers == [(1, False, 1)]
        assert result.ring_boundaries[0].end == 3

    def test_ring_closing_in_branch_climbs_out(self):
        """A ring closed inside a branch runs back through the branch point."""
        ring = atom_list("C4CC(C)(C4)").ring_boundaries[0]
        assert ring.positions == (0, 1, 2, 4)


class TestSourceTree:
    """Test the written-order bond of each atom."""

    def test_tree_parent(self):
        atoms = atom_list("CC(C(O)C)N").atoms
        assert [a.tree_parent for a in atoms] == [None, 0, 1, 2, 2, 1]

    def test_opens_branch(self):
        atoms = atom_list("CC(C(O)C)N").atoms
        assert [a.opens_branch for a in atoms] == [False, False, True, True, False, False]


class TestAtomListErrors:
    """Test pass-1 error reporting."""

    def test_unclosed_ring(self):
        """An open ring at the end raises with its number."""
        with pytest.raises(UnclosedRingError) as exc_info:
            atom_list("C1CCCC")
        assert exc_info.value.ring_numbers == [1]

    def test_unclosed_rings_in_opening_order(self):
        """All open rings are listed."""
        with pytest.raises(UnclosedRingError) as exc_info:
            atom_list("C1CC2CC")
        assert exc_info.value.ring_numbers == [1, 2]

    def test_unclosed_branch(self):
        with pytest.raises(ParseError, match="Unclosed branch"):
            atom_list("C(C")

    def test_unmatched_close(self):
        with pytest.raises(ParseError, match="Unmatched closing branch"):
            atom_list("C)C")

    def test_dot_rejected(self):
        """Disconnected fragments are not modeled."""
        with pytest.raises(DisconnectedFragmentError) as exc_info:
            atom_list("CC.C")
        assert exc_info.value.position == 2

    def test_leading_bond(self):
        with pytest.raises(ParseError, match="Bond without preceding atom"):
            atom_list("=C")

    def test_trailing_bond(self):
        with pytest.raises(ParseError, match="Bond without following atom"):
            atom_list("C=")

    def test_bond_before_branch_close(self):
        with pytest.raises(ParseError, match="Bond without following atom"):
            atom_list("C(C=)C")

    def test_leading_ring_marker(self):
        with pytest.raises(ParseError, match="Ring marker without preceding atom"):
            atom_list("1CC1")

    def test_leading_branch(self):
        with pytest.raises(ParseError, match="Branch without preceding atom"):
            atom_list("(C)C")

    def test_ring_too_small(self):
        """A ring needs at least three atoms."""
        with pytest.raises(ParseError, match="fewer than 3 atoms"):
            atom_list("C1C1")
