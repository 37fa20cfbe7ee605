"""Tests for ring path resolution and ring grouping helpers."""

from smilesfrag.atoms import AtomRecord, RingBoundary, build_atom_list
from smilesfrag.rings import (
    build_adjacency,
    calculate_offset,
    calculate_substitutions,
    collect_ring_path,
    determine_base_atom,
    edge_bond,
    extract_ring_bonds,
    group_fused_rings,
    rings_share_atoms,
)
from smilesfrag.tokenizer import tokenize


def atom_list(smiles: str):
    return build_atom_list(tokenize(smiles), smiles)


def records(values: str) -> list[AtomRecord]:
    return [AtomRecord(i, v, v) for i, v in enumerate(values)]


def boundary(number: int, positions: tuple[int, ...]) -> RingBoundary:
    return RingBoundary(number, positions[0], positions[-1], positions)


class TestBaseAtom:
    """Test base element selection."""

    def test_majority_wins(self):
        assert determine_base_atom(records("ncccc")) == "c"

    def test_tie_goes_to_last_counted(self):
        """On a tie the value first seen loses."""
        assert determine_base_atom(records("cn")) == "n"
        assert determine_base_atom(records("ccnn")) == "n"

    def test_empty_ring_defaults_to_carbon(self):
        assert determine_base_atom([]) == "C"


class TestSubstitutions:
    """Test substitution extraction."""

    def test_substitutions_are_one_based(self):
        assert calculate_substitutions(records("ccnccn"), "c") == {3: "n", 6: "n"}

    def test_no_substitutions(self):
        assert calculate_substitutions(records("CCC"), "C") == {}


class TestGrouping:
    """Test fused-ring grouping."""

    def test_disjoint_rings_stay_apart(self):
        a = boundary(1, (0, 1, 2))
        b = boundary(1, (3, 4, 5))
        assert not rings_share_atoms(a, b)
        assert group_fused_rings([a, b]) == [[a], [b]]

    def test_shared_atoms_group(self):
        a = boundary(2, (3, 4, 5, 6, 7, 8))
        b = boundary(1, (0, 1, 2, 3, 8, 9))
        assert group_fused_rings([a, b]) == [[a, b]]

    def test_transitive_grouping(self):
        """A ring sharing atoms with any member joins the group."""
        a = boundary(1, (0, 1, 2, 3))
        b = boundary(2, (3, 4, 5))
        c = boundary(3, (5, 6, 7))
        d = boundary(4, (10, 11, 12))
        assert group_fused_rings([a, c, b, d]) == [[a, b, c], [d]]

    def test_offset(self):
        """Offset is the base index of the first shared atom."""
        base = boundary(1, (0, 1, 2, 7, 8, 9))
        inner = boundary(2, (2, 3, 4, 5, 6, 7))
        assert calculate_offset(inner, base) == 2
        assert calculate_offset(boundary(3, (20, 21, 22)), base) == 0


class TestRingBonds:
    """Test bond extraction along a ring."""

    def test_ring_bonds_follow_written_bonds(self):
        """Bonds between ring atoms, with a trailing slot for the closure."""
        result = atom_list("C1=CCC=C1")
        ring = result.ring_boundaries[0]
        bonds = extract_ring_bonds(ring, result.atoms, result.ring_boundaries)
        assert bonds == ["=", None, None, "=", None]

    def test_closure_bond_fills_last_slot(self):
        result = atom_list("C1CC=1")
        ring = result.ring_boundaries[0]
        assert extract_ring_bonds(ring, result.atoms, result.ring_boundaries) == [None, None, "="]

    def test_earlier_closure_edge_carries_its_bond(self):
        """A ring running over an earlier closure reads that closure's bond."""
        result = atom_list("C1CC2CCC=2CC1")
        inner, outer = result.ring_boundaries
        assert inner.positions == (2, 3, 4, 5)
        assert outer.positions == (0, 1, 2, 5, 6, 7)
        assert edge_bond(2, 5, result.atoms, result.ring_boundaries) == "="
        bonds = extract_ring_bonds(outer, result.atoms, result.ring_boundaries)
        assert bonds == [None, None, "=", None, None, None]


class TestRingPath:
    """Test shortest-path ring resolution against real atom lists."""

    def test_adjacency_from_written_bonds(self):
        atoms = atom_list("CC(C)C").atoms
        assert build_adjacency(atoms, []) == {0: [1], 1: [0, 2, 3], 2: [1], 3: [1]}

    def test_adjacency_includes_closures(self):
        result = atom_list("C1CCC1")
        adjacency = build_adjacency(result.atoms, result.ring_boundaries)
        assert adjacency[0] == [1, 3]
        assert adjacency[3] == [0, 2]

    def test_simple_ring(self):
        assert atom_list("C1CCCC1").ring_boundaries[0].positions == (0, 1, 2, 3, 4)

    def test_outer_ring_uses_inner_closure(self):
        """Naphthalene's second ring to close runs over the first ring's closure."""
        result = atom_list("c1ccc2ccccc2c1")
        inner, outer = result.ring_boundaries
        assert inner.ring_number == 2
        assert inner.positions == (3, 4, 5, 6, 7, 8)
        assert outer.positions == (0, 1, 2, 3, 8, 9)

    def test_ring_skips_branches_off_the_cycle(self):
        """Atoms in a side branch are not on the shortest path."""
        result = atom_list("C1CC(CCC)CC1")
        assert result.ring_boundaries[0].positions == (0, 1, 2, 6, 7)

    def test_ring_closing_inside_a_branch(self):
        """The path climbs back out of the branch to the opening atom."""
        result = atom_list("C1C(C1)(C2)CC2")
        first, second = result.ring_boundaries
        assert first.positions == (0, 1, 2)
        assert second.positions == (3, 1, 4, 5)

    def test_ring_crossing_branch_levels(self):
        result = atom_list("C1=CC(=C(C(=C1)O)C)O")
        assert result.ring_boundaries[0].positions == (0, 1, 2, 3, 4, 5)

    def test_collect_ring_path_directly(self):
        atoms = atom_list("CCCC").atoms
        assert collect_ring_path(0, 3, atoms, []) == [0, 1, 2, 3]
        assert collect_ring_path(3, 1, atoms, []) == [3, 2, 1]
