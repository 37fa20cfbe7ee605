"""Tests for repeating fragments."""

import pytest

from smilesfrag import Linear, Repeat, Ring, repeat
from smilesfrag.exceptions import UsageError
from smilesfrag.properties import count_atoms, count_rings


class TestRepeat:
    """Test end-to-end repetition."""

    def test_hexane(self):
        assert Repeat("C", 6).smiles == "CCCCCC"

    def test_peg_like_chain(self):
        assert Repeat("CCO", 4).smiles == "CCOCCOCCOCCO"

    def test_long_chain(self):
        assert Repeat("CC", 100).smiles == "CC" * 100

    def test_fragment_input(self):
        methyl = Linear(["C"])
        assert repeat(methyl, 5).smiles == "CCCCC"

    def test_atom_count(self):
        assert count_atoms(Repeat("C", 6)) == 6

    def test_ring_numbers_reused(self):
        """Each copy closes its ring before the next one opens it again."""
        chain = Repeat(Ring("C", 3), 3)
        assert chain.smiles == "C1CC1C1CC1C1CC1"
        assert count_rings(chain) == 3

    def test_single_copy(self):
        assert Repeat("CCO", 1).smiles == "CCO"

    def test_rdkit_accepts(self, chem):
        assert chem.MolFromSmiles(Repeat("CCO", 4).smiles) is not None

    @pytest.mark.parametrize("count", [0, -1, 2.5, True, "3"])
    def test_bad_count(self, count):
        with pytest.raises(UsageError):
            Repeat("C", count)
