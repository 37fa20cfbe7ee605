"""Tests for molecular properties read off SMILES text."""

import pytest

from smilesfrag import Linear, Ring, parse
from smilesfrag.exceptions import ParseError
from smilesfrag.properties import (
    calculate_formula,
    calculate_molecular_weight,
    count_atoms,
    count_rings,
    element_counts,
    element_symbol,
)
from smilesfrag.tokenizer import tokenize


class TestCountAtoms:
    """Test atom counting."""

    @pytest.mark.parametrize(
        "smiles, expected",
        [
            ("C", 1),
            ("CCCC", 4),
            ("c1ccccc1", 6),
            ("CCO", 3),
            ("[NH3+]", 1),
            ("[O-]", 1),
            ("C1CCC1", 4),
            ("C%10CCC%10", 4),
            ("C=C", 2),
            ("C#C", 2),
            ("C(C)C", 3),
            ("C[C@H](O)C", 4),
            ("CCCl", 3),
            ("CCBr", 3),
            ("c1ccccc1C", 7),
            ("[Na+]", 1),
            ("[13C]CC", 3),
        ],
    )
    def test_count(self, smiles, expected):
        assert count_atoms(smiles) == expected

    def test_fragment_input(self):
        assert count_atoms(Ring("c", 6).attach(Linear(["C"]), 1)) == 7

    def test_invalid_text(self):
        with pytest.raises(ParseError):
            count_atoms("C$C")


class TestCountRings:
    """Test ring closure counting."""

    @pytest.mark.parametrize(
        "smiles, expected",
        [
            ("CCCC", 0),
            ("C1CCC1", 1),
            ("c1ccccc1", 1),
            ("C1CCC1C2CCC2", 2),
            ("c1ccc2ccccc2c1", 2),
            ("C%10CCC%10", 1),
            ("C1CCC1C%10CCC%10", 2),
            ("c1ccc2c(c1)ccc1ccccc12", 3),
            ("C1CC1C1CC1", 2),
        ],
    )
    def test_count(self, smiles, expected):
        assert count_rings(smiles) == expected

    def test_bracket_digits_are_not_rings(self):
        """Hydrogen counts and isotopes inside brackets are not ring numbers."""
        assert count_rings("[13CH3][NH3+]") == 0

    def test_parsed_fragment(self):
        assert count_rings(parse("c1ccc2ccccc2c1")) == 2


class TestElementSymbol:
    """Test element extraction from atom tokens."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("C", "C"),
            ("c", "C"),
            ("Cl", "Cl"),
            ("[Na+]", "Na"),
            ("[13CH3]", "C"),
            ("[nH]", "N"),
            ("[se]", "Se"),
            ("[C@@H]", "C"),
            ("*", None),
        ],
    )
    def test_symbol(self, text, expected):
        (token,) = tokenize(text)
        assert element_symbol(token) == expected


class TestFormula:
    """Test Hill-order formulas with estimated hydrogens."""

    @pytest.mark.parametrize(
        "smiles, expected",
        [
            ("C", "CH4"),
            ("CC", "C2H6"),
            ("CCC", "C3H8"),
            ("CCO", "C2H6O"),
            ("C=C", "C2H4"),
            ("C#C", "C2H2"),
            ("C=O", "CH2O"),
            ("CO", "CH4O"),
            ("CC(=O)O", "C2H4O2"),
            ("CN", "CH4N"),
            ("CCN", "C2H6N"),
            ("CCS", "C2H6S"),
            ("CCCl", "C2H6Cl"),
            ("CCBr", "C2H6Br"),
            ("CCF", "C2H6F"),
            ("O", "O"),
        ],
    )
    def test_formula(self, smiles, expected):
        assert calculate_formula(smiles) == expected

    def test_aromatic_ring_counted_as_saturated(self):
        """Aromaticity is not perceived, so benzene gets the alkane estimate."""
        assert calculate_formula("c1ccccc1") == "C6H14"

    def test_hill_order(self):
        formula = calculate_formula("OCCN")
        assert formula == "C2H6NO"

    def test_explicit_hydrogen_atoms(self):
        formula = calculate_formula("[CH3]")
        assert "C" in formula and "H" in formula

    def test_hydrogen_estimate_never_negative(self):
        assert element_counts("C#C#C#C")["H"] == 0


class TestMolecularWeight:
    """Test molecular weights."""

    @pytest.mark.parametrize(
        "smiles, expected",
        [
            ("C", 16.04),
            ("CC", 30.07),
            ("CCC", 44.1),
            ("CCO", 46.07),
            ("O", 16.0),
            ("c1ccccc1", 86.18),
            ("C=O", 30.03),
            ("CC(=O)O", 60.05),
            ("CN", 30.05),
            ("C(Cl)(Cl)Cl", 122.39),
        ],
    )
    def test_weight(self, smiles, expected):
        assert calculate_molecular_weight(smiles) == pytest.approx(expected)

    def test_rounded_to_two_places(self):
        weight = calculate_molecular_weight("CCCC")
        assert weight == round(weight, 2)

    def test_untabulated_element_weighs_nothing(self):
        assert calculate_molecular_weight("[Xe]") == 0.0
