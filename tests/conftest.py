"""Test configuration and fixtures for smilesfrag tests."""

import pytest


def rdkit_is_valid(chem, smiles: str) -> bool:
    """Check if SMILES is valid according to RDKit.

    Args:
        chem: The ``rdkit.Chem`` module.
        smiles: SMILES string to check.

    Returns:
        True if RDKit parses the string into a molecule.
    """
    return chem.MolFromSmiles(smiles) is not None


def rdkit_canonical(chem, smiles: str) -> str:
    """Get RDKit canonical SMILES for comparison.

    Args:
        chem: The ``rdkit.Chem`` module.
        smiles: Input SMILES string.

    Returns:
        RDKit's canonical SMILES.
    """
    mol = chem.MolFromSmiles(smiles)
    if mol is None:
        raise ValueError(f"RDKit could not parse: {smiles}")
    return chem.MolToSmiles(mol, canonical=True)


@pytest.fixture
def chem():
    """RDKit's Chem module; tests using it are skipped without RDKit."""
    return pytest.importorskip("rdkit.Chem")


@pytest.fixture
def simple_smiles() -> list[str]:
    """Acyclic SMILES strings."""
    return [
        "C",
        "CC",
        "CCO",
        "C=C",
        "C#N",
        "CC(=O)O",
        "CC(C)C",
        "CC(CC)(O)C",
        "C=CC#N",
        "ClCBr",
        "C[NH3+]",
    ]


@pytest.fixture
def ring_smiles() -> list[str]:
    """Single-ring SMILES strings."""
    return [
        "C1CC1",
        "C1CCCCC1",
        "c1ccccc1",
        "n1ccccc1",
        "C1=CC=CC=C1",
        "[nH]1cccc1",
        "C%10CC%10",
        "C1CC=1",
        "C=1CC1",
    ]


@pytest.fixture
def composite_smiles() -> list[str]:
    """Rings combined with chains, branches and other rings."""
    return [
        "Cc1ccccc1",
        "c1ccccc1C",
        "Oc1ccccc1",
        "c1ccccc1C(=O)O",
        "CC(c1ccccc1)C",
        "c1ccc(C)cc1",
        "c1(c2ccccc2)ccccc1",
        "C1CC1C1CC1",
    ]


@pytest.fixture
def fused_smiles() -> list[str]:
    """Fused ring systems."""
    return [
        "c1ccc2ccccc2c1",
        "c1cc2ccccc2cc1",
        "C1CC2CCCCC2CC1",
        "c1ccc2[nH]ccc2c1",
        "n1ccc2ccccc2c1",
        "c1ccc2nc[nH]c2c1",
        "c1(C)ccc2ccccc2c1",
        "c1nc2ccccc2ccccn1",
    ]


@pytest.fixture
def cannabidiol() -> str:
    """Cannabidiol skeleton, with a ring that crosses branch levels."""
    return "CCCCCC1=CC(=C(C(=C1)O)C2C=C(CCC2C(=C)C)C)O"
