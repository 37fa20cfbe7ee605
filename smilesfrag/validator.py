"""
Structural pre-check for SMILES text.

:func:`validate_smiles` scans the raw text for balanced brackets, balanced
branches and paired ring numbers, without tokenizing or parsing. It never
raises; the first problem found is reported in the result.

    >>> validate_smiles("C(C")
    ValidationResult(valid=False, error='Unclosed branch')
"""

from __future__ import annotations

from dataclasses import dataclass

from smilesfrag.elements import (
    BRACKET_CLOSE,
    BRACKET_OPEN,
    BRANCH_CLOSE,
    BRANCH_OPEN,
    RING_MARKER_PREFIX,
)

UNCLOSED_BRACKET = "Unclosed bracket"
UNMATCHED_BRANCH_CLOSE = "Unmatched closing branch"
UNCLOSED_BRANCH = "Unclosed branch"
INVALID_RING_CLOSURE = "Invalid ring closure"


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of :func:`validate_smiles`.

    Attributes:
        valid: Whether the text passed every check.
        error: Description of the first problem, None when valid.
    """

    valid: bool
    error: str | None = None

    def __bool__(self) -> bool:
        return self.valid

    def to_object(self) -> dict[str, object]:
        if self.valid:
            return {"valid": True}
        return {"valid": False, "error": self.error}


def validate_smiles(smiles: str) -> ValidationResult:
    """Check bracket, branch and ring-number balance.

    Bracket atoms are skipped whole, so digits inside them (isotopes,
    hydrogen counts, charges) are not read as ring numbers. A ring number
    toggles open and closed, so ``C111`` leaves ring 1 open.

    Args:
        smiles: SMILES text. The empty string is valid.

    Returns:
        The result; ``error`` is one of ``"Unclosed bracket"``,
        ``"Unmatched closing branch"``, ``"Unclosed branch"`` or
        ``"Invalid ring closure"``.
    """
    depth = 0
    open_rings: set[str] = set()
    i = 0
    while i < len(smiles):
        char = smiles[i]
        if char == BRACKET_OPEN:
            end = smiles.find(BRACKET_CLOSE, i)
            if end == -1:
                return ValidationResult(False, UNCLOSED_BRACKET)
            i = end + 1
            continue

        if char == BRANCH_OPEN:
            depth += 1
        elif char == BRANCH_CLOSE:
            depth -= 1
            if depth < 0:
                return ValidationResult(False, UNMATCHED_BRANCH_CLOSE)
        elif char.isdigit() or (char == RING_MARKER_PREFIX and i + 2 < len(smiles)):
            number = char if char.isdigit() else smiles[i + 1:i + 3]
            open_rings.symmetric_difference_update({number})
            if char == RING_MARKER_PREFIX:
                i += 2
        i += 1

    if depth > 0:
        return ValidationResult(False, UNCLOSED_BRANCH)
    if open_rings:
        return ValidationResult(False, INVALID_RING_CLOSURE)
    return ValidationResult(True)
