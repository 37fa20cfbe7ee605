"""
Repeat a fragment end to end.

    >>> Repeat("CCO", 3).smiles
    'CCOCCOCCO'
"""

from __future__ import annotations

from smilesfrag.exceptions import UsageError
from smilesfrag.parser import parse
from smilesfrag.types import Fragment, FragmentLike


def repeat(fragment: FragmentLike, count: int) -> Fragment:
    """Write fragment count times in a row and parse the result.

    Each copy bonds to the next through the last atom written and the first
    atom of the following copy. Ring numbers are reused, which is valid
    because every copy closes its rings before the next one starts.

    Args:
        fragment: Unit to repeat, as a fragment or SMILES text.
        count: Number of copies, at least 1.

    Returns:
        The parsed fragment of the repeated text.

    Raises:
        UsageError: If count is not a positive integer.
        ParseError: If the repeated text does not parse.
    """
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise UsageError(f"Repeat count must be a positive integer, got {count!r}")
    smiles = fragment.smiles if isinstance(fragment, Fragment) else str(fragment)
    return parse(smiles * count)


# Builder-style spelling, next to Ring, Linear and FusedRing
Repeat = repeat
