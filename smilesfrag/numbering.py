"""
Ring-number arbitration.

When one fragment is composed into another, a ring number used by both
would close the host's ring inside the guest. The guest's clashing
numbers are moved to the lowest numbers neither side uses.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Collection, Iterable, Mapping

from .elements import MAX_RING_NUMBER, MAX_SINGLE_DIGIT_RING, RING_MARKER_PREFIX
from .exceptions import RingError
from .tokenizer import Token, TokenType, detokenize, tokenize
from .types import FusedRing, Fragment, Linear, Molecule, RawFragment, Ring

logger = logging.getLogger(__name__)


def format_ring_number(number: int) -> str:
    """Ring marker text: a bare digit up to 9, ``%NN`` above.

    Example:
        >>> format_ring_number(3), format_ring_number(12)
        ('3', '%12')
    """
    if number <= MAX_SINGLE_DIGIT_RING:
        return str(number)
    return f"{RING_MARKER_PREFIX}{number:02d}"


def get_next_ring_number(used: Collection[int]) -> int:
    """Lowest positive ring number not in used.

    Raises:
        RingError: If every number up to 99 is taken.
    """
    for number in range(1, MAX_RING_NUMBER + 1):
        if number not in used:
            return number
    raise RingError(f"No ring numbers left (all of 1..{MAX_RING_NUMBER} in use)")


def find_used_ring_numbers(smiles: str) -> set[int]:
    """Ring numbers written in a SMILES string.

    Digits inside bracket atoms are not ring markers and are ignored.
    """
    return {
        token.ring_number
        for token in tokenize(smiles)
        if token.type is TokenType.RING_MARKER
    }


def rewrite_ring_numbers(smiles: str, mapping: Mapping[int, int]) -> str:
    """Rewrite the ring markers of a SMILES string through mapping."""
    if not mapping:
        return smiles
    tokens: list[Token] = []
    for token in tokenize(smiles):
        if token.type is TokenType.RING_MARKER and token.ring_number in mapping:
            number = mapping[token.ring_number]
            token = dataclasses.replace(
                token, value=format_ring_number(number), ring_number=number
            )
        tokens.append(token)
    return detokenize(tokens)


def plan_renumbering(
    host_numbers: Collection[int],
    guest_numbers: Iterable[int],
) -> dict[int, int]:
    """Map each guest number that clashes with the host to a free number."""
    guest = sorted(set(guest_numbers))
    used = set(host_numbers) | set(guest)
    mapping: dict[int, int] = {}
    for number in guest:
        if number in host_numbers:
            replacement = get_next_ring_number(used)
            used.add(replacement)
            mapping[number] = replacement
    return mapping


def remap_ring_numbers(
    host_smiles: str,
    sub_smiles: str,
    reserved: Iterable[int] = (),
) -> str:
    """Rewrite sub_smiles so it shares no ring number with host_smiles.

    Args:
        host_smiles: Text the substituent is inserted into.
        sub_smiles: Substituent text.
        reserved: Extra numbers the host claims even if not written.

    Returns:
        The substituent text with clashing ring numbers replaced.
    """
    host = find_used_ring_numbers(host_smiles) | set(reserved)
    mapping = plan_renumbering(host, find_used_ring_numbers(sub_smiles))
    if mapping:
        logger.debug("Remapping substituent ring numbers %s", mapping)
    return rewrite_ring_numbers(sub_smiles, mapping)


def ring_numbers_in(fragment: Fragment) -> set[int]:
    """All ring numbers a fragment writes, nested attachments included."""
    numbers: set[int] = set()
    stack = [fragment]
    while stack:
        node = stack.pop()
        if isinstance(node, Ring):
            numbers.add(node.ring_number)
            stack.extend(_attached(node.attachments))
        elif isinstance(node, Linear):
            stack.extend(_attached(node.attachments))
        elif isinstance(node, FusedRing):
            stack.extend(node.rings)
        elif isinstance(node, Molecule):
            stack.extend(node.components)
        else:
            numbers |= find_used_ring_numbers(node.smiles)
    return numbers


def _attached(attachments: Mapping[int, tuple[Fragment, ...]]) -> list[Fragment]:
    return [sub for subs in attachments.values() for sub in subs]


def _renumber_attachments(
    attachments: Mapping[int, tuple[Fragment, ...]],
    mapping: Mapping[int, int],
) -> dict[int, tuple[Fragment, ...]]:
    return {
        pos: tuple(renumber_fragment(sub, mapping) for sub in subs)
        for pos, subs in attachments.items()
    }


def renumber_fragment(fragment: Fragment, mapping: Mapping[int, int]) -> Fragment:
    """Rewrite ring numbers throughout a fragment tree.

    Args:
        fragment: Fragment to rewrite.
        mapping: Old ring number to new ring number. Numbers not in the
            mapping are left alone.

    Returns:
        A new fragment; the input is unchanged. Raw text, including the
        text of builder objects that only exist as SMILES, comes back as a
        :class:`RawFragment`.
    """
    if not mapping:
        return fragment

    if isinstance(fragment, Ring):
        return dataclasses.replace(
            fragment,
            ring_number=mapping.get(fragment.ring_number, fragment.ring_number),
            attachments=_renumber_attachments(fragment.attachments, mapping),
        )

    if isinstance(fragment, Linear):
        return dataclasses.replace(
            fragment,
            attachments=_renumber_attachments(fragment.attachments, mapping),
        )

    if isinstance(fragment, FusedRing):
        rings = tuple(renumber_fragment(ring, mapping) for ring in fragment.rings)
        return dataclasses.replace(fragment, rings=rings)

    if isinstance(fragment, Molecule):
        return dataclasses.replace(
            fragment,
            components=tuple(renumber_fragment(c, mapping) for c in fragment.components),
        )

    text = rewrite_ring_numbers(fragment.smiles, mapping)
    if isinstance(fragment, RawFragment):
        return dataclasses.replace(fragment, smiles=text)
    return RawFragment(text, leading_bond=fragment.leading_bond, is_sibling=fragment.is_sibling)


def resolve_ring_conflicts(
    host: Fragment,
    guest: Fragment,
    reserved: Iterable[int] = (),
) -> Fragment:
    """Renumber guest so it shares no ring number with host.

    Args:
        host: Fragment the guest is composed into.
        guest: Incoming fragment.
        reserved: Extra numbers the host claims.

    Returns:
        guest itself if nothing clashes, otherwise a renumbered copy.

    Example:
        >>> benzene = Ring("c", 6)
        >>> benzene.attach(benzene, 1).smiles
        'c1(c2ccccc2)ccccc1'
    """
    host_numbers = ring_numbers_in(host) | set(reserved)
    mapping = plan_renumbering(host_numbers, ring_numbers_in(guest))
    if not mapping:
        return guest
    logger.debug("Renumbering guest rings %s", mapping)
    return renumber_fragment(guest, mapping)
