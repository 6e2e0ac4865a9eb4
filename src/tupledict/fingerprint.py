"""Structural fingerprints for composite keys.

A composite key is an ordered sequence (``tuple``/``list``) or a mapping whose
elements are scalars, nested composite keys or object references. Every
element is hashed together with its position; nested keys contribute their
own combined fingerprint. The combined fingerprint of a key is the digest of
the ordered list of distinct element fingerprints.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

from tupledict.algorithms import digest_text, resolve_algorithm
from tupledict.exceptions import InvalidKey
from tupledict.identity import identity_text
from tupledict.stable_encode import (
    canonical_fingerprint_list,
    canonical_scalar_text,
    is_scalar,
)

DEFAULT_ALGORITHM = "sha256"


@dataclass(frozen=True, eq=True, unsafe_hash=False)
class KeyFingerprint:
    fingerprint: str
    element_hashes: dict[str, object] = field(default_factory=dict)

    # Unhashable: element_hashes is a dict. Use .fingerprint as a hash key.
    __hash__ = None  # type: ignore[assignment]

    def __iter__(self) -> Iterator[object]:
        yield self.fingerprint
        yield self.element_hashes


def is_composite(value: object) -> bool:
    return isinstance(value, (tuple, list, Mapping))


def normalize_key(key: object) -> tuple | list | Mapping:
    """Validate a top-level key and wrap bare elements in a one-tuple."""
    if key is None:
        raise InvalidKey()
    if is_composite(key):
        return key  # type: ignore[return-value]
    return (key,)


def freeze_key(key: object) -> object:
    """Copy key structure so later caller mutations cannot alter it.

    Object references are kept as-is; the store does not own them.
    """
    match key:
        case tuple() | list():
            return tuple(freeze_key(item) for item in key)
        case Mapping():
            return {name: freeze_key(item) for name, item in key.items()}
        case _:
            return key


def iter_positions(elements: tuple | list | Mapping) -> Iterator[tuple[object, object]]:
    if isinstance(elements, Mapping):
        yield from elements.items()
    else:
        yield from enumerate(elements)


def fingerprint_element(
    element: object,
    position: object,
    *,
    algorithm: str = DEFAULT_ALGORITHM,
) -> str:
    """Fingerprint one non-composite key element at ``position``."""
    if is_scalar(element):
        material = canonical_scalar_text(element)
    else:
        material = identity_text(element)
    return digest_text(algorithm, f"{material}{position}")


def fingerprint_key(
    elements: object,
    *,
    algorithm: str = DEFAULT_ALGORITHM,
) -> KeyFingerprint:
    algorithm = resolve_algorithm(algorithm)
    return _combine(normalize_key(elements), algorithm=algorithm)


def _combine(elements: tuple | list | Mapping, *, algorithm: str) -> KeyFingerprint:
    element_hashes: dict[str, object] = {}
    for position, element in iter_positions(elements):
        if is_composite(element):
            # Nested keys use their combined fingerprint without the position.
            element_hash = _combine(element, algorithm=algorithm).fingerprint  # type: ignore[arg-type]
        else:
            element_hash = fingerprint_element(element, position, algorithm=algorithm)
        # A repeated fingerprint keeps its first slot; the element is replaced.
        element_hashes[element_hash] = element
    return KeyFingerprint(
        fingerprint=digest_text(algorithm, canonical_fingerprint_list(list(element_hashes))),
        element_hashes=element_hashes,
    )
