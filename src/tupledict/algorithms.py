from __future__ import annotations

import hashlib
from functools import lru_cache

from tupledict.exceptions import UnsupportedAlgorithm

# Variable-length digests need an explicit size and cannot produce a fixed
# fingerprint from hexdigest() alone.
_VARIABLE_LENGTH_PREFIXES: tuple[str, ...] = ("shake_",)


@lru_cache(maxsize=1)
def supported_algorithms() -> tuple[str, ...]:
    names = {
        name.lower()
        for name in hashlib.algorithms_available
        if not name.lower().startswith(_VARIABLE_LENGTH_PREFIXES)
    }
    usable: list[str] = []
    for name in sorted(names):
        try:
            hashlib.new(name)
        except ValueError:
            # Advertised by OpenSSL but disabled in this build.
            continue
        usable.append(name)
    return tuple(usable)


def is_supported(name: object) -> bool:
    return isinstance(name, str) and name.strip().lower() in supported_algorithms()


def resolve_algorithm(name: object) -> str:
    """Return the canonical registry name for ``name`` (case-insensitive)."""
    if not is_supported(name):
        raise UnsupportedAlgorithm(name)
    return str(name).strip().lower()


def digest_text(algorithm: str, text: str) -> str:
    return hashlib.new(algorithm, text.encode("utf-8")).hexdigest()
