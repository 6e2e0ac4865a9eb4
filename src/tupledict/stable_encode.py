from __future__ import annotations

import json
from collections.abc import Sequence


def stable_compact_text(
    value: object,
    *,
    ensure_ascii: bool = True,
) -> str:
    """Deterministic compact JSON text for hash material.

    - No whitespace between tokens.
    - Sequence order is preserved; tuple/list normalize to JSON lists.
    - Only JSON scalars and sequences of them are accepted.
    """
    return json.dumps(
        stable_json_value(value, source="stable_encode.stable_compact_text"),
        separators=(",", ":"),
        sort_keys=False,
        ensure_ascii=ensure_ascii,
        allow_nan=True,
    )


def stable_json_value(value: object, *, source: str) -> object:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, (tuple, list)):
        return [
            stable_json_value(item, source=f"{source}.item")
            for item in value
        ]
    raise TypeError(
        "stable_json_value does not support value type "
        f"{type(value).__name__} at {source}"
    )


def canonical_scalar_text(value: object) -> str:
    """Canonical text of a scalar key element.

    Strings are quoted, so ``"1"``, ``1``, ``1.0`` and ``True`` all differ.
    """
    return stable_compact_text(value, ensure_ascii=False)


def canonical_fingerprint_list(fingerprints: Sequence[str]) -> str:
    return stable_compact_text(list(fingerprints))


def is_scalar(value: object) -> bool:
    return value is None or isinstance(value, (str, int, float, bool))
