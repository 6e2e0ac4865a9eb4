from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from tupledict.algorithms import resolve_algorithm
from tupledict.fingerprint import (
    DEFAULT_ALGORITHM,
    KeyFingerprint,
    fingerprint_key,
    freeze_key,
    normalize_key,
)

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass(frozen=True)
class Entry:
    fingerprint: str
    key: object
    value: object


@dataclass
class SnapshotPassthrough:
    """Snapshot content the dictionary does not interpret but writes back.

    ``orphan_keys`` holds encoded keys whose fingerprint has no value;
    ``data`` and ``document`` hold unknown sections and top-level fields.
    """

    orphan_keys: dict[str, object] = field(default_factory=dict)
    data: dict[str, object] = field(default_factory=dict)
    document: dict[str, object] = field(default_factory=dict)


class TupleDictionary:
    """Lookup table keyed by the structural fingerprint of composite keys.

    Keys may mix scalars, nested sequences or mappings, and object
    references. Two keys address the same entry when their shape, scalar
    values and object identities match position by position.

    Values are returned by reference: ``get`` hands back the stored object,
    so mutating a mutable value is visible on later lookups.

    The dictionary is not thread-safe; callers sharing one instance across
    threads must serialize access themselves.
    """

    def __init__(self, hash_algorithm: str = DEFAULT_ALGORITHM):
        self._hash_algorithm = resolve_algorithm(hash_algorithm)
        self._entries: dict[str, Entry] = {}
        self._passthrough = SnapshotPassthrough()

    @classmethod
    def from_config(
        cls,
        root: Path | None = None,
        config_path: Path | None = None,
    ) -> TupleDictionary:
        from tupledict.config import configured_hash_algorithm

        return cls(configured_hash_algorithm(root=root, config_path=config_path))

    @classmethod
    def from_json(cls, text: str) -> TupleDictionary:
        from tupledict.snapshot import import_snapshot

        return import_snapshot(text)

    def to_json(self) -> str:
        from tupledict.snapshot import export_snapshot

        return export_snapshot(self)

    @property
    def hash_algorithm(self) -> str:
        return self._hash_algorithm

    def fingerprint_key(self, key: object) -> KeyFingerprint:
        return fingerprint_key(key, algorithm=self._hash_algorithm)

    def fingerprint(self, key: object) -> str:
        return self.fingerprint_key(key).fingerprint

    def insert(self, key: object, value: object) -> KeyFingerprint:
        """Add or replace the value stored for ``key``.

        Returns the combined fingerprint together with the per-element
        fingerprints, which callers can keep for ``get_by_fingerprint``.
        """
        normalized = normalize_key(key)
        result = self.fingerprint_key(normalized)
        previous = self._entries.get(result.fingerprint)
        self._passthrough.orphan_keys.pop(result.fingerprint, None)
        self._entries[result.fingerprint] = Entry(
            fingerprint=result.fingerprint,
            key=freeze_key(normalized),
            value=value,
        )
        logger.debug(
            "%s %s",
            "replaced" if previous is not None else "inserted",
            result.fingerprint,
        )
        return result

    add_value = insert

    def contains(self, key: object) -> bool:
        return self.fingerprint(key) in self._entries

    exists = contains

    def get(self, key: object, default: object = None) -> object:
        return self.get_by_fingerprint(self.fingerprint(key), default)

    def get_by_fingerprint(self, fingerprint: str, default: object = None) -> object:
        entry = self._entries.get(fingerprint)
        if entry is None:
            return default
        return entry.value

    def delete(self, key: object) -> bool:
        fingerprint = self.fingerprint(key)
        if self._entries.pop(fingerprint, _MISSING) is _MISSING:
            return False
        logger.debug("deleted %s", fingerprint)
        return True

    def keys(self) -> list[object]:
        # Entries restored from a snapshot without a key have key None.
        return [entry.key for entry in self._entries.values() if entry.key is not None]

    def entries(self) -> list[Entry]:
        return list(self._entries.values())

    @property
    def passthrough(self) -> SnapshotPassthrough:
        return self._passthrough

    def _restore(
        self,
        entries: list[Entry],
        passthrough: SnapshotPassthrough | None = None,
    ) -> None:
        self._entries = {entry.fingerprint: entry for entry in entries}
        self._passthrough = passthrough or SnapshotPassthrough()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return self.contains(key)

    def __iter__(self) -> Iterator[object]:
        return iter(self.keys())

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(hash_algorithm={self._hash_algorithm!r}, "
            f"entries={len(self._entries)})"
        )
