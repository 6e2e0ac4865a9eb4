"""Dictionaries keyed by composite tuples."""

from tupledict.exceptions import (
    InvalidKey,
    InvalidSnapshot,
    TupleDictError,
    UnsupportedAlgorithm,
)
from tupledict.fingerprint import KeyFingerprint, fingerprint_element, fingerprint_key
from tupledict.identity import HasIdentity
from tupledict.snapshot import export_snapshot, import_snapshot
from tupledict.store import Entry, TupleDictionary

__all__ = [
    "__version__",
    "Entry",
    "HasIdentity",
    "InvalidKey",
    "InvalidSnapshot",
    "KeyFingerprint",
    "TupleDictError",
    "TupleDictionary",
    "UnsupportedAlgorithm",
    "export_snapshot",
    "fingerprint_element",
    "fingerprint_key",
    "import_snapshot",
]

__version__ = "0.1.0"
