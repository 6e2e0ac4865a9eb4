"""JSON snapshots of a tuple dictionary.

Document shape::

    {
      "hash_algorithm": "sha256",
      "data": {
        "values": {"<fingerprint>": <value>, ...},
        "keys":   {"<fingerprint>": <key as nested array>, ...}
      }
    }

Importing trusts the document: fingerprints are taken as stored and are not
recomputed from the restored keys. A snapshot produced by another algorithm
than the one it names, or edited by hand, loads without complaint and may
simply fail to match recomputed fingerprints afterwards. Sections and
fields the dictionary does not use, and keys whose fingerprint has no value,
are carried along and written back on export.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, TextIO

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from tupledict.exceptions import InvalidSnapshot
from tupledict.identity import (
    DetachedReference,
    RestoredIdentity,
    custom_identity,
    has_custom_identity,
    reference_token,
)
from tupledict.json_types import JSONObject, JSONValue
from tupledict.stable_encode import is_scalar
from tupledict.store import Entry, SnapshotPassthrough, TupleDictionary

logger = logging.getLogger(__name__)

IDENTITY_MARKER = "$identity"
REFERENCE_MARKER = "$ref"


class SnapshotData(BaseModel):
    model_config = ConfigDict(extra="allow")

    values: Dict[str, Any] = {}
    keys: Dict[str, Any] = {}


class SnapshotPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    hash_algorithm: str
    data: SnapshotData

    @field_validator("data", mode="before")
    @classmethod
    def _empty_list_is_empty_data(cls, value: object) -> object:
        # An empty table has been written as a bare JSON array.
        if isinstance(value, list) and not value:
            return {}
        return value


def encode_key(key: object) -> JSONValue:
    match key:
        case _ if is_scalar(key):
            return key  # type: ignore[return-value]
        case tuple() | list():
            return [encode_key(item) for item in key]
        case Mapping():
            return {str(name): encode_key(item) for name, item in key.items()}
        case DetachedReference(token=token):
            return {REFERENCE_MARKER: token}
        case _ if has_custom_identity(key):
            return {IDENTITY_MARKER: custom_identity(key)}
        case _:
            return {REFERENCE_MARKER: reference_token(key)}


def decode_key(value: object) -> object:
    match value:
        case list():
            return tuple(decode_key(item) for item in value)
        case {"$identity": str() as identity} if len(value) == 1:
            return RestoredIdentity(identity)
        case {"$ref": str() as token} if len(value) == 1:
            return DetachedReference(token)
        case Mapping():
            return {name: decode_key(item) for name, item in value.items()}
        case _:
            return value


def snapshot_payload(store: TupleDictionary) -> JSONObject:
    entries = store.entries()
    passthrough = store.passthrough
    keys: dict[str, object] = {
        entry.fingerprint: encode_key(entry.key)
        for entry in entries
        if entry.key is not None
    }
    keys.update(passthrough.orphan_keys)
    return SnapshotPayload(
        hash_algorithm=store.hash_algorithm,
        data=SnapshotData(
            values={entry.fingerprint: entry.value for entry in entries},
            keys=keys,
            **passthrough.data,
        ),
        **passthrough.document,
    ).model_dump()


def export_snapshot(store: TupleDictionary) -> str:
    """Serialize ``store``; values must be JSON-compatible."""
    text = json.dumps(snapshot_payload(store), sort_keys=False)
    logger.debug("exported %d entries (%s)", len(store), store.hash_algorithm)
    return text


def import_snapshot(text: str | bytes) -> TupleDictionary:
    """Build a new dictionary from snapshot text.

    Raises ``InvalidSnapshot`` when the text is not a JSON object carrying
    ``hash_algorithm`` and ``data``, and ``UnsupportedAlgorithm`` when the
    named algorithm is not available.
    """
    try:
        raw = json.loads(text)
    except (TypeError, ValueError) as exc:
        raise InvalidSnapshot(f"not valid JSON ({exc})") from exc
    if not isinstance(raw, Mapping):
        raise InvalidSnapshot("top-level document must be an object")
    for required in ("hash_algorithm", "data"):
        if raw.get(required) is None:
            raise InvalidSnapshot(f"missing {required!r}")
    try:
        payload = SnapshotPayload.model_validate(raw)
    except ValidationError as exc:
        raise InvalidSnapshot(str(exc)) from exc

    store = TupleDictionary(payload.hash_algorithm)
    values = payload.data.values
    keys = payload.data.keys
    store._restore(
        [
            Entry(
                fingerprint=fingerprint,
                key=decode_key(keys.get(fingerprint)),
                value=value,
            )
            for fingerprint, value in values.items()
        ],
        SnapshotPassthrough(
            orphan_keys={
                fingerprint: key
                for fingerprint, key in keys.items()
                if fingerprint not in values
            },
            data=dict(payload.data.model_extra or {}),
            document=dict(payload.model_extra or {}),
        ),
    )
    logger.debug("imported %d entries (%s)", len(store), store.hash_algorithm)
    return store


def dump_snapshot(store: TupleDictionary, fp: TextIO) -> None:
    fp.write(export_snapshot(store))


def load_snapshot(fp: TextIO) -> TupleDictionary:
    return import_snapshot(fp.read())


def write_snapshot(store: TupleDictionary, path: Path, *, encoding: str = "utf-8") -> None:
    path.write_text(export_snapshot(store) + "\n", encoding=encoding)


def read_snapshot(path: Path, *, encoding: str = "utf-8") -> TupleDictionary:
    try:
        text = path.read_text(encoding=encoding)
    except FileNotFoundError as exc:
        raise InvalidSnapshot(f"{path} does not exist") from exc
    except UnicodeError as exc:
        raise InvalidSnapshot(f"{path} is not {encoding} text") from exc
    return import_snapshot(text)
