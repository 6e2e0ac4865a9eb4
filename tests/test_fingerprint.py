from __future__ import annotations

import hashlib
import json
import random

import pytest

from tupledict.exceptions import InvalidKey, UnsupportedAlgorithm
from tupledict.fingerprint import (
    KeyFingerprint,
    fingerprint_element,
    fingerprint_key,
    freeze_key,
    normalize_key,
)
from tupledict.identity import reference_token
from tests.key_helpers import Handle, Named


def _sha256(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def test_scalar_element_hashes_canonical_text_and_position() -> None:
    assert fingerprint_element("x", 4) == _sha256('"x"4')
    assert fingerprint_element(None, 0) == _sha256("null0")
    assert fingerprint_element(True, 1) == _sha256("true1")
    assert fingerprint_element(12, 0) == _sha256("120")
    assert fingerprint_element(1.5, "w") == _sha256("1.5w")


def test_scalar_types_do_not_alias() -> None:
    fingerprints = {
        fingerprint_element(value, 0)
        for value in (1, "1", True, 1.0, None, "null")
    }
    assert len(fingerprints) == 6


def test_identity_elements_use_custom_identity_or_reference_token() -> None:
    named = Named("n")
    handle = Handle()
    assert fingerprint_element(named, 2) == _sha256("named:n2")
    assert fingerprint_element(handle, 2) == _sha256(reference_token(handle) + "2")


def test_custom_identity_must_be_text() -> None:
    class BadIdentity:
        def identity(self) -> int:
            return 5

    with pytest.raises(TypeError):
        fingerprint_element(BadIdentity(), 0)


def test_element_position_concatenation_can_collide() -> None:
    # Position text is appended without a separator.
    assert fingerprint_element(1, 12) == fingerprint_element(11, 2)


def test_fingerprint_key_combines_distinct_element_hashes() -> None:
    result = fingerprint_key(["a", 2])
    first = fingerprint_element("a", 0)
    second = fingerprint_element(2, 1)
    assert result.fingerprint == _sha256(json.dumps([first, second], separators=(",", ":")))
    assert result.element_hashes == {first: "a", second: 2}
    fingerprint, element_hashes = result
    assert fingerprint == result.fingerprint
    assert element_hashes is result.element_hashes


def test_empty_key_is_well_defined() -> None:
    assert fingerprint_key([]).fingerprint == _sha256("[]")
    assert fingerprint_key(()).element_hashes == {}


def test_absent_key_is_rejected() -> None:
    with pytest.raises(InvalidKey):
        fingerprint_key(None)


def test_bare_element_is_a_one_element_key() -> None:
    assert fingerprint_key("x") == fingerprint_key(["x"])
    assert fingerprint_key(7).fingerprint == fingerprint_key((7,)).fingerprint
    assert normalize_key("x") == ("x",)
    assert normalize_key([1]) == [1]


def test_tuple_and_list_keys_are_equivalent() -> None:
    assert fingerprint_key((1, (2, 3))).fingerprint == fingerprint_key([1, [2, 3]]).fingerprint


def test_determinism_across_independently_built_keys() -> None:
    shared = Handle()
    first = fingerprint_key([shared, {"tick": Named("x")}, None, [1.5, "y"]])
    second = fingerprint_key([shared, {"tick": Named("x")}, None, [1.5, "y"]])
    assert first.fingerprint == second.fingerprint


def test_distinct_instances_without_identity_are_different_keys() -> None:
    assert fingerprint_key([Handle("same")]).fingerprint != fingerprint_key([Handle("same")]).fingerprint
    assert fingerprint_key([Named("same")]).fingerprint == fingerprint_key([Named("same")]).fingerprint


def test_nested_mapping_position_is_its_field_name() -> None:
    obj = Handle()
    tick = fingerprint_key([{"tick": obj}]).fingerprint
    tock = fingerprint_key([{"tock": obj}]).fingerprint
    assert tick != tock


def test_nesting_depth_changes_fingerprint() -> None:
    flat = fingerprint_key([1, 2]).fingerprint
    nested = fingerprint_key([[1, 2]]).fingerprint
    deeper = fingerprint_key([[[1, 2]]]).fingerprint
    assert len({flat, nested, deeper}) == 3


def test_nested_key_fingerprint_ignores_its_position() -> None:
    inner = fingerprint_key([1]).fingerprint
    result = fingerprint_key(["a", [1]])
    assert inner in result.element_hashes
    assert list(result.element_hashes) == [fingerprint_element("a", 0), inner]


def test_repeated_element_fingerprints_collapse_to_first_slot() -> None:
    assert fingerprint_key([[1], [1]]).fingerprint == fingerprint_key([[1]]).fingerprint
    result = fingerprint_key([[1], "z", (1,)])
    inner = fingerprint_key([1]).fingerprint
    assert list(result.element_hashes) == [inner, fingerprint_element("z", 1)]
    # The later element replaces the earlier one in place.
    assert result.element_hashes[inner] == (1,)


def test_swapping_distinct_elements_changes_fingerprint() -> None:
    rng = random.Random(20240611)
    for _ in range(200):
        size = rng.randint(2, 8)
        values = rng.sample(range(1000), size)
        shuffled = list(values)
        while shuffled == values:
            rng.shuffle(shuffled)
        assert fingerprint_key(values).fingerprint != fingerprint_key(shuffled).fingerprint


def test_algorithm_selection() -> None:
    md5 = fingerprint_key(["x"], algorithm="MD5")
    assert len(md5.fingerprint) == 32
    assert md5.fingerprint != fingerprint_key(["x"]).fingerprint
    with pytest.raises(UnsupportedAlgorithm):
        fingerprint_key(["x"], algorithm="nope")


def test_freeze_key_copies_structure_but_not_objects() -> None:
    obj = Handle()
    source = [obj, [1, 2], {"k": [3]}]
    frozen = freeze_key(source)
    source[1].append(9)
    source[2]["k"].append(4)
    assert frozen == (obj, (1, 2), {"k": (3,)})
    assert frozen[0] is obj


def test_key_fingerprint_is_frozen() -> None:
    result = KeyFingerprint(fingerprint="f")
    with pytest.raises(AttributeError):
        result.fingerprint = "g"  # type: ignore[misc]


def test_classes_and_identity_data_attributes_use_reference_identity() -> None:
    class Tagged:
        identity = "tag-1"

    tagged = Tagged()
    assert fingerprint_element(Named, 0) == _sha256(reference_token(Named) + "0")
    assert fingerprint_element(tagged, 0) == _sha256(reference_token(tagged) + "0")
    assert fingerprint_key([Named, 1]).fingerprint == fingerprint_key([Named, 1]).fingerprint
    assert fingerprint_key([Tagged()]).fingerprint != fingerprint_key([Tagged()]).fingerprint


def test_key_fingerprint_is_not_hashable() -> None:
    result = fingerprint_key(["x"])
    with pytest.raises(TypeError):
        hash(result)
    assert {result.fingerprint: result}[result.fingerprint] is result
