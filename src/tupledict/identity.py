"""Identity handling for object references embedded in keys.

An object takes part in a key either through a caller-supplied identity
string (anything with an ``identity()`` method) or through its reference
identity, which is only meaningful while that exact object is alive.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class HasIdentity(Protocol):
    def identity(self) -> str: ...


def reference_token(obj: object) -> str:
    return f"{type(obj).__qualname__}@{id(obj):x}"


def has_custom_identity(obj: object) -> bool:
    """True when ``obj`` offers a bound ``identity()`` accessor.

    Classes and objects whose ``identity`` is plain data fall back to
    reference identity.
    """
    if isinstance(obj, type):
        return False
    return callable(getattr(obj, "identity", None))


def custom_identity(obj: HasIdentity) -> str:
    value = obj.identity()
    if not isinstance(value, str):
        raise TypeError(
            f"{type(obj).__qualname__}.identity() must return str, "
            f"got {type(value).__name__}"
        )
    return value


def identity_text(obj: object) -> str:
    if has_custom_identity(obj):
        return custom_identity(obj)
    return reference_token(obj)


@dataclass(frozen=True)
class RestoredIdentity:
    """Stand-in for a custom-identity object read back from a snapshot."""

    value: str

    def identity(self) -> str:
        return self.value


@dataclass(frozen=True, eq=False)
class DetachedReference:
    """Stand-in for a reference-identity object read back from a snapshot.

    The original object is gone, so the placeholder only carries the token it
    had; it is itself fingerprinted by its own reference identity.
    """

    token: str
