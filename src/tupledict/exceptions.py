"""Error taxonomy for tuple dictionaries."""

from __future__ import annotations


class TupleDictError(Exception):
    """Base class for every failure raised by tupledict."""


class InvalidKey(TupleDictError, ValueError):
    """A key operation received an absent (``None``) key."""

    def __init__(self, message: str = "A valid key has not been provided"):
        super().__init__(message)


class UnsupportedAlgorithm(TupleDictError, ValueError):
    """The requested digest algorithm is not in the supported registry."""

    def __init__(self, algorithm: object):
        super().__init__(f"unsupported hash algorithm: {algorithm!r}")
        self.algorithm = algorithm


class InvalidSnapshot(TupleDictError, ValueError):
    """A snapshot document is missing required fields or cannot be parsed."""

    def __init__(self, reason: str):
        super().__init__(f"invalid snapshot: {reason}")
        self.reason = reason
