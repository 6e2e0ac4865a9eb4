from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
for entry in (ROOT / "src", ROOT):
    if str(entry) not in sys.path:
        sys.path.insert(0, str(entry))


import pytest

from tupledict.store import TupleDictionary
from tests.key_helpers import Handle


@pytest.fixture
def store() -> TupleDictionary:
    return TupleDictionary("sha256")


@pytest.fixture
def handles() -> tuple[Handle, Handle]:
    return Handle("a"), Handle("b")
