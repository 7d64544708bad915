from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, List, Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
for path in (SRC, ROOT):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))


Record = Dict[str, Optional[str]]


@pytest.fixture
def records() -> List[Record]:
    """Small dataset covering every field used by the exclusion property tests."""

    statuses = ["ACTIVE", "DELETED", None]
    types = ["A", "B", "C"]
    names = ["alice", "bob", None]
    ages = ["17", "30", "65"]
    rows: List[Record] = []
    for status in statuses:
        for type_ in types:
            for name in names:
                for age in ages:
                    rows.append({"status": status, "type": type_, "name": name, "age": age})
    return rows
