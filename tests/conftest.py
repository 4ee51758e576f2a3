from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, List

import pytest

BASE_DIR = Path(__file__).resolve().parent.parent
SRC_DIR = (BASE_DIR / "src").resolve()

if str(BASE_DIR) not in sys.path:
    sys.path.append(str(BASE_DIR))
if str(SRC_DIR) not in sys.path:
    sys.path.append(str(SRC_DIR))


@pytest.fixture
def state():
    """A fresh engine state, isolated from DECOCALC_* environment variables."""
    from tests.support.harness import fresh_state

    return fresh_state()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("DECOCALC_MAX_DEPTH", "DECOCALC_EXTENSION_TIMEOUT", "DECOCALC_DEBUG_PY_TRACE"):
        monkeypatch.delenv(name, raising=False)


def pytest_collection_modifyitems(
    session: pytest.Session,
    config: pytest.Config,
    items: List[pytest.Item],
) -> None:
    """Fail fast if two scenarios end up sharing a node ID."""
    del session
    del config

    seen: Dict[str, int] = {}
    duplicates: List[str] = []
    for item in items:
        if item.nodeid in seen:
            duplicates.append(item.nodeid)
            continue
        seen[item.nodeid] = 1

    if duplicates:
        lines = "\n".join(f"- {nodeid}" for nodeid in sorted(set(duplicates)))
        raise pytest.UsageError(f"Duplicate pytest nodeids detected during collection:\n{lines}")
