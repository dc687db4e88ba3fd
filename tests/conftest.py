"""Pytest configuration for IssueScope tests.

Ensures the in-repo `src` directory is on `sys.path` so the package can be
imported without an editable install (`pip install -e .`).
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# Keep developer machines from leaking real credentials or retry settings into tests
for _var in ("ISSUESCOPE_RETRY_ATTEMPTS", "ISSUESCOPE_RETRY_BASE", "ISSUESCOPE_RETRY_MAX_SLEEP"):
    os.environ.pop(_var, None)


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run every test from an empty directory so stray config / .env files are never read."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture(autouse=True)
def _fresh_logger(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop the process-wide logger so each test binds a handler to its own captured stderr."""
    monkeypatch.setattr("issuescope.logging._GLOBAL", None)
