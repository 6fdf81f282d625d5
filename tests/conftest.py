"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


# Ensure src is in path
@pytest.fixture(scope="session", autouse=True)
def setup_path():
    project_root = Path(__file__).resolve().parents[0].parent
    src_dir = project_root / "src"
    if str(src_dir) not in sys.path:
        sys.path.insert(0, str(src_dir))


@pytest.fixture(scope="session")
def load_plugins():
    """Load all builtin payload decoders once per test session."""
    from hcidissect.core.plugins import load_builtin_plugins
    load_builtin_plugins()


@pytest.fixture
def session():
    """Fresh decoder session (empty channel table)."""
    from hcidissect.core.session import new_session

    return new_session()
