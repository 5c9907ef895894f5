"""Shared fixtures for fstree unit tests."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from fstree.config import get_settings

# Bound at import so teardown is unaffected by tests that monkeypatch os.umask.
_os_umask = os.umask


@pytest.fixture(autouse=True)
def zero_umask():
    """Run every test with umask 0 so mode assertions are exact."""
    previous = _os_umask(0)
    yield
    _os_umask(previous)


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Isolate tests from FSTREE_* variables and any fstree.yaml in the cwd."""
    for key in list(os.environ):
        if key.startswith("FSTREE_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_tree():
    """Build a tree from a nested dict: str/bytes values are files, dicts are dirs."""

    def _build(root: Path, layout: dict) -> Path:
        root.mkdir(parents=True, exist_ok=True)
        for name, value in layout.items():
            target = root / name
            if isinstance(value, dict):
                _build(target, value)
            elif isinstance(value, bytes):
                target.write_bytes(value)
            else:
                target.write_text(value)
        return root

    return _build


@pytest.fixture
def sample_tree(tmp_path: Path, make_tree) -> Path:
    """
    src/
      a.txt
      b/
        c.txt
        d/
          e.txt
      f/
    """
    return make_tree(
        tmp_path / "src",
        {
            "a.txt": "alpha",
            "b": {"c.txt": "charlie", "d": {"e.txt": "echo"}},
            "f": {},
        },
    )
