import importlib
import sys
import textwrap
from pathlib import Path

import pytest


@pytest.fixture
def write_source(tmp_path):
    """Write dedented source text to a file under tmp_path and return its path."""
    def _write(name: str, source: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(source))
        return path

    return _write


@pytest.fixture
def importable(tmp_path, monkeypatch):
    """Write a module under tmp_path and make it importable for one test."""
    monkeypatch.syspath_prepend(str(tmp_path))

    def _write(module_name: str, source: str) -> Path:
        path = tmp_path / f"{module_name}.py"
        path.write_text(textwrap.dedent(source))
        importlib.invalidate_caches()
        return path

    yield _write

    for name in list(sys.modules):
        module = sys.modules[name]
        if str(getattr(module, "__file__", "") or "").startswith(str(tmp_path)):
            del sys.modules[name]
