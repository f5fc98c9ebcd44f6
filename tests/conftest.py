from __future__ import annotations

import sys
from pathlib import Path

import pytest

_START = Path(__file__).resolve().parent
_repo_root = _START
while _repo_root != _repo_root.parent and not (_repo_root / "healthviz" / "__init__.py").exists():
    _repo_root = _repo_root.parent

sys.path.insert(0, str(_repo_root))


@pytest.fixture(autouse=True)
def _fresh_tooltip_surface():
    """Each test starts and ends without a shared tooltip instance."""
    from healthviz import chart_tooltip

    yield
    instance = chart_tooltip._INSTANCE
    if instance is not None:
        chart_tooltip._teardown(instance)
