import sys
from pathlib import Path

import pytest

# Ensure the `src` folder is on sys.path when running pytest so imports like
# `from core import ...` or `from features import ...` work without needing to
# install the package. This keeps tests consistent with running main.py.
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from data.generator import make_rng  # noqa: E402


@pytest.fixture
def rng():
    """Seeded random source so every test run sees the same series."""
    return make_rng(1234)
