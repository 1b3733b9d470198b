from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

for path in (ROOT, SRC):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from loft.config import BuildConfig  # noqa: E402
from tests.helpers import two_panel_pattern  # noqa: E402


@pytest.fixture()
def config() -> BuildConfig:
    return BuildConfig(offsets_mm=(-80.0, 0.0, 80.0), theta_start_rad=0.0, scale=1.0, panel_subdiv=4)


@pytest.fixture()
def two_panels():
    return two_panel_pattern()
