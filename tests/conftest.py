from __future__ import annotations

import pytest

from rundap.config import reset_config


@pytest.fixture(autouse=True)
def _reset_runner_config():
    """Every test starts from, and leaves behind, the default RunnerConfig."""
    reset_config()
    yield
    reset_config()
