"""
Test configuration - ensures repo root is in sys.path and provides shared layouts.

This allows tests to import from top-level packages (eqbal, api, cli).
"""

import sys
from pathlib import Path

import pytest

# Add repo root to sys.path so tests can import eqbal.*, api.*, cli.*
REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from eqbal.models import Event  # noqa: E402

WINDLANCE = Event("cast windlance", req=("eq", "bal"), consumes=("eq",), duration=1.5)
DRINK_HEALTH = Event("drink health", req=("pill",), consumes=("pill",), duration=0.5)

BALANCES = ["eq", "bal", "pill", "salve", "pipe"]


@pytest.fixture
def events():
    """The two stock events: windlance on eq/bal and a health pill."""
    return [WINDLANCE, DRINK_HEALTH]


@pytest.fixture
def windlance():
    return WINDLANCE


@pytest.fixture
def layout_dict():
    """A layout in its JSON/dict form, windlance consuming eq over [1.0, 2.5)."""
    return {
        "balances": list(BALANCES),
        "events": [WINDLANCE.to_dict(), DRINK_HEALTH.to_dict()],
        "eventValues": {"cast windlance": 1.0, "drink health": 2.0},
        "timePeriod": 5,
    }
