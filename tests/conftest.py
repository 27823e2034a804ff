from __future__ import annotations

import sys
from decimal import Decimal
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = REPO_ROOT / "src"

if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))


@pytest.fixture(autouse=True)
def _rate_limit_off(settings):
    from apps.core.security.rate_limit import get_rate_limiter

    settings.RATE_LIMIT_ENABLED = False
    settings.ATOMIC_DONATION_WRITES = False
    get_rate_limiter.cache_clear()
    yield
    get_rate_limiter.cache_clear()


@pytest.fixture()
def store():
    from apps.donations.store import EntityStore

    return EntityStore()


@pytest.fixture()
def make_project(store):
    def _make(title: str = "Clean Water Initiative", goal: str = "10000.00", current: str = "0.00"):
        project = store.create_project(
            title=title,
            description=f"{title} description",
            goal_amount=Decimal(goal),
        )
        if Decimal(current):
            project = store.set_project_amount(project.pk, Decimal(current))
        return project

    return _make
