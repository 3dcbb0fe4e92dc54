"""Shared fixtures: a controllable clock, in-memory and on-disk stores."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from lifesim.core.store import LifeStore


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> datetime:
        self.now += timedelta(**delta)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 3, 10, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def store(clock: FakeClock) -> LifeStore:
    return LifeStore.in_memory(clock)


@pytest.fixture
def disk_store(tmp_path: Path) -> LifeStore:
    """Initialized store under tmp_path/.life-sim."""
    return LifeStore.init(tmp_path)


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep global config and environment lookups away from the real user."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for var in ("OPENAI_API_KEY", "OPENAI_BASE_URL", "LIFE_SIM_MODEL", "LIFE_SIM_HOME"):
        monkeypatch.delenv(var, raising=False)
    return home
