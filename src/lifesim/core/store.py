"""LifeStore: the .life-sim/ data directory and everything wired on top of it."""

from __future__ import annotations

from pathlib import Path

from lifesim.core.focus import FocusTracker
from lifesim.core.repositories import Clock, GoalRepository, SessionRepository, TaskRepository
from lifesim.core.schema import TodayStats, _now
from lifesim.core.sessions import SessionEngine
from lifesim.core.storage import (
    Collection,
    FileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
    StoreError,
)
from lifesim.utils.paths import STORE_DIR


class LifeStore:
    """Repositories, session engine and focus workflow over one key-value store."""

    def __init__(self, kv: KeyValueStore, clock: Clock = _now) -> None:
        self.kv = kv
        self.clock = clock
        self.goals = GoalRepository(kv, clock)
        self.tasks = TaskRepository(kv, clock)
        self.sessions = SessionRepository(kv, clock)
        self.engine = SessionEngine(self.sessions, clock)
        self.focus = FocusTracker(self.tasks, self.engine)

    @classmethod
    def in_memory(cls, clock: Clock = _now) -> LifeStore:
        return cls(MemoryKeyValueStore(), clock)

    @classmethod
    def at(cls, root: Path, clock: Clock = _now) -> LifeStore:
        """Open the store under ``root/.life-sim``. It must already exist."""
        store_dir = root.resolve() / STORE_DIR
        if not store_dir.is_dir():
            raise StoreError("Life-sim store not initialized. Run `life-sim init` first.")
        return cls(FileKeyValueStore(store_dir), clock)

    @classmethod
    def init(cls, root: Path) -> LifeStore:
        store_dir = root.resolve() / STORE_DIR
        if (store_dir / Collection.goals.filename).is_file():
            raise StoreError("Life-sim store already initialized")
        store_dir.mkdir(parents=True, exist_ok=True)
        kv = FileKeyValueStore(store_dir)
        for collection in Collection:
            if not kv.set(collection, []):
                raise StoreError(f"Could not create {store_dir / collection.filename}")
        return cls(kv)

    # -- Derived views --

    def today_stats(self) -> TodayStats:
        return TodayStats(
            focus_minutes=self.engine.get_today_minutes(),
            tasks_completed=len(self.tasks.completed_on(self.clock().date())),
        )

    def summary(self) -> dict:
        """Counts and today's progress, for status displays."""
        goals = self.goals.list()
        tasks = self.tasks.list()
        active = self.engine.get_active_session()
        stats = self.today_stats()
        active_task = self.tasks.get(active.task_id) if active else None
        return {
            "goal_count": len(goals),
            "active_goal_count": sum(1 for g in goals if g.is_active),
            "task_count": len(tasks),
            "open_task_count": sum(1 for t in tasks if not t.is_done),
            "focus_minutes_today": stats.focus_minutes,
            "tasks_completed_today": stats.tasks_completed,
            "active_session": active.to_json_dict() if active else None,
            "active_task": active_task.title if active_task else None,
        }
