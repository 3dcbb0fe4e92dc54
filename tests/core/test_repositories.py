"""Tests for the goal, task and session repositories."""

from datetime import date

import pytest

from lifesim.core.schema import TaskStatus, TaskType
from lifesim.core.storage import Collection, KeyValueStore, StoreError
from lifesim.core.store import LifeStore


class TestGoals:
    def test_create_defaults(self, store):
        goal = store.goals.upsert(title="Learn Spanish")
        assert goal.is_active
        assert goal.description == ""
        assert goal.created_at == goal.updated_at
        assert store.goals.list() == [goal]

    def test_new_goal_ignores_unknown_id(self, store):
        goal = store.goals.upsert(id="not-there", title="Run a marathon")
        assert goal.id != "not-there"

    def test_update_merges_and_refreshes_updated_at(self, store, clock):
        goal = store.goals.upsert(title="Read", description="Books")
        clock.advance(minutes=5)
        updated = store.goals.upsert(id=goal.id, title="Read more")
        assert updated.title == "Read more"
        assert updated.description == "Books"
        assert updated.created_at == goal.created_at
        assert updated.updated_at > goal.updated_at

    def test_list_keeps_insertion_order(self, store):
        titles = ["A", "B", "C"]
        for t in titles:
            store.goals.upsert(title=t)
        assert [g.title for g in store.goals.list()] == titles

    def test_delete(self, store):
        goal = store.goals.upsert(title="Temp")
        assert store.goals.delete(goal.id) is True
        assert store.goals.delete(goal.id) is False
        assert store.goals.get(goal.id) is None

    def test_active(self, store):
        keep = store.goals.upsert(title="Keep")
        drop = store.goals.upsert(title="Drop")
        store.goals.upsert(id=drop.id, is_active=False)
        assert [g.id for g in store.goals.active()] == [keep.id]

    def test_empty_title_rejected(self, store):
        with pytest.raises(ValueError):
            store.goals.upsert(title="")


class TestTasks:
    def test_create_defaults(self, store):
        task = store.tasks.upsert(title="Laundry")
        assert task.type == TaskType.side
        assert task.status == TaskStatus.backlog
        assert task.completed_at is None

    def test_completed_at_follows_status(self, store, clock):
        task = store.tasks.upsert(title="Write report")
        clock.advance(minutes=30)
        done = store.tasks.update_status(task.id, TaskStatus.done)
        assert done.completed_at == clock.now

        clock.advance(minutes=1)
        still_done = store.tasks.upsert(id=task.id, title="Write the report")
        assert still_done.completed_at == done.completed_at

        reopened = store.tasks.update_status(task.id, TaskStatus.planned)
        assert reopened.completed_at is None

    def test_created_done_has_completed_at(self, store, clock):
        task = store.tasks.upsert(title="Already done", status=TaskStatus.done)
        assert task.completed_at == clock.now

    def test_quick_add_is_planned(self, store):
        goal = store.goals.upsert(title="Fitness")
        task = store.tasks.quick_add("Stretch", TaskType.daily, goal.id)
        assert task.status == TaskStatus.planned
        assert task.type == TaskType.daily
        assert task.goal_arc_id == goal.id

    def test_update_status_unknown(self, store):
        assert store.tasks.update_status("nope", TaskStatus.done) is None

    def test_link_and_unlink(self, store):
        goal = store.goals.upsert(title="Fitness")
        task = store.tasks.quick_add("Run")
        assert store.tasks.link_to_goal(task.id, goal.id).goal_arc_id == goal.id
        assert store.tasks.link_to_goal(task.id, None).goal_arc_id is None
        assert store.tasks.link_to_goal("nope", goal.id) is None

    def test_filters(self, store):
        goal = store.goals.upsert(title="G")
        a = store.tasks.quick_add("A", goal_arc_id=goal.id)
        b = store.tasks.upsert(title="B", status=TaskStatus.done)
        assert store.tasks.by_status(TaskStatus.done) == [b]
        assert store.tasks.by_goal(goal.id) == [a]
        assert store.tasks.active() == [a]

    def test_completed_on(self, store, clock):
        task = store.tasks.upsert(title="T", status=TaskStatus.done)
        assert store.tasks.completed_on(clock.now.date()) == [task]
        assert store.tasks.completed_on(date(2000, 1, 1)) == []

    def test_goal_reference_not_enforced(self, store):
        task = store.tasks.upsert(title="Orphan", goal_arc_id="missing-goal")
        assert task.goal_arc_id == "missing-goal"

    def test_persisted_as_camel_case(self, store):
        task = store.tasks.quick_add("Camel")
        raw = store.kv.get(Collection.tasks)[0]
        assert raw["id"] == task.id
        assert "createdAt" in raw
        assert "created_at" not in raw
        assert "completedAt" not in raw
        assert "goalArcId" not in raw

    def test_malformed_record_skipped(self, store):
        good = store.tasks.quick_add("Good")
        records = store.kv.get(Collection.tasks)
        records.append({"id": "bad"})
        store.kv.set(Collection.tasks, records)
        assert [t.id for t in store.tasks.list()] == [good.id]


class TestSessions:
    def test_create_requires_task(self, store):
        with pytest.raises(KeyError):
            store.sessions.upsert()

    def test_active_and_by_task(self, store):
        s = store.sessions.upsert(task_id="t1")
        assert store.sessions.active() == s
        assert store.sessions.by_task("t1") == [s]
        assert store.sessions.by_task("t2") == []


class _FailingStore(KeyValueStore):
    def get(self, collection):
        return []

    def set(self, collection, records):
        return False


def test_failed_write_raises():
    store = LifeStore(_FailingStore())
    with pytest.raises(StoreError, match="Failed to write goals"):
        store.goals.upsert(title="Lost")
