"""Tests for the start / pause / complete workflow."""

import pytest

from lifesim.core.schema import TaskStatus
from lifesim.core.storage import StoreError


@pytest.fixture
def tasks(store):
    return store.tasks.quick_add("Write"), store.tasks.quick_add("Read")


class TestStart:
    def test_start_marks_in_progress(self, store, tasks):
        write, _ = tasks
        session = store.focus.start_task(write.id)
        assert session.task_id == write.id
        assert store.tasks.get(write.id).status == TaskStatus.in_progress

    def test_switching_ends_previous(self, store, clock, tasks):
        write, read = tasks
        first = store.focus.start_task(write.id)
        clock.advance(minutes=15)
        store.focus.start_task(read.id)

        assert store.sessions.get(first.id).duration_minutes == 15
        assert store.tasks.get(write.id).status == TaskStatus.planned
        assert store.tasks.get(read.id).status == TaskStatus.in_progress
        active = [s for s in store.sessions.list() if s.is_active]
        assert [s.task_id for s in active] == [read.id]

    def test_unknown_task(self, store):
        with pytest.raises(StoreError, match="not found"):
            store.focus.start_task("nope")


class TestPauseComplete:
    def test_pause(self, store, clock, tasks):
        write, _ = tasks
        store.focus.start_task(write.id)
        clock.advance(minutes=8)
        ended = store.focus.pause_task(write.id)
        assert ended.duration_minutes == 8
        assert store.tasks.get(write.id).status == TaskStatus.planned

    def test_pause_without_session(self, store, tasks):
        write, _ = tasks
        assert store.focus.pause_task(write.id) is None
        assert store.tasks.get(write.id).status == TaskStatus.planned

    def test_complete_ends_own_session(self, store, clock, tasks):
        write, _ = tasks
        store.focus.start_task(write.id)
        clock.advance(minutes=25)
        done = store.focus.complete_task(write.id)
        assert done.status == TaskStatus.done
        assert done.completed_at == clock.now
        assert store.engine.get_active_session() is None

    def test_complete_leaves_other_session(self, store, tasks):
        write, read = tasks
        store.focus.start_task(read.id)
        store.focus.complete_task(write.id)
        assert store.engine.has_active_session(read.id)
