"""Session/time engine: focused-work intervals and per-day aggregation."""

from __future__ import annotations

from datetime import datetime

from lifesim.core.repositories import Clock, SessionRepository
from lifesim.core.schema import DaySummary, Session, _now


def _elapsed_minutes(start: datetime, end: datetime) -> int:
    return round((end - start).total_seconds() / 60)


class SessionEngine:
    """Starts and ends sessions and computes time totals.

    ``start_session`` does not end other sessions. Keeping at most one active
    session is the caller's job (see ``lifesim.core.focus``).
    """

    def __init__(self, sessions: SessionRepository, clock: Clock = _now) -> None:
        self.sessions = sessions
        self.clock = clock

    def get_active_session(self) -> Session | None:
        return self.sessions.active()

    def has_active_session(self, task_id: str) -> bool:
        active = self.get_active_session()
        return active is not None and active.task_id == task_id

    def start_session(self, task_id: str) -> Session:
        return self.sessions.upsert(task_id=task_id, started_at=self.clock())

    def end_session(self, session_id: str) -> Session | None:
        session = self.sessions.get(session_id)
        if session is None:
            return None
        if session.ended_at is not None:
            return session
        end = self.clock()
        return self.sessions.upsert(
            id=session_id,
            ended_at=end,
            duration_minutes=_elapsed_minutes(session.started_at, end),
        )

    def end_active_session(self) -> Session | None:
        active = self.get_active_session()
        if active is None:
            return None
        return self.end_session(active.id)

    def end_session_for_task(self, task_id: str) -> Session | None:
        for session in self.sessions.by_task(task_id):
            if session.is_active:
                return self.end_session(session.id)
        return None

    def get_today_sessions(self) -> list[Session]:
        today = self.clock().date()
        return [s for s in self.sessions.list() if s.started_at.date() == today]

    def get_today_minutes(self) -> int:
        """Focused minutes today, including the live part of an active session.

        The result grows between calls while a session is running.
        """
        now = self.clock()
        total = 0
        for session in self.get_today_sessions():
            if session.duration_minutes:
                total += session.duration_minutes
            elif session.is_active:
                total += _elapsed_minutes(session.started_at, now)
        return total

    def get_sessions_by_day(self) -> list[DaySummary]:
        by_day: dict = {}
        for session in self.sessions.list():
            by_day.setdefault(session.started_at.date(), []).append(session)

        summaries = []
        for day, day_sessions in by_day.items():
            ended = [s for s in day_sessions if s.ended_at is not None]
            summaries.append(
                DaySummary(
                    day=day,
                    total_minutes=sum(s.duration_minutes or 0 for s in ended),
                    tasks_completed=len({s.task_id for s in ended}),
                    sessions=day_sessions,
                )
            )
        summaries.sort(key=lambda s: s.day, reverse=True)
        return summaries
