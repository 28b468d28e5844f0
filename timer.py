"""
Work session timer.

One active session per user, held by a TimerRegistry. A session moves
Idle -> Running -> Paused -> Running ... -> Stopping -> Idle, and is turned
into a work log by `confirm_stop`. Going back to Running through `start`
takes a new start time, so paused time is not logged. A failed persist leaves the session in
Stopping so it can be confirmed again.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


class TimerState(str, Enum):
    IDLE = "Idle"
    RUNNING = "Running"
    PAUSED = "Paused"
    STOPPING = "Stopping"


class TimerError(Exception):
    pass


class NoActiveSession(TimerError):
    pass


class InvalidTransition(TimerError):
    def __init__(self, state: TimerState, action: str):
        self.state = state
        self.action = action
        super().__init__(f"cannot {action} while {state.value}")


def utc_now() -> datetime:
    now = datetime.now(timezone.utc)
    # storage keeps milliseconds only
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


@dataclass
class ActiveSession:
    user_id: str
    task_id: str
    project_id: str
    start_time: datetime
    state: TimerState = TimerState.RUNNING
    frozen_at: Optional[datetime] = None
    note: Optional[str] = None

    def elapsed_seconds(self, now: datetime) -> int:
        """Seconds shown on the clock; frozen while paused or stopping."""
        until = self.frozen_at or now
        return max(0, int((until - self.start_time).total_seconds()))

    def to_dict(self, now: datetime) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "task_id": self.task_id,
            "project_id": self.project_id,
            "start_time": self.start_time.isoformat(),
            "elapsed_seconds": self.elapsed_seconds(now),
        }


class TimerRegistry:
    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._sessions: Dict[str, ActiveSession] = {}
        self._clock = clock or utc_now

    def now(self) -> datetime:
        return self._clock()

    def get(self, user_id: str) -> Optional[ActiveSession]:
        return self._sessions.get(user_id)

    def state(self, user_id: str) -> TimerState:
        session = self.get(user_id)
        return session.state if session else TimerState.IDLE

    def snapshot(self, user_id: str) -> Dict[str, Any]:
        session = self.get(user_id)
        if session is None:
            return {"state": TimerState.IDLE.value, "task_id": None, "project_id": None,
                    "start_time": None, "elapsed_seconds": 0}
        return session.to_dict(self.now())

    def _require(self, user_id: str) -> ActiveSession:
        session = self.get(user_id)
        if session is None:
            raise NoActiveSession(f"no active session for user {user_id}")
        return session

    def start(self, user_id: str, task: Dict[str, Any]) -> ActiveSession:
        """Start (or restart) timing `task`.

        Another task holding the user's slot makes this a no-op; the
        session that holds the slot is returned either way. Starting the
        task the slot already holds records a fresh start time.
        """
        task_id = str(task["id"])
        current = self.get(user_id)
        if current is not None:
            if current.task_id != task_id:
                logger.info("User %s already timing task %s; ignoring start on %s",
                            user_id, current.task_id, task_id)
                return current
            current.start_time = self.now()
            current.state = TimerState.RUNNING
            current.frozen_at = None
            logger.debug("User %s restarted task %s", user_id, task_id)
            return current
        session = ActiveSession(
            user_id=user_id,
            task_id=task_id,
            project_id=str(task["project_id"]),
            start_time=self.now(),
        )
        self._sessions[user_id] = session
        logger.info("User %s started timer on task %s", user_id, task_id)
        return session

    def pause(self, user_id: str) -> ActiveSession:
        session = self._require(user_id)
        if session.state != TimerState.RUNNING:
            raise InvalidTransition(session.state, "pause")
        session.state = TimerState.PAUSED
        session.frozen_at = self.now()
        return session

    def stop(self, user_id: str) -> ActiveSession:
        """Move to the confirmation step; nothing is persisted yet."""
        session = self._require(user_id)
        if session.state == TimerState.STOPPING:
            return session
        if session.frozen_at is None:
            session.frozen_at = self.now()
        session.state = TimerState.STOPPING
        return session

    def cancel_stop(self, user_id: str) -> ActiveSession:
        session = self._require(user_id)
        if session.state != TimerState.STOPPING:
            raise InvalidTransition(session.state, "cancel stop")
        session.state = TimerState.PAUSED
        return session

    def confirm_stop(self, user_id: str, note: Optional[str],
                     persist: Callable[[Dict[str, Any]], Any]) -> Any:
        """Persist the session as a work log and release the slot.

        If `persist` raises, the session stays in Stopping and the error
        propagates; calling confirm_stop again retries.
        """
        session = self._require(user_id)
        if session.state != TimerState.STOPPING:
            raise InvalidTransition(session.state, "confirm stop")
        session.note = note or None
        log = {
            "user_id": session.user_id,
            "project_id": session.project_id,
            "task_id": session.task_id,
            "start_time": session.start_time,
            "end_time": self.now(),
            "note": session.note,
        }
        try:
            stored = persist(log)
        except Exception:
            logger.warning("Persisting work log for user %s failed; session kept", user_id,
                           exc_info=True)
            raise
        self._release(user_id)
        logger.info("User %s logged work on task %s", user_id, session.task_id)
        return stored

    def _release(self, user_id: str) -> None:
        self._sessions.pop(user_id, None)
