"""
Goal Timer - core logic
Goal registry, countdown engine and time formatting. No GUI imports here:
the tkinter layer in goal_timer.py drives everything through callbacks.
"""

import itertools
import logging
import re
from dataclasses import dataclass

logger = logging.getLogger("goaltimer.logic")

TICK_INTERVAL_MS = 1000
DISPLAY_OFFSET_SECONDS = 30 * 60

_MINUTES_RE = re.compile(r"[+-]?[0-9]+")
# seconds must still fit a signed 32-bit int
MAX_MINUTES = (2 ** 31 - 1) // 60

# ===================== ERRORS =====================

class GoalTimerError(Exception):
    """Base class for every recoverable goal timer error"""


class InvalidDurationError(GoalTimerError, ValueError):
    def __init__(self, value):
        super().__init__(f"Invalid timer value: {value!r}")
        self.value = value


class EmptyDescriptionError(GoalTimerError, ValueError):
    def __init__(self):
        super().__init__("Goal description must not be empty")


class IndexOutOfRangeError(GoalTimerError, IndexError):
    def __init__(self, index, length):
        super().__init__(f"Goal index {index} out of range: registry has {length} goal(s)")
        self.index = index
        self.length = length


class NoSelectionError(GoalTimerError):
    def __init__(self):
        super().__init__("No goal selected")


class SessionAlreadyActiveError(GoalTimerError):
    def __init__(self, session):
        super().__init__(f"A timer is already running for goal: {session.goal.description}")
        self.session = session


class InvalidArgumentError(GoalTimerError, ValueError):
    pass

# ===================== TIME FORMATTER =====================

def format_time(seconds):
    """Seconds -> 'mm:ss'.

    Anything under 30 minutes is shown with 30 minutes added on top, so
    format_time(59) == format_time(1859) == "30:59". Minutes are the
    minute-of-hour, so an hour or more wraps around.
    """
    if isinstance(seconds, bool) or not isinstance(seconds, int):
        raise InvalidArgumentError(f"seconds must be an int, got {seconds!r}")
    if seconds < 0:
        raise InvalidArgumentError(f"seconds must not be negative, got {seconds}")

    if seconds < DISPLAY_OFFSET_SECONDS:
        seconds += DISPLAY_OFFSET_SECONDS
    mins, secs = divmod(seconds, 60)
    return f"{mins % 60:02d}:{secs:02d}"


def parse_minutes(value):
    """Parse the minutes entry; ints pass through, text must be decimal digits"""
    if isinstance(value, bool):
        raise InvalidDurationError(value)
    if isinstance(value, int):
        minutes = value
    elif isinstance(value, str) and _MINUTES_RE.fullmatch(value.strip()):
        minutes = int(value.strip())
    else:
        raise InvalidDurationError(value)

    if not 0 < minutes <= MAX_MINUTES:
        raise InvalidDurationError(value)
    return minutes

# ===================== GOAL REGISTRY =====================

@dataclass(frozen=True)
class GoalRecord:
    description: str
    duration_seconds: int
    goal_id: int

    @property
    def minutes(self):
        return self.duration_seconds // 60


class GoalRegistry:
    """Append-only, ordered list of goals. Position is the table row."""

    def __init__(self, on_change=None):
        self._goals = []
        self._ids = itertools.count(1)
        self.on_change = on_change

    def __len__(self):
        return len(self._goals)

    def __iter__(self):
        return iter(list(self._goals))

    def append(self, description, minutes):
        minutes = parse_minutes(minutes)
        description = (description or "").strip()
        if not description:
            raise EmptyDescriptionError()

        goal = GoalRecord(description, minutes * 60, next(self._ids))
        self._goals.append(goal)
        logger.info("Goal #%d added: %r (%d min)", goal.goal_id, goal.description, minutes)

        if self.on_change:
            self.on_change(self)
        return goal

    def get(self, index):
        if isinstance(index, bool) or not isinstance(index, int):
            raise IndexOutOfRangeError(index, len(self._goals))
        if not 0 <= index < len(self._goals):
            raise IndexOutOfRangeError(index, len(self._goals))
        return self._goals[index]

    def index_of(self, goal):
        for row, existing in enumerate(self._goals):
            if existing == goal:
                return row
        raise ValueError(f"Goal #{goal.goal_id} is not in the registry")

    def snapshot(self):
        """Rows for the table: (description, minutes, initial countdown)"""
        return [
            (goal.description, goal.minutes, format_time(goal.duration_seconds))
            for goal in self._goals
        ]

# ===================== COUNTDOWN ENGINE =====================

IDLE = "idle"
RUNNING = "running"
EXPIRED = "expired"
CANCELLED = "cancelled"


@dataclass
class CountdownSession:
    goal: GoalRecord
    remaining_seconds: int
    state: str = RUNNING
    ticks: int = 0


class CountdownEngine:
    """Ticks one goal down once per second.

    The scheduler is anything with tkinter's after/after_cancel pair, normally
    the Tk root itself.
    """

    def __init__(self, scheduler, on_tick=None, on_expire=None, interval_ms=TICK_INTERVAL_MS):
        self.scheduler = scheduler
        self.on_tick = on_tick
        self.on_expire = on_expire
        self.interval_ms = interval_ms
        self.state = IDLE
        self.session = None
        self._job = None

    @property
    def is_running(self):
        return self.state == RUNNING

    def start(self, goal):
        if self.session is not None:
            raise SessionAlreadyActiveError(self.session)
        if goal.duration_seconds <= 0:
            raise InvalidDurationError(goal.duration_seconds)

        self.session = CountdownSession(goal, goal.duration_seconds)
        self.state = RUNNING
        self._schedule()
        logger.info("Countdown started for goal #%d (%ds)", goal.goal_id, goal.duration_seconds)
        return self.session

    def cancel(self):
        session = self.session
        if session is None:
            return None

        if self._job is not None:
            self.scheduler.after_cancel(self._job)
            self._job = None
        session.state = CANCELLED
        self.session = None
        self.state = IDLE
        logger.info("Countdown cancelled for goal #%d with %ds left",
                    session.goal.goal_id, session.remaining_seconds)
        return session

    def tick(self):
        session = self.session
        if session is None or self.state != RUNNING:
            # stale tick after cancel
            return
        self._job = None

        session.remaining_seconds -= 1
        session.ticks += 1
        text = format_time(session.remaining_seconds)
        logger.debug("Tick %d for goal #%d: %s", session.ticks, session.goal.goal_id, text)
        if self.on_tick:
            self.on_tick(session, text)

        if session.remaining_seconds > 0:
            self._schedule()
            return

        self.state = EXPIRED
        session.state = EXPIRED
        logger.info("Time's up for goal #%d", session.goal.goal_id)
        try:
            if self.on_expire:
                self.on_expire(session)
        finally:
            self.session = None
            self.state = IDLE

    def _schedule(self):
        self._job = self.scheduler.after(self.interval_ms, self.tick)

# ===================== APPLICATION STATE =====================

class GoalTimerState:
    """Registry + engine, owned by the window instead of living in globals"""

    def __init__(self, scheduler, on_change=None, on_tick=None, on_expire=None):
        self.registry = GoalRegistry(on_change=on_change)
        self.engine = CountdownEngine(scheduler, on_tick=on_tick, on_expire=on_expire)

    def add_goal(self, description, minutes_text):
        return self.registry.append(description, minutes_text)

    def start_selected(self, row):
        if row is None or row < 0:
            raise NoSelectionError()
        goal = self.registry.get(row)
        return self.engine.start(goal)

    def stop(self):
        return self.engine.cancel()

    def running_row(self):
        if self.engine.session is None:
            return None
        return self.registry.index_of(self.engine.session.goal)
