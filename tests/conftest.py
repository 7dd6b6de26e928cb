"""Shared fixtures: a manual stand-in for the Tk root's after/after_cancel."""

from __future__ import annotations

import pytest


class FakeScheduler:
    def __init__(self) -> None:
        self.jobs = {}
        self.cancelled = []
        self._next = 0

    def after(self, ms, callback):
        self._next += 1
        job = f"after#{self._next}"
        self.jobs[job] = (ms, callback)
        return job

    def after_cancel(self, job):
        self.cancelled.append(job)
        self.jobs.pop(job, None)

    @property
    def pending(self):
        return len(self.jobs)

    def run_next(self):
        """Fire the oldest pending job, like one second passing."""
        job = next(iter(self.jobs))
        _, callback = self.jobs.pop(job)
        callback()

    def run_all(self, limit=100_000):
        fired = 0
        while self.jobs and fired < limit:
            self.run_next()
            fired += 1
        return fired


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


class FakeRoot(FakeScheduler):
    """Just enough of tk.Tk for GoalTimerApp: scheduling plus window calls."""

    def __init__(self, screen=(1920, 1080)) -> None:
        super().__init__()
        self.screen = screen
        self.window_title = None
        self.geometry_spec = None
        self.protocols = {}
        self.destroyed = False

    def title(self, text):
        self.window_title = text

    def protocol(self, name, callback):
        self.protocols[name] = callback

    def update_idletasks(self):
        pass

    def winfo_screenwidth(self):
        return self.screen[0]

    def winfo_screenheight(self):
        return self.screen[1]

    def geometry(self, spec):
        self.geometry_spec = spec

    def destroy(self):
        self.destroyed = True


@pytest.fixture
def root() -> FakeRoot:
    return FakeRoot()
