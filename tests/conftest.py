"""Shared pytest fixtures used across the test suite."""

from __future__ import annotations

import os
import sys
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from chessdeck.trainer.interfaces import IScheduler, ISoundPlayer, ScheduledTask

# Linux CI runners are often headless. Force an offscreen backend only there.
if (
    sys.platform.startswith("linux")
    and "QT_QPA_PLATFORM" not in os.environ
    and "DISPLAY" not in os.environ
    and "WAYLAND_DISPLAY" not in os.environ
):
    os.environ["QT_QPA_PLATFORM"] = "offscreen"


def _is_ui_test(request: pytest.FixtureRequest) -> bool:
    return "ui" in Path(str(request.node.fspath)).parts


# ── Deterministic capabilities ───────────────────────────────────────────────


class _ManualTask(ScheduledTask):
    def __init__(self, due: int, seq: int, callback: Callable[[], None]) -> None:
        self.due = due
        self.seq = seq
        self._callback = callback
        self._active = True

    def cancel(self) -> None:
        self._active = False

    @property
    def is_active(self) -> bool:
        return self._active

    def fire(self) -> None:
        self._active = False
        self._callback()


class ManualScheduler(IScheduler):
    """Virtual clock: callbacks run only when the test advances time."""

    def __init__(self) -> None:
        self.now = 0
        self._seq = 0
        self._tasks: list[_ManualTask] = []

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledTask:
        self._seq += 1
        task = _ManualTask(self.now + max(0, delay_ms), self._seq, callback)
        self._tasks.append(task)
        return task

    @property
    def pending(self) -> list[_ManualTask]:
        return [task for task in self._tasks if task.is_active]

    def advance(self, ms: int) -> None:
        target = self.now + ms
        while True:
            due = [task for task in self.pending if task.due <= target]
            if not due:
                break
            task = min(due, key=lambda t: (t.due, t.seq))
            self.now = task.due
            task.fire()
        self.now = target
        self._tasks = self.pending

    def flush(self) -> None:
        """Run every pending callback, including ones scheduled meanwhile."""
        while self.pending:
            self.advance(max(task.due for task in self.pending) - self.now)


class RecordingSoundPlayer(ISoundPlayer):
    def __init__(self) -> None:
        self.played: list[str] = []

    def play(self, name: str) -> None:
        self.played.append(name)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def sounds() -> RecordingSoundPlayer:
    return RecordingSoundPlayer()


# ── Qt ───────────────────────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def qapp() -> Iterator[object]:
    """Provide a singleton QApplication for UI tests."""
    from PyQt6.QtWidgets import QApplication

    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


@pytest.fixture(autouse=True)
def _cleanup_qt_widgets(
    request: pytest.FixtureRequest,
) -> Iterator[None]:
    """Ensure UI tests do not leak top-level widgets into the next test."""
    if not _is_ui_test(request):
        yield
        return

    app = request.getfixturevalue("qapp")
    yield

    for widget in list(app.topLevelWidgets()):
        widget.close()
    app.processEvents()
