"""QTimer-backed scheduler for delayed trainer transitions."""

from __future__ import annotations

from collections.abc import Callable

from PyQt6.QtCore import QObject, QTimer

from chessdeck.trainer.interfaces import IScheduler, ScheduledTask


class _TimerTask(ScheduledTask):
    __slots__ = ("_timer", "_on_done")

    def __init__(self, timer: QTimer, on_done: Callable[[_TimerTask], None]) -> None:
        self._timer = timer
        self._on_done = on_done

    def cancel(self) -> None:
        self._timer.stop()
        self._on_done(self)

    @property
    def is_active(self) -> bool:
        return self._timer.isActive()


class QtScheduler(IScheduler):
    """Runs callbacks through single-shot ``QTimer``s on the GUI thread.

    Timers are kept referenced until they fire or are cancelled, so the
    caller only has to hold on to the returned task if it wants to cancel.
    """

    __slots__ = ("_parent", "_live")

    def __init__(self, parent: QObject | None = None) -> None:
        self._parent = parent
        self._live: set[_TimerTask] = set()

    @property
    def pending_count(self) -> int:
        return len(self._live)

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledTask:
        timer = QTimer(self._parent)
        timer.setSingleShot(True)
        task = _TimerTask(timer, self._live.discard)

        def _fire() -> None:
            self._live.discard(task)
            callback()

        timer.timeout.connect(_fire)
        self._live.add(task)
        timer.start(max(0, int(delay_ms)))
        return task

    def cancel_all(self) -> None:
        for task in list(self._live):
            task.cancel()
