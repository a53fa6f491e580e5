"""Frame scheduling and parameter animation.

Purpose
-------
Animation mode increments one shape parameter (amplitude, frequency or phase)
by a fixed step every frame. The frame loop is cooperative: each frame
requests the next one from a :class:`FrameScheduler`, and stopping cancels
the pending request so no further frame (and no further mutation) happens.

Schedulers
----------
- :class:`ManualFrameScheduler` queues requests until :meth:`tick` is called.
  Tests drive animation deterministically with it.
- :class:`TimerFrameScheduler` fires requests after a fixed interval, using
  the running asyncio loop when there is one (Jupyter kernels) and a daemon
  :class:`threading.Timer` otherwise.

Phase wrapping
--------------
Phase stays in ``[-pi, pi]`` by reflection at the boundary: a step that
crosses ``+pi`` lands exactly on ``-pi`` and vice versa (see
:func:`wrap_phase`).
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import math
import threading
import warnings
from typing import Any, Callable, Dict, Optional, Protocol

from .function_registry import PARAMETER_NAMES, FunctionParameters

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

FrameCallback = Callable[[], None]


def wrap_phase(value: float) -> float:
    """Keep a phase in ``[-pi, pi]``: crossing one bound jumps to the other.

    >>> wrap_phase(math.pi + 0.1) == -math.pi
    True
    >>> wrap_phase(1.0)
    1.0
    """
    if value > math.pi:
        return -math.pi
    if value < -math.pi:
        return math.pi
    return value


def advance_parameter(parameters: FunctionParameters, target: str, step: float) -> FunctionParameters:
    """Return ``parameters`` with ``target`` increased by ``step``.

    Phase is wrapped with :func:`wrap_phase`; amplitude and frequency grow
    without bound.
    """
    if target not in PARAMETER_NAMES:
        raise ValueError(f"Unknown animation target {target!r}; expected one of {PARAMETER_NAMES}")
    value = getattr(parameters, target) + float(step)
    if target == "phase":
        value = wrap_phase(value)
    return parameters.with_value(target, value)


class FrameScheduler(Protocol):
    """Minimal frame-scheduling primitive."""

    def request(self, callback: FrameCallback) -> Any:
        """Schedule ``callback`` for the next frame and return a handle."""

    def cancel(self, handle: Any) -> None:
        """Cancel a pending request. Unknown or fired handles are ignored."""


class ManualFrameScheduler:
    """Scheduler whose frames only advance when :meth:`tick` is called."""

    def __init__(self) -> None:
        self._pending: Dict[int, FrameCallback] = {}
        self._ids = itertools.count(1)

    def request(self, callback: FrameCallback) -> int:
        handle = next(self._ids)
        self._pending[handle] = callback
        return handle

    def cancel(self, handle: Any) -> None:
        self._pending.pop(handle, None)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def tick(self, frames: int = 1) -> int:
        """Run up to ``frames`` frames; return how many callbacks ran.

        Each frame runs only the callbacks pending when it starts, so a
        callback that requests the next frame is deferred to the next tick.
        """
        ran = 0
        for _ in range(int(frames)):
            if not self._pending:
                break
            due = list(self._pending.items())
            self._pending.clear()
            for _handle, callback in due:
                callback()
                ran += 1
        return ran


class TimerFrameScheduler:
    """Wall-clock scheduler firing each request after ``interval_ms``."""

    def __init__(self, interval_ms: float = 1000.0 / 60.0) -> None:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be > 0")
        self._interval_s = interval_ms / 1000.0
        self._lock = threading.Lock()

    def request(self, callback: FrameCallback) -> Any:
        with self._lock:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                timer = threading.Timer(self._interval_s, callback)
                timer.daemon = True
                timer.start()
                return timer
            return loop.call_later(self._interval_s, callback)

    def cancel(self, handle: Any) -> None:
        if handle is None:
            return
        with self._lock:
            handle.cancel()


class ParameterAnimator:
    """Drive a per-frame callback until stopped.

    Parameters
    ----------
    scheduler : FrameScheduler
        Source of frames.
    on_frame : callable
        Called once per frame with ``(target, step)``. Typically dispatches an
        ``animation_tick`` event into a chart.
    target : str, default="phase"
        Parameter to animate.
    step : float, default=0.05
        Increment applied per frame.
    """

    def __init__(
        self,
        scheduler: FrameScheduler,
        on_frame: Callable[[str, float], Any],
        *,
        target: str = "phase",
        step: float = 0.05,
    ) -> None:
        if target not in PARAMETER_NAMES:
            raise ValueError(f"Unknown animation target {target!r}; expected one of {PARAMETER_NAMES}")
        self._scheduler = scheduler
        self._on_frame = on_frame
        self.target = target
        self.step = float(step)
        self._running = False
        self._handle: Optional[Any] = None
        self.frames = 0

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Begin requesting frames. Starting twice keeps one frame loop."""
        if self._running:
            return
        self._running = True
        logger.debug("animation start target=%s step=%s", self.target, self.step)
        self._handle = self._scheduler.request(self._on_scheduled_frame)

    def stop(self) -> None:
        """Cancel the pending frame. No frame callback runs afterwards."""
        if not self._running:
            return
        self._running = False
        handle, self._handle = self._handle, None
        self._scheduler.cancel(handle)
        logger.debug("animation stop after %d frames", self.frames)

    def tick(self) -> None:
        """Run one frame immediately, regardless of the scheduler."""
        self._run_frame()

    def _on_scheduled_frame(self) -> None:
        self._handle = None
        if not self._running:
            return
        self._run_frame()
        if self._running and self._handle is None:
            self._handle = self._scheduler.request(self._on_scheduled_frame)

    def _run_frame(self) -> None:
        self.frames += 1
        try:
            self._on_frame(self.target, self.step)
        except Exception as exc:
            warnings.warn(f"ParameterAnimator frame callback failed: {exc}")


__all__ = [
    "FrameScheduler",
    "ManualFrameScheduler",
    "ParameterAnimator",
    "TimerFrameScheduler",
    "advance_parameter",
    "wrap_phase",
]
