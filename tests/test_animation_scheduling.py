from __future__ import annotations

import math
from unittest.mock import patch

import pytest

from calcviz.animation import (
    ManualFrameScheduler,
    ParameterAnimator,
    TimerFrameScheduler,
    advance_parameter,
    wrap_phase,
)
from calcviz.function_registry import FunctionParameters


class _FakeThreadTimer:
    created: list["_FakeThreadTimer"] = []

    def __init__(self, delay: float, callback):
        self.delay = delay
        self.callback = callback
        self.daemon = False
        self.started = False
        self.cancelled = False
        _FakeThreadTimer.created.append(self)

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True


class _FakeLoopHandle:
    def __init__(self, callback):
        self._callback = callback
        self.cancelled = False

    def fire(self) -> None:
        self._callback()

    def cancel(self) -> None:
        self.cancelled = True


class _FakeAsyncLoop:
    def __init__(self) -> None:
        self.handles: list[_FakeLoopHandle] = []
        self.delays: list[float] = []

    def call_later(self, delay: float, callback):
        handle = _FakeLoopHandle(callback)
        self.delays.append(delay)
        self.handles.append(handle)
        return handle


def test_wrap_phase_reflects_exactly_at_the_bounds() -> None:
    assert wrap_phase(math.pi + 1e-9) == -math.pi
    assert wrap_phase(-math.pi - 1e-9) == math.pi
    assert wrap_phase(math.pi) == math.pi
    assert wrap_phase(0.5) == 0.5


def test_advance_parameter() -> None:
    p = FunctionParameters()
    assert advance_parameter(p, "frequency", 0.5).frequency == 1.5
    assert advance_parameter(p, "amplitude", -0.25).amplitude == 0.75
    assert advance_parameter(FunctionParameters(phase=-3.1), "phase", -0.1).phase == math.pi
    with pytest.raises(ValueError):
        advance_parameter(p, "offset", 1.0)


def test_manual_scheduler_runs_one_frame_per_tick() -> None:
    scheduler = ManualFrameScheduler()
    frames: list[tuple[str, float]] = []
    animator = ParameterAnimator(scheduler, lambda target, step: frames.append((target, step)), step=0.1)

    animator.start()
    assert animator.running
    assert scheduler.pending == 1
    assert frames == []

    assert scheduler.tick() == 1
    assert frames == [("phase", 0.1)]
    assert scheduler.pending == 1

    scheduler.tick(3)
    assert len(frames) == 4
    assert animator.frames == 4


def test_stop_cancels_pending_frame_and_no_callback_runs_afterwards() -> None:
    scheduler = ManualFrameScheduler()
    frames: list[float] = []
    animator = ParameterAnimator(scheduler, lambda _t, step: frames.append(step))

    animator.start()
    scheduler.tick()
    animator.stop()

    assert not animator.running
    assert scheduler.pending == 0
    assert scheduler.tick(5) == 0
    assert len(frames) == 1


def test_start_twice_keeps_a_single_frame_loop() -> None:
    scheduler = ManualFrameScheduler()
    animator = ParameterAnimator(scheduler, lambda *_: None)

    animator.start()
    animator.start()

    assert scheduler.pending == 1


def test_stop_from_inside_a_frame_ends_the_loop() -> None:
    scheduler = ManualFrameScheduler()
    holder: dict[str, ParameterAnimator] = {}
    animator = ParameterAnimator(scheduler, lambda *_: holder["a"].stop())
    holder["a"] = animator

    animator.start()
    scheduler.tick()

    assert animator.frames == 1
    assert scheduler.pending == 0


def test_manual_tick_runs_without_scheduler() -> None:
    scheduler = ManualFrameScheduler()
    frames: list[str] = []
    animator = ParameterAnimator(scheduler, lambda target, _s: frames.append(target), target="amplitude")

    animator.tick()

    assert frames == ["amplitude"]
    assert scheduler.pending == 0


def test_frame_callback_errors_warn_and_keep_the_loop_alive() -> None:
    scheduler = ManualFrameScheduler()
    calls = {"n": 0}

    def _frame(_target, _step):
        calls["n"] += 1
        if calls["n"] == 1:
            raise RuntimeError("boom")

    animator = ParameterAnimator(scheduler, _frame)
    animator.start()

    with pytest.warns(UserWarning, match="ParameterAnimator frame callback failed: boom"):
        scheduler.tick()
    scheduler.tick()

    assert calls["n"] == 2
    assert animator.running


def test_animator_rejects_unknown_target() -> None:
    with pytest.raises(ValueError):
        ParameterAnimator(ManualFrameScheduler(), lambda *_: None, target="offset")


def test_timer_scheduler_uses_threading_timer_without_event_loop() -> None:
    _FakeThreadTimer.created.clear()
    frames: list[float] = []

    with patch("calcviz.animation.threading.Timer", _FakeThreadTimer):
        scheduler = TimerFrameScheduler(interval_ms=20)
        animator = ParameterAnimator(scheduler, lambda _t, step: frames.append(step))
        animator.start()

        assert len(_FakeThreadTimer.created) == 1
        timer = _FakeThreadTimer.created[0]
        assert timer.started and timer.daemon
        assert timer.delay == pytest.approx(0.02)

        timer.callback()
        assert len(frames) == 1
        assert len(_FakeThreadTimer.created) == 2

        animator.stop()
        assert _FakeThreadTimer.created[1].cancelled


def test_timer_scheduler_uses_running_asyncio_loop() -> None:
    fake_loop = _FakeAsyncLoop()
    frames: list[float] = []

    with patch("calcviz.animation.asyncio.get_running_loop", return_value=fake_loop):
        scheduler = TimerFrameScheduler()
        animator = ParameterAnimator(scheduler, lambda _t, step: frames.append(step))
        animator.start()

        fake_loop.handles[0].fire()
        fake_loop.handles[1].fire()
        animator.stop()

    assert len(frames) == 2
    assert fake_loop.delays[0] == pytest.approx(1.0 / 60.0)
    assert fake_loop.handles[2].cancelled


def test_timer_scheduler_rejects_nonpositive_interval() -> None:
    with pytest.raises(ValueError):
        TimerFrameScheduler(0)
