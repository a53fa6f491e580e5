"""Stateful chart orchestrator.

Purpose
-------
:class:`CalculusChart` owns the current :class:`~calcviz.chart_state.ChartState`
and turns user actions into state transitions, renders and hook calls. All
state changes go through :meth:`CalculusChart.dispatch`, which applies the
pure reducer, re-renders and then notifies hooks.

Concepts and structure
----------------------
- ``state``: immutable; replaced (never mutated) on every accepted event.
- ``surface``: any :class:`~calcviz.drawing.DrawingSurface`; a
  :class:`~calcviz.drawing.RecordingSurface` by default.
- ``scheduler``: frame source for animation mode. When animation is switched
  on, a :class:`~calcviz.animation.ParameterAnimator` dispatches
  ``animation_tick`` events until it is switched off or the chart is closed.
- hooks: callbacks ``hook(event)`` run after each render. Failures are
  reported with :func:`warnings.warn` and never reach the caller.

Examples
--------
>>> chart = CalculusChart()  # doctest: +SKIP
>>> chart.toggle("show_grid")  # doctest: +SKIP
>>> chart.select_function("cosine")  # doctest: +SKIP
>>> chart.surface.by_role("title")[0].text  # doctest: +SKIP
'Calculus Visualization: cosine function'
"""

from __future__ import annotations

import logging
import threading
import time
import warnings
from typing import Any, Callable, Dict, Hashable, Mapping, Optional

from IPython.display import display

from .animation import FrameScheduler, ParameterAnimator, TimerFrameScheduler
from .chart_config import DEFAULT_CONFIG, ChartConfig
from .chart_renderer import ChartModel, PointerReadout, compute_chart, draw_chart, pixel_to_domain, readout_at
from .chart_state import ChartState, reduce_chart_state
from .ChartEvent import ChartEvent
from .drawing import DrawingSurface, RecordingSurface

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

ChartHook = Callable[[ChartEvent], Any]


class CalculusChart:
    """Interactive calculus chart: state, rendering, hooks and animation.

    Parameters
    ----------
    config : ChartConfig or mapping, optional
        Static settings. Mappings go through :meth:`ChartConfig.from_mapping`.
    state : ChartState, optional
        Initial view state. Defaults to the sine function on ``[-10, 10]``.
    surface : DrawingSurface, optional
        Render target. Defaults to a :class:`RecordingSurface`.
    scheduler : FrameScheduler, optional
        Animation frame source. Defaults to a :class:`TimerFrameScheduler`
        at ``config.frame_interval_ms``, created on first use.
    """

    def __init__(
        self,
        config: ChartConfig | Mapping[str, Any] | None = None,
        state: Optional[ChartState] = None,
        surface: Optional[DrawingSurface] = None,
        scheduler: Optional[FrameScheduler] = None,
    ) -> None:
        if config is None:
            config = DEFAULT_CONFIG
        elif isinstance(config, Mapping):
            config = ChartConfig.from_mapping(config)
        self._config: ChartConfig = config
        self._state: ChartState = state if state is not None else ChartState()
        self._surface: DrawingSurface = surface if surface is not None else RecordingSurface()
        self._scheduler = scheduler
        self._animator: Optional[ParameterAnimator] = None
        self._hooks: Dict[Hashable, ChartHook] = {}
        self._hook_counter = 0
        self._model: Optional[ChartModel] = None
        self._closed = False
        # Timer-thread animation frames and UI actions both dispatch.
        self._lock = threading.RLock()
        self._render_info_last_log_t = 0.0
        self._render_debug_last_log_t = 0.0

        self.render(reason="init")
        self._sync_animation()

    # --- Properties ---

    @property
    def state(self) -> ChartState:
        return self._state

    @property
    def config(self) -> ChartConfig:
        return self._config

    @property
    def surface(self) -> DrawingSurface:
        return self._surface

    @property
    def model(self) -> ChartModel:
        """Model of the most recent render."""
        if self._model is None:
            self.render()
        return self._model

    @property
    def readout(self) -> Optional[PointerReadout]:
        """Value, slope and tangent at the pointer, or ``None`` without a pointer."""
        if self._state.pointer_x is None:
            return None
        return readout_at(self._state, self._config, self._state.pointer_x)

    @property
    def animating(self) -> bool:
        return self._animator is not None and self._animator.running

    @property
    def closed(self) -> bool:
        return self._closed

    # --- State transitions ---

    def dispatch(self, event: ChartEvent) -> ChartState:
        """Apply ``event``, re-render and run hooks.

        Parameters
        ----------
        event : ChartEvent
            State transition to apply.

        Returns
        -------
        ChartState
            The state after the event. An event that leaves the state
            unchanged triggers neither a render nor hooks.

        Raises
        ------
        ConfigurationError, KeyError
            When the reducer rejects the event; the state is left untouched.
        RuntimeError
            If the chart has been closed.
        """
        with self._lock:
            if self._closed:
                raise RuntimeError("CalculusChart is closed")
            new_state = reduce_chart_state(self._state, event)
            if new_state is self._state or new_state == self._state:
                return self._state
            self._state = new_state
            self._sync_animation()
            self.render(reason=event.kind)
        self._run_hooks(event)
        return new_state

    def toggle(self, name: str) -> ChartState:
        return self.dispatch(ChartEvent.toggle(name))

    def set_toggle(self, name: str, value: bool) -> ChartState:
        return self.dispatch(ChartEvent.set_toggle(name, value))

    def select_function(self, name: str) -> ChartState:
        return self.dispatch(ChartEvent.select_function(name))

    def set_domain(self, x_min: Any, x_max: Any) -> ChartState:
        return self.dispatch(ChartEvent.set_domain(x_min, x_max))

    def set_parameter(self, name: str, value: Any) -> ChartState:
        return self.dispatch(ChartEvent.set_parameter(name, value))

    def set_parameters(self, **values: Any) -> ChartState:
        """Update several of ``amplitude``, ``frequency`` and ``phase`` at once."""
        return self.dispatch(ChartEvent.set_parameters(**values))

    def pointer_move(self, pixel_x: float) -> ChartState:
        """Move the pointer to device pixel ``pixel_x`` (0 at the surface edge).

        The left margin is removed, the rest is inverted through the current
        x scale and the result is clamped to the domain.
        """
        x = pixel_to_domain(self._state, self._config, pixel_x)
        return self.dispatch(ChartEvent.pointer_move(x, raw=pixel_x))

    def pointer_leave(self) -> ChartState:
        return self.dispatch(ChartEvent.pointer_leave())

    def start_animation(self, target: Optional[str] = None) -> ChartState:
        """Animate ``target`` (default: the state's animation target)."""
        return self.dispatch(ChartEvent.set_animation(True, target))

    def stop_animation(self) -> ChartState:
        return self.dispatch(ChartEvent.set_animation(False))

    def close(self) -> None:
        """Stop animation and drop hooks. Further dispatches raise."""
        with self._lock:
            if self._closed:
                return
            if self._animator is not None:
                self._animator.stop()
                self._animator = None
            self._hooks.clear()
            self._closed = True
        logger.debug("CalculusChart closed")

    # --- Rendering ---

    def render(self, reason: str = "manual") -> DrawingSurface:
        """Recompute the chart model from the current state and draw it.

        Returns
        -------
        DrawingSurface
            The chart's surface, holding the fresh drawing.
        """
        with self._lock:
            self._log_render(reason)
            self._model = compute_chart(self._state, self._config)
            draw_chart(self._model, self._surface)
        return self._surface

    def serialize(self) -> Any:
        """Export hook: the surface's serialized drawing."""
        if self._model is None:
            self.render()
        return self._surface.serialize()

    def _log_render(self, reason: str) -> None:
        now = time.monotonic()
        if logger.isEnabledFor(logging.INFO) and (now - self._render_info_last_log_t) > 1.0:
            self._render_info_last_log_t = now
            logger.info(f"render(reason={reason}) function={self._state.function_name}")

        if logger.isEnabledFor(logging.DEBUG) and (now - self._render_debug_last_log_t) > 0.5:
            self._render_debug_last_log_t = now
            logger.debug(f"domain={self._state.domain.as_tuple()} parameters={self._state.parameters.as_tuple()}")

    # --- Hooks ---

    def add_hook(self, callback: ChartHook, hook_id: Optional[Hashable] = None) -> Hashable:
        """Register ``callback(event)`` to run after every accepted event.

        Returns
        -------
        Hashable
            The hook id, usable with :meth:`remove_hook`.
        """
        if hook_id is None:
            self._hook_counter += 1
            hook_id = f"hook:{self._hook_counter}"
        self._hooks[hook_id] = callback
        return hook_id

    def remove_hook(self, hook_id: Hashable) -> None:
        self._hooks.pop(hook_id, None)

    def _run_hooks(self, event: ChartEvent) -> None:
        for h_id, callback in list(self._hooks.items()):
            try:
                callback(event)
            except Exception as e:
                warnings.warn(f"Hook {h_id} failed: {e}")

    # --- Animation ---

    def _frame_scheduler(self) -> FrameScheduler:
        if self._scheduler is None:
            self._scheduler = TimerFrameScheduler(self._config.frame_interval_ms)
        return self._scheduler

    def _on_animation_frame(self, target: str, step: float) -> None:
        if self._closed or not self._state.animating:
            return
        # dispatch re-reads the state under its lock; a tick after a stop is a no-op.
        self.dispatch(ChartEvent.animation_tick(step))

    def _sync_animation(self) -> None:
        state = self._state
        if state.animating:
            target = state.animation_target
            step = self._config.animation_step(target)
            if self._animator is None:
                self._animator = ParameterAnimator(
                    self._frame_scheduler(), self._on_animation_frame, target=target, step=step
                )
            else:
                self._animator.target = target
                self._animator.step = step
            self._animator.start()
        elif self._animator is not None:
            self._animator.stop()
            self._animator = None

    # --- Display ---

    def widget(self):
        """Return a :class:`~calcviz.chart_widget.ChartWidget` driving this chart."""
        from .chart_widget import ChartWidget

        return ChartWidget(self)

    def _ipython_display_(self, **kwargs: Any) -> None:
        """Display the interactive widget for this chart in IPython."""
        display(self.widget())

    def __repr__(self) -> str:
        s = self._state
        return (
            f"CalculusChart(function={s.function_name!r}, domain={s.domain.as_tuple()}, "
            f"parameters={s.parameters.as_dict()})"
        )


__all__ = ["CalculusChart", "ChartHook"]
