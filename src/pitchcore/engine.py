from __future__ import annotations

import logging
import time
from contextlib import ExitStack
from enum import Enum
from typing import Callable, List, Optional

from .config import AnalysisConfig, resolve_config
from .errors import AcquisitionError, FrameSourceError, FrameSourceExhausted
from .pitch import AutocorrelationEstimator, PitchEstimate, detect_pitch
from .scheduling import AsyncioScheduler, Handle, Scheduler
from .sources import Frame, FrameSource

logger = logging.getLogger(__name__)


class EngineState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


StateListener = Callable[[EngineState], None]
EstimateCallback = Callable[[PitchEstimate], None]


class PitchEngine:
    """Pulls one frame per scheduler tick and emits at most one estimate for it.

    ``stop()`` takes effect at the next tick boundary; a tick that is already
    running finishes first.
    """

    def __init__(
        self,
        source: FrameSource,
        config: Optional[AnalysisConfig] = None,
        *,
        scheduler: Optional[Scheduler] = None,
        interval: float = 0.0,
        estimator: Optional[AutocorrelationEstimator] = None,
        on_estimate: Optional[EstimateCallback] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.source = source
        self._config = config if config is not None else resolve_config()
        self.scheduler: Scheduler = scheduler if scheduler is not None else AsyncioScheduler()
        self.interval = interval
        self.on_estimate = on_estimate
        self.clock = clock
        self._estimator_override = estimator
        self._estimator: Optional[AutocorrelationEstimator] = None
        self._state = EngineState.IDLE
        self._listeners: List[StateListener] = []
        self._resources: Optional[ExitStack] = None
        self._handle: Optional[Handle] = None
        self._last_estimate: Optional[PitchEstimate] = None
        self._last_error: Optional[FrameSourceError] = None
        self._warned_rate = False

    @property
    def config(self) -> AnalysisConfig:
        return self._config

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is EngineState.RUNNING

    @property
    def last_estimate(self) -> Optional[PitchEstimate]:
        return self._last_estimate

    @property
    def last_error(self) -> Optional[FrameSourceError]:
        """Read failure that stopped the current session, if any; cleared by ``start()``."""
        return self._last_error

    def add_listener(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: StateListener) -> None:
        self._listeners.remove(listener)

    def start(self) -> None:
        if self.is_running:
            logger.warning("start() called while already running; ignoring")
            return

        with ExitStack() as stack:
            try:
                stack.enter_context(self.source)
            except AcquisitionError:
                logger.error("Frame source acquisition failed")
                raise
            except Exception as exc:
                logger.error("Frame source acquisition failed: %s", exc)
                raise AcquisitionError(str(exc)) from exc
            if self._estimator_override is not None:
                self._estimator = self._estimator_override
            else:
                self._estimator = AutocorrelationEstimator(sample_rate=self._config.sample_rate)
            self._resources = stack.pop_all()

        self._warned_rate = False
        self._last_error = None
        try:
            self._set_state(EngineState.RUNNING)
        except Exception:
            logger.exception("State listener failed on start; stopping")
            self.stop()
            raise
        if self.is_running:
            self._schedule()

    def stop(self) -> None:
        if not self.is_running:
            return
        self._state = EngineState.IDLE
        handle, self._handle = self._handle, None
        if handle is not None:
            handle.cancel()
        resources, self._resources = self._resources, None
        self._estimator = None
        self._last_estimate = None
        try:
            if resources is not None:
                resources.close()
        finally:
            self._notify(EngineState.IDLE)

    def analyse(self, frame: Frame) -> Optional[PitchEstimate]:
        """Run one frame through the pitch pipeline and publish the result."""
        if frame.sample_rate != self._config.sample_rate and not self._warned_rate:
            logger.warning(
                "Frame source delivers %d Hz but the engine analyses at %d Hz",
                frame.sample_rate,
                self._config.sample_rate,
            )
            self._warned_rate = True

        estimate = detect_pitch(frame.samples, self._config, self._estimator, self.clock())
        if estimate is not None:
            self._last_estimate = estimate
            if self.on_estimate is not None:
                self.on_estimate(estimate)
        return estimate

    def _tick(self) -> None:
        self._handle = None
        if not self.is_running:
            return
        try:
            frame = self.source.read(self._config.frame_size)
        except FrameSourceExhausted:
            logger.info("Frame source exhausted; stopping")
            self.stop()
            return
        except Exception as exc:
            logger.exception("Reading from the frame source failed; stopping")
            error = FrameSourceError(str(exc))
            self._last_error = error
            self.stop()
            raise error from exc

        try:
            self.analyse(frame)
        finally:
            if self.is_running:
                self._schedule()

    def _schedule(self) -> None:
        self._handle = self.scheduler.call_later(self.interval, self._tick)

    def _set_state(self, state: EngineState) -> None:
        self._state = state
        self._notify(state)

    def _notify(self, state: EngineState) -> None:
        logger.info("Pitch engine %s", state.value)
        for listener in list(self._listeners):
            listener(state)
