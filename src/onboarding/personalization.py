"""
Personalization Phase.

A paced progress animation that ends with the real save. The phase always
finishes on the completion step, whatever the save outcome; failures are
left in the session's error fields.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Awaitable, Callable

from .errors import OnboardingError, user_facing_message
from .state import SelectionState
from .steps import TERMINAL_STEP

logger = logging.getLogger(__name__)

DEFAULT_TICKS = 20
DEFAULT_TICK_SECONDS = 0.25


@dataclass(frozen=True)
class PhaseEvent:
    """Progress update. The last event of a finished run has completed=True."""
    progress: float
    completed: bool = False


class PersonalizationRunner:
    """
    Runs the personalization phase for one session.

    Cancellation is cooperative: cancel() is honoured at the next tick
    boundary and before the save, never mid-save.
    """

    def __init__(
        self,
        save: Callable[[SelectionState], Awaitable[Any]],
        *,
        ticks: int = DEFAULT_TICKS,
        tick_seconds: float = DEFAULT_TICK_SECONDS,
    ):
        if ticks < 1:
            raise ValueError("ticks must be at least 1")
        self._save = save
        self.ticks = ticks
        self.tick_seconds = tick_seconds
        self._running = False
        self._cancelled = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    async def run(self, state: SelectionState) -> AsyncIterator[PhaseEvent]:
        """
        Tick through the progress bar, save, then move to the completion step.

        Yields one event per tick and a final completed event. Yields nothing
        further once cancelled.
        """
        if self._running:
            raise RuntimeError("Personalization is already running for this session")

        self._running = True
        state.is_processing = True
        state.progress = 0.0
        state.clear_error()

        try:
            for tick in range(1, self.ticks + 1):
                await asyncio.sleep(self.tick_seconds)
                if self._cancelled:
                    logger.info(f"Personalization cancelled at tick {tick - 1}/{self.ticks}")
                    return
                state.progress = tick / self.ticks
                yield PhaseEvent(progress=state.progress)

            if self._cancelled:
                logger.info("Personalization cancelled before save")
                return

            try:
                await self._save(state)
            except OnboardingError as e:
                logger.error(f"Onboarding save failed: {e}")
                state.show_error(user_facing_message(e))
            except Exception as e:
                logger.exception("Unexpected error saving onboarding")
                state.show_error(user_facing_message(e))

            state.current_step = TERMINAL_STEP
            state.is_processing = False
            yield PhaseEvent(progress=state.progress, completed=True)
        finally:
            state.is_processing = False
            self._running = False
