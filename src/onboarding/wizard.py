"""
Onboarding Wizard.

One wizard per onboarding session. It owns the SelectionState, moves between
steps, starts the personalization phase when that step is reached and
announces completion. All methods must be called from the same event loop;
advancing into personalization needs a running loop.
"""

import asyncio
import copy
import logging
from typing import Callable

from spendsmart.notifications import ONBOARDING_COMPLETED, NotificationCenter, notification_center

from .errors import OnboardingError, user_facing_message
from .options import Appearance, AppUsageReason, BudgetRange, ExpenseCategory, ReferralSource, SpendingGoal
from .persistence import PreferenceReconciler
from .personalization import DEFAULT_TICK_SECONDS, DEFAULT_TICKS, PersonalizationRunner
from .state import SelectionState, can_advance, progress_fraction
from .steps import TERMINAL_STEP, OnboardingStep

logger = logging.getLogger(__name__)

Listener = Callable[[SelectionState], None]


class OnboardingWizard:
    """
    Step sequencer plus change notifications for one session.

    Subscribers receive a snapshot (a deep copy of the state) after every
    change, including each personalization tick.
    """

    def __init__(
        self,
        reconciler: PreferenceReconciler,
        *,
        notifier: NotificationCenter | None = None,
        ticks: int = DEFAULT_TICKS,
        tick_seconds: float = DEFAULT_TICK_SECONDS,
        initial_currency: str | None = None,
    ):
        self.reconciler = reconciler
        self.notifier = notifier or notification_center
        self.state = SelectionState(
            currency=initial_currency or reconciler.currency.preferred_currency,
        )
        self._runner = PersonalizationRunner(reconciler.save, ticks=ticks, tick_seconds=tick_seconds)
        self._listeners: list[Listener] = []
        self._task: asyncio.Task | None = None
        self._closed = False
        self._completion_published = False

    @classmethod
    def from_settings(
        cls,
        reconciler: PreferenceReconciler,
        notifier: NotificationCenter | None = None,
    ) -> "OnboardingWizard":
        """Build a wizard using the configured phase pacing."""
        from spendsmart.config import settings

        return cls(
            reconciler,
            notifier=notifier,
            ticks=settings.personalization_ticks,
            tick_seconds=settings.personalization_tick_seconds,
        )

    # -------------------------------------------------------------------------
    # Observation
    # -------------------------------------------------------------------------

    def snapshot(self) -> SelectionState:
        return copy.deepcopy(self.state)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        if self._closed:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Onboarding listener failed: {e}")

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def personalization_running(self) -> bool:
        return self._task is not None and not self._task.done()

    # -------------------------------------------------------------------------
    # Selections
    # -------------------------------------------------------------------------

    def select_appearance(self, appearance: Appearance) -> None:
        self.state.select_appearance(appearance)
        self._notify()

    def select_referral(self, source: ReferralSource) -> None:
        self.state.select_referral(source)
        self._notify()

    def select_usage_reason(self, reason: AppUsageReason) -> None:
        self.state.select_usage_reason(reason)
        self._notify()

    def select_budget_range(self, budget: BudgetRange) -> None:
        self.state.select_budget_range(budget)
        self._notify()

    def set_currency(self, code: str) -> None:
        self.state.set_currency(code)
        self._notify()

    def toggle_category(self, category: ExpenseCategory) -> bool:
        changed = self.state.toggle_category(category)
        if changed:
            self._notify()
        return changed

    def toggle_spending_goal(self, goal: SpendingGoal) -> None:
        self.state.toggle_spending_goal(goal)
        self._notify()

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def can_advance(self) -> bool:
        return can_advance(self.state)

    def progress_fraction(self) -> float:
        return progress_fraction(self.state)

    def advance(self) -> bool:
        """
        Move to the next step if the current one is complete.

        Returns True if the step changed. Entering the personalization step
        starts the personalization phase in the background.
        """
        if self._closed or self.state.is_processing or not can_advance(self.state):
            return False

        next_step = self.state.current_step.next
        if next_step is None:
            return False

        if next_step is OnboardingStep.PERSONALIZATION:
            # Raises before any state change when called outside a loop
            loop = asyncio.get_running_loop()
            self.state.current_step = next_step
            self._start_personalization(loop)
        else:
            self.state.current_step = next_step
        self._notify()
        return True

    def retreat(self) -> bool:
        """Move to the previous step. Selections are kept."""
        if self._closed or self.state.is_processing:
            return False

        previous_step = self.state.current_step.previous
        if previous_step is None:
            return False

        self.state.current_step = previous_step
        self._notify()
        return True

    # -------------------------------------------------------------------------
    # Personalization
    # -------------------------------------------------------------------------

    def _start_personalization(self, loop: asyncio.AbstractEventLoop) -> None:
        if self.personalization_running:
            return
        # Marked here so no transition slips in before the task's first step
        self.state.is_processing = True
        self.state.progress = 0.0
        self._task = loop.create_task(self._run_personalization())

    async def _run_personalization(self) -> None:
        async for event in self._runner.run(self.state):
            if event.completed:
                logger.info(f"Personalization finished (error={self.state.has_error})")
            self._notify()

    async def wait_for_personalization(self) -> None:
        """Wait for the running personalization phase, if any."""
        if self._task is not None:
            await self._task

    # -------------------------------------------------------------------------
    # Completion
    # -------------------------------------------------------------------------

    async def complete_onboarding(self) -> bool:
        """
        Final save and completion announcement.

        Only valid on the completion step. Posts ONBOARDING_COMPLETED at most
        once per session; returns True when it was posted by this call.
        """
        if self._closed or self.state.current_step is not TERMINAL_STEP:
            logger.warning(f"complete_onboarding called on step {self.state.current_step.name}")
            return False
        if self._completion_published:
            return False
        self._completion_published = True

        try:
            await self.reconciler.save(self.state)
        except OnboardingError as e:
            logger.error(f"Final onboarding save failed: {e}")
            self.state.show_error(user_facing_message(e))
            self._notify()
        except Exception as e:
            logger.exception("Unexpected error in final onboarding save")
            self.state.show_error(user_facing_message(e))
            self._notify()
        finally:
            self.notifier.post(ONBOARDING_COMPLETED)
        return True

    # -------------------------------------------------------------------------
    # Teardown
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """End the session. A running phase stops at its next tick."""
        self._closed = True
        self._runner.cancel()
        self._listeners.clear()

    async def aclose(self) -> None:
        """End the session and wait for the phase task to wind down."""
        self.close()
        await self.wait_for_personalization()
