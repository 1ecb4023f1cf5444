"""
Tests for OnboardingWizard: navigation, the personalization phase and
completion, end to end against the in-memory fakes.
"""

import asyncio

import pytest

from spendsmart.currency import PREFERRED_CURRENCY_KEY
from spendsmart.notifications import ONBOARDING_COMPLETED
from onboarding.options import (
    Appearance,
    AppUsageReason,
    BudgetRange,
    ExpenseCategory,
    ReferralSource,
    SpendingGoal,
)
from onboarding.persistence import ONBOARDING_COMPLETE_KEY
from onboarding.steps import OnboardingStep
from onboarding.wizard import OnboardingWizard

from fakes import USER_ID, FailingStore, make_reconciler, run


def answer_everything(wizard: OnboardingWizard) -> None:
    """Walk from welcome to the currency step, answering each question."""
    assert wizard.advance()  # welcome -> appearance
    wizard.select_appearance(Appearance.DARK)
    assert wizard.advance()  # -> discovery
    wizard.select_referral(ReferralSource.PRODUCT_HUNT)
    assert wizard.advance()  # -> usage reason
    wizard.select_usage_reason(AppUsageReason.SAVINGS_GOALS)
    assert wizard.advance()  # -> spending goals
    wizard.toggle_spending_goal(SpendingGoal.BUILD_EMERGENCY)
    assert wizard.advance()  # -> budget range
    wizard.select_budget_range(BudgetRange.THREE_TO_FIVE_K)
    assert wizard.advance()  # -> categories
    wizard.toggle_category(ExpenseCategory.HOUSING)
    wizard.toggle_category(ExpenseCategory.FOOD)
    assert wizard.advance()  # -> currency
    wizard.set_currency("cad")
    assert wizard.state.current_step is OnboardingStep.CURRENCY


class TestNavigation:
    def test_gate_blocks_advance(self, wizard):
        wizard.advance()
        wizard.advance()
        assert wizard.state.current_step is OnboardingStep.DISCOVERY

        assert not wizard.advance()
        assert wizard.state.current_step is OnboardingStep.DISCOVERY

        wizard.select_referral(ReferralSource.APP_STORE)
        assert wizard.advance()
        assert wizard.state.current_step is OnboardingStep.USAGE_REASON

    def test_retreat_keeps_answers(self, wizard):
        answer_everything(wizard)

        for _ in range(5):
            assert wizard.retreat()

        assert wizard.state.current_step is OnboardingStep.DISCOVERY
        assert wizard.state.referral_source is ReferralSource.PRODUCT_HUNT
        assert wizard.state.categories == {ExpenseCategory.HOUSING, ExpenseCategory.FOOD}
        assert wizard.state.currency == "CAD"
        assert wizard.can_advance()

    def test_retreat_at_first_step(self, wizard):
        assert not wizard.retreat()
        assert wizard.state.current_step is OnboardingStep.WELCOME

    def test_category_cap(self, wizard):
        categories = list(ExpenseCategory)
        assert all(wizard.toggle_category(c) for c in categories[:4])
        assert not wizard.toggle_category(categories[4])
        assert len(wizard.state.categories) == 4

    def test_progress_fraction(self, wizard):
        assert wizard.progress_fraction() == 0.0
        wizard.advance()
        assert wizard.progress_fraction() == pytest.approx(1 / 9)

    def test_advance_outside_event_loop(self, wizard):
        answer_everything(wizard)

        with pytest.raises(RuntimeError):
            wizard.advance()

        assert wizard.state.current_step is OnboardingStep.CURRENCY
        assert not wizard.state.is_processing

    def test_initial_currency_from_settings(self, remote, local):
        local.set(PREFERRED_CURRENCY_KEY, "EUR")
        wizard = OnboardingWizard(make_reconciler(remote, local), ticks=1, tick_seconds=0)
        assert wizard.state.currency == "EUR"


class TestListeners:
    def test_snapshots_on_change(self, wizard):
        received = []
        wizard.subscribe(received.append)

        wizard.advance()
        wizard.select_appearance(Appearance.LIGHT)

        assert [s.current_step for s in received] == [OnboardingStep.APPEARANCE, OnboardingStep.APPEARANCE]
        assert received[-1].appearance is Appearance.LIGHT
        assert received[-1] is not wizard.state

    def test_unsubscribe(self, wizard):
        received = []
        unsubscribe = wizard.subscribe(received.append)
        unsubscribe()
        wizard.advance()
        assert received == []

    def test_failing_listener_does_not_break_others(self, wizard):
        received = []

        def broken(_):
            raise ValueError("boom")

        wizard.subscribe(broken)
        wizard.subscribe(received.append)
        wizard.advance()
        assert len(received) == 1

    def test_rejected_category_not_published(self, wizard):
        for category in list(ExpenseCategory)[:4]:
            wizard.toggle_category(category)
        received = []
        wizard.subscribe(received.append)

        wizard.toggle_category(ExpenseCategory.GIFTS)
        assert received == []


class TestEndToEnd:
    def test_full_flow(self, wizard, remote, local, notifier):
        completions = []
        notifier.subscribe(ONBOARDING_COMPLETED, lambda: completions.append(1))
        progress = []
        wizard.subscribe(lambda s: progress.append(s.progress) if s.is_processing else None)

        async def scenario():
            answer_everything(wizard)
            assert wizard.advance()
            assert wizard.state.current_step is OnboardingStep.PERSONALIZATION
            assert wizard.state.is_processing

            # No manual navigation while the phase runs
            assert not wizard.advance()
            assert not wizard.retreat()

            await wizard.wait_for_personalization()
            assert wizard.state.current_step is OnboardingStep.COMPLETION
            assert not wizard.state.has_error

            first = await wizard.complete_onboarding()
            second = await wizard.complete_onboarding()
            return first, second

        first, second = run(scenario())

        assert (first, second) == (True, False)
        assert completions == [1]
        assert progress == sorted(progress)
        assert progress[-1] == 1.0

        rows = remote.rows()
        assert len(rows) == 1
        row = rows[0]
        assert row["user_id"] == USER_ID
        assert row["spending_goals"] == [SpendingGoal.BUILD_EMERGENCY.value]
        assert row["primary_categories"] == ["Food & Dining", "Housing"]
        assert row["currency_preference"] == "CAD"
        assert row["theme_preference"] == "dark"
        assert row["referral_source"] == "Product Hunt / Hacker News"
        assert local.get(ONBOARDING_COMPLETE_KEY) is True
        assert local.get(PREFERRED_CURRENCY_KEY) == "CAD"

    def test_signed_out_flow(self, remote, local, notifier):
        wizard = OnboardingWizard(
            make_reconciler(remote, local, user_id=None), notifier=notifier, ticks=3, tick_seconds=0
        )
        completions = []
        notifier.subscribe(ONBOARDING_COMPLETED, lambda: completions.append(1))

        async def scenario():
            answer_everything(wizard)
            wizard.advance()
            await wizard.wait_for_personalization()
            return await wizard.complete_onboarding()

        assert run(scenario()) is True
        assert wizard.state.current_step is OnboardingStep.COMPLETION
        assert wizard.state.has_error
        assert wizard.state.error_message == "Unable to save preferences: User not authenticated"
        assert completions == [1]
        assert remote.upsert_calls == []
        assert local.get(ONBOARDING_COMPLETE_KEY) is None

    def test_reference_answers(self, wizard, remote, notifier):
        completions = []
        notifier.subscribe(ONBOARDING_COMPLETED, lambda: completions.append(1))

        async def scenario():
            assert wizard.advance()
            assert wizard.advance()
            assert not wizard.advance()
            wizard.select_referral(ReferralSource.FRIEND)
            assert wizard.advance()
            wizard.select_usage_reason(AppUsageReason.BUDGET_TRACKING)
            assert wizard.advance()
            wizard.toggle_spending_goal(SpendingGoal.SAVE_MONEY)
            assert wizard.advance()
            wizard.select_budget_range(BudgetRange.UNDER_1K)
            assert wizard.advance()
            assert not wizard.advance()
            wizard.toggle_category(ExpenseCategory.FOOD)
            assert wizard.advance()
            wizard.set_currency("USD")
            assert wizard.advance()
            assert wizard.state.current_step is OnboardingStep.PERSONALIZATION

            await wizard.wait_for_personalization()
            await wizard.complete_onboarding()

        run(scenario())

        assert completions == [1]
        assert wizard.state.current_step is OnboardingStep.COMPLETION
        row = remote.rows()[0]
        assert row["referral_source"] == "Friend / Word of Mouth"
        assert row["app_usage_reason"] == "Track my spending and stick to budgets"
        assert row["monthly_budget_range"] == "Under $1,000/month"
        assert row["primary_categories"] == ["Food & Dining"]
        assert row["currency_preference"] == "USD"

    def test_local_flag_failure_still_completes(self, remote, notifier):
        wizard = OnboardingWizard(
            make_reconciler(remote, FailingStore(ONBOARDING_COMPLETE_KEY)),
            notifier=notifier,
            ticks=2,
            tick_seconds=0,
        )
        completions = []
        notifier.subscribe(ONBOARDING_COMPLETED, lambda: completions.append(1))

        async def scenario():
            answer_everything(wizard)
            wizard.advance()
            await wizard.wait_for_personalization()
            first = await wizard.complete_onboarding()
            second = await wizard.complete_onboarding()
            return first, second

        assert run(scenario()) == (True, False)
        assert completions == [1]
        assert len(remote.rows()) == 1
        assert wizard.state.current_step is OnboardingStep.COMPLETION
        assert not wizard.state.has_error

    def test_unexpected_final_save_error_still_posts(self, reconciler, notifier, filled_state):
        wizard = OnboardingWizard(reconciler, notifier=notifier, ticks=1, tick_seconds=0)
        wizard.state = filled_state
        wizard.state.current_step = OnboardingStep.COMPLETION
        completions = []
        notifier.subscribe(ONBOARDING_COMPLETED, lambda: completions.append(1))

        async def broken_save(state):
            raise OSError("disk full")

        reconciler.save = broken_save

        assert run(wizard.complete_onboarding()) is True
        assert completions == [1]
        assert wizard.state.has_error
        assert run(wizard.complete_onboarding()) is False
        assert completions == [1]

    def test_complete_before_last_step(self, wizard, notifier):
        completions = []
        notifier.subscribe(ONBOARDING_COMPLETED, lambda: completions.append(1))

        assert run(wizard.complete_onboarding()) is False
        assert completions == []

    def test_close_during_phase_skips_save(self, reconciler, remote, notifier):
        wizard = OnboardingWizard(reconciler, notifier=notifier, ticks=20, tick_seconds=0.01)
        received = []

        async def scenario():
            answer_everything(wizard)
            wizard.advance()
            wizard.subscribe(received.append)
            await asyncio.sleep(0.03)
            seen = len(received)
            await wizard.aclose()
            return seen

        seen = run(scenario())

        assert wizard.closed
        assert not wizard.personalization_running
        assert remote.upsert_calls == []
        assert wizard.state.current_step is OnboardingStep.PERSONALIZATION
        assert not wizard.state.is_processing
        assert not wizard.advance()
        assert len(received) == seen
