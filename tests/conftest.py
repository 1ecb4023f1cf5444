"""
Pytest configuration and fixtures for SpendSmart tests.
"""

import os

import pytest

# Set test environment before importing spendsmart modules
os.environ["SPENDSMART_ENV"] = "development"

from spendsmart.notifications import NotificationCenter
from spendsmart.storage import MemoryStore
from onboarding.options import (
    Appearance,
    AppUsageReason,
    BudgetRange,
    ExpenseCategory,
    ReferralSource,
    SpendingGoal,
)
from onboarding.state import SelectionState
from onboarding.steps import OnboardingStep
from onboarding.wizard import OnboardingWizard

from fakes import FakeRemoteStore, make_reconciler


@pytest.fixture
def remote():
    return FakeRemoteStore()


@pytest.fixture
def local():
    return MemoryStore()


@pytest.fixture
def notifier():
    return NotificationCenter()


@pytest.fixture
def reconciler(remote, local):
    return make_reconciler(remote, local)


@pytest.fixture
def wizard(reconciler, notifier):
    """Wizard with an instant personalization phase."""
    return OnboardingWizard(reconciler, notifier=notifier, ticks=20, tick_seconds=0)


@pytest.fixture
def filled_state():
    """A session with every question answered, sitting on personalization."""
    return SelectionState(
        current_step=OnboardingStep.PERSONALIZATION,
        appearance=Appearance.DARK,
        referral_source=ReferralSource.FRIEND,
        currency="USD",
        usage_reason=AppUsageReason.BUDGET_TRACKING,
        budget_range=BudgetRange.UNDER_1K,
        categories={ExpenseCategory.FOOD, ExpenseCategory.TRAVEL},
        spending_goals={SpendingGoal.SAVE_MONEY},
    )
