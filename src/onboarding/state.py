"""
Onboarding State Management.

Holds the answers collected during one wizard session and the gating rules
that decide when the user may move forward. State lives in memory for the
duration of the session; the persisted form is PreferenceRecord (payload.py).
"""

from dataclasses import dataclass, field
from typing import Any

from .options import (
    MAX_CATEGORY_SELECTIONS,
    Appearance,
    AppUsageReason,
    BudgetRange,
    ExpenseCategory,
    ReferralSource,
    SpendingGoal,
    catalog_order,
)
from .steps import OnboardingStep


@dataclass
class SelectionState:
    """
    Answers and UI flags for one onboarding session.

    Mutated only by the selection methods below and by the wizard's
    transitions. Selections survive back/forward navigation.
    """
    current_step: OnboardingStep = OnboardingStep.WELCOME

    # Answers
    appearance: Appearance = Appearance.SYSTEM
    referral_source: ReferralSource | None = None
    currency: str = "USD"
    usage_reason: AppUsageReason | None = None
    budget_range: BudgetRange | None = None
    categories: set[ExpenseCategory] = field(default_factory=set)
    spending_goals: set[SpendingGoal] = field(default_factory=set)

    # Personalization phase
    is_processing: bool = False
    progress: float = 0.0

    # Error surface
    has_error: bool = False
    error_message: str = ""

    # -------------------------------------------------------------------------
    # Selection operations
    # -------------------------------------------------------------------------

    def select_appearance(self, appearance: Appearance) -> None:
        self.appearance = appearance

    def select_referral(self, source: ReferralSource) -> None:
        self.referral_source = source

    def select_usage_reason(self, reason: AppUsageReason) -> None:
        self.usage_reason = reason

    def select_budget_range(self, budget: BudgetRange) -> None:
        self.budget_range = budget

    def set_currency(self, code: str) -> None:
        self.currency = code.strip().upper()

    def toggle_category(self, category: ExpenseCategory) -> bool:
        """
        Add or remove a category.

        Adding beyond MAX_CATEGORY_SELECTIONS is ignored. Returns True if the
        selection changed.
        """
        if category in self.categories:
            self.categories.remove(category)
            return True
        if len(self.categories) < MAX_CATEGORY_SELECTIONS:
            self.categories.add(category)
            return True
        return False

    def toggle_spending_goal(self, goal: SpendingGoal) -> None:
        if goal in self.spending_goals:
            self.spending_goals.remove(goal)
        else:
            self.spending_goals.add(goal)

    def show_error(self, message: str) -> None:
        self.error_message = message
        self.has_error = True

    def clear_error(self) -> None:
        self.error_message = ""
        self.has_error = False

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API responses. Sets become catalog-ordered lists."""
        return {
            "current_step": self.current_step.name.lower(),
            "step_index": self.current_step.value,
            "appearance": self.appearance.value,
            "referral_source": self.referral_source.value if self.referral_source else None,
            "currency": self.currency,
            "usage_reason": self.usage_reason.value if self.usage_reason else None,
            "budget_range": self.budget_range.value if self.budget_range else None,
            "categories": [c.value for c in catalog_order(self.categories, ExpenseCategory)],
            "spending_goals": [g.value for g in catalog_order(self.spending_goals, SpendingGoal)],
            "is_processing": self.is_processing,
            "progress": self.progress,
            "has_error": self.has_error,
            "error_message": self.error_message,
        }


def can_advance(state: SelectionState) -> bool:
    """Whether the current step's answers allow moving forward."""
    match state.current_step:
        case OnboardingStep.WELCOME | OnboardingStep.APPEARANCE:
            return True
        case OnboardingStep.DISCOVERY:
            return state.referral_source is not None
        case OnboardingStep.USAGE_REASON:
            return state.usage_reason is not None
        case OnboardingStep.SPENDING_GOALS:
            return len(state.spending_goals) > 0
        case OnboardingStep.BUDGET_RANGE:
            return state.budget_range is not None
        case OnboardingStep.CATEGORIES:
            return 1 <= len(state.categories) <= MAX_CATEGORY_SELECTIONS
        case OnboardingStep.CURRENCY:
            return bool(state.currency.strip())
        case OnboardingStep.PERSONALIZATION | OnboardingStep.COMPLETION:
            return True


def progress_fraction(state: SelectionState) -> float:
    """Position in the wizard as a 0.0-1.0 fraction. Display only."""
    return state.current_step.value / (OnboardingStep.total() - 1)
