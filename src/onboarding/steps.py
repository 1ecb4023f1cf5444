"""
Onboarding Steps.

The wizard is a fixed, linear sequence. Each step carries its display copy
and the visual phase the client uses to pick a background.
"""

from enum import Enum


class VisualPhase(Enum):
    """Presentation grouping only. Never used for gating."""
    WELCOME = "welcome"
    PREFERENCES = "preferences"
    CURRENCY = "currency"
    COMPLETION = "completion"


class OnboardingStep(Enum):
    """Wizard steps in display order. Values are contiguous from 0."""
    WELCOME = 0
    APPEARANCE = 1
    DISCOVERY = 2
    USAGE_REASON = 3
    SPENDING_GOALS = 4
    BUDGET_RANGE = 5
    CATEGORIES = 6
    CURRENCY = 7
    PERSONALIZATION = 8
    COMPLETION = 9

    @property
    def title(self) -> str:
        match self:
            case OnboardingStep.WELCOME:
                return "Welcome to SpendSmart"
            case OnboardingStep.APPEARANCE:
                return "Choose your appearance"
            case OnboardingStep.DISCOVERY:
                return "How did you hear about us?"
            case OnboardingStep.USAGE_REASON:
                return "What brings you to SpendSmart?"
            case OnboardingStep.SPENDING_GOALS:
                return "Pick your goals"
            case OnboardingStep.BUDGET_RANGE:
                return "What's your typical monthly spending?"
            case OnboardingStep.CATEGORIES:
                return "Which categories matter most?"
            case OnboardingStep.CURRENCY:
                return "Select your currency"
            case OnboardingStep.PERSONALIZATION:
                return "Personalizing for you..."
            case OnboardingStep.COMPLETION:
                return "You're all set!"

    @property
    def subtitle(self) -> str | None:
        match self:
            case OnboardingStep.WELCOME:
                return "Track spending, achieve goals, build better habits"
            case OnboardingStep.APPEARANCE:
                return "System, Light, or Dark"
            case OnboardingStep.DISCOVERY:
                return "We use this to improve marketing"
            case OnboardingStep.USAGE_REASON:
                return "This helps us tailor recommendations"
            case OnboardingStep.SPENDING_GOALS:
                return "Select all that apply"
            case OnboardingStep.BUDGET_RANGE:
                return "Used to set default budgets"
            case OnboardingStep.CATEGORIES:
                return "Choose up to 4 categories"
            case OnboardingStep.CURRENCY:
                return "Choose the currency you use most often"
            case OnboardingStep.PERSONALIZATION:
                return "We're setting up your personalized experience"
            case OnboardingStep.COMPLETION:
                return "Your personalized spending insights await"

    @property
    def visual_phase(self) -> VisualPhase:
        match self:
            case OnboardingStep.WELCOME:
                return VisualPhase.WELCOME
            case (
                OnboardingStep.APPEARANCE
                | OnboardingStep.DISCOVERY
                | OnboardingStep.USAGE_REASON
                | OnboardingStep.SPENDING_GOALS
                | OnboardingStep.BUDGET_RANGE
                | OnboardingStep.CATEGORIES
            ):
                return VisualPhase.PREFERENCES
            case OnboardingStep.CURRENCY:
                return VisualPhase.CURRENCY
            case OnboardingStep.PERSONALIZATION | OnboardingStep.COMPLETION:
                return VisualPhase.COMPLETION

    @property
    def next(self) -> "OnboardingStep | None":
        """Following step, or None at the last step."""
        if self.value + 1 < len(OnboardingStep):
            return OnboardingStep(self.value + 1)
        return None

    @property
    def previous(self) -> "OnboardingStep | None":
        """Preceding step, or None at the first step."""
        if self.value > 0:
            return OnboardingStep(self.value - 1)
        return None

    @classmethod
    def total(cls) -> int:
        return len(cls)


FIRST_STEP = OnboardingStep.WELCOME
TERMINAL_STEP = OnboardingStep.COMPLETION
