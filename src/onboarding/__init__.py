"""
SpendSmart Onboarding.

Wizard that collects a new user's money preferences and saves them to the
user_onboarding table.

Flow:
1. Steps - welcome, appearance, discovery, usage reason, goals, budget,
   categories, currency (each gated on its answer)
2. Personalization - paced progress phase that performs the save
3. Completion - final save and the onboarding_completed signal
"""

from .errors import (
    LocalBackupError,
    NotAuthenticatedError,
    OnboardingError,
    PersistenceError,
    RecordLookupError,
    SchemaMismatchError,
)
from .payload import PreferenceRecord
from .persistence import PreferenceReconciler, SaveResult
from .state import SelectionState, can_advance, progress_fraction
from .steps import OnboardingStep, VisualPhase
from .wizard import OnboardingWizard

__all__ = [
    "OnboardingWizard",
    "OnboardingStep",
    "VisualPhase",
    "SelectionState",
    "can_advance",
    "progress_fraction",
    "PreferenceRecord",
    "PreferenceReconciler",
    "SaveResult",
    "OnboardingError",
    "NotAuthenticatedError",
    "RecordLookupError",
    "SchemaMismatchError",
    "PersistenceError",
    "LocalBackupError",
]
