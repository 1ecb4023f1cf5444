"""
Onboarding errors.

Only NotAuthenticatedError and PersistenceError ever reach the user (through
the session's error fields). The rest are absorbed with a fallback path.
"""


class OnboardingError(Exception):
    """Base class for onboarding failures."""


class NotAuthenticatedError(OnboardingError):
    """No identity available for the current session."""

    def __init__(self, message: str = "User not authenticated"):
        super().__init__(message)


class RecordLookupError(OnboardingError):
    """Looking up the existing preference row failed."""


class SchemaMismatchError(OnboardingError):
    """The remote table is missing one or more newer optional columns."""

    def __init__(self, missing_columns: set[str], message: str = ""):
        self.missing_columns = set(missing_columns)
        super().__init__(message or f"Missing columns: {', '.join(sorted(self.missing_columns))}")


class PersistenceError(OnboardingError):
    """Writing the preference row failed and could not be recovered."""


class LocalBackupError(OnboardingError):
    """Writing the local backup copy failed."""


def user_facing_message(error: Exception) -> str:
    """Text shown in the session's error fields for a failed save."""
    if isinstance(error, NotAuthenticatedError):
        return "Unable to save preferences: User not authenticated"
    return f"Failed to save preferences: {error}"
