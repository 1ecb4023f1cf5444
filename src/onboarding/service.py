"""
Onboarding session wiring.

Builds wizards against the configured Supabase project and keeps one live
wizard per user for the HTTP router.
"""

import logging
from typing import Callable

from spendsmart.config import settings
from spendsmart.currency import CurrencySettings
from spendsmart.storage import JsonFileStore

from .identity import StaticIdentityProvider
from .persistence import PreferenceReconciler
from .remote import SupabaseRemoteStore
from .schema import SchemaCapabilities
from .wizard import OnboardingWizard

logger = logging.getLogger(__name__)

# Learned once per process, shared by every session
schema_capabilities = SchemaCapabilities()


def build_reconciler(user_id: str | None) -> PreferenceReconciler:
    """Reconciler for one user against Supabase and the user's local store."""
    from spendsmart.db.client import get_service_client

    local = JsonFileStore(settings.local_store_path(user_id or "anonymous"))
    return PreferenceReconciler(
        identity=StaticIdentityProvider(user_id),
        remote=SupabaseRemoteStore(get_service_client()),
        local=local,
        currency=CurrencySettings(local, default=settings.default_currency),
        table=settings.onboarding_table,
        timeout=settings.persistence_timeout_seconds,
        capabilities=schema_capabilities,
    )


def build_wizard(user_id: str) -> OnboardingWizard:
    return OnboardingWizard.from_settings(build_reconciler(user_id))


class SessionRegistry:
    """Live wizards keyed by user id."""

    def __init__(self, factory: Callable[[str], OnboardingWizard] = build_wizard):
        self._factory = factory
        self._sessions: dict[str, OnboardingWizard] = {}

    def get_or_create(self, user_id: str) -> OnboardingWizard:
        wizard = self._sessions.get(user_id)
        if wizard is None or wizard.closed:
            wizard = self._factory(user_id)
            self._sessions[user_id] = wizard
            logger.info(f"Started onboarding session for {user_id}")
        return wizard

    def get(self, user_id: str) -> OnboardingWizard | None:
        return self._sessions.get(user_id)

    async def end(self, user_id: str) -> bool:
        """Tear down a user's session. Returns False if there was none."""
        wizard = self._sessions.pop(user_id, None)
        if wizard is None:
            return False
        await wizard.aclose()
        logger.info(f"Ended onboarding session for {user_id}")
        return True

    async def end_all(self) -> None:
        for user_id in list(self._sessions):
            await self.end(user_id)

    def __len__(self) -> int:
        return len(self._sessions)
