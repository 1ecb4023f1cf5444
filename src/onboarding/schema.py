"""
Schema capability tracking for user_onboarding.

Deployments can lag behind client releases: theme_preference and
referral_source may not exist yet. Writes degrade to the legacy column set
instead of failing, and the degraded state is remembered for the process so
later saves skip straight to the legacy payload.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from .payload import OPTIONAL_COLUMNS
from .remote import RemoteStore, RemoteStoreError

logger = logging.getLogger(__name__)

# PostgreSQL undefined_column, PostgREST "column not in schema cache"
UNDEFINED_COLUMN_CODES = {"42703", "PGRST204"}

_COLUMN_SPECS: dict[str, dict[str, Any]] = {
    "theme_preference": {
        "migration": "add_theme_preference_to_user_onboarding.sql",
        "fallback_behavior": "Save without the appearance choice; it stays in the local backup.",
    },
    "referral_source": {
        "migration": "add_referral_source_to_user_onboarding.sql",
        "fallback_behavior": "Save without the referral answer; it stays in the local backup.",
    },
}


def detect_missing_columns(
    error: RemoteStoreError,
    candidates: tuple[str, ...] = OPTIONAL_COLUMNS,
) -> set[str]:
    """
    Return the optional columns an error reports as missing.

    A structured undefined-column code is trusted when the message names one
    of the candidates. Without a code, the message itself must name the
    column and say it does not exist. Anything else returns an empty set.
    """
    message = error.message or ""
    named = {c for c in candidates if c in message}
    if not named:
        return set()

    if error.code in UNDEFINED_COLUMN_CODES:
        return named

    lowered = message.lower()
    if "does not exist" in lowered or "schema cache" in lowered:
        return {c for c in named if f'column "{c}"' in message or f"'{c}'" in message}
    return set()


class SchemaCapabilities:
    """Which optional columns the remote table is known to lack."""

    def __init__(self):
        self.missing_columns: set[str] = set()
        self.checked_at: datetime | None = None

    @property
    def legacy(self) -> bool:
        """True once any optional column is known missing."""
        return bool(self.missing_columns)

    @property
    def excluded_columns(self) -> frozenset[str]:
        """Columns to drop from writes. Legacy mode drops every optional column."""
        return frozenset(OPTIONAL_COLUMNS) if self.legacy else frozenset()

    def mark_missing(self, columns: set[str]) -> None:
        new = columns - self.missing_columns
        if new:
            logger.info(f"user_onboarding is missing columns {sorted(new)}; using legacy payload")
        self.missing_columns |= columns
        self.checked_at = datetime.now(timezone.utc)

    async def probe(self, remote: RemoteStore, table: str) -> bool:
        """
        Select the optional columns once to learn whether they exist.

        Returns True when the full schema is available. Transport errors
        leave the capabilities unchanged.
        """
        try:
            await remote.query(table, {}, columns=",".join(OPTIONAL_COLUMNS), limit=1)
        except RemoteStoreError as e:
            missing = detect_missing_columns(e)
            if missing:
                self.mark_missing(missing)
                return False
            logger.warning(f"Schema probe for {table} failed: {e}")
            return not self.legacy
        self.checked_at = datetime.now(timezone.utc)
        return not self.legacy

    def report(self) -> dict[str, Any]:
        """Machine-readable capability report."""
        columns: dict[str, Any] = {}
        for column in OPTIONAL_COLUMNS:
            spec = _COLUMN_SPECS.get(column, {})
            columns[column] = {
                "available": column not in self.missing_columns,
                "migration": spec.get("migration"),
                "fallback_behavior": spec.get("fallback_behavior"),
            }
        return {
            "status": "degraded" if self.legacy else "healthy",
            "checked_at": self.checked_at.isoformat() if self.checked_at else None,
            "missing_columns": sorted(self.missing_columns),
            "columns": columns,
        }
