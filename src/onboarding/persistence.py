"""
Onboarding Persistence.

Reconciles a finished session with the user's row in user_onboarding:
look up the existing row, upsert keyed by user_id, fall back to the legacy
column set when the table has not been migrated, then keep a local backup
and the device-level currency and completion settings in sync.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from spendsmart.currency import CurrencySettings
from spendsmart.storage import KeyValueStore

from .errors import (
    LocalBackupError,
    NotAuthenticatedError,
    PersistenceError,
    RecordLookupError,
    SchemaMismatchError,
)
from .identity import Identity, IdentityProvider
from .payload import PreferenceRecord, build_record_from_state, utc_now
from .remote import RemoteStore, RemoteStoreError
from .schema import SchemaCapabilities, detect_missing_columns
from .state import SelectionState

logger = logging.getLogger(__name__)

DEFAULT_TABLE = "user_onboarding"
BACKUP_KEY_PREFIX = "onboarding_data_"
ONBOARDING_COMPLETE_KEY = "is_onboarding_complete"


def backup_key(user_id: str) -> str:
    return f"{BACKUP_KEY_PREFIX}{user_id}"


@dataclass
class SaveResult:
    """Outcome of a successful save."""
    record: PreferenceRecord
    updated_existing: bool
    legacy_schema: bool


class PreferenceReconciler:
    """
    Saves onboarding answers for the current identity.

    One instance per process is enough; schema capabilities learned on one
    save carry over to the next.
    """

    def __init__(
        self,
        identity: IdentityProvider,
        remote: RemoteStore,
        local: KeyValueStore,
        currency: CurrencySettings,
        *,
        table: str = DEFAULT_TABLE,
        timeout: float = 5.0,
        clock: Callable[[], datetime] = utc_now,
        capabilities: SchemaCapabilities | None = None,
    ):
        self.identity = identity
        self.remote = remote
        self.local = local
        self.currency = currency
        self.table = table
        self.timeout = timeout
        self.clock = clock
        self.capabilities = capabilities or SchemaCapabilities()

    # -------------------------------------------------------------------------
    # Remote calls
    # -------------------------------------------------------------------------

    async def _bounded(self, coro, what: str):
        try:
            return await asyncio.wait_for(coro, timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise RemoteStoreError(f"{what} timed out after {self.timeout:g}s") from e

    async def _require_identity(self, identity: Identity | None = None) -> Identity:
        if identity is None:
            identity = await self.identity.get_current_identity()
        if identity is None:
            raise NotAuthenticatedError()
        return identity

    async def _find_existing_row(self, identity: Identity) -> dict | None:
        try:
            rows = await self._bounded(
                self.remote.query(
                    self.table,
                    {"user_id": identity.id},
                    columns="id,created_at",
                    limit=1,
                ),
                "Onboarding lookup",
            )
        except RemoteStoreError as e:
            raise RecordLookupError(str(e)) from e
        return rows[0] if rows else None

    async def find_existing_record_id(self, identity: Identity | None = None) -> str | None:
        """
        Id of the user's existing row, if any.

        Raises NotAuthenticatedError without an identity and RecordLookupError
        when the query fails.
        """
        identity = await self._require_identity(identity)
        row = await self._find_existing_row(identity)
        return row["id"] if row else None

    async def fetch_record(self, identity: Identity | None = None) -> PreferenceRecord | None:
        """Full stored row for the user, if any."""
        identity = await self._require_identity(identity)
        try:
            rows = await self._bounded(
                self.remote.query(self.table, {"user_id": identity.id}, limit=1),
                "Onboarding fetch",
            )
        except RemoteStoreError as e:
            raise RecordLookupError(str(e)) from e
        return PreferenceRecord.from_dict(rows[0]) if rows else None

    async def _upsert(self, record: PreferenceRecord, exclude: frozenset[str]) -> None:
        try:
            await self._bounded(
                self.remote.upsert(self.table, record.to_row(exclude), on_conflict="user_id"),
                "Onboarding upsert",
            )
        except RemoteStoreError as e:
            missing = detect_missing_columns(e)
            if missing and not missing <= exclude:
                raise SchemaMismatchError(missing, str(e)) from e
            raise PersistenceError(str(e)) from e

    async def _write(self, record: PreferenceRecord) -> bool:
        """Upsert the record. Returns True if the legacy column set was used."""
        try:
            await self._upsert(record, self.capabilities.excluded_columns)
            return self.capabilities.legacy
        except SchemaMismatchError as e:
            self.capabilities.mark_missing(e.missing_columns)

        try:
            await self._upsert(record, self.capabilities.excluded_columns)
        except SchemaMismatchError as e:
            raise PersistenceError(str(e)) from e
        logger.info(f"Saved onboarding for {record.user_id} without theme/referral (migration pending)")
        return True

    # -------------------------------------------------------------------------
    # Local copies
    # -------------------------------------------------------------------------

    def write_local_backup(self, record: PreferenceRecord) -> None:
        """Store the full record on the device. Raises LocalBackupError."""
        try:
            self.local.set(backup_key(record.user_id), record.to_dict())
        except Exception as e:
            raise LocalBackupError(str(e)) from e

    def load_local_backup(self, user_id: str) -> PreferenceRecord | None:
        data = self.local.get(backup_key(user_id))
        if not data:
            return None
        return PreferenceRecord.from_dict(data)

    def is_onboarding_complete(self) -> bool:
        return bool(self.local.get(ONBOARDING_COMPLETE_KEY, False))

    # -------------------------------------------------------------------------
    # Save
    # -------------------------------------------------------------------------

    async def save(self, state: SelectionState) -> SaveResult:
        """
        Persist the session's answers for the current identity.

        Re-saving updates the same row. Raises NotAuthenticatedError or
        PersistenceError; lookup failures and local writes (backup, currency,
        completion flag) are absorbed once the remote row is written.
        """
        identity = await self._require_identity()

        try:
            existing = await self._find_existing_row(identity)
        except RecordLookupError as e:
            logger.warning(f"Onboarding lookup failed for {identity.id}, saving as new: {e}")
            existing = None

        record = build_record_from_state(
            state,
            user_id=identity.id,
            record_id=existing["id"] if existing else str(uuid.uuid4()),
            now=self.clock(),
            created_at=existing.get("created_at") if existing else None,
        )

        legacy = await self._write(record)

        try:
            self.write_local_backup(record)
        except LocalBackupError as e:
            logger.warning(f"Local onboarding backup failed (ignored): {e}")

        try:
            self.currency.preferred_currency = state.currency
            self.local.set(ONBOARDING_COMPLETE_KEY, True)
        except Exception as e:
            logger.warning(f"Local onboarding settings write failed (ignored): {e}")

        logger.info(
            f"Saved onboarding for {identity.id}: reason={record.app_usage_reason}, "
            f"budget={record.monthly_budget_range}, categories={record.primary_categories}, "
            f"currency={record.currency_preference}, theme={record.theme_preference}, "
            f"referral={record.referral_source}"
        )
        return SaveResult(record=record, updated_existing=existing is not None, legacy_schema=legacy)

    async def probe_schema(self) -> bool:
        """Resolve optional-column support up front. True when fully migrated."""
        return await self.capabilities.probe(self.remote, self.table)

    def schema_capability_report(self) -> dict:
        return self.capabilities.report()
