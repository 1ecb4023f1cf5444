"""
Onboarding Payload Definition.

PreferenceRecord is the persisted snapshot of a completed onboarding session,
one row per user in the user_onboarding table. Field names match the table's
columns exactly.
"""

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone

from .options import ExpenseCategory, SpendingGoal, catalog_order
from .state import SelectionState

# Columns added after the table was first created. Older deployments may not
# have migrated yet; writes can drop these and still succeed.
OPTIONAL_COLUMNS = ("theme_preference", "referral_source")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def isoformat(dt: datetime) -> str:
    """ISO 8601 with a Z suffix, second precision."""
    return dt.astimezone(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


@dataclass
class PreferenceRecord:
    """
    Persisted onboarding answers.

    Option fields hold the option's display text (the enum value).
    """
    id: str
    user_id: str
    age_range: str | None = None
    app_usage_reason: str | None = None
    spending_goals: list[str] = field(default_factory=list)
    monthly_budget_range: str | None = None
    primary_categories: list[str] = field(default_factory=list)
    currency_preference: str | None = None
    theme_preference: str | None = None
    referral_source: str | None = None
    completed_at: str = ""
    created_at: str = ""

    def to_row(self, exclude: frozenset[str] | set[str] = frozenset()) -> dict:
        """Row for the remote table, without the excluded columns."""
        return {k: v for k, v in asdict(self).items() if k not in exclude}

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "PreferenceRecord":
        """Deserialize, ignoring unknown keys."""
        known = {f for f in cls.__dataclass_fields__}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, json_str: str) -> "PreferenceRecord":
        return cls.from_dict(json.loads(json_str))


def build_record_from_state(
    state: SelectionState,
    user_id: str,
    record_id: str,
    now: datetime,
    created_at: str | None = None,
) -> PreferenceRecord:
    """
    Assemble the PreferenceRecord for a finished session.

    `created_at` is carried over from an existing row when one is known;
    otherwise the record is stamped with `now`.
    """
    stamp = isoformat(now)
    return PreferenceRecord(
        id=record_id,
        user_id=user_id,
        age_range=None,  # Not asked in the current wizard
        app_usage_reason=state.usage_reason.value if state.usage_reason else None,
        spending_goals=[g.value for g in catalog_order(state.spending_goals, SpendingGoal)],
        monthly_budget_range=state.budget_range.value if state.budget_range else None,
        primary_categories=[c.value for c in catalog_order(state.categories, ExpenseCategory)],
        currency_preference=state.currency,
        theme_preference=state.appearance.value,
        referral_source=state.referral_source.value if state.referral_source else None,
        completed_at=stamp,
        created_at=created_at or stamp,
    )
