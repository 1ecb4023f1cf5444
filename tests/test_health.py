"""Basic health checks: package import, settings and local storage."""

import json

from spendsmart.currency import (
    MAX_RECENT_CURRENCIES,
    PREFERRED_CURRENCY_KEY,
    CurrencySettings,
    get_currency_info,
)
from spendsmart.notifications import ONBOARDING_COMPLETED, NotificationCenter
from spendsmart.storage import JsonFileStore, KeyValueStore, MemoryStore


def test_import_spendsmart():
    """Test that spendsmart package can be imported."""
    import spendsmart
    assert spendsmart.__version__ == "1.0.0"


def test_import_onboarding():
    from onboarding import OnboardingWizard, PreferenceReconciler, SelectionState
    assert OnboardingWizard is not None
    assert PreferenceReconciler is not None
    assert SelectionState is not None


def test_settings_defaults(tmp_path):
    from spendsmart.config import Settings

    settings = Settings(_env_file=None, local_store_dir=tmp_path)
    assert settings.onboarding_table == "user_onboarding"
    assert settings.personalization_ticks == 20
    assert settings.personalization_tick_seconds == 0.25
    assert settings.persistence_timeout_seconds == 5.0
    assert settings.local_store_path("user-1") == tmp_path / "user-1.json"
    assert not settings.supabase_configured


class TestJsonFileStore:
    def test_round_trip(self, tmp_path):
        store = JsonFileStore(tmp_path / "store.json")
        store.set("preferred_currency", "EUR")
        store.set("onboarding_data_u1", {"id": "r1"})

        reopened = JsonFileStore(tmp_path / "store.json")
        assert reopened.get("preferred_currency") == "EUR"
        assert reopened.get("onboarding_data_u1") == {"id": "r1"}
        assert reopened.get("missing", "fallback") == "fallback"

    def test_remove(self, tmp_path):
        store = JsonFileStore(tmp_path / "store.json")
        store.set("a", 1)
        store.remove("a")
        store.remove("never-set")
        assert store.get("a") is None

    def test_corrupt_file_reads_empty(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{not json", encoding="utf-8")
        store = JsonFileStore(path)
        assert store.get("a") is None
        store.set("a", 1)
        assert json.loads(path.read_text(encoding="utf-8")) == {"a": 1}

    def test_creates_parent_dirs(self, tmp_path):
        store = JsonFileStore(tmp_path / "nested" / "dir" / "store.json")
        store.set("a", True)
        assert store.get("a") is True

    def test_protocol(self, tmp_path):
        assert isinstance(JsonFileStore(tmp_path / "s.json"), KeyValueStore)
        assert isinstance(MemoryStore(), KeyValueStore)


class TestCurrencySettings:
    def test_stored_preference_wins(self):
        currency = CurrencySettings(MemoryStore({PREFERRED_CURRENCY_KEY: "GBP"}))
        assert currency.preferred_currency == "GBP"

    def test_set_normalizes_and_tracks_recent(self):
        store = MemoryStore()
        currency = CurrencySettings(store)
        for code in ["eur", "gbp", "EUR"]:
            currency.preferred_currency = code

        assert store.get(PREFERRED_CURRENCY_KEY) == "EUR"
        assert currency.recent_currencies == ["EUR", "GBP"]

    def test_recent_list_is_capped(self):
        currency = CurrencySettings(MemoryStore())
        for code in ["USD", "EUR", "GBP", "JPY", "CAD", "AUD", "CHF"]:
            currency.preferred_currency = code
        assert len(currency.recent_currencies) == MAX_RECENT_CURRENCIES
        assert currency.recent_currencies[0] == "CHF"

    def test_currency_info(self):
        assert get_currency_info("eur") == {"code": "EUR", "symbol": "€", "name": "Euro"}
        assert get_currency_info("XXX") is None


class TestNotificationCenter:
    def test_post_and_unsubscribe(self):
        center = NotificationCenter()
        calls = []
        unsubscribe = center.subscribe(ONBOARDING_COMPLETED, lambda: calls.append(1))

        center.post(ONBOARDING_COMPLETED)
        unsubscribe()
        center.post(ONBOARDING_COMPLETED)

        assert calls == [1]

    def test_failing_observer_isolated(self):
        center = NotificationCenter()
        calls = []

        def broken():
            raise RuntimeError("boom")

        center.subscribe(ONBOARDING_COMPLETED, broken)
        center.subscribe(ONBOARDING_COMPLETED, lambda: calls.append(1))
        center.post(ONBOARDING_COMPLETED)
        assert calls == [1]
