"""
Currency Preference.

Process-wide preferred currency, persisted to the local store. Readers treat
it as eventually-set: onboarding writes it only after a successful save.
"""

import locale
import logging

from .storage import KeyValueStore

logger = logging.getLogger(__name__)

PREFERRED_CURRENCY_KEY = "preferred_currency"
RECENT_CURRENCIES_KEY = "recent_currencies"
MAX_RECENT_CURRENCIES = 5

# code -> (symbol, name)
SUPPORTED_CURRENCIES: dict[str, tuple[str, str]] = {
    # Major
    "USD": ("$", "US Dollar"),
    "EUR": ("€", "Euro"),
    "GBP": ("£", "British Pound"),
    "JPY": ("¥", "Japanese Yen"),
    "CAD": ("CA$", "Canadian Dollar"),
    "AUD": ("A$", "Australian Dollar"),
    "CHF": ("Fr.", "Swiss Franc"),
    # Asia
    "CNY": ("¥", "Chinese Yuan"),
    "HKD": ("HK$", "Hong Kong Dollar"),
    "SGD": ("S$", "Singapore Dollar"),
    "INR": ("₹", "Indian Rupee"),
    "KRW": ("₩", "South Korean Won"),
    "MYR": ("RM", "Malaysian Ringgit"),
    "THB": ("฿", "Thai Baht"),
    "IDR": ("Rp", "Indonesian Rupiah"),
    "PHP": ("₱", "Philippine Peso"),
    "TWD": ("NT$", "Taiwan Dollar"),
    # Europe
    "SEK": ("kr", "Swedish Krona"),
    "NOK": ("kr", "Norwegian Krone"),
    "DKK": ("kr", "Danish Krone"),
    "PLN": ("zł", "Polish Złoty"),
    "CZK": ("Kč", "Czech Koruna"),
    "HUF": ("Ft", "Hungarian Forint"),
    "RON": ("lei", "Romanian Leu"),
    "TRY": ("₺", "Turkish Lira"),
    # Americas
    "BRL": ("R$", "Brazilian Real"),
    "MXN": ("Mex$", "Mexican Peso"),
    "ARS": ("$", "Argentine Peso"),
    "CLP": ("$", "Chilean Peso"),
    "COP": ("$", "Colombian Peso"),
    "PEN": ("S/", "Peruvian Sol"),
    # Oceania
    "NZD": ("NZ$", "New Zealand Dollar"),
    # Middle East & Africa
    "AED": ("د.إ", "UAE Dirham"),
    "SAR": ("﷼", "Saudi Riyal"),
    "ILS": ("₪", "Israeli Shekel"),
    "EGP": ("E£", "Egyptian Pound"),
    "ZAR": ("R", "South African Rand"),
    "NGN": ("₦", "Nigerian Naira"),
    "KES": ("KSh", "Kenyan Shilling"),
}


def detect_locale_currency(fallback: str = "USD") -> str:
    """Best guess at the system currency from the process locale."""
    try:
        code = locale.localeconv().get("int_curr_symbol", "").strip()
    except (ValueError, locale.Error):
        code = ""
    code = code.upper()
    return code if code in SUPPORTED_CURRENCIES else fallback


class CurrencySettings:
    """Preferred currency plus a short most-recently-used list."""

    def __init__(self, store: KeyValueStore, default: str = "USD"):
        self._store = store
        self._default = default

    @property
    def preferred_currency(self) -> str:
        return self._store.get(PREFERRED_CURRENCY_KEY) or detect_locale_currency(self._default)

    @preferred_currency.setter
    def preferred_currency(self, code: str) -> None:
        code = code.strip().upper()
        self._store.set(PREFERRED_CURRENCY_KEY, code)
        self._add_recent(code)
        logger.info(f"Preferred currency set to {code}")

    @property
    def recent_currencies(self) -> list[str]:
        return list(self._store.get(RECENT_CURRENCIES_KEY) or [self.preferred_currency])

    def _add_recent(self, code: str) -> None:
        recent = [c for c in self._store.get(RECENT_CURRENCIES_KEY) or [] if c != code]
        recent.insert(0, code)
        self._store.set(RECENT_CURRENCIES_KEY, recent[:MAX_RECENT_CURRENCIES])


def get_currency_info(code: str) -> dict | None:
    """Display metadata for a supported currency code."""
    info = SUPPORTED_CURRENCIES.get(code.upper())
    if info is None:
        return None
    symbol, name = info
    return {"code": code.upper(), "symbol": symbol, "name": name}
