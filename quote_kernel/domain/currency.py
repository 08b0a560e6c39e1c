"""Currency -- ISO 4217 registry and minor-unit exponents."""

from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class CurrencyInfo:
    """Information about a single ISO 4217 currency."""

    code: str
    decimal_places: int
    name: str

    @property
    def minor_units_per_major(self) -> int:
        """Number of minor units in one major unit (100 for fils per dirham)."""
        return 10 ** self.decimal_places


class CurrencyRegistry:
    """Registry of the ISO 4217 currencies a rule table may be priced in."""

    _CURRENCIES: ClassVar[dict[str, CurrencyInfo]] = {
        # Gulf region
        "AED": CurrencyInfo("AED", 2, "UAE Dirham"),
        "SAR": CurrencyInfo("SAR", 2, "Saudi Riyal"),
        "QAR": CurrencyInfo("QAR", 2, "Qatari Riyal"),
        "BHD": CurrencyInfo("BHD", 3, "Bahraini Dinar"),
        "KWD": CurrencyInfo("KWD", 3, "Kuwaiti Dinar"),
        "OMR": CurrencyInfo("OMR", 3, "Omani Rial"),
        # Major currencies
        "USD": CurrencyInfo("USD", 2, "US Dollar"),
        "EUR": CurrencyInfo("EUR", 2, "Euro"),
        "GBP": CurrencyInfo("GBP", 2, "Pound Sterling"),
        "INR": CurrencyInfo("INR", 2, "Indian Rupee"),
        "JPY": CurrencyInfo("JPY", 0, "Japanese Yen"),
    }

    @classmethod
    def is_valid(cls, code: str) -> bool:
        return code in cls._CURRENCIES

    @classmethod
    def get_info(cls, code: str) -> CurrencyInfo | None:
        return cls._CURRENCIES.get(code)

    @classmethod
    def get_decimal_places(cls, code: str) -> int:
        """Decimal places for a currency code.

        Raises:
            KeyError: if the code is not registered.
        """
        return cls._CURRENCIES[code].decimal_places

    @classmethod
    def all_codes(cls) -> frozenset[str]:
        return frozenset(cls._CURRENCIES)
