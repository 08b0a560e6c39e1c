"""
Values -- Immutable, self-validating money value objects.

Responsibility:
    Provides Currency and Money, the only representation of a price in the
    quote kernel.  Amounts are held as integer minor units (fils for AED)
    so that every sum is exact and reproducible across platforms.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    No outward dependencies except quote_kernel.domain.currency and
    quote_kernel.exceptions.

Invariants enforced:
    - Money amounts are ``int`` minor units, never float or Decimal.
    - Money amounts are non-negative; quotations never carry credits.
    - Money amounts stay within a signed 64-bit bound; anything larger is
      treated as corrupt configuration and raised, never wrapped.
    - Currency codes are validated against CurrencyRegistry.

Failure modes:
    - InvalidCurrencyError on unknown currency codes.
    - NegativeAmountError / AmountOverflowError on out-of-range amounts.
    - CurrencyMismatchError when arithmetic mixes currencies.
    - FractionalMinorUnitError when a major-unit amount is finer than the
      currency's minor unit.
    - TypeError when a float is offered as an amount.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from quote_kernel.domain.currency import CurrencyRegistry
from quote_kernel.exceptions import (
    AmountOverflowError,
    CurrencyMismatchError,
    FractionalMinorUnitError,
    InvalidCurrencyError,
    NegativeAmountError,
)

MAX_MINOR_UNITS = 2**63 - 1


@dataclass(frozen=True, slots=True)
class Currency:
    """
    ISO 4217 currency code value object.

    Guarantees:
        - Immutable and hashable
        - code is uppercase, stripped, and registered in CurrencyRegistry
    """

    code: str

    def __post_init__(self) -> None:
        normalized = self.code.upper().strip() if isinstance(self.code, str) else ""
        if not CurrencyRegistry.is_valid(normalized):
            raise InvalidCurrencyError(str(self.code))
        object.__setattr__(self, "code", normalized)

    @property
    def decimal_places(self) -> int:
        return CurrencyRegistry.get_decimal_places(self.code)

    @property
    def minor_units_per_major(self) -> int:
        return 10 ** self.decimal_places

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"Currency({self.code!r})"


@dataclass(frozen=True, slots=True)
class Money:
    """
    Non-negative monetary amount in integer minor units.

    Contract:
        Pairs an ``int`` minor-unit amount with its Currency.  All quotation
        arithmetic (addition, scaling by a headcount) happens on this type.

    Guarantees:
        - Immutable and hashable
        - 0 <= minor_units <= MAX_MINOR_UNITS
        - Arithmetic never mixes currencies

    Non-goals:
        - Does NOT convert between currencies
        - Does NOT support subtraction; fees only accumulate
    """

    minor_units: int
    currency: Currency

    def __post_init__(self) -> None:
        if isinstance(self.minor_units, bool) or not isinstance(self.minor_units, int):
            raise TypeError(
                f"minor_units must be int, got {type(self.minor_units).__name__}"
            )
        if self.minor_units < 0:
            raise NegativeAmountError(self.minor_units)
        if self.minor_units > MAX_MINOR_UNITS:
            raise AmountOverflowError(self.minor_units, MAX_MINOR_UNITS)
        if isinstance(self.currency, str):
            object.__setattr__(self, "currency", Currency(self.currency))
        elif not isinstance(self.currency, Currency):
            raise TypeError(f"currency must be Currency or str, got {type(self.currency)}")

    @classmethod
    def of(cls, minor_units: int, currency: str | Currency) -> Money:
        """Create Money from an integer count of minor units."""
        return cls(minor_units=minor_units, currency=currency)

    @classmethod
    def from_major(cls, amount: Decimal | str | int, currency: str | Currency) -> Money:
        """
        Create Money from a major-unit amount ("10000", "1500.50").

        The conversion is exact: an amount with more decimal places than the
        currency allows is rejected rather than rounded.

        Raises:
            TypeError: if amount is a float.
            FractionalMinorUnitError: if amount is finer than one minor unit.
        """
        if isinstance(amount, float):
            raise TypeError("Money amounts must not be float; pass str or Decimal")
        if isinstance(currency, str):
            currency = Currency(currency)
        try:
            value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
        except InvalidOperation as e:
            raise ValueError(f"Invalid amount: {amount!r}") from e
        if not value.is_finite():
            raise ValueError(f"Invalid amount: {amount!r}")

        scaled = value * currency.minor_units_per_major
        if scaled != scaled.to_integral_value():
            raise FractionalMinorUnitError(str(amount), currency.code)
        return cls(minor_units=int(scaled), currency=currency)

    @classmethod
    def zero(cls, currency: str | Currency) -> Money:
        return cls(minor_units=0, currency=currency)

    @property
    def is_zero(self) -> bool:
        return self.minor_units == 0

    @property
    def major_amount(self) -> Decimal:
        """Amount in major units, for display only."""
        return Decimal(self.minor_units).scaleb(-self.currency.decimal_places)

    def format(self) -> str:
        """Human-readable amount with thousands separators ("AED 13,000.00")."""
        places = self.currency.decimal_places
        return f"{self.currency.code} {self.major_amount:,.{places}f}"

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        if self.currency != other.currency:
            raise CurrencyMismatchError(self.currency.code, other.currency.code)
        return Money(minor_units=self.minor_units + other.minor_units, currency=self.currency)

    def __mul__(self, factor: int) -> Money:
        """Scale by a whole-number count (heads, visas)."""
        if isinstance(factor, bool) or not isinstance(factor, int):
            return NotImplemented
        return Money(minor_units=self.minor_units * factor, currency=self.currency)

    def __rmul__(self, factor: int) -> Money:
        return self.__mul__(factor)

    def __lt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        if self.currency != other.currency:
            raise CurrencyMismatchError(self.currency.code, other.currency.code)
        return self.minor_units < other.minor_units

    def __le__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        if self.currency != other.currency:
            raise CurrencyMismatchError(self.currency.code, other.currency.code)
        return self.minor_units <= other.minor_units

    def __str__(self) -> str:
        return f"{self.major_amount} {self.currency.code}"

    def __repr__(self) -> str:
        return f"Money({self.minor_units!r}, {self.currency.code!r})"


def sum_money(amounts: list[Money] | tuple[Money, ...], currency: Currency) -> Money:
    """Left-to-right sum of amounts; zero in ``currency`` when empty."""
    total = Money.zero(currency)
    for amount in amounts:
        total = total + amount
    return total
