"""
Quotation -- priced line items, the assembled quotation, and its result.

Responsibility:
    The only values that cross the engine boundary.  A Quotation is created
    once per ``compute()`` call and never mutated; it is a value, not an
    entity with identity.

Invariants enforced:
    - LineItem amounts are non-negative (guaranteed by Money).
    - ``Quotation.total`` equals the left-to-right sum of its line items;
      checked on construction.
    - Every line item and the total share the quotation currency.
    - QuotationResult holds a quotation XOR an error.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from quote_kernel.domain.errors import ConfigurationError, EngineError, ValidationError
from quote_kernel.domain.request import OfficeSpace, QuotationRequest
from quote_kernel.domain.values import Currency, Money, sum_money
from quote_kernel.exceptions import CurrencyMismatchError, QuotationFailedError


class LineCategory(str, Enum):
    """Category tag of a quotation line."""

    JURISDICTION_BASE = "jurisdiction-base"
    ACTIVITY = "activity"
    SHAREHOLDER = "shareholder"
    VISA = "visa"
    OFFICE_SPACE = "office-space"


@dataclass(frozen=True)
class LineItem:
    """
    One priced, labelled component of a quotation.

    ``rule_id`` references the fee definition that produced the line, so
    every amount is traceable back to the rule table.
    """

    category: LineCategory
    description: str
    amount: Money
    rule_id: str


@dataclass(frozen=True)
class Quotation:
    """
    Complete, immutable priced quotation.

    Guarantees:
        - ``line_items`` keeps computation order (meaningful for display)
        - ``total`` is the exact sum of the line-item amounts
        - ``valid_until == computed_at + validity``
    """

    line_items: tuple[LineItem, ...]
    total: Money
    currency: Currency
    computed_at: datetime
    validity: timedelta
    request: QuotationRequest
    rule_table_version: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "line_items", tuple(self.line_items))
        for item in self.line_items:
            if item.amount.currency != self.currency:
                raise CurrencyMismatchError(self.currency.code, item.amount.currency.code)
        expected = sum_money(tuple(i.amount for i in self.line_items), self.currency)
        if expected != self.total:
            raise ValueError(
                f"Quotation total {self.total!r} does not equal line-item sum {expected!r}"
            )

    @property
    def valid_until(self) -> datetime:
        return self.computed_at + self.validity

    @property
    def provisional_categories(self) -> tuple[LineCategory, ...]:
        """Categories whose price is not final because the request left them undecided.

        An undecided office-space requirement adds no surcharge line, but the
        quotation must say the office-space price is still open.
        """
        if self.request.office_space is OfficeSpace.UNDECIDED:
            return (LineCategory.OFFICE_SPACE,)
        return ()

    @property
    def is_provisional(self) -> bool:
        return bool(self.provisional_categories)

    def is_valid_at(self, moment: datetime) -> bool:
        return self.computed_at <= moment <= self.valid_until

    def items_by_category(self) -> Mapping[LineCategory, tuple[LineItem, ...]]:
        grouped: dict[LineCategory, list[LineItem]] = {}
        for item in self.line_items:
            grouped.setdefault(item.category, []).append(item)
        return {category: tuple(items) for category, items in grouped.items()}

    def breakdown(self) -> tuple[tuple[str, int], ...]:
        """Flat (label, minor units) pairs in display order."""
        return tuple((item.description, item.amount.minor_units) for item in self.line_items)


@dataclass(frozen=True)
class QuotationResult:
    """
    Outcome of one quotation computation.

    Contract:
        Either carries a Quotation or an engine error, never both.  Use
        ``success()`` / ``failure()`` to construct.
    """

    quotation: Quotation | None = None
    error: EngineError | None = None

    def __post_init__(self) -> None:
        assert (self.quotation is None) != (self.error is None), (
            "QuotationResult must carry exactly one of quotation or error"
        )

    @classmethod
    def success(cls, quotation: Quotation) -> QuotationResult:
        return cls(quotation=quotation)

    @classmethod
    def failure(cls, error: EngineError) -> QuotationResult:
        return cls(error=error)

    @property
    def is_success(self) -> bool:
        return self.quotation is not None

    @property
    def is_validation_error(self) -> bool:
        return isinstance(self.error, ValidationError)

    @property
    def is_configuration_error(self) -> bool:
        return isinstance(self.error, ConfigurationError)

    def unwrap(self) -> Quotation:
        """Return the quotation or raise QuotationFailedError."""
        if self.quotation is None:
            assert self.error is not None
            raise QuotationFailedError(self.error.code, self.error.message)
        return self.quotation

    def __bool__(self) -> bool:
        return self.is_success
