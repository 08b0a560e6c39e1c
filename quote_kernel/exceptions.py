"""
Typed Exception Hierarchy for the Quote Kernel.

===============================================================================
EXCEPTIONS VS. RESULT VALUES
===============================================================================

The quotation engine reports the two *expected* failure kinds as result
values, not exceptions (see ``quote_kernel.domain.errors``):

    ValidationError     -- the request is structurally inconsistent
    ConfigurationError  -- the rule table does not cover the request

Everything in this module is the other category: conditions that mean the
program or its input data is broken.  These are raised loudly and must never
be caught to produce a price.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    QuoteKernelError (base)
    |
    +-- MoneyError
    |   +-- InvalidCurrencyError
    |   +-- CurrencyMismatchError
    |   +-- NegativeAmountError
    |   +-- AmountOverflowError
    |   +-- FractionalMinorUnitError
    |
    +-- RuleTableError
    |   +-- RuleKindMismatchError
    |   +-- DuplicateRuleError
    |
    +-- RequestParseError
    |
    +-- QuotationFailedError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category   | Code                     | When Raised
-----------|--------------------------|------------------------------------------
Money      | INVALID_CURRENCY         | Not a supported ISO 4217 code
           | CURRENCY_MISMATCH        | Mixed currencies in one operation
           | NEGATIVE_AMOUNT          | Fee amount below zero
           | AMOUNT_OVERFLOW          | Minor-unit amount beyond the 64-bit bound
           | FRACTIONAL_MINOR_UNIT    | Major-unit amount finer than the currency
-----------|--------------------------|------------------------------------------
Rule table | RULE_TABLE_INVALID       | Structurally impossible rule table
           | RULE_KIND_MISMATCH       | Key kind does not match fee definition
           | DUPLICATE_RULE           | Same key defined twice
-----------|--------------------------|------------------------------------------
Intake     | REQUEST_PARSE_FAILED     | Raw form value outside the closed sets
-----------|--------------------------|------------------------------------------
Result     | QUOTATION_FAILED         | unwrap() on a failed QuotationResult
"""


class QuoteKernelError(Exception):
    """
    Base exception for all quote kernel errors.

    All subclasses carry a ``code`` class attribute for machine-readable
    identification.
    """

    code: str = "QUOTE_KERNEL_ERROR"


# Money-related exceptions


class MoneyError(QuoteKernelError):
    """Base exception for money arithmetic errors."""

    code: str = "MONEY_ERROR"


class InvalidCurrencyError(MoneyError):
    """Currency code is not in the registry."""

    code: str = "INVALID_CURRENCY"

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"Invalid ISO 4217 currency code: '{currency}'")


class CurrencyMismatchError(MoneyError):
    """Attempted operation on mismatched currencies."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, currency1: str, currency2: str):
        self.currency1 = currency1
        self.currency2 = currency2
        super().__init__(f"Currency mismatch: {currency1} vs {currency2}")


class NegativeAmountError(MoneyError):
    """A fee amount fell below zero."""

    code: str = "NEGATIVE_AMOUNT"

    def __init__(self, minor_units: int):
        self.minor_units = minor_units
        super().__init__(f"Fee amounts must be non-negative, got {minor_units} minor units")


class AmountOverflowError(MoneyError):
    """A minor-unit amount exceeded the representable bound."""

    code: str = "AMOUNT_OVERFLOW"

    def __init__(self, minor_units: int, limit: int):
        self.minor_units = minor_units
        self.limit = limit
        super().__init__(
            f"Amount of {minor_units} minor units exceeds the limit of {limit}"
        )


class FractionalMinorUnitError(MoneyError):
    """A major-unit amount cannot be expressed in whole minor units."""

    code: str = "FRACTIONAL_MINOR_UNIT"

    def __init__(self, amount: str, currency: str):
        self.amount = amount
        self.currency = currency
        super().__init__(
            f"Amount {amount} has more precision than {currency} minor units allow"
        )


# Rule-table exceptions


class RuleTableError(QuoteKernelError):
    """Rule table is structurally invalid."""

    code: str = "RULE_TABLE_INVALID"

    def __init__(self, version: str, reason: str):
        self.version = version
        self.reason = reason
        super().__init__(f"Rule table '{version}' is invalid: {reason}")


class RuleKindMismatchError(RuleTableError):
    """A rule key was paired with the wrong kind of fee definition."""

    code: str = "RULE_KIND_MISMATCH"

    def __init__(self, version: str, rule_key: str, expected: str, actual: str):
        self.rule_key = rule_key
        self.expected = expected
        self.actual = actual
        super().__init__(
            version,
            f"key {rule_key} requires a {expected} definition, got {actual}",
        )


class DuplicateRuleError(RuleTableError):
    """The same rule key appears more than once."""

    code: str = "DUPLICATE_RULE"

    def __init__(self, version: str, rule_key: str):
        self.rule_key = rule_key
        super().__init__(version, f"duplicate rule for {rule_key}")


# Intake exceptions


class RequestParseError(QuoteKernelError):
    """A raw form value could not be mapped onto the request model."""

    code: str = "REQUEST_PARSE_FAILED"

    def __init__(self, field: str, value: object, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Cannot parse {field}={value!r}: {reason}")


# Result exceptions


class QuotationFailedError(QuoteKernelError):
    """Raised when unwrapping a failed quotation result."""

    code: str = "QUOTATION_FAILED"

    def __init__(self, error_code: str, message: str):
        self.error_code = error_code
        self.error_message = message
        super().__init__(f"Quotation failed [{error_code}]: {message}")
