"""
Pure domain layer.

Value objects and result types with NO dependencies on:
- Configuration files
- Wall-clock time (except SystemClock)
- I/O

All domain objects are immutable and deterministic.
"""

from quote_kernel.domain.clock import Clock, FixedClock, SystemClock
from quote_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from quote_kernel.domain.errors import ConfigurationError, EngineError, ValidationError
from quote_kernel.domain.quotation import (
    LineCategory,
    LineItem,
    Quotation,
    QuotationResult,
)
from quote_kernel.domain.request import (
    BusinessActivity,
    ContactDetails,
    Emirate,
    Jurisdiction,
    OfficeSpace,
    QuotationRequest,
)
from quote_kernel.domain.rules import (
    ActivityKey,
    ActivityRule,
    FeeDefinition,
    JurisdictionBaseKey,
    JurisdictionBaseRule,
    OfficeSpaceKey,
    OfficeSpaceRule,
    QuotationPolicy,
    RuleKey,
    RuleKind,
    RuleTable,
    SurchargeMethod,
)
from quote_kernel.domain.values import Currency, Money

__all__ = [
    # Clock
    "Clock",
    "FixedClock",
    "SystemClock",
    # Money
    "Currency",
    "CurrencyInfo",
    "CurrencyRegistry",
    "Money",
    # Request
    "BusinessActivity",
    "ContactDetails",
    "Emirate",
    "Jurisdiction",
    "OfficeSpace",
    "QuotationRequest",
    # Rules
    "ActivityKey",
    "ActivityRule",
    "FeeDefinition",
    "JurisdictionBaseKey",
    "JurisdictionBaseRule",
    "OfficeSpaceKey",
    "OfficeSpaceRule",
    "QuotationPolicy",
    "RuleKey",
    "RuleKind",
    "RuleTable",
    "SurchargeMethod",
    # Results
    "ConfigurationError",
    "EngineError",
    "LineCategory",
    "LineItem",
    "Quotation",
    "QuotationResult",
    "ValidationError",
]
