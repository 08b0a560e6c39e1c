"""
Errors -- the engine's expected failures, as result values.

Contract:
    A quotation computation either produces a Quotation or exactly one of
    these values.  They are returned, never raised.

    ValidationError
        The request is structurally inconsistent (Mainland with several
        activities, empty activity set, headcount out of range).  Detected
        before any rule lookup.  Recoverable by the caller fixing the
        request; never retried automatically.

    ConfigurationError
        The request is well-formed but the rule table has no rule for a
        combination it needs.  A data-completeness defect in the rule
        table, not a user error: surface it as an operational alert and do
        not retry without a new rule table.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class ValidationError:
    """
    A request-level validation failure naming the offending field.

    Guarantees:
        - Immutable
        - ``code`` is machine-readable; ``field`` is the request attribute
    """

    code: str
    message: str
    field: str
    details: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def is_user_error(self) -> bool:
        return True


@dataclass(frozen=True)
class ConfigurationError:
    """
    Rule-table coverage gap for a well-formed request.

    ``rule_key`` is the display form of the key that had no rule.
    """

    code: str
    message: str
    rule_key: str
    rule_table_version: str

    @property
    def is_user_error(self) -> bool:
        return False


EngineError = Union[ValidationError, ConfigurationError]


# Validation codes
CARDINALITY_VIOLATION = "ACTIVITY_CARDINALITY"
EMPTY_ACTIVITIES = "ACTIVITIES_EMPTY"
DUPLICATE_ACTIVITY = "ACTIVITY_DUPLICATE"
SHAREHOLDERS_OUT_OF_RANGE = "SHAREHOLDERS_OUT_OF_RANGE"
VISAS_OUT_OF_RANGE = "VISAS_OUT_OF_RANGE"

# Configuration codes
MISSING_JURISDICTION_RULE = "MISSING_JURISDICTION_RULE"
MISSING_ACTIVITY_RULE = "MISSING_ACTIVITY_RULE"
MISSING_OFFICE_SPACE_RULE = "MISSING_OFFICE_SPACE_RULE"
