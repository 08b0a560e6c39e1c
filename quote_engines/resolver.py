"""
quote_engines.resolver -- Rule resolution for quotation requests.

Responsibility:
    Validate a QuotationRequest's structural invariants and select, from a
    RuleTable snapshot, every fee rule the request needs: one
    jurisdiction-base rule, one rule per activity, and (only when office
    space is required) one office-space surcharge rule.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import quote_kernel types.

Invariants enforced:
    - Validation precedes lookup: a malformed request yields a
      ValidationError before the rule table is consulted.
    - No silent defaults: a missing rule yields a ConfigurationError, never
      a zero-priced substitute.
    - Purity: the result depends only on (request, rule_table); no clock,
      no randomness.

Failure modes:
    - Returns ValidationError for activity cardinality, empty or duplicate
      activities, and out-of-range headcounts.
    - Returns ConfigurationError for the first rule key, in resolution
      order, that the table does not cover.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from quote_engines.tracer import traced_engine
from quote_kernel.domain import errors
from quote_kernel.domain.errors import ConfigurationError, ValidationError
from quote_kernel.domain.request import (
    BusinessActivity,
    Jurisdiction,
    OfficeSpace,
    QuotationRequest,
)
from quote_kernel.domain.rules import (
    ActivityKey,
    ActivityRule,
    JurisdictionBaseKey,
    JurisdictionBaseRule,
    OfficeSpaceKey,
    OfficeSpaceRule,
    RuleKey,
    RuleTable,
)
from quote_kernel.logging_config import get_logger

logger = get_logger("engines.resolver")

MIN_SHAREHOLDERS = 1
MAX_SHAREHOLDERS = 6
MIN_VISAS = 0
MAX_VISAS = 15


class OfficeSpaceOutcome(str, Enum):
    """How the office-space requirement resolved."""

    SURCHARGED = "surcharged"  # "Yes": surcharge rule resolved
    NOT_REQUIRED = "not_required"  # "No": no surcharge
    PROVISIONAL = "provisional"  # "Undecided": no surcharge yet, quote is provisional


@dataclass(frozen=True)
class ResolvedActivity:
    activity: BusinessActivity
    rule: ActivityRule


@dataclass(frozen=True)
class ResolvedRuleSet:
    """
    Every rule a request needs, resolved from one rule-table snapshot.

    Ephemeral: consumed by the fee calculator and discarded.
    """

    jurisdiction_base: JurisdictionBaseRule
    activities: tuple[ResolvedActivity, ...]
    office_space: OfficeSpaceOutcome
    office_space_rule: OfficeSpaceRule | None
    rule_table_version: str

    def __post_init__(self) -> None:
        assert (self.office_space is OfficeSpaceOutcome.SURCHARGED) == (
            self.office_space_rule is not None
        ), "office_space_rule must be present exactly when surcharged"


def validate_request(request: QuotationRequest) -> ValidationError | None:
    """
    Check the request's cross-field and range invariants.

    Returns:
        The first ValidationError found, or None when the request is valid.
    """
    activities = request.activities

    if not activities:
        return ValidationError(
            code=errors.EMPTY_ACTIVITIES,
            message="At least one business activity is required.",
            field="activities",
        )

    if len(set(activities)) != len(activities):
        seen: set[BusinessActivity] = set()
        duplicates: list[str] = []
        for activity in activities:
            if activity in seen and activity.value not in duplicates:
                duplicates.append(activity.value)
            seen.add(activity)
        return ValidationError(
            code=errors.DUPLICATE_ACTIVITY,
            message=f"Business activities must be distinct: {', '.join(duplicates)} repeated.",
            field="activities",
            details={"duplicates": duplicates},
        )

    if request.jurisdiction is Jurisdiction.MAINLAND and len(activities) != 1:
        return ValidationError(
            code=errors.CARDINALITY_VIOLATION,
            message=(
                f"Mainland licences take exactly one business activity, "
                f"got {len(activities)}."
            ),
            field="activities",
            details={"jurisdiction": request.jurisdiction.value, "count": len(activities)},
        )

    if not MIN_SHAREHOLDERS <= request.shareholders <= MAX_SHAREHOLDERS:
        return ValidationError(
            code=errors.SHAREHOLDERS_OUT_OF_RANGE,
            message=(
                f"Shareholder count must be between {MIN_SHAREHOLDERS} and "
                f"{MAX_SHAREHOLDERS}, got {request.shareholders}."
            ),
            field="shareholders",
            details={"value": request.shareholders},
        )

    if not MIN_VISAS <= request.visas <= MAX_VISAS:
        return ValidationError(
            code=errors.VISAS_OUT_OF_RANGE,
            message=f"Visa count must be between {MIN_VISAS} and {MAX_VISAS}, got {request.visas}.",
            field="visas",
            details={"value": request.visas},
        )

    return None


def _coverage_gap(code: str, key: RuleKey, rule_table: RuleTable) -> ConfigurationError:
    gap = ConfigurationError(
        code=code,
        message=f"Rule table '{rule_table.version}' has no rule for {key.label()}.",
        rule_key=key.label(),
        rule_table_version=rule_table.version,
    )
    logger.error("rule_table_coverage_gap", extra={
        "error_code": code,
        "rule_key": key.label(),
        "rule_table_version": rule_table.version,
    })
    return gap


@traced_engine("resolver", "1.0", fingerprint_fields=("request", "rule_table"))
def resolve(
    request: QuotationRequest,
    rule_table: RuleTable,
) -> ResolvedRuleSet | ValidationError | ConfigurationError:
    """
    Resolve the fee rules for a request.

    Args:
        request: The request to price.
        rule_table: Read-only rule-table snapshot.

    Returns:
        ResolvedRuleSet on success; otherwise the ValidationError or
        ConfigurationError that stopped resolution.
    """
    invalid = validate_request(request)
    if invalid is not None:
        logger.info("quotation_request_rejected", extra={
            "error_code": invalid.code,
            "field": invalid.field,
        })
        return invalid

    base_key = JurisdictionBaseKey(request.jurisdiction, request.emirate)
    base_rule = rule_table.get(base_key)
    if base_rule is None:
        return _coverage_gap(errors.MISSING_JURISDICTION_RULE, base_key, rule_table)

    resolved_activities: list[ResolvedActivity] = []
    for activity in request.activities:
        activity_key = ActivityKey(request.jurisdiction, request.emirate, activity)
        activity_rule = rule_table.get(activity_key)
        if activity_rule is None:
            return _coverage_gap(errors.MISSING_ACTIVITY_RULE, activity_key, rule_table)
        resolved_activities.append(ResolvedActivity(activity=activity, rule=activity_rule))

    office_rule: OfficeSpaceRule | None = None
    if request.office_space is OfficeSpace.YES:
        office_key = OfficeSpaceKey(request.jurisdiction, request.emirate)
        office_rule = rule_table.get(office_key)
        if office_rule is None:
            return _coverage_gap(errors.MISSING_OFFICE_SPACE_RULE, office_key, rule_table)
        outcome = OfficeSpaceOutcome.SURCHARGED
    elif request.office_space is OfficeSpace.UNDECIDED:
        outcome = OfficeSpaceOutcome.PROVISIONAL
    else:
        outcome = OfficeSpaceOutcome.NOT_REQUIRED

    resolved = ResolvedRuleSet(
        jurisdiction_base=base_rule,
        activities=tuple(resolved_activities),
        office_space=outcome,
        office_space_rule=office_rule,
        rule_table_version=rule_table.version,
    )
    logger.debug("rules_resolved", extra={
        "jurisdiction_rule": base_rule.rule_id,
        "activity_rules": [r.rule.rule_id for r in resolved.activities],
        "office_space": outcome.value,
    })
    return resolved
