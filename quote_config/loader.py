"""
Rule-Table Loader (``quote_config.loader``).

Responsibility
--------------
Loads a YAML rule-table document and parses it into the kernel's frozen
``RuleTable``.  This is configuration tooling: the single public entry
point for runtime use is ``quote_config.get_active_rule_table()``.

Document shape
--------------
::

    version: uae_standard_v1
    currency: AED
    policy:
      validity_days: 30
    jurisdictions:
      - jurisdiction: Freezone
        emirate: Dubai
        base: {rule_id, amount, included_shareholders, per_shareholder, per_visa}
        activities:
          Trading: {rule_id, amount}
        office_space: {rule_id, method: fixed|per_visa, amount, minimum?}

Amounts are written in major units (``"10000"``, ``"1500.50"``) and are
converted to integer minor units exactly.

Invariants enforced
-------------------
* No silent defaults for required keys: a missing key is a
  ``RuleTableLoadError`` naming the section that lacks it.
* YAML floats are rejected as amounts; write them as strings.
* Rule keys are built from the closed enums, so an unknown emirate or
  activity label fails the load instead of creating an unreachable rule.
* ``compute_checksum`` is a deterministic SHA-256 over the parsed table.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Structural problems -> ``RuleTableLoadError``.
* Impossible tables (duplicate keys, mixed currencies) -> kernel
  ``RuleTableError`` subclasses propagate.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from quote_kernel.domain.request import BusinessActivity, Emirate, Jurisdiction
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
    RuleTable,
    SurchargeMethod,
)
from quote_kernel.domain.values import Currency, Money
from quote_kernel.exceptions import InvalidCurrencyError, MoneyError, RequestParseError


class RuleTableLoadError(Exception):
    """A rule-table document is missing data or has the wrong shape.

    Attributes:
        section: Where in the document the problem is ("jurisdictions[3].base").
        reason: What is wrong.
    """

    code: str = "RULE_TABLE_LOAD_FAILED"

    def __init__(self, section: str, reason: str):
        self.section = section
        self.reason = reason
        super().__init__(f"Invalid rule table at {section}: {reason}")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _require(data: dict[str, Any], key: str, section: str) -> Any:
    if not isinstance(data, dict):
        raise RuleTableLoadError(section, "expected a mapping")
    if key not in data or data[key] is None:
        raise RuleTableLoadError(section, f"missing required key '{key}'")
    return data[key]


def parse_amount(value: Any, currency: Currency, section: str) -> Money:
    """Parse a major-unit amount into Money."""
    if isinstance(value, bool) or isinstance(value, float):
        raise RuleTableLoadError(
            section, f"amount {value!r} must be a quoted string or an integer"
        )
    if not isinstance(value, (str, int, Decimal)):
        raise RuleTableLoadError(section, f"amount {value!r} is not a number")
    try:
        return Money.from_major(value, currency)
    except (ValueError, MoneyError) as e:
        raise RuleTableLoadError(section, str(e)) from e


def _parse_label(enum_cls: Any, value: Any, section: str) -> Any:
    try:
        return enum_cls.parse(value, section)
    except RequestParseError as e:
        raise RuleTableLoadError(section, e.reason) from e


def parse_policy(data: dict[str, Any]) -> QuotationPolicy:
    """Parse the ``policy`` section."""
    validity_days = _require(data, "validity_days", "policy")
    try:
        return QuotationPolicy(validity_days=validity_days)
    except (TypeError, ValueError) as e:
        raise RuleTableLoadError("policy.validity_days", str(e)) from e


def parse_base_rule(data: dict[str, Any], currency: Currency, section: str) -> JurisdictionBaseRule:
    """Parse a jurisdiction ``base`` block."""
    try:
        return JurisdictionBaseRule(
            rule_id=str(_require(data, "rule_id", section)),
            base_amount=parse_amount(_require(data, "amount", section), currency, f"{section}.amount"),
            included_shareholders=_require(data, "included_shareholders", section),
            per_shareholder_amount=parse_amount(
                _require(data, "per_shareholder", section), currency, f"{section}.per_shareholder"
            ),
            per_visa_amount=parse_amount(
                _require(data, "per_visa", section), currency, f"{section}.per_visa"
            ),
            description=str(data.get("description", "")),
        )
    except (TypeError, ValueError) as e:
        raise RuleTableLoadError(section, str(e)) from e


def parse_activity_rule(data: dict[str, Any], currency: Currency, section: str) -> ActivityRule:
    """Parse one entry of an ``activities`` block."""
    try:
        return ActivityRule(
            rule_id=str(_require(data, "rule_id", section)),
            amount=parse_amount(_require(data, "amount", section), currency, f"{section}.amount"),
            description=str(data.get("description", "")),
        )
    except ValueError as e:
        raise RuleTableLoadError(section, str(e)) from e


def parse_office_space_rule(data: dict[str, Any], currency: Currency, section: str) -> OfficeSpaceRule:
    """Parse an ``office_space`` block."""
    method_raw = _require(data, "method", section)
    try:
        method = SurchargeMethod(method_raw)
    except ValueError as e:
        allowed = ", ".join(m.value for m in SurchargeMethod)
        raise RuleTableLoadError(
            f"{section}.method", f"unknown method {method_raw!r}; expected one of {allowed}"
        ) from e

    minimum = data.get("minimum")
    try:
        return OfficeSpaceRule(
            rule_id=str(_require(data, "rule_id", section)),
            method=method,
            amount=parse_amount(_require(data, "amount", section), currency, f"{section}.amount"),
            minimum_amount=(
                parse_amount(minimum, currency, f"{section}.minimum") if minimum is not None else None
            ),
            description=str(data.get("description", "")),
        )
    except ValueError as e:
        raise RuleTableLoadError(section, str(e)) from e


def parse_jurisdiction_block(
    data: dict[str, Any],
    currency: Currency,
    section: str,
) -> list[tuple[RuleKey, FeeDefinition]]:
    """Parse one ``jurisdictions`` entry into (key, definition) pairs."""
    jurisdiction = _parse_label(
        Jurisdiction, _require(data, "jurisdiction", section), f"{section}.jurisdiction"
    )
    emirate = _parse_label(Emirate, _require(data, "emirate", section), f"{section}.emirate")

    pairs: list[tuple[RuleKey, FeeDefinition]] = []
    if "base" in data:
        pairs.append((
            JurisdictionBaseKey(jurisdiction, emirate),
            parse_base_rule(data["base"], currency, f"{section}.base"),
        ))

    activities = data.get("activities") or {}
    if not isinstance(activities, dict):
        raise RuleTableLoadError(f"{section}.activities", "expected a mapping of activity to rule")
    for label, rule_data in activities.items():
        activity_section = f"{section}.activities[{label}]"
        activity = _parse_label(BusinessActivity, label, activity_section)
        pairs.append((
            ActivityKey(jurisdiction, emirate, activity),
            parse_activity_rule(rule_data, currency, activity_section),
        ))

    if data.get("office_space") is not None:
        pairs.append((
            OfficeSpaceKey(jurisdiction, emirate),
            parse_office_space_rule(data["office_space"], currency, f"{section}.office_space"),
        ))
    return pairs


def parse_rule_table(data: dict[str, Any]) -> RuleTable:
    """
    Parse a whole rule-table document.

    Blocks may omit ``base``, ``activities`` or ``office_space``; the table
    then simply lacks those rules and requests that need them resolve to a
    ConfigurationError.
    """
    version = str(_require(data, "version", "document"))
    currency_code = _require(data, "currency", "document")
    try:
        currency = Currency(currency_code)
    except InvalidCurrencyError as e:
        raise RuleTableLoadError("currency", str(e)) from e
    policy = parse_policy(_require(data, "policy", "document"))

    blocks = data.get("jurisdictions") or []
    if not isinstance(blocks, list):
        raise RuleTableLoadError("jurisdictions", "expected a list")

    pairs: list[tuple[RuleKey, FeeDefinition]] = []
    for index, block in enumerate(blocks):
        pairs.extend(parse_jurisdiction_block(block, currency, f"jurisdictions[{index}]"))

    return RuleTable.build(version=version, currency=currency, policy=policy, rules=pairs)


def load_rule_table(path: Path) -> RuleTable:
    """Load and parse a rule-table YAML file."""
    return parse_rule_table(load_yaml_file(path))


# ---------------------------------------------------------------------------
# Checksum
# ---------------------------------------------------------------------------


def _canonical_definition(definition: FeeDefinition) -> dict[str, Any]:
    record: dict[str, Any] = {"kind": definition.kind.value, "rule_id": definition.rule_id}
    if isinstance(definition, JurisdictionBaseRule):
        record.update(
            base=definition.base_amount.minor_units,
            included_shareholders=definition.included_shareholders,
            per_shareholder=definition.per_shareholder_amount.minor_units,
            per_visa=definition.per_visa_amount.minor_units,
        )
    elif isinstance(definition, ActivityRule):
        record.update(amount=definition.amount.minor_units)
    else:
        record.update(
            method=definition.method.value,
            amount=definition.amount.minor_units,
            minimum=(
                definition.minimum_amount.minor_units
                if definition.minimum_amount is not None
                else None
            ),
        )
    return record


def compute_checksum(rule_table: RuleTable) -> str:
    """
    Deterministic SHA-256 of a rule table's pricing content.

    Independent of YAML formatting, comments and block order within the
    document; sensitive to every amount, rule id, key, and the policy.
    """
    rules = sorted(
        ([key.label(), _canonical_definition(definition)] for key, definition in rule_table.items()),
        key=lambda pair: pair[0],
    )
    canonical = json.dumps(
        {
            "version": rule_table.version,
            "currency": rule_table.currency.code,
            "validity_days": rule_table.policy.validity_days,
            "rules": rules,
        },
        sort_keys=True,
        separators=(",", ":"),
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
