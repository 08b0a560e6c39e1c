"""
Rules -- closed rule keys, fee definitions, and the versioned RuleTable.

Responsibility:
    Models pricing data as an explicit mapping from a tagged-variant key
    (jurisdiction x emirate [x activity]) to a typed fee-definition record.
    A request dimension with no matching key is a detectable lookup miss,
    never a silently-wrong branch.

Architecture position:
    Kernel > Domain -- pure value objects, zero I/O.  Rule tables are built
    by quote_config from YAML, or directly in tests.

Invariants enforced:
    - Key kind and definition kind always agree (an ActivityKey maps to an
      ActivityRule, never to an OfficeSpaceRule).
    - Each key appears at most once.
    - Every amount in a table is in the table's currency.
    - A RuleTable is read-only after construction; it may be shared across
      concurrent computations without locking.

Failure modes:
    - RuleKindMismatchError, DuplicateRuleError, RuleTableError on an
      impossible table.  These are configuration defects raised at build
      time, long before any request is priced.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from types import MappingProxyType
from typing import ClassVar, Union

from quote_kernel.domain.request import BusinessActivity, Emirate, Jurisdiction
from quote_kernel.domain.values import Currency, Money
from quote_kernel.exceptions import (
    DuplicateRuleError,
    RuleKindMismatchError,
    RuleTableError,
)


class RuleKind(str, Enum):
    """Discriminator shared by rule keys and fee definitions."""

    JURISDICTION_BASE = "jurisdiction-base"
    ACTIVITY = "activity"
    OFFICE_SPACE = "office-space"


# ---------------------------------------------------------------------------
# Rule keys
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class JurisdictionBaseKey:
    """Key for the licence base fee of a jurisdiction in an emirate."""

    kind: ClassVar[RuleKind] = RuleKind.JURISDICTION_BASE

    jurisdiction: Jurisdiction
    emirate: Emirate

    def label(self) -> str:
        return f"{self.kind.value}:{self.jurisdiction.value}/{self.emirate.value}"


@dataclass(frozen=True)
class ActivityKey:
    """Key for one activity category under a jurisdiction and emirate."""

    kind: ClassVar[RuleKind] = RuleKind.ACTIVITY

    jurisdiction: Jurisdiction
    emirate: Emirate
    activity: BusinessActivity

    def label(self) -> str:
        return (
            f"{self.kind.value}:{self.jurisdiction.value}/"
            f"{self.emirate.value}/{self.activity.value}"
        )


@dataclass(frozen=True)
class OfficeSpaceKey:
    """Key for the office-space surcharge of a jurisdiction in an emirate."""

    kind: ClassVar[RuleKind] = RuleKind.OFFICE_SPACE

    jurisdiction: Jurisdiction
    emirate: Emirate

    def label(self) -> str:
        return f"{self.kind.value}:{self.jurisdiction.value}/{self.emirate.value}"


RuleKey = Union[JurisdictionBaseKey, ActivityKey, OfficeSpaceKey]


# ---------------------------------------------------------------------------
# Fee definitions
# ---------------------------------------------------------------------------


def _require_rule_id(rule_id: str) -> None:
    if not rule_id or not rule_id.strip():
        raise ValueError("rule_id is required")


@dataclass(frozen=True)
class JurisdictionBaseRule:
    """
    Licence base fee plus the per-head rates of a jurisdiction.

    ``included_shareholders`` heads are covered by the base fee; each head
    beyond that costs ``per_shareholder_amount``.
    """

    kind: ClassVar[RuleKind] = RuleKind.JURISDICTION_BASE

    rule_id: str
    base_amount: Money
    included_shareholders: int
    per_shareholder_amount: Money
    per_visa_amount: Money
    description: str = ""

    def __post_init__(self) -> None:
        _require_rule_id(self.rule_id)
        if isinstance(self.included_shareholders, bool) or not isinstance(
            self.included_shareholders, int
        ):
            raise TypeError("included_shareholders must be int")
        if self.included_shareholders < 0:
            raise ValueError("included_shareholders cannot be negative")

    def amounts(self) -> tuple[Money, ...]:
        return (self.base_amount, self.per_shareholder_amount, self.per_visa_amount)


@dataclass(frozen=True)
class ActivityRule:
    """Flat fee for one licensed activity."""

    kind: ClassVar[RuleKind] = RuleKind.ACTIVITY

    rule_id: str
    amount: Money
    description: str = ""

    def __post_init__(self) -> None:
        _require_rule_id(self.rule_id)

    def amounts(self) -> tuple[Money, ...]:
        return (self.amount,)


class SurchargeMethod(str, Enum):
    """How an office-space surcharge is computed."""

    FIXED = "fixed"  # amount, regardless of headcount
    PER_VISA = "per_visa"  # amount x visas, floored at minimum_amount


@dataclass(frozen=True)
class OfficeSpaceRule:
    """Office-space surcharge policy."""

    kind: ClassVar[RuleKind] = RuleKind.OFFICE_SPACE

    rule_id: str
    method: SurchargeMethod
    amount: Money
    minimum_amount: Money | None = None
    description: str = ""

    def __post_init__(self) -> None:
        _require_rule_id(self.rule_id)
        object.__setattr__(self, "method", SurchargeMethod(self.method))
        if self.minimum_amount is not None and self.method is SurchargeMethod.FIXED:
            raise ValueError("minimum_amount only applies to per_visa surcharges")

    def surcharge_for(self, visas: int) -> Money:
        """Surcharge owed for a request with ``visas`` visas."""
        if self.method is SurchargeMethod.FIXED:
            return self.amount
        surcharge = self.amount * visas
        if self.minimum_amount is not None and surcharge < self.minimum_amount:
            return self.minimum_amount
        return surcharge

    def amounts(self) -> tuple[Money, ...]:
        if self.minimum_amount is None:
            return (self.amount,)
        return (self.amount, self.minimum_amount)


FeeDefinition = Union[JurisdictionBaseRule, ActivityRule, OfficeSpaceRule]


# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class QuotationPolicy:
    """Quotation-level policy that travels with a rule table."""

    validity_days: int

    def __post_init__(self) -> None:
        if isinstance(self.validity_days, bool) or not isinstance(self.validity_days, int):
            raise TypeError("validity_days must be int")
        if self.validity_days <= 0:
            raise ValueError("validity_days must be positive")

    @property
    def validity(self) -> timedelta:
        return timedelta(days=self.validity_days)


# ---------------------------------------------------------------------------
# Rule table
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class RuleTable:
    """
    Ordered, read-only mapping of rule keys to fee definitions.

    Contract:
        Built once (normally by quote_config), then only read.  Distinct
        versions coexist freely; the engine never asks which one it got.

    Guarantees:
        - ``rules`` is a read-only mapping preserving definition order
        - Key kinds match definition kinds
        - All amounts share ``currency``
    """

    version: str
    currency: Currency
    policy: QuotationPolicy
    rules: Mapping[RuleKey, FeeDefinition] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.version or not self.version.strip():
            raise RuleTableError(str(self.version), "version is required")
        if isinstance(self.currency, str):
            object.__setattr__(self, "currency", Currency(self.currency))
        for key, definition in self.rules.items():
            self._check_entry(key, definition)
        object.__setattr__(self, "rules", MappingProxyType(dict(self.rules)))

    @classmethod
    def build(
        cls,
        *,
        version: str,
        currency: str | Currency,
        policy: QuotationPolicy,
        rules: Iterable[tuple[RuleKey, FeeDefinition]],
    ) -> RuleTable:
        """Build from (key, definition) pairs, rejecting duplicate keys."""
        collected: dict[RuleKey, FeeDefinition] = {}
        for key, definition in rules:
            if key in collected:
                raise DuplicateRuleError(version, key.label())
            collected[key] = definition
        return cls(version=version, currency=currency, policy=policy, rules=collected)

    def _check_entry(self, key: RuleKey, definition: FeeDefinition) -> None:
        if not isinstance(key, (JurisdictionBaseKey, ActivityKey, OfficeSpaceKey)):
            raise RuleTableError(self.version, f"unsupported rule key {key!r}")
        if getattr(definition, "kind", None) is not key.kind:
            raise RuleKindMismatchError(
                self.version,
                key.label(),
                key.kind.value,
                type(definition).__name__,
            )
        for amount in definition.amounts():
            if amount.currency != self.currency:
                raise RuleTableError(
                    self.version,
                    f"rule {definition.rule_id} is priced in {amount.currency}, "
                    f"table currency is {self.currency}",
                )

    def get(self, key: RuleKey) -> FeeDefinition | None:
        return self.rules.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self.rules

    def __len__(self) -> int:
        return len(self.rules)

    def __iter__(self) -> Iterator[RuleKey]:
        return iter(self.rules)

    def items(self) -> Iterable[tuple[RuleKey, FeeDefinition]]:
        return self.rules.items()
