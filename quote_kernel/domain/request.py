"""
Request -- the business-setup requirements a quotation is priced from.

Responsibility:
    Defines the closed vocabularies (jurisdiction, emirate, business
    activity, office-space requirement) and the immutable QuotationRequest
    that the engine consumes.  ``QuotationRequest.from_form`` maps the raw
    intake-form shape onto the model.

Architecture position:
    Kernel > Domain -- pure value objects, zero I/O.

Invariants enforced:
    - Every enumerated field holds a member of its closed set; raw labels
      are parsed at construction and unknown labels raise RequestParseError.
    - Activity order is deterministic: lists/tuples keep caller order, sets
      are ordered by declaration order of BusinessActivity.

Non-goals:
    - Range and cardinality checks (shareholders 1-6, visas 0-15, Mainland
      takes exactly one activity) are NOT applied here.  They belong to the
      rule resolver, which reports them as ValidationError result values.
    - Contact details are carried through and never interpreted.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from quote_kernel.exceptions import RequestParseError


class _LabelledEnum(str, Enum):
    """str Enum that can be parsed from its value or a known alias."""

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return {}

    @classmethod
    def parse(cls, label: Any, field_name: str):
        if isinstance(label, cls):
            return label
        if not isinstance(label, str):
            raise RequestParseError(field_name, label, "expected a text label")
        text = label.strip()
        text = cls._aliases().get(text.lower(), text)
        for member in cls:
            if member.value.lower() == text.lower():
                return member
        allowed = ", ".join(m.value for m in cls)
        raise RequestParseError(field_name, label, f"must be one of: {allowed}")


class Jurisdiction(_LabelledEnum):
    """Top-level legal regime governing incorporation."""

    FREEZONE = "Freezone"
    MAINLAND = "Mainland"

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return {"free zone": "Freezone"}


class Emirate(_LabelledEnum):
    """The seven emirates of the UAE."""

    DUBAI = "Dubai"
    ABU_DHABI = "Abu Dhabi"
    SHARJAH = "Sharjah"
    AJMAN = "Ajman"
    RAS_AL_KHAIMAH = "Ras Al Khaimah"
    FUJAIRAH = "Fujairah"
    UMM_AL_QUWAIN = "Umm Al Quwain"

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return {"rak": "Ras Al Khaimah", "uaq": "Umm Al Quwain"}


class BusinessActivity(_LabelledEnum):
    """Licensed business-activity category, priced independently."""

    TRADING = "Trading"
    MANUFACTURING = "Manufacturing"
    SERVICES = "Services or Consultancy"

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return {"services": "Services or Consultancy", "consultancy": "Services or Consultancy"}


class OfficeSpace(_LabelledEnum):
    """Whether the applicant needs physical office space."""

    YES = "Yes"
    NO = "No"
    UNDECIDED = "Undecided"

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return {"not decided yet": "Undecided"}


_ACTIVITY_ORDER = {activity: index for index, activity in enumerate(BusinessActivity)}


@dataclass(frozen=True)
class ContactDetails:
    """Lead contact fields. Carried through the engine untouched."""

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    country_code: str = ""
    mobile: str = ""
    nationality: str = ""

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    @property
    def full_mobile(self) -> str:
        return " ".join(part for part in (self.country_code, self.mobile) if part)


_COUNT_PATTERN = re.compile(r"-?[0-9]+")


def _parse_count(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise RequestParseError(field_name, value, "expected a whole number")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _COUNT_PATTERN.fullmatch(value.strip()):
        return int(value.strip())
    raise RequestParseError(field_name, value, "expected a whole number")


@dataclass(frozen=True)
class QuotationRequest:
    """
    Immutable business-setup request, constructed once per computation.

    ``activities`` is a tuple so that line-item order is reproducible;
    duplicates are kept as given so the resolver can reject them.
    """

    jurisdiction: Jurisdiction
    emirate: Emirate
    activities: tuple[BusinessActivity, ...]
    office_space: OfficeSpace
    shareholders: int
    visas: int
    contact: ContactDetails = field(default_factory=ContactDetails)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "jurisdiction", Jurisdiction.parse(self.jurisdiction, "jurisdiction")
        )
        object.__setattr__(self, "emirate", Emirate.parse(self.emirate, "emirate"))
        object.__setattr__(
            self, "office_space", OfficeSpace.parse(self.office_space, "office_space")
        )
        object.__setattr__(self, "activities", self._normalize_activities(self.activities))
        object.__setattr__(self, "shareholders", _parse_count(self.shareholders, "shareholders"))
        object.__setattr__(self, "visas", _parse_count(self.visas, "visas"))

    @staticmethod
    def _normalize_activities(raw: Any) -> tuple[BusinessActivity, ...]:
        if isinstance(raw, (str, BusinessActivity)):
            raw = (raw,)
        if not isinstance(raw, Iterable):
            raise RequestParseError("activities", raw, "expected a collection of activities")
        parsed = [BusinessActivity.parse(item, "activities") for item in raw]
        if isinstance(raw, (set, frozenset)):
            parsed.sort(key=_ACTIVITY_ORDER.__getitem__)
        return tuple(parsed)

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> QuotationRequest:
        """
        Build a request from the intake form's field names.

        Expected keys: ``type``, ``emirate``, ``businessActivities``,
        ``officeSpace``, ``shareholders``, ``visas`` and the contact fields
        ``firstName``, ``lastName``, ``email``, ``countryCode``, ``mobile``,
        ``nationality``.  Counts may arrive as strings.

        Raises:
            RequestParseError: if a required key is missing or a label is
                outside its closed set.
        """
        def required(key: str) -> Any:
            if key not in form:
                raise RequestParseError(key, None, "field is required")
            return form[key]

        contact = ContactDetails(
            first_name=str(form.get("firstName", "")).strip(),
            last_name=str(form.get("lastName", "")).strip(),
            email=str(form.get("email", "")).strip(),
            country_code=str(form.get("countryCode", "")).strip(),
            mobile=str(form.get("mobile", "")).strip(),
            nationality=str(form.get("nationality", "")).strip(),
        )
        return cls(
            jurisdiction=required("type"),
            emirate=required("emirate"),
            activities=required("businessActivities"),
            office_space=required("officeSpace"),
            shareholders=required("shareholders"),
            visas=required("visas"),
            contact=contact,
        )

    def fingerprint_fields(self) -> dict[str, Any]:
        """Pricing-relevant fields only; contact data is excluded."""
        return {
            "jurisdiction": self.jurisdiction.value,
            "emirate": self.emirate.value,
            "activities": [a.value for a in self.activities],
            "office_space": self.office_space.value,
            "shareholders": self.shareholders,
            "visas": self.visas,
        }
