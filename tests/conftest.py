"""
Pytest fixtures for the quotation engine test suite.

Provides:
- A fixed clock for replayable computations
- A small in-memory rule table with known prices
- A request factory with sensible defaults
- The bundled YAML rule table
- Logging isolation between tests
"""

from datetime import datetime, timezone

import pytest

from quote_config import get_active_rule_table
from quote_kernel.domain.clock import FixedClock
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
    JurisdictionBaseKey,
    JurisdictionBaseRule,
    OfficeSpaceKey,
    OfficeSpaceRule,
    QuotationPolicy,
    RuleTable,
    SurchargeMethod,
)
from quote_kernel.domain.values import Money
from quote_kernel.logging_config import LogContext, reset_logging

FZ = Jurisdiction.FREEZONE
ML = Jurisdiction.MAINLAND

COMPUTED_AT = datetime(2025, 3, 1, 10, 30, 0, tzinfo=timezone.utc)


def aed(major: str) -> Money:
    return Money.from_major(major, "AED")


# ---------------------------------------------------------------------------
# Logging fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _isolate_logging():
    """Reset the quote_kernel logger hierarchy and context between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(COMPUTED_AT)


# ---------------------------------------------------------------------------
# Rule tables
# ---------------------------------------------------------------------------


def _test_rules():
    return [
        # Freezone / Dubai: fully covered
        (
            JurisdictionBaseKey(FZ, Emirate.DUBAI),
            JurisdictionBaseRule(
                rule_id="FZ-DXB-BASE",
                base_amount=aed("10000"),
                included_shareholders=1,
                per_shareholder_amount=aed("2000"),
                per_visa_amount=aed("1500"),
            ),
        ),
        (ActivityKey(FZ, Emirate.DUBAI, BusinessActivity.TRADING),
         ActivityRule(rule_id="FZ-DXB-TRD", amount=aed("3000"))),
        (ActivityKey(FZ, Emirate.DUBAI, BusinessActivity.MANUFACTURING),
         ActivityRule(rule_id="FZ-DXB-MFG", amount=aed("4500"))),
        (ActivityKey(FZ, Emirate.DUBAI, BusinessActivity.SERVICES),
         ActivityRule(rule_id="FZ-DXB-SVC", amount=aed("2500"))),
        (OfficeSpaceKey(FZ, Emirate.DUBAI),
         OfficeSpaceRule(rule_id="FZ-DXB-OFFICE", method=SurchargeMethod.FIXED,
                         amount=aed("8000"))),
        # Mainland / Abu Dhabi: no Manufacturing rule
        (
            JurisdictionBaseKey(ML, Emirate.ABU_DHABI),
            JurisdictionBaseRule(
                rule_id="ML-AUH-BASE",
                base_amount=aed("14000"),
                included_shareholders=2,
                per_shareholder_amount=aed("1500"),
                per_visa_amount=aed("3000"),
            ),
        ),
        (ActivityKey(ML, Emirate.ABU_DHABI, BusinessActivity.TRADING),
         ActivityRule(rule_id="ML-AUH-TRD", amount=aed("4800"))),
        (OfficeSpaceKey(ML, Emirate.ABU_DHABI),
         OfficeSpaceRule(rule_id="ML-AUH-OFFICE", method=SurchargeMethod.PER_VISA,
                         amount=aed("2400"), minimum_amount=aed("14000"))),
        # Freezone / Sharjah: base and activities, no office-space rule
        (
            JurisdictionBaseKey(FZ, Emirate.SHARJAH),
            JurisdictionBaseRule(
                rule_id="FZ-SHJ-BASE",
                base_amount=aed("6500"),
                included_shareholders=1,
                per_shareholder_amount=aed("1500"),
                per_visa_amount=aed("1250"),
            ),
        ),
        (ActivityKey(FZ, Emirate.SHARJAH, BusinessActivity.TRADING),
         ActivityRule(rule_id="FZ-SHJ-TRD", amount=aed("2000"))),
        # Ajman: nothing at all
    ]


@pytest.fixture
def rule_table() -> RuleTable:
    """In-memory rule table with the prices used throughout the tests."""
    return RuleTable.build(
        version="test_v1",
        currency="AED",
        policy=QuotationPolicy(validity_days=30),
        rules=_test_rules(),
    )


@pytest.fixture
def bundled_rule_table() -> RuleTable:
    """The rule table shipped in quote_config/sets."""
    return get_active_rule_table()


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


@pytest.fixture
def make_request():
    """Factory for QuotationRequest with Freezone/Dubai/Trading defaults."""

    def _make(**overrides) -> QuotationRequest:
        fields = {
            "jurisdiction": FZ,
            "emirate": Emirate.DUBAI,
            "activities": (BusinessActivity.TRADING,),
            "office_space": OfficeSpace.NO,
            "shareholders": 1,
            "visas": 0,
            "contact": ContactDetails(
                first_name="Layla",
                last_name="Haddad",
                email="layla@example.com",
                country_code="+971",
                mobile="551234567",
                nationality="Jordan",
            ),
        }
        fields.update(overrides)
        return QuotationRequest(**fields)

    return _make
