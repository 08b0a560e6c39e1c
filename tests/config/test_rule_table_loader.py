"""
Tests for YAML rule-table loading, checksums and fingerprint pinning.
"""

import logging

import pytest
import yaml

from quote_config import (
    ConfigIntegrityError,
    RuleTableLoadError,
    available_versions,
    compute_checksum,
    get_active_rule_table,
)
from quote_config.integrity import (
    PINFILE_NAME,
    read_pinned_fingerprint,
    write_fingerprint_pin,
)
from quote_config.loader import parse_rule_table
from quote_kernel.domain.request import BusinessActivity, Emirate, Jurisdiction
from quote_kernel.domain.rules import (
    ActivityKey,
    JurisdictionBaseKey,
    OfficeSpaceKey,
    RuleKind,
    SurchargeMethod,
)
from quote_kernel.exceptions import DuplicateRuleError


def _document(**overrides):
    doc = {
        "version": "draft_v1",
        "currency": "AED",
        "policy": {"validity_days": 14},
        "jurisdictions": [
            {
                "jurisdiction": "Freezone",
                "emirate": "Dubai",
                "base": {
                    "rule_id": "FZ-DXB-BASE",
                    "amount": "10000",
                    "included_shareholders": 1,
                    "per_shareholder": "2000",
                    "per_visa": "1500.50",
                },
                "activities": {
                    "Trading": {"rule_id": "FZ-DXB-TRD", "amount": "3000"},
                },
                "office_space": {
                    "rule_id": "FZ-DXB-OFFICE",
                    "method": "per_visa",
                    "amount": "1000",
                    "minimum": "5000",
                },
            }
        ],
    }
    doc.update(overrides)
    return doc


def _write_set(root, doc, name=None):
    set_dir = root / (name or doc["version"])
    set_dir.mkdir(parents=True)
    (set_dir / "rule_table.yaml").write_text(yaml.safe_dump(doc, sort_keys=False))
    return set_dir


class TestParseRuleTable:
    """Document parsing."""

    def test_parses_document(self):
        table = parse_rule_table(_document())
        assert table.version == "draft_v1"
        assert table.currency.code == "AED"
        assert table.policy.validity_days == 14
        assert len(table) == 3

        base = table.get(JurisdictionBaseKey(Jurisdiction.FREEZONE, Emirate.DUBAI))
        assert base.per_visa_amount.minor_units == 150_050
        office = table.get(OfficeSpaceKey(Jurisdiction.FREEZONE, Emirate.DUBAI))
        assert office.method is SurchargeMethod.PER_VISA
        assert office.minimum_amount.minor_units == 500_000

    def test_float_amount_rejected(self):
        doc = _document()
        doc["jurisdictions"][0]["activities"]["Trading"]["amount"] = 3000.5
        with pytest.raises(RuleTableLoadError) as exc_info:
            parse_rule_table(doc)
        assert exc_info.value.section == "jurisdictions[0].activities[Trading].amount"

    def test_fractional_fils_rejected(self):
        doc = _document()
        doc["jurisdictions"][0]["base"]["amount"] = "10000.005"
        with pytest.raises(RuleTableLoadError):
            parse_rule_table(doc)

    def test_negative_amount_rejected(self):
        doc = _document()
        doc["jurisdictions"][0]["base"]["per_visa"] = "-1"
        with pytest.raises(RuleTableLoadError):
            parse_rule_table(doc)

    def test_missing_key(self):
        doc = _document()
        del doc["jurisdictions"][0]["base"]["rule_id"]
        with pytest.raises(RuleTableLoadError, match="rule_id"):
            parse_rule_table(doc)

    def test_missing_policy(self):
        doc = _document()
        del doc["policy"]
        with pytest.raises(RuleTableLoadError):
            parse_rule_table(doc)

    def test_unknown_emirate(self):
        doc = _document()
        doc["jurisdictions"][0]["emirate"] = "Muscat"
        with pytest.raises(RuleTableLoadError) as exc_info:
            parse_rule_table(doc)
        assert exc_info.value.section == "jurisdictions[0].emirate"

    def test_unknown_currency(self):
        with pytest.raises(RuleTableLoadError) as exc_info:
            parse_rule_table(_document(currency="XXX"))
        assert exc_info.value.section == "currency"

    def test_unknown_surcharge_method(self):
        doc = _document()
        doc["jurisdictions"][0]["office_space"]["method"] = "per_square_metre"
        with pytest.raises(RuleTableLoadError, match="unknown method"):
            parse_rule_table(doc)

    def test_partial_block(self):
        doc = _document()
        del doc["jurisdictions"][0]["office_space"]
        del doc["jurisdictions"][0]["base"]
        table = parse_rule_table(doc)
        assert len(table) == 1

    def test_duplicate_block_rejected(self):
        doc = _document()
        doc["jurisdictions"].append(doc["jurisdictions"][0])
        with pytest.raises(DuplicateRuleError):
            parse_rule_table(doc)


class TestChecksum:
    def test_stable_across_loads(self):
        assert compute_checksum(parse_rule_table(_document())) == compute_checksum(
            parse_rule_table(_document())
        )

    def test_changes_with_amount(self):
        changed = _document()
        changed["jurisdictions"][0]["activities"]["Trading"]["amount"] = "3001"
        assert compute_checksum(parse_rule_table(_document())) != compute_checksum(
            parse_rule_table(changed)
        )

    def test_changes_with_policy(self):
        assert compute_checksum(parse_rule_table(_document())) != compute_checksum(
            parse_rule_table(_document(policy={"validity_days": 15}))
        )


class TestGetActiveRuleTable:
    """The public configuration entrypoint."""

    def test_loads_from_directory(self, tmp_path, caplog):
        caplog.set_level(logging.INFO, logger="quote_kernel")
        _write_set(tmp_path, _document())
        table = get_active_rule_table("draft_v1", config_dir=tmp_path)
        assert table.version == "draft_v1"

        traces = [r for r in caplog.records if r.getMessage() == "QUOTE_CONFIG_TRACE"]
        assert traces[0].checksum == compute_checksum(table)
        assert traces[0].checksum_pinned is False

    def test_missing_version(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_rule_table("nope", config_dir=tmp_path)

    def test_version_must_match_directory(self, tmp_path):
        _write_set(tmp_path, _document(), name="other_name")
        with pytest.raises(RuleTableLoadError) as exc_info:
            get_active_rule_table("other_name", config_dir=tmp_path)
        assert exc_info.value.section == "version"

    def test_matching_pin(self, tmp_path, caplog):
        caplog.set_level(logging.INFO, logger="quote_kernel")
        set_dir = _write_set(tmp_path, _document())
        checksum = compute_checksum(parse_rule_table(_document()))
        write_fingerprint_pin(checksum, set_dir)

        get_active_rule_table("draft_v1", config_dir=tmp_path)
        traces = [r for r in caplog.records if r.getMessage() == "QUOTE_CONFIG_TRACE"]
        assert traces[0].checksum_pinned is True

    def test_mismatched_pin(self, tmp_path):
        set_dir = _write_set(tmp_path, _document())
        (set_dir / PINFILE_NAME).write_text("0" * 64 + "\n")
        with pytest.raises(ConfigIntegrityError) as exc_info:
            get_active_rule_table("draft_v1", config_dir=tmp_path)
        assert exc_info.value.expected == "0" * 64

    def test_empty_pin_is_unpinned(self, tmp_path):
        set_dir = _write_set(tmp_path, _document())
        (set_dir / PINFILE_NAME).write_text("\n")
        assert read_pinned_fingerprint(set_dir) is None

    def test_available_versions(self, tmp_path):
        _write_set(tmp_path, _document(version="b_v1"))
        _write_set(tmp_path, _document(version="a_v1"))
        (tmp_path / "empty").mkdir()
        assert available_versions(tmp_path) == ("a_v1", "b_v1")

    def test_available_versions_missing_dir(self, tmp_path):
        assert available_versions(tmp_path / "absent") == ()


class TestBundledRuleTable:
    """The shipped uae_standard_v1 set."""

    def test_bundled_versions(self):
        assert "uae_standard_v1" in available_versions()

    def test_full_coverage(self, bundled_rule_table):
        kinds = [key.kind for key in bundled_rule_table]
        assert kinds.count(RuleKind.JURISDICTION_BASE) == 14
        assert kinds.count(RuleKind.ACTIVITY) == 42
        assert kinds.count(RuleKind.OFFICE_SPACE) == 14

        for jurisdiction in Jurisdiction:
            for emirate in Emirate:
                for activity in BusinessActivity:
                    assert ActivityKey(jurisdiction, emirate, activity) in bundled_rule_table

    def test_freezone_dubai_prices(self, bundled_rule_table):
        base = bundled_rule_table.get(JurisdictionBaseKey(Jurisdiction.FREEZONE, Emirate.DUBAI))
        assert base.base_amount.minor_units == 1_000_000
        trading = bundled_rule_table.get(
            ActivityKey(Jurisdiction.FREEZONE, Emirate.DUBAI, BusinessActivity.TRADING)
        )
        assert trading.amount.minor_units == 300_000

    def test_policy(self, bundled_rule_table):
        assert bundled_rule_table.policy.validity_days == 30
        assert bundled_rule_table.currency.code == "AED"
