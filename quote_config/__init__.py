"""
quote_config -- single public entrypoint for pricing configuration.

Responsibility:
    Provides the ONLY way to obtain a rule table at runtime through
    ``get_active_rule_table()``.  No other component reads rule-table files
    or environment variables.  Returns a frozen kernel ``RuleTable``.

Architecture position:
    Configuration -- YAML-driven pricing data.  Sits above quote_kernel and
    below quote_services.  The kernel and engines MUST NEVER import from
    quote_config.

Invariants enforced:
    - Single entrypoint: all runtime pricing flows through
      ``get_active_rule_table()``.
    - Checksum pinning: when an APPROVED_FINGERPRINT file exists next to a
      rule table, the computed checksum must match it.
    - Deterministic loading: the same YAML always produces the same
      checksum.

Failure modes:
    - ``FileNotFoundError`` -- no rule set with the requested version.
    - ``RuleTableLoadError`` -- structural problems in the YAML document.
    - ``ConfigIntegrityError`` -- checksum mismatch against a pin file.

Audit relevance:
    Every successful call emits a ``QUOTE_CONFIG_TRACE`` log entry with the
    version, checksum, currency, rule count and validity policy, tying each
    quotation back to the exact pricing that produced it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from quote_config.integrity import ConfigIntegrityError, verify_fingerprint_pin
from quote_config.loader import (
    RuleTableLoadError,
    compute_checksum,
    load_rule_table,
)
from quote_kernel.domain.rules import RuleTable

_logger = logging.getLogger("quote_kernel.config")

_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"
RULE_TABLE_FILENAME = "rule_table.yaml"
DEFAULT_VERSION = "uae_standard_v1"


def available_versions(config_dir: Path | None = None) -> tuple[str, ...]:
    """Rule-set directories under ``config_dir`` that contain a rule table."""
    root = config_dir or _DEFAULT_CONFIG_DIR
    if not root.is_dir():
        return ()
    return tuple(
        sorted(p.name for p in root.iterdir() if (p / RULE_TABLE_FILENAME).is_file())
    )


def get_active_rule_table(
    version: str = DEFAULT_VERSION,
    config_dir: Path | None = None,
) -> RuleTable:
    """The ONLY public rule-table entrypoint.

    Args:
        version: Rule-set directory name (and expected document version).
        config_dir: Root holding rule-set directories.  Defaults to the
            bundled ``quote_config/sets``.

    Returns:
        A validated, frozen RuleTable.

    Raises:
        FileNotFoundError: if the rule set does not exist.
        RuleTableLoadError: if the document is malformed or its declared
            version differs from the directory name.
        ConfigIntegrityError: if a pinned checksum does not match.
    """
    set_dir = (config_dir or _DEFAULT_CONFIG_DIR) / version
    path = set_dir / RULE_TABLE_FILENAME
    if not path.is_file():
        raise FileNotFoundError(
            f"No rule table for version '{version}' at {path}; "
            f"available: {', '.join(available_versions(config_dir)) or 'none'}"
        )

    rule_table = load_rule_table(path)
    if rule_table.version != version:
        raise RuleTableLoadError(
            "version",
            f"document declares '{rule_table.version}' but lives in '{version}'",
        )

    checksum = compute_checksum(rule_table)
    pinned = verify_fingerprint_pin(rule_table.version, checksum, set_dir)

    _logger.info(
        "QUOTE_CONFIG_TRACE",
        extra={
            "trace_type": "QUOTE_CONFIG_TRACE",
            "rule_table_version": rule_table.version,
            "checksum": checksum,
            "checksum_pinned": pinned,
            "currency": rule_table.currency.code,
            "rule_count": len(rule_table),
            "validity_days": rule_table.policy.validity_days,
        },
    )
    return rule_table


__all__ = [
    "ConfigIntegrityError",
    "DEFAULT_VERSION",
    "RuleTableLoadError",
    "available_versions",
    "compute_checksum",
    "get_active_rule_table",
]
