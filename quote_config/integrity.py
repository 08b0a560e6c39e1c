"""
Rule-Table Integrity -- checksum pinning for approved pricing.

When a rule-set directory contains an APPROVED_FINGERPRINT file, the
checksum of the loaded rule table must match the pinned value.  This
prevents unreviewed edits to approved prices from reaching quotations.

The pin file is a single line: the SHA-256 hex string produced by
``quote_config.loader.compute_checksum``.

If no APPROVED_FINGERPRINT file exists, the check is skipped (draft
pricing).
"""

from __future__ import annotations

from pathlib import Path

PINFILE_NAME = "APPROVED_FINGERPRINT"


class ConfigIntegrityError(Exception):
    """Loaded rule-table checksum does not match the approved pin.

    Attributes:
        version: The rule-table version.
        expected: The pinned (approved) checksum.
        actual: The computed checksum.
        pin_path: Path to the APPROVED_FINGERPRINT file.
    """

    code: str = "CONFIG_INTEGRITY_MISMATCH"

    def __init__(self, version: str, expected: str, actual: str, pin_path: Path):
        self.version = version
        self.expected = expected
        self.actual = actual
        self.pin_path = pin_path
        super().__init__(
            f"Rule table integrity check failed for '{version}': "
            f"pinned checksum {expected[:16]}... != "
            f"computed checksum {actual[:16]}... "
            f"(pin file: {pin_path})"
        )


def read_pinned_fingerprint(set_dir: Path) -> str | None:
    """Return the pinned checksum of a rule-set directory, or None if unpinned."""
    pin_path = set_dir / PINFILE_NAME
    if not pin_path.exists():
        return None
    content = pin_path.read_text().strip()
    return content or None


def verify_fingerprint_pin(version: str, checksum: str, set_dir: Path) -> bool:
    """
    Verify a computed checksum against the directory's pin file.

    Returns:
        True if a pin existed and matched, False if there was no pin.

    Raises:
        ConfigIntegrityError: if a pin exists and does not match.
    """
    expected = read_pinned_fingerprint(set_dir)
    if expected is None:
        return False
    if expected != checksum:
        raise ConfigIntegrityError(version, expected, checksum, set_dir / PINFILE_NAME)
    return True


def write_fingerprint_pin(checksum: str, set_dir: Path) -> Path:
    """Pin a checksum as approved for a rule-set directory."""
    pin_path = set_dir / PINFILE_NAME
    pin_path.write_text(checksum + "\n")
    return pin_path
