"""
quote_services.rule_table_provider -- atomic rule-table snapshots.

Responsibility:
    Holds the rule table that new computations should price against and
    lets operators publish a new version at runtime.  Each computation
    takes one snapshot up front and keeps it for its whole run, so a
    reload can never be observed half-applied.

Architecture position:
    Services -- stateful holder over quote_config and quote_kernel.
    Engines never see the provider, only the RuleTable it hands out.

Invariants enforced:
    - Publishing replaces the reference in one step under a lock; readers
      get either the old table or the new one.
    - Tables themselves are immutable, so readers need no lock.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from pathlib import Path

from quote_config import DEFAULT_VERSION, compute_checksum, get_active_rule_table
from quote_kernel.domain.rules import RuleTable
from quote_kernel.logging_config import get_logger

logger = get_logger("services.rule_table_provider")


class RuleTableProvider:
    """
    Current rule-table snapshot with atomic replacement.

    Contract:
        ``snapshot()`` is safe to call from any thread.  ``publish()`` and
        ``reload()`` swap the current table atomically.
    """

    def __init__(
        self,
        initial: RuleTable,
        loader: Callable[[str], RuleTable] | None = None,
    ):
        self._lock = threading.Lock()
        self._current = initial
        self._loader = loader

    @classmethod
    def from_config(
        cls,
        version: str = DEFAULT_VERSION,
        config_dir: Path | None = None,
    ) -> RuleTableProvider:
        """Provider that loads (and reloads) tables through quote_config."""

        def load(v: str) -> RuleTable:
            return get_active_rule_table(v, config_dir=config_dir)

        return cls(load(version), loader=load)

    def snapshot(self) -> RuleTable:
        with self._lock:
            return self._current

    @property
    def version(self) -> str:
        return self.snapshot().version

    def publish(self, rule_table: RuleTable) -> RuleTable:
        """Make ``rule_table`` current; returns the table it replaced."""
        with self._lock:
            previous = self._current
            self._current = rule_table
        logger.info("rule_table_published", extra={
            "previous_version": previous.version,
            "rule_table_version": rule_table.version,
            "checksum": compute_checksum(rule_table),
            "rule_count": len(rule_table),
        })
        return previous

    def reload(self, version: str | None = None) -> RuleTable:
        """
        Load ``version`` (default: the current version) and publish it.

        The table is fully loaded and validated before the swap, so a failed
        load leaves the current table in place.

        Raises:
            RuntimeError: if the provider was built without a loader.
        """
        if self._loader is None:
            raise RuntimeError("RuleTableProvider has no loader; use publish()")
        table = self._loader(version or self.version)
        self.publish(table)
        return table
