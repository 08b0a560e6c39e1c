"""
Module: quote_engines
Responsibility:
    Package entrypoint re-exporting the pure quotation engine stages.  This
    is the canonical import surface for higher layers (quote_services).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import quote_kernel.  MUST NOT import quote_config or
    quote_services.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()``; the assembler reads
      time from an injected Clock.
    - Integer minor-unit arithmetic only.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from quote_engines import compute
    from quote_engines.resolver import resolve
    from quote_engines.calculator import FeeCalculator
    from quote_engines.assembler import assemble
"""

from quote_engines.assembler import assemble
from quote_engines.calculator import FeeCalculator, calculate
from quote_engines.quotation_engine import compute
from quote_engines.resolver import (
    OfficeSpaceOutcome,
    ResolvedActivity,
    ResolvedRuleSet,
    resolve,
    validate_request,
)
from quote_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    "FeeCalculator",
    "OfficeSpaceOutcome",
    "ResolvedActivity",
    "ResolvedRuleSet",
    "assemble",
    "calculate",
    "compute",
    "compute_input_fingerprint",
    "resolve",
    "traced_engine",
    "validate_request",
]
