#!/usr/bin/env python3
"""
Compute a business-setup quotation from the command line.

Loads the bundled rule set through quote_config, runs the engine once, and
prints the itemized quotation (or the error that stopped it).

Usage:
    python3 scripts/demo_quote.py --type Freezone --emirate Dubai --activity Trading
    python3 scripts/demo_quote.py --type Freezone --emirate Sharjah \\
        --activity Trading --activity Manufacturing --visas 3 --office-space Yes
    python3 scripts/demo_quote.py --type Mainland --emirate "Abu Dhabi" \\
        --activity Trading --json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from quote_config import DEFAULT_VERSION, available_versions  # noqa: E402
from quote_kernel.domain.clock import SystemClock  # noqa: E402
from quote_kernel.domain.request import QuotationRequest  # noqa: E402
from quote_kernel.exceptions import RequestParseError  # noqa: E402
from quote_kernel.logging_config import configure_logging  # noqa: E402
from quote_services import (  # noqa: E402
    LoggingLeadSink,
    QuotationService,
    RuleTableProvider,
    line_item_pairs,
)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compute a business-setup quotation.")
    parser.add_argument("--type", dest="jurisdiction", default="Freezone",
                        help="Freezone or Mainland (default: Freezone)")
    parser.add_argument("--emirate", default="Dubai")
    parser.add_argument("--activity", dest="activities", action="append", default=[],
                        help="Business activity; repeat for several (Freezone only)")
    parser.add_argument("--office-space", default="No",
                        help="Yes, No or 'Not decided yet'")
    parser.add_argument("--shareholders", default="1")
    parser.add_argument("--visas", default="0")
    parser.add_argument("--first-name", default="")
    parser.add_argument("--last-name", default="")
    parser.add_argument("--email", default="")
    parser.add_argument("--rule-set", default=DEFAULT_VERSION,
                        choices=available_versions() or None)
    parser.add_argument("--json", action="store_true", help="Print the breakdown as JSON")
    parser.add_argument("--log", action="store_true", help="Emit structured logs to stderr")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if args.log:
        configure_logging(level=logging.DEBUG)

    try:
        request = QuotationRequest.from_form({
            "type": args.jurisdiction,
            "emirate": args.emirate,
            "businessActivities": args.activities,
            "officeSpace": args.office_space,
            "shareholders": args.shareholders,
            "visas": args.visas,
            "firstName": args.first_name,
            "lastName": args.last_name,
            "email": args.email,
        })
    except RequestParseError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 2

    service = QuotationService(
        RuleTableProvider.from_config(args.rule_set),
        clock=SystemClock(),
        sink=LoggingLeadSink() if args.log else None,
    )
    outcome = service.quote(request)
    result = outcome.result

    if not result:
        error = result.error
        print(f"No quotation [{error.code}]: {error.message}", file=sys.stderr)
        return 1

    quotation = result.unwrap()
    if args.json:
        print(json.dumps({
            "rule_table_version": quotation.rule_table_version,
            "currency": quotation.currency.code,
            "lines": line_item_pairs(quotation),
            "provisional": quotation.is_provisional,
            "valid_until": quotation.valid_until.isoformat(),
        }, indent=2))
        return 0

    print(f"Quotation ({quotation.rule_table_version})")
    print("-" * 60)
    for item in quotation.line_items:
        print(f"  {item.description:<40} {item.amount.format():>16}")
    print("-" * 60)
    print(f"  {'Total':<40} {quotation.total.format():>16}")
    if quotation.is_provisional:
        print("  Provisional: office-space requirement not decided yet")
    print(f"  Valid until {quotation.valid_until:%Y-%m-%d %H:%M} UTC")
    return 0


if __name__ == "__main__":
    sys.exit(main())
