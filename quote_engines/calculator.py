"""
Fee Calculator -- turn resolved rules into priced line items.

Pure functions with no I/O; rules arrive already resolved.

Line order (display order):
    1. jurisdiction base
    2. one line per activity, in request order
    3. shareholders (always emitted, zero when within the included heads)
    4. visas (always emitted, zero when no visas)
    5. office space (only when a surcharge rule was resolved)

All arithmetic is integer minor units; there is no intermediate float or
Decimal representation.

Usage:
    from quote_engines.calculator import FeeCalculator

    items = FeeCalculator().calculate(resolved, request)
"""

from __future__ import annotations

import time

from quote_engines.resolver import OfficeSpaceOutcome, ResolvedRuleSet
from quote_engines.tracer import traced_engine
from quote_kernel.domain.quotation import LineCategory, LineItem
from quote_kernel.domain.request import QuotationRequest
from quote_kernel.domain.rules import JurisdictionBaseRule
from quote_kernel.domain.values import Money
from quote_kernel.logging_config import get_logger

logger = get_logger("engines.calculator")


class FeeCalculator:
    """
    Aggregate resolved rules into category-tagged line items.

    No bulk discount is ever applied implicitly: each activity is priced
    by its own rule.
    """

    def calculate(
        self,
        resolved: ResolvedRuleSet,
        request: QuotationRequest,
    ) -> tuple[LineItem, ...]:
        """
        Price a request against its resolved rules.

        Args:
            resolved: Output of ``quote_engines.resolver.resolve``.
            request: The validated request the rules were resolved for.

        Returns:
            Line items in computation order.
        """
        t0 = time.monotonic()
        base = resolved.jurisdiction_base

        items: list[LineItem] = [
            LineItem(
                category=LineCategory.JURISDICTION_BASE,
                description=base.description
                or f"{request.jurisdiction.value} licence ({request.emirate.value})",
                amount=base.base_amount,
                rule_id=base.rule_id,
            )
        ]

        for resolved_activity in resolved.activities:
            rule = resolved_activity.rule
            items.append(
                LineItem(
                    category=LineCategory.ACTIVITY,
                    description=rule.description
                    or f"Business activity: {resolved_activity.activity.value}",
                    amount=rule.amount,
                    rule_id=rule.rule_id,
                )
            )

        items.append(self._shareholder_line(base, request.shareholders))
        items.append(
            LineItem(
                category=LineCategory.VISA,
                description=f"Visas ({request.visas})",
                amount=base.per_visa_amount * request.visas,
                rule_id=base.rule_id,
            )
        )

        if resolved.office_space is OfficeSpaceOutcome.SURCHARGED:
            office_rule = resolved.office_space_rule
            assert office_rule is not None
            items.append(
                LineItem(
                    category=LineCategory.OFFICE_SPACE,
                    description=office_rule.description or "Office space",
                    amount=office_rule.surcharge_for(request.visas),
                    rule_id=office_rule.rule_id,
                )
            )

        result = tuple(items)
        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        logger.info("fee_calculation_completed", extra={
            "line_item_count": len(result),
            "activity_count": len(resolved.activities),
            "office_space": resolved.office_space.value,
            "duration_ms": duration_ms,
        })
        return result

    @staticmethod
    def _shareholder_line(base: JurisdictionBaseRule, shareholders: int) -> LineItem:
        extra_heads = max(0, shareholders - base.included_shareholders)
        amount: Money = base.per_shareholder_amount * extra_heads
        return LineItem(
            category=LineCategory.SHAREHOLDER,
            description=(
                f"Shareholders ({shareholders}, "
                f"{base.included_shareholders} included)"
            ),
            amount=amount,
            rule_id=base.rule_id,
        )


_default_calculator = FeeCalculator()


@traced_engine("calculator", "1.0", fingerprint_fields=("request",))
def calculate(resolved: ResolvedRuleSet, request: QuotationRequest) -> tuple[LineItem, ...]:
    """Module-level entry point using a shared stateless FeeCalculator."""
    return _default_calculator.calculate(resolved, request)
