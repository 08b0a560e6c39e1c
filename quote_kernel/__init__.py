"""
Quote Kernel - pure domain layer for business-setup quotations.

- Immutable request, rule-table, and quotation value objects
- Integer minor-unit money arithmetic
- Result values for validation and configuration failures
- Structured JSON logging
"""

__version__ = "0.1.0"
