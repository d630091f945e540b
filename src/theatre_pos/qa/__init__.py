"""QA module for nightly report reconciliation.

Example:
    >>> from theatre_pos.reports import aggregate
    >>> from theatre_pos.qa import verify
    >>>
    >>> report = aggregate(orders, "2025-01-15")
    >>> result = verify(report)
    >>> if not result.passed:
    ...     for d in result.errors:
    ...         print(d.kind, d.expected, d.actual, d.delta)

"""

from theatre_pos.qa.verify import Discrepancy, VerificationResult, verify

__all__ = ["Discrepancy", "VerificationResult", "verify"]
