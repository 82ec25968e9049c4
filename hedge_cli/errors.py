"""
Error Taxonomy — LP Hedge CLI
=============================

  • ValidationError      → caller-supplied parameters break domain rules
  • OutOfRangeError      → entry price outside the liquidity range
  • DegenerateRangeError → range/price makes the liquidity math singular
  • FetchError           → price-quote request or parse failure

Lenient engine wrappers catch the math errors and substitute documented
defaults. ValidationError and FetchError always reach the caller.
"""

from typing import List


class HedgeCalcError(Exception):
    """Base class for every error raised by this project."""


class ValidationError(HedgeCalcError):
    """One or more input parameters violate domain constraints.

    All violations are collected, not just the first one.
    """

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid input")


class OutOfRangeError(HedgeCalcError, ValueError):
    """Entry price lies outside [lower, upper]."""


class DegenerateRangeError(HedgeCalcError, ValueError):
    """Non-positive prices or a non-positive liquidity denominator."""


class FetchError(HedgeCalcError, RuntimeError):
    """Price-quote endpoint unreachable, non-2xx, or missing the price field."""
