"""Utility modules for variance analysis."""

from variance_kernel.utils.formatting import format_currency, format_percent

__all__ = [
    "format_currency",
    "format_percent",
]
