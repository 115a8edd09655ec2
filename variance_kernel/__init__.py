"""
Variance Kernel - shared foundation for variance analysis.

Provides the pieces every other package builds on:
- Immutable variance records and datasets
- Closed workflow enums and significance thresholds
- Typed exceptions with machine-readable codes
- Structured JSON logging
- Injectable clock and SQLAlchemy database plumbing
"""

__version__ = "0.1.0"
