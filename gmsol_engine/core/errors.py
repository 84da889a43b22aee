"""Exception types for the valuation engine.

Absent inputs and degenerate denominators are not errors here: the kernels
return ``None`` for those. The exceptions below signal programming or data
errors that must not be silently absorbed.
"""

from __future__ import annotations


class DecimalMismatchError(ValueError):
    """Raised when two scaled amounts with different exponents are combined."""

    def __init__(self, left: int, right: int) -> None:
        self.left = left
        self.right = right
        super().__init__(f"decimal exponent mismatch: {left} != {right}")


class ConfigError(RuntimeError):
    """Raised when a deployment configuration is missing or malformed."""


class SnapshotError(ValueError):
    """Raised when a raw chain snapshot cannot be decoded."""
