"""
Exception hierarchy for the spiral cleaner.

Every error is a precondition violation raised before any partial result
is built, so callers can skip the offending event and carry on.
"""


class SpiralCleanerError(Exception):
    """Base class for all recoverable cleaning errors."""


class ConfigurationError(SpiralCleanerError, ValueError):
    """A configuration value is out of range for the configured bin counts."""


class OutOfRangeError(SpiralCleanerError, IndexError):
    """A requested angular slice or peak window lies outside the accumulator."""


class DegenerateInputError(SpiralCleanerError, ValueError):
    """Input data cannot produce a meaningful result."""


class NoPeakError(DegenerateInputError):
    """A peak refinement window carries zero total vote weight."""

    def __init__(self, position, first_bin, last_bin):
        self.position = position
        self.first_bin = first_bin
        self.last_bin = last_bin
        super().__init__(
            f"No votes in peak window [{first_bin}, {last_bin}] around bin {position}"
        )
