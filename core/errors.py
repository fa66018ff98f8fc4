"""Exception hierarchy for the bisection tooling."""


class ThreatSliceError(Exception):
    """Base class for every error surfaced to the command line."""


class ConfigError(ThreatSliceError):
    """Raised when an environment or command line setting is unusable."""


class FatalIOError(ThreatSliceError):
    """Reading the target or writing the scratch prefix failed."""


class ScannerNotFoundError(ThreatSliceError):
    """No scanner executable exists at any configured location."""


class InconclusiveScanError(ThreatSliceError):
    """The scanner kept producing unusable reports for one prefix."""

    def __init__(self, message, length=None, reason=None):
        super().__init__(message)
        self.length = length
        self.reason = reason


class BudgetExceededError(ThreatSliceError):
    """The overall wall-clock budget ran out before the window collapsed."""

    def __init__(self, message, last_good=0, upper_bound=0, elapsed=0.0):
        super().__init__(message)
        self.last_good = last_good
        self.upper_bound = upper_bound
        self.elapsed = elapsed


__all__ = [
    "ThreatSliceError",
    "ConfigError",
    "FatalIOError",
    "ScannerNotFoundError",
    "InconclusiveScanError",
    "BudgetExceededError",
]
