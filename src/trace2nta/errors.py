"""Exception types raised by trace2nta."""


class Trace2NtaError(Exception):
    """Base class for all trace2nta errors."""
    pass


class ModelError(Trace2NtaError, ValueError):
    """Raised when the automaton model breaks one of its invariants."""
    pass


class TraceError(Trace2NtaError):
    """Raised when a statement trace cannot be loaded."""
    pass


class ConfigError(Trace2NtaError):
    """Raised when a configuration file is invalid."""
    pass


class RunInProgressError(Trace2NtaError):
    """Raised when a build context is already used by another run."""
    pass
