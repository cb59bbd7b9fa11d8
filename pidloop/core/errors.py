class PIDError(Exception):
    """Base for all controller errors."""


class ConfigurationError(PIDError, ValueError):
    """Invalid numeric configuration (gains, edges, limits)."""


class StateError(PIDError, RuntimeError):
    """Lifecycle invariant violated."""
