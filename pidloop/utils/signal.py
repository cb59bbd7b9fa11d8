import numpy as np

from ..core.errors import ConfigurationError


def modulus(x: float) -> float:
    return -x if x < 0 else x


def within_accuracy(value, target, accuracy):
    """True when |value - target| <= accuracy. Exactly zero distance always counts."""
    return modulus(value - target) <= accuracy


def require_finite(name, value):
    try:
        ok = bool(np.isfinite(value))
    except TypeError:
        ok = False
    if not ok:
        raise ConfigurationError(f"{name} must be a finite number, got {value!r}")
    return float(value)


def require_non_negative(name, value):
    value = require_finite(name, value)
    if value < 0:
        raise ConfigurationError(f"{name} must be >= 0, got {value}")
    return value
