from .state import ControllerState, Status, OutputPolicy, DEFAULT_MAX_ROUND, DEFAULT_ACCURACY, WORKING_FIELDS
from .errors import ConfigurationError, StateError
from ..utils.signal import require_finite, require_non_negative
from ..utils.diag import emit


def _gains(kp, ki, kd):
    return require_finite('kp', kp), require_finite('ki', ki), require_finite('kd', kd)


def _zero_working(state: ControllerState):
    for name in WORKING_FIELDS:
        setattr(state, name, 0.0)


def init(state: ControllerState, kp, ki, kd):
    """Enable the instance with the given gains and default round/accuracy limits.
    Must run before any control law.
    """
    state.kp, state.ki, state.kd = _gains(kp, ki, kd)
    state.status = Status.ENABLED
    state.output_policy = OutputPolicy.RESET_ON_COMPLETE
    _zero_working(state)
    state.round = 0
    state.max_round = DEFAULT_MAX_ROUND
    state.accuracy = DEFAULT_ACCURACY
    state.last_round = 0
    state.converged = False


def deinit(state: ControllerState):
    state.status = Status.UNINITIALIZED
    state.output_policy = OutputPolicy.RESET_ON_COMPLETE
    state.kp = state.ki = state.kd = 0.0
    _zero_working(state)
    state.round = 0
    state.max_round = 0
    state.accuracy = 0.0
    state.last_round = 0
    state.converged = False


def configure(state: ControllerState, output_policy, max_round):
    if not isinstance(output_policy, OutputPolicy):
        raise ConfigurationError(f"output_policy must be an OutputPolicy, got {output_policy!r}")
    if isinstance(max_round, bool) or not isinstance(max_round, int) or max_round < 0:
        raise ConfigurationError(f"max_round must be a non-negative int, got {max_round!r}")
    state.output_policy = output_policy
    state.max_round = max_round


def set_accuracy(state: ControllerState, accuracy):
    state.accuracy = require_non_negative('accuracy', accuracy)


def reset_round(state: ControllerState):
    state.round = 0


def reset_param(state: ControllerState, kp, ki, kd, log_fn=None):
    """Swap gains on an enabled instance. A disabled or uninitialized one is
    reinitialized instead, and that is reported through log_fn.
    """
    if state.status is Status.ENABLED:
        state.kp, state.ki, state.kd = _gains(kp, ki, kd)
    elif state.status is Status.DISABLED:
        init(state, kp, ki, kd)
        emit(log_fn, "[PID] instance was disabled, reinitialized")
    elif state.status is Status.UNINITIALIZED:
        init(state, kp, ki, kd)
        emit(log_fn, "[PID] instance was uninitialized, reinitialized")
    else:
        raise StateError(f"unrepresentable status {state.status!r}")


def disable(state: ControllerState):
    if state.status is Status.UNINITIALIZED:
        raise StateError("cannot disable an uninitialized instance")
    state.status = Status.DISABLED


def enable(state: ControllerState):
    if state.status is Status.UNINITIALIZED:
        raise StateError("instance is uninitialized, call init() first")
    state.status = Status.ENABLED
