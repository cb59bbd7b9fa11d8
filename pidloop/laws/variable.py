from ..core.state import ControllerState
from ..core.errors import ConfigurationError
from ..utils.signal import modulus, require_non_negative
from .loop import run_loop, shift_offsets


def check_edges(low_edge, high_edge):
    low_edge = require_non_negative('low_edge', low_edge)
    high_edge = require_non_negative('high_edge', high_edge)
    if high_edge <= low_edge:
        raise ConfigurationError(f"high_edge ({high_edge}) must be greater than low_edge ({low_edge})")
    return low_edge, high_edge


def variable_integral_gain(offset, low_edge, high_edge):
    """Integral gain factor for a given offset, and whether it accumulates.
    0 beyond high_edge, 1 below low_edge, linear ramp in between (both edges
    inclusive in the ramp, so the result stays in [0, 1]).
    """
    m = modulus(offset)
    if m > high_edge:
        return 0.0, False
    if m < low_edge:
        return 1.0, True
    return (high_edge - m) / (high_edge - low_edge), True


def run_variable_integral(state: ControllerState, target, low_edge, high_edge,
                          plant=None, pacer=None, log_fn=None):
    low_edge, high_edge = check_edges(low_edge, high_edge)

    def step(s):
        e = s.offset
        gain, accumulate = variable_integral_gain(e, low_edge, high_edge)
        if accumulate:
            s.integral += e
        s.output = s.kp * e + gain * s.ki * s.integral + s.kd * (e - s.offset_prev1)
        shift_offsets(s)

    return run_loop(state, target, step, name='variable_integral',
                    plant=plant, pacer=pacer, log_fn=log_fn)
