from ..core.state import ControllerState
from ..core.errors import ConfigurationError
from ..utils.signal import modulus, require_finite, require_non_negative
from .loop import run_loop, shift_offsets


def separation_flag(state: ControllerState, max_offset):
    """1 and accumulate while the offset is inside max_offset, else 0."""
    if modulus(state.offset) <= max_offset:
        state.integral += state.offset
        return 1
    return 0


def windup_flag(state: ControllerState, u_max, u_min, sep_edge):
    """Integral separation plus anti-windup: while the actual value sits above
    u_max only negative offsets accumulate, below u_min only positive ones.
    """
    e = state.offset
    if modulus(e) > sep_edge:
        return 0
    if state.actual_value > u_max:
        if e < 0:
            state.integral += e
    elif state.actual_value < u_min:
        if e > 0:
            state.integral += e
    else:
        state.integral += e
    return 1


def _gated_output(state, flag, integral_scale=1.0):
    e = state.offset
    state.output = (state.kp * e + flag * state.ki * state.integral * integral_scale
                    + state.kd * (e - state.offset_prev1))
    shift_offsets(state)


def _windup_limits(u_max, u_min, sep_edge):
    u_max = require_finite('u_max', u_max)
    u_min = require_finite('u_min', u_min)
    if u_min > u_max:
        raise ConfigurationError(f"u_min ({u_min}) must not exceed u_max ({u_max})")
    return u_max, u_min, require_non_negative('sep_edge', sep_edge)


def run_integral_separation(state: ControllerState, target, max_offset,
                            plant=None, pacer=None, log_fn=None):
    max_offset = require_non_negative('max_offset', max_offset)

    def step(s):
        _gated_output(s, separation_flag(s, max_offset))

    return run_loop(state, target, step, name='integral_separation',
                    plant=plant, pacer=pacer, log_fn=log_fn)


def run_anti_windup(state: ControllerState, target, u_max, u_min, sep_edge,
                    plant=None, pacer=None, log_fn=None):
    u_max, u_min, sep_edge = _windup_limits(u_max, u_min, sep_edge)

    def step(s):
        _gated_output(s, windup_flag(s, u_max, u_min, sep_edge))

    return run_loop(state, target, step, name='anti_windup',
                    plant=plant, pacer=pacer, log_fn=log_fn)


def run_trapezoidal_integral(state: ControllerState, target, u_max, u_min, sep_edge,
                             plant=None, pacer=None, log_fn=None):
    """Anti-windup accumulation with the integral term halved (trapezoid rule)."""
    u_max, u_min, sep_edge = _windup_limits(u_max, u_min, sep_edge)

    def step(s):
        _gated_output(s, windup_flag(s, u_max, u_min, sep_edge), integral_scale=0.5)

    return run_loop(state, target, step, name='trapezoidal_integral',
                    plant=plant, pacer=pacer, log_fn=log_fn)
