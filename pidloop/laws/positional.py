from ..core.state import ControllerState
from .loop import run_loop, shift_offsets


def positional_step(state: ControllerState):
    e = state.offset
    state.integral += e
    state.output = (state.kp * e + state.ki * state.integral
                    + state.kd * (e - state.offset_prev1))
    shift_offsets(state)


def incremental_step(state: ControllerState):
    # output is a running sum of increments, never recomputed from scratch
    e, e1, e2 = state.offset, state.offset_prev1, state.offset_prev2
    state.output += (state.kp * (e - e1) + state.ki * e
                     + state.kd * (e - 2.0 * e1 + e2))
    shift_offsets(state)


def run_positional(state: ControllerState, target, plant=None, pacer=None, log_fn=None):
    """Positional PID. Reports every round through log_fn when one is given."""
    return run_loop(state, target, positional_step, name='positional',
                    plant=plant, pacer=pacer, log_fn=log_fn, report=True)


def run_incremental(state: ControllerState, target, plant=None, pacer=None, log_fn=None):
    return run_loop(state, target, incremental_step, name='incremental',
                    plant=plant, pacer=pacer, log_fn=log_fn)
