from ..core.state import ControllerState, Status, FAILED
from ..core.lifecycle import reset_round
from ..policy.convergence import should_stop, budget_left
from ..hardware.plant_api import UnityFeedbackPlant, NullPacer
from ..utils.diag import emit


def shift_offsets(state: ControllerState):
    state.offset_prev2 = state.offset_prev1
    state.offset_prev1 = state.offset


def run_loop(state: ControllerState, target, step, name='pid',
             plant=None, pacer=None, log_fn=None, report=False):
    """Shared convergence loop for every control law.

    `step(state)` sees the fresh offset and must set state.output (and update
    the integral and offset history). The output is written to the plant and
    the plant's feedback becomes the next actual value. Without a plant the
    output is fed straight back.

    Returns the final actual value, or FAILED when the instance is not enabled.
    """
    if state.status is not Status.ENABLED:
        state.round = state.max_round + 1
        state.last_round = state.round
        state.converged = False
        emit(log_fn, f"[RUN] {name}: instance {state.status.value}, skipped")
        return FAILED

    if plant is None:
        plant = UnityFeedbackPlant(state.actual_value)
    else:
        state.actual_value = plant.read_feedback()
    if pacer is None:
        pacer = NullPacer()

    target = float(target)
    state.converged = False
    while budget_left(state):
        if should_stop(state, target):
            state.converged = True
            break
        state.set_value = target
        state.offset = state.set_value - state.actual_value
        step(state)
        plant.write_output(state.output)
        state.actual_value = plant.read_feedback()
        state.round += 1
        if report:
            emit(log_fn, f"[ITER] {name} round={state.round} actual={state.actual_value:.4f}")
        pacer.wait()

    state.last_round = state.round
    reset_round(state)
    emit(log_fn, f"[RUN] {name}: target={target:.4f} actual={state.actual_value:.4f} "
                 f"rounds={state.last_round} converged={state.converged}")
    return state.actual_value
