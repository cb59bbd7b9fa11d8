from ..core.state import ControllerState
from ..utils.signal import within_accuracy


def min_rounds(max_round: int) -> int:
    """Floor on rounds before an early exit is allowed (1% of the budget)."""
    return max_round // 100


def should_stop(state: ControllerState, target: float) -> bool:
    return (within_accuracy(state.actual_value, target, state.accuracy)
            and state.round >= min_rounds(state.max_round))


def budget_left(state: ControllerState) -> bool:
    return state.round <= state.max_round
