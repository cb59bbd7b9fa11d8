from enum import Enum

DEFAULT_MAX_ROUND = 1000
DEFAULT_ACCURACY = 0.01

FAILED = float('nan')


class Status(Enum):
    UNINITIALIZED = 'uninitialized'
    ENABLED = 'enabled'
    DISABLED = 'disabled'


class OutputPolicy(Enum):
    RESET_ON_COMPLETE = 'reset'
    HOLD_ON_COMPLETE = 'hold'


WORKING_FIELDS = ('set_value', 'actual_value', 'offset', 'offset_prev1',
                  'offset_prev2', 'integral', 'output')


class ControllerState:
    """Per-loop record: gains, working variables and lifecycle status.
    Holds no behaviour; the lifecycle module and the control laws mutate it.
    """
    def __init__(self):
        self.status = Status.UNINITIALIZED
        self.output_policy = OutputPolicy.RESET_ON_COMPLETE
        self.set_value = 0.0
        self.actual_value = 0.0
        self.offset = 0.0
        self.offset_prev1 = 0.0
        self.offset_prev2 = 0.0
        self.integral = 0.0
        self.kp = 0.0
        self.ki = 0.0
        self.kd = 0.0
        self.output = 0.0
        self.round = 0
        self.max_round = 0
        self.accuracy = 0.0
        # bookkeeping of the last run, kept across reset_round
        self.last_round = 0
        self.converged = False

    def snapshot(self):
        """Field layout of the record as a plain dict (enums by value)."""
        d = dict(vars(self))
        d['status'] = self.status.value
        d['output_policy'] = self.output_policy.value
        return d

    def __repr__(self):
        return (f"ControllerState(status={self.status.value}, kp={self.kp}, ki={self.ki}, "
                f"kd={self.kd}, actual={self.actual_value:.4f}, round={self.round}/{self.max_round})")


def is_failed(value) -> bool:
    """Only the FAILED object itself counts; a diverged run can also produce NaN."""
    return value is FAILED
