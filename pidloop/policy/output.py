from ..core.state import ControllerState, OutputPolicy, WORKING_FIELDS


def output_handler(state: ControllerState):
    """Run after a control-law call. RESET clears the working variables,
    HOLD keeps them for inspection or for continuing from the last output.
    """
    if state.output_policy is OutputPolicy.RESET_ON_COMPLETE:
        for name in WORKING_FIELDS:
            setattr(state, name, 0.0)
    elif state.output_policy is OutputPolicy.HOLD_ON_COMPLETE:
        pass
