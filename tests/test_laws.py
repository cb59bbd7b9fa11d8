import pytest

from pidloop.core.state import ControllerState, OutputPolicy, FAILED, is_failed
from pidloop.core.errors import ConfigurationError
from pidloop.core.lifecycle import init, configure, set_accuracy, disable, reset_round
from pidloop.laws.positional import run_positional, run_incremental
from pidloop.laws.separation import (run_integral_separation, run_anti_windup,
                                     run_trapezoidal_integral, windup_flag)
from pidloop.laws.variable import run_variable_integral, variable_integral_gain
from pidloop.laws.registry import LAWS, get_law
from pidloop.hardware.plant_api import PlantAPI, FirstOrderPlant

LAW_ARGS = {
    'positional': (),
    'incremental': (),
    'integral_separation': (80.0,),
    'anti_windup': (150.0, -50.0, 80.0),
    'trapezoidal_integral': (150.0, -50.0, 80.0),
    'variable_integral': (10.0, 200.0),
}


def make(kp, ki, kd, accuracy=0.5, max_round=1000, policy=OutputPolicy.HOLD_ON_COMPLETE):
    s = ControllerState()
    init(s, kp, ki, kd)
    configure(s, policy, max_round)
    set_accuracy(s, accuracy)
    return s


class FixedPlant(PlantAPI):
    def __init__(self, value):
        super().__init__()
        self.value = value
        self.writes = []

    def read_feedback(self):
        return self.value

    def _apply_output(self, value):
        self.writes.append(value)


class CountingPacer:
    def __init__(self):
        self.calls = 0

    def wait(self):
        self.calls += 1


def test_positional_converges_on_stable_system():
    s = make(0.5, 0.01, 0.0)
    out = run_positional(s, 100.0)
    assert s.converged
    assert s.last_round <= s.max_round
    assert abs(out - 100.0) <= 0.5
    assert s.round == 0


def test_positional_reports_each_round():
    s = make(1.0, 0.0, 0.0, accuracy=0.0, max_round=3)
    msgs = []
    run_positional(s, 10.0, plant=FixedPlant(5.0), log_fn=msgs.append)
    assert len([m for m in msgs if m.startswith('[ITER]')]) == 4
    assert msgs[-1].startswith('[RUN]')


def test_incremental_adds_to_previous_output():
    s = make(0.2, 0.5, 0.0, max_round=0)
    run_incremental(s, 50.0)
    assert s.output == pytest.approx(35.0)
    run_incremental(s, 50.0)
    # 35 + 0.2*(15 - 50) + 0.5*15
    assert s.output == pytest.approx(35.5)
    assert s.offset_prev1 == pytest.approx(15.0)
    assert s.offset_prev2 == pytest.approx(50.0)


def test_incremental_converges():
    s = make(0.2, 0.5, 0.0, accuracy=0.01)
    out = run_incremental(s, 50.0)
    assert s.converged
    assert abs(out - 50.0) <= 0.01


def test_integral_separation_gates_integral():
    s = make(1.0, 1.0, 0.0, max_round=0)
    run_integral_separation(s, 10.0, 5.0)
    assert s.integral == 0.0
    assert s.output == pytest.approx(10.0)

    s = make(1.0, 1.0, 0.0, max_round=0)
    run_integral_separation(s, 3.0, 5.0)
    assert s.integral == pytest.approx(3.0)
    assert s.output == pytest.approx(6.0)


def test_windup_flag_rules():
    s = make(1.0, 1.0, 0.0)
    # above u_max: positive offset withheld, flag still 1
    s.actual_value, s.offset = 20.0, 2.0
    assert windup_flag(s, 10.0, -10.0, 5.0) == 1
    assert s.integral == 0.0
    s.offset = -2.0
    windup_flag(s, 10.0, -10.0, 5.0)
    assert s.integral == -2.0
    # below u_min: only positive accumulates
    s.integral = 0.0
    s.actual_value, s.offset = -20.0, -1.0
    windup_flag(s, 10.0, -10.0, 5.0)
    assert s.integral == 0.0
    s.offset = 1.0
    windup_flag(s, 10.0, -10.0, 5.0)
    assert s.integral == 1.0
    # beyond sep_edge nothing accumulates
    s.integral = 0.0
    s.actual_value, s.offset = 0.0, 6.0
    assert windup_flag(s, 10.0, -10.0, 5.0) == 0
    assert s.integral == 0.0
    s.offset = 5.0
    assert windup_flag(s, 10.0, -10.0, 5.0) == 1
    assert s.integral == 5.0


def test_trapezoidal_halves_integral_term():
    a = make(0.0, 1.0, 0.0, max_round=0)
    run_anti_windup(a, 4.0, 10.0, -10.0, 10.0)
    b = make(0.0, 1.0, 0.0, max_round=0)
    run_trapezoidal_integral(b, 4.0, 10.0, -10.0, 10.0)
    assert a.output == pytest.approx(4.0)
    assert b.output == pytest.approx(2.0)
    assert a.integral == b.integral == pytest.approx(4.0)


@pytest.mark.parametrize('offset,gain,accumulate', [
    (10.0, 0.0, True),
    (-10.0, 0.0, True),
    (10.5, 0.0, False),
    (1.0, 1.0, True),
    (0.5, 1.0, True),
    (5.5, 0.5, True),
])
def test_variable_integral_gain(offset, gain, accumulate):
    g, acc = variable_integral_gain(offset, 1.0, 10.0)
    assert g == pytest.approx(gain)
    assert acc is accumulate


def test_variable_integral_boundaries_in_a_run():
    s = make(0.0, 1.0, 0.0, max_round=0)
    run_variable_integral(s, 10.0, 1.0, 10.0)
    assert s.output == 0.0
    assert s.integral == pytest.approx(10.0)

    s = make(0.0, 1.0, 0.0, max_round=0)
    run_variable_integral(s, 1.0, 1.0, 10.0)
    assert s.output == pytest.approx(1.0)
    assert s.integral == pytest.approx(1.0)


@pytest.mark.parametrize('kind', ['integral_separation', 'anti_windup', 'variable_integral'])
def test_gated_laws_converge(kind):
    run, _ = get_law(kind)
    s = make(0.5, 0.02, 0.0)
    out = run(s, 100.0, *LAW_ARGS[kind])
    assert s.converged
    assert abs(out - 100.0) <= 0.5


def test_trapezoidal_converges():
    s = make(0.5, 0.04, 0.0)
    out = run_trapezoidal_integral(s, 100.0, 150.0, -50.0, 80.0)
    assert s.converged
    assert abs(out - 100.0) <= 0.5


@pytest.mark.parametrize('kind', sorted(LAWS))
def test_disabled_instance_fails(kind):
    run, _ = get_law(kind)
    s = make(0.5, 0.01, 0.0, max_round=200)
    disable(s)
    out = run(s, 100.0, *LAW_ARGS[kind])
    assert out is FAILED
    assert is_failed(out)
    assert s.round == 201
    assert not s.converged
    reset_round(s)
    assert s.round == 0


@pytest.mark.parametrize('kind', sorted(LAWS))
def test_uninitialized_instance_fails(kind):
    run, _ = get_law(kind)
    s = ControllerState()
    assert is_failed(run(s, 1.0, *LAW_ARGS[kind]))
    assert s.round == 1


@pytest.mark.parametrize('kind', sorted(LAWS))
def test_round_never_exceeds_budget(kind):
    run, _ = get_law(kind)
    s = make(0.3, 0.02, 0.1, accuracy=0.0, max_round=50)
    run(s, 100.0, *LAW_ARGS[kind])
    assert s.last_round <= s.max_round + 1
    assert s.round == 0


def test_round_continues_from_persisted_value():
    s = make(1.0, 0.0, 0.0, accuracy=0.0, max_round=5)
    s.round = 5
    out = run_positional(s, 10.0)
    assert out == pytest.approx(10.0)
    assert s.last_round == 6


def test_plant_and_pacer_are_used():
    s = make(0.0, 0.0, 0.0, accuracy=0.0, max_round=3)
    plant = FixedPlant(5.0)
    pacer = CountingPacer()
    out = run_positional(s, 10.0, plant=plant, pacer=pacer)
    assert out == 5.0
    assert plant.writes == [0.0, 0.0, 0.0, 0.0]
    assert pacer.calls == 4
    assert s.last_round == 4
    assert not s.converged


def test_first_order_plant_positional():
    s = make(0.5, 0.02, 0.0, accuracy=0.5)
    plant = FirstOrderPlant(gain=1.0, tau=2.0, dt=1.0)
    out = run_positional(s, 20.0, plant=plant)
    assert s.last_round <= s.max_round + 1
    assert out == plant.read_feedback()
    assert plant.last_output == s.output


@pytest.mark.parametrize('call', [
    lambda s: run_integral_separation(s, 1.0, -1.0),
    lambda s: run_anti_windup(s, 1.0, -5.0, 5.0, 1.0),
    lambda s: run_trapezoidal_integral(s, 1.0, 5.0, -5.0, -1.0),
    lambda s: run_variable_integral(s, 1.0, 10.0, 10.0),
    lambda s: run_variable_integral(s, 1.0, 10.0, 1.0),
])
def test_invalid_limits_fail_fast(call):
    s = make(1.0, 0.0, 0.0)
    with pytest.raises(ConfigurationError):
        call(s)
    assert s.round == 0


def test_get_law_unknown():
    with pytest.raises(ValueError):
        get_law('fuzzy')


def test_diverging_enabled_run_is_not_failed():
    # |1 - kp| > 1: the error grows every round
    s = make(3.0, 0.01, 0.0)
    out = run_positional(s, 100.0)
    assert not abs(out - 100.0) <= 0.5
    assert not is_failed(out)
    assert not s.converged
    assert s.status.value == 'enabled'
    assert s.last_round == s.max_round + 1


def test_nan_is_not_the_failed_sentinel():
    assert is_failed(FAILED)
    assert not is_failed(float('nan'))
    assert not is_failed(0.0)
