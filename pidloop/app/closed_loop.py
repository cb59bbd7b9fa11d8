import argparse

import numpy as np

from ..core.state import ControllerState, OutputPolicy, is_failed
from ..core.lifecycle import init, configure, set_accuracy, reset_param, deinit
from ..policy.output import output_handler
from ..laws.registry import get_law
from ..hardware.plant_api import UnityFeedbackPlant, FirstOrderPlant, MockPlant, TracePlant, NullPacer, SleepPacer

DEFAULTS = {
    'controller': {'kind': 'positional', 'kp': 0.5, 'ki': 0.01, 'kd': 0.0,
                   'accuracy': 0.5, 'max_round': 1000, 'output_policy': 'reset',
                   'max_offset': 80.0, 'u_max': 150.0, 'u_min': -50.0, 'sep_edge': 80.0,
                   'low_edge': 10.0, 'high_edge': 200.0},
    'plant': {'kind': 'unity', 'initial': 0.0, 'gain': 1.0, 'tau': 5.0, 'dt': 1.0,
              'verbose': False},
    'pacing': {'period_s': 0.0},
    'targets': [100.0],
}


def load_config(path):
    import yaml
    with open(path, 'r', encoding='utf-8') as f:
        cfg = yaml.safe_load(f) or {}
    merged = {}
    for key, default in DEFAULTS.items():
        if isinstance(default, dict):
            merged[key] = {**default, **(cfg.get(key) or {})}
        else:
            merged[key] = cfg.get(key, default)
    return merged


def build_plant(pcfg, log):
    if pcfg['kind'] == 'unity':
        plant = UnityFeedbackPlant(initial=pcfg['initial'])
    elif pcfg['kind'] == 'first_order':
        plant = FirstOrderPlant(gain=pcfg['gain'], tau=pcfg['tau'], dt=pcfg['dt'],
                                initial=pcfg['initial'])
    else:
        raise ValueError(f"unknown plant kind {pcfg['kind']!r}")
    if pcfg.get('verbose'):
        plant = MockPlant(plant, log_fn=log)
    return plant


def run_session(cfg, log=print):
    """Drive one controller through every target in cfg['targets'].
    Returns per-target arrays (final actual value, rounds used, converged flag)
    and, under 'trajectories', the feedback recorded after every round of each run.
    """
    c = cfg['controller']
    run, extra = get_law(c['kind'])
    args = [c[name] for name in extra]

    state = ControllerState()
    init(state, c['kp'], c['ki'], c['kd'])
    configure(state, OutputPolicy(c['output_policy']), int(c['max_round']))
    set_accuracy(state, c['accuracy'])

    plant = TracePlant(build_plant(cfg['plant'], log))
    period = cfg['pacing'].get('period_s', 0.0)
    pacer = SleepPacer(period) if period > 0 else NullPacer()

    finals, rounds, converged, trajectories = [], [], [], []
    log(f"[START] law={c['kind']} kp={c['kp']} ki={c['ki']} kd={c['kd']} "
        f"accuracy={state.accuracy} max_round={state.max_round}")
    try:
        for target in cfg['targets']:
            start = len(plant.trace)
            value = run(state, target, *args, plant=plant, pacer=pacer, log_fn=log)
            if is_failed(value):
                log(f"[WARN] run for target {target} failed (status {state.status.value})")
            elif not state.converged:
                log(f"[WARN] run for target {target} did not converge in {state.last_round} rounds")
            trajectories.append(np.asarray(plant.trace[start:], dtype=float))
            finals.append(value)
            rounds.append(state.last_round)
            converged.append(state.converged)
            output_handler(state)
            reset_param(state, c['kp'], c['ki'], c['kd'], log_fn=log)
    except KeyboardInterrupt:
        log("[STOP] Interrupted by user.")
    finally:
        output_handler(state)
        deinit(state)

    result = {
        'targets': np.asarray(cfg['targets'][:len(finals)], dtype=float),
        'finals': np.asarray(finals, dtype=float),
        'rounds': np.asarray(rounds, dtype=int),
        'converged': np.asarray(converged, dtype=bool),
        'trajectories': trajectories,
    }
    if len(finals):
        err = np.abs(result['finals'] - result['targets'])
        log(f"[END] runs={len(finals)} converged={int(result['converged'].sum())} "
            f"max_error={float(np.max(err)):.4f} mean_rounds={float(np.mean(result['rounds'])):.1f}")
    else:
        log("[END] no runs completed")
    return result


def main(argv=None):
    p = argparse.ArgumentParser(description="Run a PID control law against a simulated plant.")
    p.add_argument('--config', default='configs/config.yaml')
    p.add_argument('--kind', default=None)
    p.add_argument('--target', type=float, action='append', default=None)
    args = p.parse_args(argv)

    cfg = load_config(args.config)
    if args.kind is not None:
        cfg['controller']['kind'] = args.kind
    if args.target:
        cfg['targets'] = args.target

    result = run_session(cfg, log=print)
    return 0 if bool(np.all(result['converged'])) else 1


if __name__ == '__main__':
    raise SystemExit(main())
