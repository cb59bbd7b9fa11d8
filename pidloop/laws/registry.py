from .positional import run_positional, run_incremental
from .separation import run_integral_separation, run_anti_windup, run_trapezoidal_integral
from .variable import run_variable_integral

# name -> (run function, names of the extra positional arguments after target)
LAWS = {
    'positional': (run_positional, ()),
    'incremental': (run_incremental, ()),
    'integral_separation': (run_integral_separation, ('max_offset',)),
    'anti_windup': (run_anti_windup, ('u_max', 'u_min', 'sep_edge')),
    'trapezoidal_integral': (run_trapezoidal_integral, ('u_max', 'u_min', 'sep_edge')),
    'variable_integral': (run_variable_integral, ('low_edge', 'high_edge')),
}


def get_law(kind):
    try:
        return LAWS[kind]
    except KeyError:
        raise ValueError(f"unknown control law {kind!r}, expected one of {sorted(LAWS)}") from None
