# explicit_frame/config.py
"""
Run options and configuration errors.

The "options" object of a configuration file feeds two dataclasses:

    IntegratorOptions  beta, gamma, damping_alpha, damping_beta
    ManagerOptions     verbose, save_frequency, output file name stems

Unknown keys are ignored so both can read the same mapping.
"""

import numbers
from dataclasses import dataclass, fields
from typing import Any, Mapping


class ConfigError(ValueError):
    """Raised when a configuration file or one of its inputs is invalid."""
    pass


def _coerce(name: str, value: Any, kind: type) -> Any:
    """Check a configuration value against the type of its option field."""
    if kind is bool:
        if isinstance(value, bool):
            return value
    elif kind is int:
        if isinstance(value, numbers.Integral) and not isinstance(value, bool):
            return int(value)
    elif kind is float:
        if isinstance(value, numbers.Real) and not isinstance(value, bool):
            return float(value)
    elif kind is str:
        if isinstance(value, str) and value:
            return value
    else:
        return value
    raise ConfigError(
        f"Option '{name}' must be of type {kind.__name__}, got {value!r}"
    )


class _FromDict:
    """from_dict() for option dataclasses: known keys only, type-checked."""

    @classmethod
    def from_dict(cls, mapping: Mapping[str, Any] = None):
        if mapping is None:
            return cls()
        if not isinstance(mapping, Mapping):
            raise ConfigError(f"Options must be an object, got {type(mapping).__name__}")
        kwargs = {
            f.name: _coerce(f.name, mapping[f.name], f.type)
            for f in fields(cls)
            if f.name in mapping
        }
        return cls(**kwargs)


@dataclass
class IntegratorOptions(_FromDict):
    """
    Newmark parameters and Rayleigh damping coefficients.

    Parameters:
    -----------
    beta, gamma : float
        Newmark parameters (0.25, 0.5 is the average-acceleration rule)
    damping_alpha : float
        Mass-proportional damping coefficient (1/s)
    damping_beta : float
        Stiffness-proportional damping coefficient (s)
    """
    beta: float = 0.25
    gamma: float = 0.5
    damping_alpha: float = 0.01
    damping_beta: float = 0.01


@dataclass
class ManagerOptions(_FromDict):
    """Output and reporting options of a simulation run."""
    verbose: bool = False
    save_frequency: int = 0
    state_filename: str = "state"
    nodal_displacements_filename: str = "nodal_displacements"
    nodal_velocities_filename: str = "nodal_velocities"
    nodal_forces_filename: str = "nodal_forces"

    def __post_init__(self):
        if self.save_frequency < 0:
            raise ConfigError(f"save_frequency must be >= 0, got {self.save_frequency}")
