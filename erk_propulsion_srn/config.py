from dataclasses import dataclass, fields
from typing import Dict, Optional

import numpy as np

# Positional order of the parameter vector handed to the JIT kernel
PARAMETER_NAMES = ("cell_area", "tau", "alpha", "beta", "eta_std", "dt_ode", "theta_vi", "K")
N_PARAMETERS = len(PARAMETER_NAMES)


@dataclass
class ParameterSet:
    """
    Named parameters of the ERK/propulsion SDE.

    The defaults only hold until the first time the parameters are pulled
    from a cell's data store.
    """
    cell_area: float = 1.0  # Mechanical area of the cell
    tau: float = 1.0  # Relaxation time of the target area
    alpha: float = 1.0  # Coupling from signal onto target area
    beta: float = 1.0  # Coupling from area onto signal
    eta_std: float = 0.1  # Std of the angular noise; persistence time is 2/eta_std**2
    dt_ode: float = 0.01  # Fixed step the noise amplitude is scaled to
    theta_vi: float = 0.0  # Angle of the instantaneous cell velocity
    K: float = 0.0  # Strength of alignment K*sin(theta_vi - theta)

    def to_array(self) -> np.ndarray:
        """Convert to array for numba functions"""
        return np.array([getattr(self, name) for name in PARAMETER_NAMES], dtype=np.float64)

    @classmethod
    def from_array(cls, values) -> "ParameterSet":
        values = np.asarray(values, dtype=np.float64)
        if values.shape != (N_PARAMETERS,):
            raise ValueError(f"Parameter vector must have shape ({N_PARAMETERS},), got {values.shape}")
        return cls(**{name: float(v) for name, v in zip(PARAMETER_NAMES, values)})

    @staticmethod
    def index_map() -> Dict[str, int]:
        """Return the mapping of parameter names to array indices"""
        return {name: i for i, name in enumerate(PARAMETER_NAMES)}

    def copy(self) -> "ParameterSet":
        return ParameterSet(**{f.name: getattr(self, f.name) for f in fields(self)})


@dataclass
class SimulationConfig:
    """Settings for stepping a population of SRN models."""
    dt: float = 0.01  # Outer time step
    end_time: float = 1.0
    seed: Optional[int] = None
    per_cell_streams: bool = False  # Reseed each cell from (seed, cell id, step)
    record_every: int = 1  # Record trajectories every n outer steps
    enable_profiling: bool = False
    profiling_dir: str = "profiling_results"

    def __post_init__(self):
        if self.dt <= 0:
            raise ValueError("dt must be positive")
        if self.record_every < 1:
            raise ValueError("record_every must be at least 1")
