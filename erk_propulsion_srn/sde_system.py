import numpy as np
from dataclasses import dataclass, field
from typing import Callable, Tuple
from numba import njit

from erk_propulsion_srn.config import N_PARAMETERS, ParameterSet
from erk_propulsion_srn.exceptions import DomainError

# (time, state, parameters, noise_sample) -> derivative
DerivativeFunc = Callable[[float, np.ndarray, np.ndarray, float], np.ndarray]

# State vector layout
THETA, ERK, TARGET_AREA = 0, 1, 2


@njit
def _erk_propulsion_drift(state: np.ndarray, parameters: np.ndarray) -> np.ndarray:
    """Deterministic part of the vector field"""
    # Parameter index mapping:
    # cell_area = parameters[0], tau = parameters[1], alpha = parameters[2]
    # beta = parameters[3], theta_vi = parameters[6], K = parameters[7]
    theta = state[0]
    erk = state[1]
    target_area = state[2]

    result = np.empty(3, dtype=np.float64)
    # Alignment torque towards the instantaneous velocity
    result[0] = parameters[7] * np.sin(parameters[6] - theta)
    # -E^3 stabilizing non-linearity
    result[1] = -erk - erk ** 3 + parameters[3] * (parameters[0] - 1.0)
    result[2] = ((1.0 - target_area) - parameters[2] * erk) / parameters[1]
    return result


@njit
def _erk_propulsion_diffusion(parameters: np.ndarray) -> np.ndarray:
    """Noise amplitude per equation; only the angle is stochastic"""
    result = np.zeros(3, dtype=np.float64)
    # Kicks in angle should scale like sqrt(dt), so dtheta/dt carries 1/sqrt(dt).
    # The factor sqrt(2) gives a persistence time of 2/eta_std**2.
    result[0] = parameters[4] * np.sqrt(2.0) * np.sqrt(1.0 / parameters[5])
    return result


@njit
def _erk_propulsion_rhs(state: np.ndarray, parameters: np.ndarray, noise_sample: float) -> np.ndarray:
    return _erk_propulsion_drift(state, parameters) + _erk_propulsion_diffusion(parameters) * noise_sample


@dataclass
class ErkPropulsionSDESystem:
    """
    Self-propulsion angle, ERK activity and target area of a single cell.

    State variables:
        0 - theta, angle of self-propulsion (unwrapped, radians)
        1 - ERK activity
        2 - target (rest) area

    The noise amplitude is scaled by sqrt(2/dt_ode), which is only correct
    when the system is integrated with a fixed step of dt_ode. Solvers
    that adapt their step must not be used with it.
    """
    dim: int = 3
    variable_names: Tuple[str, ...] = ("theta", "erk", "target_area")
    # Independent placeholder for each variable, overwritten by the caller
    default_initial_conditions: np.ndarray = field(
        default_factory=lambda: np.array([0.0, 0.0, 1.0], dtype=np.float64))
    has_diffusion: np.ndarray = field(
        default_factory=lambda: np.array([True, False, False], dtype=bool))
    requires_fixed_step: bool = True

    def __post_init__(self):
        self.default_initial_conditions = np.ascontiguousarray(self.default_initial_conditions, dtype=np.float64)
        self.has_diffusion = np.ascontiguousarray(self.has_diffusion, dtype=bool)

        if len(self.variable_names) != self.dim or len(self.default_initial_conditions) != self.dim:
            raise ValueError(f"Variable names and initial conditions must have length {self.dim}")
        if len(self.has_diffusion) != self.dim:
            raise ValueError(f"has_diffusion array length ({len(self.has_diffusion)}) "
                             f"must match system dimension ({self.dim})")

    def initial_state(self) -> np.ndarray:
        return self.default_initial_conditions.copy()

    def check_parameters(self, parameters: np.ndarray):
        """Fail fast on parameters that would yield infinities."""
        if parameters.shape != (N_PARAMETERS,):
            raise ValueError(f"Parameter vector must have shape ({N_PARAMETERS},), got {parameters.shape}")
        if parameters[5] == 0.0:
            raise DomainError("dt_ode must be non-zero: the angular noise is scaled by sqrt(2/dt_ode)")
        if parameters[1] == 0.0:
            raise DomainError("tau must be non-zero: the target area relaxes with rate 1/tau")

    def evaluate_diffusion(self, parameters: np.ndarray) -> np.ndarray:
        return _erk_propulsion_diffusion(parameters)

    def evaluate_derivatives(self, time: float, state: np.ndarray, parameters, noise_sample: float) -> np.ndarray:
        """
        Right-hand side of the SDE, including one noise realisation.

        Parameters:
        -----------
        time : float
            Current time (the system is autonomous)
        state : np.ndarray
            [theta, erk, target_area]
        parameters : ParameterSet or np.ndarray
            The 8 parameters, in PARAMETER_NAMES order if given as an array
        noise_sample : float
            One standard-normal deviate

        Returns:
        --------
        np.ndarray
            d[theta, erk, target_area]/dt
        """
        if isinstance(parameters, ParameterSet):
            parameters = parameters.to_array()
        parameters = np.ascontiguousarray(parameters, dtype=np.float64)
        state = np.ascontiguousarray(state, dtype=np.float64)
        if state.shape != (self.dim,):
            raise ValueError(f"State must have shape ({self.dim},), got {state.shape}")
        self.check_parameters(parameters)
        return _erk_propulsion_rhs(state, parameters, float(noise_sample))

    __call__ = evaluate_derivatives
