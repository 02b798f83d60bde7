import logging
import numpy as np
from typing import Optional, Tuple

from erk_propulsion_srn.exceptions import ConfigurationError, DomainError
from erk_propulsion_srn.noise_generation import RandomStream
from erk_propulsion_srn.sde_system import DerivativeFunc

logger = logging.getLogger(__name__)

# Remainders smaller than this fraction of a step are not worth a sub-step
_STEP_TOLERANCE = 1e-10


def count_sub_steps(from_time: float, to_time: float, step_dt: float) -> int:
    """Number of sub-steps needed to cover [from_time, to_time], the last one possibly truncated"""
    span = to_time - from_time
    if span <= 0.0:
        return 0
    return max(1, int(np.ceil(span / step_dt - _STEP_TOLERANCE)))


class EulerMaruyamaSolver:
    """
    Fixed-step Euler-Maruyama integrator.

    Every sub-step applies

        y <- y + f(t, y, p, xi) * h

    where xi is a fresh standard-normal deviate drawn from the random
    stream. Exactly one deviate is drawn per sub-step, before the
    derivative is evaluated, so the sequence of draws is fully determined
    by the number of sub-steps.
    """

    adaptive = False

    def __init__(self):
        self._set_up = False
        self.n_sub_steps = 0  # Running total, for diagnostics

    def initialise(self) -> "EulerMaruyamaSolver":
        self._set_up = True
        return self

    def is_set_up(self) -> bool:
        return self._set_up

    def advance(self,
                state: np.ndarray,
                parameters: np.ndarray,
                from_time: float,
                to_time: float,
                step_dt: float,
                derivative_fn: DerivativeFunc,
                random_source: RandomStream) -> Tuple[np.ndarray, float]:
        """
        Integrate the state from from_time to to_time.

        Parameters:
        -----------
        state : np.ndarray
            State at from_time; not modified
        parameters : np.ndarray
            Parameter vector passed unchanged to derivative_fn
        from_time, to_time : float
            Integration interval
        step_dt : float
            Fixed step size; the final sub-step is truncated to the remaining interval
        derivative_fn : callable
            (time, state, parameters, noise_sample) -> derivative
        random_source : RandomStream
            Supplies one standard-normal deviate per sub-step

        Returns:
        --------
        new_state : np.ndarray
        new_time : float
            Always equal to to_time when the interval is non-empty
        """
        if not self._set_up:
            raise ConfigurationError("Solver used before initialise() was called")
        if not step_dt > 0.0:
            raise DomainError(f"Step size must be positive, got {step_dt}")

        y = np.array(state, dtype=np.float64, copy=True)
        n_steps = count_sub_steps(from_time, to_time, step_dt)
        if n_steps == 0:
            return y, from_time

        for n in range(n_steps):
            t = from_time + n * step_dt
            h = min(step_dt, to_time - t)
            xi = random_source.next()
            y = y + derivative_fn(t, y, parameters, xi) * h

        self.n_sub_steps += n_steps
        logger.debug("Advanced %d sub-steps from t=%g to t=%g", n_steps, from_time, to_time)
        return y, to_time


_default_solver: Optional[EulerMaruyamaSolver] = None


def get_default_solver() -> EulerMaruyamaSolver:
    """Shared fixed-step solver bound to models constructed without one"""
    global _default_solver
    if _default_solver is None:
        _default_solver = EulerMaruyamaSolver().initialise()
    return _default_solver
