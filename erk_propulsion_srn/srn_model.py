"""
Per-cell SRN model coupling self-propulsion, ERK activity and target area.
"""

import logging
from typing import Mapping, Optional

import numpy as np

from erk_propulsion_srn.config import ParameterSet
from erk_propulsion_srn.exceptions import ConfigurationError
from erk_propulsion_srn.marshaller import ParameterMarshaller
from erk_propulsion_srn.noise_generation import RandomDeviateSource, RandomStream
from erk_propulsion_srn.sde_system import ERK, TARGET_AREA, THETA, ErkPropulsionSDESystem
from erk_propulsion_srn.solver import get_default_solver

logger = logging.getLogger(__name__)

CHECKPOINT_FORMAT_VERSION = 1


class ErkPropulsionSrnModel:
    """
    Owns the SDE state of one cell and advances it alongside the cell-based simulation.

    A model starts uninitialised. initialise() binds it to the cell's data
    store and allocates a default state; copy_for_division() produces a
    ready model for a daughter cell carrying the parent's exact state.

    Parameters:
    -----------
    solver : optional
        Fixed-step solver; the shared Euler-Maruyama solver is used if omitted
    random_source : RandomStream, optional
        Source of the angular noise; a fresh unseeded source if omitted
    marshaller : ParameterMarshaller, optional
        Mapping between cell data items and SDE parameters
    """

    def __init__(self,
                 solver=None,
                 random_source: Optional[RandomStream] = None,
                 marshaller: Optional[ParameterMarshaller] = None,
                 system: Optional[ErkPropulsionSDESystem] = None):
        self.system = system if system is not None else ErkPropulsionSDESystem()

        if solver is None:
            # The angle follows an SDE, so use a basic Euler solver rather
            # than one with an adaptive timestep
            solver = get_default_solver()
        if not callable(getattr(solver, "is_set_up", None)) or not solver.is_set_up():
            raise ConfigurationError(f"{type(solver).__name__} is not set up; call initialise() first")
        if getattr(solver, "adaptive", False) and self.system.requires_fixed_step:
            raise ConfigurationError(
                f"{type(solver).__name__} adapts its step, but the noise term is scaled to a fixed dt_ode")
        self.solver = solver

        self.random_source = random_source if random_source is not None else RandomDeviateSource()
        self.marshaller = marshaller if marshaller is not None else ParameterMarshaller()

        self.cell_data: Optional[Mapping[str, float]] = None
        self._parameters = ParameterSet()
        self._state: Optional[np.ndarray] = None
        self._time = 0.0

    @property
    def is_initialised(self) -> bool:
        return self._state is not None

    def _require_ready(self):
        if self._state is None:
            raise ConfigurationError("SRN model has not been initialised")

    def initialise(self, cell_data: Mapping[str, float], start_time: float = 0.0):
        """Allocate a default state and pull the cell's parameters once."""
        self.cell_data = cell_data
        self._state = self.system.initial_state()
        self._time = float(start_time)
        self.marshaller.pull(cell_data, self._parameters)
        logger.debug("Initialised SRN model at t=%g", self._time)

    def copy_for_division(self, cell_data: Optional[Mapping[str, float]] = None) -> "ErkPropulsionSrnModel":
        """
        Model for a daughter cell.

        The state vector and last time are copied exactly. Parameters are
        not: area and velocity angle belong to the daughter and are pulled
        from its own cell data on the next simulate call.
        """
        self._require_ready()
        daughter = ErkPropulsionSrnModel(solver=self.solver,
                                         random_source=self.random_source,
                                         marshaller=self.marshaller,
                                         system=self.system)
        daughter._state = self._state.copy()
        daughter._time = self._time
        daughter.cell_data = cell_data
        return daughter

    def simulate_to_current_time(self, current_time: float):
        """
        Advance the state to current_time.

        Calls with current_time at or before the last recorded time do nothing.
        """
        self._require_ready()
        if current_time <= self._time:
            return
        if self.cell_data is None:
            raise ConfigurationError("SRN model has no cell data to read parameters from")

        # Update areas and angles of instantaneous cell velocities
        self.marshaller.pull_areas(self.cell_data, self._parameters)
        self.marshaller.pull_velocity_angles(self.cell_data, self._parameters)
        self.marshaller.pull_srn_params(self.cell_data, self._parameters)

        parameters = self._parameters.to_array()
        self._state, self._time = self.solver.advance(self._state,
                                                      parameters,
                                                      self._time,
                                                      float(current_time),
                                                      self._parameters.dt_ode,
                                                      self.system.evaluate_derivatives,
                                                      self.random_source)

    def get_theta(self) -> float:
        self._require_ready()
        return float(self._state[THETA])

    def get_signal(self) -> float:
        self._require_ready()
        return float(self._state[ERK])

    def get_target_area(self) -> float:
        self._require_ready()
        return float(self._state[TARGET_AREA])

    def get_cell_area(self) -> float:
        """Area used in the last integration (diagnostic)"""
        return self._parameters.cell_area

    def get_velocity_angle(self) -> float:
        """Instantaneous velocity angle used in the last integration (diagnostic)"""
        return self._parameters.theta_vi

    def get_parameters(self) -> ParameterSet:
        return self._parameters.copy()

    def get_state(self) -> np.ndarray:
        self._require_ready()
        return self._state.copy()

    def set_state(self, state):
        """Overwrite the placeholder state with a cell's actual initial condition."""
        self._require_ready()
        state = np.array(state, dtype=np.float64)
        if state.shape != (self.system.dim,):
            raise ValueError(f"State must have shape ({self.system.dim},), got {state.shape}")
        self._state = state

    def get_time(self) -> float:
        return self._time

    def bind_cell_data(self, cell_data: Mapping[str, float]):
        """Attach a restored model to its cell and pull the cell's parameters so the accessors are current."""
        self.cell_data = cell_data
        self.marshaller.pull(cell_data, self._parameters)

    def output_parameters(self, stream):
        # No parameters of its own to output
        pass

    def to_checkpoint(self) -> dict:
        """Versioned, field-tagged snapshot of state and last time."""
        self._require_ready()
        return {
            "format_version": CHECKPOINT_FORMAT_VERSION,
            "time": self._time,
            "state": {name: float(value) for name, value in zip(self.system.variable_names, self._state)},
        }

    @classmethod
    def from_checkpoint(cls, data: dict, cell_data: Optional[Mapping[str, float]] = None,
                        **kwargs) -> "ErkPropulsionSrnModel":
        """
        Rebuild a ready model from to_checkpoint() output; kwargs go to the constructor.

        Parameters are not part of a checkpoint. If cell_data is given they
        are pulled from it straight away, otherwise they keep their defaults
        until bind_cell_data() or the next simulate call.
        """
        version = data.get("format_version")
        if version != CHECKPOINT_FORMAT_VERSION:
            raise ConfigurationError(f"Unsupported SRN checkpoint version: {version}")
        model = cls(**kwargs)
        state = data["state"]
        model._state = np.array([state[name] for name in model.system.variable_names], dtype=np.float64)
        model._time = float(data["time"])
        if cell_data is not None:
            model.bind_cell_data(cell_data)
        return model
