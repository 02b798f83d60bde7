import logging
import time
from pathlib import Path
from typing import Dict, Hashable, List, Mapping, Optional, Union

import numpy as np
import pandas as pd

from erk_propulsion_srn.cell_data import CellData
from erk_propulsion_srn.checkpoint import load_checkpoint, save_checkpoint
from erk_propulsion_srn.config import SimulationConfig
from erk_propulsion_srn.exceptions import ConfigurationError
from erk_propulsion_srn.marshaller import ParameterMarshaller
from erk_propulsion_srn.noise_generation import RandomDeviateSource
from erk_propulsion_srn.profiling import Profiler
from erk_propulsion_srn.srn_model import ErkPropulsionSrnModel

logger = logging.getLogger(__name__)

TRAJECTORY_COLUMNS = ["time", "step", "cell_id", "theta", "signal", "target_area", "cell_area", "theta_vi"]


class SrnPopulationSimulator:
    """
    Steps the SRN models of a population of cells in lock-step.

    Cells are visited one at a time in sorted id order, so with a seeded
    source the whole population trajectory is reproducible. With
    config.per_cell_streams every cell instead draws from its own stream,
    seeded from (config.seed, cell id, step), which makes a cell's
    trajectory independent of which other cells exist.

    The mechanics that move cells, change their areas and set their
    velocity angles are not part of this class: they are expected to write
    the corresponding items into each cell's data between calls to step().
    """

    def __init__(self,
                 config: Optional[SimulationConfig] = None,
                 marshaller: Optional[ParameterMarshaller] = None,
                 solver=None,
                 verbose: bool = False):
        self.config = config if config is not None else SimulationConfig()
        if self.config.per_cell_streams and self.config.seed is None:
            raise ConfigurationError("per_cell_streams requires a seed")

        self.marshaller = marshaller if marshaller is not None else ParameterMarshaller()
        self.solver = solver
        self.verbose = verbose
        self.random_source = RandomDeviateSource(self.config.seed)
        self.profiler = Profiler(enabled=self.config.enable_profiling, output_dir=self.config.profiling_dir)

        self.models: Dict[Hashable, ErkPropulsionSrnModel] = {}
        self.cell_data: Dict[Hashable, Mapping[str, float]] = {}
        self.step_index = 0
        self._records: List[dict] = []

        self.metadata = {}
        self.performance_metrics = {
            'calculation_time': 0.0,
            'steps': 0,
            'cell_steps': 0,
            'steps_per_second': 0.0,
        }

    @property
    def time(self) -> float:
        return self.step_index * self.config.dt

    @property
    def results(self) -> pd.DataFrame:
        """Recorded trajectories, one row per cell per recorded step"""
        return pd.DataFrame(self._records, columns=TRAJECTORY_COLUMNS)

    def _new_model(self) -> ErkPropulsionSrnModel:
        return ErkPropulsionSrnModel(solver=self.solver,
                                     random_source=self.random_source,
                                     marshaller=self.marshaller)

    def add_cell(self, cell_id: Hashable, cell_data: Union[Mapping[str, float], dict]) -> ErkPropulsionSrnModel:
        """Create and initialise the SRN model of a newly created cell."""
        if cell_id in self.models:
            raise ValueError(f"Cell {cell_id!r} already exists")
        if not isinstance(cell_data, CellData):
            cell_data = CellData(dict(cell_data))

        model = self._new_model()
        model.initialise(cell_data, start_time=self.time)
        self.models[cell_id] = model
        self.cell_data[cell_id] = cell_data
        return model

    def divide_cell(self, parent_id: Hashable, daughter_id: Hashable,
                    daughter_data: Optional[Mapping[str, float]] = None) -> ErkPropulsionSrnModel:
        """
        Give a new daughter cell a copy of the parent's SRN state.

        If daughter_data is omitted the daughter starts with a copy of the
        parent's cell data; the mechanics are expected to overwrite its area.
        """
        if daughter_id in self.models:
            raise ValueError(f"Cell {daughter_id!r} already exists")
        if daughter_data is None:
            daughter_data = CellData(dict(self.cell_data[parent_id]))

        daughter = self.models[parent_id].copy_for_division(daughter_data)
        self.models[daughter_id] = daughter
        self.cell_data[daughter_id] = daughter_data
        logger.debug("Cell %r divided into %r at t=%g", parent_id, daughter_id, self.time)
        return daughter

    def remove_cell(self, cell_id: Hashable):
        del self.models[cell_id]
        del self.cell_data[cell_id]

    def _record(self):
        for cell_id in sorted(self.models):
            model = self.models[cell_id]
            self._records.append({
                "time": model.get_time(),
                "step": self.step_index,
                "cell_id": cell_id,
                "theta": model.get_theta(),
                "signal": model.get_signal(),
                "target_area": model.get_target_area(),
                "cell_area": model.get_cell_area(),
                "theta_vi": model.get_velocity_angle(),
            })

    def step(self):
        """Advance every cell by one outer time step, in sorted cell id order."""
        self.step_index += 1
        current_time = self.time

        for cell_id in sorted(self.models):
            model = self.models[cell_id]
            if self.config.per_cell_streams:
                model.random_source = RandomDeviateSource.for_cell(self.config.seed, cell_id, self.step_index)
            model.simulate_to_current_time(current_time)
            self.marshaller.push(self.cell_data[cell_id], model.get_state())

        self.performance_metrics['steps'] += 1
        self.performance_metrics['cell_steps'] += len(self.models)
        if self.step_index % self.config.record_every == 0:
            self._record()

    def run(self, end_time: Optional[float] = None) -> pd.DataFrame:
        """
        Step the population until end_time (config.end_time by default).

        Returns:
        --------
        pd.DataFrame
            All recorded trajectories so far
        """
        end_time = self.config.end_time if end_time is None else end_time
        n_steps = max(0, int(np.ceil(end_time / self.config.dt - 1e-10)) - self.step_index)

        if not self._records:
            self._record()

        start_time = time.perf_counter()
        with self.profiler.profile_section("population_run"):
            for _ in range(n_steps):
                self.step()
        calculation_time = time.perf_counter() - start_time

        self.performance_metrics['calculation_time'] += calculation_time
        if calculation_time > 0:
            self.performance_metrics['steps_per_second'] = n_steps / calculation_time

        self.metadata = {
            'n_cells': len(self.models),
            'dt': self.config.dt,
            'end_time': self.time,
            'seed': self.config.seed,
            'per_cell_streams': self.config.per_cell_streams,
            'record_every': self.config.record_every,
            'performance_metrics': dict(self.performance_metrics),
        }

        if self.verbose:
            print(f"Simulated {n_steps} steps of {len(self.models)} cells in {calculation_time:.4f} seconds")
        return self.results

    def save_checkpoint(self, path: Union[str, Path]) -> Path:
        return save_checkpoint(path, self.models, self.random_source, time=self.time)

    def load_checkpoint(self, path: Union[str, Path], cell_data: Mapping[Hashable, Mapping[str, float]]):
        """
        Replace all models with those stored in a checkpoint.

        cell_data must be keyed by the same int or str cell ids the
        population was saved with.
        """
        models, random_source, saved_time = load_checkpoint(path, solver=self.solver, marshaller=self.marshaller)
        if random_source is not None:
            self.random_source = random_source
        missing = set(models) - set(cell_data)
        if missing:
            raise ConfigurationError(f"No cell data for restored cells: {sorted(missing)}")

        for cell_id, model in models.items():
            model.random_source = self.random_source
            model.bind_cell_data(cell_data[cell_id])
        self.models = models
        self.cell_data = {cell_id: cell_data[cell_id] for cell_id in models}
        self.step_index = 0 if saved_time is None else int(round(saved_time / self.config.dt))
        self._records = []
