"""
ERK Propulsion SRN
==================

Per-cell stochastic subcellular reaction network for agent-based cell
simulations: a self-propulsion angle performing a persistent random walk
that aligns with the cell's velocity, an ERK signal coupled to cell area,
and a target area that relaxes under ERK control.
"""

__version__ = "0.1.0"

from erk_propulsion_srn.exceptions import SrnError, ConfigurationError, MissingParameterError, DomainError
from erk_propulsion_srn.config import ParameterSet, SimulationConfig, PARAMETER_NAMES
from erk_propulsion_srn.cell_data import CellData
from erk_propulsion_srn.noise_generation import RandomDeviateSource, stable_seed
from erk_propulsion_srn.sde_system import ErkPropulsionSDESystem
from erk_propulsion_srn.solver import EulerMaruyamaSolver, get_default_solver
from erk_propulsion_srn.marshaller import ParameterMarshaller, DEFAULT_PARAMETER_KEYS, DEFAULT_OUTPUT_KEYS
from erk_propulsion_srn.srn_model import ErkPropulsionSrnModel
from erk_propulsion_srn.checkpoint import save_checkpoint, load_checkpoint
from erk_propulsion_srn.profiling import Profiler
from erk_propulsion_srn.srn_simulator import SrnPopulationSimulator

__all__ = [
    # Errors
    'SrnError',
    'ConfigurationError',
    'MissingParameterError',
    'DomainError',

    # Configuration and cell data
    'ParameterSet',
    'SimulationConfig',
    'PARAMETER_NAMES',
    'CellData',

    # SDE components
    'RandomDeviateSource',
    'stable_seed',
    'ErkPropulsionSDESystem',
    'EulerMaruyamaSolver',
    'get_default_solver',
    'ParameterMarshaller',
    'DEFAULT_PARAMETER_KEYS',
    'DEFAULT_OUTPUT_KEYS',

    # Per-cell model and population
    'ErkPropulsionSrnModel',
    'save_checkpoint',
    'load_checkpoint',
    'Profiler',
    'SrnPopulationSimulator',
]
