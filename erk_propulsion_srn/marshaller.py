import logging
from typing import Dict, Iterable, Mapping, Optional

import numpy as np

from erk_propulsion_srn.config import PARAMETER_NAMES, ParameterSet
from erk_propulsion_srn.exceptions import MissingParameterError

logger = logging.getLogger(__name__)

# Cell data item read for each parameter
DEFAULT_PARAMETER_KEYS: Dict[str, str] = {
    "cell_area": "volume",
    "tau": "taul",
    "alpha": "alpha",
    "beta": "beta",
    "eta_std": "Eta Std",
    "dt_ode": "dt_ode",
    "theta_vi": "theta_vi",
    "K": "K",
}

# Cell data items the model writes its state into
DEFAULT_OUTPUT_KEYS: Dict[str, str] = {
    "theta": "theta",
    "erk": "erk",
    "target_area": "target area",
}

# Refreshed first: they change every mechanics step
FAST_PARAMETERS = ("cell_area", "theta_vi")
SLOW_PARAMETERS = tuple(name for name in PARAMETER_NAMES if name not in FAST_PARAMETERS)


class ParameterMarshaller:
    """
    Copies named scalars between a cell's data store and the SRN.

    Parameters:
    -----------
    parameter_keys : dict, optional
        Overrides of the cell data item read for each parameter
    output_keys : dict, optional
        Overrides of the cell data item written for each state variable
    """

    def __init__(self,
                 parameter_keys: Optional[Mapping[str, str]] = None,
                 output_keys: Optional[Mapping[str, str]] = None):
        self.parameter_keys = dict(DEFAULT_PARAMETER_KEYS)
        if parameter_keys:
            unknown = set(parameter_keys) - set(PARAMETER_NAMES)
            if unknown:
                raise ValueError(f"Unknown parameter(s): {sorted(unknown)}")
            self.parameter_keys.update(parameter_keys)

        self.output_keys = dict(DEFAULT_OUTPUT_KEYS)
        if output_keys:
            self.output_keys.update(output_keys)

    def _read(self, store: Mapping[str, float], name: str) -> float:
        key = self.parameter_keys[name]
        try:
            return float(store[key])
        except KeyError:
            raise MissingParameterError(key, name) from None

    def pull_fields(self, store: Mapping[str, float], parameters: ParameterSet, names: Iterable[str]):
        # Read everything before writing anything, so a missing key leaves parameters untouched
        values = {name: self._read(store, name) for name in names}
        for name, value in values.items():
            setattr(parameters, name, value)

    def pull_areas(self, store: Mapping[str, float], parameters: ParameterSet):
        self.pull_fields(store, parameters, ("cell_area",))

    def pull_velocity_angles(self, store: Mapping[str, float], parameters: ParameterSet):
        self.pull_fields(store, parameters, ("theta_vi",))

    def pull_srn_params(self, store: Mapping[str, float], parameters: ParameterSet):
        """Parameters that are set once per cell and rarely change"""
        self.pull_fields(store, parameters, SLOW_PARAMETERS)

    def pull(self, store: Mapping[str, float], parameters: ParameterSet) -> ParameterSet:
        """Read all eight parameters, fast-changing ones first."""
        self.pull_fields(store, parameters, FAST_PARAMETERS + SLOW_PARAMETERS)
        logger.debug("Marshalled parameters %s", parameters)
        return parameters

    def push(self, store, state: np.ndarray):
        """Write [theta, erk, target_area] into the store for other collaborators."""
        store[self.output_keys["theta"]] = float(state[0])
        store[self.output_keys["erk"]] = float(state[1])
        store[self.output_keys["target_area"]] = float(state[2])
