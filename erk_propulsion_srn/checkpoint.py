"""
Saving and restoring the SRN state of a whole population.

Checkpoints are .npz archives with one named array per field, so values
round-trip bit for bit and no pickling is involved.
"""

import json
import logging
import numbers
from pathlib import Path
from typing import Dict, Hashable, Optional, Tuple, Union

import numpy as np

from erk_propulsion_srn.exceptions import ConfigurationError
from erk_propulsion_srn.noise_generation import RandomDeviateSource
from erk_propulsion_srn.sde_system import ErkPropulsionSDESystem
from erk_propulsion_srn.srn_model import CHECKPOINT_FORMAT_VERSION, ErkPropulsionSrnModel

logger = logging.getLogger(__name__)


def _encode_cell_id(cell_id: Hashable) -> Union[int, str]:
    # Ids are stored as JSON so that ints come back as ints and keep their sort order
    if isinstance(cell_id, numbers.Integral) and not isinstance(cell_id, bool):
        return int(cell_id)
    if isinstance(cell_id, str):
        return cell_id
    raise ValueError(f"Cell id {cell_id!r} must be an int or a str to be checkpointed")


def save_checkpoint(path: Union[str, Path],
                    models: Dict[Hashable, ErkPropulsionSrnModel],
                    random_source: Optional[RandomDeviateSource] = None,
                    time: Optional[float] = None) -> Path:
    """
    Write the state of every model to path.

    Parameters:
    -----------
    path : str or Path
        Output file; numpy appends .npz if missing
    models : dict
        Initialised models keyed by cell id
    random_source : RandomDeviateSource, optional
        Shared noise source whose position must be restored for an exact continuation
    time : float, optional
        Simulation time of the snapshot
    """
    cell_ids = sorted(models)
    snapshots = [models[cid].to_checkpoint() for cid in cell_ids]
    names = ErkPropulsionSDESystem().variable_names

    states = np.array([[s["state"][name] for name in names] for s in snapshots],
                      dtype=np.float64).reshape(len(snapshots), len(names))
    times = np.array([s["time"] for s in snapshots], dtype=np.float64)
    rng_state = random_source.state_to_json() if random_source is not None else ""

    path = Path(path)
    np.savez(path,
             format_version=np.array(CHECKPOINT_FORMAT_VERSION),
             cell_ids=np.array(json.dumps([_encode_cell_id(cid) for cid in cell_ids])),
             variable_names=np.array(names, dtype=str),
             states=states,
             times=times,
             time=np.array(np.nan if time is None else time, dtype=np.float64),
             rng_state=np.array(rng_state))
    if path.suffix != ".npz":
        path = path.with_name(path.name + ".npz")
    logger.info("Saved SRN checkpoint of %d cells to %s", len(cell_ids), path)
    return path


def load_checkpoint(path: Union[str, Path], **model_kwargs
                    ) -> Tuple[Dict[Hashable, ErkPropulsionSrnModel], Optional[RandomDeviateSource], Optional[float]]:
    """
    Restore models written by save_checkpoint.

    Returns:
    --------
    models : dict
        Ready models keyed by cell id, not yet bound to cell data
    random_source : RandomDeviateSource or None
        Restored noise source if one was saved; it is also handed to every model
    time : float or None
    """
    with np.load(path, allow_pickle=False) as archive:
        version = int(archive["format_version"])
        if version != CHECKPOINT_FORMAT_VERSION:
            raise ConfigurationError(f"Unsupported SRN checkpoint version: {version}")
        cell_ids = json.loads(str(archive["cell_ids"]))
        names = [str(name) for name in archive["variable_names"]]
        states = archive["states"]
        times = archive["times"]
        time = float(archive["time"])
        rng_json = str(archive["rng_state"])

    random_source = RandomDeviateSource.from_json(rng_json) if rng_json else None
    if random_source is not None:
        model_kwargs.setdefault("random_source", random_source)

    models = {}
    for i, cid in enumerate(cell_ids):
        data = {
            "format_version": version,
            "time": float(times[i]),
            "state": {name: float(states[i, j]) for j, name in enumerate(names)},
        }
        models[cid] = ErkPropulsionSrnModel.from_checkpoint(data, **model_kwargs)

    logger.info("Loaded SRN checkpoint of %d cells from %s", len(models), path)
    return models, random_source, None if np.isnan(time) else time
