"""
Pytest configuration for erk_propulsion_srn tests.
"""
import os
import sys

import pytest

# Make the package importable without installing it
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from erk_propulsion_srn import CellData, ErkPropulsionSrnModel, RandomDeviateSource


def make_cell_data(**overrides) -> CellData:
    """Cell data carrying every item the SRN reads, with overrides by item name"""
    items = {
        "volume": 1.0,
        "taul": 1.0,
        "alpha": 1.0,
        "beta": 1.0,
        "Eta Std": 0.0,
        "dt_ode": 0.01,
        "theta_vi": 0.0,
        "K": 0.0,
    }
    items.update(overrides)
    return CellData(items)


def make_model(cell_data: CellData, seed: int = 0, state=None) -> ErkPropulsionSrnModel:
    model = ErkPropulsionSrnModel(random_source=RandomDeviateSource(seed))
    model.initialise(cell_data)
    if state is not None:
        model.set_state(state)
    return model


@pytest.fixture
def cell_data():
    """Quiet cell: no angular noise, no alignment"""
    return make_cell_data()


@pytest.fixture
def noisy_cell_data():
    return make_cell_data(**{"Eta Std": 0.5, "K": 0.3, "theta_vi": 1.0, "volume": 1.2})


@pytest.fixture
def seeded_source():
    return RandomDeviateSource(1234)
