import numpy as np
import pytest

from erk_propulsion_srn import PARAMETER_NAMES, CellData, ParameterSet, SimulationConfig


def test_parameter_defaults():
    np.testing.assert_array_equal(ParameterSet().to_array(), [1.0, 1.0, 1.0, 1.0, 0.1, 0.01, 0.0, 0.0])


def test_parameter_vector_order_is_fixed():
    parameters = ParameterSet(cell_area=2.0, tau=3.0, alpha=4.0, beta=5.0,
                              eta_std=6.0, dt_ode=7.0, theta_vi=8.0, K=9.0)

    np.testing.assert_array_equal(parameters.to_array(), np.arange(2.0, 10.0))
    assert ParameterSet.index_map()["theta_vi"] == 6
    assert len(PARAMETER_NAMES) == 8


def test_parameter_array_round_trip():
    parameters = ParameterSet(cell_area=1.3, K=0.25)

    assert ParameterSet.from_array(parameters.to_array()) == parameters


def test_parameter_array_of_wrong_length_is_rejected():
    with pytest.raises(ValueError):
        ParameterSet.from_array(np.zeros(7))


def test_copy_is_independent():
    parameters = ParameterSet()
    duplicate = parameters.copy()
    duplicate.K = 3.0

    assert parameters.K == 0.0


@pytest.mark.parametrize("kwargs", [{"dt": 0.0}, {"dt": -1.0}, {"record_every": 0}])
def test_invalid_simulation_config(kwargs):
    with pytest.raises(ValueError):
        SimulationConfig(**kwargs)


def test_cell_data_behaves_like_a_mapping():
    data = CellData({"volume": 1}, K=2)
    data["theta_vi"] = 0.5

    assert data.get_item("volume") == 1.0
    assert isinstance(data["K"], float)
    assert data.has_item("theta_vi") and "theta_vi" in data
    assert list(data) == ["K", "theta_vi", "volume"]
    assert len(data) == 3
    with pytest.raises(KeyError):
        data.get_item("missing")


def test_cell_data_copy_is_independent():
    data = CellData(volume=1.0)
    duplicate = data.copy()
    duplicate["volume"] = 2.0

    assert data["volume"] == 1.0
