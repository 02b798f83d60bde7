import numpy as np
import pytest

from conftest import make_cell_data
from erk_propulsion_srn import (ConfigurationError, ErkPropulsionSrnModel, RandomDeviateSource, load_checkpoint,
                                save_checkpoint)


def build_population(source):
    cell_data = {
        "a": make_cell_data(**{"Eta Std": 0.4, "K": 0.5, "theta_vi": 0.3}),
        "b": make_cell_data(**{"Eta Std": 0.2, "volume": 1.3}),
    }
    models = {}
    for cell_id, data in cell_data.items():
        model = ErkPropulsionSrnModel(random_source=source)
        model.initialise(data)
        models[cell_id] = model
    return models, cell_data


def advance(models, start_step, end_step, dt=0.01):
    for n in range(start_step + 1, end_step + 1):
        for cell_id in sorted(models):
            models[cell_id].simulate_to_current_time(n * dt)


def test_restart_reproduces_the_uninterrupted_trajectory(tmp_path):
    models, cell_data = build_population(RandomDeviateSource(2024))
    advance(models, 0, 50)

    path = save_checkpoint(tmp_path / "srn", models, models["a"].random_source, time=0.5)
    advance(models, 50, 100)

    restored, source, time = load_checkpoint(path)
    assert time == 0.5
    assert source is not None
    for cell_id, model in restored.items():
        assert model.random_source is source
        model.cell_data = cell_data[cell_id]
    advance(restored, 50, 100)

    for cell_id in models:
        np.testing.assert_array_equal(restored[cell_id].get_state(), models[cell_id].get_state())
        assert restored[cell_id].get_time() == models[cell_id].get_time()


def test_states_round_trip_exactly(tmp_path):
    models, _ = build_population(RandomDeviateSource(5))
    models["a"].set_state([1e-300, -123.456789012345, np.pi])

    path = save_checkpoint(tmp_path / "exact.npz", models)
    restored, source, time = load_checkpoint(path)

    assert source is None
    assert time is None
    assert sorted(restored) == ["a", "b"]
    np.testing.assert_array_equal(restored["a"].get_state(), [1e-300, -123.456789012345, np.pi])


def test_empty_population(tmp_path):
    path = save_checkpoint(tmp_path / "empty", {})

    restored, _, _ = load_checkpoint(path)

    assert restored == {}


def test_unsupported_version_is_rejected(tmp_path):
    path = tmp_path / "future.npz"
    np.savez(path, format_version=np.array(2))

    with pytest.raises(ConfigurationError):
        load_checkpoint(path)


def test_integer_ids_keep_their_type_and_order(tmp_path):
    source = RandomDeviateSource(7)
    cell_data = {10: make_cell_data(**{"Eta Std": 0.4}), 2: make_cell_data(**{"Eta Std": 0.3, "K": 0.2})}
    models = {}
    for cell_id, data in cell_data.items():
        models[cell_id] = ErkPropulsionSrnModel(random_source=source)
        models[cell_id].initialise(data)
    advance(models, 0, 20)

    path = save_checkpoint(tmp_path / "ints", models, source, time=0.2)
    advance(models, 20, 40)

    restored, _, _ = load_checkpoint(path)
    assert sorted(restored) == [2, 10]
    for cell_id, model in restored.items():
        model.bind_cell_data(cell_data[cell_id])
    advance(restored, 20, 40)

    for cell_id in models:
        np.testing.assert_array_equal(restored[cell_id].get_state(), models[cell_id].get_state())


def test_unsupported_cell_id_type_is_rejected(tmp_path):
    models, _ = build_population(RandomDeviateSource(5))

    with pytest.raises(ValueError):
        save_checkpoint(tmp_path / "tuple", {(1, 2): models["a"]})


def test_restored_models_report_the_parameters_of_their_cell(tmp_path):
    models, cell_data = build_population(RandomDeviateSource(5))
    path = save_checkpoint(tmp_path / "params", models)

    restored, _, _ = load_checkpoint(path)
    # Not bound yet: parameters are not part of a checkpoint
    assert restored["b"].get_cell_area() == 1.0
    restored["a"].bind_cell_data(cell_data["a"])
    restored["b"].bind_cell_data(cell_data["b"])

    assert restored["a"].get_velocity_angle() == 0.3
    assert restored["b"].get_cell_area() == 1.3
    assert restored["b"].get_parameters().eta_std == 0.2

    model = ErkPropulsionSrnModel.from_checkpoint(models["b"].to_checkpoint(), cell_data=cell_data["b"])
    assert model.cell_data is cell_data["b"]
    assert model.get_cell_area() == 1.3
