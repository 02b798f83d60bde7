import numpy as np
import pandas as pd
import os
import time
from pathlib import Path

from erk_propulsion_srn import CellData, SimulationConfig, SrnPopulationSimulator


def make_cell_data(area: float, theta_vi: float, K: float, eta_std: float, dt_ode: float) -> CellData:
    """Cell data as the mechanics and neighbour-averaging steps would leave it"""
    return CellData({
        "volume": area,
        "taul": 1.0,
        "alpha": 1.0,
        "beta": 1.0,
        "Eta Std": eta_std,
        "dt_ode": dt_ode,
        "theta_vi": theta_vi,
        "K": K,
    })


def run_alignment_sweep(
    K_values: list,  # Alignment strengths to sweep through
    num_cells: int,
    theta_vi: float = np.pi / 4,  # Fixed velocity angle the cells should align to
    eta_std: float = 0.1,
    dt: float = 0.01,
    end_time: float = 10.0,
    seed: int = 42,
    base_output_dir: str = "alignment_sweep_results"
):
    """
    Run a population of uncoupled cells at several alignment strengths.

    Parameters:
    -----------
    K_values : list
        Alignment strengths to sweep through
    num_cells : int
        Number of cells per alignment strength
    theta_vi : float
        Velocity angle held fixed for all cells
    eta_std : float
        Std of the angular noise
    dt : float
        Time step, used both for the outer loop and the SDE
    end_time : float
        Simulated time per run
    seed : int
        Base seed; every cell gets its own stream
    base_output_dir : str
        Base directory to save results

    Returns:
    --------
    dict
        Dictionary with K as key and trajectory DataFrame as value
    """
    start_time = time.time()
    Path(base_output_dir).mkdir(parents=True, exist_ok=True)

    sweep_params = {
        "K_values": K_values,
        "num_cells": num_cells,
        "theta_vi": theta_vi,
        "eta_std": eta_std,
        "dt": dt,
        "end_time": end_time,
        "seed": seed,
    }
    np.save(os.path.join(base_output_dir, "sweep_params.npy"), sweep_params)

    all_results = {}
    summary_rows = []

    for K in K_values:
        K_start_time = time.time()
        print(f"\n=== Running {num_cells} cells at K = {K} ===\n")

        config = SimulationConfig(dt=dt, end_time=end_time, seed=seed, per_cell_streams=True)
        simulator = SrnPopulationSimulator(config, verbose=True)

        # Spread the initial angles evenly; initialise() starts every cell at theta = 0
        for i in range(num_cells):
            cell_data = make_cell_data(1.0, theta_vi, K, eta_std, dt)
            model = simulator.add_cell(i, cell_data)
            state = model.get_state()
            state[0] = 2.0 * np.pi * i / num_cells
            model.set_state(state)

        results = simulator.run()
        results.to_csv(os.path.join(base_output_dir, f"trajectories_K_{K}.csv"), index=False)
        all_results[K] = results

        # Phase distance to the velocity angle at the end of the run
        final = results[results["step"] == results["step"].max()]
        phase_distance = np.abs(np.angle(np.exp(1j * (final["theta"].to_numpy() - theta_vi))))
        summary_rows.append({
            "K": K,
            "mean_phase_distance": float(np.mean(phase_distance)),
            "order_parameter": float(np.abs(np.mean(np.exp(1j * final["theta"].to_numpy())))),
        })

        print(f"Completed K = {K} in {time.time() - K_start_time:.2f} seconds")

    summary = pd.DataFrame(summary_rows)
    summary.to_csv(os.path.join(base_output_dir, "summary.csv"), index=False)
    print(summary.to_string(index=False))

    print(f"\nAlignment sweep completed in {time.time() - start_time:.2f} seconds.")
    print(f"Results saved to {base_output_dir}")

    return all_results


if __name__ == "__main__":
    # Example usage - these values can be modified
    K_to_sweep = [0.0, 0.1, 0.5, 1.0, 2.0]
    num_cells = 16

    results = run_alignment_sweep(K_values=K_to_sweep, num_cells=num_cells)
