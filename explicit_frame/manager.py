# explicit_frame/manager.py
"""
SIMULATION MANAGER: Run a Configured Model to Its End Time
==========================================================

WORKFLOW:
---------
1. Load the JSON configuration and its tables (loaders.load_model)
2. Assemble the mesh and build the explicit system
3. Estimate a stable time step from the elements
4. Dump the initial state, advance until end_time, dumping every
   `save_frequency` steps, then dump the final state

DUMP FILES:
-----------
Dump number k = iteration // max(save_frequency, 1) writes, in the
output directory:

    {nodal_displacements_filename}_{k:05d}.txt   one value per line
    {nodal_velocities_filename}_{k:05d}.txt      one value per line
    {nodal_forces_filename}_{k:05d}.txt          K·u + M·a, one value per line
    {state_filename}_{k:05d}.json                restartable configuration

The state JSON is the input configuration with start_time,
iteration_number, nodal_displacements and nodal_velocities pointing at
the dump, so a run can be continued with

    explicit-frame -c state_00010.json
"""

import copy
import json
import logging
import os
import time
import numpy as np
import pandas as pd
from tqdm import tqdm
from typing import Dict, Optional

from .kernel.compare import ValueCompare
from .loaders import FrameModel, load_model
from .mesh import Mesh
from .stability import estimate_stable_timestep
from .system import ExplicitSystem

logger = logging.getLogger(__name__)


def save_column_vector(vector: np.ndarray, path: str) -> None:
    """Write a vector with one value per line, 15 significant digits."""
    pd.Series(np.asarray(vector, dtype=float)).to_csv(
        path, header=False, index=False, float_format='%.15g'
    )


class SimulationManager:
    """
    Builds an ExplicitSystem from a configuration file and runs it.

    Parameters:
    -----------
    config_path : str
        Path to the JSON configuration
    output_dir : str, optional
        Directory for dump files (created if missing). Defaults to the
        current working directory.

    Raises:
    -------
    ConfigError
        If the configuration or one of its tables is invalid
    ValueError
        If the model is inconsistent (e.g. an element references a missing node)
    OSError
        If an input file cannot be read
    """

    def __init__(self, config_path: str, output_dir: Optional[str] = None):
        self.config_path = config_path
        self.output_dir = output_dir if output_dir is not None else os.getcwd()

        self.model: FrameModel = load_model(config_path)
        self.options = self.model.manager_options
        self.start_time = self.model.start_time
        self.end_time = self.model.end_time
        self.iteration_number = self.model.iteration_number
        self.compare = ValueCompare()

        t_start = time.perf_counter()
        mesh = Mesh(self.model.nodes, self.model.elements, self.model.bcs)
        self.system = ExplicitSystem(
            mesh,
            self.model.forces,
            self.model.initial_displacements,
            self.model.initial_velocities,
            t0=self.start_time,
            options=self.model.integrator_options,
        )
        self.time_step = estimate_stable_timestep(self.model.nodes, self.model.elements)
        logger.info(
            "Constructed system with %d DOFs in %.3f s, dt = %.6e s",
            mesh.ndof, time.perf_counter() - t_start, self.time_step,
        )

    def _dump_paths(self) -> Dict[str, str]:
        k = self.iteration_number // max(self.options.save_frequency, 1)
        tail = f"_{k:05d}"
        o = self.options
        return {
            'nodal_displacements': os.path.join(self.output_dir, f"{o.nodal_displacements_filename}{tail}.txt"),
            'nodal_velocities': os.path.join(self.output_dir, f"{o.nodal_velocities_filename}{tail}.txt"),
            'nodal_forces': os.path.join(self.output_dir, f"{o.nodal_forces_filename}{tail}.txt"),
            'state': os.path.join(self.output_dir, f"{o.state_filename}{tail}.json"),
        }

    def dump_system(self) -> Dict[str, str]:
        """
        Save the current state to disk.

        Returns:
        --------
        Dict[str, str]
            The paths written, keyed by 'nodal_displacements',
            'nodal_velocities', 'nodal_forces' and 'state'
        """
        os.makedirs(self.output_dir, exist_ok=True)
        paths = self._dump_paths()

        save_column_vector(self.system.displacements, paths['nodal_displacements'])
        save_column_vector(self.system.velocities, paths['nodal_velocities'])
        save_column_vector(self.system.forces, paths['nodal_forces'])

        state = copy.deepcopy(self.model.config)
        state['nodal_displacements'] = os.path.abspath(paths['nodal_displacements'])
        state['nodal_velocities'] = os.path.abspath(paths['nodal_velocities'])
        state['start_time'] = self.system.time
        state['iteration_number'] = self.iteration_number

        with open(paths['state'], 'w') as f:
            json.dump(state, f, indent=4)

        logger.debug("Saved state at t=%.6e (iteration %d) to %s",
                     self.system.time, self.iteration_number, paths['state'])
        return paths

    def run(self) -> ExplicitSystem:
        """
        Advance the system until its time reaches end_time.

        Returns:
        --------
        ExplicitSystem
            The integrated system (also available as self.system)
        """
        t_start = time.perf_counter()
        logger.info("Starting analysis: t = %.6e to %.6e", self.system.time, self.end_time)

        self.dump_system()

        n_steps = int(np.ceil(max(self.end_time - self.system.time, 0.0) / self.time_step))
        with tqdm(total=n_steps, desc="Integrating", unit="step",
                  disable=not self.options.verbose) as progress:
            while self.compare.less_than(self.system.time, self.end_time):
                self.system.advance(self.time_step)
                self.iteration_number += 1
                progress.update(1)

                if self.options.save_frequency > 0 \
                        and self.iteration_number % self.options.save_frequency == 0:
                    self.dump_system()

        self.dump_system()
        logger.info(
            "Explicit time integration completed in %.3f s (%d iterations, %d factorizations)",
            time.perf_counter() - t_start, self.iteration_number, self.system.factorization_count,
        )
        return self.system
