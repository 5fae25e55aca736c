# explicit_frame/loaders.py
"""
MODEL LOADING: JSON Configuration + CSV Tables
==============================================

A run is described by one JSON file whose entries point at header-less
CSV tables (paths relative to the JSON file):

    {
        "nodes":  "nodes.csv",        x, y, z                              (one row per node)
        "elems":  "elems.csv",        nn1, nn2                             (one row per element)
        "props":  "props.csv",        E, G, A, Iz, Iy, J, density, nx, ny, nz
        "bcs":    "bcs.csv",          node, dof, value, type (0 = displacement, 1 = velocity)
        "forces": "forces.csv",       node, dof, value                     (optional)
        "nodal_displacements": "...", one value per line, 6N lines      (optional)
        "nodal_velocities":    "...", one value per line, 6N lines      (optional)
        "start_time": 0.0,
        "end_time": 1e-3,
        "iteration_number": 0,                                             (optional)
        "element_type": "timoshenko",                                      (optional)
        "options": {...}                                                   (optional)
    }

Lines starting with '#' are comments. Any malformed input raises
ConfigError naming the offending key and row.
"""

import json
import logging
import numbers
import os
import numpy as np
import pandas as pd
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .config import ConfigError, IntegratorOptions, ManagerOptions
from .kernel.dof import DOF_3D_FRAME
from .prescribed import BC, BCType, Force
from .v3d.elements import BeamElement, ELEMENT_TYPES
from .v3d.model import BeamProps

logger = logging.getLogger(__name__)

# Keys of the configuration that name input files
PATH_KEYS = (
    'nodes', 'elems', 'props', 'bcs', 'forces',
    'nodal_displacements', 'nodal_velocities',
)

PROPS_COLUMNS = ['E', 'G', 'A', 'Iz', 'Iy', 'J', 'density', 'nx', 'ny', 'nz']


@dataclass
class FrameModel:
    """Everything needed to build a mesh and an explicit system."""
    nodes: np.ndarray
    elements: List[BeamElement]
    bcs: List[BC]
    forces: List[Force]
    initial_displacements: np.ndarray
    initial_velocities: np.ndarray
    start_time: float
    end_time: float
    iteration_number: int = 0
    element_type: str = 'timoshenko'
    integrator_options: IntegratorOptions = field(default_factory=IntegratorOptions)
    manager_options: ManagerOptions = field(default_factory=ManagerOptions)
    config: Dict[str, Any] = field(default_factory=dict)

    @property
    def ndof(self) -> int:
        return DOF_3D_FRAME.ndof(len(self.nodes))


def parse_json_config(config_path: str) -> Dict[str, Any]:
    """
    Read a JSON configuration and resolve its file entries to absolute paths.

    Raises:
    -------
    OSError
        If the file cannot be opened
    ConfigError
        If the file is not valid JSON or not a JSON object
    """
    with open(config_path, 'r') as f:
        try:
            config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Error parsing {config_path} (line {e.lineno}, column {e.colno}): {e.msg}") from e

    if not isinstance(config, dict):
        raise ConfigError(f"Configuration {config_path} must contain a JSON object")

    base_dir = os.path.dirname(os.path.abspath(config_path))
    for key in PATH_KEYS:
        if key in config:
            if not isinstance(config[key], str):
                raise ConfigError(f"Value associated with variable {key} is not a string")
            config[key] = os.path.normpath(os.path.join(base_dir, config[key]))
    return config


def read_table(config: Dict[str, Any], key: str, n_columns: int) -> np.ndarray:
    """
    Load the CSV file named by config[key] into a (rows, n_columns) float array.

    Raises:
    -------
    ConfigError
        If the key is missing, the file holds no data, or a row has the
        wrong number of values
    """
    if key not in config:
        raise ConfigError(f"Configuration file does not have requested member variable {key}")
    path = config[key]
    if not isinstance(path, str):
        raise ConfigError(f"Value associated with variable {key} is not a string")

    try:
        df = pd.read_csv(path, header=None, comment='#', skipinitialspace=True, dtype=float)
    except pd.errors.EmptyDataError:
        raise ConfigError(f"No data was loaded for variable {key} ({path})") from None
    except (pd.errors.ParserError, ValueError) as e:
        raise ConfigError(f"Could not parse {key} ({path}): {e}") from e

    if df.empty:
        raise ConfigError(f"No data was loaded for variable {key} ({path})")
    if df.shape[1] != n_columns:
        raise ConfigError(
            f"Rows in {key} must have {n_columns} values, found {df.shape[1]} columns"
        )
    incomplete = df.isna().any(axis=1).to_numpy()
    if incomplete.any():
        row = int(np.flatnonzero(incomplete)[0])
        raise ConfigError(f"Row {row} in {key} does not have {n_columns} values")

    return df.to_numpy(dtype=float)


def _as_indices(values: np.ndarray, key: str) -> np.ndarray:
    """Integer-valued columns (node numbers, DOFs, BC types) as ints."""
    bad = ((values != np.round(values)) | (values < 0)).any(axis=1)
    if bad.any():
        row = int(np.flatnonzero(bad)[0])
        raise ConfigError(f"Row {row} in {key} has a non-integer or negative index")
    return values.astype(np.int64)


def load_nodes(config: Dict[str, Any]) -> np.ndarray:
    return read_table(config, 'nodes', 3)


def load_elements(config: Dict[str, Any], element_type: str = 'timoshenko') -> List[BeamElement]:
    """Build elements from the elems and props tables."""
    try:
        element_cls = ELEMENT_TYPES[element_type]
    except KeyError:
        raise ConfigError(
            f"Unknown element_type '{element_type}'. Choose from {sorted(ELEMENT_TYPES)}"
        ) from None

    elems = _as_indices(read_table(config, 'elems', 2), 'elems')
    props = read_table(config, 'props', len(PROPS_COLUMNS))
    if len(elems) != len(props):
        raise ConfigError(
            f"The number of rows in elems ({len(elems)}) did not match props ({len(props)})"
        )

    elements = []
    for i, ((nn1, nn2), row) in enumerate(zip(elems, props)):
        E, G, A, Iz, Iy, J, density, nx, ny, nz = row
        try:
            element = element_cls(
                int(nn1), int(nn2),
                BeamProps(E=E, G=G, A=A, Iz=Iz, Iy=Iy, J=J, density=density, normal=(nx, ny, nz)),
            )
        except ValueError as e:
            raise ConfigError(f"Row {i} in elems: {e}") from e
        elements.append(element)
    return elements


def load_bcs(config: Dict[str, Any]) -> List[BC]:
    table = read_table(config, 'bcs', 4)
    index_cols = _as_indices(table[:, [0, 1, 3]], 'bcs')
    bcs = []
    for i, ((node, dof, bc_type), value) in enumerate(zip(index_cols, table[:, 2])):
        try:
            bcs.append(BC(int(node), int(dof), float(value), BCType(int(bc_type))))
        except ValueError as e:
            raise ConfigError(f"Row {i} in bcs: {e}") from e
    return bcs


def load_forces(config: Dict[str, Any]) -> List[Force]:
    """Forces are optional; an absent key means no external forces."""
    if 'forces' not in config:
        return []
    table = read_table(config, 'forces', 3)
    index_cols = _as_indices(table[:, :2], 'forces')
    forces = []
    for i, ((node, dof), value) in enumerate(zip(index_cols, table[:, 2])):
        try:
            forces.append(Force(int(node), int(dof), float(value)))
        except ValueError as e:
            raise ConfigError(f"Row {i} in forces: {e}") from e
    return forces


def load_nodal_vector(config: Dict[str, Any], key: str, size: int) -> np.ndarray:
    """One value per line, `size` lines; zeros when the key is absent."""
    if key not in config:
        return np.zeros(size)
    values = read_table(config, key, 1).ravel()
    if len(values) != size:
        raise ConfigError(
            f"Key specified by {key} does not have the required {size} values. "
            f"{len(values)} entries were parsed"
        )
    return values


def _number(config: Dict[str, Any], key: str, default: Optional[float] = None) -> float:
    if key not in config:
        if default is None:
            raise ConfigError(f"Configuration file does not have requested member variable {key}")
        return default
    value = config[key]
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ConfigError(f"{key} provided in configuration is not a number")
    return float(value)


def load_model(config_path: str) -> FrameModel:
    """
    Load a complete model from a JSON configuration file.

    Raises:
    -------
    ConfigError
        For any invalid entry or input table
    OSError
        If the configuration or a referenced file cannot be read
    """
    config = parse_json_config(config_path)

    start_time = _number(config, 'start_time')
    end_time = _number(config, 'end_time')
    iteration_number = config.get('iteration_number', 0)
    if isinstance(iteration_number, bool) or not isinstance(iteration_number, numbers.Integral) \
            or iteration_number < 0:
        raise ConfigError(f"iteration_number must be a non-negative integer, got {iteration_number!r}")

    element_type = config.get('element_type', 'timoshenko')
    if not isinstance(element_type, str):
        raise ConfigError(f"element_type must be a string, got {element_type!r}")

    options = config.get('options', {})
    integrator_options = IntegratorOptions.from_dict(options)
    manager_options = ManagerOptions.from_dict(options)

    nodes = load_nodes(config)
    ndof = DOF_3D_FRAME.ndof(len(nodes))

    model = FrameModel(
        nodes=nodes,
        elements=load_elements(config, element_type),
        bcs=load_bcs(config),
        forces=load_forces(config),
        initial_displacements=load_nodal_vector(config, 'nodal_displacements', ndof),
        initial_velocities=load_nodal_vector(config, 'nodal_velocities', ndof),
        start_time=start_time,
        end_time=end_time,
        iteration_number=int(iteration_number),
        element_type=element_type,
        integrator_options=integrator_options,
        manager_options=manager_options,
        config=config,
    )
    logger.info(
        "Loaded %s: %d nodes, %d elements, %d BCs, %d forces",
        config_path, len(model.nodes), len(model.elements), len(model.bcs), len(model.forces),
    )
    return model
