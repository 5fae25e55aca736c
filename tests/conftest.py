# tests/conftest.py
import json

import pytest


E, G, AREA, I, RHO = 200e9, 80e9, 0.0314159265358979, 7.85398e-5, 7800.0


def write_lines(path, lines):
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def axial_bar_config(tmp_path):
    """
    One 1 m Timoshenko member along x: node 0 clamped, node 1 pulled at
    1 mm/s along x. Returns a function writing the config with overrides.
    """
    write_lines(tmp_path / "nodes.csv", ["# x, y, z", "0.0, 0.0, 0.0", "1.0, 0.0, 0.0"])
    write_lines(tmp_path / "elems.csv", ["0, 1"])
    write_lines(tmp_path / "props.csv", [f"{E}, {G}, {AREA}, {I}, {I}, {2 * I}, {RHO}, 0.0, 1.0, 0.0"])
    write_lines(
        tmp_path / "bcs.csv",
        [f"0, {dof}, 0.0, 0" for dof in range(6)] + ["1, 0, 0.001, 1"],
    )

    def make(name="config.json", **overrides):
        config = {
            "nodes": "nodes.csv",
            "elems": "elems.csv",
            "props": "props.csv",
            "bcs": "bcs.csv",
            "start_time": 0.0,
            "end_time": 2e-4,
            "options": {"save_frequency": 5},
        }
        config.update(overrides)
        path = tmp_path / name
        path.write_text(json.dumps(config))
        return path

    return make
