# tests/test_io.py
"""
CONFIGURATION, LOADING, RUN MANAGEMENT AND CLI TESTS
====================================================

Every test writes its model into pytest's tmp_path (see conftest.py).
"""

import json
import os

import numpy as np
import pandas as pd
import pytest

from explicit_frame.cli import build_parser, main
from explicit_frame.config import ConfigError, IntegratorOptions, ManagerOptions
from explicit_frame.loaders import load_model, parse_json_config, read_table
from explicit_frame.manager import SimulationManager, save_column_vector
from explicit_frame.prescribed import BCType
from explicit_frame.stability import estimate_stable_timestep
from explicit_frame.v3d.elements import EulerBernoulliBeam, TimoshenkoBeam

E = 200e9
AREA = 0.0314159265358979


def write_lines(path, lines):
    path.write_text("\n".join(lines) + "\n")


class TestOptions:

    def test_defaults(self):
        opts = IntegratorOptions()
        assert (opts.beta, opts.gamma) == (0.25, 0.5)
        assert (opts.damping_alpha, opts.damping_beta) == (0.01, 0.01)
        assert ManagerOptions().save_frequency == 0
        assert ManagerOptions().state_filename == "state"

    def test_shared_mapping_unknown_keys_ignored(self):
        options = {"beta": 0.3, "verbose": True, "save_frequency": 10, "colour": "red"}
        assert IntegratorOptions.from_dict(options).beta == 0.3
        manager = ManagerOptions.from_dict(options)
        assert manager.verbose is True
        assert manager.save_frequency == 10

    def test_int_accepted_for_float(self):
        assert IntegratorOptions.from_dict({"damping_alpha": 0}).damping_alpha == 0.0

    @pytest.mark.parametrize("options", [
        {"save_frequency": "5"},
        {"save_frequency": 2.5},
        {"verbose": 1},
        {"state_filename": ""},
        {"save_frequency": -1},
    ])
    def test_bad_manager_options(self, options):
        with pytest.raises(ConfigError):
            ManagerOptions.from_dict(options)

    def test_bad_integrator_options(self):
        with pytest.raises(ConfigError, match="beta"):
            IntegratorOptions.from_dict({"beta": "quarter"})
        with pytest.raises(ConfigError):
            IntegratorOptions.from_dict([0.25, 0.5])

    def test_config_error_is_value_error(self):
        assert issubclass(ConfigError, ValueError)


class TestLoadModel:

    def test_loads_axial_bar(self, axial_bar_config):
        model = load_model(str(axial_bar_config()))

        assert model.nodes.shape == (2, 3)
        assert model.ndof == 12
        assert len(model.elements) == 1
        assert isinstance(model.elements[0], TimoshenkoBeam)
        assert model.elements[0].props.E == E
        assert model.elements[0].props.normal == (0.0, 1.0, 0.0)
        assert len(model.bcs) == 7
        assert model.bcs[-1].bc_type == BCType.VELOCITY
        assert model.bcs[-1].global_index == 6
        assert model.forces == []
        np.testing.assert_array_equal(model.initial_displacements, np.zeros(12))
        assert model.manager_options.save_frequency == 5
        assert model.iteration_number == 0

    def test_paths_resolved_against_config_dir(self, axial_bar_config, tmp_path):
        config = parse_json_config(str(axial_bar_config()))
        assert config["nodes"] == os.path.join(str(tmp_path), "nodes.csv")

    def test_optional_tables(self, axial_bar_config, tmp_path):
        write_lines(tmp_path / "forces.csv", ["1, 2, 500.0", "1, 2, 250.0"])
        write_lines(tmp_path / "u0.txt", [str(0.1 * i) for i in range(12)])
        path = axial_bar_config(
            forces="forces.csv", nodal_displacements="u0.txt",
            element_type="euler_bernoulli", iteration_number=7,
        )
        model = load_model(str(path))

        assert [f.global_index for f in model.forces] == [8, 8]
        assert model.forces[1].get_value(0.0) == 250.0
        assert np.isclose(model.initial_displacements[11], 1.1)
        np.testing.assert_array_equal(model.initial_velocities, 0.0)
        assert isinstance(model.elements[0], EulerBernoulliBeam)
        assert model.iteration_number == 7

    def test_bad_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text('{"nodes": "nodes.csv",')
        with pytest.raises(ConfigError, match="Error parsing"):
            load_model(str(path))

    def test_missing_required_key(self, axial_bar_config, tmp_path):
        path = axial_bar_config()
        config = json.loads(path.read_text())
        del config["bcs"]
        path.write_text(json.dumps(config))
        with pytest.raises(ConfigError, match="bcs"):
            load_model(str(path))

    def test_missing_file_is_os_error(self, axial_bar_config):
        with pytest.raises(OSError):
            load_model(str(axial_bar_config(nodes="nowhere.csv")))

    def test_short_row(self, axial_bar_config, tmp_path):
        write_lines(tmp_path / "nodes.csv", ["0.0, 0.0, 0.0", "1.0, 0.0"])
        with pytest.raises(ConfigError, match="Row 1 in nodes"):
            load_model(str(axial_bar_config()))

    def test_wrong_column_count(self, axial_bar_config, tmp_path):
        write_lines(tmp_path / "elems.csv", ["0, 1, 2"])
        with pytest.raises(ConfigError, match="elems"):
            load_model(str(axial_bar_config()))

    def test_non_numeric_value(self, axial_bar_config, tmp_path):
        write_lines(tmp_path / "nodes.csv", ["0.0, 0.0, 0.0", "one, 0.0, 0.0"])
        with pytest.raises(ConfigError, match="nodes"):
            load_model(str(axial_bar_config()))

    def test_empty_table(self, axial_bar_config, tmp_path):
        (tmp_path / "bcs.csv").write_text("")
        with pytest.raises(ConfigError, match="No data"):
            load_model(str(axial_bar_config()))

    def test_elems_props_mismatch(self, axial_bar_config, tmp_path):
        write_lines(tmp_path / "nodes.csv", ["0, 0, 0", "1, 0, 0", "2, 0, 0"])
        write_lines(tmp_path / "elems.csv", ["0, 1", "1, 2"])
        with pytest.raises(ConfigError, match="did not match"):
            load_model(str(axial_bar_config()))

    def test_unknown_element_type(self, axial_bar_config):
        with pytest.raises(ConfigError, match="element_type"):
            load_model(str(axial_bar_config(element_type="rod")))

    def test_bad_bc_type(self, axial_bar_config, tmp_path):
        write_lines(tmp_path / "bcs.csv", ["0, 0, 0.0, 2"])
        with pytest.raises(ConfigError, match="Row 0 in bcs"):
            load_model(str(axial_bar_config()))

    def test_fractional_node_index(self, axial_bar_config, tmp_path):
        write_lines(tmp_path / "elems.csv", ["0, 0.5"])
        with pytest.raises(ConfigError, match="non-integer"):
            load_model(str(axial_bar_config()))

    def test_initial_vector_wrong_length(self, axial_bar_config, tmp_path):
        write_lines(tmp_path / "v0.txt", ["0.0"] * 6)
        with pytest.raises(ConfigError, match="required 12 values"):
            load_model(str(axial_bar_config(nodal_velocities="v0.txt")))

    def test_times_must_be_numbers(self, axial_bar_config):
        with pytest.raises(ConfigError, match="end_time"):
            load_model(str(axial_bar_config(end_time="soon")))

    def test_read_table_returns_floats(self, axial_bar_config):
        config = parse_json_config(str(axial_bar_config()))
        table = read_table(config, "bcs", 4)
        assert table.dtype == float
        assert table.shape == (7, 4)


class TestSimulationManager:

    def test_run_to_end_time(self, axial_bar_config, tmp_path):
        out = tmp_path / "out"
        manager = SimulationManager(str(axial_bar_config()), output_dir=str(out))
        system = manager.run()

        dt = manager.time_step
        assert np.isclose(dt, estimate_stable_timestep(manager.model.nodes, manager.model.elements))
        n_steps = manager.iteration_number
        assert n_steps == int(np.ceil(2e-4 / dt))
        assert system.time >= 2e-4
        assert np.isclose(system.displacements[6], n_steps * dt * 0.001, rtol=1e-10)
        assert system.factorization_count == 1

    def test_dump_files(self, axial_bar_config, tmp_path):
        out = tmp_path / "out"
        manager = SimulationManager(str(axial_bar_config()), output_dir=str(out))
        manager.run()

        last = manager.iteration_number // 5
        for k in range(last + 1):
            for stem in ("nodal_displacements", "nodal_velocities", "nodal_forces"):
                assert (out / f"{stem}_{k:05d}.txt").exists()
            assert (out / f"state_{k:05d}.json").exists()
        assert not (out / f"state_{last + 1:05d}.json").exists()

        u = pd.read_csv(out / f"nodal_displacements_{last:05d}.txt", header=None)[0].to_numpy()
        np.testing.assert_allclose(u, manager.system.displacements, rtol=1e-14)

        initial = pd.read_csv(out / "nodal_displacements_00000.txt", header=None)[0].to_numpy()
        np.testing.assert_array_equal(initial, 0.0)

    def test_state_file_restarts_run(self, axial_bar_config, tmp_path):
        out = tmp_path / "out"
        manager = SimulationManager(str(axial_bar_config()), output_dir=str(out))
        manager.run()
        last = manager.iteration_number // 5

        state_path = out / f"state_{last:05d}.json"
        state = json.loads(state_path.read_text())
        assert state["iteration_number"] == manager.iteration_number
        assert state["start_time"] == manager.system.time
        assert os.path.isabs(state["nodal_displacements"])
        assert os.path.isabs(state["nodes"])

        state["end_time"] = 4e-4
        state_path.write_text(json.dumps(state))
        restarted = SimulationManager(str(state_path), output_dir=str(tmp_path / "restart"))

        np.testing.assert_allclose(
            restarted.system.displacements, manager.system.displacements, rtol=1e-14
        )
        assert restarted.system.time == manager.system.time
        restarted.run()
        assert restarted.iteration_number > manager.iteration_number
        assert np.isclose(
            restarted.system.displacements[6],
            restarted.iteration_number * restarted.time_step * 0.001,
            rtol=1e-9,
        )

    def test_final_forces_tension(self, axial_bar_config, tmp_path):
        manager = SimulationManager(str(axial_bar_config()), output_dir=str(tmp_path / "out"))
        system = manager.run()
        strain = system.displacements[6] / 1.0

        assert np.isclose(system.forces[6], E * AREA * strain, rtol=1e-10)
        assert np.isclose(system.forces[0], -E * AREA * strain, rtol=1e-10)

    def test_save_column_vector(self, tmp_path):
        path = tmp_path / "v.txt"
        save_column_vector(np.array([1.0, -2.5e-7, 1.0 / 3.0]), str(path))

        lines = path.read_text().split()
        assert lines[0] == "1"
        assert float(lines[2]) == pytest.approx(1.0 / 3.0, rel=1e-15)


class TestCLI:

    def test_parser(self):
        args = build_parser().parse_args(["-c", "model.json", "-v"])
        assert args.config == "model.json"
        assert args.verbose is True
        assert args.output_dir is None

    def test_config_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_successful_run(self, axial_bar_config, tmp_path):
        out = tmp_path / "cli_out"
        assert main(["-c", str(axial_bar_config()), "-o", str(out)]) == 0
        assert (out / "state_00000.json").exists()

    def test_invalid_config_exit_code(self, axial_bar_config, caplog):
        code = main(["-c", str(axial_bar_config(element_type="rod"))])
        assert code == 1
        assert "ConfigError" in caplog.text

    def test_missing_config_exit_code(self, tmp_path):
        assert main(["-c", str(tmp_path / "absent.json")]) == 1

    def test_inconsistent_model_exit_code(self, axial_bar_config, tmp_path):
        write_lines(tmp_path / "elems.csv", ["0, 4"])
        assert main(["-c", str(axial_bar_config()), "-o", str(tmp_path / "o")]) == 1


class TestShippedExample:

    def test_single_element_example_loads(self):
        path = os.path.join(os.path.dirname(__file__), "..", "demos", "single-element", "config.json")
        model = load_model(path)

        assert model.ndof == 12
        assert model.manager_options.save_frequency == 100
        assert model.bcs[-1].bc_type == BCType.VELOCITY
        assert np.isclose(model.elements[0].props.E, E)
