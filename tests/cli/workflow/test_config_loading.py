# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for building placement scenarios from CLI arguments and YAML files.
"""

from types import SimpleNamespace

import pytest

from containerplacement.cli.main import _build_default_scenarios, _build_experiment_scenarios


class TestDefaultScenario:

    def test_builds_from_args(self, cli_parser, default_argv):
        args = cli_parser.parse_args(default_argv + ["--allocated", "host1=1", "--task_cpus", "2",
                                                     "--topology", "host1=/rack1,host2=/rack2"])
        scenario = _build_default_scenarios(args)["default"]

        assert scenario.num_containers == 18
        assert scenario.host_tasks == {"host1": 30, "host2": 30, "host3": 20, "host4": 10}
        assert scenario.allocated == {"host1": 1}
        assert scenario.config == {
            "task_cpus": 2,
            "rack_resolver": {"kind": "static", "topology": {"host1": "/rack1", "host2": "/rack2"}},
        }

    def test_no_overrides(self, cli_parser, default_argv):
        scenario = _build_default_scenarios(cli_parser.parse_args(default_argv))["default"]

        assert scenario.config == {}
        assert scenario.config_path is None


class TestExperimentScenarios:

    def test_skips_invalid_experiments(self, exp_yaml_path, caplog):
        scenarios = _build_experiment_scenarios(SimpleNamespace(yaml_path=exp_yaml_path))

        assert list(scenarios) == ["skewed"]
        assert scenarios["skewed"].allocated == {"host4": 1}
        assert scenarios["skewed"].config == {"rack_resolver": {"topology": {"host1": "/rack1"}}}
        assert "Skipping experiment 'incomplete'" in caplog.text
        assert "Skipping experiment 'malformed'" in caplog.text

    def test_missing_file_exits(self, tmp_path):
        with pytest.raises(SystemExit):
            _build_experiment_scenarios(SimpleNamespace(yaml_path=str(tmp_path / "missing.yaml")))

    def test_non_mapping_root_exits(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n")
        with pytest.raises(SystemExit):
            _build_experiment_scenarios(SimpleNamespace(yaml_path=str(path)))

    def test_no_valid_experiment_exits(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("only:\n  num_containers: 3\n")
        with pytest.raises(SystemExit):
            _build_experiment_scenarios(SimpleNamespace(yaml_path=str(path)))
