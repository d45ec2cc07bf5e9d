# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for placement config loading.
"""

import pytest
import yaml

from containerplacement.sdk.allocation_state import InMemoryAllocationState
from containerplacement.sdk.config import load_placement_config
from containerplacement.sdk.placement import LocalityPreferredPlacementStrategy


class TestLoadPlacementConfig:

    def test_defaults(self):
        config = load_placement_config()

        assert config.task_cpus == 1
        assert config.locality_free_first is True
        assert config.rack_resolver.kind == "static"
        assert config.rack_resolver.default_rack == "/default-rack"
        assert config.rack_resolver.script is None

    def test_yaml_then_overrides(self, tmp_path):
        path = tmp_path / "placement.yaml"
        path.write_text(yaml.safe_dump({
            "task_cpus": 2,
            "rack_resolver": {"topology": {"host1": "/rack1"}},
        }))
        config = load_placement_config(str(path), overrides={"task_cpus": 4})

        assert config.task_cpus == 4
        assert config.rack_resolver.topology == {"host1": "/rack1"}
        assert config.rack_resolver.default_rack == "/default-rack"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValueError, match="Failed to load yaml file"):
            load_placement_config(str(tmp_path / "missing.yaml"))

    def test_non_mapping_root(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="must be a mapping"):
            load_placement_config(str(path))

    def test_null_rack_resolver_section(self, tmp_path):
        path = tmp_path / "placement.yaml"
        path.write_text("rack_resolver: null\n")
        with pytest.raises(ValueError, match="rack_resolver must be a mapping"):
            load_placement_config(str(path))

    @pytest.mark.parametrize("overrides,match", [
        ({"task_cpus": 0}, "task_cpus"),
        ({"task_cpus": "two"}, "task_cpus"),
        ({"rack_resolver": {"kind": "dns"}}, "Unknown rack resolver kind"),
        ({"rack_resolver": {"kind": "script"}}, "script is required"),
        ({"rack_resolver": {"topology": ["host1"]}}, "topology must be a mapping"),
        ({"rack_resolver": None}, "rack_resolver must be a mapping"),
        ({"rack_resolver": {"kind": "script", "script": "/x", "script_max_args": 0}}, "script_max_args"),
        ({"rack_resolver": {"script_max_args": "many"}}, "script_max_args"),
        ({"rack_resolver": {"kind": "script", "script": "/x", "topology": {"host1": "/rack1"}}},
         "only used by the static"),
    ])
    def test_invalid_config(self, overrides, match):
        with pytest.raises(ValueError, match=match):
            load_placement_config(overrides=overrides)

    def test_strategy_from_config(self, host_tasks):
        config = load_placement_config(overrides={
            "locality_free_first": False,
            "rack_resolver": {"topology": {"host1": "/rack1"}},
        })
        state = InMemoryAllocationState(2)
        strategy = LocalityPreferredPlacementStrategy.from_config(config, state)
        preferences = strategy.compute_placements(18, 30, host_tasks)

        assert strategy.task_cpus == 1
        assert preferences[0].racks == ("/rack1", "/default-rack")
        assert preferences[-1].is_locality_free
