# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import argparse

import pytest
import yaml

from containerplacement.cli.main import configure_parser as configure_cli_parser


@pytest.fixture
def cli_parser():
    """Pre-configured CLI parser for testing."""
    parser = argparse.ArgumentParser()
    configure_cli_parser(parser)
    return parser


@pytest.fixture
def default_argv():
    return [
        "default",
        "--num_containers", "18",
        "--pending_tasks", "30",
        "--cores_per_container", "2",
        "--host_tasks", "host1=30,host2=30", "host3=20,host4=10",
    ]


@pytest.fixture
def exp_yaml_path(tmp_path):
    """Scenario file with one valid, one incomplete and one malformed experiment."""
    data = {
        "exps": ["skewed", "incomplete", "malformed", "not_defined"],
        "skewed": {
            "num_containers": 10,
            "pending_tasks": 30,
            "cores_per_container": 2,
            "host_tasks": {"host1": 30, "host2": 30, "host3": 20, "host4": 10},
            "allocated": {"host4": 1},
            "config": {"rack_resolver": {"topology": {"host1": "/rack1"}}},
        },
        "incomplete": {
            "num_containers": 10,
            "host_tasks": {"host1": 1},
        },
        "malformed": ["not", "a", "mapping"],
    }
    path = tmp_path / "scenarios.yaml"
    path.write_text(yaml.safe_dump(data))
    return str(path)
