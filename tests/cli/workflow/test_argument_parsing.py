# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for CLI argument parsing functionality.
"""

import argparse

import pytest

from containerplacement.cli.helpers import host_counts_arg, host_racks_arg, merge_pairs


class TestCLIArgumentParsing:
    """Test CLI argument parsing and validation."""

    def test_default_mode_required_args(self, cli_parser):
        subparser_action = next(action for action in cli_parser._actions if action.dest == 'mode')
        default_parser = subparser_action.choices['default']

        required_args = [action.dest for action in default_parser._actions if getattr(action, "required", False)]

        assert set(required_args) == {'num_containers', 'pending_tasks', 'cores_per_container'}

    def test_exp_mode_required_args(self, cli_parser):
        subparser_action = next(action for action in cli_parser._actions if action.dest == 'mode')
        exp_parser = subparser_action.choices['exp']

        required_args = [action.dest for action in exp_parser._actions if getattr(action, "required", False)]

        assert 'yaml_path' in required_args

    def test_mode_choices(self, cli_parser):
        action = next(action for action in cli_parser._actions if action.dest == 'mode')
        assert set(action.choices.keys()) == {'default', 'exp'}

    def test_default_mode_parses(self, cli_parser, default_argv):
        args = cli_parser.parse_args(default_argv + ["--allocated", "host1=1", "--debug"])

        assert args.num_containers == 18
        assert args.host_tasks == [{"host1": 30, "host2": 30}, {"host3": 20, "host4": 10}]
        assert args.allocated == [{"host1": 1}]
        assert args.task_cpus is None
        assert args.debug is True
        assert args.save_dir is None

    def test_missing_required_arg_exits(self, cli_parser):
        with pytest.raises(SystemExit):
            cli_parser.parse_args(["default", "--num_containers", "3"])


    @pytest.mark.parametrize("flag,value", [
        ("--host_tasks", "host1"),
        ("--allocated", "host1=many"),
        ("--topology", "=/rack1"),
    ])
    def test_malformed_pairs_exit_with_usage_error(self, cli_parser, default_argv, capsys, flag, value):
        with pytest.raises(SystemExit) as exc_info:
            cli_parser.parse_args(default_argv + [flag, value])

        assert exc_info.value.code == 2
        assert "Expected" in capsys.readouterr().err


class TestPairParsing:

    def test_host_counts_arg(self):
        assert host_counts_arg("host1=30, host2=30") == {"host1": 30, "host2": 30}

    def test_host_counts_arg_empty(self):
        assert host_counts_arg("") == {}
        assert host_counts_arg(" , ") == {}

    @pytest.mark.parametrize("text", ["host1", "=3", "host1=many"])
    def test_host_counts_arg_invalid(self, text):
        with pytest.raises(argparse.ArgumentTypeError):
            host_counts_arg(text)

    def test_host_racks_arg_keeps_strings(self):
        assert host_racks_arg("host1=/rack1,host2=7") == {"host1": "/rack1", "host2": "7"}

    def test_merge_pairs(self):
        assert merge_pairs(None) == {}
        assert merge_pairs([{"host1": 30}, {"host2": 20, "host1": 5}]) == {"host1": 5, "host2": 20}
