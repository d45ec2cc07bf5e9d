# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import copy
import importlib.resources as pkg_resources
import logging
from collections.abc import Mapping
from typing import Any, Optional

import yaml
from munch import DefaultMunch

from containerplacement.sdk import common

logger = logging.getLogger(__name__)

_DEFAULTS_FILE = "defaults.yaml"


def _deep_merge(target: dict, source: Mapping) -> dict:
    for key, value in source.items():
        if isinstance(target.get(key), dict) and isinstance(value, Mapping):
            _deep_merge(target[key], value)
        else:
            target[key] = copy.deepcopy(value)
    return target


def load_default_config() -> dict:
    text = pkg_resources.files("containerplacement.sdk").joinpath(_DEFAULTS_FILE).read_text(encoding="utf-8")
    return yaml.safe_load(text)


def _validate(config: DefaultMunch) -> None:
    task_cpus = config.task_cpus
    if isinstance(task_cpus, bool) or not isinstance(task_cpus, int) or task_cpus < 1:
        raise ValueError(f"task_cpus must be a positive integer, got {task_cpus!r}")

    kinds = [kind.value for kind in common.RackResolverKind]
    resolver = config.rack_resolver
    if not isinstance(resolver, Mapping):
        raise ValueError(f"rack_resolver must be a mapping, got {resolver!r}")
    if resolver.kind not in kinds:
        raise ValueError(f"Unknown rack resolver kind '{resolver.kind}'. Available: {kinds}")
    if resolver.kind == common.RackResolverKind.script.value and not resolver.script:
        raise ValueError("rack_resolver.script is required for the script rack resolver")
    if resolver.topology is not None and not isinstance(resolver.topology, Mapping):
        raise ValueError("rack_resolver.topology must be a mapping of host to rack")
    if resolver.kind == common.RackResolverKind.script.value and resolver.topology:
        raise ValueError("rack_resolver.topology is only used by the static rack resolver")
    max_args = resolver.script_max_args
    if max_args is not None and (isinstance(max_args, bool) or not isinstance(max_args, int) or max_args < 1):
        raise ValueError(f"rack_resolver.script_max_args must be a positive integer, got {max_args!r}")


def load_placement_config(yaml_path: Optional[str] = None,
                          overrides: Optional[Mapping[str, Any]] = None) -> DefaultMunch:
    """
    Build the placement config: packaged defaults, then ``yaml_path``, then ``overrides``.

    Raises:
        ValueError: if the YAML file cannot be read or the merged config is invalid
    """
    config_dict = load_default_config()

    if yaml_path:
        try:
            with open(yaml_path, encoding="utf-8") as f:
                user_config = yaml.safe_load(f) or {}
        except Exception as e:
            raise ValueError(f"Failed to load yaml file: {yaml_path}") from e
        if not isinstance(user_config, Mapping):
            raise ValueError(f"Config root must be a mapping: {yaml_path}")
        _deep_merge(config_dict, user_config)
        logger.debug("Applied config file %s", yaml_path)

    if overrides:
        _deep_merge(config_dict, overrides)

    config = DefaultMunch.fromDict(config_dict, DefaultMunch)
    _validate(config)
    return config
