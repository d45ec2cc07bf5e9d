# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import argparse
import json
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class PlacementScenario:
    """
    One placement request to evaluate from the CLI.

    config is a patch applied over the packaged placement defaults.
    """
    name: str
    num_containers: int
    pending_tasks: int
    cores_per_container: int
    host_tasks: Dict[str, int] = field(default_factory=dict)
    allocated: Dict[str, int] = field(default_factory=dict)
    config: Dict[str, Any] = field(default_factory=dict)
    config_path: Optional[str] = None

    def pretty(self) -> str:
        return json.dumps(asdict(self), indent=2, sort_keys=False)


def _parse_pairs(text: str, cast) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for token in text.split(","):
        token = token.strip()
        if not token:
            continue
        key, sep, value = token.partition("=")
        if not sep or not key.strip():
            raise argparse.ArgumentTypeError(f"Expected key=value, got '{token}'")
        result[key.strip()] = cast(value.strip())
    return result


def _to_count(value: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Expected an integer count, got '{value}'") from exc


def host_counts_arg(text: str) -> Dict[str, int]:
    """
    argparse type for ``host=count`` tokens, comma separated tokens allowed.

    Example: "host1=30,host2=30" -> {"host1": 30, "host2": 30}
    """
    return _parse_pairs(text, _to_count)


def host_racks_arg(text: str) -> Dict[str, str]:
    """argparse type for ``host=rack`` tokens, e.g. "host1=/rack1,host2=/rack2"."""
    return _parse_pairs(text, str)


def merge_pairs(parsed: Optional[List[Dict[str, Any]]]) -> Dict[str, Any]:
    """Merge the dicts collected by an ``nargs`` pair option; later keys win."""
    result: Dict[str, Any] = {}
    for pairs in parsed or []:
        result.update(pairs)
    return result
