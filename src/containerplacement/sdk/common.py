# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from collections.abc import Mapping
from enum import Enum

"""
Rack reported for hosts the topology does not know about
"""
DEFAULT_RACK = "/default-rack"

"""
Cores consumed by a single task when nothing else is configured
"""
DEFAULT_TASK_CPUS = 1

"""
Hosts passed to a topology script per invocation
"""
DEFAULT_SCRIPT_MAX_ARGS = 100


class RackResolverKind(Enum):
    """
    Rack resolver implementations selectable from config
    """
    static = "static"
    script = "script"


class PlacementError(Exception):
    """Base class for placement failures."""


class InvalidPlacementInput(PlacementError, ValueError):
    """Caller supplied counts or host names the algorithm cannot accept."""


class PlacementInvariantError(PlacementError, AssertionError):
    """Internal bookkeeping went wrong; the result must not be used."""


def check_count(name: str, value, minimum: int = 0) -> None:
    """Raise InvalidPlacementInput unless ``value`` is an int no smaller than ``minimum``."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidPlacementInput(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        if minimum == 0:
            raise InvalidPlacementInput(f"{name} must not be negative, got {value}")
        raise InvalidPlacementInput(f"{name} must be at least {minimum}, got {value}")


def check_host_counts(name: str, host_counts) -> None:
    """Raise InvalidPlacementInput unless ``host_counts`` maps non-empty host names to counts."""
    if not isinstance(host_counts, Mapping):
        raise InvalidPlacementInput(f"{name} must be a mapping, got {type(host_counts).__name__}")
    for host, count in host_counts.items():
        if not isinstance(host, str) or not host:
            raise InvalidPlacementInput(f"host names must be non-empty strings, got {host!r}")
        check_count(f"{name} of {host}", count)
