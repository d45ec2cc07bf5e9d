# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Turn pending task locality hints into per-host container targets.
"""
import logging
import math
from fractions import Fraction
from typing import Dict, Mapping

from containerplacement.sdk import common
from containerplacement.sdk.allocation_state import AllocationState

logger = logging.getLogger(__name__)


def num_containers_pending(num_tasks_pending: int, cores_per_task: int, cores_per_container: int) -> int:
    """Containers needed to run ``num_tasks_pending`` tasks, rounded up."""
    return -(-num_tasks_pending * cores_per_task // cores_per_container)


def normalize_demand(
    host_to_local_task_count: Mapping[str, int],
    num_locality_aware_pending_tasks: int,
    cores_per_task: int,
    cores_per_container: int,
    allocation_state: AllocationState,
) -> Dict[str, int]:
    """
    Compute how many more containers each host should get.

    Each host receives a share of the needed containers proportional to its
    local task count. Containers already granted on the host count against
    that share; the remainder is rounded up and never negative.

    Args:
        host_to_local_task_count: host -> number of pending tasks local to it
        num_locality_aware_pending_tasks: pending tasks with a locality preference
        cores_per_task: cores consumed by one task
        cores_per_container: cores provided by one container
        allocation_state: source of already granted containers per host

    Returns:
        host -> additional containers wanted on that host

    Raises:
        InvalidPlacementInput: negative counts, bad host names, fewer than one core per task or container
    """
    common.check_host_counts("host_to_local_task_count", host_to_local_task_count)
    common.check_count("num_locality_aware_pending_tasks", num_locality_aware_pending_tasks)
    common.check_count("cores_per_task", cores_per_task, minimum=1)
    common.check_count("cores_per_container", cores_per_container, minimum=1)

    total_local_tasks = sum(host_to_local_task_count.values())
    if total_local_tasks == 0:
        return {}

    needed = num_containers_pending(num_locality_aware_pending_tasks, cores_per_task, cores_per_container)
    targets = {}
    for host, count in host_to_local_task_count.items():
        expected = Fraction(count * needed, total_local_tasks)
        existing = allocation_state.containers_on(host)
        targets[host] = max(0, math.ceil(expected - existing))

    logger.debug("Needed %d containers for %d pending tasks, targets %s",
                 needed, num_locality_aware_pending_tasks, targets)
    return targets
