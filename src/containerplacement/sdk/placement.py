# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Locality preferred container placement.

Given per-host container targets, the requested containers are split into a
locality-free group (no hints) and a locality-aware group. Every host gets a
ratio scaled onto the size of the locality-aware group; each emitted request
lists the hosts whose ratio is still positive, then every ratio drops by one.
Hosts with more demand therefore stay in the candidate set for more requests.

Example: 30 pending tasks with local task counts
(host1: 30, host2: 30, host3: 20, host4: 10), 1 core per task and 2 cores per
container need 15 containers, giving targets (5, 5, 4, 2).

- 18 containers requested: 2 without preferences, then 16 requests in which
  host1 and host2 appear 16 times, host3 13 times and host4 7 times.
- 10 containers requested: all 10 carry preferences, with host frequencies
  10 : 10 : 8 : 4.

Containers already granted on a host reduce its target. With one container on
every host the targets above become (4, 4, 3, 1); with five on every host all
targets are 0 and every request is locality-free.
"""
import logging
from typing import Dict, List, Mapping, Optional, Sequence

from containerplacement.sdk import common
from containerplacement.sdk.allocation_state import AllocationState
from containerplacement.sdk.demand import normalize_demand, num_containers_pending
from containerplacement.sdk.rack_resolver import RackResolver, StaticRackResolver, build_rack_resolver
from containerplacement.sdk.types import ContainerLocalityPreferences, PlacementPlan

logger = logging.getLogger(__name__)


def _ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def validate_request(num_container: int,
                     num_locality_aware_pending_tasks: int,
                     host_to_local_task_count: Mapping[str, int]) -> None:
    """Reject malformed input before any computation."""
    common.check_count("num_container", num_container)
    common.check_count("num_locality_aware_pending_tasks", num_locality_aware_pending_tasks)
    common.check_host_counts("host_to_local_task_count", host_to_local_task_count)


def scale_ratios(targets: Mapping[str, int], num_locality_aware: int) -> Dict[str, int]:
    """Rescale targets so the largest becomes ``num_locality_aware``."""
    if num_locality_aware == 0:
        return {host: 0 for host in targets}
    largest = max(targets.values(), default=0)
    if largest <= 0:
        raise common.PlacementInvariantError(
            f"{num_locality_aware} locality aware containers requested without any positive host target")
    return {host: _ceil_div(target * num_locality_aware, largest) for host, target in targets.items()}


def candidate_hosts(ratios: Mapping[str, int], host_order: Sequence[str]) -> List[str]:
    """Hosts still wanting containers, in ``host_order``."""
    return [host for host in host_order if ratios[host] > 0]


def next_ratios(ratios: Mapping[str, int]) -> Dict[str, int]:
    """One request has been emitted: every host's ratio drops by one."""
    return {host: ratio - 1 for host, ratio in ratios.items()}


def _dedup(items: Sequence[str]) -> List[str]:
    return list(dict.fromkeys(items))


def allocate(num_container: int,
             targets: Mapping[str, int],
             rack_resolver: RackResolver,
             locality_free_first: bool = True) -> List[ContainerLocalityPreferences]:
    """
    Build one locality preference per requested container.

    Args:
        num_container: number of containers to request
        targets: host -> additional containers wanted on that host
        rack_resolver: host -> rack lookup
        locality_free_first: emit requests without preferences before the others

    Returns:
        list of length ``num_container``

    Raises:
        InvalidPlacementInput: negative or non-integer counts, bad host names
    """
    common.check_count("num_container", num_container)
    common.check_host_counts("targets", targets)
    return _allocate(num_container, targets, rack_resolver, locality_free_first)[0]


def _allocate(num_container, targets, rack_resolver, locality_free_first):
    num_locality_aware_total = sum(targets.values())
    num_locality_free = max(0, num_container - num_locality_aware_total)
    num_locality_aware = num_container - num_locality_free

    locality_free = [ContainerLocalityPreferences() for _ in range(num_locality_free)]
    locality_aware = []

    ratios = scale_ratios(targets, num_locality_aware)
    scaled = dict(ratios)
    if num_locality_aware > 0:
        # Larger targets first, host name breaks ties.
        host_order = sorted(targets, key=lambda h: (-targets[h], h))
        host_to_rack = dict(zip(host_order, rack_resolver.resolve_all(host_order)))
        for _ in range(num_locality_aware):
            hosts = candidate_hosts(ratios, host_order)
            racks = _dedup([host_to_rack[h] for h in hosts])
            locality_aware.append(ContainerLocalityPreferences(tuple(hosts), tuple(racks)))
            ratios = next_ratios(ratios)

    if locality_free_first:
        preferences = locality_free + locality_aware
    else:
        preferences = locality_aware + locality_free

    if len(preferences) != num_container:
        raise common.PlacementInvariantError(
            f"Computed {len(preferences)} locality preferences for {num_container} containers")

    logger.debug("Placed %d containers: %d locality free, %d locality aware, ratios %s",
                 num_container, num_locality_free, num_locality_aware, scaled)
    return preferences, scaled, num_locality_free, num_locality_aware


class LocalityPreferredPlacementStrategy:
    """
    Compute container locality preferences from pending task hints.

    Args:
        allocation_state: source of granted containers and per-container cores
        rack_resolver: host -> rack lookup, unknown hosts map to the default rack
        task_cpus: cores consumed by one task
        locality_free_first: order of the two request groups in the result
    """

    def __init__(self,
                 allocation_state: AllocationState,
                 rack_resolver: Optional[RackResolver] = None,
                 task_cpus: int = common.DEFAULT_TASK_CPUS,
                 locality_free_first: bool = True):
        if isinstance(task_cpus, bool) or not isinstance(task_cpus, int) or task_cpus < 1:
            raise common.InvalidPlacementInput(f"task_cpus must be a positive integer, got {task_cpus!r}")
        self.allocation_state = allocation_state
        self.rack_resolver = rack_resolver or StaticRackResolver()
        self.task_cpus = task_cpus
        self.locality_free_first = locality_free_first

    @classmethod
    def from_config(cls, config, allocation_state: AllocationState) -> "LocalityPreferredPlacementStrategy":
        return cls(
            allocation_state=allocation_state,
            rack_resolver=build_rack_resolver(config.rack_resolver),
            task_cpus=config.task_cpus,
            locality_free_first=bool(config.locality_free_first),
        )

    def plan(self,
             num_container: int,
             num_locality_aware_pending_tasks: int,
             host_to_local_task_count: Mapping[str, int]) -> PlacementPlan:
        """Like :meth:`compute_placements`, also returning the intermediate values."""
        validate_request(num_container, num_locality_aware_pending_tasks, host_to_local_task_count)

        state = self.allocation_state.snapshot()
        cores_per_container = state.cores_per_container()
        if cores_per_container <= 0:
            raise common.InvalidPlacementInput(
                f"cores per container must be greater than 0, got {cores_per_container}")

        needed = num_containers_pending(num_locality_aware_pending_tasks, self.task_cpus, cores_per_container)
        targets = normalize_demand(
            host_to_local_task_count,
            num_locality_aware_pending_tasks,
            self.task_cpus,
            cores_per_container,
            state,
        )
        preferences, ratios, num_free, num_aware = _allocate(
            num_container, targets, self.rack_resolver, self.locality_free_first)
        return PlacementPlan(
            num_container=num_container,
            needed_containers=needed,
            targets=targets,
            ratios=ratios,
            locality_free=num_free,
            locality_aware=num_aware,
            preferences=preferences,
        )

    def compute_placements(self,
                           num_container: int,
                           num_locality_aware_pending_tasks: int,
                           host_to_local_task_count: Mapping[str, int]) -> List[ContainerLocalityPreferences]:
        """
        Calculate each container's host and rack locality.

        Args:
            num_container: number of containers to request
            num_locality_aware_pending_tasks: pending tasks with a locality preference
            host_to_local_task_count: preferred host -> number of pending tasks
                that could run locally on it

        Returns:
            one ContainerLocalityPreferences per container, ``num_container`` in total

        Raises:
            InvalidPlacementInput: negative or non-integer counts, bad host names
        """
        return self.plan(num_container, num_locality_aware_pending_tasks, host_to_local_task_count).preferences
