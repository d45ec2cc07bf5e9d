# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Allocation state queried by the placement strategy.

The strategy only reads two things: how many containers are already granted on
a host, and how many cores every container carries. The in-memory tracker below
records grants and releases so callers and tests have a concrete source.
"""
import logging
import threading
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

logger = logging.getLogger(__name__)


class AllocationState(ABC):
    """Read-only view of granted containers."""

    @abstractmethod
    def containers_on(self, host: str) -> int:
        """Number of containers granted on ``host``, 0 if none."""

    @abstractmethod
    def cores_per_container(self) -> int:
        """Cores each granted container provides."""

    def snapshot(self) -> "AllocationState":
        """Consistent view for one placement call; stateless sources return themselves."""
        return self


@dataclass(frozen=True)
class AllocationSnapshot(AllocationState):
    """Point-in-time copy of an allocation state."""

    cores: int
    host_to_count: Mapping[str, int] = field(default_factory=dict)

    def containers_on(self, host: str) -> int:
        return self.host_to_count.get(host, 0)

    def cores_per_container(self) -> int:
        return self.cores


class InMemoryAllocationState(AllocationState):
    """
    Tracks granted containers per host.

    Args:
        cores_per_container: cores of every granted container
        allocated: optional initial host -> container count, container ids are
            generated for these entries
    """

    def __init__(self, cores_per_container: int, allocated: Optional[Mapping[str, int]] = None):
        if cores_per_container <= 0:
            raise ValueError(f"cores_per_container must be greater than 0, got {cores_per_container}")
        self._cores = cores_per_container
        self._lock = threading.Lock()
        self._host_to_containers: Dict[str, set] = defaultdict(set)
        self._container_to_host: Dict[str, str] = {}
        for host, count in (allocated or {}).items():
            for i in range(count):
                self.add_container(host, f"{host}_container_{i}")

    def add_container(self, host: str, container_id: str) -> None:
        with self._lock:
            if container_id in self._container_to_host:
                raise ValueError(f"Container {container_id} is already allocated on "
                                 f"{self._container_to_host[container_id]}")
            self._host_to_containers[host].add(container_id)
            self._container_to_host[container_id] = host
        logger.debug("Granted container %s on %s", container_id, host)

    def remove_container(self, container_id: str) -> None:
        with self._lock:
            host = self._container_to_host.pop(container_id, None)
            if host is None:
                logger.warning("Release of unknown container %s ignored", container_id)
                return
            containers = self._host_to_containers[host]
            containers.discard(container_id)
            if not containers:
                del self._host_to_containers[host]
        logger.debug("Released container %s on %s", container_id, host)

    def containers_on(self, host: str) -> int:
        with self._lock:
            containers = self._host_to_containers.get(host)
            return len(containers) if containers else 0

    def cores_per_container(self) -> int:
        return self._cores

    def host_counts(self) -> Dict[str, int]:
        with self._lock:
            return {host: len(c) for host, c in self._host_to_containers.items()}

    def snapshot(self) -> AllocationSnapshot:
        return AllocationSnapshot(cores=self._cores, host_to_count=self.host_counts())
