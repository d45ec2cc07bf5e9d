# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ContainerLocalityPreferences:
    """
    Placement hint attached to one container request.

    Attributes:
        hosts: preferred hosts, empty when the container may land anywhere
        racks: racks of the preferred hosts, deduplicated
    """

    hosts: tuple[str, ...] = ()
    racks: tuple[str, ...] = ()

    @property
    def is_locality_free(self) -> bool:
        return not self.hosts and not self.racks


@dataclass
class PlacementPlan:
    """Everything computed for one placement request, kept for reporting."""

    num_container: int
    needed_containers: int
    targets: dict[str, int]
    ratios: dict[str, int]
    locality_free: int
    locality_aware: int
    preferences: list[ContainerLocalityPreferences] = field(default_factory=list)
