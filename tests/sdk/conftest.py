# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import pytest

from containerplacement.sdk.allocation_state import InMemoryAllocationState
from containerplacement.sdk.placement import LocalityPreferredPlacementStrategy
from containerplacement.sdk.rack_resolver import StaticRackResolver


@pytest.fixture
def host_tasks():
    """20 tasks prefer (host1, host2, host3), 10 prefer (host1, host2, host4)."""
    return {"host1": 30, "host2": 30, "host3": 20, "host4": 10}


@pytest.fixture
def rack_resolver():
    return StaticRackResolver({"host1": "/rack1", "host2": "/rack1", "host3": "/rack2"})


@pytest.fixture
def strategy_factory(rack_resolver):
    """Strategy over 2-core containers with optional containers already granted."""
    def _factory(allocated=None, locality_free_first=True):
        state = InMemoryAllocationState(cores_per_container=2, allocated=allocated)
        return LocalityPreferredPlacementStrategy(
            state, rack_resolver, task_cpus=1, locality_free_first=locality_free_first)
    return _factory
