# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
from .placement import LocalityPreferredPlacementStrategy, allocate
from .types import ContainerLocalityPreferences, PlacementPlan
