# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""
containerplacement:

Locality-aware container placement for compute frameworks running on a
cluster resource manager. It offers:
- A placement strategy (sdk/placement.py) that turns pending task locality
  hints into per-container host/rack preferences.
- Collaborator interfaces for rack resolution and allocation state (sdk/*).
- A CLI (cli/*) to explore placements from flags or YAML scenario files.
"""

__version__ = "0.1.0"
