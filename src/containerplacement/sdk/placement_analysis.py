# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import logging
from itertools import groupby
from typing import List, Mapping, Optional

import pandas as pd

from containerplacement.sdk.types import ContainerLocalityPreferences

logger = logging.getLogger(__name__)

FREQUENCY_COLUMNS = ["host", "requests", "share", "target"]
GROUP_COLUMNS = ["containers", "hosts", "racks"]


def host_frequency_frame(preferences: List[ContainerLocalityPreferences],
                         targets: Optional[Mapping[str, int]] = None) -> pd.DataFrame:
    """
    Count in how many container requests each host is preferred.

    share is the fraction of locality-aware requests listing the host.
    """
    rows = [{"host": host} for pref in preferences for host in pref.hosts]
    num_aware = sum(1 for pref in preferences if pref.hosts)
    if not rows:
        return pd.DataFrame(columns=FREQUENCY_COLUMNS)

    df = pd.DataFrame(rows).groupby("host").size().reset_index(name="requests")
    df["share"] = df["requests"] / num_aware
    df["target"] = df["host"].map(lambda h: (targets or {}).get(h, 0))
    return df.sort_values(by=["requests", "host"], ascending=[False, True]).reset_index(drop=True)[FREQUENCY_COLUMNS]


def group_preferences(preferences: List[ContainerLocalityPreferences]) -> pd.DataFrame:
    """Collapse consecutive identical preferences into (containers, hosts, racks) rows."""
    rows = []
    for pref, group in groupby(preferences):
        rows.append({
            "containers": sum(1 for _ in group),
            "hosts": ",".join(pref.hosts) or "-",
            "racks": ",".join(pref.racks) or "-",
        })
    return pd.DataFrame(rows, columns=GROUP_COLUMNS)
