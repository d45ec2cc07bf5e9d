# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import logging
import os
import traceback
from typing import Dict

import yaml
from prettytable import PrettyTable

from containerplacement.cli.helpers import PlacementScenario
from containerplacement.sdk.placement_analysis import group_preferences, host_frequency_frame
from containerplacement.sdk.types import PlacementPlan

logger = logging.getLogger(__name__)


def _plot_request_table(exp_name: str, plan: PlacementPlan) -> str:
    """Container requests grouped by identical preferences."""
    buf = [f"\n{exp_name} Container Requests:"]
    table = PrettyTable()
    table.field_names = ["Group", "containers", "hosts", "racks"]
    for i, row in enumerate(group_preferences(plan.preferences).to_dict("records")):
        table.add_row([i + 1, row["containers"], row["hosts"], row["racks"]])
    buf.append(table.get_string())
    return "\n".join(buf)


def _plot_host_table(exp_name: str, plan: PlacementPlan) -> str:
    """Per-host request frequency versus normalized target."""
    df = host_frequency_frame(plan.preferences, plan.targets)
    if df.empty:
        return f"\n{exp_name}: no locality aware requests."
    buf = [f"\n{exp_name} Host Preference Frequency:"]
    table = PrettyTable()
    table.field_names = ["host", "target", "ratio", "requests", "share"]
    for row in df.to_dict("records"):
        table.add_row([row["host"], row["target"], plan.ratios.get(row["host"], 0),
                       row["requests"], f"{row['share']:.2%}"])
    buf.append(table.get_string())
    return "\n".join(buf)


def log_final_summary(plans: Dict[str, PlacementPlan], scenarios: Dict[str, PlacementScenario]):
    """Log final summary of placement results"""
    summary_box = []
    summary_box.append("*" * 80)
    summary_box.append("*{:^78}*".format(" Container Placement Results "))
    summary_box.append("*" * 80)

    for exp_name, plan in plans.items():
        scenario = scenarios[exp_name]
        summary_box.append("  " + "-" * 76)
        summary_box.append(f"  {exp_name}:")
        summary_box.append(f"    Requested containers: {plan.num_container}")
        summary_box.append(f"    Pending locality aware tasks: {scenario.pending_tasks} "
                           f"(needs {plan.needed_containers} containers of {scenario.cores_per_container} cores)")
        summary_box.append(f"    Locality free: {plan.locality_free}, locality aware: {plan.locality_aware}")
        summary_box.append(f"    Normalized targets: {plan.targets}")
        summary_box.append(_plot_request_table(exp_name, plan))
        summary_box.append(_plot_host_table(exp_name, plan))

    summary_box.append("*" * 80)
    logger.info("\n" + "\n".join(summary_box))


def save_results(plans: Dict[str, PlacementPlan],
                 scenarios: Dict[str, PlacementScenario],
                 configs: Dict[str, dict],
                 save_dir: str):
    """Save the results to a directory, one subdirectory per experiment."""
    logger.info('Saving results to %s', save_dir)
    try:
        os.makedirs(save_dir, exist_ok=True)
        for exp_name, plan in plans.items():
            exp_dir = os.path.join(save_dir, exp_name)
            os.makedirs(exp_dir, exist_ok=True)

            # 1. Container requests in output order
            placements = {
                "num_containers": plan.num_container,
                "locality_free": plan.locality_free,
                "locality_aware": plan.locality_aware,
                "targets": dict(plan.targets),
                "requests": [{"hosts": list(p.hosts), "racks": list(p.racks)} for p in plan.preferences],
            }
            with open(os.path.join(exp_dir, 'placements.yaml'), 'w') as f:
                yaml.safe_dump(placements, f, sort_keys=False)

            # 2. Host frequency table
            host_frequency_frame(plan.preferences, plan.targets).to_csv(
                os.path.join(exp_dir, 'host_frequency.csv'), index=False)

            # 3. Scenario and resolved config for repro
            with open(os.path.join(exp_dir, 'config.yaml'), 'w') as f:
                yaml.safe_dump({
                    "scenario": {
                        "num_containers": scenarios[exp_name].num_containers,
                        "pending_tasks": scenarios[exp_name].pending_tasks,
                        "cores_per_container": scenarios[exp_name].cores_per_container,
                        "host_tasks": dict(scenarios[exp_name].host_tasks),
                        "allocated": dict(scenarios[exp_name].allocated),
                    },
                    "config": configs.get(exp_name, {}),
                }, f, sort_keys=False)
    except Exception as exc:
        logger.error("Failed to save results: %s, %s", exc, traceback.format_exc())
