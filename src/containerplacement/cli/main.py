# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import argparse
import copy
import json
import logging
import os
import sys
import time
from typing import Dict, List, Optional

import yaml

from containerplacement import __version__
from containerplacement.cli.helpers import PlacementScenario, host_counts_arg, host_racks_arg, merge_pairs
from containerplacement.cli.report_and_save import log_final_summary, save_results
from containerplacement.sdk.allocation_state import InMemoryAllocationState
from containerplacement.sdk.config import load_placement_config
from containerplacement.sdk.placement import LocalityPreferredPlacementStrategy
from containerplacement.sdk.types import PlacementPlan


logger = logging.getLogger(__name__)


def _build_common_cli_parser() -> argparse.ArgumentParser:
    common_parser = argparse.ArgumentParser(add_help=False)
    common_parser.add_argument("--save_dir", type=str, default=None, help="Directory to save the results.")
    common_parser.add_argument("--debug", action="store_true", help="Enable debug mode.")
    return common_parser


def _add_default_mode_arguments(parser):
    parser.add_argument("--num_containers", type=int, required=True, help="Number of containers to request.")
    parser.add_argument("--pending_tasks", type=int, required=True, help="Number of locality aware pending tasks.")
    parser.add_argument("--cores_per_container", type=int, required=True, help="Cores provided by one container.")
    parser.add_argument("--host_tasks", type=host_counts_arg, nargs="*", default=None,
                        help="Pending tasks local to each host, e.g. host1=30,host2=20.")
    parser.add_argument("--allocated", type=host_counts_arg, nargs="*", default=None,
                        help="Containers already granted per host, e.g. host1=1 host2=1.")
    parser.add_argument("--task_cpus", type=int, default=None, help="Cores consumed by one task. Default from config.")
    parser.add_argument("--topology", type=host_racks_arg, nargs="*", default=None,
                        help="Host to rack mapping for the static rack resolver, e.g. host1=/rack1.")
    parser.add_argument("--config", type=str, default=None, help="Placement config YAML applied over the defaults.")


def _add_experiments_mode_arguments(parser):
    parser.add_argument("--yaml_path", type=str, required=True, help="Path to a YAML file containing placement scenarios.")


def configure_parser(parser):
    common_cli_parser = _build_common_cli_parser()
    subparsers = parser.add_subparsers(dest="mode", required=True)

    default_parser = subparsers.add_parser("default", parents=[common_cli_parser], help="Compute placements for a single request.")
    _add_default_mode_arguments(default_parser)

    help_text = "Compute placements for one or more scenarios defined in a YAML file. Example: example.yaml"
    # an example yaml for demonstration
    example_yaml_path = os.path.join(os.path.dirname(__file__), "example.yaml")
    with open(example_yaml_path, "r") as f:
        example_yaml = yaml.safe_load(f)
    description = help_text + "\n\nExample:\n" + json.dumps(example_yaml, indent=2)

    experiments_parser = subparsers.add_parser(
        "exp",
        parents=[common_cli_parser],
        help=help_text,
        description=description,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    _add_experiments_mode_arguments(experiments_parser)


def _build_default_scenarios(args) -> Dict[str, PlacementScenario]:
    config_patch = {}
    if args.task_cpus is not None:
        config_patch["task_cpus"] = args.task_cpus
    topology = merge_pairs(args.topology)
    if topology:
        config_patch["rack_resolver"] = {"kind": "static", "topology": topology}

    scenario = PlacementScenario(
        name="default",
        num_containers=args.num_containers,
        pending_tasks=args.pending_tasks,
        cores_per_container=args.cores_per_container,
        host_tasks=merge_pairs(args.host_tasks),
        allocated=merge_pairs(args.allocated),
        config=config_patch,
        config_path=args.config,
    )
    return {"default": scenario}


_SCENARIO_REQUIRED_KEYS = ("num_containers", "pending_tasks", "cores_per_container")


def _build_experiment_scenarios(args) -> Dict[str, PlacementScenario]:
    try:
        with open(args.yaml_path, "r", encoding="utf-8") as fh:
            experiment_data = yaml.safe_load(fh) or {}
    except Exception as exc:
        logger.error("Error loading experiment YAML file '%s': %s", args.yaml_path, exc)
        raise SystemExit(1) from exc

    if not isinstance(experiment_data, dict):
        logger.error("Experiment YAML root must be a mapping.")
        raise SystemExit(1)

    order = experiment_data.get("exps")
    if isinstance(order, list):
        experiment_names = [name for name in order if name in experiment_data]
    else:
        experiment_names = [name for name in experiment_data.keys() if name != "exps"]

    scenarios: Dict[str, PlacementScenario] = {}

    for exp_name in experiment_names:
        exp_config = experiment_data[exp_name]
        if not isinstance(exp_config, dict):
            logger.warning("Skipping experiment '%s': configuration is not a mapping.", exp_name)
            continue

        missing = [key for key in _SCENARIO_REQUIRED_KEYS if exp_config.get(key) is None]
        if missing:
            logger.warning("Skipping experiment '%s': missing %s.", exp_name, ", ".join(missing))
            continue

        host_tasks = exp_config.get("host_tasks") or {}
        allocated = exp_config.get("allocated") or {}
        if not isinstance(host_tasks, dict) or not isinstance(allocated, dict):
            logger.warning("Skipping experiment '%s': host_tasks and allocated must be mappings.", exp_name)
            continue

        config_section = exp_config.get("config")
        config_section = copy.deepcopy(config_section) if isinstance(config_section, dict) else {}

        scenarios[exp_name] = PlacementScenario(
            name=exp_name,
            num_containers=exp_config["num_containers"],
            pending_tasks=exp_config["pending_tasks"],
            cores_per_container=exp_config["cores_per_container"],
            host_tasks={str(host): count for host, count in host_tasks.items()},
            allocated={str(host): count for host, count in allocated.items()},
            config=config_section,
            config_path=exp_config.get("config_path"),
        )

    if not scenarios:
        logger.error("No valid experiments found in '%s'.", args.yaml_path)
        raise SystemExit(1)

    return scenarios


def run_scenario(scenario: PlacementScenario):
    """Build the collaborators for a scenario and compute its placement plan."""
    config = load_placement_config(yaml_path=scenario.config_path, overrides=scenario.config)
    allocation_state = InMemoryAllocationState(scenario.cores_per_container, scenario.allocated)
    strategy = LocalityPreferredPlacementStrategy.from_config(config, allocation_state)
    plan = strategy.plan(scenario.num_containers, scenario.pending_tasks, scenario.host_tasks)
    return plan, config


def _execute_scenarios(scenarios: Dict[str, PlacementScenario]):
    """Run all scenarios and return the plans and the resolved configs."""
    plans: Dict[str, PlacementPlan] = {}
    configs: Dict[str, dict] = {}
    start_time = time.time()

    for exp_name, scenario in scenarios.items():
        try:
            logger.info("Starting experiment: %s", exp_name)
            logger.debug("Scenario: %s", scenario.pretty())
            plan, config = run_scenario(scenario)
            plans[exp_name] = plan
            configs[exp_name] = config.toDict()
            logger.info("Experiment %s placed %d containers (%d locality aware).",
                        exp_name, plan.num_container, plan.locality_aware)
        except Exception as exc:
            logger.error("Error running experiment %s: %s", exp_name, exc)
            logger.exception("Full traceback")

    if not plans:
        logger.error("No successful experiment runs.")
        raise SystemExit(1)

    log_final_summary(plans=plans, scenarios=scenarios)

    end_time = time.time()
    logger.info("All experiments completed in %.2f seconds", end_time - start_time)

    return plans, configs


def main(args):
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO,
                        format='%(levelname)s %(asctime)s %(filename)s:%(lineno)d] %(message)s')

    logger.info("Loading container placement version: %s", __version__)

    if args.mode == "default":
        scenarios = _build_default_scenarios(args)
    elif args.mode == "exp":
        scenarios = _build_experiment_scenarios(args)
    else:
        raise SystemExit(f"Unsupported mode: {args.mode}")

    plans, configs = _execute_scenarios(scenarios)

    if args.save_dir:
        save_results(
            plans=plans,
            scenarios=scenarios,
            configs=configs,
            save_dir=args.save_dir,
        )
    return plans


def run(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Locality aware container placement")
    configure_parser(parser)
    args = parser.parse_args(argv)
    main(args)


if __name__ == "__main__":
    run(sys.argv[1:])
