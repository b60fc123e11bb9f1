"""
Command line entry point: one invocation deploys one named scenario.

    python -m deployment keeper-token --network sepolia

Exit status is 0 when every artifact was deployed and 1 otherwise.
"""

import os
import sys
import logging
import argparse
from typing import Callable, List, Mapping, Optional

from .backend import DeploymentBackend, Web3Backend
from .config import DeployerSettings, NETWORKS, default_deployment_path, load_environment
from .errors import ConfigurationError, DeployerError, DeploymentError
from .notifications import DeploymentNotifier
from .orchestrator import Orchestrator
from .reporter import format_gas_summary, format_report, load_deployment, report, save_deployment
from .resolver import resolve
from .scenarios import SCENARIOS, get_scenario

logger = logging.getLogger(__name__)

BackendFactory = Callable[[DeployerSettings], DeploymentBackend]


def configure_logging(log_file: Optional[str] = "deployment.log", verbose: bool = False):
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.insert(0, logging.FileHandler(log_file))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="deployment",
        description="Deploy a named set of contracts in dependency order.",
    )
    parser.add_argument("scenario", nargs="?", choices=sorted(SCENARIOS), help="Deployment scenario to run")
    parser.add_argument("--network", default="hardhat", choices=sorted(NETWORKS), help="Target network")
    parser.add_argument("--env-file", default=None, help="Path to a .env file (default: search upwards for .env)")
    parser.add_argument("--output", default=None, help="Where to save deployed addresses (default: deployments/<network>.json)")
    parser.add_argument("--resume", action="store_true",
                        help="Reuse addresses already recorded in the output file instead of deploying again")
    parser.add_argument("--log-file", default="deployment.log", help="Log file ('' to disable)")
    parser.add_argument("--no-notify", action="store_true", help="Do not send Slack/e-mail alerts")
    parser.add_argument("--list", action="store_true", help="List scenarios and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def _list_scenarios():
    for name in sorted(SCENARIOS):
        artifacts = ", ".join(descriptor.name for descriptor in resolve(SCENARIOS[name]()))
        print(f"{name} : {artifacts}")


def _notify(env: Mapping[str, str], subject: str, lines: List[str]):
    try:
        notifier = DeploymentNotifier.from_env(env)
    except ConfigurationError as e:
        logger.error(f"Alerts not sent: {e}")
        return
    if notifier.enabled:
        notifier.send(subject, lines)


def main(argv: Optional[List[str]] = None, env: Optional[Mapping[str, str]] = None,
         backend_factory: Optional[BackendFactory] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.list:
        _list_scenarios()
        return 0
    if not args.scenario:
        parser.error("a scenario is required")

    configure_logging(args.log_file or None, args.verbose)
    env = dict(env) if env is not None else load_environment(args.env_file)
    output = args.output or default_deployment_path(args.network)
    backend_factory = backend_factory or Web3Backend

    try:
        order = resolve(get_scenario(args.scenario))

        known = {}
        if args.resume and os.path.exists(output):
            known = load_deployment(output)
            logger.info(f"Resuming with {len(known)} address(es) from {output}")

        orchestrator = Orchestrator(env, known_addresses=known)
        # Fail on missing configuration before connecting to the node
        env_values = orchestrator.read_environment(order)
        settings = DeployerSettings.from_env(env, args.network)
        backend = backend_factory(settings)
    except DeployerError as e:
        logger.error(f"Deployment aborted: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        table = orchestrator.run(order, backend, env_values)
    except DeploymentError as e:
        report(e.table)
        if len(e.table):
            save_deployment(e.table, output, settings.network.name, settings.network.chain_id)
        print(f"Error: {e}", file=sys.stderr)
        if not args.no_notify:
            _notify(env, f"Deployment of {args.scenario} on {args.network} failed",
                    [str(e)] + format_report(e.table))
        return 1
    except DeployerError as e:
        logger.error(f"Deployment aborted: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    report(table)
    gas_price = getattr(backend, 'gas_price_wei', None)
    for line in format_gas_summary(orchestrator.records, gas_price, settings.network.native_token):
        logger.info(line)
    save_deployment(table, output, settings.network.name, settings.network.chain_id)

    if not args.no_notify:
        _notify(env, f"Deployment of {args.scenario} on {args.network} succeeded", format_report(table))
    return 0
