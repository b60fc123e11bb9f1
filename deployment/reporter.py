"""
Reporting and persistence of deployment results.
"""

import os
import sys
import json
import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional, TextIO

from web3 import Web3

from .errors import ConfigurationError
from .records import AddressTable, DeploymentRecord

logger = logging.getLogger(__name__)


def format_report(table: AddressTable) -> List[str]:
    """One ``<name> : <address>`` line per confirmed artifact, in deployment order."""
    return [f"{name} : {address}" for name, address in table.items()]


def report(table: AddressTable, sink: Optional[TextIO] = None):
    """Write the address listing to ``sink`` (stdout by default)."""
    sink = sink if sink is not None else sys.stdout
    lines = format_report(table)
    for line in lines:
        sink.write(line + "\n")
        logger.info(line)
    if not lines:
        logger.info("No artifacts were deployed")


def format_gas_summary(records: Iterable[DeploymentRecord], gas_price_wei: Optional[int] = None,
                       token: str = "ETH") -> List[str]:
    """
    Gas used by each deployment made in this run, with a total.

    Reused artifacts and deployments whose gas is unknown are left out.
    When ``gas_price_wei`` is given the cost in the native token is added.
    """
    lines = []
    total = 0
    for record in records:
        if not record.is_confirmed or record.reused or record.gas_used is None:
            continue
        total += record.gas_used
        lines.append(f"{record.name} : {record.gas_used} gas")

    if not lines:
        return lines

    total_line = f"Total : {total} gas"
    if gas_price_wei is not None:
        cost = Web3.from_wei(total * gas_price_wei, 'ether')
        total_line += f" ({cost} {token})"
    lines.append(total_line)
    return lines


def save_deployment(table: AddressTable, path: str, network: Optional[str] = None,
                    chain_id: Optional[int] = None) -> str:
    """
    Save the address table as JSON so later runs (and tooling) can read it.

    Addresses already in the file are kept, so scenarios sharing a file do not
    erase each other's contracts. Entries from ``table`` replace older ones.
    """
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    contracts: Dict[str, str] = {}
    if os.path.exists(path):
        try:
            contracts = load_deployment(path)
        except ConfigurationError as e:
            logger.warning(f"Replacing unreadable deployment file: {e}")
    contracts.update(table.as_dict())

    data = {
        'network': network,
        'chainId': chain_id,
        'timestamp': datetime.now().isoformat(),
        'contracts': contracts,
    }
    with open(path, 'w') as f:
        json.dump(data, f, indent=2)

    logger.info(f"Deployment addresses saved to {path}")
    return path


def load_deployment(path: str) -> Dict[str, str]:
    """Read the contract addresses from a file written by save_deployment."""
    try:
        with open(path, 'r') as f:
            data = json.load(f)
        contracts = data.get('contracts', {})
        if not isinstance(contracts, dict):
            raise ValueError("'contracts' is not a mapping")
    except (OSError, ValueError, AttributeError) as e:
        raise ConfigurationError(f"Could not read deployment file {path}: {e}") from e
    return dict(contracts)
