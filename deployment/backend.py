"""
Deployment backends.

The orchestrator only needs two calls from a backend: ``submit`` sends a
contract-creation transaction and returns a handle, ``confirm`` blocks until
that transaction is mined and returns the new contract's address.
"""

import os
import glob
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from web3 import Web3
from web3.middleware import ExtraDataToPOAMiddleware

from .config import DeployerSettings
from .errors import ChainError, ConfigurationError

logger = logging.getLogger(__name__)


class DeploymentBackend(ABC):
    """Two-call contract between the orchestrator and a chain client"""

    # Gas consumed by the last confirmed deployment, when the backend knows it
    last_gas_used: Optional[int] = None

    @abstractmethod
    def submit(self, artifact_name: str, constructor_args: Sequence[Any]) -> Any:
        """Send the contract-creation transaction and return a pending handle."""

    @abstractmethod
    def confirm(self, handle: Any) -> str:
        """Wait for the transaction behind ``handle``; return the contract address or raise ChainError."""

    def prepare(self, artifact_names: Sequence[str]):
        """Check that every artifact can be deployed before anything is sent."""

    def describe_handle(self, handle: Any) -> Optional[str]:
        return None if handle is None else str(handle)


def load_contract_artifact(artifacts_dir: str, contract_name: str) -> Dict[str, Any]:
    """
    Load the ABI and bytecode of a compiled contract from a Hardhat artifacts directory.

    Looks at ``contracts/<Name>.sol/<Name>.json`` first, then anywhere below the
    directory, since a contract does not have to live in a file of the same name.
    """
    file_path = os.path.join(artifacts_dir, 'contracts', f'{contract_name}.sol', f'{contract_name}.json')
    if not os.path.exists(file_path):
        matches = sorted(glob.glob(os.path.join(artifacts_dir, '**', f'{contract_name}.json'), recursive=True))
        if not matches:
            raise ConfigurationError(
                f"Compiled artifact for {contract_name} not found under {artifacts_dir}. Compile the contracts first.",
                artifact=contract_name,
            )
        file_path = matches[0]

    try:
        with open(file_path, 'r') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Could not read artifact {file_path}: {e}", artifact=contract_name) from e

    if not isinstance(data, dict) or 'abi' not in data or not data.get('bytecode'):
        raise ConfigurationError(f"Artifact {file_path} has no abi or bytecode", artifact=contract_name)
    return {'abi': data['abi'], 'bytecode': data['bytecode']}


def _checksum_addresses(args: Sequence[Any]) -> List[Any]:
    # web3 rejects address arguments that are not checksummed
    return [Web3.to_checksum_address(arg) if isinstance(arg, str) and Web3.is_address(arg) else arg
            for arg in args]


class Web3Backend(DeploymentBackend):
    """Deploys compiled Hardhat artifacts through a JSON-RPC node with web3.py"""

    def __init__(self, settings: DeployerSettings, w3: Optional[Web3] = None):
        self.settings = settings
        self.w3 = w3 if w3 is not None else self._connect(settings.rpc_url)
        try:
            self.account = self.w3.eth.account.from_key(settings.private_key)
        except Exception as e:
            raise ConfigurationError(f"Deployer key is not a valid private key: {e}",
                                     variable="METAMASK_SECRET_KEY") from e
        self.last_gas_used = None
        self._pending: Dict[str, str] = {}
        self._artifacts: Dict[str, Dict[str, Any]] = {}
        logger.info(f"Using deployer account: {self.account.address}")

    @staticmethod
    def _connect(rpc_url: str) -> Web3:
        w3 = Web3(Web3.HTTPProvider(rpc_url))
        # BSC and other PoA chains put extra data in block headers
        w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
        if not w3.is_connected():
            raise ConfigurationError(f"Could not connect to RPC URL: {rpc_url}")
        logger.info(f"Connected to blockchain at {rpc_url}")
        return w3

    @property
    def gas_price_wei(self) -> Optional[int]:
        if self.settings.gas_price_gwei is not None:
            return int(self.w3.to_wei(self.settings.gas_price_gwei, 'gwei'))
        try:
            return self.w3.eth.gas_price
        except Exception as e:
            logger.warning(f"Could not read gas price from node: {e}")
            return None

    def _transaction_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            'from': self.account.address,
            'nonce': self.w3.eth.get_transaction_count(self.account.address, 'pending'),
            'chainId': self.settings.network.chain_id,
        }
        if self.settings.gas_limit is not None:
            params['gas'] = self.settings.gas_limit
        if self.settings.gas_price_gwei is not None:
            params['gasPrice'] = self.w3.to_wei(self.settings.gas_price_gwei, 'gwei')
        return params

    def _artifact(self, artifact_name: str) -> Dict[str, Any]:
        if artifact_name not in self._artifacts:
            self._artifacts[artifact_name] = load_contract_artifact(self.settings.artifacts_dir, artifact_name)
        return self._artifacts[artifact_name]

    def prepare(self, artifact_names: Sequence[str]):
        for artifact_name in artifact_names:
            self._artifact(artifact_name)

    def submit(self, artifact_name: str, constructor_args: Sequence[Any]) -> Any:
        artifact = self._artifact(artifact_name)
        contract = self.w3.eth.contract(abi=artifact['abi'], bytecode=artifact['bytecode'])

        try:
            tx = contract.constructor(*_checksum_addresses(constructor_args)).build_transaction(
                self._transaction_params()
            )
            signed_tx = self.w3.eth.account.sign_transaction(tx, self.settings.private_key)
            tx_hash = self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)
        except Exception as e:
            raise ChainError(f"Could not send deployment transaction for {artifact_name}: {e}",
                             artifact=artifact_name) from e

        self._pending[self.describe_handle(tx_hash)] = artifact_name
        logger.info(f"{artifact_name} deployment sent, hash: {self.describe_handle(tx_hash)}")
        return tx_hash

    def confirm(self, handle: Any) -> str:
        tx_hash = self.describe_handle(handle)
        artifact_name = self._pending.pop(tx_hash, None)
        self.last_gas_used = None

        try:
            receipt = self.w3.eth.wait_for_transaction_receipt(
                handle, timeout=self.settings.confirmation_timeout
            )
        except Exception as e:
            raise ChainError(f"Transaction {tx_hash} was not confirmed: {e}", artifact=artifact_name) from e

        if receipt['status'] != 1:
            raise ChainError(f"Deployment transaction {tx_hash} reverted in block {receipt['blockNumber']}",
                             artifact=artifact_name)

        self.last_gas_used = receipt['gasUsed']
        address = receipt['contractAddress']
        if not address:
            raise ChainError(f"Receipt for {tx_hash} has no contract address", artifact=artifact_name)

        logger.info(f"Transaction {tx_hash} confirmed in block {receipt['blockNumber']}")
        return Web3.to_checksum_address(address)

    def describe_handle(self, handle: Any) -> Optional[str]:
        if handle is None:
            return None
        return Web3.to_hex(handle)
