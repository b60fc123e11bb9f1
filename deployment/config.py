"""
Deployment configuration: environment loading, target networks and gas settings.

Network definitions mirror the Hardhat configuration the contracts are
compiled with. Secrets and RPC endpoints are read from the environment,
normally populated from a ``.env`` file.
"""

import os
import logging
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_RPC_URL = "http://localhost:8545"
DEFAULT_CONFIRMATION_TIMEOUT = 120
DEFAULT_ARTIFACTS_DIR = "artifacts"
DEFAULT_DEPLOYMENTS_DIR = "deployments"


@dataclass(frozen=True)
class NetworkConfig:
    """A target chain"""
    name: str
    chain_id: int
    rpc_url_env: str
    default_rpc_url: Optional[str] = None
    native_token: str = "ETH"

    @property
    def is_local(self) -> bool:
        return self.default_rpc_url is not None


NETWORKS: Dict[str, NetworkConfig] = {
    "hardhat": NetworkConfig("hardhat", 31337, "RPC_URL", default_rpc_url=DEFAULT_RPC_URL),
    "mainnet": NetworkConfig("mainnet", 1, "ETHERSCAN_INFURA_API_URL"),
    "sepolia": NetworkConfig("sepolia", 11155111, "SEPOLIA_API_URL"),
    "bsctestnet": NetworkConfig("bsctestnet", 97, "BSCSCAN_TESTNET_API_URL", native_token="BNB"),
}


def load_environment(dotenv_path: Optional[str] = None) -> Dict[str, str]:
    """Load a .env file into the process environment and return a snapshot of it."""
    load_dotenv(dotenv_path)
    return dict(os.environ)


def get_network(name: str) -> NetworkConfig:
    try:
        return NETWORKS[name]
    except KeyError:
        known = ", ".join(sorted(NETWORKS))
        raise ConfigurationError(f"Unknown network '{name}' (known networks: {known})") from None


def require(env: Mapping[str, str], variable: str, artifact: Optional[str] = None) -> str:
    """Return a non-empty environment value or raise ConfigurationError naming the variable."""
    value = env.get(variable)
    if value is None or not str(value).strip():
        where = f" (needed by '{artifact}')" if artifact else ""
        raise ConfigurationError(
            f"Required environment variable {variable} is not set{where}",
            variable=variable,
            artifact=artifact,
        )
    return value


def optional_number(env: Mapping[str, str], variable: str, convert, default=None):
    raw = env.get(variable)
    if raw is None or not str(raw).strip():
        return default
    try:
        return convert(raw)
    except ValueError:
        raise ConfigurationError(f"Environment variable {variable} is not a valid number: {raw!r}",
                                 variable=variable) from None


@dataclass
class DeployerSettings:
    """Everything the web3 backend needs to talk to a network"""
    network: NetworkConfig
    rpc_url: str
    private_key: str
    gas_limit: Optional[int] = None
    gas_price_gwei: Optional[float] = None
    confirmation_timeout: int = DEFAULT_CONFIRMATION_TIMEOUT
    artifacts_dir: str = DEFAULT_ARTIFACTS_DIR

    @classmethod
    def from_env(cls, env: Mapping[str, str], network_name: str = "hardhat") -> "DeployerSettings":
        network = get_network(network_name)

        if network.is_local:
            rpc_url = env.get(network.rpc_url_env) or network.default_rpc_url
        else:
            rpc_url = require(env, network.rpc_url_env)

        # Hardhat config names the deployer key METAMASK_SECRET_KEY; PRIVATE_KEY is accepted too
        private_key = env.get("METAMASK_SECRET_KEY") or env.get("PRIVATE_KEY")
        if not private_key:
            raise ConfigurationError("Deployer key not found: set METAMASK_SECRET_KEY or PRIVATE_KEY",
                                     variable="METAMASK_SECRET_KEY")

        settings = cls(
            network=network,
            rpc_url=rpc_url,
            private_key=private_key,
            gas_limit=optional_number(env, "DEPLOY_GAS_LIMIT", int),
            gas_price_gwei=optional_number(env, "GAS_PRICE_GWEI", float),
            confirmation_timeout=optional_number(env, "CONFIRMATION_TIMEOUT", int,
                                                  DEFAULT_CONFIRMATION_TIMEOUT),
            artifacts_dir=env.get("ARTIFACTS_DIR") or DEFAULT_ARTIFACTS_DIR,
        )
        logger.debug(f"Using network {network.name} (chain {network.chain_id}) at {rpc_url}")
        return settings


def default_deployment_path(network_name: str) -> str:
    return os.path.join(DEFAULT_DEPLOYMENTS_DIR, f"{network_name}.json")
