#!/usr/bin/env python3
"""
Tests for the web3 deployment backend
The node is replaced by a MagicMock; artifacts are written to a temporary directory
"""

import json
from unittest.mock import MagicMock

import pytest
from web3 import Web3

from deployment.backend import Web3Backend, load_contract_artifact
from deployment.config import DeployerSettings, NETWORKS
from deployment.errors import ChainError, ConfigurationError

TX_HASH = bytes.fromhex("ab" * 32)
CONTRACT_ADDRESS = "0x" + "5a" * 20


def write_artifact(root, contract, source=None, bytecode="0x6080"):
    source = source or contract
    directory = root / "contracts" / f"{source}.sol"
    directory.mkdir(parents=True, exist_ok=True)
    (directory / f"{contract}.json").write_text(json.dumps({"abi": [], "bytecode": bytecode}))


@pytest.fixture
def settings(tmp_path):
    write_artifact(tmp_path, "KeeperTB")
    return DeployerSettings(
        network=NETWORKS["hardhat"],
        rpc_url="http://localhost:8545",
        private_key="0x" + "01" * 32,
        artifacts_dir=str(tmp_path),
    )


@pytest.fixture
def w3():
    w3 = MagicMock()
    w3.eth.get_transaction_count.return_value = 7
    w3.eth.send_raw_transaction.return_value = TX_HASH
    w3.eth.wait_for_transaction_receipt.return_value = {
        'status': 1,
        'contractAddress': CONTRACT_ADDRESS,
        'gasUsed': 1234567,
        'blockNumber': 42,
    }
    return w3


class TestLoadContractArtifact:

    def test_loads_abi_and_bytecode(self, tmp_path):
        write_artifact(tmp_path, "KeeperNFT")
        artifact = load_contract_artifact(str(tmp_path), "KeeperNFT")
        assert artifact == {"abi": [], "bytecode": "0x6080"}

    def test_contract_in_differently_named_source(self, tmp_path):
        write_artifact(tmp_path, "KEEPER", source="Keeper")
        assert load_contract_artifact(str(tmp_path), "KEEPER")["bytecode"] == "0x6080"

    def test_missing_artifact(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Compile the contracts first"):
            load_contract_artifact(str(tmp_path), "FoundersPass")

    def test_corrupt_artifact(self, tmp_path):
        directory = tmp_path / "contracts" / "KeeperNFT.sol"
        directory.mkdir(parents=True)
        (directory / "KeeperNFT.json").write_text("{\"abi\": [")

        with pytest.raises(ConfigurationError, match="Could not read artifact") as exc_info:
            load_contract_artifact(str(tmp_path), "KeeperNFT")
        assert exc_info.value.artifact == "KeeperNFT"

    def test_artifact_without_bytecode(self, tmp_path):
        write_artifact(tmp_path, "IKeeper", bytecode="")
        with pytest.raises(ConfigurationError, match="no abi or bytecode"):
            load_contract_artifact(str(tmp_path), "IKeeper")


class TestWeb3Backend:

    def test_submit_sends_signed_constructor_transaction(self, settings, w3):
        backend = Web3Backend(settings, w3=w3)
        owner = "0x" + "cd" * 20

        handle = backend.submit("KeeperTB", [owner, 5])

        assert handle == TX_HASH
        contract = w3.eth.contract.return_value
        contract.constructor.assert_called_once_with(Web3.to_checksum_address(owner), 5)
        params = contract.constructor.return_value.build_transaction.call_args[0][0]
        assert params['nonce'] == 7
        assert params['chainId'] == 31337
        assert 'gas' not in params
        w3.eth.send_raw_transaction.assert_called_once()

    def test_gas_limit_from_settings(self, settings, w3):
        settings.gas_limit = 3000000
        backend = Web3Backend(settings, w3=w3)
        backend.submit("KeeperTB", [])
        params = w3.eth.contract.return_value.constructor.return_value.build_transaction.call_args[0][0]
        assert params['gas'] == 3000000

    def test_submit_failure_raises_chain_error(self, settings, w3):
        w3.eth.send_raw_transaction.side_effect = ValueError("insufficient funds for gas * price + value")
        backend = Web3Backend(settings, w3=w3)

        with pytest.raises(ChainError, match="insufficient funds") as exc_info:
            backend.submit("KeeperTB", [])
        assert exc_info.value.artifact == "KeeperTB"

    def test_confirm_returns_checksum_address(self, settings, w3):
        backend = Web3Backend(settings, w3=w3)
        handle = backend.submit("KeeperTB", [])

        address = backend.confirm(handle)

        assert address == Web3.to_checksum_address(CONTRACT_ADDRESS)
        assert backend.last_gas_used == 1234567
        w3.eth.wait_for_transaction_receipt.assert_called_once_with(TX_HASH, timeout=120)

    def test_reverted_deployment(self, settings, w3):
        w3.eth.wait_for_transaction_receipt.return_value = {
            'status': 0, 'contractAddress': None, 'gasUsed': 50000, 'blockNumber': 43,
        }
        backend = Web3Backend(settings, w3=w3)
        handle = backend.submit("KeeperTB", [])

        with pytest.raises(ChainError, match="reverted") as exc_info:
            backend.confirm(handle)
        assert exc_info.value.artifact == "KeeperTB"
        assert backend.last_gas_used is None

    def test_confirmation_timeout(self, settings, w3):
        w3.eth.wait_for_transaction_receipt.side_effect = TimeoutError("not in chain after 120 seconds")
        backend = Web3Backend(settings, w3=w3)

        with pytest.raises(ChainError, match="not confirmed"):
            backend.confirm(backend.submit("KeeperTB", []))

    def test_describe_handle(self, settings, w3):
        backend = Web3Backend(settings, w3=w3)
        assert backend.describe_handle(TX_HASH) == "0x" + "ab" * 32
        assert backend.describe_handle(None) is None

    def test_prepare_fails_on_missing_artifact(self, settings, w3):
        backend = Web3Backend(settings, w3=w3)
        with pytest.raises(ConfigurationError, match="FoundersPass"):
            backend.prepare(["KeeperTB", "FoundersPass"])
        w3.eth.send_raw_transaction.assert_not_called()

    def test_invalid_private_key(self, settings):
        settings.private_key = "not-a-key"
        with pytest.raises(ConfigurationError, match="not a valid private key") as exc_info:
            Web3Backend(settings, w3=Web3())
        assert exc_info.value.variable == "METAMASK_SECRET_KEY"
