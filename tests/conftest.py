from typing import Any, List

import pytest
from eth_utils import to_checksum_address

from phoswap.constants import DEFAULT_INITIALIZER, FARM_PARAMS_FILEPATH
from phoswap.params import ProxyParameters
from phoswap.proxy import ExternalCallError, ProxyDeployer, ProxyReceipt
from phoswap.registry import ContractRegistry

# Common constants
MAINNET = "mainnet"
SEPOLIA = "sepolia"

PHO_ADDRESS = to_checksum_address("0x" + "a1" * 20)
DEV_ADDRESS = to_checksum_address("0x" + "b2" * 20)
DEPLOYER_ADDRESS = to_checksum_address("0x" + "c3" * 20)
PROXY_ADDRESS = to_checksum_address("0x" + "d4" * 20)
IMPLEMENTATION_ADDRESS = to_checksum_address("0x" + "e5" * 20)
NEW_IMPLEMENTATION_ADDRESS = to_checksum_address("0x" + "f6" * 20)


class FakeProxyDeployer(ProxyDeployer):
    """Records proxy calls and answers with fixed addresses."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: List[tuple] = list()

    @property
    def address(self):
        return DEPLOYER_ADDRESS

    def deploy_proxy(
        self, contract_name: str, args: List[Any], initializer: str = DEFAULT_INITIALIZER
    ) -> ProxyReceipt:
        self.calls.append(("deploy_proxy", contract_name, list(args), initializer))
        if self.fail:
            raise ExternalCallError("execution reverted")
        return ProxyReceipt(address=PROXY_ADDRESS, implementation=IMPLEMENTATION_ADDRESS)

    def upgrade_proxy(self, proxy_address, contract_name: str) -> ProxyReceipt:
        self.calls.append(("upgrade_proxy", proxy_address, contract_name))
        if self.fail:
            raise ExternalCallError("execution reverted")
        return ProxyReceipt(address=proxy_address, implementation=NEW_IMPLEMENTATION_ADDRESS)


# Fixtures
@pytest.fixture
def registry_filepath(tmp_path):
    return tmp_path / "artifacts" / "contracts.json"


@pytest.fixture
def registry(registry_filepath):
    return ContractRegistry(filepath=registry_filepath)


@pytest.fixture
def mainnet_registry(registry):
    registry.save_contract(MAINNET, "pho", PHO_ADDRESS)
    registry.save_contract(MAINNET, "dev", DEV_ADDRESS)
    return registry


@pytest.fixture
def proxy_deployer():
    return FakeProxyDeployer()


@pytest.fixture
def failing_proxy_deployer():
    return FakeProxyDeployer(fail=True)


@pytest.fixture
def farm_parameters():
    return ProxyParameters.from_yaml(filepath=FARM_PARAMS_FILEPATH)
