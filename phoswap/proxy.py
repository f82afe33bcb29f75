from abc import ABC, abstractmethod
from typing import Any, List, NamedTuple, Optional

from eth_typing import ChecksumAddress

from phoswap.constants import DEFAULT_INITIALIZER
from phoswap.params import ProxyParameters
from phoswap.registry import ContractName, ContractRegistry, NetworkName, PersistenceError


class ExternalCallError(Exception):
    """Raised when a proxy deployment or upgrade fails on-chain."""


class AlreadyDeployed(Exception):
    """Raised when deploying a contract that the registry already records."""


class ProxyReceipt(NamedTuple):
    """Outcome of a confirmed proxy deployment or upgrade."""

    address: ChecksumAddress
    implementation: ChecksumAddress
    tx_hash: Optional[str] = None


class ProxyDeployer(ABC):
    """
    Deploys and upgrades contracts behind transparent proxies.

    Both operations block until the transactions are confirmed and
    raise ExternalCallError on failure.
    """

    @property
    @abstractmethod
    def address(self) -> ChecksumAddress:
        """Address of the account sending the transactions."""
        raise NotImplementedError

    @abstractmethod
    def deploy_proxy(
        self, contract_name: str, args: List[Any], initializer: str = DEFAULT_INITIALIZER
    ) -> ProxyReceipt:
        raise NotImplementedError

    @abstractmethod
    def upgrade_proxy(self, proxy_address: ChecksumAddress, contract_name: str) -> ProxyReceipt:
        raise NotImplementedError


def check_not_deployed(
    registry: ContractRegistry,
    network: NetworkName,
    registry_name: ContractName,
    overwrite: bool = False,
) -> None:
    """Refuses to deploy a contract the registry already records on the network."""
    existing_address = registry.get_contracts(network).get(registry_name)
    if existing_address and not overwrite:
        raise AlreadyDeployed(
            f"'{registry_name}' is already deployed on {network} at {existing_address}."
        )


def _record_proxy(
    registry: ContractRegistry,
    network: NetworkName,
    registry_name: ContractName,
    receipt: ProxyReceipt,
) -> None:
    """Saves the proxy address of a confirmed deployment or upgrade."""
    try:
        registry.save_contract(network, registry_name, receipt.address)
    except PersistenceError as e:
        raise PersistenceError(
            f"Proxy '{registry_name}' is live on {network} at {receipt.address} "
            f"(implementation {receipt.implementation}) but was not recorded: {e}\n"
            f"Record it with: ape run register_contract --registry {registry.filepath} "
            f"--network-name {network} --name {registry_name} --address {receipt.address}"
        ) from e


def deploy_proxied_contract(
    registry: ContractRegistry,
    network: NetworkName,
    deployer: ProxyDeployer,
    parameters: ProxyParameters,
    overwrite: bool = False,
) -> ProxyReceipt:
    """
    Deploys a contract behind a proxy, initializes it and records the proxy
    address in the registry under the configured registry name.
    """
    registry_name = parameters.registry_name
    check_not_deployed(registry, network, registry_name, overwrite=overwrite)

    args = parameters.resolve(
        registry=registry, network=network, deployer_address=deployer.address
    )
    print(f"(i) Deploying {parameters.contract_name} proxy on {network}")

    receipt = deployer.deploy_proxy(
        parameters.contract_name, args, initializer=parameters.initializer
    )

    _record_proxy(registry, network, registry_name, receipt)
    print(f"Deployed {parameters.contract_name} to {receipt.address}")
    return receipt


def upgrade_proxied_contract(
    registry: ContractRegistry,
    network: NetworkName,
    deployer: ProxyDeployer,
    contract_name: str,
    registry_name: ContractName,
) -> ProxyReceipt:
    """Upgrades the proxy recorded under registry_name to a new implementation."""
    proxy_address = registry.get_contract(network, registry_name)
    print(f"(i) Upgrading {contract_name} proxy at {proxy_address}")

    receipt = deployer.upgrade_proxy(proxy_address, contract_name)

    _record_proxy(registry, network, registry_name, receipt)
    print(f"Upgraded {contract_name} at {receipt.address} (implementation {receipt.implementation})")
    return receipt
