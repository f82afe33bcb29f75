import typing
from typing import Any, List

from ape import chain, networks
from ape.api import AccountAPI, ReceiptAPI
from ape.cli.choices import select_account
from ape.contracts.base import ContractContainer, ContractInstance, ContractTransactionHandler
from ape.exceptions import ApeException
from ape.utils import EMPTY_BYTES32
from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address
from ethpm_types import MethodABI
from web3 import Web3

from phoswap.confirm import _confirm_resolution, _continue
from phoswap.constants import (
    DEFAULT_INITIALIZER,
    EIP1967_ADMIN_SLOT,
    EIP1967_IMPLEMENTATION_SLOT,
)
from phoswap.proxy import ExternalCallError, ProxyDeployer, ProxyReceipt
from phoswap.utils import (
    check_plugins,
    get_contract_container,
    get_network_name,
    get_oz_dependency,
    verify_contracts,
)

w3 = Web3()


def _coerce_arg(abi_type: str, value: Any) -> Any:
    """Numeric strings from parameter files become ints for integer ABI types."""
    if isinstance(value, str) and abi_type.startswith(("uint", "int")):
        try:
            return int(value, 16) if value.lower().startswith("0x") else int(value)
        except ValueError:
            return value
    return value


def _validate_method_args(method_abis: List[MethodABI], args: typing.Sequence[Any]) -> List[Any]:
    """
    Validates the transaction arguments against the function ABI.
    Returns the arguments coerced to the types of the first matching ABI.
    """
    if len(method_abis) == 0:
        raise ValueError("No method abis provided for validation of args")

    abis_matching_args_length = [abi for abi in method_abis if len(abi.inputs) == len(args)]
    for abi in abis_matching_args_length:
        coerced_args = list()
        for arg, abi_input in zip(args, abi.inputs):
            coerced_arg = _coerce_arg(abi_input.type, arg)
            if not w3.is_encodable(abi_input.type, coerced_arg):
                break
            coerced_args.append(coerced_arg)
        else:
            return coerced_args
    raise ValueError(
        f"Could not find ABI for '{method_abis[0].name}' with {len(args)} arg(s) and given type(s)"
    )


class Transactor:
    """
    Represents an ape account plus validated/annotated transaction execution.
    """

    def __init__(self, account: typing.Optional[AccountAPI] = None, autosign: bool = False):
        if account is None:
            self._account = select_account()
        else:
            self._account = account
        if autosign:
            print("WARNING: Autosign is enabled. Transactions will be signed automatically.")
        self._autosign = autosign
        self._account.set_autosign(autosign)

    def get_account(self) -> AccountAPI:
        """Returns the transactor account."""
        return self._account

    def transact(self, method: ContractTransactionHandler, *args) -> ReceiptAPI:
        coerced_args = _validate_method_args(method_abis=method.abis, args=args)
        message = (
            f"\nTransacting {method.contract.contract_type.name}"
            f"[{method.contract.address[:10]}].{method}"
        )
        if coerced_args:
            pretty_args = "\n\t".join(str(arg) for arg in coerced_args)
            message = f"{message} with arguments:\n\t{pretty_args}"
        print(message)
        if not self._autosign:
            _continue()

        return method(*coerced_args, sender=self._account)


class Deployer(Transactor, ProxyDeployer):
    """
    Deploys and upgrades contracts behind OpenZeppelin transparent proxies
    using an ape account.
    """

    def __init__(
        self,
        verify: bool,
        account: typing.Optional[AccountAPI] = None,
        autosign: bool = False,
    ):
        super().__init__(account, autosign)

        check_plugins(verify=verify)
        self.verify = verify
        self._print_deployment_info()

        if not self._autosign:
            # Confirms the start of the deployment.
            _continue()

    @property
    def address(self) -> ChecksumAddress:
        return to_checksum_address(self.get_account().address)

    def _deploy_contract(self, container: ContractContainer, *args) -> ContractInstance:
        return self.get_account().deploy(container, *args)

    def _read_slot_address(self, address: ChecksumAddress, slot: int) -> ChecksumAddress:
        slot_value = chain.provider.get_storage(address, slot)
        if slot_value == EMPTY_BYTES32:
            raise ExternalCallError(
                f"EIP1967 slot {hex(slot)} for contract at {address} is empty. "
                "Are you sure this is an EIP1967-compatible proxy?"
            )
        return to_checksum_address(slot_value[-20:])

    def deploy_proxy(
        self, contract_name: str, args: List[Any], initializer: str = DEFAULT_INITIALIZER
    ) -> ProxyReceipt:
        container = get_contract_container(contract_name)
        proxy_container = get_oz_dependency().TransparentUpgradeableProxy
        if not self._autosign:
            _confirm_resolution(args, contract_name)

        try:
            implementation = self._deploy_contract(container)
            method = getattr(implementation, initializer)
            coerced_args = _validate_method_args(method_abis=method.abis, args=args)
            data = method.encode_input(*coerced_args)

            print(
                f"\nDeploying {proxy_container.contract_type.name} "
                f"contract to proxy {contract_name}."
            )
            proxy = self._deploy_contract(
                proxy_container, implementation.address, self.address, data
            )
        except ApeException as e:
            raise ExternalCallError(f"Deployment of {contract_name} proxy failed: {e}") from e

        if self.verify:
            verify_contracts(contracts=[implementation, proxy])

        return ProxyReceipt(
            address=to_checksum_address(proxy.address),
            implementation=to_checksum_address(implementation.address),
            tx_hash=proxy.receipt.txn_hash,
        )

    def upgrade_proxy(self, proxy_address: ChecksumAddress, contract_name: str) -> ProxyReceipt:
        admin_address = self._read_slot_address(proxy_address, EIP1967_ADMIN_SLOT)
        container = get_contract_container(contract_name)
        proxy_admin = get_oz_dependency().ProxyAdmin.at(admin_address)

        try:
            implementation = self._deploy_contract(container)
            receipt = self.transact(
                proxy_admin.upgradeAndCall, proxy_address, implementation.address, b""
            )
        except ApeException as e:
            raise ExternalCallError(f"Upgrade of {contract_name} proxy failed: {e}") from e

        current_implementation = self._read_slot_address(
            proxy_address, EIP1967_IMPLEMENTATION_SLOT
        )
        if current_implementation != to_checksum_address(implementation.address):
            raise ExternalCallError(
                f"Proxy at {proxy_address} points to {current_implementation} "
                f"instead of the new implementation {implementation.address}."
            )

        if self.verify:
            verify_contracts(contracts=[implementation])

        return ProxyReceipt(
            address=to_checksum_address(proxy_address),
            implementation=current_implementation,
            tx_hash=receipt.txn_hash,
        )

    def _print_deployment_info(self):
        print(
            f"Account: {self.get_account().address}",
            f"Verify: {self.verify}",
            f"Ecosystem: {networks.provider.network.ecosystem.name}",
            f"Network: {get_network_name()}",
            f"Chain ID: {networks.provider.network.chain_id}",
            f"Gas Price: {networks.provider.gas_price}",
            sep="\n",
        )
