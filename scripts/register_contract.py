#!/usr/bin/python3

import click

from phoswap.confirm import exit_on_error
from phoswap.options import registry_option
from phoswap.registry import ContractRegistry
from phoswap.types import ChecksumAddress


@click.command(name="register-contract")
@registry_option
@click.option(
    "--network-name",
    "-n",
    help="Registry network name (e.g. mainnet)",
    type=str,
    required=True,
)
@click.option("--name", help="Logical contract name (e.g. farm)", type=str, required=True)
@click.option("--address", "-a", help="Contract address", type=ChecksumAddress(), required=True)
@exit_on_error
def cli(registry, network_name, name, address):
    """
    Records a contract address by hand, e.g. after a deployment whose
    registry update failed.
    """
    contract_registry = ContractRegistry(filepath=registry)
    previous_address = contract_registry.get_contracts(network_name).get(name)
    if previous_address:
        click.confirm(f"Replace {name} at {previous_address} on {network_name}?", abort=True)
    contract_registry.save_contract(network_name, name, address)
    print(f"Registered {name} at {address} on {network_name}")


if __name__ == "__main__":
    cli()
