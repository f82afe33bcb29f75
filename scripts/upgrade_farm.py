#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand

from phoswap.confirm import exit_on_error
from phoswap.deployer import Deployer
from phoswap.options import autosign_option, params_option, registry_option, verify_option
from phoswap.params import ProxyParameters
from phoswap.proxy import upgrade_proxied_contract
from phoswap.registry import ContractRegistry
from phoswap.utils import get_network_name


@click.command(cls=ConnectedProviderCommand, name="upgrade-farm")
@params_option
@registry_option
@verify_option
@autosign_option
@exit_on_error
def cli(params, registry, verify, autosign):
    """
    Upgrades the PhoSwapFarming proxy recorded in the registry to a new implementation.

    ape run upgrade_farm --network ethereum:mainnet:infura
    """
    network_name = get_network_name()
    contract_registry = ContractRegistry(filepath=registry)
    parameters = ProxyParameters.from_yaml(filepath=params)

    # the proxy must already be registered
    contract_registry.get_contract(network_name, parameters.registry_name)

    deployer = Deployer(verify=verify, autosign=autosign)
    upgrade_proxied_contract(
        registry=contract_registry,
        network=network_name,
        deployer=deployer,
        contract_name=parameters.contract_name,
        registry_name=parameters.registry_name,
    )
    print("Completed!")
