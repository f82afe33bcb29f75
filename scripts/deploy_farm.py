#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand

from phoswap.confirm import exit_on_error
from phoswap.deployer import Deployer
from phoswap.options import autosign_option, params_option, registry_option, verify_option
from phoswap.params import ProxyParameters
from phoswap.proxy import check_not_deployed, deploy_proxied_contract
from phoswap.registry import ContractRegistry
from phoswap.utils import get_network_name


@click.command(cls=ConnectedProviderCommand, name="deploy-farm")
@params_option
@registry_option
@verify_option
@autosign_option
@click.option(
    "--overwrite",
    help="Deploy even if the registry already records the contract",
    is_flag=True,
    default=False,
)
@exit_on_error
def cli(params, registry, verify, autosign, overwrite):
    """
    Deploys PhoSwapFarming behind a transparent proxy and records it in the registry.

    ape run deploy_farm --network ethereum:mainnet:infura
    """
    network_name = get_network_name()
    contract_registry = ContractRegistry(filepath=registry)
    parameters = ProxyParameters.from_yaml(filepath=params)

    # refuse before selecting an account or prompting
    check_not_deployed(
        contract_registry, network_name, parameters.registry_name, overwrite=overwrite
    )
    parameters.validate(registry=contract_registry, network=network_name)

    deployer = Deployer(verify=verify, autosign=autosign)
    deploy_proxied_contract(
        registry=contract_registry,
        network=network_name,
        deployer=deployer,
        parameters=parameters,
        overwrite=overwrite,
    )
    print("Completed!")
