from pathlib import Path

import click

from phoswap.constants import FARM_PARAMS_FILEPATH, REGISTRY_FILEPATH

registry_option = click.option(
    "--registry",
    "-r",
    help="Filepath of the contract registry",
    type=click.Path(dir_okay=False, path_type=Path),
    default=REGISTRY_FILEPATH,
    show_default=True,
)

params_option = click.option(
    "--params",
    "-p",
    help="Filepath of the deployment parameters YAML",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    default=FARM_PARAMS_FILEPATH,
    show_default=True,
)

verify_option = click.option(
    "--verify/--no-verify",
    help="Publish deployed contracts to the block explorer",
    default=False,
    show_default=True,
)

autosign_option = click.option(
    "--autosign",
    help="Sign transactions without asking for confirmation",
    is_flag=True,
    default=False,
)

network_name_option = click.option(
    "--network-name",
    "-n",
    help="Registry network name (e.g. mainnet)",
    type=str,
)
