import functools
import traceback
from typing import Any, List

import click

from phoswap.constants import ZERO_ADDRESS


def _confirm_deployment(contract_name: str) -> None:
    """Asks the user to confirm the deployment of a single contract."""
    answer = input(f"Deploy {contract_name} Y/N? ")
    if answer.lower().strip() == "n":
        print("Aborting deployment!")
        raise click.Abort()


def _continue() -> None:
    """Asks the user to continue."""
    answer = input("Continue Y/N? ")
    if answer.lower().strip() == "n":
        print("Aborting deployment!")
        raise click.Abort()


def _confirm_zero_address() -> None:
    answer = input("Zero Address detected for deployment parameter; Continue? Y/N? ")
    if answer.lower().strip() == "n":
        print("Aborting deployment!")
        raise click.Abort()


def _confirm_resolution(resolved_args: List[Any], contract_name: str) -> None:
    """Asks the user to confirm the resolved initializer arguments for a single contract."""
    if len(resolved_args) == 0:
        print(f"\n(i) No initializer arguments for {contract_name}")
        _confirm_deployment(contract_name)
        return

    print(f"\nInitializer arguments for {contract_name}")
    contains_zero_address = False
    for position, resolved_value in enumerate(resolved_args):
        print(f"\t[{position}] {resolved_value}")
        if not contains_zero_address:
            contains_zero_address = resolved_value == ZERO_ADDRESS
    _confirm_deployment(contract_name)
    if contains_zero_address:
        _confirm_zero_address()


def exit_on_error(func):
    """
    Runs a script entry point, turning any error into a diagnostic on
    stderr and exit status 1. Click's own exceptions pass through.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (click.ClickException, click.Abort, click.exceptions.Exit):
            raise
        except Exception as e:
            click.echo(traceback.format_exc(), err=True)
            click.secho(f"Error: {e}", fg="red", err=True)
            raise SystemExit(1)

    return wrapper
