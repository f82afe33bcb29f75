#!/usr/bin/python3

from itertools import groupby
from typing import List

import click

from phoswap.options import network_name_option, registry_option
from phoswap.registry import RegistryEntry, read_registry


def _display_registry_entries(entries: List[RegistryEntry]) -> None:
    """Display registry entries grouped by network."""
    entries = sorted(entries, key=lambda e: (e.network, e.name))
    for network, network_entries in groupby(entries, key=lambda e: e.network):
        click.secho(f"\n{network.capitalize()}", fg="green")
        for index, entry in enumerate(network_entries, start=1):
            click.secho(f"    {index}. {entry.name} {entry.address}", fg="cyan")


@click.command(name="list-contracts")
@registry_option
@network_name_option
def cli(registry, network_name):
    """List all contracts in the registry. Optionally filter by network."""
    entries = read_registry(filepath=registry)
    if network_name:
        entries = [e for e in entries if e.network == network_name]
    if not entries:
        click.secho(f"No contracts registered in {registry}.", fg="yellow")
        return
    _display_registry_entries(entries)


if __name__ == "__main__":
    cli()
