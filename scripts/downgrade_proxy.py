#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand, account_option, network_option

from polydeploy.context import DeploymentContext
from polydeploy.options import (
    autosign_option,
    ignore_history_option,
    network_suffix_option,
    params_option,
)
from polydeploy.types import ChecksumAddress
from polydeploy.upgrades import downgrade_proxy
from polydeploy.utils import get_contract_container


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@account_option()
@network_suffix_option
@ignore_history_option
@autosign_option
@params_option
@click.option("--admin-address", help="ProxyAdmin address", type=ChecksumAddress(), required=True)
@click.option("--proxy-address", help="Proxy address", type=ChecksumAddress(), required=True)
@click.option(
    "--implementation",
    help="Contract name of a previously deployed implementation (e.g. Box)",
    required=True,
)
@click.option("--proxy-name", help="Name the proxy was deployed under", required=True)
@click.option("--initializer", help="Method to call after the downgrade", default="")
def cli(
    network,
    account,
    network_suffix,
    ignore_history,
    autosign,
    params_filepath,
    admin_address,
    proxy_address,
    implementation,
    proxy_name,
    initializer,
):
    """Point a proxy back at an implementation recorded in the upgrades history."""
    context = DeploymentContext.from_env(
        account=account,
        params_filepath=params_filepath,
        autosign=autosign,
        network_suffix=network_suffix,
        ignore_history=ignore_history,
    )
    downgrade_proxy(
        context,
        admin_address=admin_address,
        proxy_address=proxy_address,
        implementation_name=implementation,
        proxy_name=proxy_name,
        container=get_contract_container(implementation),
        initializer=initializer,
    )


if __name__ == "__main__":
    cli()
