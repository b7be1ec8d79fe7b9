#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand, account_option, network_option

from polydeploy.context import DeploymentContext
from polydeploy.options import (
    autosign_option,
    network_suffix_option,
    new_owner_option,
    params_option,
    proxy_admin_id_option,
)
from polydeploy.upgrades import transfer_proxy_admin_ownership


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@account_option()
@network_suffix_option
@autosign_option
@params_option
@proxy_admin_id_option
@new_owner_option
def cli(network, account, network_suffix, autosign, params_filepath, proxy_admin_id, new_owner):
    """Transfer ownership of a ProxyAdmin recorded in the upgrades history."""
    context = DeploymentContext.from_env(
        account=account,
        params_filepath=params_filepath,
        autosign=autosign,
        network_suffix=network_suffix,
    )
    transfer_proxy_admin_ownership(
        context,
        proxy_admin_id=proxy_admin_id or context.transactor.address,
        new_owner_address=new_owner,
    )


if __name__ == "__main__":
    cli()
