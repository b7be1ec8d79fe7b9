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
from polydeploy.upgrades import deploy_proxy, upgrade_proxy
from polydeploy.utils import get_contract_container


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@account_option()
@network_suffix_option
@ignore_history_option
@autosign_option
@params_option
def cli(network, account, network_suffix, ignore_history, autosign, params_filepath):
    """Deploy Box behind a transparent proxy, then upgrade it to BoxV2."""
    context = DeploymentContext.from_env(
        account=account,
        params_filepath=params_filepath,
        autosign=autosign,
        network_suffix=network_suffix,
        ignore_history=ignore_history,
    )
    print("Deployer address:", context.transactor.address)
    context.init_account_if_needed(context.transactor.address)

    box_container = get_contract_container("Box")
    deployment = deploy_proxy(
        context,
        implementation_name="Box",
        proxy_name="Box",
        container=box_container,
        initializer="store",
        initializer_args=[42],
    )

    box = box_container.at(deployment.proxy_address)
    print("Box value:", box.value())

    box_v2_container = get_contract_container("BoxV2")
    upgrade_proxy(
        context,
        admin_address=deployment.admin_address,
        proxy_address=deployment.proxy_address,
        implementation_name="BoxV2",
        proxy_name="Box",
        container=box_v2_container,
        initializer="increment",
    )

    box_v2 = box_v2_container.at(deployment.proxy_address)
    print("Box value after upgrade:", box_v2.value())


if __name__ == "__main__":
    cli()
