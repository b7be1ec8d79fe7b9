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
from polydeploy.pools import (
    CURVE_TOKEN,
    MINTABLE_TOKEN,
    TOKEN_DECIMALS,
    deploy_curve_token_and_faucet,
)
from polydeploy.utils import get_contract_container


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@account_option()
@network_suffix_option
@ignore_history_option
@autosign_option
@params_option
def cli(network, account, network_suffix, ignore_history, autosign, params_filepath):
    """Deploy MintableToken, CurveToken and a Faucet, then mint through the faucet."""
    context = DeploymentContext.from_env(
        account=account,
        params_filepath=params_filepath,
        autosign=autosign,
        network_suffix=network_suffix,
        ignore_history=ignore_history,
    )
    transactor = context.transactor
    print("Deployer address", transactor.address)
    context.init_account_if_needed(transactor.address)

    recipient_address = context.network.to_rollup_address(transactor.address)
    if recipient_address != transactor.address:
        print("Deployer godwoken address:", recipient_address)

    deployment = deploy_curve_token_and_faucet(context)

    mintable_token = get_contract_container(MINTABLE_TOKEN).at(deployment.mintable_token_address)
    curve_token = get_contract_container(CURVE_TOKEN).at(deployment.curve_token_address)
    print("    Minters:", mintable_token.minter(), curve_token.minter())
    print(
        "Balances(MT, CRV):",
        ", ".join(
            f"{token.balanceOf(recipient_address) / 10**TOKEN_DECIMALS:,}"
            for token in (mintable_token, curve_token)
        ),
    )


if __name__ == "__main__":
    cli()
