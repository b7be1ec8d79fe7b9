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
    STABLE_SWAP_3_POOL,
    TOKEN_DECIMALS,
    deploy_stable_swap_3_pool,
)
from polydeploy.utils import get_contract_container


def _format_units(value: int) -> str:
    return f"{value / 10**TOKEN_DECIMALS:,}"


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@account_option()
@network_suffix_option
@ignore_history_option
@autosign_option
@params_option
def cli(network, account, network_suffix, ignore_history, autosign, params_filepath):
    """Deploy three stablecoins and a StableSwap3Pool, then add liquidity."""
    context = DeploymentContext.from_env(
        account=account,
        params_filepath=params_filepath,
        autosign=autosign,
        network_suffix=network_suffix,
        ignore_history=ignore_history,
    )
    transactor = context.transactor
    print("Deployer address:", transactor.address)
    context.init_account_if_needed(transactor.address)

    recipient_address = context.network.to_rollup_address(transactor.address)
    if recipient_address != transactor.address:
        print("Deployer godwoken address:", recipient_address)

    deployment = deploy_stable_swap_3_pool(context, owner_address=recipient_address)

    token_container = get_contract_container(MINTABLE_TOKEN)
    tokens = [token_container.at(address) for address in deployment.tokens.values()]
    pool_token = get_contract_container(CURVE_TOKEN).at(deployment.pool_token_address)
    swap = get_contract_container(STABLE_SWAP_3_POOL).at(deployment.swap_address)
    symbols = ", ".join(deployment.tokens)

    coins = [swap.coins(i) for i in range(len(tokens))]
    print(f"    {STABLE_SWAP_3_POOL}.coins ({symbols}):", ", ".join(coins))
    print("    crv3POOL minter:", pool_token.minter())
    print(
        f"    {STABLE_SWAP_3_POOL}.balances ({symbols}):",
        ", ".join(_format_units(swap.balances(i)) for i in range(len(tokens))),
    )
    balances = [token.balanceOf(recipient_address) for token in tokens]
    balances.append(pool_token.balanceOf(recipient_address))
    print(
        f"    User balances ({symbols}, and crv3POOL):",
        ", ".join(_format_units(balance) for balance in balances),
    )


if __name__ == "__main__":
    cli()
