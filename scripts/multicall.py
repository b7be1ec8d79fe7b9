#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand, account_option, network_option
from ape.utils import ZERO_ADDRESS
from eth_utils import to_hex, to_int

from polydeploy.context import DeploymentContext
from polydeploy.options import (
    autosign_option,
    ignore_history_option,
    network_suffix_option,
    params_option,
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
    """Deploy Multicall and read the deployer balance through it."""
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

    deployer_rollup_address = context.network.to_rollup_address(transactor.address)
    if deployer_rollup_address != transactor.address:
        print("Deployer godwoken address:", deployer_rollup_address)

    submitter = context.submitter("multicall")
    container = get_contract_container("Multicall")
    record = submitter.deploy("Deploy Multicall", lambda: transactor.deploy(container))
    print("    Multicall address:", record.contract_address)

    multicall = container.at(record.contract_address)
    print("Balance:", multicall.getEthBalance(deployer_rollup_address))

    call_data = multicall.getEthBalance.encode_input(deployer_rollup_address)
    _, return_data = multicall.aggregate.call([(multicall.address, call_data)])
    print("Balance:", to_int(return_data[0]))

    _, return_data = multicall.aggregate.call([(ZERO_ADDRESS, call_data)])
    print("Expecting 0x:", to_hex(return_data[0]))


if __name__ == "__main__":
    cli()
