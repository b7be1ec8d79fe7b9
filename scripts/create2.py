#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand, account_option, network_option

from polydeploy.context import DeploymentContext
from polydeploy.networks import GodwokenV0
from polydeploy.options import (
    autosign_option,
    ignore_history_option,
    network_suffix_option,
    params_option,
)
from polydeploy.utils import get_contract_container, get_create2_address

HASH_ZERO = b"\x00" * 32


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@account_option()
@network_suffix_option
@ignore_history_option
@autosign_option
@params_option
def cli(network, account, network_suffix, ignore_history, autosign, params_filepath):
    """Deploy Create2 and compare off-chain and on-chain CREATE2 addresses."""
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

    submitter = context.submitter("create2")
    container = get_contract_container("Create2")
    record = submitter.deploy("Deploy Create2", lambda: transactor.deploy(container))
    print("    Create2 address:", record.contract_address)

    create2 = container.at(record.contract_address)
    is_godwoken_v0 = isinstance(context.network, GodwokenV0)

    salt = HASH_ZERO
    init_code_hash = create2.INIT_CODE_HASH()
    print("    create2 returns address:", create2.create.call(salt))

    off_chain_address = get_create2_address(create2.address, salt, init_code_hash)
    if is_godwoken_v0:
        off_chain_address = create2.convertETHAddrToGodwokenAddr(off_chain_address)
    print("    Off-chain calculation:", off_chain_address)

    on_chain_address = create2.getAddress(salt)
    if is_godwoken_v0:
        on_chain_address = create2.convertETHAddrToGodwokenAddr(on_chain_address)
    print("    On-chain calculation:", on_chain_address)


if __name__ == "__main__":
    cli()
