#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand, account_option, network_option
from ape.exceptions import ContractLogicError
from ape.utils import ZERO_ADDRESS
from eth_utils import to_int

from polydeploy.context import DeploymentContext
from polydeploy.options import (
    autosign_option,
    ignore_history_option,
    network_suffix_option,
    params_option,
)
from polydeploy.utils import get_contract_container


def _expect_revert(description, call):
    print(f"Running: {description}")
    try:
        call()
    except ContractLogicError:
        print("    Reverted as expected")
    else:
        raise RuntimeError(f"[Incompatibility] {description} should revert")


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@account_option()
@network_suffix_option
@ignore_history_option
@autosign_option
@params_option
def cli(network, account, network_suffix, ignore_history, autosign, params_filepath):
    """Deploy Multicall2 and check aggregate / tryAggregate revert handling."""
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

    submitter = context.submitter("multicall2")
    container = get_contract_container("Multicall2")
    record = submitter.deploy("Deploy Multicall2", lambda: transactor.deploy(container))
    print("    Multicall2 address:", record.contract_address)
    multicall2 = container.at(record.contract_address)

    print("Running: get native balance with Multicall2.getEthBalance")
    print("    Balance:", multicall2.getEthBalance(deployer_rollup_address))

    balance_call_data = multicall2.getEthBalance.encode_input(deployer_rollup_address)
    balance_call = (multicall2.address, balance_call_data)

    print("Running: get native balance with Multicall2.aggregate")
    _, return_data = multicall2.aggregate.call([balance_call])
    print("    Balance:", to_int(return_data[0]))

    print("Running: get native balance with Multicall2.tryAggregate")
    (result,) = multicall2.tryAggregate.call(True, [balance_call])
    print("    Balance:", to_int(result.returnData))

    revert_test_container = get_contract_container("RevertTest")
    record = submitter.deploy(
        "Deploy RevertTest", lambda: transactor.deploy(revert_test_container)
    )
    print("    RevertTest address:", record.contract_address)
    revert_test = revert_test_container.at(record.contract_address)

    revert_call = (revert_test.address, revert_test.test.encode_input())
    missing_call = (ZERO_ADDRESS, revert_test.test.encode_input())

    _expect_revert(
        "RevertTest.test() with Multicall2.aggregate",
        lambda: multicall2.aggregate.call([revert_call]),
    )

    print("Running: RevertTest.test() with Multicall2.tryAggregate")
    multicall2.tryAggregate.call(False, [revert_call])
    print("    Done")

    _expect_revert(
        "RevertTest.test() with Multicall2.tryAggregate (require success)",
        lambda: multicall2.tryAggregate.call(True, [revert_call]),
    )

    print(
        "Running: Multicall2.tryAggregate([revertTest, getNativeBalance, nonexistentContractCall])"
    )
    reverted, balance, missing = multicall2.tryAggregate.call(
        False, [revert_call, balance_call, missing_call]
    )
    if not balance.success:
        print("    [Incompatibility] Failed to get native balance")
    else:
        print("    Balance:", to_int(balance.returnData))
    if reverted.success or missing.success:
        print("    [Incompatibility] Expected return: false, got: true")

    for calls in (
        [missing_call, balance_call, missing_call],
        [missing_call, missing_call],
        [missing_call, missing_call, balance_call],
    ):
        print(f"Running: Multicall2.tryAggregate with {len(calls)} calls")
        multicall2.tryAggregate.call(False, calls)
        print("    Done")


if __name__ == "__main__":
    cli()
