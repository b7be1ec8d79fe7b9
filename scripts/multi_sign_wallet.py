#!/usr/bin/python3

import os

import click
from ape import accounts
from ape.cli import ConnectedProviderCommand, account_option, network_option
from eth_utils import to_checksum_address

from polydeploy.constants import SIGNER_ACCOUNTS_ENVVAR
from polydeploy.context import DeploymentContext, Transactor
from polydeploy.multisig import generate_signed_tx
from polydeploy.options import (
    autosign_option,
    expire_in_option,
    ignore_history_option,
    network_suffix_option,
    params_option,
)
from polydeploy.utils import get_contract_container

MINT_AMOUNT = 100


def _load_signers():
    aliases = os.environ.get(SIGNER_ACCOUNTS_ENVVAR)
    if not aliases:
        raise ValueError(f"{SIGNER_ACCOUNTS_ENVVAR} is required (two comma separated aliases).")
    aliases = [alias.strip() for alias in aliases.split(",")]
    if len(aliases) != 2:
        raise ValueError(f"Invalid number of signers, required: 2, got: {len(aliases)}")
    return [accounts.load(alias) for alias in aliases]


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@account_option()
@network_suffix_option
@ignore_history_option
@autosign_option
@params_option
@expire_in_option
def cli(network, account, network_suffix, ignore_history, autosign, params_filepath, expire_in):
    """Deploy WalletSimple and mint tokens through a two-signer multi-sig call."""
    context = DeploymentContext.from_env(
        account=account,
        params_filepath=params_filepath,
        autosign=autosign,
        network_suffix=network_suffix,
        ignore_history=ignore_history,
    )
    transactor = context.transactor
    signer_one, signer_two = _load_signers()

    # init godwoken accounts of signers first
    for address in (signer_two.address, signer_one.address, transactor.address):
        context.init_account_if_needed(address)

    print("Deployer address:", transactor.address)
    deployer_recipient_address = context.network.to_rollup_address(transactor.address)
    if deployer_recipient_address != transactor.address:
        print("Deployer godwoken address:", deployer_recipient_address)

    submitter = context.submitter("multi-sign-wallet")

    wallet_container = get_contract_container("WalletSimple")
    record = submitter.deploy(
        "Deploy WalletSimple", lambda: transactor.deploy(wallet_container)
    )
    print("    WalletSimple address:", record.contract_address)
    wallet_simple = wallet_container.at(record.contract_address)

    signer_addresses = [signer_one.address, signer_two.address, transactor.address]
    print("Signer addresses:", ", ".join(signer_addresses))

    def _init_wallet():
        if context.network.is_godwoken:
            lock_code_hash = context.eth_account_lock_code_hash
        else:
            lock_code_hash = wallet_simple.EMPTY_LOCK_HASH()
        return transactor.transact(wallet_simple.init, signer_addresses, lock_code_hash)

    submitter.submit_and_wait("Init WalletSimple", _init_wallet)

    token_container = get_contract_container("MintableTokenFixedParams")
    record = submitter.deploy(
        "Deploy MintableToken", lambda: transactor.deploy(token_container)
    )
    print("    MintableToken address:", record.contract_address)
    mintable_token = token_container.at(record.contract_address)

    submitter.submit_and_wait(
        "Set WalletSimple as minter",
        lambda: transactor.transact(mintable_token.setMinter, wallet_simple.address),
    )

    print("User balance before mint:", mintable_token.balanceOf(deployer_recipient_address))

    def _mint_through_wallet():
        data = mintable_token.mint.encode_input(deployer_recipient_address, MINT_AMOUNT)
        sequence_id = wallet_simple.getNextSequenceId()

        print(f"    Signing tx using signer one({signer_one.address})")
        signed_tx = generate_signed_tx(
            sequence_id=sequence_id,
            to_address=mintable_token.address,
            data=data,
            expire_in=expire_in,
            signer=signer_one,
        )

        print(f"    Executing tx using signer two({signer_two.address})")
        signer_two_transactor = Transactor(network=context.network, account=signer_two)
        return signer_two_transactor.transact(
            wallet_simple.sendMultiSig,
            to_checksum_address(signed_tx.to_address),
            signed_tx.value,
            signed_tx.data,
            signed_tx.expire_time,
            signed_tx.sequence_id,
            signed_tx.signature,
        )

    submitter.submit_and_wait(f"Mint {MINT_AMOUNT} token using WalletSimple", _mint_through_wallet)

    print("    User balance after mint:", mintable_token.balanceOf(deployer_recipient_address))


if __name__ == "__main__":
    cli()
