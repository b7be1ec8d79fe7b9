import os
import typing
from pathlib import Path
from typing import Any, Optional

from ape import chain
from ape.api import AccountAPI, ReceiptAPI
from ape.cli.choices import select_account
from ape.contracts.base import ContractContainer, ContractInstance, ContractTransactionHandler
from dotenv import load_dotenv

from polydeploy.constants import (
    ENV_PATH_ENVVAR,
    ETH_ACCOUNT_LOCK_CODE_HASH_ENVVAR,
    FALSE_FLAG_VALUES,
    GODWOKEN_API_URL_ENVVAR,
    HISTORY_DIR,
    HISTORY_DIR_ENVVAR,
    IGNORE_HISTORY_ENVVAR,
    NETWORK_SUFFIX_ENVVAR,
    ROLLUP_TYPE_HASH_ENVVAR,
)
from polydeploy.godwoken import init_account_if_needed
from polydeploy.ledger import Ledger, TransactionSubmitter, load_receipts
from polydeploy.networks import Network, network_from_suffix
from polydeploy.utils import _load_yaml, _validate_method_args

NETWORK_PARAMS_KEY = "network"


def is_flag_set(value: Optional[str]) -> bool:
    """Interprets an environment flag; unset, empty and falsy words are False."""
    if value is None:
        return False
    return value.strip().lower() not in FALSE_FLAG_VALUES


class Transactor:
    """
    Represents an ape account plus annotated transaction execution
    using the fee policy of the active network.
    """

    def __init__(
        self,
        network: Network,
        account: typing.Optional[AccountAPI] = None,
        autosign: bool = False,
    ):
        if account is None:
            self._account = select_account()
        else:
            self._account = account
        if autosign:
            print("WARNING: Autosign is enabled. Transactions will be signed automatically.")
            self._account.set_autosign(autosign)
        self._autosign = autosign
        self.network = network

    def get_account(self) -> AccountAPI:
        """Returns the transactor account."""
        return self._account

    @property
    def address(self) -> str:
        return self._account.address

    def transact(self, method: ContractTransactionHandler, *args, **kwargs) -> ReceiptAPI:
        named_args = _validate_method_args(method_abis=method.abis, args=args)
        base_message = (
            f"\nTransacting {method.contract.contract_type.name}"
            f"[{method.contract.address[:10]}].{method.abis[0].name}"
        )
        if named_args:
            pretty_args = "\n\t".join(f"{k}={v}" for k, v in named_args.items())
            message = f"{base_message} with arguments:\n\t{pretty_args}"
        else:
            message = f"{base_message} with no arguments"
        print(message)

        txn_kwargs = self.network.fee_overrides()
        txn_kwargs.update(kwargs)
        return method(*args, sender=self._account, **txn_kwargs)

    def deploy(self, container: ContractContainer, *args, **kwargs) -> ContractInstance:
        print(f"\nDeploying {container.contract_type.name}")
        txn_kwargs = self.network.fee_overrides()
        txn_kwargs.update(kwargs)
        return self._account.deploy(container, *args, **txn_kwargs)


class DeploymentContext:
    """
    Everything a deployment routine needs about the environment it runs in.
    Built once at process entry and handed to every routine.
    """

    def __init__(
        self,
        network: Network,
        transactor: Optional[Transactor] = None,
        ignore_history: bool = False,
        history_dir: Path = HISTORY_DIR,
        godwoken_api_url: Optional[str] = None,
        eth_account_lock_code_hash: Optional[str] = None,
    ):
        self.network = network
        self.transactor = transactor
        self.ignore_history = ignore_history
        self.history_dir = Path(history_dir)
        self.godwoken_api_url = godwoken_api_url
        self.eth_account_lock_code_hash = eth_account_lock_code_hash

    @property
    def network_suffix(self) -> Optional[str]:
        return self.network.suffix

    @classmethod
    def from_env(
        cls,
        account: Optional[AccountAPI] = None,
        params_filepath: Optional[Path] = None,
        autosign: bool = False,
        **overrides: Any,
    ) -> "DeploymentContext":
        """
        Loads the context from the environment (and ``ENV_PATH`` dotenv file).
        Values from an optional YAML params file fill in anything the environment
        does not set; explicit, non-None ``overrides`` win over both.
        """
        load_dotenv(os.environ.get(ENV_PATH_ENVVAR, ".env"))

        params = dict()
        if params_filepath:
            params = (_load_yaml(params_filepath) or dict()).get(NETWORK_PARAMS_KEY) or dict()

        def _setting(key: str, envvar: str) -> Optional[str]:
            value = overrides.get(key)
            if value is None:
                value = os.environ.get(envvar)
            if value is None:
                value = params.get(key)
            return value

        ignore_history = overrides.get("ignore_history")
        if ignore_history is None:
            ignore_history = is_flag_set(os.environ.get(IGNORE_HISTORY_ENVVAR))

        eth_account_lock_code_hash = _setting(
            "eth_account_lock_code_hash", ETH_ACCOUNT_LOCK_CODE_HASH_ENVVAR
        )
        network = network_from_suffix(
            _setting("network_suffix", NETWORK_SUFFIX_ENVVAR),
            rollup_type_hash=_setting("rollup_type_hash", ROLLUP_TYPE_HASH_ENVVAR),
            eth_account_lock_code_hash=eth_account_lock_code_hash,
        )
        history_dir = _setting("history_dir", HISTORY_DIR_ENVVAR) or HISTORY_DIR
        transactor = Transactor(network=network, account=account, autosign=autosign)

        context = cls(
            network=network,
            transactor=transactor,
            ignore_history=bool(ignore_history),
            history_dir=Path(history_dir),
            godwoken_api_url=_setting("godwoken_api_url", GODWOKEN_API_URL_ENVVAR),
            eth_account_lock_code_hash=eth_account_lock_code_hash,
        )
        context._print_context_info()
        return context

    def submitter(self, name: str) -> TransactionSubmitter:
        """Returns a submitter for the ledger of ``name`` on this network."""
        return TransactionSubmitter.new_with_history(
            name,
            ignore_history=self.ignore_history,
            network_suffix=self.network_suffix,
            history_dir=self.history_dir,
        )

    def receipts(self, name: str) -> Ledger:
        """Read-only view of the ledger of ``name`` on this network."""
        return load_receipts(name, network_suffix=self.network_suffix, history_dir=self.history_dir)

    def init_account_if_needed(self, address: str) -> None:
        init_account_if_needed(
            address,
            network=self.network,
            get_balance=chain.provider.get_balance,
            godwoken_api_url=self.godwoken_api_url,
        )

    def _print_context_info(self):
        account = self.transactor.get_account() if self.transactor else None
        print(
            f"Account: {account.address if account else None}",
            f"Network: {self.network.name}",
            f"Network suffix: {self.network_suffix}",
            f"History: {self.history_dir}",
            f"Ignore history: {self.ignore_history}",
            sep="\n",
        )
        if self.ignore_history:
            print("(i) History is ignored; every step will be resubmitted.")
