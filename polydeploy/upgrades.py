from datetime import datetime
from typing import Any, NamedTuple, Optional, Sequence

from ape.contracts import ContractContainer
from eth_abi import encode
from eth_utils import keccak

from polydeploy.constants import (
    DEFAULT_INITIALIZER,
    DOWNGRADES_LEDGER,
    PROXY_ADMIN,
    TRANSPARENT_UPGRADEABLE_PROXY,
    UPGRADES_LEDGER,
)
from polydeploy.context import DeploymentContext
from polydeploy.utils import _match_method_abi, get_contract_container


class ProxyDeployment(NamedTuple):
    implementation_address: str
    admin_address: str
    proxy_address: str


def implementation_label(implementation_name: str) -> str:
    return f"Deploy {implementation_name} implementation"


def proxy_admin_label(proxy_admin_id: str) -> str:
    return f"Deploy proxy admin({proxy_admin_id})"


def get_initializer_data(
    container: ContractContainer,
    initializer: Optional[str] = DEFAULT_INITIALIZER,
    args: Optional[Sequence[Any]] = None,
) -> bytes:
    """Returns the calldata for calling ``initializer`` through a freshly deployed proxy."""
    if not initializer:
        return b""

    args = list(args or [])
    contract_name = container.contract_type.name
    method_abis = [abi for abi in container.contract_type.methods if abi.name == initializer]
    if not method_abis:
        raise ValueError(f"{contract_name} has no method named '{initializer}'.")

    abi, _ = _match_method_abi(method_abis=method_abis, args=args)
    types = [abi_input.type for abi_input in abi.inputs]
    selector = keccak(text=f"{abi.name}({','.join(types)})")[:4]
    return selector + encode(types, args)


def _upgrade(context: DeploymentContext, proxy_admin, proxy_address, implementation_address, data):
    if not data:
        return context.transactor.transact(
            proxy_admin.upgrade, proxy_address, implementation_address
        )
    return context.transactor.transact(
        proxy_admin.upgradeAndCall, proxy_address, implementation_address, data
    )


def deploy_proxy(
    context: DeploymentContext,
    implementation_name: str,
    proxy_name: str,
    container: ContractContainer,
    initializer: Optional[str] = DEFAULT_INITIALIZER,
    initializer_args: Optional[Sequence[Any]] = None,
    proxy_admin_id: Optional[str] = None,
) -> ProxyDeployment:
    """
    Deploys an implementation, a ProxyAdmin and a TransparentUpgradeableProxy
    pointing at the implementation, recording each step in the upgrades ledger.
    """
    transactor = context.transactor
    proxy_admin_id = proxy_admin_id or transactor.address
    submitter = context.submitter(UPGRADES_LEDGER)

    record = submitter.deploy(
        implementation_label(implementation_name), lambda: transactor.deploy(container)
    )
    implementation_address = record.contract_address
    print(f"    {implementation_name} implementation address:", implementation_address)

    record = submitter.deploy(
        proxy_admin_label(proxy_admin_id),
        lambda: transactor.deploy(get_contract_container(PROXY_ADMIN)),
    )
    admin_address = record.contract_address
    print(f"    ProxyAdmin({proxy_admin_id}) address:", admin_address)

    def _deploy_proxy():
        data = get_initializer_data(container, initializer, initializer_args)
        proxy_container = get_contract_container(TRANSPARENT_UPGRADEABLE_PROXY)
        return transactor.deploy(proxy_container, implementation_address, admin_address, data)

    record = submitter.deploy(f"Deploy {proxy_name} proxy", _deploy_proxy)
    proxy_address = record.contract_address
    print(f"    {proxy_name} proxy address:", proxy_address)

    return ProxyDeployment(
        implementation_address=implementation_address,
        admin_address=admin_address,
        proxy_address=proxy_address,
    )


def upgrade_proxy(
    context: DeploymentContext,
    admin_address: str,
    proxy_address: str,
    implementation_name: str,
    proxy_name: str,
    container: ContractContainer,
    initializer: Optional[str] = "",
    initializer_args: Optional[Sequence[Any]] = None,
) -> str:
    """Deploys a new implementation and points the proxy at it; returns the implementation."""
    transactor = context.transactor
    submitter = context.submitter(UPGRADES_LEDGER)

    record = submitter.deploy(
        implementation_label(implementation_name), lambda: transactor.deploy(container)
    )
    implementation_address = record.contract_address
    print(f"    {implementation_name} implementation address:", implementation_address)

    proxy_admin = get_contract_container(PROXY_ADMIN).at(admin_address)
    submitter.submit_and_wait(
        f"Upgrade {proxy_name} to use {implementation_name}",
        lambda: _upgrade(
            context,
            proxy_admin,
            proxy_address,
            implementation_address,
            get_initializer_data(container, initializer, initializer_args),
        ),
    )
    return implementation_address


def downgrade_proxy(
    context: DeploymentContext,
    admin_address: str,
    proxy_address: str,
    implementation_name: str,
    proxy_name: str,
    container: ContractContainer,
    initializer: Optional[str] = "",
    initializer_args: Optional[Sequence[Any]] = None,
) -> str:
    """Points the proxy back at an implementation recorded by an earlier upgrade."""
    upgrades = context.receipts(UPGRADES_LEDGER)
    implementation_record = upgrades.get(implementation_label(implementation_name))
    if implementation_record is None:
        raise ValueError(f"{implementation_name} implementation not found")

    implementation_address = implementation_record.contract_address
    print(f"    {implementation_name} implementation address:", implementation_address)

    submitter = context.submitter(DOWNGRADES_LEDGER)
    proxy_admin = get_contract_container(PROXY_ADMIN).at(admin_address)
    timestamp = datetime.now().isoformat(sep=" ", timespec="seconds")
    submitter.submit_and_wait(
        f"Downgrade {proxy_name} to use {implementation_name} at {timestamp}",
        lambda: _upgrade(
            context,
            proxy_admin,
            proxy_address,
            implementation_address,
            get_initializer_data(container, initializer, initializer_args),
        ),
    )
    return implementation_address


def transfer_proxy_admin_ownership(
    context: DeploymentContext, proxy_admin_id: str, new_owner_address: str
) -> None:
    submitter = context.submitter(UPGRADES_LEDGER)
    proxy_admin_record = submitter.get_receipt(proxy_admin_label(proxy_admin_id))
    if proxy_admin_record is None:
        raise ValueError(f"ProxyAdmin({proxy_admin_id}) not found")

    proxy_admin = get_contract_container(PROXY_ADMIN).at(proxy_admin_record.contract_address)
    submitter.submit_and_wait(
        f"Transfer ProxyAdmin({proxy_admin_id}) ownership to {new_owner_address}",
        lambda: context.transactor.transact(proxy_admin.transferOwnership, new_owner_address),
    )
