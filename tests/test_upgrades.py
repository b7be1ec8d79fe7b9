import pytest

from polydeploy.ledger import load_receipts
from polydeploy.upgrades import (
    deploy_proxy,
    downgrade_proxy,
    get_initializer_data,
    transfer_proxy_admin_ownership,
    upgrade_proxy,
)

STORE_SELECTOR = bytes.fromhex("6057361d")  # store(uint256)
INCREMENT_SELECTOR = bytes.fromhex("d09de08a")  # increment()
NEW_OWNER = "0x000000000000000000000000000000000000bEEF"


@pytest.fixture
def box(make_container, make_abi):
    return make_container("Box", methods=[make_abi("store", "uint256")])


@pytest.fixture
def box_v2(make_container, make_abi):
    return make_container("BoxV2", methods=[make_abi("store", "uint256"), make_abi("increment")])


@pytest.fixture
def oz_containers(monkeypatch, make_container):
    containers = {
        "ProxyAdmin": make_container("ProxyAdmin"),
        "TransparentUpgradeableProxy": make_container("TransparentUpgradeableProxy"),
    }
    monkeypatch.setattr("polydeploy.upgrades.get_contract_container", containers.__getitem__)
    return containers


def test_initializer_data(box, box_v2):
    assert get_initializer_data(box, "store", [42]) == STORE_SELECTOR + (42).to_bytes(32, "big")
    assert get_initializer_data(box_v2, "increment") == INCREMENT_SELECTOR
    assert get_initializer_data(box, "") == b""
    assert get_initializer_data(box, None) == b""


def test_initializer_data_unknown_method(box):
    with pytest.raises(ValueError, match="no method named 'initialize'"):
        get_initializer_data(box)


def test_deploy_proxy(context, transactor, box, oz_containers, history_dir):
    deployment = deploy_proxy(
        context, "Box", "Box", box, initializer="store", initializer_args=[42]
    )

    (impl_container, _), (admin_container, _), (proxy_container, proxy_args) = (
        transactor.deployments
    )
    assert impl_container is box
    assert admin_container is oz_containers["ProxyAdmin"]
    assert proxy_container is oz_containers["TransparentUpgradeableProxy"]
    assert proxy_args == (
        deployment.implementation_address,
        deployment.admin_address,
        STORE_SELECTOR + (42).to_bytes(32, "big"),
    )

    receipts = load_receipts("upgrades", history_dir=history_dir)
    assert list(receipts) == [
        "Deploy Box implementation",
        f"Deploy proxy admin({transactor.address})",
        "Deploy Box proxy",
    ]
    assert receipts["Deploy Box proxy"].contract_address == deployment.proxy_address


def test_deploy_proxy_resumes(context, transactor, box, oz_containers):
    first = deploy_proxy(context, "Box", "Box", box, initializer="store", initializer_args=[42])
    second = deploy_proxy(context, "Box", "Box", box, initializer="store", initializer_args=[42])
    assert first == second
    assert len(transactor.deployments) == 3


def test_upgrade_proxy_without_initializer(context, transactor, box, box_v2, oz_containers):
    deployment = deploy_proxy(context, "Box", "Box", box, initializer="store", initializer_args=[1])
    implementation = upgrade_proxy(
        context, deployment.admin_address, deployment.proxy_address, "BoxV2", "Box", box_v2
    )

    method, args = transactor.transactions[-1]
    assert method == "ProxyAdmin.upgrade"
    assert args == (deployment.proxy_address, implementation)


def test_upgrade_proxy_with_initializer(context, transactor, box, box_v2, oz_containers):
    deployment = deploy_proxy(context, "Box", "Box", box, initializer="store", initializer_args=[1])
    implementation = upgrade_proxy(
        context,
        deployment.admin_address,
        deployment.proxy_address,
        "BoxV2",
        "Box",
        box_v2,
        initializer="increment",
    )

    method, args = transactor.transactions[-1]
    assert method == "ProxyAdmin.upgradeAndCall"
    assert args == (deployment.proxy_address, implementation, INCREMENT_SELECTOR)
    assert oz_containers["ProxyAdmin"].instances[deployment.admin_address]


def test_downgrade_proxy(context, transactor, box, box_v2, oz_containers, history_dir):
    deployment = deploy_proxy(context, "Box", "Box", box, initializer="store", initializer_args=[1])
    upgrade_proxy(context, deployment.admin_address, deployment.proxy_address, "BoxV2", "Box", box_v2)

    implementation = downgrade_proxy(
        context, deployment.admin_address, deployment.proxy_address, "Box", "Box", box
    )
    assert implementation == deployment.implementation_address

    method, args = transactor.transactions[-1]
    assert method == "ProxyAdmin.upgrade"
    assert args == (deployment.proxy_address, deployment.implementation_address)

    (label,) = load_receipts("downgrades", history_dir=history_dir)
    assert label.startswith("Downgrade Box to use Box at ")


def test_downgrade_to_unknown_implementation(context, box, oz_containers):
    with pytest.raises(ValueError, match="Box implementation not found"):
        downgrade_proxy(context, NEW_OWNER, NEW_OWNER, "Box", "Box", box)


def test_transfer_proxy_admin_ownership(context, transactor, box, oz_containers, history_dir):
    deployment = deploy_proxy(context, "Box", "Box", box, initializer="store", initializer_args=[1])
    transfer_proxy_admin_ownership(context, transactor.address, NEW_OWNER)

    method, args = transactor.transactions[-1]
    assert method == "ProxyAdmin.transferOwnership"
    assert args == (NEW_OWNER,)
    assert deployment.admin_address in oz_containers["ProxyAdmin"].instances

    label = f"Transfer ProxyAdmin({transactor.address}) ownership to {NEW_OWNER}"
    assert label in load_receipts("upgrades", history_dir=history_dir)


def test_transfer_unknown_proxy_admin(context, oz_containers):
    with pytest.raises(ValueError, match=r"ProxyAdmin\(nobody\) not found"):
        transfer_proxy_admin_ownership(context, "nobody", NEW_OWNER)
