import itertools
from types import SimpleNamespace

import pytest
from eth_utils import to_checksum_address

from polydeploy.context import DeploymentContext
from polydeploy.ledger import TransactionSubmitter
from polydeploy.networks import Standard


class FakeReceipt:
    """Stands in for an ape ReceiptAPI."""

    def __init__(self, txn_hash, contract_address=None, block_number=1, status=1):
        self.txn_hash = txn_hash
        self.contract_address = contract_address
        self.block_number = block_number
        self.status = status
        self.confirmed = False

    @property
    def failed(self) -> bool:
        return self.status != 1

    def await_confirmations(self):
        self.confirmed = True
        return self


class FakeBackend:
    """Hands out sequential receipts and remembers every submission."""

    def __init__(self):
        self._counter = itertools.count(1)
        self.submitted = list()

    def send(self, contract=False, status=1) -> FakeReceipt:
        n = next(self._counter)
        receipt = FakeReceipt(
            txn_hash=f"0x{n:064x}",
            contract_address=to_checksum_address(f"0x{n:040x}") if contract else None,
            block_number=100 + n,
            status=status,
        )
        self.submitted.append(receipt)
        return receipt

    def action(self, contract=False, status=1):
        return lambda: self.send(contract=contract, status=status)


class FakeTransactor:
    """Records deployments and transactions instead of sending them."""

    def __init__(self, backend: FakeBackend, address="0x000000000000000000000000000000000000dEaD"):
        self.backend = backend
        self.address = address
        self.deployments = list()
        self.transactions = list()

    def deploy(self, container, *args, **kwargs):
        self.deployments.append((container, args))
        return self.backend.send(contract=True)

    def transact(self, method, *args, **kwargs):
        self.transactions.append((method, args))
        return self.backend.send()


def fake_abi(name, *types):
    inputs = [SimpleNamespace(name=f"arg{i}", type=t) for i, t in enumerate(types)]
    return SimpleNamespace(name=name, inputs=inputs)


class FakeInstance:
    """Contract handle whose methods are named "<Contract>.<method>"."""

    def __init__(self, name, address):
        self.name = name
        self.address = address

    def __getattr__(self, method):
        if method.startswith("_"):
            raise AttributeError(method)
        return f"{self.name}.{method}"


class FakeContainer:
    def __init__(self, name, methods=()):
        self.name = name
        self.contract_type = SimpleNamespace(name=name, methods=list(methods))
        self.instances = dict()

    def at(self, address):
        instance = FakeInstance(self.name, address)
        self.instances[address] = instance
        return instance


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def history_dir(tmp_path):
    return tmp_path / "history"


@pytest.fixture
def ledger_filepath(history_dir):
    return history_dir / "deploy.json"


@pytest.fixture
def submitter(ledger_filepath):
    return TransactionSubmitter(filepath=ledger_filepath)


@pytest.fixture
def transactor(backend):
    return FakeTransactor(backend)


@pytest.fixture
def context(transactor, history_dir):
    return DeploymentContext(network=Standard(), transactor=transactor, history_dir=history_dir)


@pytest.fixture
def make_abi():
    return fake_abi


@pytest.fixture
def make_container():
    return FakeContainer


@pytest.fixture
def make_receipt():
    return FakeReceipt
