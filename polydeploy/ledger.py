import json
import os
import typing
from collections import OrderedDict
from pathlib import Path
from typing import Any, Callable, Dict, NamedTuple, Optional, Union

from ape.api import ReceiptAPI
from ape.contracts import ContractInstance
from eth_utils import to_checksum_address, to_hex

from polydeploy.constants import HISTORY_DIR, LEDGER_SUFFIX, TEMP_LEDGER_SUFFIX

Label = str
Action = Callable[[], Union[ReceiptAPI, ContractInstance]]

STANDARD_LEDGER_JSON_FORMAT = {"indent": 4, "separators": (",", ": ")}

TRANSACTION_HASH_KEY = "transactionHash"
CONTRACT_ADDRESS_KEY = "contractAddress"
BLOCK_NUMBER_KEY = "blockNumber"
STATUS_KEY = "status"
RECORD_KEYS = (TRANSACTION_HASH_KEY, CONTRACT_ADDRESS_KEY, BLOCK_NUMBER_KEY, STATUS_KEY)

SUCCESS_STATUS = 1


class LedgerError(Exception):
    """Raised when a persisted ledger cannot be read; it must be repaired manually."""


class StepFailed(Exception):
    """Raised when a submitted step is confirmed as failed on-chain."""


class LabelCollision(Exception):
    """Raised when a label resolves to a recorded step of a different kind."""


def _to_int(value) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, str):
        return int(value, 0)
    return int(value)


class StepRecord(NamedTuple):
    """Represents the durable outcome of a single labelled step."""

    label: Label
    transaction_hash: str
    contract_address: Optional[str] = None
    block_number: Optional[int] = None
    status: Optional[int] = None
    extra: Optional[Dict[str, Any]] = None

    @property
    def succeeded(self) -> bool:
        # only confirmed steps are ever recorded, so a missing status is a success
        return self.status is None or self.status == SUCCESS_STATUS

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra or {})
        fields = {
            TRANSACTION_HASH_KEY: self.transaction_hash,
            CONTRACT_ADDRESS_KEY: self.contract_address,
            BLOCK_NUMBER_KEY: self.block_number,
            STATUS_KEY: self.status,
        }
        # fields a step does not have are left out, not written as null
        data.update({key: value for key, value in fields.items() if value is not None})
        return data

    @classmethod
    def from_dict(cls, label: Label, data: Dict[str, Any]) -> "StepRecord":
        if not isinstance(data, dict) or not data.get(TRANSACTION_HASH_KEY):
            raise LedgerError(f"Malformed ledger record for '{label}': {data}")

        try:
            block_number = _to_int(data.get(BLOCK_NUMBER_KEY))
            status = _to_int(data.get(STATUS_KEY))
        except (TypeError, ValueError):
            raise LedgerError(f"Malformed block number or status for '{label}': {data}")

        return cls(
            label=label,
            transaction_hash=data[TRANSACTION_HASH_KEY],
            contract_address=data.get(CONTRACT_ADDRESS_KEY),
            block_number=block_number,
            status=status,
            extra={k: v for k, v in data.items() if k not in RECORD_KEYS} or None,
        )

    @classmethod
    def from_receipt(cls, label: Label, receipt: ReceiptAPI) -> "StepRecord":
        contract_address = receipt.contract_address
        if contract_address:
            contract_address = to_checksum_address(contract_address)

        transaction_hash = receipt.txn_hash
        if isinstance(transaction_hash, (bytes, bytearray)):
            transaction_hash = to_hex(transaction_hash)

        return cls(
            label=label,
            transaction_hash=str(transaction_hash),
            contract_address=contract_address or None,
            block_number=receipt.block_number,
            status=int(receipt.status),
        )


Ledger = typing.OrderedDict[Label, StepRecord]


def ledger_filename(name: str, network_suffix: Optional[str] = None) -> str:
    """Returns the ledger filename of a run identity, e.g. ``multicall-gw-devnet.json``."""
    if name.endswith(LEDGER_SUFFIX):
        name = name[: -len(LEDGER_SUFFIX)]
    if network_suffix:
        name = f"{name}-{network_suffix}"
    return f"{name}{LEDGER_SUFFIX}"


def read_ledger(filepath: Path) -> Ledger:
    """Reads a ledger from a file; a missing file is an empty ledger."""
    records = OrderedDict()
    if not filepath.exists():
        return records

    try:
        with open(filepath, "r") as file:
            data = json.load(file, object_pairs_hook=OrderedDict)
    except (OSError, ValueError) as e:
        raise LedgerError(f"Cannot read ledger at {filepath}: {e}") from e

    if not isinstance(data, dict):
        raise LedgerError(f"Ledger at {filepath} is not a mapping of labels to receipts.")

    for label, record in data.items():
        records[label] = StepRecord.from_dict(label=label, data=record)
    return records


def write_ledger(records: Ledger, filepath: Path) -> Path:
    """Writes a ledger to a file, replacing any previous version in one step."""
    data = OrderedDict((label, record.to_dict()) for label, record in records.items())

    # Create the parent directory if it does not exist
    filepath.parent.mkdir(parents=True, exist_ok=True)

    temp_filepath = filepath.with_suffix(TEMP_LEDGER_SUFFIX)
    with open(temp_filepath, "w") as file:
        json.dump(data, file, **STANDARD_LEDGER_JSON_FORMAT)
        file.flush()
        os.fsync(file.fileno())
    temp_filepath.replace(filepath)

    return filepath


def load_receipts(
    name: str,
    network_suffix: Optional[str] = None,
    history_dir: Path = HISTORY_DIR,
) -> Ledger:
    """Loads the records of another run identity without the ability to write them."""
    filepath = Path(history_dir) / ledger_filename(name, network_suffix)
    return read_ledger(filepath)


def _get_receipt(result: Union[ReceiptAPI, ContractInstance]) -> ReceiptAPI:
    if isinstance(result, ContractInstance):
        return result.receipt
    return result


class TransactionSubmitter:
    """
    Submits labelled transactions and records their receipts in a ledger file so that
    an interrupted deployment can be re-run, skipping every step that already succeeded.
    """

    def __init__(self, filepath: Path, ignore_history: bool = False):
        self.filepath = Path(filepath)
        self.ignore_history = ignore_history
        self._records = read_ledger(self.filepath)

    @classmethod
    def new_with_history(
        cls,
        name: str,
        ignore_history: bool = False,
        network_suffix: Optional[str] = None,
        history_dir: Path = HISTORY_DIR,
    ) -> "TransactionSubmitter":
        filepath = Path(history_dir) / ledger_filename(name, network_suffix)
        return cls(filepath=filepath, ignore_history=ignore_history)

    @property
    def receipts(self) -> Ledger:
        return OrderedDict(self._records)

    def get_receipt(self, label: Label) -> Optional[StepRecord]:
        """Returns the recorded step for a label, if any."""
        return self._records.get(label)

    def _recorded(self, label: Label) -> Optional[StepRecord]:
        if self.ignore_history:
            return None
        record = self._records.get(label)
        if record is None or not record.succeeded:
            return None
        return record

    def _submit(self, label: Label, action: Action) -> ReceiptAPI:
        print(f"Running: {label}")
        receipt = _get_receipt(action())
        receipt.await_confirmations()
        if receipt.failed:
            raise StepFailed(f"'{label}' failed on-chain (transaction {receipt.txn_hash}).")
        return receipt

    def _record(self, record: StepRecord) -> StepRecord:
        self._records[record.label] = record
        write_ledger(self._records, self.filepath)
        print(f"    Transaction hash: {record.transaction_hash}")
        return record

    def submit_and_wait(self, label: Label, action: Action) -> StepRecord:
        """
        Runs ``action`` unless ``label`` already succeeded, waits for the transaction
        to be confirmed, and persists its receipt before returning it.
        """
        record = self._recorded(label)
        if record is not None:
            print(f"Skipped: {label}")
            return record

        receipt = self._submit(label, action)
        return self._record(StepRecord.from_receipt(label, receipt))

    def deploy(self, label: Label, action: Action) -> StepRecord:
        """Like ``submit_and_wait``, for steps that must create a contract."""
        record = self._recorded(label)
        if record is not None:
            if not record.contract_address:
                raise LabelCollision(
                    f"'{label}' is recorded in {self.filepath} as transaction "
                    f"{record.transaction_hash}, which did not create a contract."
                )
            print(f"Skipped: {label}")
            return record

        receipt = self._submit(label, action)
        record = StepRecord.from_receipt(label, receipt)
        if not record.contract_address:
            raise StepFailed(f"'{label}' did not create a contract.")
        return self._record(record)
