import hashlib
from typing import Callable, Optional

import requests
from eth_utils import is_hex, remove_0x_prefix, to_bytes

from polydeploy.constants import (
    CKB_HASH_PERSONALIZATION,
    SCRIPT_HASH_TYPES,
    SHORT_ADDRESS_LENGTH,
)

SCRIPT_FIELD_COUNT = 3
U32_SIZE = 4


def _u32(value: int) -> bytes:
    return value.to_bytes(U32_SIZE, "little")


def _to_bytes(value) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return to_bytes(hexstr=value)


def serialize_script(code_hash, hash_type: str, args) -> bytes:
    """Serializes a CKB Script as a molecule table (code_hash, hash_type, args)."""
    code_hash = _to_bytes(code_hash)
    if len(code_hash) != 32:
        raise ValueError(f"code_hash must be 32 bytes long, got {len(code_hash)}.")
    try:
        hash_type_byte = bytes([SCRIPT_HASH_TYPES[hash_type]])
    except KeyError:
        raise ValueError(f"Unknown script hash type '{hash_type}'.")

    args = _to_bytes(args)
    fields = [code_hash, hash_type_byte, _u32(len(args)) + args]

    header_size = U32_SIZE * (1 + SCRIPT_FIELD_COUNT)
    offsets, position = list(), header_size
    for field in fields:
        offsets.append(position)
        position += len(field)

    header = _u32(position) + b"".join(_u32(offset) for offset in offsets)
    return header + b"".join(fields)


def ckb_hash(data: bytes) -> bytes:
    """blake2b-256 with the CKB personalization."""
    return hashlib.blake2b(data, digest_size=32, person=CKB_HASH_PERSONALIZATION).digest()


def compute_script_hash(code_hash, hash_type: str, args) -> bytes:
    return ckb_hash(serialize_script(code_hash=code_hash, hash_type=hash_type, args=args))


def eth_eoa_address_to_short_address(
    eth_address: str, rollup_type_hash: str, eth_account_lock_code_hash: str
) -> str:
    """
    Returns the Godwoken (v0) short address of an Ethereum EOA.

    The short address is the prefix of the script hash of the account's layer 2 lock,
    whose args are the rollup type hash followed by the ethereum address.
    """
    if len(eth_address) != 42 or not eth_address.startswith("0x") or not is_hex(eth_address):
        raise ValueError(f"eth address format error: {eth_address}")

    args = rollup_type_hash + remove_0x_prefix(eth_address).lower()
    script_hash = compute_script_hash(
        code_hash=eth_account_lock_code_hash, hash_type="type", args=args
    )
    return "0x" + script_hash[:SHORT_ADDRESS_LENGTH].hex()


def init_account_if_needed(
    address: str,
    network,
    get_balance: Callable[[str], int],
    godwoken_api_url: Optional[str] = None,
) -> None:
    """
    Makes sure ``address`` has a funded account, depositing through the
    devnet faucet API when running against a Godwoken devnet.
    """
    balance = get_balance(address)
    if balance > 0:
        return

    if not network.is_godwoken:
        print(f"WARNING: account({address}) balance is 0")
        return

    if not network.is_devnet:
        raise ValueError(f"Please initialize godwoken account for {address} by deposit first")

    print(f"Running: Initialize Godwoken account for {address} by deposit")
    if not godwoken_api_url:
        raise ValueError("GODWOKEN_API_URL is required to initialize devnet accounts.")

    print("    It may take a few minutes...")
    response = requests.get(f"{godwoken_api_url}/deposit", params={"eth_address": address})
    response.raise_for_status()

    data = response.json()
    if data.get("status") != "ok":
        raise RuntimeError(f"Failed to deposit for {address}: {data}")

    print("    Initialized, id:", data["data"]["account_id"])
