import time
from typing import NamedTuple, Union

from eth_account.messages import encode_defunct
from eth_utils import to_checksum_address
from hexbytes import HexBytes
from web3 import Web3

from polydeploy.constants import MULTISIG_ETHER_PREFIX

OPERATION_HASH_TYPES = ["string", "address", "uint256", "bytes", "uint256", "uint256"]


class SignedMultiSigTx(NamedTuple):
    """Arguments of a WalletSimple ``sendMultiSig`` call, signed by the first signer."""

    to_address: str
    value: int
    data: HexBytes
    expire_time: int
    sequence_id: int
    signature: bytes


def get_operation_hash(
    prefix: str,
    to_address: str,
    value: int,
    data: Union[bytes, str],
    expire_time: int,
    sequence_id: int,
) -> HexBytes:
    return Web3.solidity_keccak(
        OPERATION_HASH_TYPES,
        [
            prefix,
            to_checksum_address(to_address),
            int(value),
            HexBytes(data),
            int(expire_time),
            int(sequence_id),
        ],
    )


def generate_signed_tx(
    sequence_id: int,
    to_address: str,
    data: Union[bytes, str],
    expire_in: int,
    signer,
    value: int = 0,
) -> SignedMultiSigTx:
    """
    Signs a contract interaction to be executed through WalletSimple.
    ``expire_in`` is in seconds; the expiry is encoded in milliseconds.
    """
    expire_time = int(time.time() * 1000) + expire_in * 1000
    operation_hash = get_operation_hash(
        MULTISIG_ETHER_PREFIX, to_address, value, data, expire_time, sequence_id
    )
    signature = signer.sign_message(encode_defunct(primitive=bytes(operation_hash)))

    return SignedMultiSigTx(
        to_address=to_address.lower(),
        value=int(value),
        data=HexBytes(data),
        expire_time=expire_time,
        sequence_id=int(sequence_id),
        signature=signature.encode_rsv(),
    )
