import hashlib

import pytest

import polydeploy.godwoken
from polydeploy.godwoken import (
    compute_script_hash,
    eth_eoa_address_to_short_address,
    init_account_if_needed,
    serialize_script,
)
from polydeploy.networks import network_from_suffix

ROLLUP_TYPE_HASH = "0x" + "12" * 32
LOCK_CODE_HASH = "0x" + "34" * 32
ADDRESS = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"


def u32(value):
    return value.to_bytes(4, "little")


def test_serialize_script_layout():
    code_hash = b"\x11" * 32
    args = b"\xaa\xbb"
    serialized = serialize_script(code_hash, "type", args)

    expected = (
        u32(16 + 32 + 1 + 4 + 2)  # total size
        + u32(16)  # code_hash offset
        + u32(48)  # hash_type offset
        + u32(49)  # args offset
        + code_hash
        + b"\x01"
        + u32(2)
        + args
    )
    assert serialized == expected


def test_serialize_script_accepts_hex():
    assert serialize_script("0x" + "11" * 32, "data", "0xaabb") == serialize_script(
        b"\x11" * 32, "data", b"\xaa\xbb"
    )


def test_serialize_script_rejects_bad_input():
    with pytest.raises(ValueError):
        serialize_script(b"\x11" * 31, "type", b"")
    with pytest.raises(ValueError):
        serialize_script(b"\x11" * 32, "unknown", b"")


def test_script_hash_uses_ckb_blake2b():
    serialized = serialize_script(b"\x11" * 32, "type", b"\xaa")
    expected = hashlib.blake2b(serialized, digest_size=32, person=b"ckb-default-hash").digest()
    assert compute_script_hash(b"\x11" * 32, "type", b"\xaa") == expected


def test_short_address():
    short_address = eth_eoa_address_to_short_address(ADDRESS, ROLLUP_TYPE_HASH, LOCK_CODE_HASH)

    args = bytes.fromhex("12" * 32) + bytes.fromhex(ADDRESS[2:].lower())
    script_hash = compute_script_hash(LOCK_CODE_HASH, "type", args)
    assert short_address == "0x" + script_hash[:20].hex()
    assert len(short_address) == 42


def test_short_address_ignores_checksum_case():
    assert eth_eoa_address_to_short_address(
        ADDRESS, ROLLUP_TYPE_HASH, LOCK_CODE_HASH
    ) == eth_eoa_address_to_short_address(ADDRESS.lower(), ROLLUP_TYPE_HASH, LOCK_CODE_HASH)


def test_short_address_depends_on_rollup():
    other_rollup = "0x" + "56" * 32
    assert eth_eoa_address_to_short_address(
        ADDRESS, ROLLUP_TYPE_HASH, LOCK_CODE_HASH
    ) != eth_eoa_address_to_short_address(ADDRESS, other_rollup, LOCK_CODE_HASH)


@pytest.mark.parametrize("address", [ADDRESS[2:], ADDRESS[:-1], ADDRESS + "0", "0x" + "zz" * 20])
def test_short_address_rejects_malformed_address(address):
    with pytest.raises(ValueError, match="eth address format error"):
        eth_eoa_address_to_short_address(address, ROLLUP_TYPE_HASH, LOCK_CODE_HASH)


class FakeResponse:
    def __init__(self, data):
        self._data = data

    def raise_for_status(self):
        return None

    def json(self):
        return self._data


@pytest.fixture
def deposits(monkeypatch):
    requests_made = list()
    responses = list()

    def _get(url, params=None):
        requests_made.append((url, params))
        return FakeResponse(responses.pop(0))

    monkeypatch.setattr(polydeploy.godwoken.requests, "get", _get)
    return requests_made, responses


def test_funded_account_needs_nothing(deposits):
    requests_made, _ = deposits
    network = network_from_suffix("gw-devnet")
    init_account_if_needed(ADDRESS, network, get_balance=lambda _: 1, godwoken_api_url="http://gw")
    assert requests_made == []


def test_standard_network_only_warns(deposits, capsys):
    requests_made, _ = deposits
    init_account_if_needed(ADDRESS, network_from_suffix(None), get_balance=lambda _: 0)
    assert "WARNING" in capsys.readouterr().out
    assert requests_made == []


def test_non_devnet_godwoken_requires_manual_deposit(deposits):
    with pytest.raises(ValueError, match="by deposit first"):
        init_account_if_needed(ADDRESS, network_from_suffix("gw-testnet"), get_balance=lambda _: 0)


def test_devnet_deposit_requires_api_url(deposits):
    with pytest.raises(ValueError, match="GODWOKEN_API_URL"):
        init_account_if_needed(ADDRESS, network_from_suffix("gw-devnet"), get_balance=lambda _: 0)


def test_devnet_deposit(deposits, capsys):
    requests_made, responses = deposits
    responses.append({"status": "ok", "data": {"account_id": 42}})

    init_account_if_needed(
        ADDRESS,
        network_from_suffix("gw-devnet"),
        get_balance=lambda _: 0,
        godwoken_api_url="http://localhost:6101",
    )

    assert requests_made == [("http://localhost:6101/deposit", {"eth_address": ADDRESS})]
    assert "Initialized, id: 42" in capsys.readouterr().out


def test_devnet_deposit_failure(deposits):
    _, responses = deposits
    responses.append({"status": "failed"})
    with pytest.raises(RuntimeError):
        init_account_if_needed(
            ADDRESS,
            network_from_suffix("gw-devnet"),
            get_balance=lambda _: 0,
            godwoken_api_url="http://localhost:6101",
        )
