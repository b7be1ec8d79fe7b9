import pytest
from eth_utils import keccak

from polydeploy.utils import _validate_method_args, get_create2_address

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
SALT_ZERO = "0x" + "00" * 32


@pytest.mark.parametrize(
    "deployer, salt, expected",
    [
        # EIP-1014 examples
        (ZERO_ADDRESS, SALT_ZERO, "0x4D1A2e2bB4F88F0250f26Ffff098B0b30B26BF38"),
        (
            "0xdeadbeef00000000000000000000000000000000",
            SALT_ZERO,
            "0xB928f69Bb1D91Cd65274e3c79d8986362984fDA3",
        ),
    ],
)
def test_create2_address(deployer, salt, expected):
    init_code_hash = keccak(b"\x00")
    assert get_create2_address(deployer, salt, init_code_hash) == expected
    assert get_create2_address(deployer, bytes(32), init_code_hash.hex()) == expected


def test_create2_address_rejects_short_salt():
    with pytest.raises(ValueError):
        get_create2_address(ZERO_ADDRESS, b"\x00", keccak(b"\x00"))


def test_validate_method_args_picks_matching_overload(make_abi):
    abis = [make_abi("mint", "address", "uint256"), make_abi("mint", "uint256")]
    assert _validate_method_args(abis, [5]) == {"arg0": 5}
    assert _validate_method_args(abis, [ZERO_ADDRESS, 5]) == {"arg0": ZERO_ADDRESS, "arg1": 5}


def test_validate_method_args_rejects_unencodable(make_abi):
    with pytest.raises(ValueError, match="Could not find ABI for 'mint'"):
        _validate_method_args([make_abi("mint", "uint256")], ["not a number"])

    with pytest.raises(ValueError):
        _validate_method_args([], [])
