import click
import pytest

from polydeploy.types import ChecksumAddress

ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"


@pytest.mark.parametrize("value", [ADDRESS, ADDRESS.lower(), ADDRESS.lower()[2:]])
def test_checksum_address(value):
    assert ChecksumAddress().convert(value, None, None) == ADDRESS


@pytest.mark.parametrize("value", ["", "0x1234", "not an address", ADDRESS + "00"])
def test_checksum_address_rejects(value):
    with pytest.raises(click.BadParameter, match="is not an ethereum address"):
        ChecksumAddress().convert(value, None, None)
