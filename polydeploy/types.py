import click
from eth_utils import is_address, to_checksum_address


class ChecksumAddress(click.ParamType):
    """An EVM address given in any case, passed on checksummed."""

    name = "checksum_address"

    def convert(self, value, param, ctx):
        if not isinstance(value, str) or not is_address(value):
            self.fail(f"{value!r} is not an ethereum address", param, ctx)
        return to_checksum_address(value)
