import typing
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from polydeploy.constants import (
    DEVNET_MARKER,
    GODWOKEN_GAS_LIMIT,
    GODWOKEN_GAS_PRICE,
    GODWOKEN_SUFFIX_PREFIX,
    GODWOKEN_V0_MARKER,
    GODWOKEN_V0_SUFFIX_PREFIX,
)
from polydeploy.godwoken import eth_eoa_address_to_short_address


class Network(ABC):
    """
    Address and fee behaviour of the chain a deployment runs against,
    selected once from the network suffix.
    """

    name: str = NotImplemented
    is_godwoken: bool = False

    def __init__(self, suffix: Optional[str] = None):
        self.suffix = suffix or None

    @property
    def is_devnet(self) -> bool:
        return bool(self.suffix) and self.suffix.endswith(DEVNET_MARKER)

    @abstractmethod
    def to_rollup_address(self, eth_address: str) -> str:
        """Returns the address the execution environment uses for an EOA."""
        raise NotImplementedError

    @abstractmethod
    def fee_overrides(self) -> Dict[str, Any]:
        """Transaction kwargs applied to every submitted transaction."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(suffix={self.suffix!r})"


class Standard(Network):
    name = "standard"

    def to_rollup_address(self, eth_address: str) -> str:
        return eth_address

    def fee_overrides(self) -> Dict[str, Any]:
        return dict()


class _Godwoken(Network):
    is_godwoken = True

    def fee_overrides(self) -> Dict[str, Any]:
        return {"gas_price": GODWOKEN_GAS_PRICE, "gas_limit": GODWOKEN_GAS_LIMIT}


class GodwokenV0(_Godwoken):
    name = "godwoken-v0"

    def __init__(
        self,
        suffix: Optional[str] = None,
        rollup_type_hash: Optional[str] = None,
        eth_account_lock_code_hash: Optional[str] = None,
    ):
        super().__init__(suffix)
        if not rollup_type_hash or not eth_account_lock_code_hash:
            raise ValueError(
                "ROLLUP_TYPE_HASH and ETH_ACCOUNT_LOCK_CODE_HASH are required for Godwoken v0."
            )
        self.rollup_type_hash = rollup_type_hash
        self.eth_account_lock_code_hash = eth_account_lock_code_hash

    @classmethod
    def matches(cls, suffix: str) -> bool:
        """Returns True if the suffix names a Godwoken v0 network."""
        return suffix.startswith(GODWOKEN_V0_SUFFIX_PREFIX) or GODWOKEN_V0_MARKER in suffix

    def to_rollup_address(self, eth_address: str) -> str:
        return eth_eoa_address_to_short_address(
            eth_address,
            rollup_type_hash=self.rollup_type_hash,
            eth_account_lock_code_hash=self.eth_account_lock_code_hash,
        )


class GodwokenV1(_Godwoken):
    name = "godwoken-v1"

    def to_rollup_address(self, eth_address: str) -> str:
        # v1 accounts are addressed by their ethereum address
        return eth_address


def is_godwoken_suffix(suffix: Optional[str]) -> bool:
    return bool(suffix) and suffix.startswith(GODWOKEN_SUFFIX_PREFIX)


def network_from_suffix(
    suffix: Optional[str],
    rollup_type_hash: Optional[str] = None,
    eth_account_lock_code_hash: Optional[str] = None,
) -> typing.Union[Standard, GodwokenV0, GodwokenV1]:
    """Selects the network variant for a network suffix (e.g. ``gw-devnet``)."""
    if not is_godwoken_suffix(suffix):
        return Standard(suffix)
    if GodwokenV0.matches(suffix):
        return GodwokenV0(
            suffix,
            rollup_type_hash=rollup_type_hash,
            eth_account_lock_code_hash=eth_account_lock_code_hash,
        )
    return GodwokenV1(suffix)
