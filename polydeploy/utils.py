from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

import yaml
from ape import project
from ape.contracts import ContractContainer
from eth_abi import is_encodable
from eth_typing import ChecksumAddress
from eth_utils import keccak, to_bytes, to_checksum_address
from ethpm_types import MethodABI


def _load_yaml(filepath: Path) -> dict:
    """Loads a YAML file."""
    with open(filepath, "r") as file:
        return yaml.safe_load(file)


def _get_dependency_contract_container(contract: str) -> ContractContainer:
    for dependency_name, dependency_versions in project.dependencies.items():
        if len(dependency_versions) > 1:
            raise ValueError(f"Ambiguous {dependency_name} dependency for {contract}")
        try:
            dependency_api = list(dependency_versions.values())[0]
            contract_container = getattr(dependency_api, contract)
            return contract_container
        except AttributeError:
            continue
    raise ValueError(f"No contract found with name '{contract}'.")


def get_contract_container(contract: str) -> ContractContainer:
    try:
        contract_container = getattr(project, contract)
    except AttributeError:
        # not in root project; check dependencies (e.g. openzeppelin proxies)
        contract_container = _get_dependency_contract_container(contract)

    return contract_container


def _validate_method_args(method_abis: List[MethodABI], args: Sequence[Any]) -> Dict[str, Any]:
    """Validates the transaction arguments against the function ABI."""
    if len(method_abis) == 0:
        raise ValueError("No method abis provided for validation of args")

    return dict(_match_method_abi(method_abis=method_abis, args=args)[1])


def _match_method_abi(method_abis: List[MethodABI], args: Sequence[Any]):
    """Returns the first ABI (and its named args) whose inputs can encode ``args``."""
    abis_matching_args_length = [abi for abi in method_abis if len(abi.inputs) == len(args)]
    for abi in abis_matching_args_length:
        named_args = {}
        for arg, abi_input in zip(args, abi.inputs):
            if not is_encodable(abi_input.type, arg):
                break
            named_args[abi_input.name] = arg
        else:
            return abi, named_args
    raise ValueError(
        f"Could not find ABI for '{method_abis[0].name}' with {len(args)} arg(s) and given type(s)"
    )


def get_create2_address(
    deployer: str, salt: Union[bytes, str], init_code_hash: Union[bytes, str]
) -> ChecksumAddress:
    """Computes the EIP-1014 address of a contract created via CREATE2."""
    salt = to_bytes(hexstr=salt) if isinstance(salt, str) else salt
    init_code_hash = (
        to_bytes(hexstr=init_code_hash) if isinstance(init_code_hash, str) else init_code_hash
    )
    if len(salt) != 32 or len(init_code_hash) != 32:
        raise ValueError("salt and init code hash must be 32 bytes long.")

    preimage = b"\xff" + to_bytes(hexstr=deployer) + salt + init_code_hash
    return to_checksum_address(keccak(preimage)[12:])
