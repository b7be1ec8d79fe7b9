from typing import Dict, List, NamedTuple, Optional

from polydeploy.context import DeploymentContext
from polydeploy.ledger import TransactionSubmitter
from polydeploy.utils import get_contract_container

MINTABLE_TOKEN = "MintableToken"
CURVE_TOKEN = "CurveTokenV3"
FAUCET = "Faucet"
STABLE_SWAP_3_POOL = "StableSwap3Pool"

TOKEN_DECIMALS = 18
MAX_UINT256 = 2**256 - 1

STABLE_TOKENS = {
    "DAI": "Dai Stablecoin",
    "USDC": "USD Coin",
    "USDT": "Tether",
}

# StableSwap3Pool constructor parameters
AMPLIFICATION = 200
FEE = 4000000
ADMIN_FEE = 0


def unit(amount: int, decimals: int = TOKEN_DECIMALS) -> int:
    return amount * 10**decimals


class StableSwapDeployment(NamedTuple):
    tokens: Dict[str, str]
    faucet_address: str
    pool_token_address: str
    swap_address: str


class CurveTokenAndFaucet(NamedTuple):
    mintable_token_address: str
    curve_token_address: str
    faucet_address: str


def deploy_contract(
    context: DeploymentContext,
    submitter: TransactionSubmitter,
    label: str,
    contract_name: str,
    *args,
) -> str:
    container = get_contract_container(contract_name)
    record = submitter.deploy(label, lambda: context.transactor.deploy(container, *args))
    return record.contract_address


def deploy_token(
    context: DeploymentContext, submitter: TransactionSubmitter, name: str, symbol: str
) -> str:
    address = deploy_contract(context, submitter, f"Deploy {symbol}", MINTABLE_TOKEN, name, symbol)
    print(f"    {symbol} address:", address)
    return address


def deploy_stable_swap_3_pool(
    context: DeploymentContext,
    owner_address: str,
    tokens: Optional[Dict[str, str]] = None,
    mint_amount: int = 100_000,
    liquidity_amount: int = 50_000,
) -> StableSwapDeployment:
    """
    Deploys three faucet-minted stablecoins, the crv3POOL LP token and a StableSwap3Pool
    over them, then seeds the pool with liquidity from the deployer.
    """
    tokens = tokens or STABLE_TOKENS
    transactor = context.transactor
    submitter = context.submitter("stable-swap-3-pool")
    symbols = ", ".join(tokens)

    token_container = get_contract_container(MINTABLE_TOKEN)
    token_addresses = {
        symbol: deploy_token(context, submitter, name, symbol) for symbol, name in tokens.items()
    }
    token_contracts = {
        symbol: token_container.at(address) for symbol, address in token_addresses.items()
    }

    faucet_address = deploy_contract(context, submitter, "Deploy Faucet", FAUCET)
    print("    Faucet address:", faucet_address)
    faucet = get_contract_container(FAUCET).at(faucet_address)

    for symbol, token in token_contracts.items():
        submitter.submit_and_wait(
            f"Set faucet as minter for {symbol}",
            lambda: transactor.transact(token.setMinter, faucet_address),
        )

    submitter.submit_and_wait(
        f"Mint {mint_amount:,} {symbols}",
        lambda: transactor.transact(faucet.mint, list(token_addresses.values()), unit(mint_amount)),
    )

    pool_token_address = deploy_contract(
        context, submitter, "Deploy crv3POOL", CURVE_TOKEN, "Curve 3Pool", "crv3POOL"
    )
    print("    crv3POOL address:", pool_token_address)
    pool_token = get_contract_container(CURVE_TOKEN).at(pool_token_address)

    swap_address = deploy_contract(
        context,
        submitter,
        f"Deploy {STABLE_SWAP_3_POOL}",
        STABLE_SWAP_3_POOL,
        owner_address,
        list(token_addresses.values()),
        pool_token_address,
        AMPLIFICATION,
        FEE,
        ADMIN_FEE,
    )
    print(f"    {STABLE_SWAP_3_POOL} address:", swap_address)
    swap = get_contract_container(STABLE_SWAP_3_POOL).at(swap_address)

    submitter.submit_and_wait(
        f"Set {STABLE_SWAP_3_POOL} as minter for crv3POOL",
        lambda: transactor.transact(pool_token.set_minter, swap_address),
    )

    for symbol, token in token_contracts.items():
        submitter.submit_and_wait(
            f"Approve {symbol} to {STABLE_SWAP_3_POOL}",
            lambda: transactor.transact(token.approve, swap_address, MAX_UINT256),
        )

    amounts: List[int] = [unit(liquidity_amount)] * len(token_addresses)
    submitter.submit_and_wait(
        f"Add {liquidity_amount:,} liquidity",
        lambda: transactor.transact(swap.add_liquidity, amounts, 0),
    )

    return StableSwapDeployment(
        tokens=token_addresses,
        faucet_address=faucet_address,
        pool_token_address=pool_token_address,
        swap_address=swap_address,
    )


def deploy_curve_token_and_faucet(context: DeploymentContext) -> CurveTokenAndFaucet:
    """Deploys MT and CRV with a Faucet minting both, then mints every token pairing."""
    transactor = context.transactor
    submitter = context.submitter("curve-token-and-faucet")

    mintable_token_address = deploy_contract(
        context, submitter, "Deploy MintableToken", MINTABLE_TOKEN, "MintableToken", "MT"
    )
    print("    MintableToken address:", mintable_token_address)
    mintable_token = get_contract_container(MINTABLE_TOKEN).at(mintable_token_address)

    curve_token_address = deploy_contract(
        context, submitter, "Deploy CurveToken", CURVE_TOKEN, "Curve Token", "CRV"
    )
    print("    CurveToken address:", curve_token_address)
    curve_token = get_contract_container(CURVE_TOKEN).at(curve_token_address)

    faucet_address = deploy_contract(context, submitter, "Deploy Faucet", FAUCET)
    print("    Faucet address:", faucet_address)
    faucet = get_contract_container(FAUCET).at(faucet_address)

    submitter.submit_and_wait(
        "Set Faucet as minter for MintableToken",
        lambda: transactor.transact(mintable_token.setMinter, faucet_address),
    )
    submitter.submit_and_wait(
        "Set Faucet as minter for CurveToken",
        lambda: transactor.transact(curve_token.set_minter, faucet_address),
    )

    # the faucet mints ``amount`` once per listed token
    mints = [
        ("Mint 100,000 MT", [mintable_token_address, mintable_token_address], 50_000),
        ("Mint 100,000 CRV", [curve_token_address, curve_token_address], 50_000),
        ("Mint 100,000 CRV and MT", [curve_token_address, mintable_token_address], 100_000),
        ("Mint 100,000 MT and CRV", [mintable_token_address, curve_token_address], 100_000),
    ]
    for label, token_addresses, amount in mints:
        submitter.submit_and_wait(
            label, lambda: transactor.transact(faucet.mint, token_addresses, unit(amount))
        )

    return CurveTokenAndFaucet(
        mintable_token_address=mintable_token_address,
        curve_token_address=curve_token_address,
        faucet_address=faucet_address,
    )
