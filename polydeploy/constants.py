from pathlib import Path

import polydeploy

#
# Filesystem
#

DEPLOYMENT_DIR = Path(polydeploy.__file__).parent
HISTORY_DIR = DEPLOYMENT_DIR / "history"

LEDGER_SUFFIX = ".json"
TEMP_LEDGER_SUFFIX = ".temp.json"

#
# Environment
#

ENV_PATH_ENVVAR = "ENV_PATH"
NETWORK_SUFFIX_ENVVAR = "NETWORK_SUFFIX"
IGNORE_HISTORY_ENVVAR = "IGNORE_HISTORY"
HISTORY_DIR_ENVVAR = "HISTORY_DIR"
ROLLUP_TYPE_HASH_ENVVAR = "ROLLUP_TYPE_HASH"
ETH_ACCOUNT_LOCK_CODE_HASH_ENVVAR = "ETH_ACCOUNT_LOCK_CODE_HASH"
GODWOKEN_API_URL_ENVVAR = "GODWOKEN_API_URL"
SIGNER_ACCOUNTS_ENVVAR = "SIGNER_ACCOUNTS"

FALSE_FLAG_VALUES = ("", "0", "false", "no", "off")

#
# Networks
#

GODWOKEN_SUFFIX_PREFIX = "gw"
GODWOKEN_V0_SUFFIX_PREFIX = "gwk"
GODWOKEN_V0_MARKER = "v0"
DEVNET_MARKER = "devnet"

# Polyjuice accepts zero priced transactions but cannot estimate gas reliably.
GODWOKEN_GAS_PRICE = 0
GODWOKEN_GAS_LIMIT = 1_000_000

#
# Godwoken / CKB
#

CKB_HASH_PERSONALIZATION = b"ckb-default-hash"
SCRIPT_HASH_TYPES = {"data": 0, "type": 1, "data1": 2}
SHORT_ADDRESS_LENGTH = 20

#
# Ledgers shared by the proxy tooling
#

UPGRADES_LEDGER = "upgrades"
DOWNGRADES_LEDGER = "downgrades"

#
# Contracts
#

PROXY_ADMIN = "ProxyAdmin"
TRANSPARENT_UPGRADEABLE_PROXY = "TransparentUpgradeableProxy"

DEFAULT_INITIALIZER = "initialize"
MULTISIG_ETHER_PREFIX = "ETHER"
