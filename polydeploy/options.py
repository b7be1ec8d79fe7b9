from pathlib import Path

import click

from polydeploy.constants import IGNORE_HISTORY_ENVVAR, NETWORK_SUFFIX_ENVVAR
from polydeploy.types import ChecksumAddress

network_suffix_option = click.option(
    "--network-suffix",
    "-n",
    help="Suffix naming the target network (e.g. gw-devnet); namespaces the history ledgers.",
    envvar=NETWORK_SUFFIX_ENVVAR,
    default=None,
    required=False,
)

ignore_history_option = click.option(
    "--ignore-history",
    help="Re-submit every step even if it is recorded in the history ledger. "
    f"Defaults to the {IGNORE_HISTORY_ENVVAR} environment variable.",
    is_flag=True,
    default=None,
)

autosign_option = click.option(
    "--autosign",
    help="Automatically sign transactions.",
    is_flag=True,
    default=False,
)

params_option = click.option(
    "--params",
    "params_filepath",
    help="YAML file with network parameters (rollup type hash, lock code hash, API url).",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    required=False,
)

new_owner_option = click.option(
    "--new-owner",
    "-o",
    help="Address of the new owner.",
    type=ChecksumAddress(),
    required=True,
)

proxy_admin_id_option = click.option(
    "--proxy-admin-id",
    help="Identifier the ProxyAdmin was deployed under (defaults to the deployer address).",
    required=False,
)

expire_in_option = click.option(
    "--expire-in",
    help="Seconds before a signed multi-sig transaction expires.",
    type=click.IntRange(min=1),
    default=60,
)
