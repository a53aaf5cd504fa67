from pathlib import Path
from typing import List, Optional

import click
from chia.types.blockchain_format.sized_bytes import bytes32
from chia.util.bech32m import decode_puzzle_hash

from .util import UserCanceledError, parse_launcher_id


def confirm_overwrite(path: Path) -> None:
    if not click.confirm(f"An existing config exists at {path}, would you like to override it?", default=False):
        raise UserCanceledError("User Canceled")


def prompt_for_mnemonic(mnemonic_file: Optional[str]) -> str:
    if mnemonic_file is not None:
        with open(mnemonic_file) as f:
            return f.read().strip()
    return click.prompt("Please input your mnemonic", hide_input=True).strip()


def _validate_address(value: str) -> str:
    try:
        decode_puzzle_hash(value.strip())
    except ValueError as e:
        raise click.BadParameter(f"{value} is not a valid address: {e}") from e
    return value.strip()


def prompt_for_payout_address(payout_address: Optional[str]) -> str:
    if payout_address is not None:
        return _validate_address(payout_address)
    return click.prompt("Please input the payout address for farming rewards", value_proc=_validate_address)


def prompt_for_farming_fullnode(host: Optional[str], default: str) -> str:
    if host is not None:
        return host.strip()
    return click.prompt("Please input the full node to farm against", default=default).strip()


def prompt_for_rpc_fullnode(host: Optional[str]) -> str:
    if host is not None:
        return host.strip()
    return click.prompt("Please input the full node to use for RPC calls", default="localhost").strip()


def prompt_for_farming_port(port: Optional[int]) -> int:
    if port is not None:
        return port
    return click.prompt("Please input the full node farming port", default=8444, type=click.IntRange(1, 65535))


def prompt_for_rpc_port(port: Optional[int]) -> int:
    if port is not None:
        return port
    return click.prompt("Please input the full node RPC port", default=8555, type=click.IntRange(1, 65535))


def prompt_for_ssl_path(ssl_path: Optional[str]) -> Optional[str]:
    if ssl_path is not None:
        return ssl_path
    value: str = click.prompt(
        "Please input the path to the full node SSL folder (leave empty to use the default)",
        default="",
        show_default=False,
    )
    return value.strip() or None


def prompt_for_plot_directories() -> List[str]:
    value: str = click.prompt("Please input a comma separated list of plot directories", default="", show_default=False)
    return [d.strip() for d in value.split(",") if d.strip() != ""]


def prompt_for_launcher_id(launcher_id: Optional[bytes32]) -> Optional[bytes32]:
    if launcher_id is not None:
        return launcher_id
    return click.prompt(
        "Please input the LauncherID of your PlotNFT (leave empty to search for it)",
        default="",
        show_default=False,
        value_proc=_parse_launcher_id_input,
    )


def _parse_launcher_id_input(value: str) -> Optional[bytes32]:
    try:
        return parse_launcher_id(value)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e
