import asyncio
import logging
import os
from pathlib import Path
from typing import Optional, Tuple

import click

from .config import get_config_path
from .generate import GenerateConfig, generate_config_from_mnemonic
from .util import FarmerConfigError, UserCanceledError, parse_launcher_id

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])

log = logging.getLogger(__name__)


def _launcher_id_callback(ctx: click.Context, param: click.Parameter, value: Optional[str]):
    try:
        return parse_launcher_id(value)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


@click.command(
    help="\n  Generate a farmer config from a mnemonic, searching the blockchain for its PlotNFTs \n",
    context_settings=CONTEXT_SETTINGS,
)
@click.option(
    "-c", "--config", "config_path", envvar="CONFIG_PATH", help="Where to write the config", type=click.Path()
)
@click.option("-f", "--fullnode-ws-host", help="Full node to farm against")
@click.option("-p", "--fullnode-ws-port", type=click.IntRange(1, 65535), help="Farming port of the full node")
@click.option("-r", "--fullnode-rpc-host", help="Full node used for RPC calls")
@click.option("-o", "--fullnode-rpc-port", type=click.IntRange(1, 65535), help="RPC port of the full node")
@click.option("-s", "--fullnode-ssl", help="Folder holding the ca/ and farmer/ SSL files for the full node")
@click.option("-n", "--network", help="Network to farm on, mainnet if unknown")
@click.option("-a", "--payout-address", help="Address farming rewards are paid to")
@click.option("-d", "--plot-directory", "plot_directories", multiple=True, help="Plot directory, can be repeated")
@click.option("-m", "--mnemonic-file", type=click.Path(exists=True, dir_okay=False), help="File holding the mnemonic")
@click.option("-l", "--launcher-id", callback=_launcher_id_callback, help="LauncherID of the PlotNFT to look up")
def cli(
    config_path: Optional[str],
    fullnode_ws_host: Optional[str],
    fullnode_ws_port: Optional[int],
    fullnode_rpc_host: Optional[str],
    fullnode_rpc_port: Optional[int],
    fullnode_ssl: Optional[str],
    network: Optional[str],
    payout_address: Optional[str],
    plot_directories: Tuple[str, ...],
    mnemonic_file: Optional[str],
    launcher_id,
) -> None:
    if config_path is not None:
        output_path = Path(config_path)
    else:
        output_path = get_config_path()
        output_path.parent.mkdir(parents=True, exist_ok=True)

    settings = GenerateConfig(
        output_path=output_path,
        mnemonic_file=mnemonic_file,
        fullnode_ws_host=fullnode_ws_host,
        fullnode_ws_port=fullnode_ws_port,
        fullnode_rpc_host=fullnode_rpc_host,
        fullnode_rpc_port=fullnode_rpc_port,
        fullnode_ssl=fullnode_ssl,
        network=network,
        launcher_id=launcher_id,
        payout_address=payout_address,
        plot_directories=list(plot_directories) if len(plot_directories) > 0 else None,
    )
    try:
        asyncio.run(generate_config_from_mnemonic(settings))
    except UserCanceledError:
        click.echo("User Canceled", err=True)
        raise SystemExit(1)
    except FarmerConfigError as e:
        click.echo(f"Failed to generate config: {e}", err=True)
        raise SystemExit(1)
    log.info(f"Config written to {output_path}")


def main() -> None:
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())
    cli()


if __name__ == "__main__":
    main()
