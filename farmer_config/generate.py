import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from chia.types.blockchain_format.sized_bytes import bytes32

from .config import Config, HarvesterConfig, default_gigahorse_config, get_ssl_root_path
from .discovery import MAX_SCAN_PAGES, locate_plotnfts
from .keys import KeyDerivationWalker, KeyDeriver, master_sk_from_mnemonic
from .locator.abstract import AbstractPlotNFTLocator
from .locator.rpc_locator import FullNodePlotNFTLocator
from .node import NodeSettings, default_farming_port, default_rpc_port, load_node_settings
from .owner_keys import OWNER_KEY_SEARCH_LIMIT
from .prompts import (
    confirm_overwrite as prompt_confirm_overwrite,
    prompt_for_farming_fullnode,
    prompt_for_farming_port,
    prompt_for_launcher_id,
    prompt_for_mnemonic,
    prompt_for_payout_address,
    prompt_for_plot_directories,
    prompt_for_rpc_fullnode,
    prompt_for_rpc_port,
    prompt_for_ssl_path,
)
from .synthesizer import synthesize_config

log = logging.getLogger(__name__)


@dataclass
class GenerateConfig:
    output_path: Optional[Path] = None
    mnemonic_file: Optional[str] = None
    fullnode_ws_host: Optional[str] = None
    fullnode_ws_port: Optional[int] = None
    fullnode_rpc_host: Optional[str] = None
    fullnode_rpc_port: Optional[int] = None
    fullnode_ssl: Optional[str] = None
    network: Optional[str] = None
    launcher_id: Optional[bytes32] = None
    payout_address: Optional[str] = None
    plot_directories: Optional[List[str]] = None
    scan_pages: int = MAX_SCAN_PAGES
    owner_key_search_limit: int = OWNER_KEY_SEARCH_LIMIT


def apply_node_settings(config: Config, settings: GenerateConfig, node_settings: NodeSettings) -> Config:
    """
    Fills in how to reach the full node. Community nodes imply their own RPC host, ports and need no SSL folder,
    localhost implies the default chia ports, anything else is prompted for.
    """
    community_default = node_settings.trusted_nodes[0] if len(node_settings.trusted_nodes) > 0 else "localhost"
    ws_host = prompt_for_farming_fullnode(settings.fullnode_ws_host, community_default)
    ws_is_community = node_settings.is_community_node(ws_host)

    if settings.fullnode_rpc_host is not None:
        rpc_host = settings.fullnode_rpc_host
    elif ws_is_community:
        rpc_host = ws_host
    else:
        rpc_host = prompt_for_rpc_fullnode(None)

    ws_port = settings.fullnode_ws_port
    if ws_port is None:
        ws_port = default_farming_port(ws_host, node_settings) or prompt_for_farming_port(None)
    rpc_port = settings.fullnode_rpc_port
    if rpc_port is None:
        rpc_port = default_rpc_port(rpc_host, node_settings) or prompt_for_rpc_port(None)

    if ws_is_community:
        ssl_root_path = None
    else:
        ssl_root_path = str(get_ssl_root_path(prompt_for_ssl_path(settings.fullnode_ssl)))

    return config.replace(
        fullnode_ws_host=ws_host,
        fullnode_ws_port=ws_port,
        fullnode_rpc_host=rpc_host,
        fullnode_rpc_port=rpc_port,
        ssl_root_path=ssl_root_path,
    )


def apply_harvester_settings(config: Config, settings: GenerateConfig) -> Config:
    plot_directories = settings.plot_directories
    if plot_directories is None:
        plot_directories = prompt_for_plot_directories()
    return config.replace(
        harvester_configs=HarvesterConfig(
            druid_garden=None,
            gigahorse=default_gigahorse_config(plot_directories, plot_search_depth=2),
        )
    )


async def generate_config_from_mnemonic(
    settings: GenerateConfig,
    locator: Optional[AbstractPlotNFTLocator] = None,
    deriver: Optional[KeyDeriver] = None,
    node_settings: Optional[NodeSettings] = None,
    confirm_overwrite: Callable[[Path], None] = prompt_confirm_overwrite,
) -> Config:
    """
    Builds a farmer config from a mnemonic, and saves it to ``settings.output_path`` if set. The config is only
    written once everything else succeeded.
    """
    # Check for an existing config and prompt for override
    if settings.output_path is not None and settings.output_path.exists():
        confirm_overwrite(settings.output_path)

    node_settings = node_settings or load_node_settings()
    deriver = deriver or KeyDeriver()

    config = Config(selected_network=node_settings.resolve_network(settings.network))
    master = master_sk_from_mnemonic(prompt_for_mnemonic(settings.mnemonic_file))
    config = config.replace(payout_address=prompt_for_payout_address(settings.payout_address))
    config = apply_node_settings(config, settings, node_settings)
    config = apply_harvester_settings(config, settings)
    launcher_id = prompt_for_launcher_id(settings.launcher_id)

    if locator is None:
        locator = FullNodePlotNFTLocator(config, node_settings)
    await locator.connect()
    try:
        walker = KeyDerivationWalker(master, deriver)
        plotnfts = await locate_plotnfts(locator, walker, launcher_id, settings.scan_pages)
    finally:
        await locator.close()

    config = synthesize_config(config, master, plotnfts, deriver, settings.owner_key_search_limit)

    if settings.output_path is not None:
        config.save_as_yaml(settings.output_path)
    return config
