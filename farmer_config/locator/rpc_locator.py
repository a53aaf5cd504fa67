import asyncio
import logging
from typing import List, Optional, Set

import aiohttp
from chia.rpc.full_node_rpc_client import FullNodeRpcClient
from chia.types.blockchain_format.sized_bytes import bytes32

from .abstract import AbstractPlotNFTLocator
from ..config import Config
from ..node import NodeSettings, create_node_rpc_client
from ..record import PlotNFT
from ..singleton import get_plotnft_by_launcher_id, scrounge_for_plotnfts
from ..util import NodeError

# chia's RpcClient raises ValueError when the node answers with success: false
NODE_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, ValueError)


class FullNodePlotNFTLocator(AbstractPlotNFTLocator):
    """
    PlotNFT lookups through the RPC interface of a full node.
    """

    def __init__(self, config: Config, node_settings: NodeSettings):
        self.log = logging.getLogger(__name__)
        self.config = config
        self.node_settings = node_settings
        self.genesis_challenge: bytes32 = node_settings.genesis_challenge(config.selected_network)
        self.node_rpc_client: Optional[FullNodeRpcClient] = None

    @property
    def node_name(self) -> str:
        return f"{self.config.fullnode_rpc_host}:{self.config.fullnode_rpc_port}"

    async def connect(self):
        self.node_rpc_client = await create_node_rpc_client(self.config, self.node_settings)

    async def close(self):
        if self.node_rpc_client is not None:
            self.node_rpc_client.close()
            await self.node_rpc_client.await_closed()
            self.node_rpc_client = None

    async def lookup_by_launcher_id(self, launcher_id: bytes32) -> Optional[PlotNFT]:
        assert self.node_rpc_client is not None
        try:
            return await get_plotnft_by_launcher_id(self.node_rpc_client, launcher_id, self.genesis_challenge)
        except NODE_ERRORS as e:
            self.log.error(f"Error looking up launcher {launcher_id.hex()} on {self.node_name}: {e}")
            raise NodeError(f"Full node {self.node_name} failed to look up {launcher_id.hex()}: {e}") from e

    async def lookup_by_puzzle_hashes(self, puzzle_hashes: Set[bytes32]) -> List[PlotNFT]:
        assert self.node_rpc_client is not None
        try:
            plotnfts = await scrounge_for_plotnfts(self.node_rpc_client, puzzle_hashes, self.genesis_challenge)
        except NODE_ERRORS as e:
            self.log.error(f"Error looking up puzzle hashes on {self.node_name}: {e}")
            raise NodeError(f"Full node {self.node_name} failed to look up wallet puzzle hashes: {e}") from e
        self.log.debug(f"Found {len(plotnfts)} PlotNFTs for {len(puzzle_hashes)} puzzle hashes")
        return plotnfts
