from abc import ABC, abstractmethod
from typing import List, Optional, Set

from chia.types.blockchain_format.sized_bytes import bytes32

from ..record import PlotNFT


class AbstractPlotNFTLocator(ABC):
    """
    Base class for looking up PlotNFTs on the blockchain.
    """

    @abstractmethod
    async def connect(self):
        """Perform IO-related initialization"""

    @abstractmethod
    async def close(self):
        """Release any connection opened by ``connect``"""

    @abstractmethod
    async def lookup_by_launcher_id(self, launcher_id: bytes32) -> Optional[PlotNFT]:
        """Fetch the PlotNFT for given ``launcher_id``. Returns ``None`` if it does not resolve to a PlotNFT"""

    @abstractmethod
    async def lookup_by_puzzle_hashes(self, puzzle_hashes: Set[bytes32]) -> List[PlotNFT]:
        """Fetch all PlotNFTs launched from coins at any of ``puzzle_hashes``"""
