import logging
from typing import Callable, Dict, List, Optional

from chia.types.blockchain_format.sized_bytes import bytes32

from .keys import KeyDerivationWalker
from .locator.abstract import AbstractPlotNFTLocator
from .record import PlotNFT
from .util import NotFoundError

log = logging.getLogger(__name__)

# 50 pages of 50 indices, hardened and unhardened: 5000 puzzle hashes at most
MAX_SCAN_PAGES = 50


def found_any(plotnfts: List[PlotNFT]) -> bool:
    return len(plotnfts) > 0


async def find_plotnft_by_launcher_id(locator: AbstractPlotNFTLocator, launcher_id: bytes32) -> List[PlotNFT]:
    log.info(f"Searching for NFT with LauncherID: {launcher_id.hex()}")
    plotnft: Optional[PlotNFT] = await locator.lookup_by_launcher_id(launcher_id)
    if plotnft is None:
        raise NotFoundError(f"Failed to find a plotNFT with LauncherID: {launcher_id.hex()}")
    return [plotnft]


async def scan_for_plotnfts(
    locator: AbstractPlotNFTLocator,
    walker: KeyDerivationWalker,
    max_pages: int = MAX_SCAN_PAGES,
    stop: Callable[[List[PlotNFT]], bool] = found_any,
) -> List[PlotNFT]:
    """
    Looks up the wallet puzzle hashes of ``walker`` one page at a time, until ``stop`` holds for what was found so
    far or ``max_pages`` pages have been looked up. Finding nothing is not an error.
    """
    found: Dict[bytes32, PlotNFT] = {}
    pages = walker.pages()
    scanned = 0
    while scanned < max_pages and not stop(list(found.values())):
        # Derived only once the previous page's lookup has completed
        page = next(pages)
        scanned += 1
        log.info(
            f"Searching wallet indices {page.number * walker.page_size} to {(page.number + 1) * walker.page_size}"
        )
        for plotnft in await locator.lookup_by_puzzle_hashes(set(page.puzzle_hashes)):
            found.setdefault(plotnft.launcher_id, plotnft)
    return list(found.values())


async def locate_plotnfts(
    locator: AbstractPlotNFTLocator,
    walker: KeyDerivationWalker,
    launcher_id: Optional[bytes32] = None,
    max_pages: int = MAX_SCAN_PAGES,
) -> List[PlotNFT]:
    if launcher_id is not None:
        return await find_plotnft_by_launcher_id(locator, launcher_id)
    log.info("No LauncherID Specified, Searching for PlotNFTs...")
    return await scan_for_plotnfts(locator, walker, max_pages)
