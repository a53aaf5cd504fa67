import logging
from typing import List, Optional

from chia.pools.pool_puzzles import launcher_id_to_p2_puzzle_hash
from chia.types.blockchain_format.sized_bytes import bytes32
from chia_rs import PrivateKey

from .config import Config, FarmingInfo, PoolWalletConfig
from .keys import KeyDeriver
from .owner_keys import OWNER_KEY_SEARCH_LIMIT, OwnerKeys, find_owner_keys
from .record import PlotNFT

log = logging.getLogger(__name__)


def pool_wallet_config_for(plotnft: PlotNFT, payout_address: str) -> PoolWalletConfig:
    pool_state = plotnft.pool_state
    return PoolWalletConfig(
        launcher_id=plotnft.launcher_id,
        pool_url=pool_state.pool_url if pool_state.pool_url is not None else "",
        target_puzzle_hash=pool_state.target_puzzle_hash,
        payout_instructions=payout_address,
        p2_singleton_puzzle_hash=launcher_id_to_p2_puzzle_hash(
            plotnft.launcher_id, plotnft.delay_time, plotnft.delay_puzzle_hash
        ),
        owner_public_key=pool_state.owner_pubkey,
        difficulty=None,
    )


def _find_farming_info(farmer_info: List[FarmingInfo], launcher_id: Optional[bytes32]) -> Optional[int]:
    for i, info in enumerate(farmer_info):
        if info.launcher_id == launcher_id:
            return i
    return None


def _merge_farming_info(farmer_info: List[FarmingInfo], new_info: FarmingInfo) -> List[FarmingInfo]:
    # At most one entry per launcher id, an existing one is overwritten where it is
    merged = list(farmer_info)
    position = _find_farming_info(merged, new_info.launcher_id)
    if position is None:
        merged.append(new_info)
    else:
        merged[position] = new_info
    return merged


def _merge_pool_info(pool_info: List[PoolWalletConfig], new_pool: PoolWalletConfig) -> List[PoolWalletConfig]:
    merged = list(pool_info)
    for i, pool in enumerate(merged):
        if pool.launcher_id == new_pool.launcher_id:
            merged[i] = new_pool
            return merged
    merged.append(new_pool)
    return merged


def _account_farming_info(
    master: PrivateKey,
    deriver: KeyDeriver,
    launcher_id: Optional[bytes32],
    owner_keys: Optional[OwnerKeys],
) -> FarmingInfo:
    # Farmer and pool keys belong to the account, not to a PlotNFT
    return FarmingInfo(
        farmer_secret_key=deriver.secret_bytes(deriver.farmer_sk(master)),
        launcher_id=launcher_id,
        pool_secret_key=deriver.secret_bytes(deriver.pool_sk(master)),
        owner_secret_key=None if owner_keys is None else deriver.secret_bytes(owner_keys.owner_sk),
        auth_secret_key=None if owner_keys is None else deriver.secret_bytes(owner_keys.auth_sk),
    )


def add_plotnft(
    config: Config,
    master: PrivateKey,
    plotnft: PlotNFT,
    deriver: KeyDeriver,
    search_limit: int = OWNER_KEY_SEARCH_LIMIT,
) -> Config:
    pool_info = _merge_pool_info(config.pool_info, pool_wallet_config_for(plotnft, config.payout_address))

    owner_keys = find_owner_keys(master, plotnft.pool_state.owner_pubkey, deriver, search_limit)
    if owner_keys is None:
        log.warning(f"Owner key for PlotNFT {plotnft.launcher_id.hex()} not found, the pool will not accept partials")
    farming_info = _account_farming_info(master, deriver, plotnft.launcher_id, owner_keys)
    return config.replace(pool_info=pool_info, farmer_info=_merge_farming_info(config.farmer_info, farming_info))


def add_no_plotnft_placeholder(config: Config, master: PrivateKey, deriver: KeyDeriver) -> Config:
    farming_info = _account_farming_info(master, deriver, None, None)
    return config.replace(farmer_info=_merge_farming_info(config.farmer_info, farming_info))


def synthesize_config(
    config: Config,
    master: PrivateKey,
    plotnfts: List[PlotNFT],
    deriver: KeyDeriver,
    search_limit: int = OWNER_KEY_SEARCH_LIMIT,
) -> Config:
    for plotnft in plotnfts:
        log.info(f"Adding PlotNFT {plotnft.launcher_id.hex()} ({plotnft.pool_state.pool_url or 'self pooling'})")
        config = add_plotnft(config, master, plotnft, deriver, search_limit)
    if len(plotnfts) == 0:
        log.warning("No PlotNFT Found")
        config = add_no_plotnft_placeholder(config, master, deriver)
    return config
