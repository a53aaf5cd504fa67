from typing import Dict, Iterable, List, Optional
import logging

from chia.pools.pool_puzzles import (
    solution_to_pool_state,
    get_most_recent_singleton_coin_from_coin_spend,
    pool_state_to_inner_puzzle,
    create_full_puzzle,
    get_delayed_puz_info_from_launcher_spend,
)
from chia.pools.pool_wallet_info import PoolState
from chia.rpc.full_node_rpc_client import FullNodeRpcClient
from chia.types.blockchain_format.coin import Coin
from chia.types.blockchain_format.program import Program
from chia.types.blockchain_format.sized_bytes import bytes32
from chia.types.coin_record import CoinRecord
from chia.types.coin_spend import CoinSpend
from chia.util.ints import uint64
from chia.wallet.puzzles.singleton_top_layer import SINGLETON_LAUNCHER_HASH

from .record import PlotNFT

log = logging.getLogger(__name__)


async def get_coin_spend(node_rpc_client: FullNodeRpcClient, coin_record: CoinRecord) -> Optional[CoinSpend]:
    if not coin_record.spent:
        return None
    return await node_rpc_client.get_puzzle_and_solution(coin_record.coin.name(), coin_record.spent_block_index)


def validate_puzzle_hash(
    launcher_id: bytes32,
    delay_ph: bytes32,
    delay_time: uint64,
    pool_state: PoolState,
    outer_puzzle_hash: bytes32,
    genesis_challenge: bytes32,
) -> bool:
    inner_puzzle: Program = pool_state_to_inner_puzzle(pool_state, launcher_id, genesis_challenge, delay_time, delay_ph)
    new_full_puzzle: Program = create_full_puzzle(inner_puzzle, launcher_id)
    return new_full_puzzle.get_tree_hash() == outer_puzzle_hash


async def get_plotnft_by_launcher_id(
    node_rpc_client: FullNodeRpcClient,
    launcher_id: bytes32,
    genesis_challenge: bytes32,
) -> Optional[PlotNFT]:
    """
    Follows the singleton with the given launcher id to its current (unspent) coin and returns the PlotNFT with the
    latest pool state. Returns None if the launcher does not exist, is not a pool singleton, or the singleton is
    invalid. RPC errors are propagated.
    """
    launcher_coin: Optional[CoinRecord] = await node_rpc_client.get_coin_record_by_name(launcher_id)
    if launcher_coin is None:
        log.warning(f"Can not find genesis coin {launcher_id}")
        return None
    if not launcher_coin.spent:
        log.warning(f"Genesis coin {launcher_id} not spent")
        return None

    last_spend: Optional[CoinSpend] = await get_coin_spend(node_rpc_client, launcher_coin)
    if last_spend is None:
        log.warning(f"Can not find the spend of genesis coin {launcher_id}")
        return None
    last_not_none_state: Optional[PoolState] = solution_to_pool_state(last_spend)
    if last_not_none_state is None:
        # Other singletons (NFTs, DIDs) share the launcher puzzle
        log.info(f"Singleton {launcher_id} is not a PlotNFT")
        return None
    delay_time, delay_puzzle_hash = get_delayed_puz_info_from_launcher_spend(last_spend)

    while True:
        # Get next coin solution
        next_coin: Optional[Coin] = get_most_recent_singleton_coin_from_coin_spend(last_spend)
        if next_coin is None:
            # This means the singleton is invalid
            log.warning(f"Invalid singleton {launcher_id}")
            return None
        next_coin_record: Optional[CoinRecord] = await node_rpc_client.get_coin_record_by_name(next_coin.name())
        if next_coin_record is None:
            log.warning(f"Can not find singleton coin {next_coin.name()} for {launcher_id}")
            return None

        if not next_coin_record.spent:
            if not validate_puzzle_hash(
                launcher_id,
                delay_puzzle_hash,
                delay_time,
                last_not_none_state,
                next_coin_record.coin.puzzle_hash,
                genesis_challenge,
            ):
                log.warning(f"Invalid singleton puzzle_hash for {launcher_id}")
                return None
            break

        last_spend = await get_coin_spend(node_rpc_client, next_coin_record)
        assert last_spend is not None

        pool_state: Optional[PoolState] = solution_to_pool_state(last_spend)
        if pool_state is not None:
            last_not_none_state = pool_state

    return PlotNFT(launcher_id, last_not_none_state, delay_time, delay_puzzle_hash)


async def get_launcher_ids_for_puzzle_hashes(
    node_rpc_client: FullNodeRpcClient, puzzle_hashes: Iterable[bytes32]
) -> List[bytes32]:
    """
    Singletons are launched by spending a wallet coin into a launcher coin, so the launchers we own are children of
    spent coins at our puzzle hashes.
    """
    coin_records: List[CoinRecord] = await node_rpc_client.get_coin_records_by_puzzle_hashes(
        list(puzzle_hashes), include_spent_coins=True
    )
    spent_ids: List[bytes32] = [cr.coin.name() for cr in coin_records if cr.spent]
    if len(spent_ids) == 0:
        return []
    children: List[CoinRecord] = await node_rpc_client.get_coin_records_by_parent_ids(
        spent_ids, include_spent_coins=True
    )
    launcher_ids: Dict[bytes32, None] = {}
    for child in children:
        if child.coin.puzzle_hash == SINGLETON_LAUNCHER_HASH:
            launcher_ids[child.coin.name()] = None
    return list(launcher_ids.keys())


async def scrounge_for_plotnfts(
    node_rpc_client: FullNodeRpcClient,
    puzzle_hashes: Iterable[bytes32],
    genesis_challenge: bytes32,
) -> List[PlotNFT]:
    plotnfts: List[PlotNFT] = []
    for launcher_id in await get_launcher_ids_for_puzzle_hashes(node_rpc_client, puzzle_hashes):
        plotnft = await get_plotnft_by_launcher_id(node_rpc_client, launcher_id, genesis_challenge)
        if plotnft is not None:
            plotnfts.append(plotnft)
    return plotnfts
