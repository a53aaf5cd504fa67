from dataclasses import dataclass

from chia.pools.pool_wallet_info import PoolState
from chia.types.blockchain_format.sized_bytes import bytes32
from chia.util.ints import uint64
from chia.util.streamable import streamable, Streamable


@streamable
@dataclass(frozen=True)
class PlotNFT(Streamable):
    launcher_id: bytes32  # This uniquely identifies the singleton on the blockchain
    pool_state: PoolState  # Latest pool state of the singleton (pool url, target puzzle hash, owner pubkey)
    delay_time: uint64  # Backup time after which farmer can claim rewards directly, if pool unresponsive
    delay_puzzle_hash: bytes32  # Backup puzzlehash to claim rewards
