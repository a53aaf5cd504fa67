from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import pytest
from chia.pools.pool_wallet_info import PoolState
from chia.types.blockchain_format.coin import Coin
from chia.types.blockchain_format.program import Program
from chia.types.blockchain_format.sized_bytes import bytes32
from chia.types.coin_record import CoinRecord
from chia.types.coin_spend import CoinSpend, make_spend
from chia.util.ints import uint32, uint64
from chia.wallet.puzzles.singleton_top_layer import SINGLETON_LAUNCHER_HASH

from farmer_config import singleton
from farmer_config.singleton import (
    get_launcher_ids_for_puzzle_hashes,
    get_plotnft_by_launcher_id,
    scrounge_for_plotnfts,
)

from tests.doubles import make_plotnft, pubkey_for_seed

GENESIS = bytes32([0] * 32)


def coin_record(coin: Coin, spent: bool) -> CoinRecord:
    return CoinRecord(coin, uint32(10), uint32(11 if spent else 0), False, uint64(0))


@dataclass
class FakeNodeClient:
    records: List[CoinRecord] = field(default_factory=list)
    puzzle_hash_queries: List[List[bytes32]] = field(default_factory=list)
    parent_queries: List[List[bytes32]] = field(default_factory=list)
    spends: Dict[bytes32, CoinSpend] = field(default_factory=dict)

    async def get_coin_records_by_puzzle_hashes(self, puzzle_hashes, include_spent_coins=True):
        self.puzzle_hash_queries.append(list(puzzle_hashes))
        return [r for r in self.records if r.coin.puzzle_hash in puzzle_hashes]

    async def get_coin_records_by_parent_ids(self, parent_ids, include_spent_coins=True):
        self.parent_queries.append(list(parent_ids))
        return [r for r in self.records if r.coin.parent_coin_info in parent_ids]

    async def get_coin_record_by_name(self, name) -> Optional[CoinRecord]:
        for r in self.records:
            if r.coin.name() == name:
                return r
        return None

    async def get_puzzle_and_solution(self, coin_id, height) -> Optional[CoinSpend]:
        return self.spends.get(coin_id)


WALLET_PH = bytes32([1] * 32)
spent_wallet_coin = Coin(bytes32([2] * 32), WALLET_PH, uint64(1000))
unspent_wallet_coin = Coin(bytes32([3] * 32), WALLET_PH, uint64(500))
launcher = Coin(spent_wallet_coin.name(), SINGLETON_LAUNCHER_HASH, uint64(1))
change = Coin(spent_wallet_coin.name(), WALLET_PH, uint64(999))
unrelated_launcher = Coin(unspent_wallet_coin.name(), SINGLETON_LAUNCHER_HASH, uint64(1))


def fake_client() -> FakeNodeClient:
    return FakeNodeClient(
        records=[
            coin_record(spent_wallet_coin, True),
            coin_record(unspent_wallet_coin, False),
            coin_record(launcher, True),
            coin_record(change, False),
            coin_record(unrelated_launcher, False),
        ]
    )


@pytest.mark.asyncio
async def test_launcher_ids_for_puzzle_hashes():
    client = fake_client()
    assert await get_launcher_ids_for_puzzle_hashes(client, {WALLET_PH}) == [launcher.name()]
    # Only spent coins can have children
    assert client.parent_queries == [[spent_wallet_coin.name()]]


@pytest.mark.asyncio
async def test_no_coins_skips_children_lookup():
    client = fake_client()
    assert await get_launcher_ids_for_puzzle_hashes(client, {bytes32([9] * 32)}) == []
    assert client.parent_queries == []


@pytest.mark.asyncio
async def test_unknown_or_unspent_launcher():
    client = fake_client()
    assert await get_plotnft_by_launcher_id(client, bytes32([8] * 32), GENESIS) is None
    assert await get_plotnft_by_launcher_id(client, unrelated_launcher.name(), GENESIS) is None


@pytest.mark.asyncio
async def test_scrounge_resolves_each_launcher(monkeypatch):
    resolved: Dict[bytes32, bytes32] = {}
    plotnft = make_plotnft(1, pubkey_for_seed(1))

    async def fake_get_plotnft(client, launcher_id, genesis_challenge):
        resolved[launcher_id] = genesis_challenge
        return plotnft

    monkeypatch.setattr(singleton, "get_plotnft_by_launcher_id", fake_get_plotnft)
    assert await scrounge_for_plotnfts(fake_client(), [WALLET_PH], GENESIS) == [plotnft]
    assert resolved == {launcher.name(): GENESIS}


DELAY_TIME = uint64(604800)
DELAY_PH = bytes32([7] * 32)
SINGLETON_PH = bytes32([6] * 32)


def pool_state(n: int) -> PoolState:
    return make_plotnft(n, pubkey_for_seed(n)).pool_state


@dataclass
class SingletonChain:
    """
    A launcher followed by singleton coins. ``states[i]`` is the pool state in the spend of ``coins[i]``, the last
    coin is unspent.
    """

    client: FakeNodeClient
    coins: List[Coin]
    states: Dict[bytes32, Optional[PoolState]]
    next_coins: Dict[bytes32, Coin]
    validated: List[Tuple[PoolState, bytes32, bytes32]] = field(default_factory=list)
    valid: bool = True

    @property
    def launcher_id(self) -> bytes32:
        return self.coins[0].name()

    def patch(self, monkeypatch):
        def validate(launcher_id, delay_ph, delay_time, state, outer_puzzle_hash, genesis_challenge):
            assert (launcher_id, delay_ph, delay_time) == (self.launcher_id, DELAY_PH, DELAY_TIME)
            self.validated.append((state, outer_puzzle_hash, genesis_challenge))
            return self.valid

        monkeypatch.setattr(singleton, "solution_to_pool_state", lambda spend: self.states[spend.coin.name()])
        monkeypatch.setattr(
            singleton,
            "get_most_recent_singleton_coin_from_coin_spend",
            lambda spend: self.next_coins.get(spend.coin.name()),
        )
        monkeypatch.setattr(singleton, "get_delayed_puz_info_from_launcher_spend", lambda spend: (DELAY_TIME, DELAY_PH))
        monkeypatch.setattr(singleton, "validate_puzzle_hash", validate)


def singleton_chain(states: List[Optional[PoolState]]) -> SingletonChain:
    launcher_coin = Coin(bytes32([4] * 32), SINGLETON_LAUNCHER_HASH, uint64(1))
    coins = [launcher_coin]
    for _ in states:
        coins.append(Coin(coins[-1].name(), SINGLETON_PH, uint64(1)))
    client = FakeNodeClient()
    for i, coin in enumerate(coins):
        spent = i < len(states)
        client.records.append(coin_record(coin, spent))
        if spent:
            client.spends[coin.name()] = make_spend(coin, Program.to(1), Program.to([]))
    return SingletonChain(
        client=client,
        coins=coins,
        states={coin.name(): state for coin, state in zip(coins, states)},
        next_coins={coin.name(): child for coin, child in zip(coins, coins[1:])},
    )


@pytest.mark.asyncio
async def test_follows_singleton_to_unspent_tip(monkeypatch):
    chain = singleton_chain([pool_state(1), pool_state(2), pool_state(3)])
    chain.patch(monkeypatch)

    plotnft = await get_plotnft_by_launcher_id(chain.client, chain.launcher_id, GENESIS)

    assert plotnft is not None
    assert plotnft.launcher_id == chain.launcher_id
    assert plotnft.pool_state == pool_state(3)
    assert plotnft.delay_time == DELAY_TIME
    assert plotnft.delay_puzzle_hash == DELAY_PH
    # Only the tip is validated
    assert chain.validated == [(pool_state(3), SINGLETON_PH, GENESIS)]


@pytest.mark.asyncio
async def test_keeps_last_pool_state(monkeypatch):
    # Spends without a pool state (absorbing rewards) do not reset it
    chain = singleton_chain([pool_state(1), pool_state(2), None, None])
    chain.patch(monkeypatch)

    plotnft = await get_plotnft_by_launcher_id(chain.client, chain.launcher_id, GENESIS)

    assert plotnft is not None
    assert plotnft.pool_state == pool_state(2)
    assert chain.validated[0][0] == pool_state(2)


@pytest.mark.asyncio
async def test_launcher_that_is_not_a_plotnft(monkeypatch):
    chain = singleton_chain([None, pool_state(2)])
    chain.patch(monkeypatch)

    assert await get_plotnft_by_launcher_id(chain.client, chain.launcher_id, GENESIS) is None
    assert chain.validated == []


@pytest.mark.asyncio
async def test_invalid_puzzle_hash(monkeypatch):
    chain = singleton_chain([pool_state(1), pool_state(2)])
    chain.valid = False
    chain.patch(monkeypatch)

    assert await get_plotnft_by_launcher_id(chain.client, chain.launcher_id, GENESIS) is None
    assert len(chain.validated) == 1


@pytest.mark.asyncio
async def test_singleton_without_child(monkeypatch):
    chain = singleton_chain([pool_state(1), pool_state(2)])
    del chain.next_coins[chain.coins[1].name()]
    chain.patch(monkeypatch)

    assert await get_plotnft_by_launcher_id(chain.client, chain.launcher_id, GENESIS) is None
    assert chain.validated == []
