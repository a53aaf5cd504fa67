import unittest

from chia.pools.pool_puzzles import launcher_id_to_p2_puzzle_hash

from farmer_config.config import Config
from farmer_config.synthesizer import (
    add_no_plotnft_placeholder,
    add_plotnft,
    pool_wallet_config_for,
    synthesize_config,
)

from tests.doubles import PAYOUT_ADDRESS, FakeKeyDeriver, make_plotnft, pubkey_for_seed


class TestPoolWalletConfig(unittest.TestCase):
    def test_fields(self):
        plotnft = make_plotnft(1, pubkey_for_seed(1))
        pool = pool_wallet_config_for(plotnft, PAYOUT_ADDRESS)
        assert pool.launcher_id == plotnft.launcher_id
        assert pool.pool_url == "https://pool.example.com"
        assert pool.target_puzzle_hash == plotnft.pool_state.target_puzzle_hash
        assert pool.payout_instructions == PAYOUT_ADDRESS
        assert pool.owner_public_key == pubkey_for_seed(1)
        assert pool.difficulty is None
        assert pool.p2_singleton_puzzle_hash == launcher_id_to_p2_puzzle_hash(
            plotnft.launcher_id, plotnft.delay_time, plotnft.delay_puzzle_hash
        )

    def test_self_pooling(self):
        pool = pool_wallet_config_for(make_plotnft(1, pubkey_for_seed(1), pool_url=None), PAYOUT_ADDRESS)
        assert pool.pool_url == ""


class TestSynthesizer(unittest.TestCase):
    def setUp(self):
        self.owner = pubkey_for_seed(1)
        self.deriver = FakeKeyDeriver({4: self.owner})
        self.config = Config(payout_address=PAYOUT_ADDRESS)

    def test_plotnft_with_owner_key(self):
        plotnft = make_plotnft(1, self.owner)
        config = add_plotnft(self.config, "master", plotnft, self.deriver)
        assert len(config.pool_info) == 1
        assert len(config.farmer_info) == 1
        info = config.farmer_info[0]
        assert info.launcher_id == plotnft.launcher_id
        assert info.farmer_secret_key == self.deriver.secret_bytes(("farmer", "master"))
        assert info.pool_secret_key == self.deriver.secret_bytes(("pool", "master"))
        assert info.owner_secret_key == self.deriver.secret_bytes(("owner", "master", 4))
        assert info.auth_secret_key == self.deriver.secret_bytes(("auth", "master", 4, 0))

    def test_plotnft_without_owner_key(self):
        plotnft = make_plotnft(1, pubkey_for_seed(2))
        config = add_plotnft(self.config, "master", plotnft, self.deriver)
        info = config.farmer_info[0]
        assert info.launcher_id == plotnft.launcher_id
        assert info.owner_secret_key is None
        assert info.auth_secret_key is None
        # Account level keys are always present
        assert info.farmer_secret_key == self.deriver.secret_bytes(("farmer", "master"))
        assert info.pool_secret_key == self.deriver.secret_bytes(("pool", "master"))

    def test_input_config_untouched(self):
        add_plotnft(self.config, "master", make_plotnft(1, self.owner), self.deriver)
        assert self.config.farmer_info == []
        assert self.config.pool_info == []

    def test_merge_is_idempotent(self):
        plotnft = make_plotnft(1, self.owner)
        other = make_plotnft(2, pubkey_for_seed(3))
        config = synthesize_config(self.config, "master", [plotnft, other], self.deriver)
        config = synthesize_config(config, "second-master", [plotnft], FakeKeyDeriver({9: self.owner}))
        assert [info.launcher_id for info in config.farmer_info] == [plotnft.launcher_id, other.launcher_id]
        assert [pool.launcher_id for pool in config.pool_info] == [plotnft.launcher_id, other.launcher_id]
        info = config.farmer_info[0]
        assert info.farmer_secret_key == self.deriver.secret_bytes(("farmer", "second-master"))
        assert info.owner_secret_key == self.deriver.secret_bytes(("owner", "second-master", 9))
        assert info.auth_secret_key == self.deriver.secret_bytes(("auth", "second-master", 9, 0))
        # Untouched by the second run
        assert config.farmer_info[1].farmer_secret_key == self.deriver.secret_bytes(("farmer", "master"))

    def test_no_plotnft(self):
        config = synthesize_config(self.config, "master", [], self.deriver)
        assert config.pool_info == []
        assert len(config.farmer_info) == 1
        info = config.farmer_info[0]
        assert info.launcher_id is None
        assert info.owner_secret_key is None
        assert info.auth_secret_key is None
        assert info.farmer_secret_key == self.deriver.secret_bytes(("farmer", "master"))
        assert info.pool_secret_key == self.deriver.secret_bytes(("pool", "master"))

    def test_placeholder_not_duplicated(self):
        config = add_no_plotnft_placeholder(self.config, "master", self.deriver)
        config = add_no_plotnft_placeholder(config, "second-master", self.deriver)
        assert len(config.farmer_info) == 1
        assert config.farmer_info[0].farmer_secret_key == self.deriver.secret_bytes(("farmer", "second-master"))

    def test_no_placeholder_when_found(self):
        config = synthesize_config(self.config, "master", [make_plotnft(1, self.owner)], self.deriver)
        assert all(info.launcher_id is not None for info in config.farmer_info)
