import logging
from dataclasses import dataclass
from typing import Iterator, List

from chia.types.blockchain_format.sized_bytes import bytes32
from chia.util.ints import uint32
from chia.util.keychain import bytes_from_mnemonic, mnemonic_to_seed
from chia.wallet.derive_keys import (
    master_sk_to_farmer_sk,
    master_sk_to_pool_sk,
    master_sk_to_pooling_authentication_sk,
    master_sk_to_singleton_owner_sk,
    master_sk_to_wallet_sk,
    master_sk_to_wallet_sk_unhardened,
)
from chia.wallet.puzzles.p2_delegated_puzzle_or_hidden_puzzle import puzzle_hash_for_pk
from chia_rs import AugSchemeMPL, G1Element, PrivateKey

from .util import KeyDerivationError

log = logging.getLogger(__name__)

# Indices derived per lookup round trip
PAGE_SIZE = 50


def master_sk_from_mnemonic(mnemonic: str) -> PrivateKey:
    mnemonic = " ".join(mnemonic.split())
    try:
        # Only used to validate the word list and checksum
        bytes_from_mnemonic(mnemonic)
        return AugSchemeMPL.key_gen(mnemonic_to_seed(mnemonic))
    except ValueError as e:
        raise KeyDerivationError(f"Invalid mnemonic: {e}") from e


class KeyDeriver:
    """
    The key derivation primitives, as pure functions of the master key. Everything that derives keys goes through
    an instance of this class, so tests can substitute their own.
    """

    def wallet_sk(self, master: PrivateKey, index: int, hardened: bool) -> PrivateKey:
        try:
            if hardened:
                return master_sk_to_wallet_sk(master, uint32(index))
            return master_sk_to_wallet_sk_unhardened(master, uint32(index))
        except (ValueError, OverflowError) as e:
            raise KeyDerivationError(f"Failed to derive wallet key {index} (hardened={hardened}): {e}") from e

    def singleton_owner_sk(self, master: PrivateKey, index: int) -> PrivateKey:
        try:
            return master_sk_to_singleton_owner_sk(master, uint32(index))
        except (ValueError, OverflowError) as e:
            raise KeyDerivationError(f"Failed to derive singleton owner key {index}: {e}") from e

    def pooling_authentication_sk(self, master: PrivateKey, index: int, position: int) -> PrivateKey:
        try:
            return master_sk_to_pooling_authentication_sk(master, uint32(index), uint32(position))
        except (AssertionError, ValueError, OverflowError) as e:
            raise KeyDerivationError(f"Failed to derive pool authentication key {index}/{position}: {e}") from e

    def farmer_sk(self, master: PrivateKey) -> PrivateKey:
        return master_sk_to_farmer_sk(master)

    def pool_sk(self, master: PrivateKey) -> PrivateKey:
        return master_sk_to_pool_sk(master)

    def public_key(self, sk: PrivateKey) -> G1Element:
        return sk.get_g1()

    def puzzle_hash_for_pk(self, public_key: G1Element) -> bytes32:
        return puzzle_hash_for_pk(public_key)

    def secret_bytes(self, sk: PrivateKey) -> bytes32:
        return bytes32(bytes(sk))


@dataclass(frozen=True)
class CandidateIdentity:
    index: int
    hardened: bool
    puzzle_hash: bytes32


@dataclass(frozen=True)
class CandidatePage:
    number: int
    candidates: List[CandidateIdentity]

    @property
    def puzzle_hashes(self) -> List[bytes32]:
        return [c.puzzle_hash for c in self.candidates]


class KeyDerivationWalker:
    """
    Walks the wallet derivation indices of a master key in pages. Each index yields two candidates, unhardened
    first, then hardened. Pages are computed on demand, so a consumer that stops early never derives the rest.
    """

    def __init__(self, master: PrivateKey, deriver: KeyDeriver, page_size: int = PAGE_SIZE):
        self.master = master
        self.deriver = deriver
        self.page_size = page_size

    def candidates(self, index: int) -> Iterator[CandidateIdentity]:
        for hardened in (False, True):
            sk = self.deriver.wallet_sk(self.master, index, hardened)
            puzzle_hash = self.deriver.puzzle_hash_for_pk(self.deriver.public_key(sk))
            yield CandidateIdentity(index, hardened, puzzle_hash)

    def page(self, number: int) -> CandidatePage:
        candidates: List[CandidateIdentity] = []
        for index in range(number * self.page_size, (number + 1) * self.page_size):
            candidates.extend(self.candidates(index))
        return CandidatePage(number, candidates)

    def pages(self, start: int = 0) -> Iterator[CandidatePage]:
        number = start
        while True:
            yield self.page(number)
            number += 1
