import logging
from dataclasses import dataclass
from typing import Optional

from chia_rs import G1Element, PrivateKey

from .keys import KeyDeriver

log = logging.getLogger(__name__)

# Owner keys are expected at low singleton indices, users rarely create more than a handful of PlotNFTs
OWNER_KEY_SEARCH_LIMIT = 150


@dataclass(frozen=True)
class OwnerKeys:
    index: int
    owner_sk: PrivateKey
    auth_sk: PrivateKey


def find_owner_keys(
    master: PrivateKey,
    owner_public_key: G1Element,
    deriver: KeyDeriver,
    search_limit: int = OWNER_KEY_SEARCH_LIMIT,
) -> Optional[OwnerKeys]:
    """
    Searches singleton owner indices 0..search_limit (exclusive) for the key whose public key is
    ``owner_public_key``. The lowest matching index wins. Returns ``None`` if nothing in the range matches, derivation
    failures propagate as ``KeyDerivationError``.
    """
    for index in range(search_limit):
        owner_sk = deriver.singleton_owner_sk(master, index)
        if deriver.public_key(owner_sk) == owner_public_key:
            auth_sk = deriver.pooling_authentication_sk(master, index, 0)
            log.info(f"Found owner key for {owner_public_key} at index {index}")
            return OwnerKeys(index, owner_sk, auth_sk)
    log.warning(f"No owner key for {owner_public_key} in the first {search_limit} indices")
    return None
