from typing import Optional

from chia.types.blockchain_format.sized_bytes import bytes32
from chia.util.byte_types import hexstr_to_bytes


class FarmerConfigError(Exception):
    """
    Base class for errors that abort config generation
    """


class KeyDerivationError(FarmerConfigError):
    """A derivation primitive rejected its input (index, mnemonic, ...)"""


class NotFoundError(FarmerConfigError):
    """An explicitly requested launcher id did not resolve to a PlotNFT"""


class UserCanceledError(FarmerConfigError):
    """The user declined to overwrite an existing config"""


class NodeError(FarmerConfigError):
    """The full node could not be reached or answered a request with an error"""


class PersistenceError(FarmerConfigError):
    """The config could not be written"""


def parse_launcher_id(value: Optional[str]) -> Optional[bytes32]:
    if value is None or value.strip() == "":
        return None
    try:
        raw = hexstr_to_bytes(value.strip())
    except ValueError as e:
        raise ValueError(f"Invalid launcher id {value}: {e}") from e
    if len(raw) != 32:
        raise ValueError(f"Invalid launcher id {value}: expected 32 bytes, got {len(raw)}")
    return bytes32(raw)
