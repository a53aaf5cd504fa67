import dataclasses
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from chia.types.blockchain_format.sized_bytes import bytes32
from chia.util.ints import int32, int64, uint8, uint16, uint64
from chia.util.streamable import streamable, Streamable
from chia_rs import G1Element

from .util import PersistenceError

log = logging.getLogger(__name__)

DEFAULT_NETWORK = "mainnet"


def get_root_path() -> Path:
    return Path.home() / ".config" / "fast_farmer"


def get_config_path() -> Path:
    return get_root_path() / "fast_farmer.yaml"


def get_ssl_root_path(ssl_root_path: Optional[str] = None) -> Path:
    if ssl_root_path is not None:
        return Path(ssl_root_path)
    return get_root_path() / "ssl"


@streamable
@dataclass(frozen=True)
class FarmingInfo(Streamable):
    farmer_secret_key: bytes32
    launcher_id: Optional[bytes32]  # None for a farmer that has no PlotNFT yet
    pool_secret_key: Optional[bytes32]
    owner_secret_key: Optional[bytes32]  # Controls the PlotNFT singleton
    auth_secret_key: Optional[bytes32]  # Signs partials sent to the pool


@streamable
@dataclass(frozen=True)
class PoolWalletConfig(Streamable):
    launcher_id: bytes32
    pool_url: str
    target_puzzle_hash: bytes32
    payout_instructions: str
    p2_singleton_puzzle_hash: bytes32  # Derived from the launcher id, delay_time and delay_puzzle_hash
    owner_public_key: G1Element
    difficulty: Optional[uint64]  # Set by the pool once the farmer joins


@streamable
@dataclass(frozen=True)
class DruidGardenHarvesterConfig(Streamable):
    plot_directories: List[str]


@streamable
@dataclass(frozen=True)
class GigahorseHarvesterConfig(Streamable):
    plot_directories: List[str]
    parallel_read: bool
    plot_search_depth: int64
    max_cpu_cores: int32  # -1 means all
    max_cuda_devices: int32
    max_opencl_devices: int32
    cuda_device_list: List[uint8]
    opencl_device_list: List[uint8]
    recompute_host: str
    recompute_port: uint16


def default_gigahorse_config(plot_directories: Optional[List[str]] = None, plot_search_depth: int = 0):
    return GigahorseHarvesterConfig(
        plot_directories=[] if plot_directories is None else list(plot_directories),
        parallel_read=True,
        plot_search_depth=int64(plot_search_depth),
        max_cpu_cores=int32(-1),
        max_cuda_devices=int32(-1),
        max_opencl_devices=int32(-1),
        cuda_device_list=[],
        opencl_device_list=[],
        recompute_host="",
        recompute_port=uint16(0),
    )


@streamable
@dataclass(frozen=True)
class HarvesterConfig(Streamable):
    druid_garden: Optional[DruidGardenHarvesterConfig]
    gigahorse: Optional[GigahorseHarvesterConfig]


@streamable
@dataclass(frozen=True)
class MetricsConfig(Streamable):
    enabled: bool
    port: uint16


def _to_yaml_types(value: Any) -> Any:
    # chia sized ints are int subclasses, which yaml.safe_dump refuses
    if isinstance(value, dict):
        return {str(k): _to_yaml_types(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_yaml_types(v) for v in value]
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, int):
        return int(value)
    if isinstance(value, str):
        return str(value)
    return value


@dataclass
class Config:
    """
    The farmer configuration document. Stages of the generator take a Config and hand back an updated copy.
    """

    selected_network: str = DEFAULT_NETWORK
    ssl_root_path: Optional[str] = None
    fullnode_ws_host: str = "localhost"
    fullnode_ws_port: int = 8444
    fullnode_rpc_host: str = "localhost"
    fullnode_rpc_port: int = 8555
    farmer_info: List[FarmingInfo] = field(default_factory=list)
    pool_info: List[PoolWalletConfig] = field(default_factory=list)
    payout_address: str = ""
    harvester_configs: HarvesterConfig = field(
        default_factory=lambda: HarvesterConfig(druid_garden=None, gigahorse=default_gigahorse_config())
    )
    metrics: Optional[MetricsConfig] = field(default_factory=lambda: MetricsConfig(True, uint16(8080)))

    def replace(self, **changes: Any) -> "Config":
        return dataclasses.replace(self, **changes)

    def to_json_dict(self) -> Dict[str, Any]:
        return {
            "selected_network": self.selected_network,
            "ssl_root_path": self.ssl_root_path,
            "fullnode_ws_host": self.fullnode_ws_host,
            "fullnode_ws_port": int(self.fullnode_ws_port),
            "fullnode_rpc_host": self.fullnode_rpc_host,
            "fullnode_rpc_port": int(self.fullnode_rpc_port),
            "farmer_info": [info.to_json_dict() for info in self.farmer_info],
            "pool_info": [pool.to_json_dict() for pool in self.pool_info],
            "payout_address": self.payout_address,
            "harvester_configs": self.harvester_configs.to_json_dict(),
            "metrics": None if self.metrics is None else self.metrics.to_json_dict(),
        }

    @classmethod
    def from_json_dict(cls, json_dict: Dict[str, Any]) -> "Config":
        defaults = cls()
        metrics = json_dict.get("metrics")
        harvester_configs = json_dict.get("harvester_configs")
        return cls(
            selected_network=json_dict.get("selected_network", defaults.selected_network),
            ssl_root_path=json_dict.get("ssl_root_path"),
            fullnode_ws_host=json_dict["fullnode_ws_host"],
            fullnode_ws_port=int(json_dict["fullnode_ws_port"]),
            fullnode_rpc_host=json_dict["fullnode_rpc_host"],
            fullnode_rpc_port=int(json_dict["fullnode_rpc_port"]),
            farmer_info=[FarmingInfo.from_json_dict(info) for info in json_dict.get("farmer_info") or []],
            pool_info=[PoolWalletConfig.from_json_dict(pool) for pool in json_dict.get("pool_info") or []],
            payout_address=json_dict.get("payout_address", ""),
            harvester_configs=defaults.harvester_configs
            if harvester_configs is None
            else HarvesterConfig.from_json_dict(harvester_configs),
            metrics=None if metrics is None else MetricsConfig.from_json_dict(metrics),
        )

    def save_as_yaml(self, path: Path) -> None:
        """
        Writes the document to a temporary file next to ``path`` and moves it into place, so a failed write never
        leaves a truncated config behind.
        """
        path = Path(path)
        try:
            document = yaml.safe_dump(_to_yaml_types(self.to_json_dict()), sort_keys=False)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w") as f:
                    f.write(document)
                os.replace(tmp_name, path)
            except BaseException:
                os.unlink(tmp_name)
                raise
        except (OSError, yaml.YAMLError) as e:
            raise PersistenceError(f"Failed to write config to {path}: {e}") from e
        log.info(f"Saved config to {path}")

    @classmethod
    def load(cls, path: Path) -> "Config":
        with open(path) as f:
            return cls.from_json_dict(yaml.safe_load(f))
