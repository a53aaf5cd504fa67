import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import aiohttp
import yaml
from chia.rpc.full_node_rpc_client import FullNodeRpcClient
from chia.types.blockchain_format.sized_bytes import bytes32
from chia.util.byte_types import hexstr_to_bytes
from chia.util.ints import uint16

from .config import DEFAULT_NETWORK, Config
from .util import FarmerConfigError

log = logging.getLogger(__name__)

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"

PRIVATE_CRT = "farmer/private_farmer.crt"
PRIVATE_KEY = "farmer/private_farmer.key"
CA_PRIVATE_CRT = "ca/private_ca.crt"
CA_PRIVATE_KEY = "ca/private_ca.key"

COMMUNITY_PORT = 443
LOCAL_FARMING_PORT = 8444
LOCAL_RPC_PORT = 8555

RPC_TIMEOUT = 600


@dataclass(frozen=True)
class NodeSettings:
    trusted_nodes: Tuple[str, ...]  # Hostnames that are reached over public https without local certificates
    networks: Dict[str, bytes32]  # Network name to genesis challenge

    def is_community_node(self, host: str) -> bool:
        return host.strip().lower() in self.trusted_nodes

    def resolve_network(self, network: Optional[str]) -> str:
        if network is not None and network in self.networks:
            return network
        if network is not None:
            log.warning(f"Unknown network {network}, using {DEFAULT_NETWORK}")
        return DEFAULT_NETWORK

    def genesis_challenge(self, network: str) -> bytes32:
        return self.networks[self.resolve_network(network)]


def _parse_genesis_challenge(name: str, value: Any) -> bytes32:
    # Unquoted all-digit hex is loaded by yaml as a number, which has already lost its leading zeros
    if not isinstance(value, str):
        raise FarmerConfigError(f"genesis_challenge of network {name} must be a quoted hex string, got {value!r}")
    try:
        raw = hexstr_to_bytes(value.strip())
    except ValueError as e:
        raise FarmerConfigError(f"Invalid genesis_challenge of network {name}: {e}") from e
    if len(raw) != 32:
        raise FarmerConfigError(f"Invalid genesis_challenge of network {name}: expected 32 bytes, got {len(raw)}")
    return bytes32(raw)


def load_node_settings(path: Optional[Path] = None) -> NodeSettings:
    with open(DEFAULTS_PATH if path is None else path) as f:
        settings: Dict = yaml.safe_load(f)
    return NodeSettings(
        trusted_nodes=tuple(host.strip().lower() for host in settings.get("trusted_nodes") or []),
        networks={
            name: _parse_genesis_challenge(name, network.get("genesis_challenge"))
            for name, network in (settings.get("networks") or {}).items()
        },
    )


def default_farming_port(host: str, settings: NodeSettings) -> Optional[int]:
    if settings.is_community_node(host):
        return COMMUNITY_PORT
    if host == "localhost":
        return LOCAL_FARMING_PORT
    return None


def default_rpc_port(host: str, settings: NodeSettings) -> Optional[int]:
    if settings.is_community_node(host):
        return COMMUNITY_PORT
    if host == "localhost":
        return LOCAL_RPC_PORT
    return None


def ssl_net_config() -> Dict:
    # Layout expected under ssl_root_path, relative paths are resolved by chia against the root
    return {
        "private_ssl_ca": {"crt": CA_PRIVATE_CRT, "key": CA_PRIVATE_KEY},
        "daemon_ssl": {"private_crt": PRIVATE_CRT, "private_key": PRIVATE_KEY},
        "rpc_timeout": RPC_TIMEOUT,
    }


async def create_community_rpc_client(host: str, port: uint16) -> FullNodeRpcClient:
    """
    Community nodes serve a publicly signed certificate over https, so no client certificates are loaded. The
    session gets the same timeout as a local node's.
    """
    client = await FullNodeRpcClient.create(host, port, None, None)
    await client.session.close()
    client.session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=RPC_TIMEOUT))
    client.url = f"https://{host}:{port}/"
    return client


async def create_node_rpc_client(config: Config, settings: NodeSettings) -> FullNodeRpcClient:
    host = config.fullnode_rpc_host
    port = uint16(config.fullnode_rpc_port)
    if settings.is_community_node(host):
        log.info(f"Connecting to community node {host}:{port}")
        return await create_community_rpc_client(host, port)

    if config.ssl_root_path is None:
        raise FarmerConfigError(f"An SSL path is required to connect to {host}")
    ssl_root = Path(config.ssl_root_path)
    missing = [p for p in (CA_PRIVATE_CRT, CA_PRIVATE_KEY, PRIVATE_CRT, PRIVATE_KEY) if not (ssl_root / p).exists()]
    if len(missing) > 0:
        raise FarmerConfigError(f"Missing SSL files in {ssl_root}: {', '.join(missing)}")
    log.info(f"Connecting to full node {host}:{port} with certificates from {ssl_root}")
    return await FullNodeRpcClient.create(host, port, ssl_root, ssl_net_config())
