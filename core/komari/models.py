"""
Komari RPC Payload Models
Typed views over the nine results of the rpc2 batch
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional


def _require_mapping(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ValueError(f"{what} is not an object")
    return data


def _pick(cls, data: Dict[str, Any], renames: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Keep only the dataclass fields present in data, coercing numbers"""
    renames = renames or {}
    kwargs = {}
    for f in fields(cls):
        key = renames.get(f.name, f.name)
        if key not in data or data[key] is None:
            continue
        value = data[key]
        if f.type in (int, 'int'):
            value = int(value)
        elif f.type in (float, 'float'):
            value = float(value)
        elif f.type in (bool, 'bool'):
            if not isinstance(value, (bool, int)):
                raise ValueError(f"{key} is not a boolean")
            value = bool(value)
        elif f.type in (str, 'str'):
            value = str(value)
        kwargs[f.name] = value
    return kwargs


@dataclass
class RpcHelpEntry:
    name: str = ""
    summary: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "RpcHelpEntry":
        return cls(**_pick(cls, _require_mapping(data, "rpc.help entry")))


@dataclass
class PublicInfo:
    """Result of common:getPublicInfo"""
    sitename: str = ""
    description: str = ""
    theme: str = ""
    allow_cors: bool = False
    custom_body: str = ""
    custom_head: str = ""
    disable_password_login: bool = False
    oauth_enable: bool = False
    oauth_provider: str = ""
    ping_record_preserve_time: int = 0
    private_site: bool = False
    record_enabled: bool = False
    record_preserve_time: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> "PublicInfo":
        return cls(**_pick(cls, _require_mapping(data, "public info")))


@dataclass
class NodeInfo:
    """Static description of one machine, from common:getNodes"""
    uuid: str = ""
    name: str = ""
    cpu_name: str = ""
    virtualization: str = ""
    arch: str = ""
    cpu_cores: int = 0
    os: str = ""
    kernel_version: str = ""
    gpu_name: str = ""
    region: str = ""
    mem_total: int = 0
    swap_total: int = 0
    disk_total: int = 0
    group: Optional[str] = None
    tags: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "NodeInfo":
        return cls(**_pick(cls, _require_mapping(data, "node")))


@dataclass
class NodeStatus:
    """Latest report of one machine, from common:getNodesLatestStatus"""
    client: str = ""
    time: str = ""
    cpu: float = 0.0
    gpu: float = 0.0
    ram: int = 0
    ram_total: int = 0
    swap: int = 0
    swap_total: int = 0
    load: float = 0.0
    load5: float = 0.0
    load15: float = 0.0
    temp: float = 0.0
    disk: int = 0
    disk_total: int = 0
    net_in: int = 0
    net_out: int = 0
    net_total_up: int = 0
    net_total_down: int = 0
    process: int = 0
    connections: int = 0
    connections_udp: int = 0
    uptime: int = 0
    online: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> "NodeStatus":
        return cls(**_pick(cls, _require_mapping(data, "node status")))


@dataclass
class Me:
    two_fa_enabled: bool = False
    logged_in: bool = False
    sso_id: str = ""
    sso_type: str = ""
    username: str = ""
    uuid: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "Me":
        return cls(**_pick(cls, _require_mapping(data, "me"), {"two_fa_enabled": "2fa_enabled"}))


@dataclass
class Version:
    version: str = ""
    hash: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "Version":
        return cls(**_pick(cls, _require_mapping(data, "version")))


@dataclass
class AllInfo:
    """Everything one rpc2 batch returns for a Komari site"""
    rpc_help: List[RpcHelpEntry] = field(default_factory=list)
    rpc_methods: List[str] = field(default_factory=list)
    rpc_ping: str = ""
    rpc_version: str = ""
    public_info: PublicInfo = field(default_factory=PublicInfo)
    nodes: Dict[str, NodeInfo] = field(default_factory=dict)
    nodes_latest_status: Dict[str, NodeStatus] = field(default_factory=dict)
    me: Me = field(default_factory=Me)
    version: Version = field(default_factory=Version)

    def find_node(self, node_uuid: str) -> Optional[NodeInfo]:
        """Look a node up by its uuid field rather than its map key"""
        for node in self.nodes.values():
            if node.uuid == node_uuid:
                return node
        return self.nodes.get(node_uuid)

    def sorted_status(self) -> List[tuple]:
        """(uuid, NodeStatus) pairs ordered by uuid; index i+1 is the node id shown to users"""
        return sorted(self.nodes_latest_status.items(), key=lambda item: item[0])

    @property
    def total_cpu_cores(self) -> int:
        return sum(node.cpu_cores for node in self.nodes.values())


def parse_help(data: Any) -> List[RpcHelpEntry]:
    if not isinstance(data, list):
        raise ValueError("rpc.help is not a list")
    return [RpcHelpEntry.from_dict(entry) for entry in data]


def parse_methods(data: Any) -> List[str]:
    if not isinstance(data, list):
        raise ValueError("rpc.methods is not a list")
    return [str(method) for method in data]


def parse_string(data: Any) -> str:
    if not isinstance(data, str):
        raise ValueError("expected a string")
    return data


def parse_nodes(data: Any) -> Dict[str, NodeInfo]:
    return {uuid: NodeInfo.from_dict(node) for uuid, node in _require_mapping(data, "nodes").items()}


def parse_nodes_latest_status(data: Any) -> Dict[str, NodeStatus]:
    return {
        uuid: NodeStatus.from_dict(status)
        for uuid, status in _require_mapping(data, "nodes latest status").items()
    }
