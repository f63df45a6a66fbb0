"""
Node Metric Aggregation
Sums and averages over any collection of node reports
"""

from dataclasses import dataclass
from typing import Iterable

from core.utils.formatting import (
    bytes_per_second_to_mbps,
    bytes_to_pretty_string,
    usage_percent,
)
from .models import NodeStatus


@dataclass
class AggregateMetrics:
    total_nodes: int = 0
    online_nodes: int = 0
    cpu_cores: int = 0
    avg_cpu: float = 0.0
    avg_load1: float = 0.0
    avg_load5: float = 0.0
    avg_load15: float = 0.0
    ram_used: int = 0
    ram_total: int = 0
    swap_used: int = 0
    swap_total: int = 0
    disk_used: int = 0
    disk_total: int = 0
    net_total_down: int = 0
    net_total_up: int = 0
    net_in: int = 0
    net_out: int = 0
    tcp_connections: int = 0
    udp_connections: int = 0

    @property
    def percent_online(self) -> float:
        return usage_percent(self.online_nodes, self.total_nodes)

    @classmethod
    def from_statuses(cls, statuses: Iterable[NodeStatus], cpu_cores: int = 0) -> "AggregateMetrics":
        """Averages cover online nodes only, sums cover every node"""
        statuses = list(statuses)
        online = [status for status in statuses if status.online]

        def average(attribute: str) -> float:
            if not online:
                return 0.0
            return sum(getattr(status, attribute) for status in online) / len(online)

        return cls(
            total_nodes=len(statuses),
            online_nodes=len(online),
            cpu_cores=cpu_cores,
            avg_cpu=average("cpu"),
            avg_load1=average("load"),
            avg_load5=average("load5"),
            avg_load15=average("load15"),
            ram_used=sum(s.ram for s in statuses),
            ram_total=sum(s.ram_total for s in statuses),
            swap_used=sum(s.swap for s in statuses),
            swap_total=sum(s.swap_total for s in statuses),
            disk_used=sum(s.disk for s in statuses),
            disk_total=sum(s.disk_total for s in statuses),
            net_total_down=sum(s.net_total_down for s in statuses),
            net_total_up=sum(s.net_total_up for s in statuses),
            net_in=sum(s.net_in for s in statuses),
            net_out=sum(s.net_out for s in statuses),
            tcp_connections=sum(s.connections for s in statuses),
            udp_connections=sum(s.connections_udp for s in statuses),
        )

    def format_body(self) -> str:
        """Metric lines shared by the site and fleet overviews"""
        return (
            f"ONLINE: `{self.online_nodes}` / `{self.total_nodes}` `{self.percent_online:.2f}%`\n"
            f"CPU CORES: `{self.cpu_cores}`\n"
            f"AVG CPU: `{self.avg_cpu:.2f}%`\n"
            f"AVG LOAD: `{self.avg_load1:.2f}` / `{self.avg_load5:.2f}` / `{self.avg_load15:.2f}`\n"
            "\n"
            f"MEM: `{bytes_to_pretty_string(self.ram_used)}` / `{bytes_to_pretty_string(self.ram_total)}` "
            f"`{usage_percent(self.ram_used, self.ram_total):.2f}%`\n"
            f"SWAP: `{bytes_to_pretty_string(self.swap_used)}` / `{bytes_to_pretty_string(self.swap_total)}` "
            f"`{usage_percent(self.swap_used, self.swap_total):.2f}%`\n"
            f"DISK: `{bytes_to_pretty_string(self.disk_used)}` / `{bytes_to_pretty_string(self.disk_total)}` "
            f"`{usage_percent(self.disk_used, self.disk_total):.2f}%`\n"
            "\n"
            f"DOWN: `{bytes_to_pretty_string(self.net_total_down)}`\n"
            f"UP: `{bytes_to_pretty_string(self.net_total_up)}`\n"
            f"DOWN SPEED: `{bytes_per_second_to_mbps(self.net_in):.2f} Mbps`\n"
            f"UP SPEED: `{bytes_per_second_to_mbps(self.net_out):.2f} Mbps`\n"
            f"CONN: `{self.tcp_connections} TCP` / `{self.udp_connections} UDP`"
        )
