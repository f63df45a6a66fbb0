"""
Fleet Aggregator
Fans out one RPC fetch per registered monitor and collects whatever answers
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List

from core.database.unified_database import Monitor
from core.komari.aggregate import AggregateMetrics
from core.komari.models import AllInfo
from core.komari.rpc_client import KomariRPCClient

logger = logging.getLogger(__name__)

QUEUE_CAPACITY = 32

# Sites reporting a node above this are treated as fake data
MAX_PLAUSIBLE_CPU_CORES = 384

_DONE = object()


@dataclass
class FleetResult:
    saved_count: int
    results: List[AllInfo] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.results)


def filter_valid_all_info(all_infos: List[AllInfo]) -> List[AllInfo]:
    return [
        all_info for all_info in all_infos
        if all(node.cpu_cores <= MAX_PLAUSIBLE_CPU_CORES for node in all_info.nodes.values())
    ]


class FleetAggregator:
    """Uncoordinated parallel fetch across every saved monitor"""

    def __init__(self, rpc_client: KomariRPCClient, queue_capacity: int = QUEUE_CAPACITY):
        self.rpc = rpc_client
        self.queue_capacity = queue_capacity

    async def _produce(self, monitor: Monitor, queue: asyncio.Queue):
        try:
            all_info = await self.rpc.get_all_info(monitor.monitor_url)
        except Exception as e:
            logger.error(f"Fleet fetch failed for {monitor.monitor_url}: {e}")
            return
        await queue.put(all_info)

    async def _run_producers(self, monitors: List[Monitor], queue: asyncio.Queue):
        try:
            await asyncio.gather(*(self._produce(monitor, queue) for monitor in monitors))
        finally:
            await queue.put(_DONE)

    async def collect(self, monitors: List[Monitor]) -> FleetResult:
        """Drain results until every producer has finished"""
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.queue_capacity)
        producers = asyncio.create_task(self._run_producers(monitors, queue))

        results = []
        while True:
            item = await queue.get()
            if item is _DONE:
                break
            results.append(item)

        await producers
        return FleetResult(saved_count=len(monitors), results=results)


def format_fleet_overview(result: FleetResult, bot_name: str) -> str:
    valid = filter_valid_all_info(result.results)
    statuses = [status for all_info in valid for status in all_info.nodes_latest_status.values()]
    metrics = AggregateMetrics.from_statuses(
        statuses,
        cpu_cores=sum(all_info.total_cpu_cores for all_info in valid)
    )
    return (
        f"@{bot_name} overview:\n"
        "\n"
        f"Saved connections: {result.saved_count}\n"
        f"Successfully read: {result.success_count}\n"
        "\n"
        f"{metrics.format_body()}"
    )
