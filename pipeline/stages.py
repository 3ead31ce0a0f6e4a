"""
Pipeline stages, each run on its own thread by the orchestrator:
generate: config -> task channel (single producer, closes when done)
work:     task channel -> result channel (one result per probe)
collect:  result channel -> list (single writer)
"""

import logging
from typing import Iterator, List, Optional

from core.models import Probe, ScanConfig, ScanResult
from core.queue import Channel
from probers import l4_tcp

log = logging.getLogger(__name__)


def iter_probes(config: ScanConfig) -> Iterator[Probe]:
    # targets outer, ports inner; ranges ascend, explicit lists keep their order
    for target in config.targets:
        for port in config.port_list:
            yield Probe(target=target, port=port)


def generate(config: ScanConfig, tasks: Channel[Probe]) -> int:
    count = 0
    try:
        for probe in iter_probes(config):
            tasks.put(probe)
            count += 1
    finally:
        tasks.close()
    log.debug("generator done: %d probes queued", count)
    return count


def work(
    worker_id: int,
    tasks: Channel[Probe],
    results: Channel[ScanResult],
    timeout: float,
    dialer: Optional[l4_tcp.Dialer] = None,
) -> int:
    handled = 0
    log.debug("worker %d started", worker_id)
    for probe in tasks:
        try:
            result = l4_tcp.tcp_probe(probe, timeout, dialer=dialer)
        except Exception:  # noqa: BLE001
            log.exception("worker %d: probe %s:%d failed unexpectedly", worker_id, probe.target, probe.port)
            result = ScanResult.closed(probe)
        results.put(result)
        handled += 1
    log.debug("worker %d finished after %d probes", worker_id, handled)
    return handled


def collect(results: Channel[ScanResult], sink: List[ScanResult]) -> None:
    for result in results:
        sink.append(result)
    log.debug("collector drained %d results", len(sink))
