"""
Scan orchestrator: wires generator, worker pool and collector together over
two bounded channels, joins them in two stages and folds the results into a
summary.

Join order matters: every worker must finish before the result channel is
closed, and the result list is read only after the collector has finished.
"""

import logging
import threading
import time
from typing import List, Optional

from core.config import settings
from core.models import Probe, ScanConfig, ScanReport, ScanResult, ScanSummary
from core.queue import Channel
from pipeline import stages
from probers.l4_tcp import Dialer

log = logging.getLogger(__name__)


class Orchestrator:
    def __init__(self, dialer: Optional[Dialer] = None, queue_factor: Optional[int] = None) -> None:
        self.dialer = dialer
        self.queue_factor = queue_factor or settings.queue_factor

    def _capacity(self, config: ScanConfig) -> int:
        return max(1, config.workers * self.queue_factor)

    def scan(self, config: ScanConfig) -> ScanReport:
        capacity = self._capacity(config)
        tasks: Channel[Probe] = Channel(capacity, name="tasks")
        results: Channel[ScanResult] = Channel(capacity, name="results")
        collected: List[ScanResult] = []

        log.info(
            "scan start | targets=%d ports=%s probes=%d workers=%d timeout=%ds",
            len(config.targets),
            config.port_range,
            config.total_probes,
            config.workers,
            config.timeout,
        )

        workers = [
            threading.Thread(
                target=stages.work,
                args=(i, tasks, results, float(config.timeout), self.dialer),
                name=f"scan-worker-{i}",
                daemon=True,
            )
            for i in range(config.workers)
        ]
        collector = threading.Thread(
            target=stages.collect, args=(results, collected), name="scan-collector", daemon=True
        )
        generated: List[int] = []
        generator = threading.Thread(
            target=lambda: generated.append(stages.generate(config, tasks)),
            name="scan-generator",
            daemon=True,
        )

        started: List[threading.Thread] = []
        try:
            for w in workers:
                w.start()
                started.append(w)
            collector.start()

            start = time.perf_counter()
            generator.start()

            for w in workers:
                w.join()
            results.close()
            collector.join()
            generator.join()
        except BaseException:
            log.error("scan aborted; releasing %d started workers", len(started))
            self._release(tasks, results, started, collector)
            raise

        elapsed = time.perf_counter() - start
        summary = self._build_summary(config, collected, elapsed)
        log.info(
            "scan done | probes=%d open=%d took=%.3fs",
            summary.total_ports,
            summary.open_ports,
            summary.time_taken,
        )
        if generated and generated[0] != len(collected):
            log.error("collected %d results for %d generated probes", len(collected), generated[0])
        return ScanReport(results=collected, summary=summary)

    @staticmethod
    def _release(
        tasks: Channel[Probe],
        results: Channel[ScanResult],
        workers: List[threading.Thread],
        collector: threading.Thread,
    ) -> None:
        # workers stop once the task channel drains; results stay open until
        # they are gone so no worker hits a closed result channel mid-put
        tasks.close()
        for w in workers:
            w.join()
        results.close()
        if collector.ident is not None:
            collector.join()

    @staticmethod
    def _build_summary(config: ScanConfig, results: List[ScanResult], elapsed: float) -> ScanSummary:
        return ScanSummary(
            total_ports=config.total_probes,
            open_ports=sum(1 for r in results if r.open),
            time_taken=elapsed,
            targets=list(config.targets),
            port_range=config.port_range,
            worker_count=config.workers,
        )


def run_scan(config: ScanConfig) -> ScanReport:
    return Orchestrator().scan(config)
