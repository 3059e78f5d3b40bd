from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import replace
from typing import Callable, Iterable, List, Optional, Set

from .config import ScanConfig
from .errors import ScanCancelled
from .gate import AdmissionGate
from .models import ProbeResult, ScanSummary, ScanTarget
from .prober import probe_port

logger = logging.getLogger(__name__)

Prober = Callable[[str, int, int], ProbeResult]
ResultCallback = Callable[[ProbeResult], None]


def _summarize(target: ScanTarget, scanned: int, results: List[ProbeResult]) -> ScanSummary:
    return ScanSummary(
        target=target.host,
        address=target.address,
        reverse_name=target.reverse_name,
        ports_scanned=scanned,
        open_results=tuple(sorted(results, key=lambda r: r.port)),
    )


def run_scan(
    target: ScanTarget,
    ports: Iterable[int],
    config: ScanConfig,
    prober: Optional[Prober] = None,
    cancel: Optional[threading.Event] = None,
    on_result: Optional[ResultCallback] = None,
) -> ScanSummary:
    """
    Probe every port once against target.address, at most config.concurrency
    at a time, and return the open ports in ascending order.

    on_result is called for each open port as it is found (completion order,
    serialized). Setting `cancel` stops the scan; ScanCancelled then carries
    the partial summary.
    """
    ports = list(ports)
    prober = prober if prober is not None else probe_port
    total = len(ports)
    cancel = cancel if cancel is not None else threading.Event()
    gate = AdmissionGate(config.concurrency)

    results: List[ProbeResult] = []
    results_lock = threading.Lock()

    def probe_one(port: int) -> bool:
        if cancel.is_set():
            return False
        try:
            with gate.slot(cancel):
                logger.debug("Scanning %d", port)
                result = prober(target.address, port, config.timeout_ms)
        except ScanCancelled:
            return False
        except Exception:
            logger.exception("Probe of %s:%d failed unexpectedly", target.address, port)
            return True

        if result.is_open:
            result = replace(result, service=config.service_for(port))
            with results_lock:
                results.append(result)
                if on_result is not None:
                    try:
                        on_result(result)
                    except Exception:
                        logger.exception("Result callback failed for port %d", port)
        return True

    jobs = iter(ports)
    scanned = 0
    start_all = time.perf_counter()

    max_pending = max(config.concurrency * 4, 100)

    # More workers than gate slots: queued units wait on the gate, not the pool.
    with ThreadPoolExecutor(max_workers=max_pending, thread_name_prefix="probe") as pool:
        pending: Set[Future] = set()

        def submit_next() -> bool:
            if cancel.is_set():
                return False
            try:
                port = next(jobs)
            except StopIteration:
                return False
            pending.add(pool.submit(probe_one, port))
            return True

        try:
            # Prime the queue
            while len(pending) < max_pending and submit_next():
                pass

            while pending:
                done, pending = wait(pending, return_when=FIRST_COMPLETED)
                for fut in done:
                    if fut.result():
                        scanned += 1
                        every = config.progress_every
                        if every > 0 and (scanned % every == 0 or scanned == total):
                            elapsed = time.perf_counter() - start_all
                            rate = scanned / elapsed if elapsed > 0 else 0.0
                            logger.debug(
                                "Scanned %d/%d | open=%d | %.0f scans/s",
                                scanned, total, len(results), rate,
                            )

                    # Refill queue
                    while len(pending) < max_pending and submit_next():
                        pass
        except KeyboardInterrupt:
            cancel.set()
            raise

    summary = _summarize(target, scanned, results)
    if cancel.is_set() and scanned < total:
        logger.warning("Scan of %s cancelled after %d/%d ports", target.host, scanned, total)
        raise ScanCancelled(summary)
    return summary
