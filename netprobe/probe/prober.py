"""
Reachability prober: mode dispatch under a hard deadline
"""

import logging
import threading
from concurrent.futures import Future, wait
from typing import Callable, Optional, Union

from ..config import DEFAULT_ALL_MODE_PORTS
from ..models import ProbeRequest, ProbeResult
from ..parsers.ping import PingParser
from .base import BaseProbe
from .icmp import PingProbe
from .tcp import TCPProbe
from .udp import UDPProbe


logger = logging.getLogger(__name__)


class ReachabilityProber:
    """
    Single-target reachability check.

    Each check runs on its own daemon thread and is abandoned once the
    request timeout passes, so a result always comes back within the
    budget even when the underlying call ignores its own timeout. Daemon
    threads also let the process exit on time while an abandoned call,
    such as a hung getaddrinfo, is still blocked.
    """

    PROBES = {
        'ping': PingProbe,
        'tcp': TCPProbe,
        'udp': UDPProbe,
    }

    def __init__(self, ping_parser: Optional[PingParser] = None):
        self.ping_parser = ping_parser

    def _create_probe(self, mode: str, timeout: float) -> BaseProbe:
        """Create probe instance for a mode"""
        probe_class = self.PROBES.get(mode)
        if not probe_class:
            raise ValueError(
                f"Unknown mode '{mode}'. "
                f"Supported: {', '.join(self.PROBES.keys())}, all"
            )

        if mode == 'ping':
            return probe_class(timeout=timeout, parser=self.ping_parser)
        return probe_class(timeout=timeout)

    def _timeout_result(self, target: str, mode: str, port: Optional[int],
                        timeout: float) -> ProbeResult:
        where = f"{target}:{port}" if port is not None else target
        return ProbeResult(
            success=False,
            message=f"Probe to {where} timed out after {timeout:g}s",
            target=target,
            mode=mode,
            port=port,
            best_effort=(mode == 'udp')
        )

    def _task(self, target: str, mode: str, port: Optional[int],
              timeout: float) -> Callable[[], ProbeResult]:
        def run() -> ProbeResult:
            with self._create_probe(mode, timeout) as probe:
                return probe.probe(target, port)
        return run

    @staticmethod
    def _start(task: Callable[[], ProbeResult], name: str,
               gate: Optional[threading.Semaphore] = None) -> Future:
        """Run task on a daemon thread, its outcome delivered through a Future"""
        future: Future = Future()

        def run():
            if gate is not None:
                gate.acquire()
            try:
                if future.set_running_or_notify_cancel():
                    try:
                        future.set_result(task())
                    except Exception as e:
                        future.set_exception(e)
            finally:
                if gate is not None:
                    gate.release()

        threading.Thread(target=run, name=name, daemon=True).start()
        return future

    def check(self, target: str, mode: str, port: Optional[int] = None,
              timeout: float = 5.0) -> ProbeResult:
        """
        Run one ping, tcp or udp check.

        Returns:
            ProbeResult, success=False on any failure or deadline expiry
        """
        future = self._start(self._task(target, mode, port, timeout), f"probe-{mode}")
        done, _ = wait([future], timeout=timeout)
        if not done:
            logger.debug("%s probe to %s abandoned at deadline", mode, target)
            return self._timeout_result(target, mode, port, timeout)
        return future.result()

    def check_all(self, target: str, ports: tuple[int, ...] = DEFAULT_ALL_MODE_PORTS,
                  timeout: float = 5.0,
                  max_concurrent: Optional[int] = None) -> list[ProbeResult]:
        """
        Ping plus one tcp check per port, all in parallel.

        Returns:
            Ping result first, then one result per port in request order
        """
        jobs = [('ping', None)] + [('tcp', port) for port in ports]
        gate = threading.BoundedSemaphore(max_concurrent) if max_concurrent else None

        futures = [
            self._start(self._task(target, mode, port, timeout), "probe-all", gate)
            for mode, port in jobs
        ]
        wait(futures, timeout=timeout)

        results = []
        for (mode, port), future in zip(jobs, futures):
            if future.done():
                results.append(future.result())
            else:
                future.cancel()
                results.append(self._timeout_result(target, mode, port, timeout))
        return results

    def run(self, request: ProbeRequest) -> Union[ProbeResult, list[ProbeResult]]:
        """Execute a ProbeRequest; 'all' mode returns a list"""
        if request.mode == 'all':
            return self.check_all(
                request.target,
                ports=request.ports or DEFAULT_ALL_MODE_PORTS,
                timeout=request.timeout,
                max_concurrent=request.max_concurrent
            )
        return self.check(request.target, request.mode, request.port, request.timeout)
