"""
Host sweep: CIDR expansion and a per-host ping, PTR, port-scan pipeline
"""

import ipaddress
import itertools
import logging
import threading
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Optional

from .config import (
    SWEEP_MAX_HOSTS, SWEEP_WORKERS, SWEEP_PORT_CONCURRENCY, SWEEP_LARGE_SCAN_CEILING,
    SWEEP_PORT_TIMEOUT, SWEEP_PING_COUNT, SWEEP_PING_INTERVAL, SWEEP_PING_TIMEOUT,
    SWEEP_DEFAULT_PORTS, PING_PACKET_SIZE,
)
from .enrichment import PTRResolver
from .errors import ArgumentError
from .models import HostInfo, PingOptions, PortScanRequest
from .parsers.ping import PingParser
from .ports import parse_port_spec
from .portscan import PortScanner
from .probe.icmp import detailed_ping


logger = logging.getLogger(__name__)


def expand_cidr(cidr: str, max_hosts: int = SWEEP_MAX_HOSTS) -> list[str]:
    """
    Every address inside a CIDR block, capped at max_hosts.

    Network and broadcast addresses are included, so a /31 yields two
    hosts and a /24 yields 256.

    Raises:
        ArgumentError: cidr is not valid CIDR notation
    """
    try:
        network = ipaddress.ip_network(cidr.strip(), strict=False)
    except ValueError:
        raise ArgumentError(f"invalid CIDR: {cidr}", token=cidr) from None

    return [str(address) for address in itertools.islice(network, max_hosts)]


class SweepProgress:
    """
    Completed-host counter for one sweep.

    Writers serialize on a private lock; readers take the value as is,
    which is good enough for a progress display.
    """

    def __init__(self, total: int):
        self.total = total
        self._completed = 0
        self._lock = threading.Lock()

    def increment(self):
        with self._lock:
            self._completed += 1

    @property
    def completed(self) -> int:
        return self._completed

    @property
    def finished(self) -> bool:
        return self._completed >= self.total


class SweepSink:
    """
    Presentation strategy for a sweep.

    The sweep pipeline reports to exactly one sink; the default one
    discards everything and the caller just uses the returned list.
    """

    def start(self, cidr: str, progress: SweepProgress):
        pass

    def host_done(self, info: HostInfo):
        pass

    def close(self):
        pass

    def finish(self, cidr: str, results: list[HostInfo]):
        pass


class HostSweeper:
    """
    Sweep a CIDR block.

    A fixed worker pool walks the hosts. Each worker pings, reverse
    resolves, and only for reachable hosts scans the configured ports.
    """

    def __init__(
        self,
        ports: Optional[list[int]] = None,
        workers: int = SWEEP_WORKERS,
        max_hosts: int = SWEEP_MAX_HOSTS,
        ping_options: Optional[PingOptions] = None,
        port_timeout: float = SWEEP_PORT_TIMEOUT,
        port_concurrency: int = SWEEP_PORT_CONCURRENCY,
        ping_parser: Optional[PingParser] = None,
        scanner: Optional[PortScanner] = None,
        ptr_timeout: float = 2.0
    ):
        self.ports = tuple(ports) if ports else tuple(parse_port_spec(SWEEP_DEFAULT_PORTS))
        self.workers = workers
        self.max_hosts = max_hosts
        self.ping_options = ping_options or PingOptions(
            count=SWEEP_PING_COUNT,
            interval=SWEEP_PING_INTERVAL,
            timeout=SWEEP_PING_TIMEOUT,
            size=PING_PACKET_SIZE
        )
        self.port_timeout = port_timeout
        self.port_concurrency = port_concurrency
        self.ping_parser = ping_parser
        self.scanner = scanner or PortScanner(
            large_scan_ceiling=SWEEP_LARGE_SCAN_CEILING,
            grab_banners=False
        )
        self.ptr_timeout = ptr_timeout

    def scan_host(self, ip: str, resolver: PTRResolver) -> HostInfo:
        """
        Ping, reverse resolve, then port scan a reachable host.

        Raises:
            SubprocessSpawnError: ping cannot be run at all
        """
        info = HostInfo(ip_address=ip)

        stats = detailed_ping(ip, self.ping_options, self.ping_parser)
        info.ping_stats = stats
        info.is_reachable = stats.reachable

        names = resolver.lookup(ip)
        if names:
            info.dns_names = names
            info.hostname = names[0]

        if info.is_reachable:
            summary = self.scanner.scan(PortScanRequest(
                target=ip,
                ports=self.ports,
                timeout=self.port_timeout,
                max_concurrent=self.port_concurrency
            ))
            info.open_ports = [result.port for result in summary.open_ports]

        logger.debug("%s: reachable=%s open=%s", ip, info.is_reachable, info.open_ports)
        return info

    def sweep(self, cidr: str, sink: Optional[SweepSink] = None) -> list[HostInfo]:
        """
        Sweep every host in the block.

        Args:
            cidr: Address block, e.g. 192.168.1.0/24
            sink: Presentation strategy fed as hosts complete

        Returns:
            HostInfo per host, ordered by address

        Raises:
            ArgumentError: malformed CIDR
            SubprocessSpawnError: ping cannot be run at all
        """
        sink = sink or SweepSink()
        hosts = expand_cidr(cidr, self.max_hosts)
        progress = SweepProgress(len(hosts))
        results: list[HostInfo] = []
        lock = threading.Lock()

        def task(ip: str, resolver: PTRResolver):
            info = self.scan_host(ip, resolver)
            with lock:
                results.append(info)
            sink.host_done(info)
            progress.increment()

        sink.start(cidr, progress)
        try:
            with PTRResolver(timeout=self.ptr_timeout, max_workers=self.workers) as resolver, \
                    ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="sweep") as pool:
                futures = [pool.submit(task, ip, resolver) for ip in hosts]
                done, _ = wait(futures, return_when=FIRST_EXCEPTION)
                failed = next((f for f in done if f.exception() is not None), None)
                if failed is not None:
                    # drop hosts not yet started
                    pool.shutdown(wait=False, cancel_futures=True)
                    failed.result()
        finally:
            sink.close()

        results.sort(key=lambda info: ipaddress.ip_address(info.ip_address))
        sink.finish(cidr, results)
        return results
