"""
Concurrent TCP connect port scanner
"""

import logging
import re
import socket
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from .config import (
    SCAN_CHUNK_SIZE, LARGE_SCAN_THRESHOLD, LARGE_SCAN_CEILING,
    BANNER_READ_TIMEOUT, BANNER_READ_BYTES, BANNER_MAX_CHARS,
)
from .errors import ArgumentError
from .models import PortResult, PortScanRequest, ScanSummary
from .ports import service_name


logger = logging.getLogger(__name__)

_UNPRINTABLE = re.compile(r"[^\x09\x0a\x0d\x20-\x7e]")


def clean_banner(data: bytes, max_chars: int = BANNER_MAX_CHARS) -> Optional[str]:
    """Printable, trimmed, length-capped text from raw banner bytes"""
    text = _UNPRINTABLE.sub("", data.decode(errors="ignore")).strip()
    if not text:
        return None
    if len(text) > max_chars:
        return text[:max_chars - 3] + "..."
    return text


class PortScanner:
    """
    TCP connect scanner.

    Ports are dialed in fixed-size chunks. Inside a chunk every port gets
    its own task, gated by a counting semaphore sized to the concurrency
    ceiling; the next chunk starts only when the previous one is done.
    Open ports get one short best-effort read to capture a banner.
    """

    def __init__(
        self,
        chunk_size: int = SCAN_CHUNK_SIZE,
        large_scan_threshold: int = LARGE_SCAN_THRESHOLD,
        large_scan_ceiling: int = LARGE_SCAN_CEILING,
        grab_banners: bool = True,
        banner_timeout: float = BANNER_READ_TIMEOUT
    ):
        self.chunk_size = chunk_size
        self.large_scan_threshold = large_scan_threshold
        self.large_scan_ceiling = large_scan_ceiling
        self.grab_banners = grab_banners
        self.banner_timeout = banner_timeout

    def effective_concurrency(self, port_count: int, max_concurrent: int) -> int:
        """Concurrency ceiling for a scan of port_count ports"""
        concurrency = max(1, max_concurrent)
        if port_count > self.large_scan_threshold and concurrency > self.large_scan_ceiling:
            logger.debug(
                "clamping concurrency %d -> %d for %d ports",
                concurrency, self.large_scan_ceiling, port_count
            )
            concurrency = self.large_scan_ceiling
        return min(concurrency, max(1, port_count))

    def _read_banner(self, sock: socket.socket) -> Optional[str]:
        """Read whatever the service sends unprompted, within a short deadline"""
        sock.settimeout(self.banner_timeout)
        try:
            data = sock.recv(BANNER_READ_BYTES)
        except OSError:
            return None
        return clean_banner(data) if data else None

    def scan_port(self, address: str, port: int, timeout: float) -> PortResult:
        """Dial one port"""
        start = time.perf_counter()

        try:
            sock = socket.create_connection((address, port), timeout=timeout)
        except OSError:
            latency = round((time.perf_counter() - start) * 1000, 2)
            return PortResult(port=port, open=False, latency_ms=latency)

        latency = round((time.perf_counter() - start) * 1000, 2)
        with sock:
            banner = self._read_banner(sock) if self.grab_banners else None

        return PortResult(
            port=port,
            open=True,
            latency_ms=latency,
            service=service_name(port),
            banner=banner
        )

    def _resolve(self, target: str) -> Optional[str]:
        try:
            return socket.getaddrinfo(target, None, type=socket.SOCK_STREAM)[0][4][0]
        except (socket.gaierror, UnicodeError) as e:
            logger.warning("cannot resolve %s: %s", target, e)
            return None

    def scan(self, request: PortScanRequest) -> ScanSummary:
        """
        Scan every port in the request.

        Returns:
            ScanSummary with open and closed lists sorted by port

        Raises:
            ArgumentError: the request has no ports
        """
        ports = list(dict.fromkeys(request.ports))
        if not ports:
            raise ArgumentError("No valid ports specified")

        start = time.perf_counter()
        summary = ScanSummary(target=request.target, ports_scanned=len(ports))

        address = self._resolve(request.target)
        if address is None:
            summary.closed_ports = [PortResult(port=p, open=False) for p in sorted(ports)]
            summary.scan_time_ms = int((time.perf_counter() - start) * 1000)
            return summary

        concurrency = self.effective_concurrency(len(ports), request.max_concurrent)
        semaphore = threading.BoundedSemaphore(concurrency)
        lock = threading.Lock()

        def task(port: int):
            try:
                result = self.scan_port(address, port, request.timeout)
                with lock:
                    if result.open:
                        summary.open_ports.append(result)
                    else:
                        summary.closed_ports.append(result)
            finally:
                semaphore.release()

        with ThreadPoolExecutor(max_workers=concurrency, thread_name_prefix="portscan") as pool:
            for offset in range(0, len(ports), self.chunk_size):
                chunk = ports[offset:offset + self.chunk_size]
                futures = []
                for port in chunk:
                    semaphore.acquire()
                    futures.append(pool.submit(task, port))

                for future in futures:
                    future.result()

                logger.debug(
                    "%s: chunk %d-%d done, %d open so far",
                    request.target, chunk[0], chunk[-1], len(summary.open_ports)
                )

        summary.open_ports.sort(key=lambda r: r.port)
        summary.closed_ports.sort(key=lambda r: r.port)
        summary.scan_time_ms = int((time.perf_counter() - start) * 1000)
        return summary
