"""
Reverse (PTR) and forward name resolution with per-lookup deadlines
"""

import ipaddress
import logging
import socket
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout, wait
from typing import Optional


logger = logging.getLogger(__name__)


class PTRResolver:
    """
    Thread-pooled PTR resolver.

    The system resolver call has no timeout of its own, so each lookup
    runs in a pool worker and is given up on after the deadline.
    """

    def __init__(self, timeout: float = 2.0, max_workers: int = 10):
        self.timeout = timeout
        self.max_workers = max_workers
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="ptr")

    def _resolve_sync(self, ip: str) -> list[str]:
        """Synchronous PTR lookup"""
        try:
            hostname, aliases, _ = socket.gethostbyaddr(ip)
        except (socket.herror, socket.gaierror, socket.timeout, OSError):
            return []
        names = [hostname] + [a for a in aliases if a != hostname]
        return [n.rstrip('.') for n in names if n]

    def lookup(self, ip: str) -> list[str]:
        """
        All names for an IP, primary first.

        Returns:
            Names, or an empty list when there is no PTR record or the
            lookup ran past the deadline
        """
        if not ip:
            return []

        future = self._executor.submit(self._resolve_sync, ip)
        try:
            return future.result(timeout=self.timeout)
        except FutureTimeout:
            logger.debug("PTR lookup for %s timed out", ip)
            return []

    def resolve(self, ip: str) -> Optional[str]:
        """Primary hostname for an IP, or None"""
        names = self.lookup(ip)
        return names[0] if names else None

    def close(self):
        """Shutdown thread pool"""
        self._executor.shutdown(wait=False, cancel_futures=True)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def is_ip(value: str) -> bool:
    try:
        ipaddress.ip_address(value)
        return True
    except ValueError:
        return False


def _forward_sync(name: str) -> Optional[str]:
    try:
        return socket.getaddrinfo(name, None, type=socket.SOCK_STREAM)[0][4][0]
    except (socket.gaierror, UnicodeError, OSError):
        return None


def resolve_names(names: list[str], timeout: float = 5.0) -> dict[str, str]:
    """
    Resolve hostnames to their first address, one worker per name.

    IP literals are skipped; names that fail or run past the deadline are
    left out of the returned mapping.
    """
    pending = [n for n in dict.fromkeys(names) if n and not is_ip(n)]
    if not pending:
        return {}

    executor = ThreadPoolExecutor(max_workers=len(pending), thread_name_prefix="resolve")
    try:
        futures = {name: executor.submit(_forward_sync, name) for name in pending}
        wait(futures.values(), timeout=timeout)

        resolved: dict[str, str] = {}
        for name, future in futures.items():
            address = future.result() if future.done() else None
            if address:
                resolved[name] = address
            else:
                logger.debug("cannot resolve %s", name)
        return resolved
    finally:
        executor.shutdown(wait=False, cancel_futures=True)
