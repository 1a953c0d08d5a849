"""
Multi-type, multi-domain DNS lookups over dnspython
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Optional, Union

import dns.exception
import dns.resolver

from .config import DEFAULT_DNS_TIMEOUT, DNS_RECORD_TYPES
from .enrichment import is_ip, resolve_names
from .errors import ArgumentError
from .models import DNSResult, MultiDNSResult


logger = logging.getLogger(__name__)

# record type -> (rdtype, DNSResult field)
RECORD_FIELDS = {
    'a': ('A', 'ipv4'),
    'aaaa': ('AAAA', 'ipv6'),
    'cname': ('CNAME', 'cname'),
    'mx': ('MX', 'mx'),
    'ns': ('NS', 'ns'),
    'txt': ('TXT', 'txt'),
}


def parse_record_types(spec: str) -> tuple[str, ...]:
    """
    Parse "a,mx,txt" or "all" into record type names.

    Raises:
        ArgumentError: unknown or empty type token
    """
    types = []
    for token in spec.split(','):
        name = token.strip().lower()
        if name == 'all':
            return DNS_RECORD_TYPES
        if name not in RECORD_FIELDS:
            raise ArgumentError(
                f"Unknown record type: {token.strip() or spec}. "
                f"Use {', '.join(DNS_RECORD_TYPES)} or all",
                token=token
            )
        if name not in types:
            types.append(name)
    return tuple(types)


def _format_rdata(record_type: str, rdata) -> str:
    if record_type in ('a', 'aaaa'):
        return rdata.address
    if record_type == 'mx':
        return f"{rdata.exchange.to_text().rstrip('.')} priority={rdata.preference}"
    if record_type == 'txt':
        return b''.join(rdata.strings).decode(errors='replace')
    # cname, ns
    return rdata.target.to_text().rstrip('.')


class DNSLookup:
    """
    DNS resolver front end.

    Every record type of a domain is queried by its own worker and merged
    into one DNSResult; several domains are looked up side by side under
    an overall deadline.
    """

    def __init__(
        self,
        server: Optional[str] = None,
        timeout: float = DEFAULT_DNS_TIMEOUT,
        overall_timeout: Optional[float] = None
    ):
        self.timeout = timeout
        self.overall_timeout = overall_timeout or timeout + 5.0
        self.server = self._nameserver(server) if server else None

    def _nameserver(self, server: str) -> str:
        if is_ip(server):
            return server
        address = resolve_names([server], timeout=self.timeout).get(server)
        if address is None:
            raise ArgumentError(f"Cannot resolve DNS server: {server}", token=server)
        return address

    def _make_resolver(self) -> dns.resolver.Resolver:
        if self.server:
            resolver = dns.resolver.Resolver(configure=False)
            resolver.nameservers = [self.server]
        else:
            resolver = dns.resolver.Resolver()
        resolver.timeout = self.timeout
        resolver.lifetime = self.timeout
        return resolver

    def _query(self, resolver: dns.resolver.Resolver, domain: str,
               record_type: str) -> list[str]:
        """One record type; raises dnspython errors to the caller"""
        rdtype, _ = RECORD_FIELDS[record_type]
        answers = resolver.resolve(domain, rdtype)
        return [_format_rdata(record_type, rdata) for rdata in answers]

    def lookup(self, domain: str, types: tuple[str, ...] = DNS_RECORD_TYPES) -> DNSResult:
        """
        Query every requested type for one domain.

        Returns:
            DNSResult; a failing type leaves its list empty, and error is
            set only when every type failed
        """
        start = time.perf_counter()
        result = DNSResult(domain=domain)

        try:
            resolver = self._make_resolver()
        except dns.resolver.NoResolverConfiguration as e:
            result.error = f"No resolver configuration: {e}"
            return result

        lock = threading.Lock()
        failures: list[str] = []

        def task(record_type: str):
            _, attr = RECORD_FIELDS[record_type]
            try:
                values = self._query(resolver, domain, record_type)
            except dns.resolver.NoAnswer:
                return
            except dns.exception.DNSException as e:
                logger.debug("%s %s lookup failed: %s", domain, record_type, e)
                with lock:
                    failures.append(str(e) or e.__class__.__name__)
                return
            with lock:
                setattr(result, attr, values)

        executor = ThreadPoolExecutor(max_workers=len(types) or 1, thread_name_prefix="dns")
        try:
            futures = [executor.submit(task, record_type) for record_type in types]
            _, pending = wait(futures, timeout=self.timeout + 1.0)
            if pending:
                with lock:
                    failures.append(f"lookup timed out after {self.timeout:g}s")
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        with lock:
            if not result.has_records and len(failures) >= len(types):
                result.error = failures[0]

        result.resolve_time_ms = int((time.perf_counter() - start) * 1000)
        return result

    def lookup_many(self, domains: list[str],
                    types: tuple[str, ...] = DNS_RECORD_TYPES) -> MultiDNSResult:
        """Look up several domains concurrently, results in input order"""
        start = time.perf_counter()
        executor = ThreadPoolExecutor(max_workers=max(1, len(domains)), thread_name_prefix="dns-domain")
        try:
            futures = [executor.submit(self.lookup, domain, types) for domain in domains]
            wait(futures, timeout=self.overall_timeout)

            results = []
            for domain, future in zip(domains, futures):
                if future.done():
                    results.append(future.result())
                else:
                    results.append(DNSResult(
                        domain=domain,
                        error=f"Lookup did not finish within {self.overall_timeout:g}s"
                    ))
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        return MultiDNSResult(
            results=results,
            total_time_ms=int((time.perf_counter() - start) * 1000)
        )

    def run(self, domains: list[str],
            types: tuple[str, ...] = DNS_RECORD_TYPES) -> Union[DNSResult, MultiDNSResult]:
        if len(domains) == 1:
            return self.lookup(domains[0], types)
        return self.lookup_many(domains, types)
