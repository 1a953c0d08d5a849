"""
Traceroute orchestrator
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Optional, Union

from ..config import (
    DEFAULT_MAX_HOPS, DEFAULT_TRACE_TIMEOUT, TRACE_PROBES_PER_HOP, TRACE_PROBE_WAIT,
)
from ..enrichment import PTRResolver, resolve_names, is_ip
from ..errors import SubprocessSpawnError
from ..models import TracerouteResult, MultiTracerouteResult
from ..parsers import get_parser
from ..parsers.traceroute import TracerouteParser, TraceOptions
from ..process import run_tool


logger = logging.getLogger(__name__)


class Tracer:
    """
    Traceroute orchestrator.

    Runs the platform traceroute binary under a deadline and turns its
    transcript into ordered hops. Several targets are traced side by
    side, each under its own deadline, with a looser overall deadline on
    top so a few slow targets cannot hold up the rest.
    """

    def __init__(
        self,
        max_hops: int = DEFAULT_MAX_HOPS,
        timeout: float = DEFAULT_TRACE_TIMEOUT,
        numeric: bool = False,
        probes_per_hop: int = TRACE_PROBES_PER_HOP,
        overall_timeout: Optional[float] = None,
        resolve_timeout: float = 5.0,
        parser: Optional[TracerouteParser] = None
    ):
        self.max_hops = max_hops
        self.timeout = timeout
        self.numeric = numeric
        self.probes_per_hop = probes_per_hop
        self.overall_timeout = overall_timeout or timeout + 5.0
        self.resolve_timeout = resolve_timeout
        self.parser = parser or get_parser('traceroute')

    @property
    def options(self) -> TraceOptions:
        return TraceOptions(
            max_hops=self.max_hops,
            probes_per_hop=self.probes_per_hop,
            wait=TRACE_PROBE_WAIT,
            numeric=self.numeric
        )

    def resolve_targets(self, targets: list[str]) -> list[tuple[str, Optional[str]]]:
        """
        Pre-resolve hostnames to IPs in one concurrent pass.

        Returns:
            (address, name) per target; name is the original hostname when
            one was given, address falls back to it when resolution fails
        """
        resolved = resolve_names(targets, timeout=self.resolve_timeout)
        pairs = []
        for target in targets:
            if is_ip(target):
                pairs.append((target, None))
            else:
                pairs.append((resolved.get(target, target), target))
        return pairs

    def trace(self, target: str, name: Optional[str] = None) -> TracerouteResult:
        """
        Trace the route to one (already resolved) target.

        Returns:
            TracerouteResult; a failing command still yields whatever hops
            parsed, and only an empty transcript leaves hops empty
        """
        options = self.options
        result = TracerouteResult(target=target, target_name=name)
        start = time.perf_counter()

        try:
            tool = run_tool(self.parser.command(target, options), timeout=self.timeout)
        except SubprocessSpawnError as e:
            result.error = str(e)
            result.elapsed_ms = int((time.perf_counter() - start) * 1000)
            return result

        result.elapsed_ms = tool.elapsed_ms
        result.hops = self.parser.parse(tool.output, options)

        if is_ip(target):
            with PTRResolver(timeout=2.0, max_workers=1) as resolver:
                result.target_name = resolver.resolve(target) or name

        if not result.hops:
            detail = next((line.strip() for line in tool.output.splitlines() if line.strip()), '')
            result.error = "Traceroute produced no hop data"
            if detail:
                result.error += f": {detail}"
            logger.warning("%s: %s", target, result.error)
            return result

        if tool.timed_out:
            result.error = f"Traceroute timed out after {self.timeout:g}s"
        elif tool.returncode != 0:
            result.error = f"Traceroute error: exit status {tool.returncode}"

        # Heuristic: a live last hop counts even if it is not the target
        last = result.hops[-1]
        result.success = last.address == target or not last.timed_out
        return result

    def trace_many(self, targets: list[tuple[str, Optional[str]]]) -> MultiTracerouteResult:
        """Trace several targets concurrently, results in input order"""
        start = time.perf_counter()
        executor = ThreadPoolExecutor(max_workers=max(1, len(targets)), thread_name_prefix="trace")
        try:
            futures = [executor.submit(self.trace, address, name) for address, name in targets]
            wait(futures, timeout=self.overall_timeout)

            results = []
            for (address, name), future in zip(targets, futures):
                if future.done():
                    results.append(future.result())
                else:
                    results.append(TracerouteResult(
                        target=address,
                        target_name=name,
                        error=f"Traceroute did not finish within {self.overall_timeout:g}s"
                    ))
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        return MultiTracerouteResult(
            results=results,
            total_time_ms=int((time.perf_counter() - start) * 1000)
        )

    def run(self, targets: list[str]) -> Union[TracerouteResult, MultiTracerouteResult]:
        """Resolve, then trace one target or fan out over several"""
        pairs = self.resolve_targets(targets)
        if len(pairs) == 1:
            address, name = pairs[0]
            return self.trace(address, name)
        return self.trace_many(pairs)
