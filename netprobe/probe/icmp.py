"""
ICMP echo probe driven by the OS ping utility

Raw ICMP sockets need elevated privileges; the system ping binary does
not, so every platform goes through it and a transcript parser.
"""

import logging
import time
from typing import Optional

from ..config import (
    PING_COUNT, PING_INTERVAL, PING_PACKET_SIZE, PING_DEADLINE_SHARE,
)
from ..errors import SubprocessSpawnError
from ..models import PingOptions, PingStats, ProbeResult
from ..parsers import get_parser
from ..parsers.ping import PingParser
from ..process import run_tool
from .base import BaseProbe
from .tcp import elapsed_ms


logger = logging.getLogger(__name__)


def ping_deadline(options: PingOptions) -> float:
    """Upper bound for a whole ping run with these options"""
    return options.count * options.interval + options.timeout + 1.0


def detailed_ping(target: str, options: PingOptions,
                  parser: Optional[PingParser] = None,
                  deadline: Optional[float] = None) -> PingStats:
    """
    Run the OS ping utility and parse its statistics.

    A nonzero exit (100% loss) or a run killed at the deadline still goes
    through the parser, since partial transcripts carry usable samples.

    Raises:
        SubprocessSpawnError: ping is missing or not executable
    """
    parser = parser or get_parser('ping')
    deadline = deadline or ping_deadline(options)

    result = run_tool(parser.command(target, options), timeout=deadline)
    stats = parser.parse(result.output, options)
    logger.debug("ping %s: %d/%d received", target, stats.packets_received, stats.packets_sent)

    if result.timed_out:
        stats.error_message = f"Ping timed out after {deadline:g}s"
    elif result.returncode != 0:
        stats.error_message = f"Ping failed: exit status {result.returncode}"

    return stats


class PingProbe(BaseProbe):
    """ICMP reachability via the system ping binary"""

    mode = 'ping'

    def __init__(self, timeout: float = 5.0,
                 count: int = PING_COUNT,
                 interval: float = PING_INTERVAL,
                 size: int = PING_PACKET_SIZE,
                 parser: Optional[PingParser] = None):
        super().__init__(timeout)
        self.options = PingOptions(count=count, interval=interval, timeout=timeout, size=size)
        self.parser = parser

    def probe(self, target: str, port: Optional[int] = None) -> ProbeResult:
        """Ping the target, staying inside the probe timeout"""
        deadline = max(self.timeout * PING_DEADLINE_SHARE, 0.5)
        start = time.perf_counter()

        try:
            stats = detailed_ping(target, self.options, self.parser, deadline=deadline)
        except SubprocessSpawnError as e:
            return ProbeResult(
                success=False,
                message=str(e),
                target=target,
                mode=self.mode
            )

        elapsed = elapsed_ms(start)
        if not stats.reachable:
            message = f"Could not reach {target}"
            if stats.error_message:
                message += f" ({stats.error_message})"
            return ProbeResult(
                success=False,
                message=message,
                target=target,
                mode=self.mode,
                packet_loss=stats.packet_loss
            )

        return ProbeResult(
            success=True,
            message=f"Successfully reached {target} in {elapsed:.0f}ms",
            target=target,
            mode=self.mode,
            response_time_ms=elapsed,
            packet_loss=stats.packet_loss,
            rtt_min=stats.min_latency,
            rtt_avg=stats.avg_latency,
            rtt_max=stats.max_latency,
            jitter=stats.jitter
        )
