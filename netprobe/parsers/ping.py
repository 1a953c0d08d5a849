"""
Ping transcript parsers

Linux (iputils, busybox), macOS and Windows print the same facts in
different shapes. Each parser reads the summary lines first and falls
back to the per-reply samples when the summary is missing or cut off.
"""

import logging
import re
from typing import Optional

from ..models import PingOptions, PingStats
from .base import ToolParser


logger = logging.getLogger(__name__)


def calculate_jitter(samples: list[float]) -> float:
    """Mean absolute difference between consecutive samples"""
    if len(samples) < 2:
        return 0.0
    total = sum(abs(b - a) for a, b in zip(samples, samples[1:]))
    return total / (len(samples) - 1)


class PingParser(ToolParser):
    """
    Shared parsing logic for ping transcripts.

    Subclasses set the regular expressions and build the command line.
    """

    tool = 'ping'

    # packets sent, packets received, loss %
    SUMMARY_RE: re.Pattern = re.compile(
        r'(\d+) packets transmitted, (\d+) (?:packets )?received,'
        r'(?: \+\d+ \w+,)*\s*([\d.]+)% packet loss'
    )
    # min, avg, max, optional mdev/stddev
    RTT_RE: re.Pattern = re.compile(
        r'(?:rtt|round-trip) min/avg/max(?:/(?:mdev|stddev))? = '
        r'([\d.]+)/([\d.]+)/([\d.]+)(?:/([\d.]+))? ms'
    )
    SAMPLE_RE: re.Pattern = re.compile(r'time[=<]\s*([\d.]+)\s*ms')

    def _match_summary(self, output: str) -> Optional[tuple[int, int, float]]:
        match = self.SUMMARY_RE.search(output)
        if not match:
            return None
        return int(match.group(1)), int(match.group(2)), float(match.group(3))

    def _match_rtt(self, output: str) -> Optional[tuple[float, float, float, Optional[float]]]:
        match = self.RTT_RE.search(output)
        if not match:
            return None
        mdev = float(match.group(4)) if match.group(4) else None
        return float(match.group(1)), float(match.group(2)), float(match.group(3)), mdev

    def _samples(self, output: str) -> list[float]:
        return [float(s) for s in self.SAMPLE_RE.findall(output)]

    def parse(self, output: str, options: Optional[PingOptions] = None) -> PingStats:
        options = options or PingOptions()
        stats = PingStats(packets_sent=options.count)

        summary = self._match_summary(output)
        rtt = self._match_rtt(output)
        samples = self._samples(output)

        if summary:
            stats.packets_sent, stats.packets_received, stats.packet_loss = summary
        elif samples:
            # summary line missing (killed at deadline or odd build), derive from replies
            logger.debug("ping summary not found, using %d reply samples", len(samples))
            stats.packets_sent = max(stats.packets_sent, len(samples))
            stats.packets_received = len(samples)
            stats.packet_loss = (
                (stats.packets_sent - stats.packets_received) / stats.packets_sent * 100
            )
        elif stats.packets_sent:
            stats.packet_loss = 100.0

        if rtt:
            stats.min_latency, stats.avg_latency, stats.max_latency, mdev = rtt
            if mdev is not None:
                stats.jitter = mdev
        elif samples:
            stats.min_latency = min(samples)
            stats.max_latency = max(samples)
            stats.avg_latency = sum(samples) / len(samples)

        if len(samples) >= 2:
            stats.jitter = calculate_jitter(samples)

        stats.samples = samples
        return stats


class LinuxPingParser(PingParser):
    """iputils and busybox ping"""

    platform = 'linux'

    def command(self, target: str, options: PingOptions) -> list[str]:
        return [
            'ping',
            '-c', str(options.count),
            '-W', str(max(1, int(options.timeout))),
            '-i', f'{options.interval:g}',
            '-s', str(options.size),
            target,
        ]


class DarwinPingParser(PingParser):
    """BSD ping as shipped with macOS"""

    platform = 'darwin'

    def command(self, target: str, options: PingOptions) -> list[str]:
        return [
            'ping',
            '-c', str(options.count),
            '-W', str(max(1, int(options.timeout * 1000))),  # milliseconds on macOS
            '-i', f'{options.interval:g}',
            '-s', str(options.size),
            target,
        ]


class WindowsPingParser(PingParser):
    """
    Windows ping.exe

    "Reply from ...: Destination host unreachable." is counted as received
    in the Windows summary; only replies carrying a time are counted here.
    """

    platform = 'windows'

    SUMMARY_RE = re.compile(
        r'Sent = (\d+), Received = (\d+), Lost = \d+ \(([\d.]+)% loss\)'
    )
    RTT_RE = re.compile(
        r'Minimum = ([\d.]+)ms, Maximum = ([\d.]+)ms, Average = ([\d.]+)ms'
    )

    def _match_rtt(self, output: str) -> Optional[tuple[float, float, float, Optional[float]]]:
        match = self.RTT_RE.search(output)
        if not match:
            return None
        # Windows prints min, max, avg
        return float(match.group(1)), float(match.group(3)), float(match.group(2)), None

    def parse(self, output: str, options: Optional[PingOptions] = None) -> PingStats:
        stats = super().parse(output, options)
        replies = len(stats.samples)
        if stats.packets_received > replies:
            stats.packets_received = replies
            if stats.packets_sent:
                stats.packet_loss = (
                    (stats.packets_sent - replies) / stats.packets_sent * 100
                )
        return stats

    def command(self, target: str, options: PingOptions) -> list[str]:
        return [
            'ping',
            '-n', str(options.count),
            '-w', str(max(1, int(options.timeout * 1000))),
            '-l', str(options.size),
            target,
        ]
