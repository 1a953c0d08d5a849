"""
Traceroute transcript parsers

    traceroute to 8.8.8.8 (8.8.8.8), 30 hops max, 60 byte packets
     1  gateway (192.168.1.1)  1.123 ms  0.809 ms  0.773 ms
     2  10.0.0.1  10.201 ms * 9.482 ms
     3  * * *

    Tracing route to dns.google [8.8.8.8]
      1    <1 ms    <1 ms    <1 ms  192.168.1.1
      2     *        *        *     Request timed out.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from ..enrichment.ptr_resolver import is_ip
from ..models import HopResult
from .base import ToolParser


logger = logging.getLogger(__name__)


@dataclass
class TraceOptions:
    """Traceroute invocation parameters"""
    max_hops: int = 30
    probes_per_hop: int = 3
    wait: int = 1
    numeric: bool = False


class TracerouteParser(ToolParser):
    """
    Shared hop-line parsing.

    Every line that starts with a hop number becomes one HopResult; the
    sequence is then made contiguous so a hop the tool never printed is
    still present as a timed-out hop.
    """

    tool = 'traceroute'

    HOP_LINE_RE = re.compile(r'^\s*(\d+)\s+(.*)$')
    TOKEN_RE = re.compile(
        r'(?P<star>\*)'
        r'|<?(?P<rtt>\d+(?:\.\d+)?)\s*ms'
        r'|(?P<host>[^\s()\[\]]+)\s+[(\[](?P<ip>[^)\]]+)[)\]]'
        r'|(?P<note>![A-Za-z0-9]*)'
        r'|(?P<addr>[^\s()\[\]*!]+)'
    )
    NOISE: tuple[str, ...] = ()

    def parse_line(self, line: str, probes_per_hop: int = 3) -> Optional[HopResult]:
        match = self.HOP_LINE_RE.match(line)
        if not match:
            return None

        rest = match.group(2)
        for noise in self.NOISE:
            rest = rest.replace(noise, ' ')

        hop = HopResult(hop=int(match.group(1)))
        slots = 0

        for token in self.TOKEN_RE.finditer(rest):
            if token.group('star'):
                slots += 1
            elif token.group('rtt'):
                slots += 1
                hop.rtts.append(float(token.group('rtt')))
            elif token.group('ip'):
                # first responder wins, later ones are load-balanced siblings
                if hop.address is None:
                    hop.address = token.group('ip')
                    host = token.group('host')
                    if host != hop.address:
                        hop.hostname = host
            elif token.group('addr'):
                value = token.group('addr')
                if hop.address is None and hop.hostname is None:
                    if is_ip(value):
                        hop.address = value
                    else:
                        hop.hostname = value

        expected = max(slots, probes_per_hop, 1)
        received = len(hop.rtts)
        hop.timed_out = received == 0
        hop.loss_rate = round((expected - received) / expected * 100, 2)
        return hop

    def parse(self, output: str, options: Optional[TraceOptions] = None) -> list[HopResult]:
        options = options or TraceOptions()
        hops: list[HopResult] = []

        for line in output.splitlines():
            if not line.strip():
                continue
            hop = self.parse_line(line, options.probes_per_hop)
            if hop is None:
                continue

            if hops and hop.hop <= hops[-1].hop:
                logger.debug("ignoring out-of-sequence hop line: %s", line.strip())
                continue

            next_index = hops[-1].hop + 1 if hops else 1
            for missing in range(next_index, hop.hop):
                hops.append(HopResult(hop=missing, timed_out=True, loss_rate=100.0))
            hops.append(hop)

        return hops


class LinuxTracerouteParser(TracerouteParser):
    """Linux traceroute (modern traceroute package, inetutils)"""

    platform = 'linux'

    def command(self, target: str, options: TraceOptions) -> list[str]:
        cmd = [
            'traceroute',
            '-m', str(options.max_hops),
            '-q', str(options.probes_per_hop),
            '-w', str(options.wait),
        ]
        if options.numeric:
            cmd.append('-n')
        cmd.append(target)
        return cmd


class DarwinTracerouteParser(TracerouteParser):
    """BSD traceroute as shipped with macOS"""

    platform = 'darwin'

    def command(self, target: str, options: TraceOptions) -> list[str]:
        cmd = [
            'traceroute',
            '-m', str(options.max_hops),
            '-q', str(options.probes_per_hop),
        ]
        if options.numeric:
            cmd.append('-n')
        cmd.append(target)
        return cmd


class WindowsTracerouteParser(TracerouteParser):
    """Windows tracert.exe (always three probes per hop)"""

    platform = 'windows'

    NOISE = ('Request timed out.', 'Destination host unreachable.', 'Destination net unreachable.')

    def command(self, target: str, options: TraceOptions) -> list[str]:
        cmd = ['tracert', '-h', str(options.max_hops)]
        if options.numeric:
            cmd.append('-d')
        cmd.append(target)
        return cmd
