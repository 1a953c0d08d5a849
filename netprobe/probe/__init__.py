"""
Probe engines for netprobe
"""

from .base import BaseProbe
from .icmp import PingProbe, detailed_ping
from .tcp import TCPProbe
from .udp import UDPProbe
from .prober import ReachabilityProber
from .tracer import Tracer

__all__ = [
    'BaseProbe', 'PingProbe', 'TCPProbe', 'UDPProbe',
    'ReachabilityProber', 'Tracer', 'detailed_ping',
]
