"""
Exceptions raised by netprobe

Only conditions that invalidate a whole request are exceptions.
Unreachable hosts, closed ports and partially parsed tool output are
reported as data on the result objects instead.
"""

from typing import Optional


class NetprobeError(Exception):
    """Base class for netprobe errors"""


class ArgumentError(NetprobeError, ValueError):
    """Malformed CIDR, port specification or positional argument"""

    def __init__(self, message: str, token: Optional[str] = None):
        super().__init__(message)
        self.token = token


class SubprocessSpawnError(NetprobeError):
    """An OS tool (ping, traceroute, tracert) could not be started"""

    def __init__(self, tool: str, reason: str):
        super().__init__(f"Cannot run '{tool}': {reason}")
        self.tool = tool
        self.reason = reason
