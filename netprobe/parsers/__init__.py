"""
Transcript parsers for OS network tools, keyed by (platform, tool)
"""

from typing import Optional

from ..process import platform_key
from .base import ToolParser
from .ping import LinuxPingParser, DarwinPingParser, WindowsPingParser
from .traceroute import LinuxTracerouteParser, DarwinTracerouteParser, WindowsTracerouteParser


PARSERS: dict[tuple[str, str], type[ToolParser]] = {
    ('linux', 'ping'): LinuxPingParser,
    ('darwin', 'ping'): DarwinPingParser,
    ('windows', 'ping'): WindowsPingParser,
    ('linux', 'traceroute'): LinuxTracerouteParser,
    ('darwin', 'traceroute'): DarwinTracerouteParser,
    ('windows', 'traceroute'): WindowsTracerouteParser,
}


def get_parser(tool: str, platform: Optional[str] = None) -> ToolParser:
    """
    Create the parser for a tool on the given (or current) platform.

    Args:
        tool: 'ping' or 'traceroute'
        platform: sys.platform-style name, defaults to the running OS
    """
    key = (platform_key(platform), tool)
    parser_class = PARSERS.get(key)
    if not parser_class:
        raise ValueError(
            f"No parser for {tool} on {key[0]}. "
            f"Supported: {', '.join(f'{p}/{t}' for p, t in PARSERS)}"
        )
    return parser_class()


__all__ = [
    'ToolParser', 'PARSERS', 'get_parser',
    'LinuxPingParser', 'DarwinPingParser', 'WindowsPingParser',
    'LinuxTracerouteParser', 'DarwinTracerouteParser', 'WindowsTracerouteParser',
]
