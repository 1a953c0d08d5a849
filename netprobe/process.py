"""
Deadline-bound wrapper around OS network tools (ping, traceroute, tracert)
"""

import logging
import subprocess
import sys
import time
from dataclasses import dataclass
from typing import Optional

from .errors import SubprocessSpawnError


logger = logging.getLogger(__name__)


def platform_key(platform: Optional[str] = None) -> str:
    """Normalize sys.platform into 'windows', 'darwin' or 'linux'"""
    platform = platform or sys.platform
    if platform.startswith('win'):
        return 'windows'
    if platform == 'darwin':
        return 'darwin'
    return 'linux'


@dataclass
class ToolResult:
    """Captured transcript of one tool run"""
    returncode: Optional[int]
    output: str
    elapsed_ms: int
    timed_out: bool = False

    @property
    def success(self) -> bool:
        return self.returncode == 0 and not self.timed_out


def run_tool(cmd: list[str], timeout: float) -> ToolResult:
    """
    Run an OS tool with stdout and stderr merged, killing it at the deadline.

    A nonzero exit or an expired deadline is returned as data together with
    whatever the tool printed so far, since partial transcripts still parse.

    Raises:
        SubprocessSpawnError: the binary is missing or not executable
    """
    logger.debug("running %s (deadline %.1fs)", ' '.join(cmd), timeout)
    start = time.perf_counter()

    try:
        completed = subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            stdin=subprocess.DEVNULL,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        elapsed = int((time.perf_counter() - start) * 1000)
        logger.debug("%s killed after %dms", cmd[0], elapsed)
        return ToolResult(
            returncode=None,
            output=_decode(e.output),
            elapsed_ms=elapsed,
            timed_out=True
        )
    except (FileNotFoundError, PermissionError) as e:
        logger.warning("cannot start %s: %s", cmd[0], e)
        raise SubprocessSpawnError(cmd[0], e.strerror or str(e)) from e
    except OSError as e:
        logger.warning("cannot start %s: %s", cmd[0], e)
        raise SubprocessSpawnError(cmd[0], str(e)) from e

    elapsed = int((time.perf_counter() - start) * 1000)
    return ToolResult(
        returncode=completed.returncode,
        output=_decode(completed.stdout),
        elapsed_ms=elapsed
    )


def _decode(data) -> str:
    if not data:
        return ''
    if isinstance(data, str):
        return data
    return data.decode(errors='replace')
