"""
TCP connect probe implementation
"""

import socket
import time
from typing import Optional
from ..models import ProbeResult
from .base import BaseProbe


def elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


class TCPProbe(BaseProbe):
    """
    TCP connect probe.

    A completed three-way handshake means the port is open. Refusals,
    timeouts and resolution errors come back as failed results.
    """

    mode = 'tcp'

    def probe(self, target: str, port: Optional[int] = None) -> ProbeResult:
        """Connect to target:port within the timeout"""
        start = time.perf_counter()

        try:
            with socket.create_connection((target, port), timeout=self.timeout):
                latency = elapsed_ms(start)
        except socket.timeout:
            return ProbeResult(
                success=False,
                message=f"Could not connect to {target}:{port} - timed out after {self.timeout:g}s",
                target=target,
                mode=self.mode,
                port=port
            )
        except OSError as e:
            return ProbeResult(
                success=False,
                message=f"Could not connect to {target}:{port} - {describe_socket_error(e)}",
                target=target,
                mode=self.mode,
                port=port
            )

        return ProbeResult(
            success=True,
            message=f"Successfully connected to {target}:{port} in {latency:.0f}ms",
            target=target,
            mode=self.mode,
            port=port,
            response_time_ms=latency
        )


def describe_socket_error(error: OSError) -> str:
    """Short human-readable reason for a failed dial"""
    if isinstance(error, socket.gaierror):
        return f"cannot resolve host ({error.strerror or error})"
    if isinstance(error, ConnectionRefusedError):
        return "connection refused"
    return error.strerror or str(error)
