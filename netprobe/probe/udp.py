"""
UDP probe implementation
"""

import socket
import time
from typing import Optional
from ..config import UDP_PAYLOAD
from ..models import ProbeResult
from .base import BaseProbe
from .tcp import describe_socket_error, elapsed_ms


class UDPProbe(BaseProbe):
    """
    Best-effort UDP probe.

    Opens a connectionless socket and writes one datagram. Success only
    means the local stack accepted the write: UDP gives no handshake, so
    the remote side may never have seen it. Results are always flagged
    best_effort and never count as proof of reachability.
    """

    mode = 'udp'

    def __init__(self, timeout: float = 5.0, payload: bytes = UDP_PAYLOAD):
        super().__init__(timeout)
        self.payload = payload

    def probe(self, target: str, port: Optional[int] = None) -> ProbeResult:
        """Write one datagram to target:port"""
        start = time.perf_counter()

        try:
            family, _, _, _, address = socket.getaddrinfo(
                target, port, type=socket.SOCK_DGRAM
            )[0]
            with socket.socket(family, socket.SOCK_DGRAM) as sock:
                sock.settimeout(self.timeout)
                sock.connect(address)
                sock.send(self.payload)
        except OSError as e:
            return ProbeResult(
                success=False,
                message=f"Could not send UDP datagram to {target}:{port} - {describe_socket_error(e)}",
                target=target,
                mode=self.mode,
                port=port,
                best_effort=True
            )

        return ProbeResult(
            success=True,
            message=(
                f"UDP datagram to {target}:{port} accepted by local stack "
                f"(best effort, delivery not confirmed)"
            ),
            target=target,
            mode=self.mode,
            port=port,
            response_time_ms=elapsed_ms(start),
            best_effort=True
        )
