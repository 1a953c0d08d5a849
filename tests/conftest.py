#!/usr/bin/env python3
"""
Pytest configuration and fixtures for netprobe tests
"""

import socket
import threading

import pytest


SSH_BANNER = b"SSH-2.0-OpenSSH_9.6\r\n"


LINUX_PING_OK = """\
PING 127.0.0.1 (127.0.0.1) 56(84) bytes of data.
64 bytes from 127.0.0.1: icmp_seq=1 ttl=64 time=0.045 ms
64 bytes from 127.0.0.1: icmp_seq=2 ttl=64 time=0.060 ms
64 bytes from 127.0.0.1: icmp_seq=3 ttl=64 time=0.050 ms

--- 127.0.0.1 ping statistics ---
3 packets transmitted, 3 received, 0% packet loss, time 2041ms
rtt min/avg/max/mdev = 0.045/0.051/0.060/0.006 ms
"""

LINUX_PING_LOSS = """\
PING 203.0.113.1 (203.0.113.1) 56(84) bytes of data.

--- 203.0.113.1 ping statistics ---
4 packets transmitted, 0 received, 100% packet loss, time 3062ms
"""

LINUX_PING_ERRORS = """\
PING 192.168.1.250 (192.168.1.250) 56(84) bytes of data.
From 192.168.1.10 icmp_seq=1 Destination Host Unreachable

--- 192.168.1.250 ping statistics ---
4 packets transmitted, 0 received, +4 errors, 100% packet loss, time 3004ms
"""

# killed at the deadline before the summary was printed
LINUX_PING_NO_SUMMARY = """\
PING 10.0.0.1 (10.0.0.1) 56(84) bytes of data.
64 bytes from 10.0.0.1: icmp_seq=1 ttl=64 time=10.0 ms
64 bytes from 10.0.0.1: icmp_seq=3 ttl=64 time=14.0 ms
"""

DARWIN_PING_OK = """\
PING 127.0.0.1 (127.0.0.1): 56 data bytes
64 bytes from 127.0.0.1: icmp_seq=0 ttl=64 time=0.041 ms
64 bytes from 127.0.0.1: icmp_seq=1 ttl=64 time=0.102 ms

--- 127.0.0.1 ping statistics ---
2 packets transmitted, 2 packets received, 0.0% packet loss
round-trip min/avg/max/stddev = 0.041/0.071/0.102/0.031 ms
"""

WINDOWS_PING_OK = """\
Pinging 127.0.0.1 with 32 bytes of data:
Reply from 127.0.0.1: bytes=32 time<1ms TTL=128
Reply from 127.0.0.1: bytes=32 time=2ms TTL=128
Reply from 127.0.0.1: bytes=32 time=1ms TTL=128

Ping statistics for 127.0.0.1:
    Packets: Sent = 3, Received = 3, Lost = 0 (0% loss),
Approximate round trip times in milli-seconds:
    Minimum = 0ms, Maximum = 2ms, Average = 1ms
"""

WINDOWS_PING_UNREACHABLE = """\
Pinging 192.168.1.5 with 32 bytes of data:
Reply from 192.168.1.10: Destination host unreachable.
Reply from 192.168.1.10: Destination host unreachable.
Reply from 192.168.1.10: Destination host unreachable.

Ping statistics for 192.168.1.5:
    Packets: Sent = 3, Received = 3, Lost = 0 (0% loss),
"""

LINUX_TRACEROUTE = """\
traceroute to 8.8.8.8 (8.8.8.8), 30 hops max, 60 byte packets
 1  gateway (192.168.1.1)  1.123 ms  0.809 ms  0.773 ms
 2  10.0.0.1  10.201 ms * 9.482 ms
 3  * * *
 5  dns.google (8.8.8.8)  12.001 ms  11.950 ms  12.300 ms
"""

LINUX_TRACEROUTE_LOCAL = """\
traceroute to 127.0.0.1 (127.0.0.1), 5 hops max, 60 byte packets
 1  127.0.0.1  0.030 ms  0.008 ms  0.007 ms
"""

LINUX_TRACEROUTE_STALLED = """\
traceroute to 198.51.100.7 (198.51.100.7), 5 hops max, 60 byte packets
 1  192.168.1.1  0.512 ms  0.498 ms  0.470 ms
 2  * * *
"""

WINDOWS_TRACERT = """\

Tracing route to dns.google [8.8.8.8]
over a maximum of 30 hops:

  1    <1 ms    <1 ms    <1 ms  192.168.1.1
  2     *        *        *     Request timed out.
  3    12 ms    11 ms    13 ms  dns.google [8.8.8.8]

Trace complete.
"""


class LoopbackServer:
    """TCP listener on 127.0.0.1 that optionally greets each client"""

    def __init__(self, banner: bytes = b""):
        self.banner = banner
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.sock.bind(("127.0.0.1", 0))
        self.sock.listen(64)
        self.sock.settimeout(0.1)
        self.port = self.sock.getsockname()[1]
        self._connections = []
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._serve, daemon=True)

    def _serve(self):
        while not self._stop.is_set():
            try:
                conn, _ = self.sock.accept()
            except socket.timeout:
                continue
            except OSError:
                break
            if self.banner:
                try:
                    conn.sendall(self.banner)
                except OSError:
                    pass
            self._connections.append(conn)

    def start(self):
        self._thread.start()
        return self

    def stop(self):
        self._stop.set()
        self._thread.join(timeout=2)
        for conn in self._connections:
            conn.close()
        self.sock.close()


@pytest.fixture
def banner_server():
    """Loopback listener that sends an SSH banner on connect"""
    server = LoopbackServer(SSH_BANNER).start()
    yield server
    server.stop()


@pytest.fixture
def silent_server():
    """Loopback listener that accepts and never speaks"""
    server = LoopbackServer().start()
    yield server
    server.stop()


@pytest.fixture
def closed_port():
    """A loopback port nothing is listening on"""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


@pytest.fixture
def transcripts():
    """Canned OS tool output, by name"""
    return {
        "linux_ping_ok": LINUX_PING_OK,
        "linux_ping_loss": LINUX_PING_LOSS,
        "linux_ping_errors": LINUX_PING_ERRORS,
        "linux_ping_no_summary": LINUX_PING_NO_SUMMARY,
        "darwin_ping_ok": DARWIN_PING_OK,
        "windows_ping_ok": WINDOWS_PING_OK,
        "windows_ping_unreachable": WINDOWS_PING_UNREACHABLE,
        "linux_traceroute": LINUX_TRACEROUTE,
        "linux_traceroute_local": LINUX_TRACEROUTE_LOCAL,
        "linux_traceroute_stalled": LINUX_TRACEROUTE_STALLED,
        "windows_tracert": WINDOWS_TRACERT,
    }
