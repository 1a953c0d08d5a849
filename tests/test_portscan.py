"""
Tests for the TCP connect port scanner against loopback listeners
"""

import threading
import time

import pytest

from netprobe.errors import ArgumentError
from netprobe.models import PortResult, PortScanRequest
from netprobe.portscan import PortScanner, clean_banner


class TestCleanBanner:

    def test_strips_control_bytes_and_whitespace(self):
        assert clean_banner(b"\x00SSH-2.0-OpenSSH_9.6\r\n") == "SSH-2.0-OpenSSH_9.6"

    def test_truncates_long_banners(self):
        banner = clean_banner(b"A" * 300)
        assert len(banner) == 100
        assert banner.endswith("...")

    def test_empty_after_cleaning(self):
        assert clean_banner(b"\x00\x01\x02  ") is None


class TestEffectiveConcurrency:
    """Concurrency ceiling selection"""

    def test_never_above_port_count(self):
        assert PortScanner().effective_concurrency(3, 100) == 3

    def test_requested_value_kept_for_small_scans(self):
        assert PortScanner().effective_concurrency(1024, 100) == 100

    def test_large_scans_are_clamped(self):
        assert PortScanner().effective_concurrency(65535, 1000) == 500

    def test_large_scan_below_ceiling_untouched(self):
        assert PortScanner().effective_concurrency(65535, 50) == 50

    def test_at_least_one(self):
        assert PortScanner().effective_concurrency(10, 0) == 1


class TestScan:
    """End-to-end scans on 127.0.0.1"""

    def test_open_port_with_banner(self, banner_server):
        summary = PortScanner().scan(PortScanRequest("127.0.0.1", (banner_server.port,), timeout=1.0))

        assert summary.ports_scanned == 1
        assert len(summary.open_ports) == 1
        result = summary.open_ports[0]
        assert result.port == banner_server.port
        assert result.open
        assert result.banner == "SSH-2.0-OpenSSH_9.6"
        assert result.latency_ms >= 0

    def test_silent_service_has_no_banner(self, silent_server):
        scanner = PortScanner(banner_timeout=0.1)
        summary = scanner.scan(PortScanRequest("127.0.0.1", (silent_server.port,), timeout=1.0))

        assert summary.open_ports[0].banner is None

    def test_banner_grab_disabled(self, banner_server):
        scanner = PortScanner(grab_banners=False)
        summary = scanner.scan(PortScanRequest("127.0.0.1", (banner_server.port,), timeout=1.0))

        assert summary.open_ports[0].banner is None

    def test_open_and_closed_are_partitioned_and_sorted(self, banner_server, silent_server, closed_port):
        ports = (silent_server.port, closed_port, banner_server.port)
        summary = PortScanner(banner_timeout=0.1).scan(
            PortScanRequest("127.0.0.1", ports, timeout=1.0, max_concurrent=2)
        )

        open_ports = [r.port for r in summary.open_ports]
        assert open_ports == sorted([silent_server.port, banner_server.port])
        assert [r.port for r in summary.closed_ports] == [closed_port]
        assert not summary.closed_ports[0].open
        assert summary.ports_scanned == 3

    def test_small_chunks_cover_every_port(self, silent_server, closed_port):
        scanner = PortScanner(chunk_size=1, banner_timeout=0.1)
        summary = scanner.scan(
            PortScanRequest("127.0.0.1", (closed_port, silent_server.port, closed_port), timeout=1.0)
        )

        # duplicates are dialed once
        assert summary.ports_scanned == 2
        assert len(summary.open_ports) + len(summary.closed_ports) == 2

    def test_unresolvable_target_reports_everything_closed(self, monkeypatch):
        scanner = PortScanner()
        monkeypatch.setattr(scanner, "_resolve", lambda target: None)

        summary = scanner.scan(PortScanRequest("nowhere.invalid", (443, 80)))

        assert summary.open_ports == []
        assert [r.port for r in summary.closed_ports] == [80, 443]

    def test_no_ports(self):
        with pytest.raises(ArgumentError, match="No valid ports specified"):
            PortScanner().scan(PortScanRequest("127.0.0.1", ()))

    def test_closed_port_stays_closed_on_rescan(self, closed_port):
        scanner = PortScanner()
        request = PortScanRequest("127.0.0.1", (closed_port,), timeout=1.0)

        first = scanner.scan(request)
        second = scanner.scan(request)

        for summary in (first, second):
            assert summary.open_ports == []
            assert [(r.port, r.open) for r in summary.closed_ports] == [(closed_port, False)]


class TestConcurrencyCeiling:
    """In-flight dials never exceed max_concurrent"""

    def counting_scanner(self, monkeypatch, **kwargs):
        scanner = PortScanner(**kwargs)
        lock = threading.Lock()
        counts = {"active": 0, "peak": 0, "calls": 0}

        def scan_port(address, port, timeout):
            with lock:
                counts["active"] += 1
                counts["calls"] += 1
                counts["peak"] = max(counts["peak"], counts["active"])
            time.sleep(0.005)
            with lock:
                counts["active"] -= 1
            return PortResult(port=port, open=port % 10 == 0)

        monkeypatch.setattr(scanner, "scan_port", scan_port)
        monkeypatch.setattr(scanner, "_resolve", lambda target: "127.0.0.1")
        return scanner, counts

    def test_peak_across_chunks(self, monkeypatch):
        scanner, counts = self.counting_scanner(monkeypatch, chunk_size=50)

        summary = scanner.scan(PortScanRequest("127.0.0.1", tuple(range(1, 201)), max_concurrent=7))

        assert counts["calls"] == 200
        assert 1 <= counts["peak"] <= 7
        assert len(summary.open_ports) == 20
        assert len(summary.closed_ports) == 180

    def test_large_scan_is_clamped(self, monkeypatch):
        scanner, counts = self.counting_scanner(
            monkeypatch, chunk_size=100, large_scan_threshold=150, large_scan_ceiling=4
        )

        scanner.scan(PortScanRequest("127.0.0.1", tuple(range(1, 301)), max_concurrent=50))

        assert counts["calls"] == 300
        assert counts["peak"] <= 4
