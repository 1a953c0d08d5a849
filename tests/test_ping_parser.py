"""
Tests for ping transcript parsing and command construction
"""

import pytest

from netprobe.models import PingOptions
from netprobe.parsers import get_parser, LinuxPingParser, DarwinPingParser, WindowsPingParser
from netprobe.parsers.ping import calculate_jitter


class TestCalculateJitter:

    def test_needs_two_samples(self):
        assert calculate_jitter([]) == 0.0
        assert calculate_jitter([5.0]) == 0.0

    def test_mean_absolute_difference(self):
        assert calculate_jitter([10.0, 14.0, 12.0]) == pytest.approx(3.0)


class TestLinuxPingParser:
    """iputils transcripts"""

    def setup_method(self):
        self.parser = LinuxPingParser()

    def test_successful_run(self, transcripts):
        stats = self.parser.parse(transcripts["linux_ping_ok"], PingOptions(count=3))

        assert stats.packets_sent == 3
        assert stats.packets_received == 3
        assert stats.packet_loss == 0.0
        assert stats.min_latency == pytest.approx(0.045)
        assert stats.avg_latency == pytest.approx(0.051)
        assert stats.max_latency == pytest.approx(0.060)
        # jitter comes from the samples, not mdev
        assert stats.jitter == pytest.approx(0.0125)
        assert stats.reachable

    def test_total_loss(self, transcripts):
        stats = self.parser.parse(transcripts["linux_ping_loss"], PingOptions(count=4))

        assert stats.packets_sent == 4
        assert stats.packets_received == 0
        assert stats.packet_loss == 100.0
        assert stats.avg_latency == 0.0
        assert not stats.reachable

    def test_summary_with_errors_field(self, transcripts):
        stats = self.parser.parse(transcripts["linux_ping_errors"], PingOptions(count=4))

        assert stats.packets_sent == 4
        assert stats.packets_received == 0
        assert stats.packet_loss == 100.0

    def test_missing_summary_falls_back_to_samples(self, transcripts):
        stats = self.parser.parse(transcripts["linux_ping_no_summary"], PingOptions(count=4))

        assert stats.packets_sent == 4
        assert stats.packets_received == 2
        assert stats.packet_loss == pytest.approx(50.0)
        assert stats.min_latency == 10.0
        assert stats.max_latency == 14.0
        assert stats.avg_latency == 12.0
        assert stats.jitter == pytest.approx(4.0)

    def test_garbage_never_raises(self):
        stats = self.parser.parse("ping: unknown host nowhere.invalid", PingOptions(count=2))

        assert stats.packets_received == 0
        assert stats.packet_loss == 100.0

    def test_command(self):
        cmd = self.parser.command("10.0.0.1", PingOptions(count=4, interval=0.25, timeout=2.0, size=56))
        assert cmd == ['ping', '-c', '4', '-W', '2', '-i', '0.25', '-s', '56', '10.0.0.1']

    def test_command_timeout_at_least_one_second(self):
        cmd = self.parser.command("10.0.0.1", PingOptions(timeout=0.3))
        assert cmd[cmd.index('-W') + 1] == '1'


class TestDarwinPingParser:

    def test_successful_run(self, transcripts):
        stats = DarwinPingParser().parse(transcripts["darwin_ping_ok"], PingOptions(count=2))

        assert stats.packets_sent == 2
        assert stats.packets_received == 2
        assert stats.avg_latency == pytest.approx(0.071)
        assert stats.jitter == pytest.approx(0.061)

    def test_command_uses_milliseconds(self):
        cmd = DarwinPingParser().command("127.0.0.1", PingOptions(timeout=2.0))
        assert cmd[cmd.index('-W') + 1] == '2000'


class TestWindowsPingParser:
    """ping.exe transcripts"""

    def test_successful_run(self, transcripts):
        stats = WindowsPingParser().parse(transcripts["windows_ping_ok"], PingOptions(count=3))

        assert stats.packets_sent == 3
        assert stats.packets_received == 3
        assert stats.samples == [1.0, 2.0, 1.0]
        assert stats.min_latency == 0.0
        assert stats.avg_latency == 1.0
        assert stats.max_latency == 2.0
        assert stats.jitter == pytest.approx(1.0)

    def test_unreachable_replies_are_not_received(self, transcripts):
        stats = WindowsPingParser().parse(transcripts["windows_ping_unreachable"], PingOptions(count=3))

        assert stats.packets_sent == 3
        assert stats.packets_received == 0
        assert stats.packet_loss == 100.0
        assert not stats.reachable

    def test_command(self):
        cmd = WindowsPingParser().command("127.0.0.1", PingOptions(count=3, timeout=2.0, size=32))
        assert cmd == ['ping', '-n', '3', '-w', '2000', '-l', '32', '127.0.0.1']


class TestGetParser:

    @pytest.mark.parametrize("platform,expected", [
        ("linux", LinuxPingParser),
        ("darwin", DarwinPingParser),
        ("win32", WindowsPingParser),
        ("freebsd13", LinuxPingParser),
    ])
    def test_platform_lookup(self, platform, expected):
        assert isinstance(get_parser('ping', platform), expected)

    def test_unknown_tool(self):
        with pytest.raises(ValueError, match="No parser for nmap"):
            get_parser('nmap', 'linux')
