"""
Tests for traceroute and tracert transcript parsing
"""

import pytest

from netprobe.parsers import (
    get_parser, LinuxTracerouteParser, DarwinTracerouteParser, WindowsTracerouteParser,
)
from netprobe.parsers.traceroute import TraceOptions


class TestLinuxTracerouteParser:
    """traceroute(8) transcripts"""

    def setup_method(self):
        self.parser = LinuxTracerouteParser()

    def test_hops_are_contiguous(self, transcripts):
        hops = self.parser.parse(transcripts["linux_traceroute"])

        assert [h.hop for h in hops] == [1, 2, 3, 4, 5]

    def test_named_hop(self, transcripts):
        first = self.parser.parse(transcripts["linux_traceroute"])[0]

        assert first.address == "192.168.1.1"
        assert first.hostname == "gateway"
        assert first.rtts == [1.123, 0.809, 0.773]
        assert first.loss_rate == 0.0
        assert not first.timed_out

    def test_partial_loss(self, transcripts):
        second = self.parser.parse(transcripts["linux_traceroute"])[1]

        assert second.address == "10.0.0.1"
        assert second.hostname is None
        assert second.rtts == [10.201, 9.482]
        assert second.loss_rate == pytest.approx(33.33)
        assert second.rtt_avg == pytest.approx(9.8415)

    def test_silent_and_missing_hops_time_out(self, transcripts):
        hops = self.parser.parse(transcripts["linux_traceroute"])

        for hop in (hops[2], hops[3]):
            assert hop.timed_out
            assert hop.address is None
            assert hop.loss_rate == 100.0

    def test_last_hop(self, transcripts):
        last = self.parser.parse(transcripts["linux_traceroute"])[-1]

        assert last.hop == 5
        assert last.address == "8.8.8.8"
        assert last.hostname == "dns.google"

    def test_out_of_sequence_lines_are_ignored(self):
        output = (
            " 1  10.0.0.1  1.0 ms  1.0 ms  1.0 ms\n"
            " 2  10.0.0.2  2.0 ms  2.0 ms  2.0 ms\n"
            " 2  10.0.0.9  9.0 ms  9.0 ms  9.0 ms\n"
            " 1  10.0.0.8  8.0 ms  8.0 ms  8.0 ms\n"
        )
        hops = self.parser.parse(output)

        assert [h.address for h in hops] == ["10.0.0.1", "10.0.0.2"]

    def test_load_balanced_hop_keeps_first_responder(self):
        output = " 3  a.example (10.1.1.1)  5.0 ms b.example (10.1.1.2)  6.0 ms  5.5 ms\n"
        hop = self.parser.parse_line(output)

        assert hop.hop == 3
        assert hop.address == "10.1.1.1"
        assert hop.hostname == "a.example"
        assert len(hop.rtts) == 3

    def test_no_hop_lines(self):
        assert self.parser.parse("traceroute: unknown host nowhere.invalid\n") == []

    def test_command(self):
        options = TraceOptions(max_hops=5, probes_per_hop=3, wait=1)
        assert self.parser.command("8.8.8.8", options) == [
            'traceroute', '-m', '5', '-q', '3', '-w', '1', '8.8.8.8'
        ]

    def test_numeric_command(self):
        cmd = self.parser.command("8.8.8.8", TraceOptions(numeric=True))
        assert cmd[-2:] == ['-n', '8.8.8.8']


class TestWindowsTracerouteParser:
    """tracert.exe transcripts"""

    def test_parse(self, transcripts):
        hops = WindowsTracerouteParser().parse(transcripts["windows_tracert"])

        assert [h.hop for h in hops] == [1, 2, 3]
        assert hops[0].address == "192.168.1.1"
        assert hops[0].rtts == [1.0, 1.0, 1.0]
        assert hops[1].timed_out
        assert hops[1].hostname is None
        assert hops[1].loss_rate == 100.0
        assert hops[2].address == "8.8.8.8"
        assert hops[2].hostname == "dns.google"
        assert hops[2].rtts == [12.0, 11.0, 13.0]

    def test_command(self):
        cmd = WindowsTracerouteParser().command("8.8.8.8", TraceOptions(max_hops=10, numeric=True))
        assert cmd == ['tracert', '-h', '10', '-d', '8.8.8.8']


def test_darwin_command_has_no_wait_flag():
    cmd = DarwinTracerouteParser().command("1.1.1.1", TraceOptions(max_hops=7))
    assert cmd == ['traceroute', '-m', '7', '-q', '3', '1.1.1.1']


def test_get_parser_for_windows():
    assert isinstance(get_parser('traceroute', 'win32'), WindowsTracerouteParser)
