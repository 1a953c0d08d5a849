"""
JSON export for netprobe results

Every executable prints exactly one compact JSON line. Field names are
camelCase except for sweep HostInfo records, which keep the snake_case
names existing consumers read. Optional fields are left out when empty
and floats are rounded to two decimals.
"""

import json
import sys
from datetime import datetime
from typing import Any, Optional, TextIO

from ..models import (
    ProbeResult, PortResult, ScanSummary, PingStats, HostInfo,
    HopResult, TracerouteResult, MultiTracerouteResult,
    DNSResult, MultiDNSResult, TLSInfo, HTTPResult, HTTPMultiResult,
)
from ..sweep import SweepSink


def _round(value: Optional[float]) -> Optional[float]:
    return round(value, 2) if value is not None else None


def _timestamp(value: datetime) -> str:
    return value.astimezone().isoformat()


def _compact(data: dict, keep: tuple[str, ...] = ()) -> dict:
    """Drop None values and empty lists, except for the keys in keep"""
    return {k: v for k, v in data.items() if k in keep or (v is not None and v != [])}


class JsonExporter:
    """
    Serialize result models to JSON-compatible dicts.

    export() dispatches on the model type; lists are serialized element
    by element, which covers the 'all' probe mode and sweep output.
    """

    def export(self, result: Any) -> Any:
        """
        Export a result model.

        Args:
            result: Any result model, or a list of them

        Returns:
            JSON-serializable dict or list
        """
        if isinstance(result, list):
            return [self.export(item) for item in result]

        serializer = self.SERIALIZERS.get(type(result))
        if serializer is None:
            raise TypeError(f"Cannot export {type(result).__name__}")
        return serializer(self, result)

    def to_json_line(self, result: Any) -> str:
        """Compact single-line JSON for stdout"""
        return json.dumps(self.export(result), separators=(',', ':'), ensure_ascii=False)

    def _serialize_probe(self, result: ProbeResult) -> dict:
        data = {
            "success": result.success,
            "message": result.message,
            "targetIp": result.target,
            "port": result.port,
            "mode": result.mode,
            "responseTimeMs": _round(result.response_time_ms),
            "packetLoss": _round(result.packet_loss),
        }
        if result.rtt_avg is not None:
            data["rtt"] = {
                "min": _round(result.rtt_min),
                "avg": _round(result.rtt_avg),
                "max": _round(result.rtt_max),
            }
        data["jitterMs"] = _round(result.jitter)
        if result.best_effort:
            data["bestEffort"] = True
        return _compact(data)

    def _serialize_port(self, result: PortResult) -> dict:
        return _compact({
            "port": result.port,
            "open": result.open,
            "service": result.service,
            "banner": result.banner,
            "latencyMs": _round(result.latency_ms),
        })

    def _serialize_scan(self, summary: ScanSummary) -> dict:
        return {
            "targetIp": summary.target,
            "openPorts": [self._serialize_port(r) for r in summary.open_ports],
            "closedPorts": [self._serialize_port(r) for r in summary.closed_ports],
            "scanTimeMs": summary.scan_time_ms,
            "portsScanned": summary.ports_scanned,
        }

    def _serialize_ping_stats(self, stats: PingStats) -> dict:
        data = {
            "packets_sent": stats.packets_sent,
            "packets_received": stats.packets_received,
            "packet_loss": _round(stats.packet_loss),
            "min_latency_ms": _round(stats.min_latency),
            "max_latency_ms": _round(stats.max_latency),
            "avg_latency_ms": _round(stats.avg_latency),
            "jitter_ms": _round(stats.jitter),
            "last_ping_time": _timestamp(stats.last_ping_time),
        }
        if stats.error_message:
            data["error_message"] = stats.error_message
        return data

    def _serialize_host(self, info: HostInfo) -> dict:
        data = {
            "ip_address": info.ip_address,
            "hostname": info.hostname,
            "is_reachable": info.is_reachable,
            "ping_stats": self._serialize_ping_stats(info.ping_stats),
            "open_ports": list(info.open_ports) if info.is_reachable else [],
            "dns_names": info.dns_names or None,
            "scanned_at": _timestamp(info.scanned_at),
        }
        return {k: v for k, v in data.items() if v is not None}

    def _serialize_hop(self, hop: HopResult) -> dict:
        return _compact({
            "hop": hop.hop,
            "address": hop.address or "*",
            "hostname": hop.hostname,
            "rttMs": _round(hop.rtt_avg),
            "lossRate": _round(hop.loss_rate),
            "timedOut": hop.timed_out,
            "allRttMs": [_round(r) for r in hop.rtts],
        }, keep=("allRttMs",))

    def _serialize_trace(self, result: TracerouteResult) -> dict:
        return _compact({
            "targetIp": result.target,
            "targetName": result.target_name,
            "hops": [self._serialize_hop(h) for h in result.hops],
            "success": result.success,
            "totalHops": result.total_hops,
            "elapsedTimeMs": result.elapsed_ms,
            "error": result.error,
        }, keep=("hops",))

    def _serialize_multi(self, multi) -> dict:
        return {
            "results": [self.export(r) for r in multi.results],
            "totalTimeMs": multi.total_time_ms,
            "successful": multi.successful,
            "failed": multi.failed,
        }

    def _serialize_dns(self, result: DNSResult) -> dict:
        return _compact({
            "domain": result.domain,
            "ipv4": result.ipv4,
            "ipv6": result.ipv6,
            "cname": result.cname,
            "mx": result.mx,
            "ns": result.ns,
            "txt": result.txt,
            "error": result.error,
            "resolveTimeMs": result.resolve_time_ms,
        })

    def _serialize_tls(self, info: TLSInfo) -> dict:
        return _compact({
            "version": info.version,
            "cipherSuite": info.cipher_suite,
            "certificateInfo": info.certificate_info,
            "validUntil": info.valid_until,
            "issuer": info.issuer,
            "certificateExpiring": info.certificate_expiring,
            "daysUntilExpiration": info.days_until_expiration,
        })

    def _serialize_http(self, result: HTTPResult) -> dict:
        data = {
            "url": result.url,
            "statusCode": result.status_code,
            "responseTimeMs": result.response_time_ms,
            "contentLength": result.content_length,
            "headers": result.headers,
            "error": result.error,
            "tlsInfo": self._serialize_tls(result.tls_info) if result.tls_info else None,
            "redirects": result.redirects,
        }
        return _compact(data, keep=("headers",))

    SERIALIZERS = {
        ProbeResult: _serialize_probe,
        PortResult: _serialize_port,
        ScanSummary: _serialize_scan,
        HostInfo: _serialize_host,
        HopResult: _serialize_hop,
        TracerouteResult: _serialize_trace,
        MultiTracerouteResult: _serialize_multi,
        DNSResult: _serialize_dns,
        MultiDNSResult: _serialize_multi,
        HTTPResult: _serialize_http,
        HTTPMultiResult: _serialize_multi,
    }


class JsonSink(SweepSink):
    """Sweep sink that stays silent until the end, then prints one JSON line"""

    def __init__(self, stream: Optional[TextIO] = None, exporter: Optional[JsonExporter] = None):
        self.stream = stream
        self.exporter = exporter or JsonExporter()

    def finish(self, cidr: str, results: list[HostInfo]):
        stream = self.stream or sys.stdout
        stream.write(self.exporter.to_json_line(results) + "\n")
        stream.flush()
