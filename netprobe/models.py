"""
Data models for netprobe
"""

from dataclasses import dataclass, field
from typing import Optional
from datetime import datetime

from .errors import ArgumentError


PROBE_MODES = ('ping', 'tcp', 'udp', 'all')


@dataclass(frozen=True)
class ProbeRequest:
    """One reachability check, fixed for the lifetime of the run"""
    target: str
    mode: str
    port: Optional[int] = None
    ports: tuple[int, ...] = ()
    timeout: float = 5.0
    max_concurrent: Optional[int] = None

    def __post_init__(self):
        if not self.target:
            raise ArgumentError("target is required")
        if self.mode not in PROBE_MODES:
            raise ArgumentError(
                f"Unknown mode: {self.mode}. Use 'ping', 'tcp', 'udp', or 'all'",
                token=self.mode
            )
        if self.mode in ('tcp', 'udp') and self.port is None:
            raise ArgumentError(f"port is required for {self.mode} mode")
        if self.timeout <= 0:
            raise ArgumentError(f"timeout must be positive: {self.timeout}")


@dataclass
class ProbeResult:
    """Outcome of one reachability check"""
    success: bool
    message: str
    target: str
    mode: str
    port: Optional[int] = None
    response_time_ms: float = 0.0
    packet_loss: Optional[float] = None
    rtt_min: Optional[float] = None
    rtt_avg: Optional[float] = None
    rtt_max: Optional[float] = None
    jitter: Optional[float] = None
    # udp only: the local stack accepted the datagram, nothing more
    best_effort: bool = False


@dataclass(frozen=True)
class PortScanRequest:
    """Port scan parameters"""
    target: str
    ports: tuple[int, ...]
    timeout: float = 2.0
    max_concurrent: int = 100


@dataclass
class PortResult:
    """Result of dialing a single port"""
    port: int
    open: bool
    latency_ms: float = 0.0
    service: Optional[str] = None
    banner: Optional[str] = None


@dataclass
class ScanSummary:
    """Complete port scan result"""
    target: str
    open_ports: list[PortResult] = field(default_factory=list)
    closed_ports: list[PortResult] = field(default_factory=list)
    scan_time_ms: int = 0
    ports_scanned: int = 0


@dataclass
class PingOptions:
    """Ping invocation parameters"""
    count: int = 3
    interval: float = 0.25
    timeout: float = 2.0
    size: int = 56


@dataclass
class PingStats:
    """Statistics parsed from one ping run"""
    packets_sent: int = 0
    packets_received: int = 0
    packet_loss: float = 0.0
    min_latency: float = 0.0
    avg_latency: float = 0.0
    max_latency: float = 0.0
    jitter: float = 0.0
    last_ping_time: datetime = field(default_factory=datetime.now)
    error_message: Optional[str] = None
    samples: list[float] = field(default_factory=list)

    @property
    def reachable(self) -> bool:
        return self.packets_received > 0


@dataclass
class HostInfo:
    """Sweep result for one address"""
    ip_address: str
    hostname: Optional[str] = None
    is_reachable: bool = False
    ping_stats: PingStats = field(default_factory=PingStats)
    open_ports: list[int] = field(default_factory=list)
    dns_names: list[str] = field(default_factory=list)
    scanned_at: datetime = field(default_factory=datetime.now)


@dataclass
class HopResult:
    """One traceroute hop"""
    hop: int
    address: Optional[str] = None
    hostname: Optional[str] = None
    rtts: list[float] = field(default_factory=list)
    loss_rate: float = 0.0
    timed_out: bool = False

    @property
    def rtt_avg(self) -> float:
        return sum(self.rtts) / len(self.rtts) if self.rtts else 0.0


@dataclass
class TracerouteResult:
    """Complete trace result"""
    target: str
    target_name: Optional[str] = None
    hops: list[HopResult] = field(default_factory=list)
    success: bool = False
    elapsed_ms: int = 0
    error: Optional[str] = None

    @property
    def total_hops(self) -> int:
        return len(self.hops)


@dataclass
class MultiTracerouteResult:
    """Traces to several targets run side by side"""
    results: list[TracerouteResult] = field(default_factory=list)
    total_time_ms: int = 0

    @property
    def successful(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return len(self.results) - self.successful


@dataclass
class DNSResult:
    """Records found for one domain"""
    domain: str
    ipv4: list[str] = field(default_factory=list)
    ipv6: list[str] = field(default_factory=list)
    cname: list[str] = field(default_factory=list)
    mx: list[str] = field(default_factory=list)
    ns: list[str] = field(default_factory=list)
    txt: list[str] = field(default_factory=list)
    error: Optional[str] = None
    resolve_time_ms: int = 0

    @property
    def has_records(self) -> bool:
        return any((self.ipv4, self.ipv6, self.cname, self.mx, self.ns, self.txt))


@dataclass
class MultiDNSResult:
    """Lookups for several domains"""
    results: list[DNSResult] = field(default_factory=list)
    total_time_ms: int = 0

    @property
    def successful(self) -> int:
        return sum(1 for r in self.results if r.error is None and r.has_records)

    @property
    def failed(self) -> int:
        return len(self.results) - self.successful


@dataclass
class TLSInfo:
    """Negotiated TLS parameters and leaf certificate details"""
    version: Optional[str] = None
    cipher_suite: Optional[str] = None
    certificate_info: list[str] = field(default_factory=list)
    valid_until: Optional[str] = None
    issuer: Optional[str] = None
    certificate_expiring: bool = False
    days_until_expiration: Optional[int] = None


@dataclass
class HTTPResult:
    """Result of one HTTP GET"""
    url: str
    status_code: int = 0
    response_time_ms: int = 0
    content_length: int = 0
    headers: dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None
    tls_info: Optional[TLSInfo] = None
    redirects: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None and 200 <= self.status_code < 400


@dataclass
class HTTPMultiResult:
    """GETs against several URLs"""
    results: list[HTTPResult] = field(default_factory=list)
    total_time_ms: int = 0

    @property
    def successful(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failed(self) -> int:
        return len(self.results) - self.successful
