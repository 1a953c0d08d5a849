"""
Default limits and timings for netprobe components

Components take these as constructor defaults; nothing here is
mutated at runtime.
"""

# Reachability prober
DEFAULT_PROBE_TIMEOUT = 5.0  # seconds
DEFAULT_TCP_PORT = 80
DEFAULT_UDP_PORT = 53
DEFAULT_ALL_MODE_PORTS = (22, 80, 443)
UDP_PAYLOAD = b"ping"

# Ping
PING_COUNT = 3
PING_INTERVAL = 0.25  # seconds between echo requests
PING_PACKET_SIZE = 56  # bytes of ICMP payload
PING_DEADLINE_SHARE = 0.9  # fraction of the caller timeout handed to the ping process

# Port scanner
DEFAULT_SCAN_TIMEOUT = 2.0  # seconds per port
DEFAULT_MAX_CONCURRENT = 100
SCAN_CHUNK_SIZE = 1000
LARGE_SCAN_THRESHOLD = 10000  # ports
LARGE_SCAN_CEILING = 500  # max concurrent dials once above the threshold
BANNER_READ_TIMEOUT = 0.5  # seconds
BANNER_READ_BYTES = 1024
BANNER_MAX_CHARS = 100

# Host sweep
SWEEP_MAX_HOSTS = 256
SWEEP_WORKERS = 20
SWEEP_PORT_CONCURRENCY = 500
SWEEP_LARGE_SCAN_CEILING = 200
SWEEP_PORT_TIMEOUT = 2.0
SWEEP_PING_COUNT = 4
SWEEP_PING_INTERVAL = 0.25
SWEEP_PING_TIMEOUT = 2.0
SWEEP_DEFAULT_PORTS = "22,80,443,3389,8080"
PROGRESS_INTERVAL = 0.5  # seconds between progress samples

# Traceroute
DEFAULT_MAX_HOPS = 30
DEFAULT_TRACE_TIMEOUT = 60.0  # seconds, whole run
TRACE_PROBES_PER_HOP = 3
TRACE_PROBE_WAIT = 1  # seconds per probe (linux -w)

# DNS
DEFAULT_DNS_TIMEOUT = 10.0
DNS_RECORD_TYPES = ("a", "aaaa", "cname", "mx", "ns", "txt")

# HTTP tester
DEFAULT_HTTP_TIMEOUT = 10.0
HTTP_MAX_REDIRECTS = 10
HTTP_MAX_BODY = 10 * 1024 * 1024
HTTP_USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36"
CERT_EXPIRY_WARNING_DAYS = 30

# Logging
LOG_LEVEL_ENV = "NETPROBE_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"
