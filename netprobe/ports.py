"""
Port specification parsing and well-known service names
"""

from typing import Optional

from .errors import ArgumentError


MIN_PORT = 1
MAX_PORT = 65535

COMMON_SERVICES = {
    21: "FTP", 22: "SSH", 23: "Telnet", 25: "SMTP", 53: "DNS",
    80: "HTTP", 110: "POP3", 143: "IMAP", 443: "HTTPS", 465: "SMTPS",
    587: "SMTP Submission", 993: "IMAPS", 995: "POP3S", 3306: "MySQL",
    3389: "RDP", 5432: "PostgreSQL", 8080: "HTTP-Alt", 8443: "HTTPS-Alt",
}


def service_name(port: int) -> Optional[str]:
    """Service usually found on a port, None when unknown"""
    return COMMON_SERVICES.get(port)


def _parse_port(token: str, whole: str) -> int:
    try:
        port = int(token)
    except ValueError:
        raise ArgumentError(f"invalid port: {whole}", token=whole) from None
    if port < MIN_PORT or port > MAX_PORT:
        raise ArgumentError(
            f"invalid port: {whole} (must be {MIN_PORT}-{MAX_PORT})", token=whole
        )
    return port


def parse_port(token: str) -> int:
    """A single port number in 1-65535"""
    token = token.strip()
    return _parse_port(token, token)


def parse_port_spec(spec: str) -> list[int]:
    """
    Expand a port specification into a sorted, de-duplicated port list.

    Supports:
    - Single ports: "80"
    - Comma-separated: "22,80,443"
    - Ranges: "1-1024" (reversed ranges such as "100-50" are swapped)
    - Mixed: "22,8000-8010,443"
    - Everything: "all"

    Raises:
        ArgumentError naming the first bad token
    """
    spec = (spec or '').strip()
    if not spec:
        raise ArgumentError("No valid ports specified", token=spec)

    if spec.lower() == 'all':
        return list(range(MIN_PORT, MAX_PORT + 1))

    ports: set[int] = set()
    for raw in spec.split(','):
        token = raw.strip()
        if not token:
            raise ArgumentError(f"invalid port: '{raw}'", token=raw)

        if '-' in token:
            parts = token.split('-')
            if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
                raise ArgumentError(f"invalid port range: {token}", token=token)
            start = _parse_port(parts[0].strip(), token)
            end = _parse_port(parts[1].strip(), token)
            if start > end:
                start, end = end, start
            ports.update(range(start, end + 1))
        else:
            ports.add(_parse_port(token, token))

    return sorted(ports)


def parse_port_list(spec: str) -> list[int]:
    """Comma-separated ports in the given order, used by the 'all' probe mode"""
    ports = []
    for raw in spec.split(','):
        port = parse_port(raw)
        if port not in ports:
            ports.append(port)
    return ports
