"""
Command-line entry points

Every command takes strictly positional arguments and prints exactly one
JSON line on stdout (net-grab may print a transcript instead). Malformed
arguments print {"error": ...} and exit 1; failed probes are data and
exit 0.
"""

import functools
import json
import math
import sys
from typing import Optional

import click

from . import __version__
from .config import (
    DEFAULT_PROBE_TIMEOUT, DEFAULT_TCP_PORT, DEFAULT_UDP_PORT, DEFAULT_ALL_MODE_PORTS,
    DEFAULT_SCAN_TIMEOUT, DEFAULT_MAX_CONCURRENT, DEFAULT_MAX_HOPS, DEFAULT_TRACE_TIMEOUT,
    DEFAULT_DNS_TIMEOUT, DEFAULT_HTTP_TIMEOUT, SWEEP_DEFAULT_PORTS,
    LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL,
)
from .dns_lookup import DNSLookup, parse_record_types
from .errors import ArgumentError, SubprocessSpawnError
from .http_check import HTTPTester
from .log import setup_logging
from .models import ProbeRequest, PortScanRequest
from .output import ConsoleOutput, JsonExporter, JsonSink
from .ports import parse_port, parse_port_list, parse_port_spec
from .portscan import PortScanner
from .probe import ReachabilityProber, Tracer
from .sweep import HostSweeper


TRUE_VALUES = ('true', '1')
FALSE_VALUES = ('false', '0')


def emit(result):
    """Print one result model as a compact JSON line"""
    click.echo(JsonExporter().to_json_line(result))


def emit_error(message: str):
    click.echo(json.dumps({"error": message}))
    sys.exit(1)


def number_arg(value: Optional[str], name: str, default, cast=float):
    """Positive number from an optional positional argument"""
    if value is None:
        return default
    try:
        number = cast(value)
    except ValueError:
        raise ArgumentError(f"invalid {name}: {value}", token=value) from None
    if not math.isfinite(number):
        raise ArgumentError(f"invalid {name}: {value}", token=value)
    if number <= 0:
        raise ArgumentError(f"invalid {name}: {value} (must be positive)", token=value)
    return number


def split_list(value: str) -> list[str]:
    items = [item.strip() for item in value.split(',') if item.strip()]
    if not items:
        raise ArgumentError(f"empty list: '{value}'", token=value)
    return items


def log_level_option(func):
    return click.option(
        '--log-level', envvar=LOG_LEVEL_ENV, default=DEFAULT_LOG_LEVEL, hidden=True,
        type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], case_sensitive=False)
    )(func)


def json_errors(func):
    """Set up logging, turn ArgumentError into a JSON error line"""
    @functools.wraps(func)
    def wrapper(*args, log_level: str = DEFAULT_LOG_LEVEL, **kwargs):
        setup_logging(log_level)
        try:
            return func(*args, **kwargs)
        except ArgumentError as e:
            emit_error(str(e))
    return wrapper


@click.command()
@click.argument('target')
@click.argument('mode')
@click.argument('port', required=False)
@click.argument('timeout', required=False)
@log_level_option
@json_errors
def connectivity(target: str, mode: str, port: Optional[str], timeout: Optional[str]):
    """
    Check reachability of TARGET.

    MODE is ping, tcp, udp or all. PORT is a single port for tcp/udp
    (default 80/53) or a comma list for all (default 22,80,443).
    TIMEOUT is in seconds (default 5).
    """
    timeout_s = number_arg(timeout, 'timeout', DEFAULT_PROBE_TIMEOUT)

    if mode == 'all':
        ports = tuple(parse_port_list(port)) if port else DEFAULT_ALL_MODE_PORTS
        request = ProbeRequest(target=target, mode=mode, ports=ports, timeout=timeout_s)
    elif mode in ('tcp', 'udp'):
        default = DEFAULT_TCP_PORT if mode == 'tcp' else DEFAULT_UDP_PORT
        port_number = parse_port(port) if port else default
        request = ProbeRequest(target=target, mode=mode, port=port_number, timeout=timeout_s)
    else:
        request = ProbeRequest(target=target, mode=mode, timeout=timeout_s)

    emit(ReachabilityProber().run(request))


@click.command()
@click.argument('target')
@click.argument('port_spec')
@click.argument('timeout', required=False)
@click.argument('max_concurrent', required=False)
@log_level_option
@json_errors
def portscan(target: str, port_spec: str, timeout: Optional[str], max_concurrent: Optional[str]):
    """
    TCP connect scan of TARGET.

    PORT_SPEC is N, N,M,..., N-M or all. TIMEOUT is per port in seconds
    (default 2), MAX_CONCURRENT caps parallel connections (default 100).
    """
    request = PortScanRequest(
        target=target,
        ports=tuple(parse_port_spec(port_spec)),
        timeout=number_arg(timeout, 'timeout', DEFAULT_SCAN_TIMEOUT),
        max_concurrent=number_arg(max_concurrent, 'maxConcurrent', DEFAULT_MAX_CONCURRENT, int)
    )
    emit(PortScanner().scan(request))


@click.command('net-grab')
@click.argument('cidr')
@click.option('-v', '--verbose', is_flag=True, help='Show ping statistics per host')
@click.option('-live', '--live', 'live', is_flag=True, help='Print hosts as they complete')
@click.option('-json', '--json', 'as_json', is_flag=True, help='Print results as one JSON line')
@click.option('-p', '--ports', 'port_spec', default=SWEEP_DEFAULT_PORTS, show_default=True,
              help="Ports to scan on responding hosts (e.g. '80', '80,443', '1-1000', 'all')")
@log_level_option
@json_errors
def net_grab(cidr: str, verbose: bool, live: bool, as_json: bool, port_spec: str):
    """
    Sweep every host in CIDR: ping, reverse DNS, and a port scan of the
    hosts that answered.
    """
    sweeper = HostSweeper(ports=parse_port_spec(port_spec))

    if as_json:
        sink = JsonSink()
    else:
        sink = ConsoleOutput(verbose=verbose, live=live)

    try:
        sweeper.sweep(cidr, sink)
    except SubprocessSpawnError as e:
        if as_json:
            emit_error(str(e))
        sink.print_error(str(e))
        sys.exit(1)


@click.command()
@click.argument('targets')
@click.argument('max_hops', required=False)
@click.argument('timeout', required=False)
@click.argument('numeric', required=False)
@log_level_option
@json_errors
def traceroute(targets: str, max_hops: Optional[str], timeout: Optional[str], numeric: Optional[str]):
    """
    Trace the route to TARGETS (comma separated).

    MAX_HOPS defaults to 30, TIMEOUT to 60 seconds; NUMERIC (true/1)
    skips hop name resolution.
    """
    tracer = Tracer(
        max_hops=number_arg(max_hops, 'maxHops', DEFAULT_MAX_HOPS, int),
        timeout=number_arg(timeout, 'timeout', DEFAULT_TRACE_TIMEOUT),
        numeric=(numeric or '').lower() in TRUE_VALUES
    )
    emit(tracer.run(split_list(targets)))


@click.command()
@click.argument('domains')
@click.argument('types')
@click.argument('server', required=False)
@click.argument('timeout', required=False)
@log_level_option
@json_errors
def dns(domains: str, types: str, server: Optional[str], timeout: Optional[str]):
    """
    Look up DOMAINS (comma separated).

    TYPES is a comma list of a, aaaa, cname, mx, ns, txt or all. SERVER
    pins the nameserver; TIMEOUT defaults to 10 seconds.
    """
    record_types = parse_record_types(types)
    lookup = DNSLookup(
        server=server or None,
        timeout=number_arg(timeout, 'timeout', DEFAULT_DNS_TIMEOUT)
    )
    emit(lookup.run(split_list(domains), record_types))


@click.command('http-test')
@click.argument('urls')
@click.argument('timeout', required=False)
@click.argument('follow_redirects', required=False)
@click.argument('insecure', required=False)
@log_level_option
@json_errors
def http_test(urls: str, timeout: Optional[str], follow_redirects: Optional[str],
              insecure: Optional[str]):
    """
    GET each of URLS (comma separated).

    TIMEOUT defaults to 10 seconds. Redirects are followed unless
    FOLLOW_REDIRECTS is false/0; INSECURE (true/1) skips TLS verification.
    """
    tester = HTTPTester(
        timeout=number_arg(timeout, 'timeout', DEFAULT_HTTP_TIMEOUT),
        follow_redirects=(follow_redirects or '').lower() not in FALSE_VALUES,
        insecure=(insecure or '').lower() in TRUE_VALUES
    )
    emit(tester.run(split_list(urls)))


@click.group()
@click.version_option(version=__version__)
def main():
    """
    netprobe - network diagnostics probing engine.

    Examples:

        netprobe connectivity 127.0.0.1 tcp 22 2

        netprobe portscan 192.168.1.10 1-1024

        netprobe net-grab 192.168.1.0/24 -json
    """


for command in (connectivity, portscan, net_grab, traceroute, dns, http_test):
    main.add_command(command)


if __name__ == '__main__':
    main()
