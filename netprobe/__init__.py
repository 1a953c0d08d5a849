"""
netprobe - Network Diagnostics Probing Engine

Short-lived probes for reachability, open ports, host sweeps,
traceroute and DNS, each emitting one line of JSON.
"""

__version__ = "1.0.0"
__author__ = "netprobe"
