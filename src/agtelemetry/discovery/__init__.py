"""Uplink discovery: beacon location, port scanning and probing."""

from agtelemetry.discovery.beacon import extract_credential, extract_credentials, locate_beacon
from agtelemetry.discovery.ports import parse_port_lines, scan_frequencies
from agtelemetry.discovery.prober import find_active_port

__all__ = [
    "extract_credential",
    "extract_credentials",
    "find_active_port",
    "locate_beacon",
    "parse_port_lines",
    "scan_frequencies",
]
