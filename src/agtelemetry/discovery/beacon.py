"""Beacon locator.

Finds the language-server process and lifts the CSRF token from its
command line. Process listings are untrusted text: every pid and token
candidate is validated, and anything malformed is skipped.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from agtelemetry._system.base import SystemProbe
from agtelemetry.exceptions import AgtCommandError
from agtelemetry.ingestion.normalize import is_valid_pid, is_valid_token, safe_int
from agtelemetry.models.uplink import Credential

_logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"--csrf[-_]?token[=\s]+[\"']?([^\s\"']+)", re.IGNORECASE)
_LEADING_PID_RE = re.compile(r"^\s*(\d{1,10})\s")


def _credentials_from_command_line(pid: Any, command_line: str) -> list[Credential]:
    pid_value = safe_int(pid)
    if not is_valid_pid(pid_value):
        return []
    found: list[Credential] = []
    for match in _TOKEN_RE.finditer(command_line):
        token = match.group(1)
        if is_valid_token(token):
            found.append(Credential(pid=pid_value, token=token))
        else:
            _logger.debug("Skipping malformed CSRF token candidate for pid %s", pid_value)
    return found


def _extract_windows(output: str) -> list[Credential]:
    try:
        data = json.loads(output)
    except json.JSONDecodeError:
        _logger.debug("Process listing is not valid JSON")
        return []
    processes = data if isinstance(data, list) else [data]
    found: list[Credential] = []
    for proc in processes:
        if not isinstance(proc, dict):
            continue
        command_line = proc.get("CommandLine")
        if not isinstance(command_line, str):
            continue
        found.extend(_credentials_from_command_line(proc.get("ProcessId"), command_line))
    return found


def _extract_unix(output: str) -> list[Credential]:
    found: list[Credential] = []
    for line in output.splitlines():
        pid_match = _LEADING_PID_RE.match(line)
        if pid_match is None:
            continue
        found.extend(_credentials_from_command_line(pid_match.group(1), line[pid_match.end() :]))
    return found


def extract_credentials(output: str, platform: str) -> list[Credential]:
    """Return every valid (pid, token) pair in *output*, in output order."""
    if not output or not output.strip():
        return []
    if platform.startswith("win"):
        return _extract_windows(output)
    return _extract_unix(output)


def extract_credential(output: str, platform: str) -> Credential | None:
    """Return the first valid credential in *output*, or ``None``."""
    credentials = extract_credentials(output, platform)
    if len(credentials) > 1:
        _logger.debug("Found %d credential candidates; using the first", len(credentials))
    return credentials[0] if credentials else None


async def locate_beacon(system: SystemProbe) -> Credential | None:
    """Locate the language-server process and its CSRF token.

    Returns ``None`` on any command failure, timeout or parse failure.
    """
    try:
        output = await system.list_candidate_processes()
    except AgtCommandError as exc:
        _logger.debug("Process discovery failed: %s", exc)
        return None

    credential = extract_credential(output, system.platform)
    if credential is None:
        _logger.debug("No language-server process with a CSRF token found")
    else:
        _logger.debug("Beacon found: pid=%d token=%s", credential.pid, credential.masked_token)
    return credential
