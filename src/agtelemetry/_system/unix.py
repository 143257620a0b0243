"""macOS and Linux discovery commands."""

from __future__ import annotations

import re

from agtelemetry._constants import (
    DEFAULT_PROCESS_PATTERN,
    PORT_DISCOVERY_TIMEOUT,
    PROCESS_DISCOVERY_TIMEOUT,
)
from agtelemetry._system.base import check_process_pattern, filter_process_lines, run_command
from agtelemetry.exceptions import AgtCommandError
from agtelemetry.ingestion.normalize import is_valid_pid


def _port_after_last_colon(address: str) -> str:
    return address.rsplit(":", 1)[-1].strip()


def extract_lsof_ports(output: str) -> str:
    """Reduce ``lsof -Fn`` output to one port candidate per line.

    Only ``n`` (name) records are kept; ``n*:42100``, ``n127.0.0.1:42100``
    and ``n[::1]:42100`` all yield ``42100``.
    """
    ports = [_port_after_last_colon(line[1:]) for line in output.splitlines() if line.startswith("n")]
    return "\n".join(ports)


def extract_ss_ports(output: str, pid: int) -> str:
    """Reduce ``ss -tlnp`` output to the local ports owned by *pid*.

    The local address is the fourth column; rows are matched on the exact
    ``pid=<pid>`` marker in the process column.
    """
    marker = re.compile(rf"\bpid={pid}\b")
    ports: list[str] = []
    for line in output.splitlines():
        if not marker.search(line):
            continue
        columns = line.split()
        if len(columns) < 4:
            continue
        ports.append(_port_after_last_colon(columns[3]))
    return "\n".join(ports)


class _PsProcessListing:
    """``ps -axo pid,args`` filtered by the process pattern."""

    def __init__(self, process_pattern: str = DEFAULT_PROCESS_PATTERN) -> None:
        self._pattern = check_process_pattern(process_pattern)

    async def list_candidate_processes(self) -> str:
        output = await run_command(["ps", "-axo", "pid,args"], timeout=PROCESS_DISCOVERY_TIMEOUT)
        return filter_process_lines(output, self._pattern)


class DarwinSystemProbe(_PsProcessListing):
    platform = "darwin"

    async def list_listening_ports(self, pid: int) -> str:
        if not is_valid_pid(pid):
            raise AgtCommandError(f"Refusing to query ports for invalid pid {pid!r}")
        output = await run_command(
            ["lsof", "-iTCP", "-sTCP:LISTEN", "-a", "-p", str(pid), "-Fn", "-P", "-n"],
            timeout=PORT_DISCOVERY_TIMEOUT,
        )
        return extract_lsof_ports(output)


class LinuxSystemProbe(_PsProcessListing):
    platform = "linux"

    async def list_listening_ports(self, pid: int) -> str:
        if not is_valid_pid(pid):
            raise AgtCommandError(f"Refusing to query ports for invalid pid {pid!r}")
        output = await run_command(["ss", "-tlnp"], timeout=PORT_DISCOVERY_TIMEOUT)
        return extract_ss_ports(output, pid)
