"""Windows discovery commands (PowerShell)."""

from __future__ import annotations

from agtelemetry._constants import (
    DEFAULT_PROCESS_PATTERN,
    PORT_DISCOVERY_TIMEOUT,
    PROCESS_DISCOVERY_TIMEOUT,
)
from agtelemetry._system.base import check_process_pattern, run_command
from agtelemetry.exceptions import AgtCommandError
from agtelemetry.ingestion.normalize import is_valid_pid


def _powershell(script: str) -> list[str]:
    return ["powershell", "-NoProfile", "-NonInteractive", "-Command", script]


class WindowsSystemProbe:
    """Process and port listing through CIM and ``Get-NetTCPConnection``.

    Process output is JSON (one object, or an array of objects with
    ``ProcessId`` and ``CommandLine``); port output is one port per line.
    """

    platform = "win32"

    def __init__(self, process_pattern: str = DEFAULT_PROCESS_PATTERN) -> None:
        self._pattern = check_process_pattern(process_pattern)

    async def list_candidate_processes(self) -> str:
        script = (
            "Get-CimInstance Win32_Process | "
            f"Where-Object {{$_.Name -like '*{self._pattern}*'}} | "
            "Select-Object ProcessId,CommandLine | ConvertTo-Json"
        )
        return await run_command(_powershell(script), timeout=PROCESS_DISCOVERY_TIMEOUT)

    async def list_listening_ports(self, pid: int) -> str:
        if not is_valid_pid(pid):
            raise AgtCommandError(f"Refusing to query ports for invalid pid {pid!r}")
        script = f"Get-NetTCPConnection -OwningProcess {pid} -State Listen | Select-Object -ExpandProperty LocalPort"
        return await run_command(_powershell(script), timeout=PORT_DISCOVERY_TIMEOUT)
