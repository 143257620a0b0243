from __future__ import annotations

import asyncio
from typing import Any

import pytest

from agtelemetry._system import (
    DarwinSystemProbe,
    LinuxSystemProbe,
    WindowsSystemProbe,
    run_command,
    system_probe_for_platform,
)
from agtelemetry._system import base, unix, windows
from agtelemetry.exceptions import AgtCommandError, AgtConfigError


class _FakeProcess:
    def __init__(self, stdout: bytes = b"", stderr: bytes = b"", returncode: int = 0, hang: bool = False) -> None:
        self._stdout = stdout
        self._stderr = stderr
        self._hang = hang
        self.returncode: int | None = returncode
        self.killed = False

    async def communicate(self) -> tuple[bytes, bytes]:
        if self._hang:
            await asyncio.Event().wait()
        return self._stdout, self._stderr

    def kill(self) -> None:
        self.killed = True

    async def wait(self) -> int | None:
        return self.returncode


def _patch_exec(monkeypatch: pytest.MonkeyPatch, proc: _FakeProcess | Exception) -> list[tuple[str, ...]]:
    calls: list[tuple[str, ...]] = []

    async def _fake_exec(*argv: str, **_kwargs: Any) -> _FakeProcess:
        calls.append(argv)
        if isinstance(proc, Exception):
            raise proc
        return proc

    monkeypatch.setattr(asyncio, "create_subprocess_exec", _fake_exec)
    return calls


@pytest.mark.asyncio
async def test_run_command_returns_stdout(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = _patch_exec(monkeypatch, _FakeProcess(stdout=b"4242 language_server\n"))

    output = await run_command(["ps", "-axo", "pid,args"], timeout=1)

    assert output == "4242 language_server\n"
    assert calls == [("ps", "-axo", "pid,args")]


@pytest.mark.asyncio
async def test_run_command_non_zero_exit(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_exec(monkeypatch, _FakeProcess(stderr=b"permission denied", returncode=1))

    with pytest.raises(AgtCommandError) as exc_info:
        await run_command(["ss", "-tlnp"], timeout=1)

    assert exc_info.value.command == "ss"
    assert exc_info.value.returncode == 1
    assert "permission denied" in str(exc_info.value)


@pytest.mark.asyncio
async def test_run_command_timeout_kills_child(monkeypatch: pytest.MonkeyPatch) -> None:
    proc = _FakeProcess(hang=True)
    _patch_exec(monkeypatch, proc)

    with pytest.raises(AgtCommandError, match="timed out"):
        await run_command(["lsof"], timeout=0.01)

    assert proc.killed is True


@pytest.mark.asyncio
async def test_run_command_missing_binary(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_exec(monkeypatch, FileNotFoundError("no such file: lsof"))

    with pytest.raises(AgtCommandError, match="Could not start lsof"):
        await run_command(["lsof"], timeout=1)


@pytest.mark.parametrize(
    ("platform", "expected"),
    [("win32", WindowsSystemProbe), ("darwin", DarwinSystemProbe), ("linux", LinuxSystemProbe), ("freebsd14", LinuxSystemProbe)],
)
def test_probe_selection(platform: str, expected: type) -> None:
    assert isinstance(system_probe_for_platform(platform), expected)


@pytest.mark.parametrize("pattern", ["", "language server", "x;rm -rf", "a'b", "*"])
def test_unsafe_process_patterns_rejected(pattern: str) -> None:
    with pytest.raises(AgtConfigError):
        system_probe_for_platform("linux", process_pattern=pattern)


def _record_commands(monkeypatch: pytest.MonkeyPatch, module: Any, output: str) -> list[list[str]]:
    calls: list[list[str]] = []

    async def _fake_run(argv: list[str], *, timeout: float) -> str:
        calls.append(list(argv))
        return output

    monkeypatch.setattr(module, "run_command", _fake_run)
    return calls


@pytest.mark.asyncio
async def test_linux_probe_filters_process_list(monkeypatch: pytest.MonkeyPatch) -> None:
    output = "  PID ARGS\n  12 /sbin/init\n 4242 /opt/ide/Language_Server --csrf_token deadbeef01\n"
    calls = _record_commands(monkeypatch, unix, output)

    listing = await LinuxSystemProbe().list_candidate_processes()

    assert listing == " 4242 /opt/ide/Language_Server --csrf_token deadbeef01"
    assert calls == [["ps", "-axo", "pid,args"]]


@pytest.mark.asyncio
async def test_darwin_ports_use_lsof_for_the_pid(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = _record_commands(monkeypatch, unix, "p4242\nn*:42100\n")

    ports = await DarwinSystemProbe().list_listening_ports(4242)

    assert ports == "42100"
    assert calls == [["lsof", "-iTCP", "-sTCP:LISTEN", "-a", "-p", "4242", "-Fn", "-P", "-n"]]


@pytest.mark.asyncio
async def test_windows_commands_run_through_powershell(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = _record_commands(monkeypatch, windows, "42100\r\n")

    await WindowsSystemProbe().list_candidate_processes()
    await WindowsSystemProbe().list_listening_ports(4242)

    assert calls[0][:4] == ["powershell", "-NoProfile", "-NonInteractive", "-Command"]
    assert "*language_server*" in calls[0][4]
    assert "-OwningProcess 4242 -State Listen" in calls[1][4]


@pytest.mark.asyncio
@pytest.mark.parametrize("probe", [LinuxSystemProbe(), DarwinSystemProbe(), WindowsSystemProbe()])
async def test_invalid_pid_never_reaches_a_command(monkeypatch: pytest.MonkeyPatch, probe: Any) -> None:
    unix_calls = _record_commands(monkeypatch, unix, "")
    windows_calls = _record_commands(monkeypatch, windows, "")

    with pytest.raises(AgtCommandError):
        await probe.list_listening_ports(0)

    assert unix_calls == []
    assert windows_calls == []


def test_filter_process_lines_is_case_insensitive() -> None:
    assert base.filter_process_lines("1 A\n2 LANGUAGE_SERVER\n3 b", "language_server") == "2 LANGUAGE_SERVER"
