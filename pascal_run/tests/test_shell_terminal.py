from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from pascal_run.adapters.shell_terminal import ShellTerminal, shell_command
from pascal_run.domain.models import Platform


def test_windows_uses_powershell_command():
    args = shell_command(Platform.WINDOWS, "Clear-Host\n")
    assert args[0] == "powershell.exe"
    assert args[-2:] == ["-Command", "Clear-Host\n"]


def test_lines_are_joined_into_one_script(tmp_path: Path):
    terminal = ShellTerminal("t", tmp_path, Platform.UNIX)
    terminal.send_text("echo one")
    terminal.send_text("echo two")
    assert terminal.script == "echo one\necho two\n"


@pytest.mark.asyncio
async def test_wait_before_dispatch_is_a_no_op(tmp_path: Path):
    assert await ShellTerminal("t", tmp_path, Platform.UNIX).wait() == 0


@pytest.mark.skipif(shutil.which("bash") is None, reason="bash not available")
@pytest.mark.asyncio
async def test_dispatch_runs_script_in_cwd(tmp_path: Path):
    terminal = ShellTerminal("t", tmp_path, Platform.UNIX)
    terminal.send_text("pwd > where.txt")
    terminal.send_text("exit 3")

    await terminal.dispatch()
    status = await terminal.wait()

    assert status == 3
    assert Path((tmp_path / "where.txt").read_text().strip()).resolve() == tmp_path.resolve()

    with pytest.raises(RuntimeError):
        terminal.send_text("echo late")
