from __future__ import annotations

import asyncio
import logging
import shutil
from pathlib import Path
from typing import Optional

import click

from pascal_run.domain.models import Platform
from pascal_run.ports.terminal import Terminal, TerminalFactory

logger = logging.getLogger(__name__)


def shell_command(platform: Platform, script: str) -> list[str]:
    if platform is Platform.WINDOWS:
        return ["powershell.exe", "-NoProfile", "-ExecutionPolicy", "Bypass", "-Command", script]
    bash = shutil.which("bash") or "/bin/bash"
    return [bash, "-c", script]


class ShellTerminal(Terminal):
    """
    A shell child process attached to this console.

    Lines sent with send_text are collected and handed to the shell as one
    script on dispatch(), so the program being run keeps the console's stdin.
    """

    def __init__(self, name: str, cwd: Path, platform: Platform):
        self.name = name
        self.cwd = cwd
        self.platform = platform
        self.lines: list[str] = []
        self._proc: Optional[asyncio.subprocess.Process] = None

    def show(self) -> None:
        click.secho(f"--- {self.name} ({self.cwd}) ---", fg="cyan", err=True)

    def send_text(self, text: str) -> None:
        if self._proc is not None:
            raise RuntimeError(f"Terminal {self.name!r} was already dispatched")
        self.lines.append(text)

    @property
    def script(self) -> str:
        return "\n".join(self.lines) + "\n"

    async def dispatch(self) -> None:
        if self._proc is not None:
            return
        args = shell_command(self.platform, self.script)
        logger.debug("Starting %s in %s", args[0], self.cwd)
        self._proc = await asyncio.create_subprocess_exec(*args, cwd=str(self.cwd))

    async def wait(self) -> int:
        if self._proc is None:
            return 0
        return await self._proc.wait()


class ShellTerminalFactory(TerminalFactory):
    def __init__(self, platform: Platform):
        self.platform = platform

    def create_terminal(self, name: str, cwd: Path) -> Terminal:
        return ShellTerminal(name, cwd, self.platform)
