from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Optional, Sequence

from pascal_run.domain.models import Platform

logger = logging.getLogger(__name__)

VERIFY_TIMEOUT_SECONDS = 5
LOCATE_TIMEOUT_SECONDS = 10


@dataclass(frozen=True)
class ProbeResult:
    returncode: int
    output: str                 # stdout + stderr


class ProcessProbe:
    """
    Short-lived subprocess probes. Every probe has a timeout; a launch error
    or a timeout yields None instead of raising.
    """

    def __init__(self, platform: Platform):
        self.platform = platform

    async def run(self, args: Sequence[str], timeout: float) -> Optional[ProbeResult]:
        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (OSError, ValueError) as e:
            logger.debug("Failed to launch %s: %s", args[0], e)
            return None

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.debug("%s timed out after %ss", args[0], timeout)
            try:
                proc.kill()
            except ProcessLookupError:
                pass
            await proc.wait()
            return None

        output = (stdout or b"").decode(errors="replace") + (stderr or b"").decode(errors="replace")
        return ProbeResult(returncode=proc.returncode or 0, output=output)

    async def locate_command(self, command: str) -> Optional[str]:
        """First match of `which`/`where` for the command, if any."""
        locator = "where" if self.platform is Platform.WINDOWS else "which"
        result = await self.run([locator, command], timeout=LOCATE_TIMEOUT_SECONDS)
        if result is None or result.returncode != 0:
            return None
        for line in result.output.splitlines():
            line = line.strip()
            if line:
                return line
        return None

    async def help_output(self, compiler_path: str) -> Optional[str]:
        result = await self.run([compiler_path, "-h"], timeout=VERIFY_TIMEOUT_SECONDS)
        return None if result is None else result.output

    @staticmethod
    def is_accessible(path: str) -> bool:
        try:
            return os.access(path, os.X_OK)
        except (OSError, ValueError):
            return os.path.exists(path)

    @staticmethod
    def exists(path: str) -> bool:
        try:
            return os.path.exists(path)
        except (OSError, ValueError):
            return False
