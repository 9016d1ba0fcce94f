from __future__ import annotations

import asyncio
import logging
import time

import psutil

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 0.05


def _matches(proc_name: str, base_name: str) -> bool:
    name = (proc_name or "").lower()
    target = base_name.lower()
    return name == target or name == target + ".exe"


def _alive(proc: psutil.Process) -> bool:
    # an unreaped zombie has already exited
    try:
        return proc.is_running() and proc.status() != psutil.STATUS_ZOMBIE
    except psutil.NoSuchProcess:
        return False


class ProcessKiller:
    """Stops leftover runs of a program so its executable can be replaced."""

    def __init__(self, grace_seconds: float = 2.0, poll_interval: float = POLL_INTERVAL_SECONDS, sleep=asyncio.sleep):
        self.grace_seconds = grace_seconds
        self.poll_interval = poll_interval
        self.sleep = sleep

    def find_by_name(self, base_name: str) -> list[psutil.Process]:
        current_pid = psutil.Process().pid
        found = []
        for proc in psutil.process_iter(["pid", "name"]):
            try:
                if proc.info["pid"] == current_pid:
                    continue
                if _matches(proc.info["name"], base_name):
                    found.append(proc)
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                continue
        return found

    async def kill_by_name(self, base_name: str) -> int:
        """
        Terminate every process named like the executable, give them the grace
        period to exit, then kill the ones still running. Returns how many stopped.
        """
        signalled: list[psutil.Process] = []
        stopped = 0
        for proc in self.find_by_name(base_name):
            try:
                logger.info("Stopping running %s (PID %s)", base_name, proc.pid)
                proc.terminate()
                signalled.append(proc)
            except psutil.NoSuchProcess:
                stopped += 1
            except psutil.AccessDenied as e:
                logger.warning("Could not stop %s (PID %s): %s", base_name, proc.pid, e)

        remaining = [p for p in signalled if _alive(p)]
        deadline = time.monotonic() + self.grace_seconds
        while remaining and time.monotonic() < deadline:
            await self.sleep(self.poll_interval)
            remaining = [p for p in remaining if _alive(p)]

        stopped += len(signalled)
        for proc in remaining:
            try:
                logger.info("%s (PID %s) ignored terminate; killing", base_name, proc.pid)
                proc.kill()
            except psutil.NoSuchProcess:
                pass
            except psutil.AccessDenied as e:
                stopped -= 1
                logger.warning("Could not kill %s (PID %s): %s", base_name, proc.pid, e)
        return stopped
