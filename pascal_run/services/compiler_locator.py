"""
Finds a working Free Pascal compiler.

Strategies run in order and the first verified path wins:
configured path, PATH lookup, known install locations, then asking the user.
Paths found by the automatic strategies are written back to configuration.
"""
from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path, PureWindowsPath
from typing import Awaitable, Callable, Mapping, Optional

from pascal_run.adapters.process_probe import ProcessProbe
from pascal_run.domain.errors import CompilerSaveError
from pascal_run.domain.models import Platform
from pascal_run.ports.config_store import ConfigStore
from pascal_run.ports.ui import Prompter
from pascal_run.services.best_effort import Sleep, constant_delay, retry

logger = logging.getLogger(__name__)

COMPILER_COMMAND = "fpc"
VENDOR_SIGNATURE = "free pascal"
DOWNLOAD_URL = "https://www.freepascal.org/download.html"

WINDOWS_DRIVES = ("C:", "D:", "E:")
WINDOWS_VERSIONS = ("3.2.2", "3.2.0", "3.0.4", "3.0.0")
WINDOWS_ARCHS = ("i386-win32", "x86_64-win64")
WINDOWS_PROGRAM_FILES_VARS = ("ProgramFiles", "ProgramFiles(x86)", "ProgramW6432")

SAVE_VERIFY_ATTEMPTS = 3
SAVE_VERIFY_DELAY_SECONDS = 0.1

SELECT_BUTTON = "Select Compiler"
DOWNLOAD_BUTTON = "Download FPC"


@dataclass
class CompilerLocator:
    config: ConfigStore
    probe: ProcessProbe
    prompter: Prompter
    platform: Platform
    env: Mapping[str, str] = field(default_factory=lambda: dict(os.environ))
    home: Path = field(default_factory=Path.home)
    sleep: Sleep = asyncio.sleep

    async def resolve_compiler(self) -> Optional[str]:
        strategies: list[tuple[str, Callable[[], Awaitable[Optional[str]]]]] = [
            ("configured path", self._from_configuration),
            ("system PATH", self._from_path_lookup),
            ("known locations", self._from_known_locations),
            ("user selection", self.prompt_user_for_compiler),
        ]
        for name, strategy in strategies:
            try:
                found = await strategy()
            except Exception:
                logger.exception("Compiler lookup via %s failed", name)
                continue
            if found:
                return found
        return None

    async def verify_compiler(self, compiler_path: str) -> bool:
        """Heuristic: the help output must mention the vendor."""
        output = await self.probe.help_output(compiler_path)
        if output is None:
            return False
        return VENDOR_SIGNATURE in output.lower()

    def known_compiler_locations(self) -> list[str]:
        if self.platform is Platform.WINDOWS:
            paths = [
                str(PureWindowsPath(f"{drive}\\", "FPC", version, "bin", arch, "fpc.exe"))
                for drive in WINDOWS_DRIVES
                for version in WINDOWS_VERSIONS
                for arch in WINDOWS_ARCHS
            ]
            for var in WINDOWS_PROGRAM_FILES_VARS:
                base = (self.env.get(var) or "").strip()
                if base:
                    paths.append(str(PureWindowsPath(base, "FreePascal", "bin", "fpc.exe")))
            return paths

        return [
            "/usr/bin/fpc",
            "/usr/local/bin/fpc",
            "/opt/fpc/bin/fpc",
            str(self.home / ".fpc" / "bin" / "fpc"),
            "/opt/homebrew/bin/fpc",
            "/usr/local/opt/fpc/bin/fpc",
        ]

    async def _from_configuration(self) -> Optional[str]:
        configured = (self.config.get("compilerPath", "") or "").strip()
        if not configured:
            return None
        if not self.probe.is_accessible(configured):
            logger.info("Configured compiler not found: %s", configured)
            return None
        if not await self.verify_compiler(configured):
            logger.info("Configured compiler is invalid: %s", configured)
            return None
        logger.info("Using configured compiler: %s", configured)
        return configured

    async def _from_path_lookup(self) -> Optional[str]:
        logger.info("Searching for %s in system PATH...", COMPILER_COMMAND)
        found = await self.probe.locate_command(COMPILER_COMMAND)
        if not found or not await self.verify_compiler(found):
            return None
        logger.info("Found compiler in PATH: %s", found)
        self._persist(found)
        return found

    async def _from_known_locations(self) -> Optional[str]:
        logger.info("Searching in common installation paths...")
        candidate = next(
            (p for p in self.known_compiler_locations() if self.probe.is_accessible(p) or self.probe.exists(p)),
            None,
        )
        if candidate is None or not await self.verify_compiler(candidate):
            return None
        logger.info("Found compiler at: %s", candidate)
        self._persist(candidate)
        return candidate

    def _persist(self, compiler_path: str) -> None:
        try:
            self.config.update("compilerPath", compiler_path)
        except Exception as e:
            logger.warning("Could not save compiler path %s: %s", compiler_path, e)

    async def prompt_user_for_compiler(self) -> Optional[str]:
        logger.info("Compiler not found automatically.")
        choice = await self.prompter.choose(
            "Free Pascal Compiler (fpc) not found. Please select the compiler executable.",
            [SELECT_BUTTON, DOWNLOAD_BUTTON],
        )

        if choice == DOWNLOAD_BUTTON:
            self.prompter.open_external(DOWNLOAD_URL)
            return None
        if choice != SELECT_BUTTON:
            return None

        selected = await self.prompter.pick_file("Select Free Pascal Compiler (fpc/fpc.exe)")
        if not selected:
            return None

        if not self.probe.exists(selected):
            self.prompter.error(f"Selected file does not exist: {selected}")
            return None

        if not await self.verify_compiler(selected):
            self.prompter.error("Selected file is not a valid Free Pascal Compiler.")
            return None

        try:
            await self._save_and_confirm(selected)
        except Exception as e:
            self.prompter.error(f"Failed to save compiler path: {e}")
            return None

        self.prompter.info("Compiler path saved successfully!")
        logger.info("Compiler saved: %s", selected)
        return selected

    async def _save_and_confirm(self, compiler_path: str) -> None:
        self.config.update("compilerPath", compiler_path)

        async def _stored() -> bool:
            self.config.reload()
            return (self.config.get("compilerPath", "") or "") == compiler_path

        # the store may persist asynchronously; give it a moment before the first read
        await self.sleep(SAVE_VERIFY_DELAY_SECONDS)
        confirmed = await retry(
            _stored,
            attempts=SAVE_VERIFY_ATTEMPTS,
            delay=constant_delay(SAVE_VERIFY_DELAY_SECONDS),
            sleep=self.sleep,
            description="compiler path save check",
        )
        if not confirmed:
            raise CompilerSaveError("Configuration verification failed")
