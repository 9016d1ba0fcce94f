from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

from pascal_run.config.ini_config import load_compiler_config
from pascal_run.domain.errors import SourceValidationError
from pascal_run.domain.models import CompileJob, JobState, Platform, RunResult, SourceFile
from pascal_run.ports.config_store import ConfigStore
from pascal_run.ports.terminal import Terminal, TerminalFactory
from pascal_run.ports.ui import Editor, Prompter
from pascal_run.repositories.artifact_repository import ArtifactRepository
from pascal_run.services.best_effort import NonCriticalOperation, NonCriticalResult, Sleep, linear_backoff, retry
from pascal_run.services.command_builder import build_instructions
from pascal_run.services.compiler_locator import CompilerLocator

logger = logging.getLogger(__name__)

PASCAL_EXTENSIONS = (".pas", ".pp", ".inc", ".lpr")
TERMINAL_NAME = "Pascal Auto Run"

CLEANUP_DELAY_SECONDS = 2.0
STALE_EXE_ATTEMPTS = 3
STALE_EXE_BACKOFF_SECONDS = 0.25
KILL_SETTLE_SECONDS = 0.3


def validate_source(path: Path, artifacts: ArtifactRepository) -> SourceFile:
    """Raise SourceValidationError unless `path` can be compiled and run in place."""
    raw = str(path)
    if "\n" in raw or "\r" in raw:
        raise SourceValidationError("File path contains a line break and cannot be passed to the terminal.")

    source = SourceFile(path=path)
    if source.extension not in PASCAL_EXTENSIONS:
        raise SourceValidationError(
            f"Current file is not a Pascal file ({', '.join(PASCAL_EXTENSIONS)})"
        )
    if not path.is_file():
        raise SourceValidationError(f"File does not exist: {path}")
    if not artifacts.is_writable_dir(source.directory):
        raise SourceValidationError(f"Directory is not writable: {source.directory}")
    return source


class RunOrchestrator:
    """
    Drives one compile-and-run job at a time.

    Create exactly one instance per process (the composition root does); the
    job guard is this instance's state, so a second instance would not see it.
    """

    def __init__(
        self,
        *,
        config: ConfigStore,
        editor: Editor,
        locator: CompilerLocator,
        terminals: TerminalFactory,
        artifacts: ArtifactRepository,
        prompter: Prompter,
        kill_processes: Callable[[str], Awaitable[int]],
        send_event: Callable[..., Awaitable[Any]],
        platform: Platform,
        sleep: Sleep = asyncio.sleep,
        cleanup_delay: float = CLEANUP_DELAY_SECONDS,
    ):
        self.config = config
        self.editor = editor
        self.locator = locator
        self.terminals = terminals
        self.artifacts = artifacts
        self.prompter = prompter
        self.kill_processes = kill_processes
        self.send_event = send_event
        self.platform = platform
        self.sleep = sleep
        self.cleanup_delay = cleanup_delay

        self.state = JobState.IDLE
        self._running = False
        self._background: set[asyncio.Task] = set()
        self._terminals: list[Terminal] = []

    @property
    def is_busy(self) -> bool:
        return self._running

    async def run(self) -> RunResult:
        if self._running:
            logger.info("A compile job is already running; ignoring request")
            return RunResult(status="busy", message="A compile job is already running.")

        self._running = True
        try:
            return await self._run_job()
        except Exception as e:
            self.state = JobState.ABORTED
            logger.exception("Unexpected error during compile job")
            message = f"Unexpected error while compiling: {e}"
            self.prompter.error(message)
            return RunResult(status="error", message=message)
        finally:
            self._running = False

    def _abort(self, status: str, message: str, *, warn: bool = False) -> RunResult:
        self.state = JobState.ABORTED
        logger.info("Job aborted (%s): %s", status, message)
        if warn:
            self.prompter.warn(message)
        else:
            self.prompter.error(message)
        return RunResult(status=status, message=message)

    async def _run_job(self) -> RunResult:
        self.state = JobState.VALIDATING

        document = self.editor.active_document()
        if document is None:
            return self._abort("no_editor", "No active editor found")

        try:
            source = validate_source(document.path, self.artifacts)
        except SourceValidationError as e:
            return self._abort("invalid", str(e), warn=True)

        settings = load_compiler_config(self.config)

        if settings.save_before_compile and document.is_dirty:
            if not await document.save():
                return self._abort("save_failed", "Failed to save file")

        logger.info("=" * 60)
        logger.info("Pascal Auto Run")
        logger.info("=" * 60)
        logger.info("File: %s", source.path)
        logger.info("Platform: %s", sys.platform)

        self.state = JobState.RESOLVING_COMPILER
        compiler_path = await self.locator.resolve_compiler()
        if not compiler_path:
            return self._abort("no_compiler", "No compiler available")

        self.fire_and_forget(
            "analytics:compile_clicked",
            lambda: self.send_event("compile_clicked", {"platform": sys.platform, "file_extension": source.extension}),
        )

        self.state = JobState.PREPARING
        logger.info("Compiler: %s", compiler_path)
        if settings.compiler_options:
            logger.info("Compiler options: %s", settings.compiler_options)

        job = CompileJob(
            source=source,
            compiler_path=compiler_path,
            exe_path=self.artifacts.executable_path(source),
            options=settings.compiler_options,
            pause_after_execution=settings.pause_after_execution,
            platform=self.platform,
        )

        await self._release_stale_executable(job)

        instructions = build_instructions(
            job.compiler_path,
            job.options,
            job.source.path,
            job.exe_path,
            job.pause_after_execution,
            job.platform,
        )

        self.state = JobState.RUNNING
        terminal = self.terminals.create_terminal(TERMINAL_NAME, source.directory)
        terminal.show()
        for line in instructions:
            terminal.send_text(line)
        await terminal.dispatch()
        self._terminals.append(terminal)
        logger.info("Commands sent to terminal")
        logger.info("=" * 60)

        if settings.cleanup_after_compile:
            self.fire_and_forget("cleanup:" + source.base_name, lambda: self._cleanup_after(terminal, source))

        self.state = JobState.IDLE
        return RunResult(status="dispatched", message=f"Compiling {source.path.name}", job=job)

    async def _release_stale_executable(self, job: CompileJob) -> None:
        await NonCriticalOperation("kill stale process", self._kill_and_settle(job.source.base_name)).run()

        async def _delete() -> bool:
            return self.artifacts.remove_stale_executable(job.exe_path)

        removed = await retry(
            _delete,
            attempts=STALE_EXE_ATTEMPTS,
            delay=linear_backoff(STALE_EXE_BACKOFF_SECONDS),
            sleep=self.sleep,
            description=f"delete {job.exe_path}",
        )
        if not removed:
            logger.warning("Could not remove previous executable %s", job.exe_path)

    def _kill_and_settle(self, base_name: str) -> Callable[[], Awaitable[int]]:
        async def _go() -> int:
            stopped = await self.kill_processes(base_name) or 0
            if stopped:
                await self.sleep(KILL_SETTLE_SECONDS)
            return stopped
        return _go

    async def _cleanup_after(self, terminal: Terminal, source: SourceFile) -> list[Path]:
        await terminal.wait()
        await self.sleep(self.cleanup_delay)
        return self.artifacts.delete_intermediates(source)

    def fire_and_forget(self, name: str, factory: Callable[[], Awaitable[Any]]) -> "asyncio.Task[NonCriticalResult]":
        task = NonCriticalOperation(name, factory).schedule()
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def select_compiler(self) -> Optional[str]:
        logger.info("Manual compiler selection requested")
        compiler_path = await self.locator.prompt_user_for_compiler()
        if compiler_path:
            logger.info("Compiler selected: %s", compiler_path)
        else:
            logger.info("Compiler selection cancelled")
        return compiler_path

    async def drain(self) -> int:
        """Wait for open terminal sessions and background work. Returns the last terminal's exit status."""
        status = 0
        for terminal in list(self._terminals):
            status = await terminal.wait()
        self._terminals.clear()
        if self._background:
            await asyncio.gather(*list(self._background))
        return status
