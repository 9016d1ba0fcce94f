from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Sequence

import pytest

from pascal_run.domain.models import Platform
from pascal_run.repositories.artifact_repository import ArtifactRepository
from pascal_run.services.compiler_locator import CompilerLocator
from pascal_run.services.run_orchestrator import RunOrchestrator


# -----------------------------
# Test doubles
# -----------------------------
class FakeConfigStore:
    def __init__(self, values: Optional[dict] = None):
        self.values: dict[str, Any] = dict(values or {})
        self.updates: list[tuple[str, Any]] = []
        self.persist = True
        self.fail_updates = False
        self.reloads = 0

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def update(self, key: str, value: Any) -> None:
        if self.fail_updates:
            raise OSError("settings file is read-only")
        self.updates.append((key, value))
        if self.persist:
            self.values[key] = value

    def reload(self) -> None:
        self.reloads += 1


class FakeProbe:
    """Pretends some paths exist and some respond to `-h` like fpc."""

    def __init__(self):
        self.accessible: set[str] = set()
        self.existing: set[str] = set()
        self.help: dict[str, str] = {}
        self.on_path: Optional[str] = None
        self.locate_calls: list[str] = []
        self.help_calls: list[str] = []
        self.accessible_checks: list[str] = []

    def add_compiler(self, path: str, output: str = "Free Pascal Compiler version 3.2.2") -> None:
        self.accessible.add(path)
        self.existing.add(path)
        self.help[path] = output

    async def locate_command(self, command: str) -> Optional[str]:
        self.locate_calls.append(command)
        return self.on_path

    async def help_output(self, compiler_path: str) -> Optional[str]:
        self.help_calls.append(compiler_path)
        return self.help.get(compiler_path)

    def is_accessible(self, path: str) -> bool:
        self.accessible_checks.append(path)
        return path in self.accessible

    def exists(self, path: str) -> bool:
        return path in self.existing


class FakePrompter:
    def __init__(self):
        self.choice: Optional[str] = None
        self.picked: Optional[str] = None
        self.choices_offered: list[Sequence[str]] = []
        self.opened: list[str] = []
        self.infos: list[str] = []
        self.warnings: list[str] = []
        self.errors: list[str] = []

    def info(self, message: str) -> None:
        self.infos.append(message)

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)

    async def choose(self, message: str, options: Sequence[str]) -> Optional[str]:
        self.choices_offered.append(list(options))
        return self.choice

    async def pick_file(self, title: str) -> Optional[str]:
        return self.picked

    def open_external(self, url: str) -> None:
        self.opened.append(url)


class FakeTerminal:
    def __init__(self, name: str, cwd: Path):
        self.name = name
        self.cwd = cwd
        self.shown = False
        self.lines: list[str] = []
        self.dispatched = False
        self.exit_status = 0

    def show(self) -> None:
        self.shown = True

    def send_text(self, text: str) -> None:
        self.lines.append(text)

    async def dispatch(self) -> None:
        self.dispatched = True

    async def wait(self) -> int:
        return self.exit_status


class FakeTerminalFactory:
    def __init__(self):
        self.created: list[FakeTerminal] = []

    def create_terminal(self, name: str, cwd: Path) -> FakeTerminal:
        terminal = FakeTerminal(name, cwd)
        self.created.append(terminal)
        return terminal


class FakeDocument:
    def __init__(self, path: Path, dirty: bool = False, save_ok: bool = True):
        self.path = path
        self.dirty = dirty
        self.save_ok = save_ok
        self.saved = False

    @property
    def is_dirty(self) -> bool:
        return self.dirty

    async def save(self) -> bool:
        self.saved = True
        return self.save_ok


class FakeEditor:
    def __init__(self, document: Optional[FakeDocument] = None):
        self.document = document

    def active_document(self) -> Optional[FakeDocument]:
        return self.document


class RecordingSleep:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class FakeAnalytics:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.events: list[tuple[str, dict]] = []

    async def send_event(self, name: str, params: Optional[dict] = None) -> bool:
        self.events.append((name, dict(params or {})))
        if self.fail:
            raise ConnectionError("analytics endpoint unreachable")
        return True


class FakeKiller:
    def __init__(self):
        self.killed: list[str] = []

    async def __call__(self, base_name: str) -> int:
        self.killed.append(base_name)
        return 0


# -----------------------------
# Fixtures
# -----------------------------
@pytest.fixture
def config() -> FakeConfigStore:
    return FakeConfigStore()


@pytest.fixture
def probe() -> FakeProbe:
    return FakeProbe()


@pytest.fixture
def prompter() -> FakePrompter:
    return FakePrompter()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def terminals() -> FakeTerminalFactory:
    return FakeTerminalFactory()


@pytest.fixture
def analytics() -> FakeAnalytics:
    return FakeAnalytics()


@pytest.fixture
def killer() -> FakeKiller:
    return FakeKiller()


@pytest.fixture
def editor() -> FakeEditor:
    return FakeEditor()


@pytest.fixture
def make_document():
    return FakeDocument


@pytest.fixture
def make_locator(config, probe, prompter, sleep, tmp_path):
    def _make(platform: Platform = Platform.UNIX, env: Optional[dict] = None) -> CompilerLocator:
        return CompilerLocator(
            config=config,
            probe=probe,
            prompter=prompter,
            platform=platform,
            env=env or {},
            home=tmp_path / "home",
            sleep=sleep,
        )
    return _make


@pytest.fixture
def source_file(tmp_path: Path) -> Path:
    src = tmp_path / "hello.pas"
    src.write_text("program hello; begin writeln('hi') end.\n", encoding="utf-8")
    return src


@pytest.fixture
def make_orchestrator(config, editor, make_locator, terminals, prompter, killer, analytics, sleep):
    def _make(locator: Optional[CompilerLocator] = None, platform: Platform = Platform.UNIX) -> RunOrchestrator:
        return RunOrchestrator(
            config=config,
            editor=editor,
            locator=locator or make_locator(platform),
            terminals=terminals,
            artifacts=ArtifactRepository(platform=platform),
            prompter=prompter,
            kill_processes=killer,
            send_event=analytics.send_event,
            platform=platform,
            sleep=sleep,
        )
    return _make
