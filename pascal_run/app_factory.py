from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pascal_run.adapters.analytics_client import AnalyticsClient
from pascal_run.adapters.console_ui import CommandLineEditor, ConsolePrompter
from pascal_run.adapters.process_killer import ProcessKiller
from pascal_run.adapters.process_probe import ProcessProbe
from pascal_run.adapters.shell_terminal import ShellTerminalFactory
from pascal_run.config.ini_config import IniConfig
from pascal_run.domain.models import Platform
from pascal_run.ports.commands import CommandRegistry
from pascal_run.repositories.artifact_repository import ArtifactRepository
from pascal_run.services.compiler_locator import CompilerLocator
from pascal_run.services.run_orchestrator import RunOrchestrator

RUN_COMMAND = "pascal-auto-run.run"
SELECT_COMPILER_COMMAND = "pascal-auto-run.selectCompiler"


@dataclass
class App:
    config: IniConfig
    orchestrator: RunOrchestrator
    analytics: AnalyticsClient
    commands: CommandRegistry
    platform: Platform


def create_app(source_file: Optional[str] = None, config_path: Optional[Path] = None) -> App:
    """Composition root: the only place adapters are chosen and wired."""
    ini = IniConfig.from_env_or_default(config_path)
    platform = Platform.current()

    prompter = ConsolePrompter()
    probe = ProcessProbe(platform)
    analytics = AnalyticsClient(ini.load_analytics())

    locator = CompilerLocator(
        config=ini,
        probe=probe,
        prompter=prompter,
        platform=platform,
    )

    orchestrator = RunOrchestrator(
        config=ini,
        editor=CommandLineEditor(source_file),
        locator=locator,
        terminals=ShellTerminalFactory(platform),
        artifacts=ArtifactRepository(platform=platform),
        prompter=prompter,
        kill_processes=ProcessKiller().kill_by_name,
        send_event=analytics.send_event,
        platform=platform,
    )

    commands = CommandRegistry()
    commands.register_command(RUN_COMMAND, orchestrator.run)
    commands.register_command(SELECT_COMPILER_COMMAND, orchestrator.select_compiler)

    return App(
        config=ini,
        orchestrator=orchestrator,
        analytics=analytics,
        commands=commands,
        platform=platform,
    )
