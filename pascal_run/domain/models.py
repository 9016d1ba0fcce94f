from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class Platform(str, Enum):
    WINDOWS = "windows"
    UNIX = "unix"

    @classmethod
    def current(cls) -> "Platform":
        return cls.WINDOWS if sys.platform == "win32" else cls.UNIX


class JobState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    RESOLVING_COMPILER = "resolving_compiler"
    PREPARING = "preparing"
    RUNNING = "running"
    ABORTED = "aborted"


@dataclass(frozen=True)
class CompilerConfig:
    compiler_path: str
    compiler_options: str
    cleanup_after_compile: bool
    save_before_compile: bool
    pause_after_execution: bool


@dataclass(frozen=True)
class SourceFile:
    path: Path

    @property
    def extension(self) -> str:
        return self.path.suffix.lower()

    @property
    def directory(self) -> Path:
        return self.path.parent

    @property
    def base_name(self) -> str:
        return self.path.stem


@dataclass(frozen=True)
class CompileJob:
    source: SourceFile
    compiler_path: str
    exe_path: Path
    options: str
    pause_after_execution: bool
    platform: Platform


@dataclass(frozen=True)
class RunResult:
    status: str                 # "dispatched" | "busy" | "no_editor" | "invalid" | "save_failed" | "no_compiler" | "error"
    message: str
    job: Optional[CompileJob] = None

    @property
    def ok(self) -> bool:
        return self.status == "dispatched"
