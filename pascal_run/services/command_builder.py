from __future__ import annotations

import re
from pathlib import PurePath
from typing import Union

from pascal_run.domain.models import Platform
from pascal_run.services.best_effort import backoff_schedule, linear_backoff

PathLike = Union[str, PurePath]

# Stale executable removal inside the generated script
DELETE_ATTEMPTS = 3
DELETE_BACKOFF_SECONDS = 0.25
# Time the OS gets to release a killed program's file handle
KILL_SETTLE_SECONDS = 0.3

_UNIX_SPECIAL = re.compile(r'(["`$\\])')


def escape_path_for_shell(value: PathLike, platform: Platform) -> str:
    """
    Quote a path for interpolation into a shell line.
    PowerShell: single quotes, embedded quotes doubled.
    Bash: double quotes, with " ` $ and backslash escaped.
    """
    s = str(value)
    if platform is Platform.WINDOWS:
        return "'" + s.replace("'", "''") + "'"
    return '"' + _UNIX_SPECIAL.sub(r"\\\1", s) + '"'


def _base_name(exe_path: PathLike) -> str:
    name = PurePath(str(exe_path).replace("\\", "/")).name
    return name[:-4] if name.lower().endswith(".exe") else name


def _compile_line(compiler: str, options: str, source: str, prefix: str = "") -> str:
    parts = [prefix + compiler]
    if options:
        parts.append(options)
    parts.append(source)
    return " ".join(parts)


def build_unix_instructions(
    compiler_path: PathLike,
    options: str,
    source_path: PathLike,
    exe_path: PathLike,
    pause_after_run: bool,
) -> list[str]:
    compiler = escape_path_for_shell(compiler_path, Platform.UNIX)
    source = escape_path_for_shell(source_path, Platform.UNIX)
    exe = escape_path_for_shell(exe_path, Platform.UNIX)
    process_name = escape_path_for_shell(_base_name(exe_path), Platform.UNIX)
    delays = " ".join(f"{d:g}" for d in backoff_schedule(DELETE_ATTEMPTS, linear_backoff(DELETE_BACKOFF_SECONDS)))

    lines = [
        "clear",
        f"pkill -x {process_name} 2>/dev/null || true",
        f"sleep {KILL_SETTLE_SECONDS:g}",
        f"for DELAY in {delays}; do",
        f"  rm -f {exe} 2>/dev/null",
        f"  [ -e {exe} ] || break",
        "  sleep $DELAY",
        "done",
        f"if [ -e {exe} ]; then",
        '  echo "Warning: could not remove the previous executable"',
        "fi",
        'echo "=== Compiling Pascal program ==="',
        _compile_line(compiler, (options or "").strip(), source),
        "EXIT_CODE=$?",
        "if [ $EXIT_CODE -eq 0 ]; then",
        f"  if [ -f {exe} ]; then",
        '    echo ""',
        '    echo "=== Compilation successful! Running program ==="',
        '    echo ""',
        f"    chmod +x {exe}",
        f"    {exe}",
        "    PROGRAM_EXIT=$?",
        '    echo ""',
        '    echo "=== Program exited with code: $PROGRAM_EXIT ==="',
        "  else",
        '    echo ""',
        '    echo "=== Compilation succeeded but the executable was not created ==="',
        "  fi",
        "else",
        '  echo ""',
        '  echo "=== Compilation failed! ==="',
        '  echo "Exit code: $EXIT_CODE"',
        "fi",
    ]

    if pause_after_run:
        lines += [
            'echo ""',
            'read -p "Press Enter to continue..." -r',
        ]

    return lines


def build_windows_instructions(
    compiler_path: PathLike,
    options: str,
    source_path: PathLike,
    exe_path: PathLike,
    pause_after_run: bool,
) -> list[str]:
    compiler = escape_path_for_shell(compiler_path, Platform.WINDOWS)
    source = escape_path_for_shell(source_path, Platform.WINDOWS)
    exe = escape_path_for_shell(exe_path, Platform.WINDOWS)
    process_name = escape_path_for_shell(_base_name(exe_path), Platform.WINDOWS)
    delays_ms = ", ".join(
        str(int(d * 1000)) for d in backoff_schedule(DELETE_ATTEMPTS, linear_backoff(DELETE_BACKOFF_SECONDS))
    )

    lines = [
        "Clear-Host",
        f"Stop-Process -Name {process_name} -Force -ErrorAction SilentlyContinue",
        f"Start-Sleep -Milliseconds {int(KILL_SETTLE_SECONDS * 1000)}",
        f"foreach ($delay in @({delays_ms})) {{",
        f"  Remove-Item -LiteralPath {exe} -Force -ErrorAction SilentlyContinue",
        f"  if (-not (Test-Path -LiteralPath {exe})) {{ break }}",
        "  Start-Sleep -Milliseconds $delay",
        "}",
        f"if (Test-Path -LiteralPath {exe}) {{",
        "  Write-Host 'Warning: could not remove the previous executable' -ForegroundColor Yellow",
        "}",
        "Write-Host '=== Compiling Pascal program ==='",
        _compile_line(compiler, (options or "").strip(), source, prefix="& "),
        "if ($LASTEXITCODE -eq 0) {",
        f"  if (Test-Path -LiteralPath {exe}) {{",
        "    Write-Host ''",
        "    Write-Host 'Compilation successful! Running...' -ForegroundColor Green",
        "    Write-Host ''",
        f"    & {exe}",
        "    $ProgramExit = $LASTEXITCODE",
        "    Write-Host ''",
        '    Write-Host "Program exited with code: $ProgramExit"',
        "  } else {",
        "    Write-Host ''",
        "    Write-Host 'Compilation succeeded but the executable was not created' -ForegroundColor Red",
        "  }",
        "} else {",
        "  Write-Host ''",
        '  Write-Host "Compilation failed! Exit code: $LASTEXITCODE" -ForegroundColor Red',
        "}",
    ]

    if pause_after_run:
        lines += [
            "Write-Host ''",
            "Write-Host 'Press any key to continue...' -ForegroundColor Yellow",
            "$null = $Host.UI.RawUI.ReadKey('NoEcho,IncludeKeyDown')",
        ]

    return lines


def build_instructions(
    compiler_path: PathLike,
    options: str,
    source_path: PathLike,
    exe_path: PathLike,
    pause_after_run: bool,
    platform: Platform,
) -> list[str]:
    if platform is Platform.WINDOWS:
        return build_windows_instructions(compiler_path, options, source_path, exe_path, pause_after_run)
    return build_unix_instructions(compiler_path, options, source_path, exe_path, pause_after_run)
