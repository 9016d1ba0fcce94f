from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

import click

from pascal_run.ports.ui import Document, Editor, Prompter

CANCEL = "Cancel"


class ConsolePrompter(Prompter):
    """Prompter for a terminal session: click for output, prompts and launching URLs."""

    def info(self, message: str) -> None:
        click.secho(message, fg="green", err=True)

    def warn(self, message: str) -> None:
        click.secho(message, fg="yellow", err=True)

    def error(self, message: str) -> None:
        click.secho(message, fg="red", err=True)

    async def choose(self, message: str, options: Sequence[str]) -> Optional[str]:
        click.secho(message, fg="red", err=True)
        choices = list(options) + [CANCEL]
        for i, option in enumerate(choices, start=1):
            click.echo(f"  {i}) {option}", err=True)
        picked = click.prompt(
            "Choose",
            type=click.IntRange(1, len(choices)),
            default=len(choices),
            err=True,
        )
        choice = choices[picked - 1]
        return None if choice == CANCEL else choice

    async def pick_file(self, title: str) -> Optional[str]:
        raw = click.prompt(title, default="", show_default=False, err=True)
        raw = (raw or "").strip().strip('"').strip("'")
        return str(Path(raw).expanduser()) if raw else None

    def open_external(self, url: str) -> None:
        click.echo(f"Opening {url}", err=True)
        click.launch(url)


class FileDocument(Document):
    """A file named on the command line. It is read from disk, so never dirty."""

    def __init__(self, path: Path):
        self.path = path

    @property
    def is_dirty(self) -> bool:
        return False

    async def save(self) -> bool:
        return True


class CommandLineEditor(Editor):
    def __init__(self, path: Optional[str]):
        self._document = FileDocument(Path(path).expanduser().absolute()) if path else None

    def active_document(self) -> Optional[Document]:
        return self._document
