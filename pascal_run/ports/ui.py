from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence


class Prompter:
    """Messages, choices and file selection shown to the user."""

    def info(self, message: str) -> None:
        raise NotImplementedError

    def warn(self, message: str) -> None:
        raise NotImplementedError

    def error(self, message: str) -> None:
        raise NotImplementedError

    async def choose(self, message: str, options: Sequence[str]) -> Optional[str]:
        raise NotImplementedError

    async def pick_file(self, title: str) -> Optional[str]:
        raise NotImplementedError

    def open_external(self, url: str) -> None:
        raise NotImplementedError


class Document:
    path: Path

    @property
    def is_dirty(self) -> bool:
        raise NotImplementedError

    async def save(self) -> bool:
        raise NotImplementedError


class Editor:
    def active_document(self) -> Optional[Document]:
        raise NotImplementedError
