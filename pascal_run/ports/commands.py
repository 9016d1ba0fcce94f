from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict

CommandHandler = Callable[..., Awaitable[Any]]


class CommandRegistry:
    """
    Command-registration capability: handlers are looked up by name so the
    surface that triggers them (CLI, editor palette) stays replaceable.
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, CommandHandler] = {}

    def register_command(self, name: str, handler: CommandHandler) -> None:
        if name in self._handlers:
            raise ValueError(f"Command already registered: {name}")
        self._handlers[name] = handler

    def names(self) -> list[str]:
        return sorted(self._handlers)

    async def execute(self, name: str, *args: Any, **kwargs: Any) -> Any:
        try:
            handler = self._handlers[name]
        except KeyError:
            raise KeyError(f"Unknown command: {name}") from None
        return await handler(*args, **kwargs)
