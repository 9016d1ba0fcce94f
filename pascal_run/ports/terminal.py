from pathlib import Path


class Terminal:
    """
    A terminal session the orchestrator writes instructions into.
    Output is never read back; the user watches it.
    """

    def show(self) -> None:
        raise NotImplementedError

    def send_text(self, text: str) -> None:
        raise NotImplementedError

    async def dispatch(self) -> None:
        """Start executing everything sent so far. Returns without waiting for completion."""
        raise NotImplementedError

    async def wait(self) -> int:
        """Wait for the session to end and return the shell's exit status."""
        raise NotImplementedError


class TerminalFactory:
    def create_terminal(self, name: str, cwd: Path) -> Terminal:
        raise NotImplementedError
