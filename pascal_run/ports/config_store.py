from typing import Any


class ConfigStore:
    """Capability interface: key/value settings owned by the host."""

    def get(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    def update(self, key: str, value: Any) -> None:
        raise NotImplementedError

    def reload(self) -> None:
        """Re-read the persisted settings, dropping anything cached."""
        raise NotImplementedError
