from __future__ import annotations

import logging
import os
from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from pascal_run.domain.models import CompilerConfig
from pascal_run.ports.config_store import ConfigStore

logger = logging.getLogger(__name__)

INI_DEFAULT_NAME = "pascal_run.ini"
SECTION = "pascal-auto-run"

DEFAULTS: dict[str, Any] = {
    "compilerPath": "",
    "compilerOptions": "",
    "cleanupAfterCompile": False,
    "saveBeforeCompile": True,
    "pauseAfterExecution": True,
}


@dataclass(frozen=True)
class AnalyticsSettings:
    enabled: bool
    measurement_id: str
    api_secret: str

    @property
    def configured(self) -> bool:
        return self.enabled and bool(self.measurement_id) and bool(self.api_secret)


class IniConfig(ConfigStore):
    """
    Adapter around ConfigParser: the settings store behind get/update.
    A missing file reads as all defaults; the first update creates it.
    """

    def __init__(self, ini_path: Path):
        self._ini_path = ini_path
        self._cfg = self._new_parser()
        self.reload()

    @staticmethod
    def _new_parser() -> ConfigParser:
        cfg = ConfigParser(interpolation=None)
        # keep camelCase keys as written
        cfg.optionxform = str
        return cfg

    @staticmethod
    def from_env_or_default(explicit: Optional[Path] = None) -> "IniConfig":
        if explicit is not None:
            return IniConfig(Path(explicit).expanduser())
        ini_raw = (os.getenv("PASCAL_RUN_INI") or "").strip()
        # If PASCAL_RUN_INI is not set, default to the per-user config directory
        ini_path = (
            Path(os.path.expandvars(os.path.expanduser(ini_raw)))
            if ini_raw
            else Path.home() / ".config" / "pascal-run" / INI_DEFAULT_NAME
        )
        return IniConfig(ini_path)

    @property
    def path(self) -> Path:
        return self._ini_path

    def reload(self) -> None:
        cfg = self._new_parser()
        if self._ini_path.exists():
            read_ok = cfg.read(str(self._ini_path), encoding="utf-8-sig")
            if not read_ok:
                raise OSError(f"INI file unreadable: {self._ini_path}")
        self._cfg = cfg

    def get(self, key: str, default: Any = None) -> Any:
        if default is None:
            default = DEFAULTS.get(key)
        if not self._cfg.has_option(SECTION, key):
            return default
        if isinstance(default, bool):
            try:
                return self._cfg.getboolean(SECTION, key)
            except ValueError:
                logger.warning("Invalid boolean for %s in %s, using %r", key, self._ini_path, default)
                return default
        return self._cfg.get(SECTION, key, fallback="") or ""

    def update(self, key: str, value: Any) -> None:
        """Write one setting. The in-memory values change only once the file is written."""
        cfg = self._new_parser()
        cfg.read_dict(self._cfg)
        if not cfg.has_section(SECTION):
            cfg.add_section(SECTION)
        if isinstance(value, bool):
            value = "true" if value else "false"
        cfg.set(SECTION, key, "" if value is None else str(value))

        self._ini_path.parent.mkdir(parents=True, exist_ok=True)
        with self._ini_path.open("w", encoding="utf-8") as fh:
            cfg.write(fh)
        self._cfg = cfg
        logger.debug("Saved %s to %s", key, self._ini_path)

    def load_analytics(self) -> AnalyticsSettings:
        return AnalyticsSettings(
            enabled=self._cfg.getboolean("analytics", "enabled", fallback=True),
            measurement_id=(self._cfg.get("analytics", "measurement_id", fallback="") or "").strip(),
            api_secret=(self._cfg.get("analytics", "api_secret", fallback="") or "").strip(),
        )


def load_compiler_config(store: ConfigStore) -> CompilerConfig:
    """Read the compile settings fresh; they may change between invocations."""
    return CompilerConfig(
        compiler_path=(store.get("compilerPath", "") or "").strip(),
        compiler_options=(store.get("compilerOptions", "") or "").strip(),
        cleanup_after_compile=bool(store.get("cleanupAfterCompile", False)),
        save_before_compile=bool(store.get("saveBeforeCompile", True)),
        pause_after_execution=bool(store.get("pauseAfterExecution", True)),
    )
