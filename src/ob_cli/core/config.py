"""Project-scoped upgrade settings from ``.obelisk/config.yaml`` and ``OB_*`` variables."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, replace
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import ConfigError

HANDOFF_MODES: tuple[str, ...] = ("exec", "spawn")
DEFAULT_EXECUTABLE = "bin/ob"
LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _default_handoff_mode() -> str:
    # os.execv cannot replace the process image on Windows.
    return "spawn" if os.name == "nt" else "exec"


def _default_ambient_dir() -> Path:
    """Return the install root of the running ob (``<root>/bin/ob`` -> ``<root>``)."""
    return Path(sys.argv[0]).resolve().parent.parent


@dataclass(frozen=True, slots=True)
class ObSettings:
    """Settings that steer where ob looks for tools and how it hands off."""

    ambient_dir: Path | None = None
    executable: str = DEFAULT_EXECUTABLE
    handoff_mode: str = "exec"
    log_level: str = "WARNING"

    def resolved_ambient_dir(self) -> Path:
        return self.ambient_dir if self.ambient_dir is not None else _default_ambient_dir()

    @classmethod
    def from_dict(cls, data: dict[str, object] | None) -> "ObSettings":
        settings = cls(handoff_mode=_default_handoff_mode())
        if not isinstance(data, dict):
            return settings

        executable = data.get("executable")
        if executable is not None:
            if not isinstance(executable, str) or not executable.strip():
                raise ConfigError("upgrade.executable must be a non-empty string")
            settings = replace(settings, executable=executable.strip())

        mode = data.get("handoff_mode")
        if mode is not None:
            settings = replace(settings, handoff_mode=_validate_mode(mode, "upgrade.handoff_mode"))
        return settings


def _validate_mode(value: object, source: str) -> str:
    mode = str(value).strip().lower()
    if mode not in HANDOFF_MODES:
        raise ConfigError(
            f"{source} must be one of {', '.join(HANDOFF_MODES)} (got {value!r})"
        )
    return mode


def _config_path(project: Path) -> Path:
    return project / ".obelisk" / "config.yaml"


def _read_upgrade_section(project: Path) -> dict[str, object] | None:
    config_path = _config_path(project)
    if not config_path.exists():
        return None

    yaml = YAML(typ="safe")
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            payload = yaml.load(handle) or {}
    except (OSError, YAMLError) as exc:
        raise ConfigError(f"Failed to parse {config_path}: {exc}") from exc

    if not isinstance(payload, dict):
        raise ConfigError(f"{config_path} must contain a mapping")
    section = payload.get("upgrade")
    if section is not None and not isinstance(section, dict):
        raise ConfigError(f"'upgrade' in {config_path} must be a mapping")
    return section


def load_settings(project: Path | None = None, environ: dict[str, str] | None = None) -> ObSettings:
    """Resolve settings; environment variables win over the project file."""
    env = os.environ if environ is None else environ
    settings = ObSettings.from_dict(_read_upgrade_section(project) if project else None)

    ambient = env.get("OB_AMBIENT_DIR", "").strip()
    if ambient:
        settings = replace(settings, ambient_dir=Path(ambient).expanduser())

    executable = env.get("OB_EXECUTABLE", "").strip()
    if executable:
        settings = replace(settings, executable=executable)

    mode = env.get("OB_HANDOFF_MODE", "").strip()
    if mode:
        settings = replace(settings, handoff_mode=_validate_mode(mode, "OB_HANDOFF_MODE"))

    level = env.get("OB_LOG_LEVEL", "").strip().upper()
    if level:
        if level not in LOG_LEVELS:
            raise ConfigError(f"OB_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)} (got {level!r})")
        settings = replace(settings, log_level=level)

    return settings
