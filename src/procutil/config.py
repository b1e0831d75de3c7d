"""Library settings: defaults, optional YAML file, then environment overrides."""

import os
from dataclasses import dataclass, fields

import yaml

CONFIG_ENV = "PROCUTIL_CONFIG"


@dataclass
class Settings:
    windows_shell: str = "cmd.exe"
    windows_shell_flag: str = "/C"
    encoding: str | None = None
    debug: bool = False


_ENV_KEYS = {
    "PROCUTIL_WINDOWS_SHELL": "windows_shell",
    "PROCUTIL_WINDOWS_SHELL_FLAG": "windows_shell_flag",
    "PROCUTIL_ENCODING": "encoding",
    "PROCUTIL_DEBUG": "debug",
}


def _as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _read_file(path: str) -> dict:
    """Parse a YAML settings file into a dict of Settings fields."""
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise RuntimeError(f"invalid procutil config {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise RuntimeError(f"invalid procutil config {path}: expected a mapping")

    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise RuntimeError(f"invalid procutil config {path}: unknown keys {', '.join(unknown)}")
    return data


def load_settings(read_file: bool = True) -> Settings:
    """Resolve settings.

    Order: defaults → YAML file named by PROCUTIL_CONFIG → PROCUTIL_* env vars.
    """
    values = {}
    path = os.environ.get(CONFIG_ENV)
    if path and read_file:
        values.update(_read_file(path))

    for env_key, field in _ENV_KEYS.items():
        env_value = os.environ.get(env_key)
        if env_value:
            values[field] = env_value

    if "debug" in values:
        values["debug"] = _as_bool(values["debug"])
    return Settings(**values)


def settings_or_defaults() -> Settings:
    """load_settings() for diagnostics and decoding.

    A broken config file is skipped; env vars still apply.
    """
    try:
        return load_settings()
    except RuntimeError:
        return load_settings(read_file=False)
