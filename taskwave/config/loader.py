import json
import tomllib
from pathlib import Path
from typing import Any, Mapping

import yaml

from .types import ConfigError, RunSettings, UnsupportedConfigFormatError

_FORMATS = {".yaml": "yaml", ".yml": "yaml", ".toml": "toml", ".json": "json"}


def load_settings(path: str | Path) -> RunSettings:
    settings_path = Path(path).expanduser().resolve()

    if not settings_path.is_file():
        what = "is not a file" if settings_path.exists() else "not found"
        raise ConfigError(f"Settings file {what}: {settings_path}")

    fmt = _detect_format(settings_path)
    return _build_settings(_parse_file(settings_path, fmt))


def _detect_format(path: Path) -> str:
    try:
        return _FORMATS[path.suffix]
    except KeyError:
        raise UnsupportedConfigFormatError(
            f"{path.name}: settings must be one of {', '.join(sorted(_FORMATS))}"
        ) from None


def _parse_file(path: Path, fmt: str) -> Mapping[str, Any]:
    text = path.read_text(encoding="utf-8")
    match fmt:
        case "yaml":
            try:
                raw_file = yaml.safe_load(text)
            except yaml.YAMLError as exc:
                raise ConfigError(f"{path}: invalid YAML") from exc
        case "toml":
            try:
                raw_file = tomllib.loads(text)
            except tomllib.TOMLDecodeError as exc:
                raise ConfigError(f"{path}: invalid TOML") from exc
        case "json":
            try:
                raw_file = json.loads(text)
            except json.JSONDecodeError as exc:
                raise ConfigError(f"{path}: invalid JSON") from exc
        case _:
            raise AssertionError("Unreachable")

    # An empty YAML document is an empty config
    if raw_file is None and fmt == "yaml":
        return {}

    if not isinstance(raw_file, Mapping):
        raise ConfigError(
            f"{path}: parsed successfully but top-level value is not an object: {type(raw_file)}"
        )

    return raw_file


def _build_settings(raw: Mapping[str, Any]) -> RunSettings:
    keys = {"max_workers", "task_timeout_s"}

    unknown_top = set(raw) - {"executor"}
    if unknown_top:
        raise ConfigError(f"Can't process: {', '.join(sorted(map(str, unknown_top)))}")

    section = raw.get("executor", {})
    if section is None:
        return RunSettings()

    if not isinstance(section, Mapping):
        raise ConfigError(f"'executor' must be a mapping, got {type(section)}")

    for field in section.keys():
        if field not in keys:
            raise ConfigError(f"executor: Can't process: {field}")

    max_workers = None
    task_timeout_s = None

    if section.get("max_workers") is not None:
        value = section["max_workers"]
        # bool is an int subclass
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError("executor: max_workers should be an integer")
        if value < 1:
            raise ConfigError("executor: max_workers must be at least 1")
        max_workers = value

    if section.get("task_timeout_s") is not None:
        value = section["task_timeout_s"]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError("executor: task_timeout_s should be a number")
        if value <= 0:
            raise ConfigError("executor: task_timeout_s must be positive")
        task_timeout_s = float(value)

    return RunSettings(max_workers=max_workers, task_timeout_s=task_timeout_s)
