from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from pathlib import Path
from typing import TypeAlias
import tomllib

DEFAULT_CONFIG_NAME = "codesync.toml"
DEFAULT_JOBS = 1

TomlScalar: TypeAlias = str | int | float | bool | None | date | datetime | time
TomlValue: TypeAlias = TomlScalar | list["TomlValue"] | dict[str, "TomlValue"]
TomlTable: TypeAlias = dict[str, TomlValue]


def _load_toml(path: Path) -> TomlTable:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError:
        return {}
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


def load_config(root: Path | None = None, config_path: Path | None = None) -> TomlTable:
    if config_path is None:
        base = root if root is not None else Path.cwd()
        config_path = base / DEFAULT_CONFIG_NAME
    return _load_toml(config_path)


def scan_defaults(
    root: Path | None = None, config_path: Path | None = None
) -> TomlTable:
    data = load_config(root=root, config_path=config_path)
    section = data.get("scan", {})
    return section if isinstance(section, dict) else {}


def _normalize_name_list(value: TomlValue) -> list[str]:
    items: list[str] = []
    if value is None:
        return items
    if isinstance(value, str):
        items = [part.strip() for part in value.split(",") if part.strip()]
    elif isinstance(value, (list, tuple, set)):
        for item in value:
            if isinstance(item, str):
                items.extend([part.strip() for part in item.split(",") if part.strip()])
    return [item for item in items if item]


def _as_bool(value: TomlValue) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return False


def _as_positive_int(value: TomlValue, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value if value >= 1 else default
    if isinstance(value, str) and value.strip().isdigit():
        parsed = int(value.strip())
        return parsed if parsed >= 1 else default
    return default


def scan_exclude_list(section: TomlTable | None) -> list[str]:
    if not isinstance(section, dict):
        return []
    return _normalize_name_list(section.get("exclude"))


def scan_jobs(section: TomlTable | None) -> int:
    if not isinstance(section, dict):
        return DEFAULT_JOBS
    return _as_positive_int(section.get("jobs"), DEFAULT_JOBS)


def scan_include_hidden(section: TomlTable | None) -> bool:
    if not isinstance(section, dict):
        return False
    return _as_bool(section.get("include_hidden"))


def scan_ignore_files(section: TomlTable | None) -> bool:
    if not isinstance(section, dict) or section.get("ignore_files") is None:
        return True
    return _as_bool(section.get("ignore_files"))


def merge_payload(payload: TomlTable, defaults: TomlTable) -> TomlTable:
    merged = dict(defaults)
    for key, value in payload.items():
        if value is None:
            continue
        merged[key] = value
    return merged


@dataclass(frozen=True)
class ScanSettings:
    exclude: tuple[str, ...] = ()
    jobs: int = DEFAULT_JOBS
    include_hidden: bool = False
    use_ignore_files: bool = True


def resolve_scan_settings(
    *,
    root: Path,
    config_path: Path | None = None,
    exclude: list[str] | None = None,
    jobs: int | None = None,
    include_hidden: bool | None = None,
    use_ignore_files: bool | None = None,
) -> ScanSettings:
    """Combine `[scan]` config with command-line overrides.

    Excludes from both sources are concatenated; other options given on the
    command line replace the configured value.
    """
    defaults = scan_defaults(root=root, config_path=config_path)
    merged = merge_payload(
        {
            "jobs": jobs,
            "include_hidden": include_hidden,
            "ignore_files": use_ignore_files,
        },
        defaults,
    )
    patterns = scan_exclude_list(defaults) + _normalize_name_list(exclude)
    return ScanSettings(
        exclude=tuple(dict.fromkeys(patterns)),
        jobs=scan_jobs(merged),
        include_hidden=scan_include_hidden(merged),
        use_ignore_files=scan_ignore_files(merged),
    )
