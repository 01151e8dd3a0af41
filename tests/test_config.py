from __future__ import annotations

from pathlib import Path

from codesync import config


def test_missing_config_returns_defaults(tmp_path: Path) -> None:
    assert config.load_config(root=tmp_path) == {}
    settings = config.resolve_scan_settings(root=tmp_path)
    assert settings == config.ScanSettings(exclude=(), jobs=1, include_hidden=False)


def test_invalid_toml_is_ignored(tmp_path: Path) -> None:
    (tmp_path / "codesync.toml").write_text("[scan\nexclude = ", encoding="utf-8")
    assert config.scan_defaults(root=tmp_path) == {}


def test_scan_section_is_read(tmp_path: Path) -> None:
    (tmp_path / "codesync.toml").write_text(
        '[scan]\nexclude = ["build", "vendor, *.min.js"]\njobs = 4\ninclude_hidden = true\n',
        encoding="utf-8",
    )
    settings = config.resolve_scan_settings(root=tmp_path)
    assert settings.exclude == ("build", "vendor", "*.min.js")
    assert settings.jobs == 4
    assert settings.include_hidden is True


def test_cli_values_override_config(tmp_path: Path) -> None:
    config_path = tmp_path / "custom.toml"
    config_path.write_text(
        '[scan]\nexclude = "build"\njobs = 4\ninclude_hidden = true\n', encoding="utf-8"
    )
    settings = config.resolve_scan_settings(
        root=tmp_path,
        config_path=config_path,
        exclude=["dist", "build"],
        jobs=2,
        include_hidden=False,
    )
    assert settings.exclude == ("build", "dist")
    assert settings.jobs == 2
    assert settings.include_hidden is False


def test_bad_values_fall_back_to_defaults() -> None:
    section = {"jobs": 0, "include_hidden": "nope", "exclude": 3}
    assert config.scan_jobs(section) == config.DEFAULT_JOBS
    assert config.scan_jobs({"jobs": "3"}) == 3
    assert config.scan_jobs({"jobs": True}) == config.DEFAULT_JOBS
    assert config.scan_include_hidden(section) is False
    assert config.scan_include_hidden({"include_hidden": "yes"}) is True
    assert config.scan_exclude_list(section) == []
    assert config.scan_exclude_list(None) == []


def test_merge_payload_skips_none() -> None:
    assert config.merge_payload({"a": None, "b": 2}, {"a": 1, "b": 1}) == {"a": 1, "b": 2}


def test_ignore_files_default_on_and_overridable(tmp_path: Path) -> None:
    assert config.resolve_scan_settings(root=tmp_path).use_ignore_files is True
    assert config.scan_ignore_files({}) is True
    assert config.scan_ignore_files({"ignore_files": "off"}) is False
    (tmp_path / "codesync.toml").write_text("[scan]\nignore_files = false\n", encoding="utf-8")
    assert config.resolve_scan_settings(root=tmp_path).use_ignore_files is False
    settings = config.resolve_scan_settings(root=tmp_path, use_ignore_files=True)
    assert settings.use_ignore_files is True
