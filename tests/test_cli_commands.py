from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from codesync import cli


def _invoke(args: list[str]):
    return CliRunner().invoke(cli.app, args)


def test_cli_help_lists_commands() -> None:
    result = _invoke(["--help"])
    assert result.exit_code == 0
    for name in ("check", "show", "list"):
        assert name in result.output


def test_check_clean_tree_exits_zero(tmp_path: Path, write_tree) -> None:
    write_tree(tmp_path, {"a.py": "# CODESYNC(pair)\n", "b/c.ts": "// CODESYNC(pair)\n"})
    result = _invoke(["check", "--root", str(tmp_path)])
    assert result.exit_code == 0, result.output
    assert "checked 2 comments across 1 label in 2 files: 0 errors" in result.output


def test_check_reports_issues_and_exits_one(tmp_path: Path, write_tree) -> None:
    write_tree(
        tmp_path,
        {
            "one.py": "# CODESYNC(foo)\n",
            "two.py": "# CODESYNC(foo)\n",
            "three.py": "# CODESYNC(foo)\n# CODESYNC\n",
        },
    )
    result = _invoke(["check", "--root", str(tmp_path)])
    assert result.exit_code == 1
    assert "error: malformed codesync comment" in result.output
    assert "error: expected 2 comments with label `foo`, found 3" in result.output
    assert "--> three.py:2:3" in result.output
    assert "1 | # CODESYNC(foo)" in result.output


def test_check_json_output(tmp_path: Path, write_tree) -> None:
    write_tree(tmp_path, {"a.txt": "CODESYNC(bar, 2)", "b.txt": "CODESYNC(bar, 3)"})
    result = _invoke(["check", "--root", str(tmp_path), "--json"])
    assert result.exit_code == 1
    payload = json.loads(result.output)
    assert payload["clean"] is False
    (issue,) = payload["issues"]
    assert issue["kind"] == "count_mismatch"
    assert issue["label"] == "bar"


def test_check_respects_exclude_and_config(tmp_path: Path, write_tree) -> None:
    write_tree(
        tmp_path,
        {
            "codesync.toml": '[scan]\nexclude = ["vendor"]\n',
            "a.py": "# CODESYNC(x, 1)\n",
            "vendor/lib.py": "# CODESYNC(x, 1)\n",
            "gen/out.py": "# CODESYNC\n",
        },
    )
    result = _invoke(["check", "--root", str(tmp_path), "--exclude", "gen", "-j", "2"])
    assert result.exit_code == 0, result.output


def test_check_hidden_flag(tmp_path: Path, write_tree) -> None:
    write_tree(tmp_path, {".github/ci.yml": "# CODESYNC(x, 1)\n"})
    assert _invoke(["list", "--root", str(tmp_path)]).output == ""
    result = _invoke(["list", "--root", str(tmp_path), "--hidden"])
    assert result.output.splitlines() == ["x"]


def test_show_prints_locations(tmp_path: Path, write_tree) -> None:
    write_tree(tmp_path, {"b.py": "CODESYNC(k)", "a.py": "\n  CODESYNC(k)"})
    result = _invoke(["show", "k", "--root", str(tmp_path)])
    assert result.exit_code == 0
    assert result.output.splitlines() == ["a.py:2:3", "b.py:1:1"]


def test_show_unknown_label_fails(tmp_path: Path, write_tree) -> None:
    write_tree(tmp_path, {"a.py": "CODESYNC(k)"})
    result = _invoke(["show", "nope", "--root", str(tmp_path)])
    assert result.exit_code == 1
    assert "unknown label `nope`" in result.output


def test_show_json(tmp_path: Path, write_tree) -> None:
    write_tree(tmp_path, {"a.py": "CODESYNC(k, 1)"})
    found = json.loads(_invoke(["show", "k", "--root", str(tmp_path), "--json"]).output)
    assert found["locations"] == [{"column": 1, "line": 1, "unit": "a.py"}]
    missing = _invoke(["show", "nope", "--root", str(tmp_path), "--json"])
    assert missing.exit_code == 1
    assert json.loads(missing.output)["found"] is False


def test_list_sorted_labels(tmp_path: Path, write_tree) -> None:
    write_tree(
        tmp_path,
        {"a.py": "CODESYNC(zeta) CODESYNC(alpha) CODESYNC", "b.py": "CODESYNC(alpha)"},
    )
    result = _invoke(["list", "--root", str(tmp_path)])
    assert result.exit_code == 0
    assert result.output.splitlines() == ["alpha", "zeta"]
    payload = json.loads(_invoke(["list", "--root", str(tmp_path), "--json"]).output)
    assert payload == {"labels": ["alpha", "zeta"]}


def test_list_empty_tree_succeeds(tmp_path: Path) -> None:
    result = _invoke(["list", "--root", str(tmp_path)])
    assert result.exit_code == 0
    assert result.output == ""


def test_root_must_be_directory(tmp_path: Path) -> None:
    result = _invoke(["check", "--root", str(tmp_path / "missing")])
    assert result.exit_code == 2


def test_check_honours_gitignore_unless_disabled(tmp_path: Path, write_tree) -> None:
    write_tree(
        tmp_path,
        {
            ".gitignore": "dist/\n",
            "a.py": "# CODESYNC(pair)\n",
            "b.py": "# CODESYNC(pair)\n",
            "dist/a.py": "# CODESYNC(pair)\n",
        },
    )
    result = _invoke(["check", "--root", str(tmp_path)])
    assert result.exit_code == 0, result.output
    result = _invoke(["check", "--root", str(tmp_path), "--no-ignore"])
    assert result.exit_code == 1
    assert "expected 2 comments with label `pair`, found 3" in result.output
    (tmp_path / "codesync.toml").write_text("[scan]\nignore_files = false\n", encoding="utf-8")
    assert _invoke(["check", "--root", str(tmp_path)]).exit_code == 1
    assert _invoke(["check", "--root", str(tmp_path), "--ignore"]).exit_code == 0
