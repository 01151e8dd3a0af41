"""File discovery and content acquisition for the command-line tool."""

from __future__ import annotations

import fnmatch
import logging
import os
from dataclasses import dataclass
from functools import partial
from pathlib import Path, PurePosixPath
from typing import Iterable, Iterator, Sequence

import pathspec

from codesync import engine
from codesync.matcher import scan_unit
from codesync.model import Snapshot, UnitScan
from codesync.order_contract import sort_once

logger = logging.getLogger(__name__)

_BINARY_SNIFF_BYTES = 8192

IGNORE_FILE_NAMES = (".gitignore", ".ignore")
GIT_EXCLUDE_FILE = Path(".git") / "info" / "exclude"


def _is_hidden(name: str) -> bool:
    return name.startswith(".") and name not in {".", ".."}


def is_excluded(rel_path: str, patterns: Sequence[str]) -> bool:
    """Match a relative POSIX path against exclude globs.

    A pattern matches the whole relative path, the basename, or any leading
    directory prefix of the path.
    """
    if not patterns:
        return False
    pure = PurePosixPath(rel_path)
    candidates = [rel_path, pure.name]
    candidates.extend(str(parent) for parent in pure.parents if str(parent) != ".")
    return any(
        fnmatch.fnmatchcase(candidate, pattern.rstrip("/"))
        for pattern in patterns
        for candidate in candidates
    )


def unit_identifier(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


@dataclass(frozen=True)
class IgnoreRules:
    """Gitignore-style patterns read from one directory.

    ``base`` is the root-relative POSIX path of that directory ("" for the
    root); patterns only apply below it, relative to it.
    """

    base: str
    spec: pathspec.PathSpec

    def matches(self, rel_path: str, *, is_dir: bool) -> bool:
        if self.base:
            prefix = f"{self.base}/"
            if not rel_path.startswith(prefix):
                return False
            rel_path = rel_path[len(prefix) :]
        if is_dir:
            rel_path = f"{rel_path}/"
        return self.spec.match_file(rel_path)


def _read_ignore_lines(path: Path) -> list[str]:
    try:
        return path.read_text(encoding="utf-8", errors="replace").splitlines()
    except FileNotFoundError:
        return []
    except OSError as exc:
        logger.warning("skipping unreadable ignore file %s: %s", path, exc)
        return []


def load_ignore_rules(
    directory: Path, base: str, *, names: Sequence[Path | str] = IGNORE_FILE_NAMES
) -> IgnoreRules | None:
    lines: list[str] = []
    for name in names:
        lines.extend(_read_ignore_lines(directory / name))
    if not any(line.strip() and not line.lstrip().startswith("#") for line in lines):
        return None
    logger.debug("loaded ignore rules for %s", base or ".")
    return IgnoreRules(base=base, spec=pathspec.GitIgnoreSpec.from_lines(lines))


def _is_ignored(rel_path: str, rules: Sequence[IgnoreRules], *, is_dir: bool) -> bool:
    return any(rule.matches(rel_path, is_dir=is_dir) for rule in rules)


def iter_source_paths(
    root: Path,
    *,
    exclude: Sequence[str] = (),
    include_hidden: bool = False,
    use_ignore_files: bool = True,
) -> Iterator[Path]:
    """Walk ``root`` in sorted order, pruning hidden, ignored and excluded directories early.

    With ``use_ignore_files`` the walk honours ``.gitignore`` and ``.ignore``
    in every visited directory, plus ``.git/info/exclude`` under the root.
    """
    inherited: dict[str, tuple[IgnoreRules, ...]] = {}
    if use_ignore_files:
        git_rules = load_ignore_rules(root, "", names=(GIT_EXCLUDE_FILE,))
        inherited[""] = (git_rules,) if git_rules is not None else ()
    for current, dirnames, filenames in os.walk(root, topdown=True):
        current_path = Path(current)
        current_rel = "" if current_path == root else unit_identifier(current_path, root)
        rules = inherited.pop(current_rel, ())
        if use_ignore_files:
            own = load_ignore_rules(current_path, current_rel)
            if own is not None:
                rules = rules + (own,)
        kept_dirs = []
        for name in dirnames:
            if not include_hidden and _is_hidden(name):
                continue
            rel_dir = unit_identifier(current_path / name, root)
            if is_excluded(rel_dir, exclude):
                continue
            if _is_ignored(rel_dir, rules, is_dir=True):
                continue
            kept_dirs.append(name)
            inherited[rel_dir] = rules
        dirnames[:] = sort_once(kept_dirs, source="iter_source_paths.dirnames")
        for filename in sort_once(filenames, source="iter_source_paths.filenames"):
            if not include_hidden and _is_hidden(filename):
                continue
            candidate = current_path / filename
            rel_file = unit_identifier(candidate, root)
            if is_excluded(rel_file, exclude):
                continue
            if _is_ignored(rel_file, rules, is_dir=False):
                continue
            if not candidate.is_file():
                continue
            yield candidate


def read_unit(path: Path) -> str | None:
    """Return decoded file content, or None for binary or unreadable files."""
    try:
        data = path.read_bytes()
    except OSError as exc:
        logger.warning("skipping unreadable file %s: %s", path, exc)
        return None
    if b"\0" in data[:_BINARY_SNIFF_BYTES]:
        logger.debug("skipping binary file %s", path)
        return None
    return data.decode("utf-8", errors="replace")


def scan_path(path: Path, *, root: Path) -> UnitScan | None:
    """Read and scan one file; runs inside engine workers."""
    text = read_unit(path)
    if text is None:
        return None
    return scan_unit(unit_identifier(path, root), text)


def scan_paths(paths: Iterable[Path], *, root: Path, jobs: int = 1) -> Snapshot:
    """Read, scan and aggregate ``paths``; reading happens on the worker pool."""
    return engine.run(paths, jobs=jobs, scan_fn=partial(scan_path, root=root))


class SourceCache:
    """Lazily re-reads unit contents for rendering diagnostics."""

    def __init__(self, root: Path):
        self.root = root
        self._texts: dict[str, str | None] = {}

    def __call__(self, unit: str) -> str | None:
        if unit not in self._texts:
            path = Path(unit)
            if not path.is_absolute():
                path = self.root / path
            self._texts[unit] = read_unit(path)
        return self._texts[unit]
