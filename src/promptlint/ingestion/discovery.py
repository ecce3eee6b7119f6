"""Expand command-line paths into Ruby source files."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

import pathspec

from promptlint.config import EXTENSION_MAP, FILENAME_MAP, Settings
from promptlint.ingestion import is_binary

logger = logging.getLogger(__name__)


def is_ruby_source(path: Path) -> bool:
    """True for ``*.rb``-style extensions and well-known Ruby file names."""
    if path.name in FILENAME_MAP:
        return FILENAME_MAP[path.name] == "ruby"
    return EXTENSION_MAP.get(path.suffix.lower()) == "ruby"


def discover_sources(
    paths: Iterable[Path],
    settings: Settings | None = None,
) -> list[Path]:
    """Return the files to analyze, in a stable order without duplicates.

    * A file named explicitly is always included, whatever its extension.
      A missing path is passed through so the read failure is reported
      against it.
    * A directory is walked recursively. Hidden directories, directories
      listed in ``settings.skip_directories`` and ``.gitignore`` matches
      are skipped, as are binary files and symlinks resolving outside
      the directory.
    """
    cfg = settings if settings is not None else Settings()
    skip_dirs = set(cfg.skip_directories)

    found: list[Path] = []
    seen: set[Path] = set()

    def add(path: Path) -> None:
        key = path.resolve()
        if key not in seen:
            seen.add(key)
            found.append(path)

    for path in paths:
        if path.is_dir():
            spec = _load_gitignore(path)
            for file_path in _walk_files(path, skip_dirs, spec):
                add(file_path)
        else:
            if not path.exists():
                logger.warning("Path does not exist: %s", path)
            add(path)

    logger.debug("Discovered %d source file(s)", len(found))
    return found


def _walk_files(
    root: Path,
    skip_dirs: set[str],
    gitignore_spec: pathspec.PathSpec,
) -> list[Path]:
    return _walk_files_inner(
        root, root, skip_dirs, gitignore_spec, root.resolve()
    )


def _walk_files_inner(
    current: Path,
    root: Path,
    skip_dirs: set[str],
    gitignore_spec: pathspec.PathSpec,
    resolved_root: Path,
) -> list[Path]:
    """Recursive walk with symlink containment."""
    files: list[Path] = []
    try:
        entries = sorted(current.iterdir())
    except OSError as exc:
        logger.warning("Cannot list %s: %s", current, exc)
        return files

    for item in entries:
        if item.is_symlink():
            if not item.resolve().is_relative_to(resolved_root):
                logger.debug("Skipping symlink outside root: %s", item)
                continue
        rel = item.relative_to(root).as_posix()
        if item.is_dir():
            if item.name.startswith(".") or item.name in skip_dirs:
                continue
            if gitignore_spec.match_file(rel + "/"):
                continue
            files.extend(
                _walk_files_inner(
                    item, root, skip_dirs, gitignore_spec, resolved_root
                )
            )
        elif item.is_file():
            if not is_ruby_source(item):
                continue
            if gitignore_spec.match_file(rel):
                continue
            if is_binary(item):
                logger.debug("Skipping binary file: %s", item)
                continue
            files.append(item)
    return files


def _load_gitignore(root: Path) -> pathspec.PathSpec:
    """Patterns from ``root/.gitignore``; empty when absent or unreadable."""
    gitignore = root / ".gitignore"
    if not gitignore.is_file():
        return pathspec.PathSpec.from_lines("gitignore", [])
    try:
        with open(gitignore, encoding="utf-8") as f:
            return pathspec.PathSpec.from_lines("gitignore", f)
    except OSError:
        return pathspec.PathSpec.from_lines("gitignore", [])
