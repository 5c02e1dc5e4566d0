# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Pair source files across two directory trees."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import pathspec

logger = logging.getLogger(__name__)

DEFAULT_PATTERN = "*.kt"


@dataclass(frozen=True)
class SourcePair:
    """Represent one relative path and its file in each tree.

    Attributes:
        relative_path: POSIX path relative to both roots.
        old_path: File in the old tree; ``None`` when only the new tree has it.
        new_path: File in the new tree; ``None`` when only the old tree has it.
    """

    relative_path: str
    old_path: Path | None
    new_path: Path | None


class IgnoreMatcher:
    """Match root-relative paths against gitignore-style exclusion patterns."""

    def __init__(self, patterns: Iterable[str] = ()) -> None:
        """Initialize matcher.

        Args:
            patterns: Gitignore-style pattern lines.
        """
        self._spec = pathspec.GitIgnoreSpec.from_lines(list(patterns))

    def matches(self, relative_path: str) -> bool:
        """Check whether a root-relative file path is excluded.

        Args:
            relative_path: Root-relative path.

        Returns:
            True when the path should be skipped.
        """
        normalized = relative_path.replace(os.sep, "/").strip("/")
        if not normalized:
            return False
        return bool(self._spec.match_file(normalized))


def discover_source_pairs(
    old_root: Path,
    new_root: Path,
    pattern: str = DEFAULT_PATTERN,
    exclude: Iterable[str] = (),
) -> list[SourcePair]:
    """Pair files matching ``pattern`` under both roots by relative path.

    Args:
        old_root: Root directory of the old sources.
        new_root: Root directory of the new sources.
        pattern: Glob applied recursively under each root.
        exclude: Gitignore-style patterns for paths to skip.

    Returns:
        Pairs sorted by relative path.
    """
    matcher = IgnoreMatcher(exclude)
    old_files = _collect(old_root, pattern, matcher)
    new_files = _collect(new_root, pattern, matcher)
    pairs = [
        SourcePair(
            relative_path=relative_path,
            old_path=old_files.get(relative_path),
            new_path=new_files.get(relative_path),
        )
        for relative_path in sorted(old_files.keys() | new_files.keys())
    ]
    logger.info(
        f"Source discovery completed (old_files={len(old_files)} "
        f"new_files={len(new_files)} pairs={len(pairs)})"
    )
    return pairs


def _collect(root: Path, pattern: str, matcher: IgnoreMatcher) -> dict[str, Path]:
    files: dict[str, Path] = {}
    skipped = 0
    for path in sorted(root.rglob(pattern)):
        if not path.is_file():
            continue
        relative_path = path.relative_to(root).as_posix()
        if matcher.matches(relative_path):
            skipped += 1
            continue
        files[relative_path] = path
    if skipped:
        logger.debug(f"Excluded files (root={root} skipped={skipped})")
    return files
