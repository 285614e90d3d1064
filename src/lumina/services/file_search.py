"""Filename search over the configured directories."""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator
from pathlib import Path

from lumina.models.search import ActionType, SearchResult

MIN_SCORE = 0.1

_ICONS: dict[str, str] = {
    ".rs": "🦀",
    ".js": "⚡",
    ".ts": "⚡",
    ".jsx": "⚡",
    ".tsx": "⚡",
    ".py": "🐍",
    ".desktop": "🚀",
    ".txt": "📄",
    ".md": "📄",
    ".pdf": "📕",
    ".png": "🖼️",
    ".jpg": "🖼️",
    ".jpeg": "🖼️",
    ".gif": "🖼️",
}
_DEFAULT_ICON = "📁"


def max_depth_for(base_dir: Path) -> int:
    """Application directories are shallow; everything else gets one extra level."""
    return 2 if "applications" in str(base_dir) else 3


def file_score(name: str, query: str) -> float:
    """Score a lower-cased file name against a lower-cased query."""
    if name == query:
        return 1.0
    if name.startswith(query):
        return 0.8
    if query in name:
        return 0.6
    return 0.0


def file_icon(path: Path) -> str:
    return _ICONS.get(path.suffix.lower(), _DEFAULT_ICON)


def action_type_for(path: Path) -> ActionType:
    if path.suffix == ".desktop":
        return ActionType.OPEN_APP
    return ActionType.OPEN_FILE


def walk_entries(base_dir: Path, max_depth: int) -> Iterator[Path]:
    """Yield files and directories below ``base_dir`` up to ``max_depth`` levels."""
    base_depth = len(base_dir.parts)
    for dirpath, dirnames, filenames in os.walk(base_dir):
        current = Path(dirpath)
        depth = len(current.parts) - base_depth + 1
        for name in dirnames:
            yield current / name
        for name in filenames:
            yield current / name
        if depth >= max_depth:
            dirnames[:] = []


def search_files(query: str, directories: Iterable[str]) -> list[SearchResult]:
    """Case-insensitive substring match on file names. Blocking; run off the loop."""
    needle = query.strip().lower()
    if not needle:
        return []
    results: list[SearchResult] = []
    for raw in directories:
        base_dir = Path(raw).expanduser()
        if not base_dir.is_dir():
            continue
        for path in walk_entries(base_dir, max_depth_for(base_dir)):
            score = file_score(path.name.lower(), needle)
            if score <= MIN_SCORE:
                continue
            results.append(
                SearchResult(
                    id=f"file_{len(results)}",
                    title=path.name,
                    description=str(path),
                    icon=file_icon(path),
                    action_type=action_type_for(path),
                    action_data=str(path),
                    score=score,
                )
            )
    return results
