"""Writers for the allowlist artifacts."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

from .synthesizer import Allowlists


def _stage_text(target: Path, content: str) -> Path:
    """Write `content` to a hidden sibling of `target` and return its path."""
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp = target.with_name(f".{target.name}.tmp")
    try:
        tmp.write_text(content, encoding="utf-8")
    except OSError:
        tmp.unlink(missing_ok=True)
        raise
    return tmp


def _discard(paths: Iterable[Path]) -> None:
    for path in paths:
        path.unlink(missing_ok=True)


def write_text_artifacts(entries: Sequence[Tuple[Path, str]]) -> List[Path]:
    """Stage every artifact before replacing any, so a failed write leaves targets untouched."""
    targets = [Path(path) for path, _ in entries]
    staged: List[Path] = []
    try:
        for target, (_, content) in zip(targets, entries):
            staged.append(_stage_text(target, content))
        for tmp, target in zip(staged, targets):
            os.replace(tmp, target)
    finally:
        _discard(staged)
    return targets


def write_allowlists(
    allowlists: Allowlists, *, strict_path: Path, simple_path: Path
) -> Tuple[Path, Path]:
    strict, simple = write_text_artifacts(
        [
            (strict_path, allowlists.strict_text),
            (simple_path, allowlists.simple_text),
        ]
    )
    return strict, simple


__all__ = ["write_allowlists", "write_text_artifacts"]
