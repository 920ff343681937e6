"""Scanner that finds `uses: owner/repo[/path]@ref` references in workflow text.

The grammar is scanned in explicit stages rather than with a single regular
expression:

    marker   `uses:`
    space    one or more whitespace characters (may cross a line break)
    owner    [A-Za-z0-9-]+
    repo     `/` [A-Za-z0-9-_.]+
    path     optional: `/` [A-Za-z0-9-_./@]+
    ref      `@` [A-Za-z0-9.-]+

The path character class admits `@` and `/`, so the path stage is greedy: it
stops at the last `@` of the path run that is followed by a ref character.
`uses: org/repo/path@v1@v2` therefore yields path `path@v1` and ref `v2`.
"""

from __future__ import annotations

import string
from dataclasses import dataclass
from typing import Callable, Container, Iterator, List, Optional, Tuple

from .dedup import reference_set
from .models import ActionReference

MARKER = "uses:"
LOCAL_PREFIX = "./"

_ALNUM = string.ascii_letters + string.digits
OWNER_CHARS = frozenset(_ALNUM + "-")
REPO_CHARS = frozenset(_ALNUM + "-_.")
PATH_CHARS = frozenset(_ALNUM + "-_./@")
REF_CHARS = frozenset(_ALNUM + ".-")


@dataclass(frozen=True)
class ReferenceMatch:
    """A raw reference with its offsets in the scanned text."""

    reference: ActionReference
    start: int
    end: int


def _run_end(text: str, pos: int, accepts: Callable[[str], bool]) -> int:
    end = pos
    size = len(text)
    while end < size and accepts(text[end]):
        end += 1
    return end


def _charset_run_end(text: str, pos: int, charset: Container[str]) -> int:
    return _run_end(text, pos, charset.__contains__)


class ReferenceExtractor:
    """Turns raw file text into an ordered, deduplicated list of references."""

    def extract(self, text: str) -> List[ActionReference]:
        """Return references in first-occurrence order, dropping repeated `full` keys."""
        found = reference_set()
        for match in self.scan(text):
            found.add(match.reference)
        return found.items()

    def scan(self, text: str) -> Iterator[ReferenceMatch]:
        """Yield every non-overlapping match, left to right, duplicates included."""
        if not text:
            return
        pos = 0
        while True:
            start = text.find(MARKER, pos)
            if start < 0:
                return
            match = self._match_at(text, start)
            if match is None:
                pos = start + 1
                continue
            yield match
            pos = match.end

    # ------------------------------------------------------------------
    # Stages

    def _match_at(self, text: str, start: int) -> Optional[ReferenceMatch]:
        target = self._skip_space(text, start + len(MARKER))
        if target is None or text.startswith(LOCAL_PREFIX, target):
            return None

        owner = self._scan_owner(text, target)
        if owner is None:
            return None
        owner_value, cursor = owner

        repo = self._scan_repo(text, cursor)
        if repo is None:
            return None
        repo_value, cursor = repo

        tail = self._scan_path_and_ref(text, cursor)
        if tail is None:
            return None
        path_value, ref_value, end = tail

        reference = ActionReference.from_parts(owner_value, repo_value, path_value, ref_value)
        return ReferenceMatch(reference=reference, start=start, end=end)

    @staticmethod
    def _skip_space(text: str, pos: int) -> Optional[int]:
        end = _run_end(text, pos, str.isspace)
        return end if end > pos else None

    @staticmethod
    def _scan_owner(text: str, pos: int) -> Optional[Tuple[str, int]]:
        end = _charset_run_end(text, pos, OWNER_CHARS)
        if end == pos or not text.startswith("/", end):
            return None
        return text[pos:end], end + 1

    @staticmethod
    def _scan_repo(text: str, pos: int) -> Optional[Tuple[str, int]]:
        end = _charset_run_end(text, pos, REPO_CHARS)
        if end == pos:
            return None
        return text[pos:end], end

    def _scan_path_and_ref(self, text: str, pos: int) -> Optional[Tuple[str, str, int]]:
        if text.startswith("@", pos):
            ref = self._scan_ref(text, pos + 1)
            if ref is None:
                return None
            return "", ref[0], ref[1]

        if not text.startswith("/", pos):
            return None

        path_start = pos + 1
        run_end = _charset_run_end(text, path_start, PATH_CHARS)
        # The path needs at least one character before its closing `@`.
        split = text.rfind("@", path_start + 1, run_end)
        while split != -1:
            ref = self._scan_ref(text, split + 1)
            if ref is not None:
                return text[path_start:split], ref[0], ref[1]
            split = text.rfind("@", path_start + 1, split)
        return None

    @staticmethod
    def _scan_ref(text: str, pos: int) -> Optional[Tuple[str, int]]:
        end = _charset_run_end(text, pos, REF_CHARS)
        if end == pos:
            return None
        return text[pos:end], end


_DEFAULT_EXTRACTOR = ReferenceExtractor()


def extract_references(text: str) -> List[ActionReference]:
    """Extract references from `text` with the default extractor."""
    return _DEFAULT_EXTRACTOR.extract(text)


__all__ = [
    "LOCAL_PREFIX",
    "MARKER",
    "ReferenceExtractor",
    "ReferenceMatch",
    "extract_references",
]
