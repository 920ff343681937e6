"""Projection of aggregated references into strict and simple allowlists."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence

from .models import ActionReference

ENTRY_SEPARATOR = ",\n"


def render_allowlist(entries: Sequence[str]) -> str:
    """Join entries with `,\\n` and end with one newline (`"\\n"` when empty)."""
    return ENTRY_SEPARATOR.join(entries) + "\n"


@dataclass(frozen=True)
class Allowlists:
    """Sorted strict (pinned) and simple (wildcarded) entries."""

    strict: List[str]
    simple: List[str]

    @property
    def strict_text(self) -> str:
        return render_allowlist(self.strict)

    @property
    def simple_text(self) -> str:
        return render_allowlist(self.simple)


class AllowlistSynthesizer:
    """Builds both allowlists; ordering never depends on input order."""

    def strict_entries(self, references: Iterable[ActionReference]) -> List[str]:
        return sorted({reference.full for reference in references})

    def simple_entries(self, references: Iterable[ActionReference]) -> List[str]:
        return sorted({reference.wildcard for reference in references})

    def synthesize(self, references: Iterable[ActionReference]) -> Allowlists:
        items = list(references)
        return Allowlists(
            strict=self.strict_entries(items),
            simple=self.simple_entries(items),
        )


__all__ = ["AllowlistSynthesizer", "Allowlists", "ENTRY_SEPARATOR", "render_allowlist"]
