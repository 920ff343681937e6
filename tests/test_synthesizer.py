"""Tests for action_allowlist.synthesizer."""

from __future__ import annotations

from action_allowlist.extractor import extract_references
from action_allowlist.models import ActionReference
from action_allowlist.synthesizer import AllowlistSynthesizer, render_allowlist


def test_strict_and_simple_lists_for_basic_scenario() -> None:
    references = extract_references(
        "uses: actions/checkout@v4\nuses: actions/checkout@v4\nuses: actions/setup-node@v3"
    )

    allowlists = AllowlistSynthesizer().synthesize(references)

    assert allowlists.strict == ["actions/checkout@v4", "actions/setup-node@v3"]
    assert allowlists.strict_text == "actions/checkout@v4,\nactions/setup-node@v3\n"
    assert allowlists.simple_text == "actions/checkout@*,\nactions/setup-node@*\n"


def test_simple_list_collapses_refs_of_the_same_action() -> None:
    references = [
        ActionReference.from_parts("actions", "checkout", "", "v4"),
        ActionReference.from_parts("actions", "checkout", "", "v3"),
        ActionReference.from_parts("github", "codeql-action", "init", "v3"),
        ActionReference.from_parts("github", "codeql-action", "analyze", "v3"),
        ActionReference.from_parts("github", "codeql-action", "init", "v2"),
    ]

    allowlists = AllowlistSynthesizer().synthesize(references)

    assert allowlists.strict == [
        "actions/checkout@v3",
        "actions/checkout@v4",
        "github/codeql-action/analyze@v3",
        "github/codeql-action/init@v2",
        "github/codeql-action/init@v3",
    ]
    assert allowlists.simple == [
        "actions/checkout@*",
        "github/codeql-action/analyze@*",
        "github/codeql-action/init@*",
    ]
    assert len(allowlists.simple) <= len(allowlists.strict)


def test_output_does_not_depend_on_input_order() -> None:
    references = extract_references("uses: z/z@v1\nuses: a/a/p@v2\nuses: m/m@v3\nuses: a/a@v1\n")
    synthesizer = AllowlistSynthesizer()

    forward = synthesizer.synthesize(references)
    backward = synthesizer.synthesize(list(reversed(references)))

    assert forward == backward
    assert forward.strict == ["a/a/p@v2", "a/a@v1", "m/m@v3", "z/z@v1"]


def test_empty_collection_renders_single_newline() -> None:
    allowlists = AllowlistSynthesizer().synthesize([])

    assert allowlists.strict_text == "\n"
    assert allowlists.simple_text == "\n"


def test_render_single_entry_has_no_trailing_comma() -> None:
    assert render_allowlist(["actions/checkout@v4"]) == "actions/checkout@v4\n"
