"""Tests for readme_generator.context — fragment selection and prompt text."""

import pytest

from readme_generator.context import (
    CONTEXT_FRAGMENTS,
    ContextInput,
    build_context,
    build_prompt,
    format_dependencies,
)
from readme_generator.models import (
    DirectoryEntry,
    Manifest,
    RepoMetadata,
    RepositorySnapshot,
)

URL = "https://github.com/acme/widget"


def _full_snapshot(**overrides) -> RepositorySnapshot:
    data = dict(
        metadata=RepoMetadata(description="A widget", language="TypeScript"),
        languages={"TypeScript": 9000, "CSS": 300},
        root_contents=[
            DirectoryEntry(name="src", type="dir"),
            DirectoryEntry(name="package.json", type="file"),
        ],
        manifest=Manifest(
            name="widget",
            dependencies={"next": "14", "react": "18"},
            scripts={"dev": "next dev", "build": "next build"},
        ),
    )
    data.update(overrides)
    return RepositorySnapshot(**data)


class TestBuildContext:
    def test_full_context_in_fixed_order(self):
        context = build_context(URL, _full_snapshot())
        assert context.splitlines() == [
            "Repository URL: https://github.com/acme/widget",
            "Description: A widget",
            "Main Language: TypeScript",
            "Language Breakdown: TypeScript, CSS",
            "Root Directory Contents: src/, package.json",
            "Package Name: widget",
            "Dependencies: next, react",
            "Available Scripts: dev, build",
        ]

    def test_empty_snapshot_has_only_url(self):
        context = build_context(URL, RepositorySnapshot())
        assert context == "Repository URL: https://github.com/acme/widget"

    def test_missing_manifest_omits_manifest_fragments(self):
        context = build_context(URL, _full_snapshot(manifest=None))
        assert "Package Name" not in context
        assert "Dependencies" not in context
        assert "Available Scripts" not in context
        assert "Description: A widget" in context

    def test_metadata_without_description_uses_na(self):
        snapshot = _full_snapshot(metadata=RepoMetadata(description=None, language=None))
        context = build_context(URL, snapshot)
        assert "Description: N/A" in context
        assert "Main Language: N/A" in context

    def test_empty_languages_and_listing_are_omitted(self):
        context = build_context(URL, _full_snapshot(languages={}, root_contents=[]))
        assert "Language Breakdown" not in context
        assert "Root Directory Contents" not in context

    def test_manifest_without_dependencies_or_scripts(self):
        context = build_context(URL, _full_snapshot(manifest=Manifest(name="widget")))
        assert "Package Name: widget" in context
        assert "Dependencies" not in context
        assert "Available Scripts" not in context

    def test_fetch_error_note_is_last(self):
        snapshot = RepositorySnapshot(
            fetch_error="Failed to fetch data from GitHub (Status: 500). boom"
        )
        context = build_context(URL, snapshot)
        assert context.endswith(
            "\n\nNote: GitHub fetch error occurred: "
            "Failed to fetch data from GitHub (Status: 500). boom"
        )


class TestDependencies:
    def test_more_than_ten_is_truncated(self):
        names = [f"dep{i}" for i in range(15)]
        line = format_dependencies(names, limit=10)
        listed = line.removeprefix("Dependencies: ").removesuffix(" ...")
        assert line.endswith(" ...")
        assert listed.split(", ") == names[:10]

    def test_exactly_ten_is_not_truncated(self):
        names = [f"dep{i}" for i in range(10)]
        line = format_dependencies(names, limit=10)
        assert not line.endswith("...")
        assert line == "Dependencies: " + ", ".join(names)

    def test_default_limit_from_settings(self):
        manifest = Manifest(dependencies={f"dep{i}": "1.0.0" for i in range(12)})
        context = build_context(URL, _full_snapshot(manifest=manifest))
        deps_line = next(line for line in context.splitlines() if line.startswith("Dependencies:"))
        assert deps_line == "Dependencies: " + ", ".join(f"dep{i}" for i in range(10)) + " ..."


class TestFragments:
    @pytest.mark.parametrize("index", range(1, len(CONTEXT_FRAGMENTS)))
    def test_each_optional_fragment_skips_empty_snapshot(self, index):
        condition, _ = CONTEXT_FRAGMENTS[index]
        assert condition(ContextInput(URL, RepositorySnapshot())) is False

    def test_url_fragment_always_applies(self):
        condition, formatter = CONTEXT_FRAGMENTS[0]
        ctx = ContextInput(URL, RepositorySnapshot())
        assert condition(ctx) is True
        assert formatter(ctx) == f"Repository URL: {URL}"


class TestBuildPrompt:
    def test_prompt_embeds_context_between_markers(self):
        prompt = build_prompt("Repository URL: x")
        start = prompt.index("--- CONTEXT START ---")
        end = prompt.index("--- CONTEXT END ---")
        assert "Repository URL: x" in prompt[start:end]

    def test_prompt_asks_for_markdown_heading(self):
        prompt = build_prompt("ctx")
        assert "'# Project Title'" in prompt
        assert "Markdown" in prompt

    def test_prompt_tolerates_braces_in_context(self):
        prompt = build_prompt("Scripts: {build}")
        assert "Scripts: {build}" in prompt
