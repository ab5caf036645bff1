"""
Context and prompt assembly.

The context is an ordered list of fragments. Each fragment is a
``(condition, formatter)`` pair: when the condition holds for the snapshot
the formatter produces one line, otherwise the fragment is left out
entirely (no placeholders for data we never got).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from readme_generator.models import RepositorySnapshot
from readme_generator.settings import settings

logger = logging.getLogger("readme_generator.context")


@dataclass(frozen=True)
class ContextInput:
    repo_url: str
    snapshot: RepositorySnapshot


Condition = Callable[[ContextInput], bool]
Formatter = Callable[[ContextInput], str]


def _or_na(value: str | None) -> str:
    return value or "N/A"


def format_dependencies(names: list[str], limit: int | None = None) -> str:
    """List at most ``limit`` dependency names, then `` ...`` if cut."""
    limit = settings.max_dependencies if limit is None else limit
    listed = ", ".join(names[:limit])
    if len(names) > limit:
        listed += " ..."
    return f"Dependencies: {listed}"


CONTEXT_FRAGMENTS: list[tuple[Condition, Formatter]] = [
    (
        lambda c: True,
        lambda c: f"Repository URL: {c.repo_url}",
    ),
    (
        lambda c: c.snapshot.metadata is not None,
        lambda c: f"Description: {_or_na(c.snapshot.metadata.description)}",
    ),
    (
        lambda c: c.snapshot.metadata is not None,
        lambda c: f"Main Language: {_or_na(c.snapshot.metadata.language)}",
    ),
    (
        lambda c: bool(c.snapshot.languages),
        lambda c: f"Language Breakdown: {', '.join(c.snapshot.languages)}",
    ),
    (
        lambda c: bool(c.snapshot.root_contents),
        lambda c: "Root Directory Contents: "
        + ", ".join(entry.display_name for entry in c.snapshot.root_contents),
    ),
    (
        lambda c: c.snapshot.manifest is not None,
        lambda c: f"Package Name: {_or_na(c.snapshot.manifest.name)}",
    ),
    (
        lambda c: c.snapshot.manifest is not None and bool(c.snapshot.manifest.dependencies),
        lambda c: format_dependencies(list(c.snapshot.manifest.dependencies)),
    ),
    (
        lambda c: c.snapshot.manifest is not None and bool(c.snapshot.manifest.scripts),
        lambda c: f"Available Scripts: {', '.join(c.snapshot.manifest.scripts)}",
    ),
    (
        lambda c: bool(c.snapshot.fetch_error),
        lambda c: f"\nNote: GitHub fetch error occurred: {c.snapshot.fetch_error}",
    ),
]


def build_context(repo_url: str, snapshot: RepositorySnapshot) -> str:
    """Render the fragments that apply, one per line, in fixed order."""
    ctx = ContextInput(repo_url=repo_url, snapshot=snapshot)
    lines = [fmt(ctx) for cond, fmt in CONTEXT_FRAGMENTS if cond(ctx)]
    return "\n".join(line for line in lines if line)


_PROMPT_TEMPLATE = """\
Generate a README.md file in Markdown format based on the following context:
--- CONTEXT START ---
{context}
--- CONTEXT END ---

Focus on these sections, using the context: Project Title, Description, \
Technologies Used, Getting Started, Usage. Include placeholders if context \
is missing.
Format strictly as Markdown, starting directly with the title \
(e.g., '# Project Title'). Do not add any introduction, explanation or \
closing remarks around the README itself.
"""


def build_prompt(context: str) -> str:
    prompt = _PROMPT_TEMPLATE.format(context=context)
    logger.debug("Prompt built (%d chars)", len(prompt))
    return prompt
