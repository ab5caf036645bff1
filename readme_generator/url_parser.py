"""
GitHub URL parsing.

Accepted forms (domain matched case-insensitively):
  https://github.com/owner/repo
  https://github.com/owner/repo/
  https://github.com/owner/repo.git
  github.com/owner/repo

The scheme check lives in the browser form; here we only need the
``github.com/<owner>/<repo>`` tail. Anything else raises ValueError.
"""

from __future__ import annotations

import re

_GITHUB_URL_RE = re.compile(
    r"github\.com/"
    r"(?P<owner>[^/\s]+)/"
    r"(?P<repo>[^/\s]+?)"
    r"(?:\.git)?/?$",
    re.IGNORECASE,
)

PARSE_ERROR = "Could not parse GitHub owner/repo from URL."


def parse_github_url(url: str) -> tuple[str, str]:
    """Return (owner, repo) from a GitHub URL.

    Raises ``ValueError`` when no owner/repo pair can be found.
    """
    if not url or not url.strip():
        raise ValueError(PARSE_ERROR)

    match = _GITHUB_URL_RE.search(url.strip())
    if not match:
        raise ValueError(PARSE_ERROR)

    return match.group("owner"), match.group("repo")
