"""
Async GitHub REST API client.

Features:
- httpx.AsyncClient authenticated with the server-held PAT.
- Typed results: every payload is validated into a model from ``models``.
- 403/429 rate-limit detection (reads X-RateLimit-Reset header).
- ``optional_fetch`` for files that may legitimately be missing.
- ``fetch_snapshot`` fans out the four context fetches concurrently and
  degrades to a partial snapshot when some of them fail.

No retries and no explicit timeouts: httpx defaults apply.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import datetime as dt
import json
import logging
from typing import Any, Awaitable, TypeVar

import httpx
from pydantic import ValidationError

from readme_generator.models import (
    DirectoryEntry,
    LanguageMap,
    Manifest,
    RepoMetadata,
    RepositorySnapshot,
)
from readme_generator.settings import settings

logger = logging.getLogger("readme_generator.github_client")

T = TypeVar("T")


# ── Custom exceptions ──────────────────────────────────────────
class GitHubError(Exception):
    """Base for GitHub-related errors."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RepoNotFoundError(GitHubError):
    """404 — repository or path doesn't exist (or is private)."""


class RateLimitError(GitHubError):
    """403/429 — rate limit exceeded."""

    def __init__(
        self, message: str, status_code: int, reset_timestamp: int | None = None
    ):
        super().__init__(message, status_code)
        self.reset_timestamp = reset_timestamp


class UpstreamError(GitHubError):
    """Any other failure: unexpected status, transport error, bad payload."""


# ── Helpers ─────────────────────────────────────────────────────
def _rate_limit_reset(response: httpx.Response) -> int | None:
    """Extract X-RateLimit-Reset header (unix timestamp) if present."""
    val = response.headers.get("x-ratelimit-reset")
    if val:
        try:
            return int(val)
        except ValueError:
            pass
    return None


def _check_rate_limit(response: httpx.Response) -> None:
    """Raise RateLimitError if response indicates rate limiting."""
    if response.status_code not in (403, 429):
        return
    # GitHub returns 403 with remaining=0 when rate-limited
    if response.status_code == 429 or response.headers.get("x-ratelimit-remaining") == "0":
        reset_ts = _rate_limit_reset(response)
        hint = " Try again later."
        if reset_ts:
            reset_dt = dt.datetime.fromtimestamp(reset_ts, tz=dt.timezone.utc)
            hint = f" Try again after {reset_dt:%Y-%m-%d %H:%M:%S} UTC."
        raise RateLimitError(
            f"GitHub rate limit hit.{hint}",
            status_code=response.status_code,
            reset_timestamp=reset_ts,
        )


def _github_message(response: httpx.Response) -> str:
    """GitHub puts a human-readable reason in the ``message`` field."""
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase or "Unknown error"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.reason_phrase or "Unknown error"


def decode_json_content(encoded: str | None) -> Any | None:
    """Decode a Base64 ``content`` field and parse it as JSON.

    Returns ``None`` (and logs a warning) if the content is missing or is
    not valid Base64-encoded JSON.
    """
    if not encoded:
        return None
    try:
        decoded = base64.b64decode(encoded).decode("utf-8")
        return json.loads(decoded)
    except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
        logger.warning("Failed to decode/parse Base64 content: %s", exc)
        return None


async def optional_fetch(fetch: Awaitable[T]) -> T | None:
    """Await ``fetch``; a 404 means "absent" and yields ``None``.

    Every other error propagates.
    """
    try:
        return await fetch
    except RepoNotFoundError:
        return None


def describe_fetch_error(exc: BaseException) -> str:
    status = getattr(exc, "status_code", None) or "Unknown"
    return f"Failed to fetch data from GitHub (Status: {status}). {exc}"


# ── Client ──────────────────────────────────────────────────────
class GitHubClient:
    """Async GitHub REST API wrapper."""

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        headers: dict[str, str] = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "readme-generator/1.0",
        }
        if settings.github_pat:
            headers["Authorization"] = f"Bearer {settings.github_pat}"

        self._client = client or httpx.AsyncClient(
            base_url=settings.github_api_base,
            headers=headers,
        )

    # ── Low-level request ──────────────────────────────────────
    async def _get_json(self, path: str) -> Any:
        """GET ``path`` and return the decoded JSON body.

        Maps every failure onto the ``GitHubError`` hierarchy.
        """
        try:
            resp = await self._client.get(path)
        except httpx.HTTPError as exc:
            raise UpstreamError(f"GitHub request failed for {path}: {exc}") from exc

        _check_rate_limit(resp)

        if resp.status_code == 404:
            raise RepoNotFoundError(
                f"Not found: {path}", status_code=404
            )
        if resp.is_error:
            raise UpstreamError(
                f"GitHub returned {resp.status_code} for {path}: {_github_message(resp)}",
                status_code=resp.status_code,
            )

        try:
            return resp.json()
        except ValueError as exc:
            raise UpstreamError(
                f"GitHub returned a non-JSON body for {path}",
                status_code=resp.status_code,
            ) from exc

    @staticmethod
    def _validate(model: type[T], data: Any, path: str) -> T:
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise UpstreamError(f"Unexpected GitHub payload for {path}: {exc}") from exc

    # ── High-level fetch methods ───────────────────────────────
    async def fetch_repo(self, owner: str, repo: str) -> RepoMetadata:
        path = f"/repos/{owner}/{repo}"
        return self._validate(RepoMetadata, await self._get_json(path), path)

    async def fetch_languages(self, owner: str, repo: str) -> LanguageMap:
        path = f"/repos/{owner}/{repo}/languages"
        data = await self._get_json(path)
        if not isinstance(data, dict):
            raise UpstreamError(f"Unexpected GitHub payload for {path}")
        try:
            return {str(name): int(size) for name, size in data.items()}
        except (TypeError, ValueError) as exc:
            raise UpstreamError(f"Unexpected GitHub payload for {path}") from exc

    async def fetch_root_contents(self, owner: str, repo: str) -> list[DirectoryEntry]:
        """List the repository root. A non-list payload yields ``[]``."""
        path = f"/repos/{owner}/{repo}/contents/"
        data = await self._get_json(path)
        if not isinstance(data, list):
            return []
        return [self._validate(DirectoryEntry, item, path) for item in data]

    async def fetch_file_content(self, owner: str, repo: str, file_path: str) -> dict:
        """Fetch the contents-API record of a single file (Base64 ``content``)."""
        path = f"/repos/{owner}/{repo}/contents/{file_path.lstrip('/')}"
        data = await self._get_json(path)
        if not isinstance(data, dict):
            # A directory listing came back instead of a file
            raise UpstreamError(f"{file_path} is not a file")
        return data

    async def fetch_manifest(self, owner: str, repo: str) -> Manifest | None:
        """Fetch and parse the manifest file.

        Raises ``RepoNotFoundError`` if the file does not exist; returns
        ``None`` if it exists but cannot be decoded.
        """
        record = await self.fetch_file_content(owner, repo, settings.manifest_path)
        parsed = decode_json_content(record.get("content"))
        if not isinstance(parsed, dict):
            return None
        try:
            return Manifest.model_validate(parsed)
        except ValidationError as exc:
            logger.warning("Ignoring malformed %s: %s", settings.manifest_path, exc)
            return None

    async def fetch_snapshot(self, owner: str, repo: str) -> RepositorySnapshot:
        """Run the four context fetches concurrently.

        Never raises for upstream failures: successful results are kept and
        the first failure (in request order) is described in
        ``fetch_error``.
        """
        logger.info("Fetching GitHub data for %s/%s", owner, repo)
        results = await asyncio.gather(
            self.fetch_repo(owner, repo),
            self.fetch_languages(owner, repo),
            self.fetch_root_contents(owner, repo),
            optional_fetch(self.fetch_manifest(owner, repo)),
            return_exceptions=True,
        )

        errors = [r for r in results if isinstance(r, BaseException)]
        for err in errors:
            if not isinstance(err, Exception):
                raise err

        metadata, languages, root_contents, manifest = (
            None if isinstance(r, Exception) else r for r in results
        )
        snapshot = RepositorySnapshot(
            metadata=metadata,
            languages=languages,
            root_contents=root_contents or [],
            manifest=manifest,
        )

        if errors:
            first = errors[0]
            logger.error(
                "GitHub fetch failed for %s/%s (status=%s): %s",
                owner, repo, getattr(first, "status_code", None), first,
            )
            snapshot.fetch_error = describe_fetch_error(first)
        else:
            logger.info("Finished fetching GitHub data for %s/%s", owner, repo)
        return snapshot

    async def aclose(self) -> None:
        await self._client.aclose()
