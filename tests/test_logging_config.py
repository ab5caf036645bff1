"""Tests for readme_generator.logging_config — JSON line shape and context tags."""

import json
import logging
import sys

import pytest

from readme_generator.logging_config import (
    JSONFormatter,
    new_request_id,
    repository_ctx,
    request_id_ctx,
)


def _record(msg="hello %s", args=("world",), exc_info=None):
    return logging.LogRecord(
        name="readme_generator.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=args,
        exc_info=exc_info,
    )


@pytest.fixture
def tagged():
    rid_token = request_id_ctx.set("abc123")
    repo_token = repository_ctx.set("acme/widget")
    yield
    repository_ctx.reset(repo_token)
    request_id_ctx.reset(rid_token)


def test_line_carries_request_and_repository(tagged):
    entry = json.loads(JSONFormatter().format(_record()))

    assert entry["message"] == "hello world"
    assert entry["level"] == "INFO"
    assert entry["logger"] == "readme_generator.test"
    assert entry["request_id"] == "abc123"
    assert entry["repository"] == "acme/widget"


def test_repository_omitted_outside_a_request():
    entry = json.loads(JSONFormatter().format(_record()))

    assert entry["request_id"] == "-"
    assert "repository" not in entry


def test_exception_is_included():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = _record(msg="failed", args=(), exc_info=sys.exc_info())

    entry = json.loads(JSONFormatter().format(record))
    assert "RuntimeError: boom" in entry["exception"]


def test_request_ids_are_short_and_unique():
    ids = {new_request_id() for _ in range(50)}
    assert len(ids) == 50
    assert all(len(rid) == 12 for rid in ids)
