"""
Tests for the crypto-expert command line.
"""

import json

import pytest

from crypto_expert import cli
from crypto_expert.tools import build_tool_registry


class StubStack:
    def __init__(self, registry) -> None:
        self.registry = registry
        self.closed = False

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def stack(market, cache, monkeypatch):
    stack = StubStack(build_tool_registry(market, cache))
    built = []

    def fake_build_stack(settings, with_workflow=True):
        built.append(with_workflow)
        return stack

    monkeypatch.setattr(cli, "build_stack", fake_build_stack)
    stack.built = built
    return stack


def test_tool_command_reaches_cache_tools(stack, capsys):
    """Cache tools can be called directly, without building the workflow."""
    exit_code = cli.main(["tool", "upsert_content", '{"content": "DeFi answer", "topic": "defi"}'])
    stored = json.loads(capsys.readouterr().out)

    assert exit_code == 0
    assert stored["success"] is True
    assert stored["topic"] == "defi"

    exit_code = cli.main(["tool", "check_existing_content", '{"topic": "defi"}'])
    found = json.loads(capsys.readouterr().out)

    assert exit_code == 0
    assert found["found"] is True
    assert found["results"][0]["id"] == stored["id"]
    assert stack.built == [False, False]
    assert stack.closed


def test_tool_command_reports_failure(stack, capsys):
    exit_code = cli.main(["tool", "upsert_content", '{"topic": "defi"}'])
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 1
    assert payload["error"] == "validation_error"


def test_tool_command_rejects_bad_json(stack):
    assert cli.main(["tool", "check_existing_content", "{not json"]) == 2
    assert cli.main(["tool", "check_existing_content", "[1, 2]"]) == 2
    assert stack.built == []
