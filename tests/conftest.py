"""
Shared pytest fixtures for the ai-cli test suite.

Usage in tests:
    def test_something(factory):
        cli = factory.create_cli()
        assert cli.run(["log", "path"]) == 0
"""

import pytest

from tests.factories import AiCliTestFactory


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep the operator's real environment out of every test."""
    for name in ("AICLI_LOG_PATH", "AICLI_MODEL", "AICLI_POLL_INTERVAL",
                 "AICLI_POLL_MAX_ATTEMPTS", "AICLI_ASCII_ONLY", "AICLI_UNICODE"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def factory(tmp_path):
    """
    Empty AiCliTestFactory: no log entries, mock client.

    Example:
        def test_empty_log(factory):
            assert factory.log.replay() == []
    """
    return AiCliTestFactory(tmp_path)


@pytest.fixture
def cli(factory):
    """Real AiCLI wired to the factory's config and mock client."""
    return factory.create_cli()
