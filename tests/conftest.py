import pytest
from click.testing import CliRunner

from rstree.messages import MessageCollector


@pytest.fixture()
def cli_runner() -> CliRunner:
    """Provides a reusable Click CLI runner."""
    return CliRunner()


@pytest.fixture()
def collector() -> MessageCollector:
    """Provides a message handler that records diagnostics."""
    return MessageCollector()
