import pytest
from click.testing import CliRunner

from md_highlight.models import BufferTarget


@pytest.fixture()
def cli_runner() -> CliRunner:
    """Provides a reusable Click CLI runner."""
    return CliRunner()


@pytest.fixture()
def target() -> BufferTarget:
    """Provides an in-memory render target."""
    return BufferTarget()
