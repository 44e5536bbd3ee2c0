import pytest
from typer.testing import CliRunner
from unittest.mock import MagicMock

from composecli.domain.interfaces.log_stream import LogStream
from composecli.domain.interfaces.project import Project
from composecli.domain.interfaces.project_factory import ProjectFactory
from composecli.domain.interfaces.user_interface import UserInterface
from composecli.domain.models.context import InvocationContext
from composecli.infrastructure.config.settings import clear_test_config, reset_configuration


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture
def mock_project():
    """A Project whose every operation is a mock, log streams included."""
    project = MagicMock(spec=Project)
    project.open_log_stream.return_value = MagicMock(spec=LogStream)
    return project


@pytest.fixture
def mock_log_stream(mock_project):
    return mock_project.open_log_stream.return_value


@pytest.fixture
def mock_ui():
    return MagicMock(spec=UserInterface)


@pytest.fixture
def mock_factory(mock_project):
    factory = MagicMock(spec=ProjectFactory)
    factory.create.return_value = mock_project
    return factory


@pytest.fixture
def patched_factory(mocker, mock_factory):
    """Replaces the docker compose factory where main.py wires it up."""
    mocker.patch('composecli.main.DockerComposeProjectFactory', return_value=mock_factory)
    return mock_factory


@pytest.fixture(autouse=True)
def isolated_config():
    """Keeps configuration state from leaking between tests."""
    reset_configuration()
    clear_test_config()
    yield
    reset_configuration()
    clear_test_config()


def make_context(command="test", args=(), global_flags=None, **flags):
    """Builds an InvocationContext; flag names with dashes go through **{...}."""
    return InvocationContext(command=command, args=tuple(args), flags=flags, global_flags=global_flags or {})


@pytest.fixture
def context_factory():
    return make_context
