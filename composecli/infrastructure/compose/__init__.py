"""Adapters that drive the `docker compose` command line."""

from composecli.infrastructure.compose.project import DockerComposeProject
from composecli.infrastructure.compose.project_factory import DockerComposeProjectFactory

__all__ = ["DockerComposeProject", "DockerComposeProjectFactory"]
