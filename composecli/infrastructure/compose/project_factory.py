"""Resolves which compose project an invocation targets."""

import logging
import re
from pathlib import Path
from typing import Callable, List, Optional

from composecli.domain.interfaces.project_factory import ProjectFactory
from composecli.domain.models.context import InvocationContext
from composecli.infrastructure.compose.project import DockerComposeProject

logger = logging.getLogger(__name__)

DEFAULT_COMPOSE_FILES = ("compose.yaml", "compose.yml", "docker-compose.yml", "docker-compose.yaml")


def normalize_project_name(name: str) -> str:
    """Lowercases and strips characters compose does not accept in project names."""
    return re.sub(r"[^a-z0-9_-]", "", name.lower())


class DockerComposeProjectFactory(ProjectFactory):
    """Builds a DockerComposeProject from global flags and settings.

    Compose files come from `--file`, else the configured compose files,
    else the first default file name found in the working directory. The
    project name comes from `--project-name`, else the configured name, else
    the directory holding the first compose file.
    """

    def __init__(
        self,
        docker_binary: str = "docker",
        default_files: Optional[List[str]] = None,
        default_project_name: Optional[str] = None,
        cwd: Callable[[], Path] = Path.cwd,
    ):
        self.docker_binary = docker_binary
        self.default_files = list(default_files or [])
        self.default_project_name = default_project_name
        self.cwd = cwd

    def _compose_files(self, context: InvocationContext) -> List[Path]:
        requested = list(context.global_flags.get("file") or []) or self.default_files
        base = self.cwd()
        if requested:
            files = [Path(f) if Path(f).is_absolute() else base / f for f in requested]
            missing = [str(f) for f in files if not f.is_file()]
            if missing:
                raise FileNotFoundError(f"Compose file not found: {', '.join(missing)}")
            return files
        for candidate in DEFAULT_COMPOSE_FILES:
            if (base / candidate).is_file():
                return [base / candidate]
        raise FileNotFoundError(
            f"Can't find a suitable configuration file in {base}. "
            f"Supported filenames: {', '.join(DEFAULT_COMPOSE_FILES)}"
        )

    def create(self, context: InvocationContext) -> DockerComposeProject:
        files = self._compose_files(context)
        project_dir = files[0].parent
        name = context.get_global_str("project_name") or self.default_project_name or project_dir.name
        name = normalize_project_name(name)
        if not name:
            raise ValueError(f"Invalid project name derived from {project_dir}")

        logger.debug(f"Resolved project '{name}' from {[str(f) for f in files]}")
        return DockerComposeProject(
            name=name,
            files=[str(f) for f in files],
            working_dir=str(project_dir),
            docker_binary=self.docker_binary,
        )
